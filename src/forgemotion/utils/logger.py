from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Optional
from forgemotion.models.enums import LogLevel, LogCategory


# === ANSI COLORS ===
RESET = '\033[0m'
DIM = '\033[2m'

CATEGORY_COLORS = {
    LogCategory.CONFIG: '\033[36m',
    LogCategory.ANIMATION: '\033[93m',
    LogCategory.DISPATCH: '\033[33m',
    LogCategory.POINTER: '\033[94m',
    LogCategory.SCROLL: '\033[96m',
    LogCategory.VISIBILITY: '\033[92m',
    LogCategory.MOTION: '\033[32m',
    LogCategory.FEEDBACK: '\033[34m',
    LogCategory.A11Y: '\033[95m',
    LogCategory.EVENT: '\033[95m',
    LogCategory.RENDER_ENGINE: '\033[35m',
    LogCategory.SYSTEM: '\033[97m',
}

LEVEL_STYLES = {
    LogLevel.DEBUG: ('·', DIM),
    LogLevel.INFO: ('✓', '\033[32m'),
    LogLevel.WARN: ('⚠', '\033[33m'),
    LogLevel.ERROR: ('✗', '\033[31m'),
}

LEVEL_ORDER = (LogLevel.DEBUG, LogLevel.INFO, LogLevel.WARN, LogLevel.ERROR)


@dataclass
class LogRecord:
    """
    One emitted log line, as handed to the broadcaster.

    node_id is set when the line concerns a single animatable node (the
    `node=` keyword, or a logger from for_node()); it is kept out of details.
    """
    timestamp: datetime
    level: LogLevel
    category: LogCategory
    message: str
    node_id: Optional[str] = None
    details: Dict[str, object] = field(default_factory=dict)

    def text(self) -> str:
        """Message with details flattened: 'Message (key: value, ...)'"""
        if not self.details:
            return self.message
        return f"{self.message} ({', '.join(f'{k}: {v}' for k, v in self.details.items())})"

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.name,
            "category": self.category.name,
            "node_id": self.node_id,
            "message": self.text(),
        }


LogBroadcaster = Callable[[LogRecord], None]


# === CORE LOGGER ===
class Logger:
    """
    Category logger with compact tree output

    Format:
    [HH:MM:SS] CATEGORY  sym <node> Message
               ├─ key: value
               └─ key: value

    Example:
    [14:23:45] DISPATCH  ✗ <hero-counter> Animation routine failed, applying end state
               ├─ kind: COUNTER
               └─ error: ValueError: bad target
    """

    def __init__(self, min_level: LogLevel = LogLevel.INFO, use_colors: bool = True):
        self.min_level = min_level
        self.use_colors = use_colors
        self._broadcaster: Optional[LogBroadcaster] = None

    def _should_log(self, level: LogLevel) -> bool:
        return LEVEL_ORDER.index(level) >= LEVEL_ORDER.index(self.min_level)

    def _colorize(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{color}{text}{RESET}"

    def set_broadcaster(self, broadcaster: Optional[LogBroadcaster]) -> None:
        """
        Set a callable that receives a LogRecord for every emitted line.

        Hosts use it to mirror engine logs into their own console; a
        failing broadcaster is dropped so it cannot break the frame loop.
        """
        self._broadcaster = broadcaster

    def log(
        self,
        category: LogCategory,
        message: str,
        level: LogLevel = LogLevel.INFO,
        node: Optional[str] = None,
        **details
    ) -> Optional[LogRecord]:
        """
        Log a structured message

        Args:
            category: Log category (ANIMATION, SCROLL, etc.)
            message: Main message text
            level: Log level (DEBUG, INFO, WARN, ERROR)
            node: Id of the node the line is about
            **details: Key-value pairs shown below the message

        Returns:
            The emitted record, or None when filtered out by level
        """
        if not self._should_log(level):
            return None

        record = LogRecord(datetime.now(), level, category, message, node, details)
        self._print(record)

        if self._broadcaster:
            try:
                self._broadcaster(record)
            except Exception as e:
                self._broadcaster = None
                self._print(LogRecord(
                    datetime.now(), LogLevel.ERROR, LogCategory.SYSTEM,
                    "Log broadcaster failed, detached", details={"error": f"{type(e).__name__}: {e}"},
                ))
        return record

    def _print(self, record: LogRecord) -> None:
        symbol, color = LEVEL_STYLES[record.level]
        cat = self._colorize(record.category.name.ljust(9), CATEGORY_COLORS.get(record.category, ''))
        node = f"<{record.node_id}> " if record.node_id else ""
        print(
            f"{record.timestamp.strftime('[%H:%M:%S]')} {cat} "
            f"{self._colorize(symbol, color)} {node}{self._colorize(record.message, color)}"
        )

        items = list(record.details.items())
        for i, (k, v) in enumerate(items):
            tree = "└─" if i == len(items) - 1 else "├─"
            print(f"{' ' * 11}{self._colorize(tree, DIM)} {k}: {v}")

    # === Level helpers ===
    def debug(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.DEBUG, **kw)
    def info(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.INFO, **kw)
    def warn(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.WARN, **kw)
    def error(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.ERROR, **kw)

    def for_category(self, category: LogCategory) -> 'BoundLogger':
        return BoundLogger(self, category)


class BoundLogger:
    """Logger bound to a category, and optionally to one node"""

    def __init__(self, base: Logger, category: LogCategory, node: Optional[str] = None):
        self._base = base
        self._category = category
        self._node = node

    def log(self, message: str, level: LogLevel = LogLevel.INFO, category: Optional[LogCategory] = None, **kw):
        kw.setdefault("node", self._node)
        return self._base.log(category or self._category, message, level, **kw)

    def debug(self, message: str, **kw): self.log(message, LogLevel.DEBUG, **kw)
    def info(self, message: str, **kw): self.log(message, LogLevel.INFO, **kw)
    def warn(self, message: str, **kw): self.log(message, LogLevel.WARN, **kw)
    def error(self, message: str, **kw): self.log(message, LogLevel.ERROR, **kw)

    def with_category(self, category: LogCategory) -> 'BoundLogger':
        return BoundLogger(self._base, category, self._node)

    def for_node(self, node_id: str) -> 'BoundLogger':
        """Every line from the returned logger carries node_id"""
        return BoundLogger(self._base, self._category, node_id)


# === Global instance helpers ===
_logger = Logger()

def get_logger() -> Logger:
    return _logger

def get_category_logger(category: LogCategory) -> BoundLogger:
    """Returns a logger bound to a specific category"""
    return _logger.for_category(category)

def configure_logger(min_level: LogLevel = LogLevel.INFO, use_colors: bool = True):
    """
    Configure the logger singleton in place.

    Bound loggers created at import time and any broadcaster stay valid.
    """
    _logger.min_level = min_level
    _logger.use_colors = use_colors
