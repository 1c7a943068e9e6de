"""
Announcement Queue

Screen-reader announcements for state changes the engine produces
("Copied to clipboard", "Section loaded"). Messages are delivered in order,
at most one per min_interval_ms, so consecutive announcements are not
swallowed by assistive technology.
"""

from collections import deque
from typing import Callable, Deque, Optional

from forgemotion.engine.frame_scheduler import FrameScheduler
from forgemotion.models.config import AnnouncerConfig
from forgemotion.models.enums import LogCategory
from forgemotion.models.events import AnnouncementDeliveredEvent
from forgemotion.services.event_bus import EventBus
from forgemotion.utils.logger import get_category_logger

log = get_category_logger(LogCategory.A11Y)

AnnouncementSink = Callable[[str], None]


def log_sink(message: str) -> None:
    log.info("Announcement", text=message)


class AnnouncementQueue:
    """
    FIFO of messages with a single drain loop on the scheduler.

    The first message of an idle queue is delivered on the next timer pass;
    the drain timer then re-arms itself every min_interval_ms while
    messages remain. Delivered messages are discarded.
    """

    def __init__(
        self,
        scheduler: FrameScheduler,
        config: Optional[AnnouncerConfig] = None,
        sink: Optional[AnnouncementSink] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.scheduler = scheduler
        self.config = config or AnnouncerConfig()
        self.sink = sink or log_sink
        self.event_bus = event_bus

        self._queue: Deque[str] = deque()
        self._timer: Optional[int] = None
        self._last_delivery: Optional[float] = None
        self.delivered_count = 0

    def announce(self, message: str) -> None:
        self._queue.append(message)
        if self._timer is None:
            self._schedule()

    def pending(self) -> int:
        return len(self._queue)

    def clear(self) -> None:
        self._queue.clear()
        self.scheduler.clear_timer(self._timer)
        self._timer = None

    def _schedule(self) -> None:
        delay = 0.0
        if self._last_delivery is not None:
            elapsed = self.scheduler.now_ms - self._last_delivery
            delay = max(0.0, self.config.min_interval_ms - elapsed)
        self._timer = self.scheduler.set_timeout(self._drain, delay)

    def _drain(self) -> None:
        self._timer = None
        if not self._queue:
            return
        message = self._queue.popleft()
        self._last_delivery = self.scheduler.now_ms
        try:
            self.sink(message)
        except Exception as e:
            log.error("Announcement sink failed", text=message, error=f"{type(e).__name__}: {e}")
        else:
            self.delivered_count += 1
            if self.event_bus:
                self.event_bus.emit(AnnouncementDeliveredEvent(message))

        if self._queue:
            self._schedule()
