"""
Motion Preference Gate

Process-wide reduced-motion flag. Single writer (the hosting page's
preference feed through set()), many readers. Every routine reads
`gate.reduced` immediately before producing visible motion.
"""

from typing import Callable, List, Optional

from forgemotion.models.enums import LogCategory
from forgemotion.models.events import MotionPreferenceChangedEvent
from forgemotion.services.event_bus import EventBus
from forgemotion.utils.logger import get_category_logger

log = get_category_logger(LogCategory.MOTION)

PreferenceListener = Callable[[bool], None]


class MotionPreferenceGate:
    """
    Reduced-motion state with change notification.

    - Seeded from the platform preference at startup
    - set() with the current value is a no-op (duplicate change events)
    - Listeners run synchronously in registration order, so the new value is
      visible to every reader before the frame that follows the change
    - Turning reduced motion off never re-animates anything; it only affects
      animations that have not started yet
    """

    def __init__(self, reduced: bool = False, event_bus: Optional[EventBus] = None):
        self._reduced = bool(reduced)
        self._listeners: List[PreferenceListener] = []
        self._event_bus = event_bus
        self.changes = 0

        log.info("Motion preference seeded", reduced=self._reduced)

    @property
    def reduced(self) -> bool:
        return self._reduced

    def __bool__(self) -> bool:
        return self._reduced

    def subscribe(self, listener: PreferenceListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: PreferenceListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def set(self, reduced: bool) -> bool:
        """
        Apply a preference change from the platform.

        Returns:
            True if the value changed, False for a duplicate event
        """
        reduced = bool(reduced)
        if reduced == self._reduced:
            log.debug("Duplicate motion preference event ignored", reduced=reduced)
            return False

        old = self._reduced
        self._reduced = reduced
        self.changes += 1
        log.info("Motion preference changed", reduced=reduced)

        for listener in list(self._listeners):
            try:
                listener(reduced)
            except Exception as e:
                log.error(
                    "Motion preference listener failed",
                    listener=getattr(listener, "__qualname__", repr(listener)),
                    error=f"{type(e).__name__}: {e}",
                )

        if self._event_bus:
            self._event_bus.emit(MotionPreferenceChangedEvent(old, reduced))
        return True
