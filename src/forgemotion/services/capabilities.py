"""
Timing capabilities

Interpolation is an injected strategy selected once at startup:

- FrameTimingCapability: frame-by-frame tweens on the scheduler (default)
- InstantTimingCapability: applies end values synchronously, the reduced
  feature set used when a preferred capability cannot be loaded

CapabilityLoader resolves a configured name to a capability and falls back
to the instant strategy instead of failing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from forgemotion.engine.tween import Scheduler, Tween, Values
from forgemotion.models.enums import LogCategory
from forgemotion.models.errors import CapabilityUnavailableError
from forgemotion.models.transition import TransitionConfig
from forgemotion.utils.logger import get_category_logger

log = get_category_logger(LogCategory.SYSTEM)


class TimingCapability(ABC):
    """Strategy interface for animating a set of numeric properties"""

    name: str = "abstract"

    @abstractmethod
    def animate(
        self,
        scheduler: Scheduler,
        start: Values,
        end: Values,
        config: TransitionConfig,
        on_update: Callable[[Values], None],
        on_complete: Optional[Callable[[], None]] = None,
    ) -> Tween:
        """Start animating and return the running (or already finished) tween"""


class FrameTimingCapability(TimingCapability):
    name = "frame"

    def animate(self, scheduler, start, end, config, on_update, on_complete=None) -> Tween:
        return Tween(scheduler, start, end, config, on_update, on_complete).start()


class InstantTimingCapability(TimingCapability):
    """CSS-only fallback: every transition lands on its end state immediately"""

    name = "instant"

    def animate(self, scheduler, start, end, config, on_update, on_complete=None) -> Tween:
        tween = Tween(scheduler, start, end, config, on_update, on_complete)
        tween.finish()
        return tween


CapabilityFactory = Callable[[], TimingCapability]


class CapabilityLoader:
    """
    Resolves timing capabilities by name.

    Example:
        loader = CapabilityLoader()
        loader.register("physics", load_physics_helper)
        capability = loader.load("physics")   # instant fallback if it raises
    """

    def __init__(self):
        self._factories: Dict[str, CapabilityFactory] = {
            FrameTimingCapability.name: FrameTimingCapability,
            InstantTimingCapability.name: InstantTimingCapability,
        }

    def register(self, name: str, factory: CapabilityFactory) -> None:
        self._factories[name] = factory

    def available(self) -> list:
        return sorted(self._factories)

    def load(self, name: str) -> TimingCapability:
        """
        Load the named capability.

        Falls back to InstantTimingCapability when the name is unknown or its
        factory raises, so the engine always ends up with a working strategy.
        """
        factory = self._factories.get(name)
        try:
            if factory is None:
                raise CapabilityUnavailableError(f"No timing capability named {name!r}")
            capability = factory()
        except Exception as ex:
            log.warn(
                "Timing capability unavailable, using instant transitions",
                requested=name,
                error=f"{type(ex).__name__}: {ex}",
            )
            return InstantTimingCapability()

        log.info("Timing capability loaded", name=capability.name)
        return capability
