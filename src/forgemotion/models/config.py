"""
Configuration models

Typed views over the merged YAML configuration. Each section is a dataclass
built with from_dict(); unknown keys are reported back to the caller so the
ConfigManager can log them, invalid values raise ConfigError.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Tuple, Type, TypeVar

from forgemotion.models.enums import CounterFormat
from forgemotion.models.errors import ConfigError
from forgemotion.models.transition import TransitionConfig, resolve_easing

T = TypeVar("T", bound="ConfigSection")


class ConfigSection:
    """Mixin providing dict parsing for config dataclasses"""

    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any] | None) -> Tuple[T, List[str]]:
        """
        Build a section from a YAML mapping.

        Returns:
            (section, unknown_keys)
        """
        data = dict(data or {})
        known = {f.name: f for f in fields(cls)}  # type: ignore[arg-type]
        kwargs = {}
        unknown = []
        for key, value in data.items():
            if key not in known:
                unknown.append(key)
                continue
            kwargs[key] = value
        try:
            section = cls(**kwargs)
        except (TypeError, ValueError) as ex:
            raise ConfigError(f"Invalid {cls.__name__}: {ex}") from ex
        section.validate()
        return section, unknown

    def validate(self) -> None:
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if f.name.endswith("_ms") and isinstance(value, (int, float)) and value < 0:
                raise ConfigError(f"{type(self).__name__}.{f.name} must be >= 0, got {value}")
        easing = getattr(self, "easing", None)
        if easing is not None:
            try:
                resolve_easing(easing)
            except ValueError as ex:
                raise ConfigError(f"{type(self).__name__}.easing: {ex}") from ex

    def transition(self, duration_ms: float, easing: str) -> TransitionConfig:
        try:
            return TransitionConfig(duration_ms=duration_ms, ease_function=resolve_easing(easing))
        except ValueError as ex:
            raise ConfigError(str(ex)) from ex


@dataclass
class VisibilityConfig(ConfigSection):
    thresholds: List[float] = field(default_factory=lambda: [0.1, 0.3, 0.5, 0.7, 0.9])

    def validate(self) -> None:
        if not self.thresholds:
            raise ConfigError("VisibilityConfig.thresholds must not be empty")
        try:
            values = sorted(float(t) for t in self.thresholds)
        except (TypeError, ValueError) as ex:
            raise ConfigError(f"Invalid visibility thresholds: {self.thresholds!r}") from ex
        for t in values:
            if not 0.0 <= t <= 1.0:
                raise ConfigError(f"Visibility threshold out of range: {t}")
        self.thresholds = values


@dataclass
class FadeConfig(ConfigSection):
    duration_ms: float = 800
    offset_px: float = 30
    easing: str = "reveal"


@dataclass
class StaggerConfig(ConfigSection):
    item_delay_ms: float = 100
    duration_ms: float = 600
    offset_px: float = 30
    easing: str = "reveal"


@dataclass
class RevealConfig(ConfigSection):
    duration_ms: float = 800
    easing: str = "reveal"


@dataclass
class CounterConfig(ConfigSection):
    duration_ms: float = 2000
    format: str = CounterFormat.NUMBER.value

    def validate(self) -> None:
        super().validate()
        try:
            CounterFormat(self.format)
        except ValueError:
            raise ConfigError(f"Unknown counter format: {self.format}") from None


@dataclass
class TypewriterConfig(ConfigSection):
    speed_ms: float = 50

    def validate(self) -> None:
        if self.speed_ms <= 0:
            raise ConfigError("TypewriterConfig.speed_ms must be > 0")


@dataclass
class TitleCharsConfig(ConfigSection):
    char_delay_ms: float = 30
    duration_ms: float = 500
    offset_px: float = 20
    easing: str = "reveal"


@dataclass
class PointerConfig(ConfigSection):
    radius: float = 100
    strength: float = 20
    neighbor_radius: float = 300
    neighbor_strength: float = 5
    spring_ms: float = 500
    neighbor_reset_ms: float = 300
    tilt_max_deg: float = 10

    def validate(self) -> None:
        super().validate()
        if self.radius <= 0 or self.neighbor_radius <= 0:
            raise ConfigError("PointerConfig radii must be > 0")


@dataclass
class ScrollConfig(ConfigSection):
    smooth: bool = False
    lerp: float = 0.1
    snap_px: float = 0.5
    scroll_end_ms: float = 150
    velocity_samples: int = 5
    scroll_to_ms: float = 1200
    parallax_speed: float = 0.5
    section_offset_px: float = 100
    section_viewport_ratio: float = 0.5

    def validate(self) -> None:
        super().validate()
        if not 0.0 < self.lerp <= 1.0:
            raise ConfigError(f"ScrollConfig.lerp must be in (0, 1], got {self.lerp}")
        if self.velocity_samples < 1:
            raise ConfigError("ScrollConfig.velocity_samples must be >= 1")
        if not 0.0 <= self.section_viewport_ratio <= 1.0:
            raise ConfigError(
                f"ScrollConfig.section_viewport_ratio must be in [0, 1], got {self.section_viewport_ratio}"
            )


@dataclass
class FeedbackConfig(ConfigSection):
    ripple_ms: float = 600
    press_scale: float = 0.95
    press_ms: float = 150
    hover_scale: float = 1.05
    hover_scale_ms: float = 300
    glow_ms: float = 400


@dataclass
class AnnouncerConfig(ConfigSection):
    min_interval_ms: float = 1000


@dataclass
class EngineConfig:
    """Root configuration object"""
    fps: int = 60
    timing: str = "frame"
    visibility: VisibilityConfig = field(default_factory=VisibilityConfig)
    fade: FadeConfig = field(default_factory=FadeConfig)
    stagger: StaggerConfig = field(default_factory=StaggerConfig)
    reveal: RevealConfig = field(default_factory=RevealConfig)
    counter: CounterConfig = field(default_factory=CounterConfig)
    typewriter: TypewriterConfig = field(default_factory=TypewriterConfig)
    title_chars: TitleCharsConfig = field(default_factory=TitleCharsConfig)
    pointer: PointerConfig = field(default_factory=PointerConfig)
    scroll: ScrollConfig = field(default_factory=ScrollConfig)
    feedback: FeedbackConfig = field(default_factory=FeedbackConfig)
    announcer: AnnouncerConfig = field(default_factory=AnnouncerConfig)

    SECTIONS = {
        "visibility": VisibilityConfig,
        "fade": FadeConfig,
        "stagger": StaggerConfig,
        "reveal": RevealConfig,
        "counter": CounterConfig,
        "typewriter": TypewriterConfig,
        "title_chars": TitleCharsConfig,
        "pointer": PointerConfig,
        "scroll": ScrollConfig,
        "feedback": FeedbackConfig,
        "announcer": AnnouncerConfig,
    }

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> Tuple["EngineConfig", List[str]]:
        """
        Build the root config from the merged YAML mapping.

        Returns:
            (config, unknown_keys) where unknown keys are dotted paths
        """
        data = dict(data or {})
        unknown: List[str] = []
        kwargs: Dict[str, Any] = {}

        engine = data.pop("engine", {}) or {}
        for key, value in engine.items():
            if key == "fps":
                if not isinstance(value, int) or not 1 <= value <= 240:
                    raise ConfigError(f"engine.fps must be an int in 1..240, got {value!r}")
                kwargs["fps"] = value
            elif key == "timing":
                kwargs["timing"] = str(value)
            else:
                unknown.append(f"engine.{key}")

        for name, value in data.items():
            section_cls = cls.SECTIONS.get(name)
            if section_cls is None:
                unknown.append(name)
                continue
            section, section_unknown = section_cls.from_dict(value)
            kwargs[name] = section
            unknown.extend(f"{name}.{k}" for k in section_unknown)

        return cls(**kwargs), unknown
