"""
Node models

AnimatableNode is the engine's handle to a visual element owned by the
hosting page. The engine mutates its VisualState, its text content and its
lifecycle tag; it never creates or destroys nodes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Tuple

from forgemotion.models.enums import AnimationKind, CounterFormat, NodeState

# Non-collapsing space used when a title is split into per-character units
NBSP = " "

# Kind resolution precedence: the first matching marker wins.
KIND_MARKERS: Tuple[Tuple[AnimationKind, Tuple[str, ...]], ...] = (
    (AnimationKind.STAGGER, ("stagger-item",)),
    (AnimationKind.REVEAL, ("reveal-mask",)),
    (AnimationKind.COUNTER, ("counter-animate",)),
    (AnimationKind.TYPEWRITER, ("typewriter", "typewriter-auto")),
    (AnimationKind.TITLE_CHARS, ("title-chars", "split-title")),
    (AnimationKind.FADE, ("animate-on-scroll", "fade-in")),
)


def resolve_kind(classes: Iterable[str]) -> AnimationKind:
    """Map declared classification markers to the most specific animation kind"""
    marks = set(classes)
    for kind, markers in KIND_MARKERS:
        if marks.intersection(markers):
            return kind
    return AnimationKind.DEFAULT


@dataclass(frozen=True)
class Rect:
    """Axis-aligned box in page coordinates"""
    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def center(self) -> Tuple[float, float]:
        return (self.left + self.width / 2, self.top + self.height / 2)

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.left + self.width and self.top <= y <= self.top + self.height

    def distance_to_center(self, x: float, y: float) -> float:
        cx, cy = self.center
        return math.hypot(x - cx, y - cy)


@dataclass
class VisualState:
    """
    Mutable visual properties of a node (CSS style equivalents).

    translate_y is in pixels; translate_y_percent is relative to the
    node's own height (reveal masks slide their content by 100%).
    """
    opacity: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0
    translate_y_percent: float = 0.0
    scale: float = 1.0
    rotate_x: float = 0.0
    rotate_y: float = 0.0
    glow: float = 0.0
    width_percent: Optional[float] = None

    def is_identity_transform(self) -> bool:
        return (
            self.translate_x == 0.0
            and self.translate_y == 0.0
            and self.translate_y_percent == 0.0
            and self.scale == 1.0
            and self.rotate_x == 0.0
            and self.rotate_y == 0.0
        )

    def reset_transform(self) -> None:
        self.translate_x = 0.0
        self.translate_y = 0.0
        self.translate_y_percent = 0.0
        self.scale = 1.0
        self.rotate_x = 0.0
        self.rotate_y = 0.0


@dataclass
class NodeParams:
    """Kind-specific parameters declared on the node (data-* attributes)"""
    target: int = 0
    duration_ms: Optional[int] = None
    speed_ms: Optional[int] = None
    char_delay_ms: Optional[int] = None
    format: Optional[CounterFormat] = None
    group_id: Optional[str] = None
    group_index: int = 0
    parallax_speed: Optional[float] = None
    thresholds: Optional[List[float]] = None


@dataclass
class CharUnit:
    """One visual unit of a split title"""
    char: str
    index: int
    delay_ms: float
    is_space: bool = False
    style: VisualState = field(default_factory=VisualState)

    @property
    def text(self) -> str:
        return " " if self.is_space else self.char


@dataclass(eq=False)
class AnimatableNode:
    """
    Handle to a visual element eligible for animation.

    Identity is node_id; equality is object identity so nodes can be used as
    dict keys while their mutable state changes.
    """
    node_id: str
    classes: FrozenSet[str] = frozenset()
    params: NodeParams = field(default_factory=NodeParams)
    text: str = ""
    box: Rect = field(default_factory=Rect)
    content: Optional["AnimatableNode"] = None

    style: VisualState = field(default_factory=VisualState)
    state: NodeState = NodeState.PENDING
    kind: AnimationKind = field(init=False)
    source_text: str = field(init=False)

    # Structural idempotence flags
    revealed: bool = False
    chars: Optional[List[CharUnit]] = None

    def __post_init__(self):
        self.classes = frozenset(self.classes)
        self.kind = resolve_kind(self.classes)
        self.source_text = self.text

    def has_marker(self, *markers: str) -> bool:
        return any(m in self.classes for m in markers)

    @property
    def is_split(self) -> bool:
        return self.chars is not None

    def visible_text(self) -> str:
        """Text as a reader sees it; split titles are reassembled from units"""
        if self.chars is not None:
            return "".join(unit.text for unit in self.chars)
        return self.text

    def __repr__(self):
        return f"AnimatableNode({self.node_id!r}, {self.kind.name}, {self.state.name})"
