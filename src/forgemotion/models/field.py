"""
Magnetic field model

A MagneticField is continuously re-derived from the pointer position; it
has no one-shot lifecycle.
"""

import math
from dataclasses import dataclass, field
from typing import Optional, Tuple

Vector = Tuple[float, float]

ZERO: Vector = (0.0, 0.0)


def linear_falloff(distance: float, radius: float) -> float:
    """
    Force as a function of distance: 1 at the center, 0 at and beyond radius.

    Continuous and non-increasing over [0, radius].
    """
    if radius <= 0:
        return 0.0
    return max(0.0, (radius - distance) / radius)


def unit_vector(dx: float, dy: float) -> Vector:
    length = math.hypot(dx, dy)
    if length == 0:
        return ZERO
    return (dx / length, dy / length)


@dataclass
class MagneticField:
    """
    Per-node field record.

    force_vector: displacement caused by the pointer acting on this node
    neighbor_offset: displacement induced by other active fields nearby
    """
    node_id: str
    center: Vector
    radius: float
    strength: float
    force: float = 0.0
    force_vector: Vector = ZERO
    neighbor_offset: Vector = ZERO
    active: bool = False
    last_pointer: Optional[Vector] = field(default=None, repr=False)

    @property
    def translation(self) -> Vector:
        return (
            self.force_vector[0] + self.neighbor_offset[0],
            self.force_vector[1] + self.neighbor_offset[1],
        )

    def distance_to(self, x: float, y: float) -> float:
        return math.hypot(x - self.center[0], y - self.center[1])
