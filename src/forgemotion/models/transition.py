"""
Transition Models

Timing configuration and easing curves shared by every routine that
interpolates a visual property: reveal animations, pointer springs,
hover feedback and programmatic scrolling.
"""

import math
from typing import Callable, Optional

EaseFunction = Callable[[float], float]


class TransitionConfig:
    """
    Configuration for a single property transition

    Attributes:
        duration_ms: Total transition duration in milliseconds
        ease_function: Easing curve (t: 0.0-1.0) → (progress: 0.0-1.0, may overshoot)
        delay_ms: Delay between the transition being started and the first
                  interpolated value being applied

    Examples:
        # Scroll-reveal fade
        fade = TransitionConfig(duration_ms=800, ease_function=EASE_OUT_QUAD_BEZIER)

        # Spring back on pointer leave
        spring = TransitionConfig(duration_ms=500, ease_function=ease_out_back)
    """

    def __init__(
        self,
        duration_ms: float = 300,
        ease_function: Optional[EaseFunction] = None,
        delay_ms: float = 0,
    ):
        self.duration_ms = max(0.0, float(duration_ms))
        self.delay_ms = max(0.0, float(delay_ms))
        self.ease_function = ease_function or ease_linear

    def with_delay(self, delay_ms: float) -> "TransitionConfig":
        return TransitionConfig(self.duration_ms, self.ease_function, delay_ms)

    def __repr__(self):
        name = getattr(self.ease_function, "__name__", "ease")
        return f"TransitionConfig({self.duration_ms:g}ms, {name}, delay={self.delay_ms:g}ms)"


def clamp01(t: float) -> float:
    return 0.0 if t < 0.0 else 1.0 if t > 1.0 else t


# === Easing Functions ===

def ease_linear(t: float) -> float:
    """
    Linear easing (constant speed)

    Args:
        t: Progress (0.0 = start, 1.0 = end)

    Returns:
        Eased progress
    """
    return t


def ease_in_quad(t: float) -> float:
    """Quadratic ease-in (slow start → fast end)"""
    return t * t


def ease_out_quad(t: float) -> float:
    """Quadratic ease-out (fast start → slow end)"""
    return 1 - (1 - t) * (1 - t)


def ease_in_out_quad(t: float) -> float:
    """Quadratic ease-in-out (slow start → fast middle → slow end)"""
    return 2 * t * t if t < 0.5 else 1 - (-2 * t + 2) ** 2 / 2


def ease_out_cubic(t: float) -> float:
    """Cubic ease-out (very slow end). Used by the numeric counter."""
    return 1 - (1 - t) ** 3


def ease_in_out_cubic(t: float) -> float:
    """Cubic ease-in-out (very smooth acceleration/deceleration)"""
    return 4 * t ** 3 if t < 0.5 else 1 - (-2 * t + 2) ** 3 / 2


def ease_out_back(t: float, overshoot: float = 1.70158) -> float:
    """
    Ease-out with overshoot (spring-like settle).

    Passes 1.0 shortly before the end and comes back, so a node returning
    to rest visibly springs past the identity transform before settling.
    """
    c3 = overshoot + 1
    return 1 + c3 * (t - 1) ** 3 + overshoot * (t - 1) ** 2


def ease_out_expo_scroll(t: float) -> float:
    """Exponential ease used for programmatic scrolling: min(1, 1.001 - 2^(-10t))"""
    return min(1.0, 1.001 - math.pow(2, -10 * t))


def cubic_bezier(x1: float, y1: float, x2: float, y2: float) -> EaseFunction:
    """
    Build an easing function equivalent to CSS cubic-bezier(x1, y1, x2, y2).

    Solves x(s) = t for the curve parameter s with Newton iterations and
    falls back to bisection when the derivative is too flat.
    """
    cx = 3 * x1
    bx = 3 * (x2 - x1) - cx
    ax = 1 - cx - bx
    cy = 3 * y1
    by = 3 * (y2 - y1) - cy
    ay = 1 - cy - by

    def sample_x(s: float) -> float:
        return ((ax * s + bx) * s + cx) * s

    def sample_y(s: float) -> float:
        return ((ay * s + by) * s + cy) * s

    def slope_x(s: float) -> float:
        return (3 * ax * s + 2 * bx) * s + cx

    def solve(x: float) -> float:
        s = x
        for _ in range(8):
            err = sample_x(s) - x
            if abs(err) < 1e-6:
                return s
            d = slope_x(s)
            if abs(d) < 1e-6:
                break
            s -= err / d

        lo, hi = 0.0, 1.0
        s = x
        while lo < hi:
            v = sample_x(s)
            if abs(v - x) < 1e-6:
                return s
            if x > v:
                lo = s
            else:
                hi = s
            if hi - lo < 1e-7:
                break
            s = (lo + hi) / 2
        return s

    def ease(t: float) -> float:
        if t <= 0.0:
            return 0.0
        if t >= 1.0:
            return 1.0
        return sample_y(solve(t))

    ease.__name__ = f"cubic_bezier({x1}, {y1}, {x2}, {y2})"
    return ease


# cubic-bezier(0.25, 0.46, 0.45, 0.94): the site-wide reveal curve
EASE_OUT_QUAD_BEZIER = cubic_bezier(0.25, 0.46, 0.45, 0.94)

EASINGS = {
    "linear": ease_linear,
    "ease-in": ease_in_quad,
    "ease-out": ease_out_quad,
    "ease-in-out": ease_in_out_quad,
    "ease-out-cubic": ease_out_cubic,
    "ease-in-out-cubic": ease_in_out_cubic,
    "ease-out-back": ease_out_back,
    "ease-out-expo": ease_out_expo_scroll,
    "reveal": EASE_OUT_QUAD_BEZIER,
}


def resolve_easing(name: str) -> EaseFunction:
    """Look up an easing curve by its configuration name"""
    try:
        return EASINGS[name]
    except KeyError:
        raise ValueError(f"Unknown easing: {name}") from None
