"""
forge-motion - frame-driven animation orchestration for the Forge EC site

Decides which animation runs for a node and when, runs it exactly once,
and keeps every motion effect behind the reduced-motion preference.
"""

from forgemotion.engine.motion_engine import MotionEngine
from forgemotion.models import AnimatableNode, NodeParams, Rect, AnimationKind, NodeState, PointerKind

__version__ = "1.0.0"

__all__ = [
    "MotionEngine",
    "AnimatableNode",
    "NodeParams",
    "Rect",
    "AnimationKind",
    "NodeState",
    "PointerKind",
]
