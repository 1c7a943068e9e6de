"""
Models package - Data models for the motion engine
"""

from .enums import (
    AnimationKind,
    NodeState,
    CounterFormat,
    PointerKind,
    ScrollDirection,
    FeedbackEffect,
    FramePhase,
    LogLevel,
    LogCategory,
)
from .node import AnimatableNode, NodeParams, VisualState, Rect, CharUnit, resolve_kind
from .field import MagneticField, linear_falloff
from .scroll import ScrollFrame
from .transition import TransitionConfig
from .errors import MotionError, UnknownNodeError, CapabilityUnavailableError, ConfigError

__all__ = [
    'AnimationKind',
    'NodeState',
    'CounterFormat',
    'PointerKind',
    'ScrollDirection',
    'FeedbackEffect',
    'FramePhase',
    'LogLevel',
    'LogCategory',
    'AnimatableNode',
    'NodeParams',
    'VisualState',
    'Rect',
    'CharUnit',
    'resolve_kind',
    'MagneticField',
    'linear_falloff',
    'ScrollFrame',
    'TransitionConfig',
    'MotionError',
    'UnknownNodeError',
    'CapabilityUnavailableError',
    'ConfigError',
]
