"""
Engine core

- frame_scheduler: frame/timer scheduling and the asyncio render loop
- tween: frame-driven property interpolation
- node_registry: registered nodes and stagger groups
- dispatcher: node → per-kind routine, exactly once
- motion_engine: facade wiring all components
"""

from .frame_scheduler import FrameScheduler, SchedulerScope
from .tween import Tween
from .node_registry import NodeRegistry

__all__ = [
    "FrameScheduler",
    "SchedulerScope",
    "Tween",
    "NodeRegistry",
]
