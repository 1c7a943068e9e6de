"""
Per-kind animation routines.

Each routine is a one-shot animation for a single trigger; the dispatcher
picks the class from ROUTINES by the node's resolved AnimationKind.
"""

from typing import Dict, Type

from forgemotion.animations.base import BaseRoutine, RoutineContext
from forgemotion.animations.counter import CounterRoutine, format_counter
from forgemotion.animations.default import DefaultRoutine
from forgemotion.animations.fade import FadeRoutine
from forgemotion.animations.reveal import RevealRoutine
from forgemotion.animations.stagger import StaggerRoutine
from forgemotion.animations.title_chars import TitleCharsRoutine, split_chars
from forgemotion.animations.typewriter import TypewriterRoutine
from forgemotion.models.enums import AnimationKind


def build_routine_registry() -> Dict[AnimationKind, Type[BaseRoutine]]:
    routines = [
        FadeRoutine,
        StaggerRoutine,
        RevealRoutine,
        CounterRoutine,
        TypewriterRoutine,
        TitleCharsRoutine,
        DefaultRoutine,
    ]
    return {cls.KIND: cls for cls in routines}


ROUTINES = build_routine_registry()

__all__ = [
    "BaseRoutine",
    "RoutineContext",
    "FadeRoutine",
    "StaggerRoutine",
    "RevealRoutine",
    "CounterRoutine",
    "TypewriterRoutine",
    "TitleCharsRoutine",
    "DefaultRoutine",
    "ROUTINES",
    "build_routine_registry",
    "format_counter",
    "split_chars",
]
