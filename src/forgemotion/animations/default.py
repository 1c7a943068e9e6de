"""Default routine: the node is simply marked animated"""

from forgemotion.animations.base import BaseRoutine
from forgemotion.models.enums import AnimationKind


class DefaultRoutine(BaseRoutine):
    KIND = AnimationKind.DEFAULT

    def run(self) -> None:
        self.apply_end_state()
        self.complete(instant=True)

    def apply_end_state(self) -> None:
        self.node.style.opacity = 1.0
