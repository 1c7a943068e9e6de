"""
Reveal Routine

Mask reveal: the node's inner content slides up from 100% to rest while
the mask itself stays put.
"""

from forgemotion.animations.base import BaseRoutine
from forgemotion.models.enums import AnimationKind, LogCategory
from forgemotion.utils.logger import get_category_logger

log = get_category_logger(LogCategory.ANIMATION)


class RevealRoutine(BaseRoutine):
    """
    Structurally guarded by node.revealed, independent of lifecycle state:
    content that was already revealed is never slid in a second time.
    A mask without content completes immediately.
    """

    KIND = AnimationKind.REVEAL

    def run(self) -> None:
        content = self.node.content
        if content is None or self.node.revealed:
            if content is None:
                log.debug("Reveal mask has no content", node=self.node.node_id)
            self.apply_end_state()
            self.complete(instant=True)
            return

        cfg = self.config.reveal
        self.node.revealed = True
        content.style.translate_y_percent = 100.0

        def apply(values):
            content.style.translate_y_percent = values["y"]

        self.animate(
            {"y": 100.0},
            {"y": 0.0},
            cfg.transition(self.node.params.duration_ms or cfg.duration_ms, cfg.easing),
            apply,
            lambda: self.complete(self.instant),
        )

    def apply_end_state(self) -> None:
        self.node.style.opacity = 1.0
        if self.node.content is not None:
            self.node.content.style.translate_y_percent = 0.0
            self.node.revealed = True
