"""
Stagger Routine

Animates every pending member of the trigger's group, member i starting
at i * item_delay_ms after the trigger (i = position in the full group).
"""

from typing import List

from forgemotion.animations.base import BaseRoutine
from forgemotion.animations.fade import fade_in
from forgemotion.models.enums import AnimationKind, NodeState
from forgemotion.models.node import AnimatableNode
from forgemotion.models.transition import resolve_easing, TransitionConfig


class StaggerRoutine(BaseRoutine):
    """
    Group reveal.

    Members already RUNNING or DONE (animated by their own trigger, or by an
    earlier group run) are skipped. Each member is marked DONE as its own
    fade finishes; the trigger completes after the last member.
    """

    KIND = AnimationKind.STAGGER

    def prepare(self) -> None:
        group = self.ctx.registry.group_of(self.node)
        if self.node not in group:
            group = [self.node]
        self.members: List[AnimatableNode] = [
            m for m in group if m is self.node or m.state == NodeState.PENDING
        ]
        self.offsets = {m.node_id: group.index(m) for m in self.members}
        self.remaining = len(self.members)

        for member in self.members:
            if member is not self.node:
                self.ctx.mark_running(member)

    def run(self) -> None:
        cfg = self.config.stagger
        transition = TransitionConfig(
            duration_ms=self.node.params.duration_ms or cfg.duration_ms,
            ease_function=resolve_easing(cfg.easing),
        )
        for member in self.members:
            member.style.opacity = 0.0
            member.style.translate_y = cfg.offset_px
            delay = self.offsets[member.node_id] * cfg.item_delay_ms
            self.scheduler.set_timeout(lambda m=member: self._start_member(m, transition), delay)

    def _start_member(self, member: AnimatableNode, transition: TransitionConfig) -> None:
        fade_in(
            self,
            member.style,
            self.config.stagger.offset_px,
            transition,
            lambda: self._member_done(member),
        )

    def _member_done(self, member: AnimatableNode) -> None:
        if member is not self.node:
            self.ctx.mark_done(member, self.instant)
        self.remaining -= 1
        if self.remaining <= 0:
            self.complete(self.instant)

    def release(self) -> None:
        """Land the other members; they were claimed by this run and have no trigger of their own"""
        self.cancel()
        for member in getattr(self, "members", []):
            if member is self.node or member.state == NodeState.DONE:
                continue
            member.style.opacity = 1.0
            member.style.translate_y = 0.0
            self.ctx.mark_done(member, True)

    def apply_end_state(self) -> None:
        for member in getattr(self, "members", [self.node]):
            member.style.opacity = 1.0
            member.style.translate_y = 0.0
            if member is not self.node and member.state != NodeState.DONE:
                self.ctx.mark_done(member, True)
