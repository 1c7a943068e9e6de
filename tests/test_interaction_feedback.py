"""
Tests for InteractionFeedback
"""

import pytest

from forgemotion.models.node import Rect
from forgemotion.services.interaction_feedback import InteractionFeedback


@pytest.fixture
def feedback(scheduler, gate, config):
    return InteractionFeedback(scheduler, gate, config.feedback)


@pytest.fixture
def button(feedback, make_node):
    node = make_node("cta", "btn", box=Rect(0, 0, 120, 40))
    feedback.register(node)
    return node


@pytest.fixture
def card(feedback, make_node):
    node = make_node("card-1", "card", "glow-hover", box=Rect(0, 0, 300, 200))
    feedback.register(node)
    return node


def test_register_requires_a_marker(feedback, make_node):
    assert feedback.register(make_node("plain")) is False
    assert feedback.register(make_node("chip", "ripple")) is True


class TestRipple:
    def test_ripple_geometry(self, feedback, button):
        ripple = feedback.press("cta", 30, 20)

        assert ripple.size == 120
        assert ripple.left == pytest.approx(-30.0)
        assert ripple.top == pytest.approx(-40.0)
        assert ripple.style.scale == 0.0

    def test_ripple_is_removed_when_done(self, feedback, button, scheduler):
        surfaces = []
        feedback.on_ripple(lambda ripple, added: surfaces.append((ripple.target_id, added)))

        feedback.press("cta", 10, 10)
        scheduler.advance(300)
        assert "cta" in feedback.ripples

        scheduler.advance(500)
        assert "cta" not in feedback.ripples
        assert surfaces == [("cta", True), ("cta", False)]

    def test_new_press_replaces_active_ripple(self, feedback, button, scheduler):
        first = feedback.press("cta", 10, 10)
        scheduler.advance(100)
        second = feedback.press("cta", 50, 20)

        assert feedback.ripples["cta"] is second
        assert first.tween.cancelled

        scheduler.advance(800)
        assert feedback.ripples == {}

    def test_press_on_unknown_target(self, feedback):
        assert feedback.press("ghost", 0, 0) is None


class TestPress:
    def test_press_dips_and_returns(self, feedback, button, scheduler):
        feedback.press("cta", 10, 10)
        scheduler.tick(16)
        scheduler.tick(90)
        assert 0.95 <= button.style.scale < 1.0

        feedback.release("cta")
        scheduler.advance(600)
        assert button.style.scale == 1.0

    def test_reduced_motion_suppresses_press(self, feedback, button, gate, scheduler):
        gate.set(True)

        assert feedback.press("cta", 10, 10) is None
        scheduler.advance(100)

        assert button.style.scale == 1.0
        assert feedback.ripples == {}


class TestHover:
    def test_hover_scales_and_glows(self, feedback, card, scheduler):
        feedback.hover("card-1", True)
        scheduler.advance(500)

        assert card.style.scale == pytest.approx(1.05)
        assert card.style.glow == 1.0

    def test_leave_reverses_from_current_value(self, feedback, card, scheduler):
        feedback.hover("card-1", True)
        scheduler.tick(16)
        scheduler.tick(166)
        midway = card.style.scale
        assert 1.0 < midway < 1.05

        feedback.hover("card-1", False)
        scheduler.tick(200)
        assert card.style.scale == pytest.approx(midway)

        scheduler.advance(500)
        assert card.style.scale == 1.0
        assert card.style.glow == 0.0

    def test_repeated_enter_is_ignored(self, feedback, card, scheduler):
        feedback.hover("card-1", True)
        scheduler.advance(100)
        tween = feedback.states["card-1"].hover_tween

        feedback.hover("card-1", True)

        assert feedback.states["card-1"].hover_tween is tween

    def test_glow_is_instant_under_reduced_motion(self, feedback, card, gate, scheduler):
        gate.set(True)

        feedback.hover("card-1", True)

        assert card.style.glow == 1.0
        assert card.style.scale == 1.0
        assert scheduler.pending_frames() == 0

    def test_enabling_reduced_motion_settles_feedback(self, feedback, card, button, gate, scheduler):
        feedback.hover("card-1", True)
        feedback.press("cta", 10, 10)
        scheduler.advance(100)

        gate.set(True)

        assert card.style.scale == 1.0
        assert card.style.glow == 1.0
        assert button.style.scale == 1.0
        assert feedback.ripples == {}
