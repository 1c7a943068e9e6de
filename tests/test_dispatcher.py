"""
Tests for AnimationDispatcher

Idempotence, lifecycle transitions, failure containment and reduced motion.
"""

import pytest

from forgemotion.animations.fade import FadeRoutine
from forgemotion.models.enums import AnimationKind, NodeState
from forgemotion.models.events import AnimationFailedEvent, AnimationFinishedEvent, EventType
from forgemotion.models.errors import UnknownNodeError


@pytest.fixture
def finished(event_bus):
    events = []
    event_bus.subscribe(EventType.ANIMATION_FINISHED, events.append)
    return events


def test_dispatch_runs_routine_once(dispatcher, registry, make_node, scheduler, finished):
    node = make_node("hero", "animate-on-scroll")
    registry.add(node)

    assert dispatcher.dispatch(node) is True
    assert node.state == NodeState.RUNNING
    assert dispatcher.dispatch(node) is False

    scheduler.advance(1000)

    assert node.state == NodeState.DONE
    assert dispatcher.dispatch(node) is False
    assert dispatcher.run_counts["hero"] == 1
    assert [e.node_id for e in finished] == ["hero"]
    assert isinstance(finished[0], AnimationFinishedEvent)
    assert finished[0].instant is False


def test_fade_end_state(dispatcher, registry, make_node, scheduler):
    node = make_node("hero", "fade-in")
    registry.add(node)
    dispatcher.dispatch(node)
    scheduler.tick(16)
    assert node.style.opacity < 1.0
    assert node.style.translate_y > 0.0

    scheduler.advance(1000)
    assert node.style.opacity == 1.0
    assert node.style.translate_y == 0.0


def test_unknown_node_is_noop(dispatcher):
    assert dispatcher.dispatch_id("missing") is False


def test_registry_lookups(registry, make_node):
    button = make_node("cta", "btn", "magnetic")
    registry.add(button)
    registry.add(make_node("about", "animate-on-scroll"))

    assert registry.require("cta") is button
    assert registry.with_marker("magnetic", "tilt") == [button]
    with pytest.raises(UnknownNodeError) as info:
        registry.require("missing")
    assert info.value.node_id == "missing"


def test_default_kind_completes_immediately(dispatcher, registry, make_node):
    node = make_node("plain", "card")
    node.style.opacity = 0.0
    registry.add(node)

    dispatcher.dispatch(node)

    assert node.state == NodeState.DONE
    assert node.style.opacity == 1.0


def test_finished_listener_receives_instant_flag(dispatcher, registry, make_node):
    seen = []
    dispatcher.on_finished(lambda node, instant: seen.append((node.node_id, instant)))
    node = make_node("plain")
    registry.add(node)

    dispatcher.dispatch(node)

    assert seen == [("plain", True)]


class TestReducedMotion:
    def test_reduced_motion_applies_end_state_synchronously(self, dispatcher, registry, make_node, gate, scheduler):
        gate.set(True)
        node = make_node("hero", "animate-on-scroll")
        registry.add(node)

        dispatcher.dispatch(node)

        assert node.state == NodeState.DONE
        assert node.style.opacity == 1.0
        assert node.style.translate_y == 0.0
        assert scheduler.pending_frames() == 0

    def test_enabling_reduced_motion_snaps_running_routines(self, dispatcher, registry, make_node, gate, scheduler, finished):
        node = make_node("stat", "counter-animate", target=1000)
        registry.add(node)
        dispatcher.dispatch(node)
        scheduler.advance(500)
        assert node.text != "1,000"

        gate.set(True)

        assert node.text == "1,000"
        assert node.state == NodeState.DONE
        assert finished[-1].instant is True
        assert scheduler.pending_frames() == 0
        assert not dispatcher.is_active("stat")

    def test_disabling_reduced_motion_never_reanimates(self, dispatcher, registry, make_node, gate, scheduler):
        gate.set(True)
        node = make_node("hero", "animate-on-scroll")
        registry.add(node)
        dispatcher.dispatch(node)

        gate.set(False)
        scheduler.advance(100)

        assert node.style.opacity == 1.0
        assert dispatcher.run_counts["hero"] == 1


class BrokenAtStart(FadeRoutine):
    def run(self):
        raise RuntimeError("routine exploded")


class BrokenInFrame(FadeRoutine):
    def run(self):
        self.node.style.opacity = 0.0

        def step(now_ms):
            raise RuntimeError("frame step exploded")

        self.scheduler.request_frame(step)


class BrokenEverywhere(FadeRoutine):
    def run(self):
        raise RuntimeError("routine exploded")

    def apply_end_state(self):
        raise RuntimeError("end state exploded")


class TestFailures:
    """A failing routine is contained: end state applied, node DONE, others unaffected"""

    def test_failure_at_start(self, dispatcher, registry, make_node, scheduler, event_bus):
        failed = []
        event_bus.subscribe(EventType.ANIMATION_FAILED, failed.append)
        dispatcher.routines[AnimationKind.FADE] = BrokenAtStart

        node = make_node("hero", "animate-on-scroll")
        other = make_node("stat", "counter-animate", target=10)
        registry.add(node)
        registry.add(other)
        node.style.opacity = 0.0

        dispatcher.dispatch(node)
        dispatcher.dispatch(other)
        scheduler.advance(2500)

        assert node.state == NodeState.DONE
        assert node.style.opacity == 1.0
        assert other.state == NodeState.DONE
        assert other.text == "10"
        assert dispatcher.failures == 1
        assert len(failed) == 1
        assert isinstance(failed[0], AnimationFailedEvent)
        assert "routine exploded" in failed[0].error

    def test_failure_in_frame_step(self, dispatcher, registry, make_node, scheduler, finished):
        dispatcher.routines[AnimationKind.FADE] = BrokenInFrame
        node = make_node("hero", "animate-on-scroll")
        registry.add(node)

        dispatcher.dispatch(node)
        scheduler.tick(16)

        assert node.state == NodeState.DONE
        assert node.style.opacity == 1.0
        assert finished[-1].failed is True
        assert scheduler.callback_errors == 0

    def test_generic_end_state_when_end_state_fails(self, dispatcher, registry, make_node):
        dispatcher.routines[AnimationKind.FADE] = BrokenEverywhere
        node = make_node("hero", "animate-on-scroll")
        node.style.opacity = 0.0
        node.style.translate_y = 30.0
        registry.add(node)

        dispatcher.dispatch(node)

        assert node.state == NodeState.DONE
        assert node.style.opacity == 1.0
        assert node.style.translate_y == 0.0


def test_cancel_stops_scheduled_work(dispatcher, registry, make_node, scheduler):
    node = make_node("hero", "animate-on-scroll")
    registry.add(node)
    dispatcher.dispatch(node)
    scheduler.tick(16)

    dispatcher.cancel("hero")

    assert scheduler.pending_frames() == 0
    assert not dispatcher.is_active("hero")
