"""
Tests for the event bus

Event creation, publishing, subscription, middleware, filtering and the
synchronous emit path used from frame callbacks.
"""

import asyncio

from forgemotion.models.enums import AnimationKind
from forgemotion.models.events import (
    AnimationFinishedEvent,
    AnimationStartedEvent,
    EventSource,
    EventType,
    HoverChangedEvent,
    PressStartedEvent,
)
from forgemotion.services.event_bus import EventBus


async def test_basic_pub_sub():
    """Basic publish/subscribe"""
    bus = EventBus()
    received = []

    async def handler(event):
        received.append(event)

    bus.subscribe(EventType.ANIMATION_FINISHED, handler)
    await bus.publish(AnimationFinishedEvent("hero", AnimationKind.FADE))

    assert len(received) == 1
    assert received[0].node_id == "hero"
    assert received[0].source == EventSource.DISPATCHER


async def test_filtering():
    """Per-handler filtering"""
    bus = EventBus()
    hero_events = []
    stat_events = []

    async def hero_handler(event):
        hero_events.append(event)

    async def stat_handler(event):
        stat_events.append(event)

    bus.subscribe(
        EventType.ANIMATION_STARTED,
        hero_handler,
        filter_fn=lambda e: e.node_id.startswith("hero-")
    )
    bus.subscribe(
        EventType.ANIMATION_STARTED,
        stat_handler,
        filter_fn=lambda e: e.kind == AnimationKind.COUNTER
    )

    await bus.publish(AnimationStartedEvent("hero-title", AnimationKind.TITLE_CHARS))
    await bus.publish(AnimationStartedEvent("stat-clients", AnimationKind.COUNTER))
    await bus.publish(AnimationStartedEvent("hero-tagline", AnimationKind.TYPEWRITER))

    assert len(hero_events) == 2
    assert len(stat_events) == 1


async def test_middleware():
    """Middleware blocking"""
    bus = EventBus()
    received = []

    # Middleware that blocks hover events on cards
    def block_cards(event):
        if event.target_id.startswith("card"):
            return None
        return event

    bus.add_middleware(block_cards)

    async def handler(event):
        received.append(event)

    bus.subscribe(EventType.HOVER_CHANGED, handler)

    await bus.publish(HoverChangedEvent("cta", True))
    await bus.publish(HoverChangedEvent("card-1", True))  # Should be blocked

    assert len(received) == 1
    assert received[0].target_id == "cta"
    assert len(bus.get_event_history()) == 1


async def test_priority():
    """Priority-based handler execution"""
    bus = EventBus()
    execution_order = []

    async def low_priority_handler(event):
        execution_order.append("low")

    async def high_priority_handler(event):
        execution_order.append("high")

    async def medium_priority_handler(event):
        execution_order.append("medium")

    bus.subscribe(EventType.PRESS_STARTED, low_priority_handler, priority=0)
    bus.subscribe(EventType.PRESS_STARTED, high_priority_handler, priority=100)
    bus.subscribe(EventType.PRESS_STARTED, medium_priority_handler, priority=50)

    await bus.publish(PressStartedEvent("cta", 10, 10))

    assert execution_order == ["high", "medium", "low"]


async def test_failing_handler_does_not_stop_others():
    bus = EventBus()
    received = []

    async def broken(event):
        raise RuntimeError("handler failed")

    async def handler(event):
        received.append(event)

    bus.subscribe(EventType.PRESS_STARTED, broken, priority=10)
    bus.subscribe(EventType.PRESS_STARTED, handler)

    await bus.publish(PressStartedEvent("cta", 0, 0))

    assert len(received) == 1


def test_emit_runs_sync_handlers_inline():
    bus = EventBus()
    received = []

    def handler(event):
        received.append(event.node_id)

    def broken(event):
        raise RuntimeError("handler failed")

    bus.subscribe(EventType.ANIMATION_FINISHED, broken)
    bus.subscribe(EventType.ANIMATION_FINISHED, handler)
    bus.emit(AnimationFinishedEvent("hero", AnimationKind.FADE))

    assert received == ["hero"]


def test_emit_skips_async_handlers_without_loop():
    bus = EventBus()
    received = []

    async def handler(event):
        received.append(event)

    bus.subscribe(EventType.ANIMATION_FINISHED, handler)
    bus.emit(AnimationFinishedEvent("hero", AnimationKind.FADE))

    assert received == []


async def test_emit_schedules_async_handlers_on_running_loop():
    bus = EventBus()
    received = []

    async def handler(event):
        received.append(event.node_id)

    bus.subscribe(EventType.ANIMATION_FINISHED, handler)
    bus.emit(AnimationFinishedEvent("hero", AnimationKind.FADE))
    await asyncio.sleep(0)

    assert received == ["hero"]


async def test_emit_reports_async_handler_failures(capsys):
    bus = EventBus()

    async def broken(event):
        raise RuntimeError("handler failed")

    bus.subscribe(EventType.ANIMATION_FINISHED, broken)
    bus.emit(AnimationFinishedEvent("hero", AnimationKind.FADE))
    assert bus.pending_tasks() == 1

    await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert bus.pending_tasks() == 0
    out = capsys.readouterr().out
    assert "Event handler failed: broken for ANIMATION_FINISHED" in out
    assert "RuntimeError: handler failed" in out


def test_unsubscribe():
    bus = EventBus()
    received = []
    bus.subscribe(EventType.HOVER_CHANGED, received.append)

    assert bus.unsubscribe(EventType.HOVER_CHANGED, received.append) is True
    assert bus.unsubscribe(EventType.HOVER_CHANGED, received.append) is False

    bus.emit(HoverChangedEvent("cta", True))
    assert received == []


def test_history_is_bounded():
    bus = EventBus()
    for i in range(150):
        bus.emit(PressStartedEvent(f"btn-{i}", 0, 0))

    history = bus.get_event_history(limit=200)
    assert len(history) == 100
    assert history[-1].target_id == "btn-149"

    bus.clear_history()
    assert bus.get_event_history() == []


def test_event_to_data_excludes_metadata():
    data = PressStartedEvent("cta", 3, 4).to_data()
    assert data == {"target_id": "cta", "x": 3, "y": 4}
