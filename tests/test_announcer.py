"""
Tests for AnnouncementQueue
"""

import pytest

from forgemotion.models.events import EventType
from forgemotion.services.announcer import AnnouncementQueue


@pytest.fixture
def delivered():
    return []


@pytest.fixture
def announcer(scheduler, config, event_bus, delivered):
    def sink(message):
        delivered.append((message, scheduler.now_ms))

    return AnnouncementQueue(scheduler, config.announcer, sink, event_bus)


def test_messages_delivered_in_order_with_spacing(announcer, delivered, scheduler):
    for message in ("Copied to clipboard", "Section loaded", "Form sent"):
        announcer.announce(message)
    assert announcer.pending() == 3

    scheduler.advance(3500)

    assert [m for m, _ in delivered] == ["Copied to clipboard", "Section loaded", "Form sent"]
    times = [t for _, t in delivered]
    for earlier, later in zip(times, times[1:]):
        assert later - earlier >= 1000
    assert announcer.pending() == 0


def test_first_message_of_idle_queue_is_prompt(announcer, delivered, scheduler):
    announcer.announce("Ready")
    scheduler.tick(16)
    assert delivered == [("Ready", 16)]


def test_idle_queue_respects_interval_since_last_delivery(announcer, delivered, scheduler):
    announcer.announce("one")
    scheduler.tick(16)
    scheduler.tick(400)
    announcer.announce("two")

    scheduler.tick(800)
    assert len(delivered) == 1

    scheduler.advance(400)
    assert [m for m, _ in delivered] == ["one", "two"]


def test_failing_sink_does_not_stop_the_queue(scheduler, config, event_bus):
    attempts = []
    events = []
    event_bus.subscribe(EventType.ANNOUNCEMENT_DELIVERED, events.append)

    def flaky(message):
        attempts.append(message)
        if message == "bad":
            raise RuntimeError("screen reader bridge gone")

    queue = AnnouncementQueue(scheduler, config.announcer, flaky, event_bus)
    queue.announce("bad")
    queue.announce("good")
    scheduler.advance(2500)

    assert attempts == ["bad", "good"]
    assert [e.message for e in events] == ["good"]
    assert queue.delivered_count == 1


def test_delivered_messages_are_not_retained(announcer, scheduler):
    for i in range(50):
        announcer.announce(f"message {i}")
    scheduler.advance(60000)

    assert announcer.pending() == 0
    assert announcer.delivered_count == 50
    assert not hasattr(announcer, "delivered")


def test_delivery_published_on_bus(announcer, scheduler, event_bus):
    events = []
    event_bus.subscribe(EventType.ANNOUNCEMENT_DELIVERED, events.append)
    announcer.announce("Saved")
    scheduler.tick(16)

    assert [e.message for e in events] == ["Saved"]


def test_clear_drops_pending(announcer, delivered, scheduler):
    announcer.announce("one")
    announcer.announce("two")
    announcer.clear()
    scheduler.advance(3000)

    assert delivered == []
