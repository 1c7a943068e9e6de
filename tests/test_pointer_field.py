"""
Tests for PointerFieldEngine
"""

import pytest

from forgemotion.models.node import Rect
from forgemotion.services.pointer_field import PointerFieldEngine, SpatialGrid


@pytest.fixture
def field_engine(scheduler, gate, config):
    return PointerFieldEngine(scheduler, gate, config.pointer)


@pytest.fixture
def magnets(field_engine, make_node):
    """Two magnetic nodes 200px apart, centers at (50, 50) and (250, 50)"""
    left = make_node("left", "magnetic", box=Rect(0, 0, 100, 100))
    right = make_node("right", "magnetic-hover", box=Rect(200, 0, 100, 100))
    field_engine.register(left)
    field_engine.register(right)
    return left, right


def test_force_follows_linear_falloff(field_engine, magnets, scheduler):
    left, _ = magnets
    field_engine.on_pointer_move(100, 50)   # 50px from center: force 0.5
    scheduler.tick(16)

    assert field_engine.fields["left"].force == pytest.approx(0.5)
    assert left.style.translate_x == pytest.approx(10.0)    # 0.5 * 20px toward the pointer
    assert left.style.translate_y == pytest.approx(0.0)


def test_neighbor_is_pulled_toward_source(field_engine, magnets, scheduler):
    _, right = magnets
    field_engine.on_pointer_move(100, 50)
    scheduler.tick(16)

    # source force 0.5 * neighbor falloff (300 - 200) / 300 * 5px, toward the left node
    assert right.style.translate_x == pytest.approx(-0.5 * (1 / 3) * 5)
    assert not field_engine.fields["right"].active


def test_pointer_outside_radius_has_no_force(field_engine, magnets, scheduler):
    left, right = magnets
    field_engine.on_pointer_move(150, 400)
    scheduler.tick(16)

    assert left.style.is_identity_transform()
    assert right.style.is_identity_transform()


def test_moves_are_coalesced_per_frame(field_engine, magnets, scheduler):
    left, _ = magnets
    for x in range(60, 101):
        field_engine.on_pointer_move(x, 50)
    assert left.style.translate_x == 0.0

    scheduler.tick(16)

    assert field_engine.samples_received == 41
    assert field_engine.frames_applied == 1
    assert left.style.translate_x == pytest.approx(10.0)


def test_leave_springs_back_with_overshoot(field_engine, magnets, scheduler):
    left, right = magnets
    field_engine.on_pointer_move(100, 50)
    scheduler.tick(16)

    field_engine.on_pointer_leave()
    trace = []
    for _ in range(40):
        scheduler.tick(scheduler.now_ms + 16)
        trace.append(left.style.translate_x)

    assert min(trace) < 0.0    # back ease-out passes the rest position
    assert left.style.translate_x == 0.0
    assert right.style.translate_x == 0.0
    assert not field_engine.fields["left"].active


def test_moving_out_of_radius_releases_field(field_engine, magnets, scheduler):
    left, _ = magnets
    field_engine.on_pointer_move(100, 50)
    scheduler.tick(16)
    field_engine.on_pointer_move(100, 500)
    scheduler.advance(700)

    assert left.style.translate_x == 0.0
    assert not field_engine.fields["left"].active


def test_reduced_motion_keeps_identity(field_engine, magnets, scheduler, gate):
    left, right = magnets
    field_engine.on_pointer_move(100, 50)
    scheduler.tick(16)
    assert left.style.translate_x != 0.0

    gate.set(True)
    assert left.style.is_identity_transform()

    field_engine.on_pointer_move(90, 50)
    scheduler.tick(32)
    assert left.style.is_identity_transform()
    assert right.style.is_identity_transform()
    assert field_engine.frames_applied == 1


def test_tilt_follows_pointer_within_box(field_engine, scheduler, make_node):
    card = make_node("card", "tilt", box=Rect(0, 0, 200, 100))
    field_engine.register(card)

    field_engine.on_pointer_move(200, 0)    # top-right corner
    scheduler.tick(16)
    assert card.style.rotate_x == pytest.approx(10.0)
    assert card.style.rotate_y == pytest.approx(10.0)

    field_engine.on_pointer_leave()
    assert card.style.rotate_x == 0.0
    assert card.style.rotate_y == 0.0


def test_unregister_stops_tracking(field_engine, magnets, scheduler):
    left, _ = magnets
    field_engine.unregister("left")
    field_engine.on_pointer_move(100, 50)
    scheduler.tick(16)

    assert not field_engine.is_tracking("left")
    assert left.style.translate_x == 0.0


def test_spatial_grid_query():
    grid = SpatialGrid(100)
    grid.insert("a", (10, 10))
    grid.insert("b", (450, 10))
    grid.insert("c", (-50, -50))

    assert set(grid.query((0, 0), 100)) == {"a", "c"}
    grid.remove("a")
    assert set(grid.query((0, 0), 100)) == {"c"}
    assert len(grid) == 2
