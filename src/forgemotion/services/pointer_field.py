"""
Pointer Field Engine

Magnetic displacement of nodes toward the pointer, plus distortion of
neighboring magnetic nodes and 3D tilt of tilt nodes.

Pointer samples are coalesced: however many moves arrive between two
frames, the field is recomputed once, on the next frame.
"""

from __future__ import annotations

import math
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set, Tuple

from forgemotion.engine.frame_scheduler import FrameScheduler
from forgemotion.engine.tween import Tween
from forgemotion.models.config import PointerConfig
from forgemotion.models.enums import FramePhase, LogCategory
from forgemotion.models.field import MagneticField, Vector, ZERO, linear_falloff, unit_vector
from forgemotion.models.node import AnimatableNode
from forgemotion.models.transition import TransitionConfig, ease_out_back, ease_out_quad
from forgemotion.services.capabilities import FrameTimingCapability, TimingCapability
from forgemotion.services.motion_preference import MotionPreferenceGate
from forgemotion.utils.logger import get_category_logger

log = get_category_logger(LogCategory.POINTER)

MAGNETIC_MARKERS = ("magnetic", "magnetic-hover")
TILT_MARKERS = ("tilt",)


class SpatialGrid:
    """
    Uniform grid over field centers.

    Cells are cell_size wide; query(center, radius) returns every id in the
    cells overlapping the query square, which callers filter by exact
    distance.
    """

    def __init__(self, cell_size: float):
        self.cell_size = max(1.0, float(cell_size))
        self._cells: Dict[Tuple[int, int], Set[str]] = defaultdict(set)
        self._where: Dict[str, Tuple[int, int]] = {}

    def _cell(self, point: Vector) -> Tuple[int, int]:
        return (int(math.floor(point[0] / self.cell_size)), int(math.floor(point[1] / self.cell_size)))

    def insert(self, item_id: str, point: Vector) -> None:
        self.remove(item_id)
        cell = self._cell(point)
        self._cells[cell].add(item_id)
        self._where[item_id] = cell

    def remove(self, item_id: str) -> None:
        cell = self._where.pop(item_id, None)
        if cell is None:
            return
        members = self._cells.get(cell)
        if members is not None:
            members.discard(item_id)
            if not members:
                del self._cells[cell]

    def query(self, point: Vector, radius: float) -> Iterable[str]:
        x0, y0 = self._cell((point[0] - radius, point[1] - radius))
        x1, y1 = self._cell((point[0] + radius, point[1] + radius))
        for cx in range(x0, x1 + 1):
            for cy in range(y0, y1 + 1):
                members = self._cells.get((cx, cy))
                if members:
                    yield from tuple(members)

    def __len__(self) -> int:
        return len(self._where)


class PointerFieldEngine:
    """
    Continuously re-derives MagneticField records from the pointer.

    Per applied pointer sample:
    - every field whose center is within radius becomes a source with
      force = max(0, (radius - d) / radius) and translation
      unit(pointer - center) * force * strength
    - every other magnetic node within neighbor_radius of a source is pulled
      toward it by force * neighbor_falloff * neighbor_strength
    - a field that stops being a source springs back to rest (back ease-out);
      neighbor offsets that vanish ease back out faster

    Under reduced motion no force is computed and every node stays at the
    identity transform.
    """

    def __init__(
        self,
        scheduler: FrameScheduler,
        gate: MotionPreferenceGate,
        config: Optional[PointerConfig] = None,
        timing: Optional[TimingCapability] = None,
    ):
        self.scheduler = scheduler
        self.gate = gate
        self.config = config or PointerConfig()
        self.timing = timing or FrameTimingCapability()

        self.fields: Dict[str, MagneticField] = {}
        self._nodes: Dict[str, AnimatableNode] = {}
        self._tilt_nodes: Dict[str, AnimatableNode] = {}
        self._grid = SpatialGrid(self.config.neighbor_radius)

        self._pointer: Optional[Vector] = None
        self._frame: Optional[int] = None
        self._springs: Dict[str, Tween] = {}
        self._neighbor_resets: Dict[str, Tween] = {}

        self.samples_received = 0
        self.frames_applied = 0

        gate.subscribe(self._on_preference_changed)

    # === Registration ===

    def register(self, node: AnimatableNode) -> None:
        if node.has_marker(*MAGNETIC_MARKERS):
            center = node.box.center
            self.fields[node.node_id] = MagneticField(
                node_id=node.node_id,
                center=center,
                radius=self.config.radius,
                strength=self.config.strength,
            )
            self._nodes[node.node_id] = node
            self._grid.insert(node.node_id, center)
        if node.has_marker(*TILT_MARKERS):
            self._tilt_nodes[node.node_id] = node

    def unregister(self, node_id: str) -> None:
        self._cancel_tween(self._springs, node_id)
        self._cancel_tween(self._neighbor_resets, node_id)
        self.fields.pop(node_id, None)
        self._nodes.pop(node_id, None)
        self._tilt_nodes.pop(node_id, None)
        self._grid.remove(node_id)

    def refresh_geometry(self) -> None:
        """Re-read node boxes after layout changes"""
        for node_id, field in self.fields.items():
            field.center = self._nodes[node_id].box.center
            self._grid.insert(node_id, field.center)

    def is_tracking(self, node_id: str) -> bool:
        return node_id in self.fields or node_id in self._tilt_nodes

    # === Pointer input ===

    def on_pointer_move(self, x: float, y: float) -> None:
        if self.gate.reduced:
            return
        self.samples_received += 1
        self._pointer = (float(x), float(y))
        if self._frame is None:
            self._frame = self.scheduler.request_frame(self._apply, FramePhase.WRITE)

    def on_pointer_leave(self) -> None:
        """Pointer left the document: every field returns to rest"""
        self._pointer = None
        self.scheduler.cancel_frame(self._frame)
        self._frame = None
        if self.gate.reduced:
            return
        for field in self.fields.values():
            if field.active or field.force_vector != ZERO:
                self._release(field)
            if field.neighbor_offset != ZERO:
                self._reset_neighbor(field)
        for node in self._tilt_nodes.values():
            node.style.rotate_x = 0.0
            node.style.rotate_y = 0.0

    # === Field computation ===

    def _apply(self, now_ms: float) -> None:
        self._frame = None
        if self.gate.reduced or self._pointer is None:
            return
        self.frames_applied += 1
        px, py = self._pointer
        cfg = self.config

        sources: List[MagneticField] = []
        for node_id in self._grid.query(self._pointer, cfg.radius):
            field = self.fields[node_id]
            distance = field.distance_to(px, py)
            if distance < field.radius:
                sources.append(field)

        source_ids = {f.node_id for f in sources}
        for field in self.fields.values():
            if field.active and field.node_id not in source_ids:
                self._release(field)

        for field in sources:
            self._cancel_tween(self._springs, field.node_id)
            field.force = linear_falloff(field.distance_to(px, py), field.radius)
            ux, uy = unit_vector(px - field.center[0], py - field.center[1])
            field.force_vector = (ux * field.force * field.strength, uy * field.force * field.strength)
            field.active = True
            field.last_pointer = (px, py)

        offsets = self._neighbor_offsets(sources)
        for field in self.fields.values():
            offset = offsets.get(field.node_id)
            if offset is not None:
                self._cancel_tween(self._neighbor_resets, field.node_id)
                field.neighbor_offset = offset
            elif field.neighbor_offset != ZERO and field.node_id not in self._neighbor_resets:
                self._reset_neighbor(field)

        for field in self.fields.values():
            self._write(field)
        self._apply_tilt(px, py)

    def _neighbor_offsets(self, sources: List[MagneticField]) -> Dict[str, Vector]:
        cfg = self.config
        offsets: Dict[str, Vector] = {}
        for source in sources:
            if source.force <= 0:
                continue
            for node_id in self._grid.query(source.center, cfg.neighbor_radius):
                if node_id == source.node_id:
                    continue
                neighbor = self.fields[node_id]
                distance = math.hypot(
                    source.center[0] - neighbor.center[0],
                    source.center[1] - neighbor.center[1],
                )
                falloff = linear_falloff(distance, cfg.neighbor_radius)
                if falloff <= 0:
                    continue
                ux, uy = unit_vector(source.center[0] - neighbor.center[0], source.center[1] - neighbor.center[1])
                magnitude = source.force * falloff * cfg.neighbor_strength
                ox, oy = offsets.get(node_id, ZERO)
                offsets[node_id] = (ox + ux * magnitude, oy + uy * magnitude)
        return offsets

    def _apply_tilt(self, px: float, py: float) -> None:
        limit = self.config.tilt_max_deg
        for node in self._tilt_nodes.values():
            box = node.box
            if not box.contains(px, py) or box.width <= 0 or box.height <= 0:
                if node.style.rotate_x or node.style.rotate_y:
                    node.style.rotate_x = 0.0
                    node.style.rotate_y = 0.0
                continue
            cx, cy = box.width / 2, box.height / 2
            node.style.rotate_x = (py - box.top - cy) / cy * -limit
            node.style.rotate_y = (px - box.left - cx) / cx * limit

    # === Return to rest ===

    def _release(self, field: MagneticField) -> None:
        field.active = False
        field.force = 0.0
        if field.node_id in self._springs:
            return
        start = field.force_vector
        if start == ZERO:
            self._write(field)
            return

        def apply(values):
            field.force_vector = (values["x"], values["y"])
            self._write(field)

        tween = self.timing.animate(
            self.scheduler,
            {"x": start[0], "y": start[1]},
            {"x": 0.0, "y": 0.0},
            TransitionConfig(self.config.spring_ms, ease_out_back),
            apply,
            lambda: self._springs.pop(field.node_id, None),
        )
        if not tween.finished:
            self._springs[field.node_id] = tween

    def _reset_neighbor(self, field: MagneticField) -> None:
        start = field.neighbor_offset

        def apply(values):
            field.neighbor_offset = (values["x"], values["y"])
            self._write(field)

        self._cancel_tween(self._neighbor_resets, field.node_id)
        tween = self.timing.animate(
            self.scheduler,
            {"x": start[0], "y": start[1]},
            {"x": 0.0, "y": 0.0},
            TransitionConfig(self.config.neighbor_reset_ms, ease_out_quad),
            apply,
            lambda: self._neighbor_resets.pop(field.node_id, None),
        )
        if not tween.finished:
            self._neighbor_resets[field.node_id] = tween

    def _write(self, field: MagneticField) -> None:
        node = self._nodes.get(field.node_id)
        if node is None:
            return
        node.style.translate_x, node.style.translate_y = field.translation

    @staticmethod
    def _cancel_tween(tweens: Dict[str, Tween], node_id: str) -> None:
        tween = tweens.pop(node_id, None)
        if tween is not None:
            tween.cancel()

    # === Motion preference ===

    def reset(self) -> None:
        """Cancel everything and put every tracked node at identity"""
        self.scheduler.cancel_frame(self._frame)
        self._frame = None
        self._pointer = None
        for tweens in (self._springs, self._neighbor_resets):
            for tween in tweens.values():
                tween.cancel()
            tweens.clear()
        for field in self.fields.values():
            field.force = 0.0
            field.force_vector = ZERO
            field.neighbor_offset = ZERO
            field.active = False
            self._write(field)
        for node in self._tilt_nodes.values():
            node.style.rotate_x = 0.0
            node.style.rotate_y = 0.0

    def _on_preference_changed(self, reduced: bool) -> None:
        if reduced:
            log.debug("Reduced motion: pointer field reset", fields=len(self.fields))
            self.reset()
