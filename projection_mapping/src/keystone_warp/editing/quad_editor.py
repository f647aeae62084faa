"""Interactive editing of the four viewport corners."""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

import numpy as np
from loguru import logger

from keystone_warp.editing.pointer_tracker import PointerTracker
from keystone_warp.errors import CornerCountError
from keystone_warp.geometry import CORNER_COUNT, as_corner_array, canonical_corners
from keystone_warp.input.events import PointerEvent, PointerPhase, ViewportProjection


class QuadEditor:
    """Owns the warped viewport corners and their selection state.

    Corners are stored counter-clockwise in viewport space; index order is
    meaningful and never changes. Pointer events drag corners, discrete
    commands select and nudge them, and every mutation raises a dirty flag that
    the frame driver consumes once per tick.

    Pointer and discrete input is only honoured while editing. Selection flags
    are shared by both input paths, so within one tick the last call wins.
    """

    def __init__(
        self,
        projection: ViewportProjection,
        selection_radius: float,
        corners: Optional[np.ndarray] = None,
    ) -> None:
        if selection_radius <= 0:
            raise ValueError(f"selection_radius must be positive, got {selection_radius}")
        self._projection = projection
        self._selection_radius = float(selection_radius)
        self._corners = canonical_corners() if corners is None else as_corner_array(corners).copy()
        self._selected = np.zeros(CORNER_COUNT, dtype=bool)
        self._pointers = PointerTracker()
        self._editing = False
        self._dirty = False

    @property
    def editing(self) -> bool:
        return self._editing

    @property
    def selection_radius(self) -> float:
        return self._selection_radius

    @property
    def projection(self) -> ViewportProjection:
        return self._projection

    @property
    def selected(self) -> np.ndarray:
        return self._selected.copy()

    @property
    def pointers(self) -> PointerTracker:
        return self._pointers

    def begin_editing(self) -> None:
        self._editing = True
        self._deselect_all()
        self._pointers.clear()
        logger.info("Corner editing started")

    def end_editing(self) -> None:
        self._editing = False
        self._deselect_all()
        self._pointers.clear()
        logger.info("Corner editing stopped")

    # --- bulk access ---

    def get_corners(self) -> np.ndarray:
        return self._corners.copy()

    def read_corners(self, out: np.ndarray) -> None:
        """Copy the corners into a caller-owned ``(4, 2)`` array."""
        if out.shape != self._corners.shape:
            logger.error(f"Could not read viewport corners, parameter size mismatch: {out.shape}")
            raise CornerCountError(f"Expected output shape {self._corners.shape}, got {out.shape}")
        out[...] = self._corners

    def set_corners(self, corners: Iterable[Iterable[float]]) -> None:
        try:
            array = as_corner_array(corners)
        except CornerCountError as exc:
            logger.error(f"Could not write viewport corners, parameter size mismatch: {exc}")
            raise
        self._corners[...] = array
        self._dirty = True

    def reset_to_canonical(self) -> None:
        self._corners[...] = canonical_corners()
        self._dirty = True
        logger.debug("Corners reset to the unit square")

    def consume_dirty(self) -> bool:
        dirty = self._dirty
        self._dirty = False
        return dirty

    # --- pointer input ---

    def handle_pointer_event(self, event: PointerEvent) -> None:
        if event.phase is PointerPhase.DOWN:
            self.on_pointer_down(event.pointer_id, event.position)
        elif event.phase is PointerPhase.MOVE:
            self.on_pointer_move(event.pointer_id, event.position)
        elif event.phase is PointerPhase.UP:
            self.on_pointer_up(event.pointer_id)
        elif event.phase is PointerPhase.CANCEL:
            self.on_pointer_cancel(event.pointer_id)

    def on_pointer_down(self, pointer_id: int, screen_position: Tuple[float, float]) -> None:
        if not self._editing:
            return
        if pointer_id in self._pointers:
            logger.error(f"Touch down with already stored pointer id {pointer_id}")
            return

        index = self.hit_test(self._projection.screen_to_viewport(screen_position))
        if index is None:
            return
        if self._pointers.claim(pointer_id, index):
            self._selected[index] = True
            logger.debug(f"Pointer {pointer_id} grabbed corner {index}")

    def on_pointer_move(self, pointer_id: int, screen_position: Tuple[float, float]) -> None:
        if not self._editing:
            return
        index = self._pointers.corner_for(pointer_id)
        if index is None:
            return
        self._corners[index] = self._projection.screen_to_viewport(screen_position)
        self._dirty = True

    def on_pointer_up(self, pointer_id: int) -> None:
        index = self._pointers.release(pointer_id)
        if index is not None:
            self._selected[index] = False
            logger.debug(f"Pointer {pointer_id} released corner {index}")

    def on_pointer_cancel(self, pointer_id: int) -> None:
        self.on_pointer_up(pointer_id)

    def hit_test(self, position: np.ndarray) -> Optional[int]:
        """Index of the first corner within the selection radius of ``position``."""
        distances = np.linalg.norm(self._corners - np.asarray(position, dtype=np.float64), axis=1)
        hits = np.flatnonzero(distances < self._selection_radius)
        if hits.size == 0:
            return None
        return int(hits[0])

    # --- discrete commands ---

    def set_selected_by_index(self, indices: Iterable[int]) -> None:
        if not self._editing:
            return
        wanted = set(indices)
        invalid = [index for index in wanted if not 0 <= index < CORNER_COUNT]
        if invalid:
            raise IndexError(f"Corner indices out of range: {sorted(invalid)}")
        self._selected[:] = False
        for index in wanted:
            self._selected[index] = True

    def nudge_selected(self, direction: Tuple[float, float], magnitude: float) -> None:
        if not self._editing or not self._selected.any():
            return
        delta = np.asarray(direction, dtype=np.float64) * float(magnitude)
        if not delta.any():
            return
        self._corners[self._selected] += delta
        self._dirty = True

    def _deselect_all(self) -> None:
        self._selected[:] = False
