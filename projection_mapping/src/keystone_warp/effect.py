"""Per-frame orchestration of corner editing, homography solving and warping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np
from loguru import logger

from keystone_warp.config import KeystoneConfig
from keystone_warp.editing import QuadEditor
from keystone_warp.geometry import CANONICAL_CORNERS, find_homography
from keystone_warp.input import (
    Command,
    NudgeCorners,
    PointerEvent,
    ResetCorners,
    SelectCorners,
    ToggleEditing,
    ViewportProjection,
)
from keystone_warp.render import HomographyRenderer, draw_gizmo
from keystone_warp.storage import JsonSettingsStore, SettingsStore, load_corners, save_corners


@dataclass(slots=True)
class GizmoStyle:
    visible: bool
    anchor_color: tuple[int, int, int]
    selected_anchor_color: tuple[int, int, int]
    border_color: tuple[int, int, int]


@dataclass(slots=True)
class TickResult:
    homography: np.ndarray
    recomputed: bool
    editing: bool


class HomographyEffect:
    """Keeps the output warp in sync with the user-edited viewport corners.

    The caller owns the loop: each tick it hands over that tick's pointer
    events and discrete commands, and the effect re-solves the homography only
    when the editor reports a change.
    """

    def __init__(
        self,
        editor: QuadEditor,
        renderer: HomographyRenderer,
        store: SettingsStore,
        corners_key: str = "homography",
        nudge_step: float = 0.001,
        gizmo: Optional[GizmoStyle] = None,
    ) -> None:
        self._editor = editor
        self._renderer = renderer
        self._store = store
        self._corners_key = corners_key
        self._nudge_step = nudge_step
        self._gizmo = gizmo or GizmoStyle(True, (255, 255, 255), (0, 180, 255), (255, 200, 0))
        self._homography = np.eye(3, dtype=np.float64)

    @classmethod
    def from_config(cls, config: KeystoneConfig, store: Optional[SettingsStore] = None) -> "HomographyEffect":
        projection = ViewportProjection(config.display.width, config.display.height)
        editor = QuadEditor(projection, selection_radius=config.editor.selection_radius)
        renderer = HomographyRenderer(
            projection,
            edge_smoothness=config.render.edge_smoothness,
            background_color=config.render.background_color,
        )
        gizmo = GizmoStyle(
            visible=config.render.show_gizmo,
            anchor_color=tuple(config.render.anchor_color),
            selected_anchor_color=tuple(config.render.selected_anchor_color),
            border_color=tuple(config.render.border_color),
        )
        if store is None:
            store = JsonSettingsStore(config.storage.settings_path)
        logger.info(f"Homography effect initialized for {projection.width}x{projection.height} output")
        return cls(
            editor=editor,
            renderer=renderer,
            store=store,
            corners_key=config.storage.corners_key,
            nudge_step=config.editor.nudge_step,
            gizmo=gizmo,
        )

    @property
    def editor(self) -> QuadEditor:
        return self._editor

    @property
    def renderer(self) -> HomographyRenderer:
        return self._renderer

    @property
    def editing(self) -> bool:
        return self._editor.editing

    @property
    def homography(self) -> np.ndarray:
        return self._homography.copy()

    def activate(self) -> None:
        """Load persisted corners and solve immediately."""
        self.load_settings()
        self.refresh_homography(force=True)

    def deactivate(self) -> None:
        if self._editor.editing:
            self._editor.end_editing()

    def toggle_editing(self) -> None:
        if self._editor.editing:
            self._editor.end_editing()
            self.save_settings()
        else:
            self._editor.begin_editing()

    def load_settings(self) -> None:
        corners = load_corners(self._store, self._corners_key)
        if corners is None:
            self._editor.reset_to_canonical()
        else:
            self._editor.set_corners(corners)
            logger.info(f"Loaded corners from '{self._corners_key}'")

    def save_settings(self) -> None:
        save_corners(self._store, self._corners_key, self._editor.get_corners())

    def handle_pointer_events(self, events: Iterable[PointerEvent]) -> None:
        for event in events:
            self._editor.handle_pointer_event(event)

    def apply_commands(self, commands: Iterable[Command]) -> None:
        for command in commands:
            if isinstance(command, ToggleEditing):
                self.toggle_editing()
            elif not self._editor.editing:
                continue
            elif isinstance(command, ResetCorners):
                self._editor.reset_to_canonical()
            elif isinstance(command, SelectCorners):
                self._editor.set_selected_by_index(command.indices)
            elif isinstance(command, NudgeCorners):
                self._editor.nudge_selected(command.direction, self._nudge_step)

    def refresh_homography(self, force: bool = False) -> bool:
        """Re-solve when the corners changed since the last call."""
        dirty = self._editor.consume_dirty()
        if not (force or dirty):
            return False
        self._homography = find_homography(self._editor.get_corners(), CANONICAL_CORNERS)
        logger.debug(f"Homography updated:\n{self._homography}")
        return True

    def tick(
        self,
        pointer_events: Iterable[PointerEvent] = (),
        commands: Iterable[Command] = (),
    ) -> TickResult:
        """Deliver this tick's input, then recompute the homography if needed."""
        self.apply_commands(commands)
        self.handle_pointer_events(pointer_events)
        recomputed = self.refresh_homography()
        return TickResult(homography=self.homography, recomputed=recomputed, editing=self._editor.editing)

    def render(self, frame_bgr: np.ndarray) -> np.ndarray:
        output = self._renderer.render(frame_bgr, self._homography)
        if self._editor.editing and self._gizmo.visible:
            draw_gizmo(
                output,
                self._editor.get_corners(),
                self._editor.selected,
                self._renderer.projection,
                self._editor.selection_radius,
                self._gizmo.anchor_color,
                self._gizmo.selected_anchor_color,
                self._gizmo.border_color,
            )
        return output
