"""Draws the editable quad border and corner anchors."""

from __future__ import annotations

from typing import Sequence

import cv2
import numpy as np

from keystone_warp.input.events import ViewportProjection

BGR = Sequence[int]


def draw_gizmo(
    frame_bgr: np.ndarray,
    corners: np.ndarray,
    selected: np.ndarray,
    projection: ViewportProjection,
    anchor_radius: float,
    anchor_color: BGR,
    selected_anchor_color: BGR,
    border_color: BGR,
    thickness: int = 1,
) -> np.ndarray:
    """Draw the closed corner path and one anchor ellipse per corner in place.

    ``anchor_radius`` is in viewport units, so anchors are ellipses on
    non-square displays, matching the hit-test area.
    """
    screen = np.array([projection.viewport_to_screen(corner) for corner in corners], dtype=np.float64)
    path = np.rint(screen).astype(np.int32).reshape(-1, 1, 2)
    cv2.polylines(frame_bgr, [path], isClosed=True, color=tuple(int(c) for c in border_color), thickness=thickness)

    axes = (
        max(1, int(round(anchor_radius * projection.width))),
        max(1, int(round(anchor_radius * projection.height))),
    )
    for (x, y), is_selected in zip(path.reshape(-1, 2), selected):
        color = selected_anchor_color if is_selected else anchor_color
        cv2.ellipse(
            frame_bgr,
            (int(x), int(y)),
            axes,
            0.0,
            0.0,
            360.0,
            tuple(int(c) for c in color),
            thickness,
        )
    return frame_bgr
