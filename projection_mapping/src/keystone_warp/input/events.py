"""Abstract pointer events and the screen-to-viewport projection."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np


class PointerPhase(Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    CANCEL = "cancel"
    STATIONARY = "stationary"


@dataclass(slots=True, frozen=True)
class PointerEvent:
    """One pointer sample for a tick, in screen pixels."""

    pointer_id: int
    phase: PointerPhase
    position: Tuple[float, float]


@dataclass(slots=True)
class ViewportProjection:
    """Maps screen pixels to normalized viewport coordinates and back.

    Viewport space has its origin at the bottom-left corner with y pointing up.
    Screen space follows OpenCV windows: origin top-left, y pointing down, unless
    ``flip_y`` is disabled.
    """

    width: int
    height: int
    flip_y: bool = True

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Viewport size must be positive, got {self.width}x{self.height}")

    def screen_to_viewport(self, position: Tuple[float, float]) -> np.ndarray:
        x, y = position
        u = float(x) / self.width
        v = float(y) / self.height
        if self.flip_y:
            v = 1.0 - v
        return np.array([u, v], dtype=np.float64)

    def viewport_to_screen(self, point: Tuple[float, float]) -> Tuple[float, float]:
        u, v = float(point[0]), float(point[1])
        if self.flip_y:
            v = 1.0 - v
        return u * self.width, v * self.height
