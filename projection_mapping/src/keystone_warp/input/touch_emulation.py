"""Synthesizes a single-pointer touch stream from mouse button state."""

from __future__ import annotations

import random
from typing import Optional, Tuple

import cv2
from loguru import logger

from keystone_warp.input.events import PointerEvent, PointerPhase

_MAX_POINTER_ID = 2**31 - 1


class MouseTouchEmulator:
    """Turns mouse press/hold/release into DOWN/MOVE/UP pointer events.

    Button state is recorded as it arrives (for instance from an OpenCV mouse
    callback) and collapsed into at most one event per :meth:`poll`. A press
    allocates a fresh random pointer id that stays live until release, so
    there is never more than one synthetic pointer.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self._pointer_id = -1
        self._position: Tuple[float, float] = (0.0, 0.0)
        self._held = False
        self._live = False
        self._pressed_since_poll = False
        self._released_since_poll = False

    @property
    def pointer_id(self) -> int:
        return self._pointer_id

    @property
    def is_held(self) -> bool:
        return self._held

    def press(self, position: Tuple[float, float]) -> None:
        self._position = position
        self._held = True
        self._pressed_since_poll = True

    def move(self, position: Tuple[float, float]) -> None:
        self._position = position

    def release(self, position: Tuple[float, float]) -> None:
        self._position = position
        self._held = False
        self._released_since_poll = True

    def handle_cv2_event(self, event: int, x: int, y: int, flags: int = 0, param: object = None) -> None:
        """Mouse callback compatible with ``cv2.setMouseCallback``."""
        if event == cv2.EVENT_LBUTTONDOWN:
            self.press((x, y))
        elif event == cv2.EVENT_LBUTTONUP:
            self.release((x, y))
        elif event == cv2.EVENT_MOUSEMOVE:
            self.move((x, y))

    def poll(self) -> Optional[PointerEvent]:
        """Return the pointer event for this tick, if the button is involved."""
        pressed, released = self._pressed_since_poll, self._released_since_poll
        self._pressed_since_poll = False
        self._released_since_poll = False

        if pressed and self._live:
            # released and pressed again since the last poll; end the old pointer first
            self._pressed_since_poll = True
            self._released_since_poll = not self._held
            self._live = False
            return PointerEvent(self._pointer_id, PointerPhase.UP, self._position)
        if pressed:
            self._live = True
            self._pointer_id = self._rng.randint(0, _MAX_POINTER_ID)
            logger.debug(f"Mouse press mapped to pointer {self._pointer_id}")
            if released and not self._held:
                # click shorter than a tick; the UP follows on the next poll
                self._released_since_poll = True
            return PointerEvent(self._pointer_id, PointerPhase.DOWN, self._position)
        if released and self._live:
            self._live = False
            return PointerEvent(self._pointer_id, PointerPhase.UP, self._position)
        if self._held and self._live:
            return PointerEvent(self._pointer_id, PointerPhase.MOVE, self._position)
        return None
