"""Warps frames through the viewport homography."""

from __future__ import annotations

from typing import Dict, Sequence, Tuple

import cv2
import numpy as np
from loguru import logger

from keystone_warp.input.events import ViewportProjection


def _viewport_to_pixels(width: int, height: int, flip_y: bool) -> np.ndarray:
    if flip_y:
        return np.array([[width, 0, 0], [0, -height, height], [0, 0, 1]], dtype=np.float64)
    return np.array([[width, 0, 0], [0, height, 0], [0, 0, 1]], dtype=np.float64)


def _smoothstep(edge0: float, edge1: float, x: np.ndarray) -> np.ndarray:
    t = np.clip((x - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


class HomographyRenderer:
    """Resamples a source frame so the unit square lands on the warped quad.

    The homography maps output viewport coordinates to source viewport
    coordinates. Output pixels whose source lookup falls outside the unit
    square take ``background_color``; ``edge_smoothness`` fades the image in
    over that fraction of the viewport along each source edge.
    """

    def __init__(
        self,
        projection: ViewportProjection,
        edge_smoothness: float = 0.0,
        background_color: Sequence[int] = (0, 0, 0),
    ) -> None:
        self.projection = projection
        self.edge_smoothness = edge_smoothness
        self.background_color = background_color
        self._alpha_cache: Dict[Tuple[int, int, float], np.ndarray] = {}

    @property
    def edge_smoothness(self) -> float:
        return self._edge_smoothness

    @edge_smoothness.setter
    def edge_smoothness(self, value: float) -> None:
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"edge_smoothness must be within [0, 1], got {value}")
        self._edge_smoothness = float(value)

    @property
    def background_color(self) -> Tuple[int, int, int]:
        return self._background_color

    @background_color.setter
    def background_color(self, value: Sequence[int]) -> None:
        if len(value) != 3:
            raise ValueError(f"background_color must be a BGR triple, got {value}")
        self._background_color = tuple(int(channel) for channel in value)

    def pixel_homography(self, homography: np.ndarray, source_size: Tuple[int, int]) -> np.ndarray:
        """Map output pixels to source pixels through ``homography``."""
        src_w, src_h = source_size
        to_source = _viewport_to_pixels(src_w, src_h, self.projection.flip_y)
        from_output = np.linalg.inv(
            _viewport_to_pixels(self.projection.width, self.projection.height, self.projection.flip_y)
        )
        return to_source @ homography @ from_output

    def render(self, frame_bgr: np.ndarray, homography: np.ndarray) -> np.ndarray:
        src_h, src_w = frame_bgr.shape[:2]
        dsize = (self.projection.width, self.projection.height)
        pixel_h = self.pixel_homography(homography, (src_w, src_h))

        warped = cv2.warpPerspective(
            frame_bgr,
            pixel_h,
            dsize,
            flags=cv2.INTER_LINEAR | cv2.WARP_INVERSE_MAP,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=0,
        )
        alpha = cv2.warpPerspective(
            self._source_alpha(src_w, src_h),
            pixel_h,
            dsize,
            flags=cv2.INTER_LINEAR | cv2.WARP_INVERSE_MAP,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=0,
        )

        if warped.ndim == 2:
            background = np.full(warped.shape, self._background_color[0], dtype=np.float32)
        else:
            alpha = alpha[:, :, np.newaxis]
            background = np.empty(warped.shape, dtype=np.float32)
            background[...] = np.array(self._background_color[: warped.shape[2]], dtype=np.float32)
        blended = alpha * warped.astype(np.float32) + (1.0 - alpha) * background
        return np.clip(np.rint(blended), 0, 255).astype(frame_bgr.dtype)

    def _source_alpha(self, width: int, height: int) -> np.ndarray:
        key = (width, height, self._edge_smoothness)
        cached = self._alpha_cache.get(key)
        if cached is not None:
            return cached

        if self._edge_smoothness <= 0.0:
            alpha = np.ones((height, width), dtype=np.float32)
        else:
            u = (np.arange(width, dtype=np.float32) + 0.5) / width
            v = (np.arange(height, dtype=np.float32) + 0.5) / height
            edge_u = np.minimum(u, 1.0 - u)
            edge_v = np.minimum(v, 1.0 - v)
            distance = np.minimum(edge_v[:, np.newaxis], edge_u[np.newaxis, :])
            alpha = _smoothstep(0.0, self._edge_smoothness, distance).astype(np.float32)

        # keep a single entry; frame size and smoothness rarely change
        self._alpha_cache = {key: alpha}
        logger.debug(f"Built edge alpha mask {width}x{height} (smoothness={self._edge_smoothness})")
        return alpha
