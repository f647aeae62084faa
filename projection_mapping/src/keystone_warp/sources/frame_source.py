"""Frame providers feeding the warp effect."""

from __future__ import annotations

import abc
from pathlib import Path
from typing import Optional, Tuple

import cv2
import numpy as np
from loguru import logger

from keystone_warp.config import SourceConfig


class FrameSource(abc.ABC):
    """Produces BGR frames, one per tick."""

    @abc.abstractmethod
    def read(self) -> Optional[np.ndarray]:
        """Return the next frame, or None when none is available."""

    def release(self) -> None:
        """Free any underlying device or file handle."""


class PatternSource(FrameSource):
    """Static alignment grid with a marker in each corner quadrant."""

    def __init__(self, size: Tuple[int, int], cells: int = 8) -> None:
        width, height = size
        self._frame = self._build(width, height, cells)

    def read(self) -> Optional[np.ndarray]:
        return self._frame.copy()

    @staticmethod
    def _build(width: int, height: int, cells: int) -> np.ndarray:
        frame = np.full((height, width, 3), 40, dtype=np.uint8)
        for i in range(cells + 1):
            x = min(width - 1, round(i * width / cells))
            y = min(height - 1, round(i * height / cells))
            cv2.line(frame, (x, 0), (x, height - 1), (200, 200, 200), 1)
            cv2.line(frame, (0, y), (width - 1, y), (200, 200, 200), 1)
        cv2.line(frame, (0, 0), (width - 1, height - 1), (0, 200, 255), 2)
        cv2.line(frame, (width - 1, 0), (0, height - 1), (0, 200, 255), 2)
        radius = max(4, min(width, height) // 20)
        # corner index order matches the viewport quad: bottom-left first, counter-clockwise
        markers = [
            ((radius * 2, height - radius * 2), (0, 0, 255)),
            ((width - radius * 2, height - radius * 2), (0, 255, 0)),
            ((width - radius * 2, radius * 2), (255, 0, 0)),
            ((radius * 2, radius * 2), (0, 255, 255)),
        ]
        for center, color in markers:
            cv2.circle(frame, center, radius, color, -1)
        return frame


class CaptureSource(FrameSource):
    """OpenCV capture of a camera or a video file; video files loop."""

    def __init__(self, capture: cv2.VideoCapture, loop: bool) -> None:
        self._capture = capture
        self._loop = loop

    @classmethod
    def open_camera(cls, device_id: int, size: Tuple[int, int], fps: int) -> "CaptureSource":
        capture = cv2.VideoCapture(device_id)
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, size[0])
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, size[1])
        capture.set(cv2.CAP_PROP_FPS, fps)
        if not capture.isOpened():
            raise RuntimeError(f"Failed to open camera device {device_id}")
        logger.info(f"Camera {device_id} opened at {size[0]}x{size[1]} @ {fps}fps")
        return cls(capture, loop=False)

    def read(self) -> Optional[np.ndarray]:
        ok, frame = self._capture.read()
        if not ok and self._loop:
            self._capture.set(cv2.CAP_PROP_POS_FRAMES, 0)
            ok, frame = self._capture.read()
        return frame if ok else None

    def release(self) -> None:
        self._capture.release()


class ImageSource(FrameSource):
    def __init__(self, image: np.ndarray) -> None:
        self._image = image

    def read(self) -> Optional[np.ndarray]:
        return self._image.copy()


def open_file(path: Path) -> FrameSource:
    """Open ``path`` as a looping video, falling back to a still image."""
    capture = cv2.VideoCapture(str(path))
    if capture.isOpened() and int(capture.get(cv2.CAP_PROP_FRAME_COUNT)) > 1:
        logger.info(f"Playing video {path}")
        return CaptureSource(capture, loop=True)
    capture.release()
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise RuntimeError(f"Failed to load media {path}: unsupported or missing file")
    logger.info(f"Showing still image {path}")
    return ImageSource(image)


def build_source(config: SourceConfig, size: Tuple[int, int]) -> FrameSource:
    if config.kind == "camera":
        return CaptureSource.open_camera(config.device_id, size, config.fps)
    if config.kind == "file":
        return open_file(config.path)
    return PatternSource(size)
