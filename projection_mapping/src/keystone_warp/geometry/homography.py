"""Homography estimation between the warped viewport quad and the unit square."""

from __future__ import annotations

from typing import Iterable

import numpy as np

from keystone_warp.errors import CornerCountError

CORNER_COUNT = 4

# counter-clockwise, starting at the viewport origin
CANONICAL_CORNERS = np.array(
    [
        [0.0, 0.0],
        [1.0, 0.0],
        [1.0, 1.0],
        [0.0, 1.0],
    ],
    dtype=np.float64,
)
CANONICAL_CORNERS.setflags(write=False)


def canonical_corners() -> np.ndarray:
    """Return a writable copy of the canonical unit-square corners."""
    return CANONICAL_CORNERS.copy()


def as_corner_array(corners: Iterable[Iterable[float]]) -> np.ndarray:
    """Coerce ``corners`` into a ``(4, 2)`` float array.

    Raises:
        CornerCountError: if the input does not hold exactly four 2D points.
    """
    array = np.asarray(corners, dtype=np.float64)
    if array.ndim != 2 or array.shape[1] != 2:
        raise CornerCountError(f"Expected an array of 2D points, got shape {array.shape}")
    if array.shape[0] != CORNER_COUNT:
        raise CornerCountError(f"Expected {CORNER_COUNT} corners, got {array.shape[0]}")
    return array


def find_homography(from_corners: np.ndarray, to_corners: np.ndarray) -> np.ndarray:
    """Compute the projective transform mapping ``from_corners`` onto ``to_corners``.

    Each correspondence contributes two rows to an 8x9 system ``A h = 0``; the
    solution is the right singular vector of ``A`` for its smallest singular
    value, reshaped row-major into a 3x3 matrix. Inputs live in unit-scale
    viewport coordinates so no normalization is applied.

    Degenerate quads (repeated points, collinear triples) are not rejected: the
    returned matrix is whatever the decomposition yields.

    Args:
        from_corners: Array of shape (4, 2), source points.
        to_corners: Array of shape (4, 2), destination points.

    Returns:
        3x3 homography matrix, defined up to scale.
    """
    src = as_corner_array(from_corners)
    dst = as_corner_array(to_corners)

    rows = np.zeros((2 * CORNER_COUNT, 9), dtype=np.float64)
    for i, ((x1, y1), (x2, y2)) in enumerate(zip(src, dst)):
        rows[i * 2] = [-x1, -y1, -1.0, 0.0, 0.0, 0.0, x2 * x1, x2 * y1, x2]
        rows[i * 2 + 1] = [0.0, 0.0, 0.0, -x1, -y1, -1.0, y2 * x1, y2 * y1, y2]

    _, _, vt = np.linalg.svd(rows)
    # right singular vector of the smallest singular value
    return vt[-1].reshape(3, 3)


def apply_homography(homography: np.ndarray, points: Iterable[Iterable[float]]) -> np.ndarray:
    """Apply a homography to an (N, 2) point array with perspective divide."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if len(pts) == 0:
        return pts

    ones = np.ones((len(pts), 1), dtype=np.float64)
    points_h = np.hstack([pts, ones])
    transformed_h = (homography @ points_h.T).T
    return transformed_h[:, :2] / transformed_h[:, 2:3]


def normalize_homography(homography: np.ndarray) -> np.ndarray:
    """Scale a homography so its bottom-right entry is 1, when possible."""
    if homography[2, 2] == 0:
        return homography.copy()
    return homography / homography[2, 2]
