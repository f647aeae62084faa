"""Geometry helpers."""

from .homography import (  # noqa: F401
    CANONICAL_CORNERS,
    CORNER_COUNT,
    apply_homography,
    as_corner_array,
    canonical_corners,
    find_homography,
    normalize_homography,
)
