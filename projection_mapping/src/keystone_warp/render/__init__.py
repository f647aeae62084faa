"""Rendering collaborators for the warped output."""

from .gizmo import draw_gizmo  # noqa: F401
from .renderer import HomographyRenderer  # noqa: F401
