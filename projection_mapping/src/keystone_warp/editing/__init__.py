"""Interactive corner editing."""

from .pointer_tracker import PointerTracker  # noqa: F401
from .quad_editor import QuadEditor  # noqa: F401
