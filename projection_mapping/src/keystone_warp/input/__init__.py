"""Input adapters: pointer events, mouse emulation and key bindings."""

from .events import PointerEvent, PointerPhase, ViewportProjection  # noqa: F401
from .keyboard import (  # noqa: F401
    Command,
    KeyboardCommands,
    KeySnapshot,
    NudgeCorners,
    ResetCorners,
    SelectCorners,
    ToggleEditing,
)
from .touch_emulation import MouseTouchEmulator  # noqa: F401
