"""Frame sources."""

from .frame_source import (  # noqa: F401
    CaptureSource,
    FrameSource,
    ImageSource,
    PatternSource,
    build_source,
    open_file,
)
