"""Persistence of corner settings."""

from .settings_store import (  # noqa: F401
    CornerPayload,
    JsonSettingsStore,
    MemorySettingsStore,
    SettingsStore,
    deserialize_corners,
    load_corners,
    save_corners,
    serialize_corners,
)
