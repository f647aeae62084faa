"""Configuration schema and loader for the keystone warp effect."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class ProjectMetadata(BaseModel):
    name: str = Field("keystone")
    data_root: Path = Field(Path("data"))

    @field_validator("data_root", mode="before")
    @classmethod
    def ensure_data_root(cls, value: str | Path) -> Path:
        path = Path(value)
        path.mkdir(parents=True, exist_ok=True)
        return path


class LoggingConfig(BaseModel):
    level: str = Field("INFO")
    output: str = Field("stdout")

    @field_validator("level")
    @classmethod
    def normalize_level(cls, value: str) -> str:
        return value.upper()


class DisplayConfig(BaseModel):
    window_name: str = Field("keystone")
    resolution: List[int] = Field(default_factory=lambda: [1280, 720], min_length=2, max_length=2)
    fullscreen: bool = False

    @field_validator("resolution")
    @classmethod
    def ensure_positive(cls, value: List[int]) -> List[int]:
        if any(item <= 0 for item in value):
            raise ValueError(f"Display resolution must be positive, got {value}")
        return value

    @property
    def width(self) -> int:
        return self.resolution[0]

    @property
    def height(self) -> int:
        return self.resolution[1]


class SourceConfig(BaseModel):
    kind: Literal["camera", "file", "pattern"] = "pattern"
    device_id: int = Field(0, ge=0)
    path: Optional[Path] = None
    fps: int = Field(30, gt=0)

    @model_validator(mode="after")
    def ensure_path_for_file(self) -> "SourceConfig":
        if self.kind == "file" and self.path is None:
            raise ValueError("source.path is required when source.kind is 'file'")
        return self


class EditorConfig(BaseModel):
    selection_radius: float = Field(0.05, gt=0.0)
    nudge_step: float = Field(0.001, gt=0.0)


class RenderConfig(BaseModel):
    edge_smoothness: float = Field(0.0, ge=0.0, le=1.0)
    background_color: List[int] = Field(default_factory=lambda: [0, 0, 0], min_length=3, max_length=3)
    show_gizmo: bool = True
    anchor_color: List[int] = Field(default_factory=lambda: [255, 255, 255], min_length=3, max_length=3)
    selected_anchor_color: List[int] = Field(default_factory=lambda: [0, 180, 255], min_length=3, max_length=3)
    border_color: List[int] = Field(default_factory=lambda: [255, 200, 0], min_length=3, max_length=3)

    @field_validator("background_color", "anchor_color", "selected_anchor_color", "border_color")
    @classmethod
    def ensure_byte_range(cls, value: List[int]) -> List[int]:
        if any(not 0 <= channel <= 255 for channel in value):
            raise ValueError(f"BGR channels must be within 0-255, got {value}")
        return value


class StorageConfig(BaseModel):
    settings_path: Path = Field(Path("data/settings.json"))
    corners_key: str = Field("homography", min_length=1)

    @field_validator("settings_path", mode="before")
    @classmethod
    def ensure_parent(cls, value: str | Path) -> Path:
        path = Path(value)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path


class KeystoneConfig(BaseModel):
    project: ProjectMetadata = Field(default_factory=ProjectMetadata)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)
    editor: EditorConfig = Field(default_factory=EditorConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


def default_config() -> KeystoneConfig:
    """Configuration with every section at its default."""
    return KeystoneConfig()


def load_config(path: str | Path) -> KeystoneConfig:
    """Load configuration from YAML file."""
    with open(path, "r", encoding="utf-8") as handle:
        raw: Optional[Dict[str, object]] = yaml.safe_load(handle)
    return KeystoneConfig.model_validate(raw or {})
