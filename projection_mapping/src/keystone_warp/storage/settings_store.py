"""Key-value persistence of the warped viewport corners."""

from __future__ import annotations

import abc
import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from keystone_warp.errors import CornerPayloadError
from keystone_warp.geometry import CORNER_COUNT, as_corner_array


class SettingsStore(abc.ABC):
    """String key-value store with explicit flush."""

    @abc.abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when ``key`` is absent."""

    @abc.abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""

    def exists(self, key: str) -> bool:
        return self.get(key) is not None

    def save(self) -> None:
        """Flush pending writes. In-memory stores have nothing to do."""


class MemorySettingsStore(SettingsStore):
    def __init__(self, values: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonSettingsStore(SettingsStore):
    """Settings persisted as a flat JSON object on disk."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._values: Dict[str, str] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as handle:
            json.dump(self._values, handle, indent=2)
        logger.info(f"Settings saved to {self._path}")

    def _load(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        text = self._path.read_text(encoding="utf-8")
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.error(f"Failed to parse settings file {self._path} ({exc}): [{text}]")
            return {}
        if not isinstance(raw, dict):
            logger.error(f"Settings file {self._path} must hold a JSON object: [{text}]")
            return {}
        return {str(key): str(value) for key, value in raw.items()}


class CornerPayload(BaseModel):
    corners: List[Tuple[float, float]] = Field(..., min_length=CORNER_COUNT, max_length=CORNER_COUNT)


def serialize_corners(corners: np.ndarray) -> str:
    array = as_corner_array(corners)
    payload = CornerPayload(corners=[(float(x), float(y)) for x, y in array])
    return payload.model_dump_json()


def deserialize_corners(payload: str) -> np.ndarray:
    """Decode a corner payload.

    Raises:
        CornerPayloadError: if the payload is not valid JSON or does not hold
            exactly four points.
    """
    try:
        data = CornerPayload.model_validate_json(payload)
    except ValidationError as exc:
        raise CornerPayloadError(f"Malformed corner payload: {exc.error_count()} error(s)", payload) from exc
    return np.array(data.corners, dtype=np.float64)


def save_corners(store: SettingsStore, key: str, corners: np.ndarray) -> None:
    serialized = serialize_corners(corners)
    logger.debug(f"Serialized corners: {serialized}")
    store.set(key, serialized)
    store.save()


def load_corners(store: SettingsStore, key: str) -> Optional[np.ndarray]:
    """Return stored corners, or None when missing or rejected.

    Rejected payloads are logged verbatim.
    """
    if not store.exists(key):
        logger.info(f"No stored corners under '{key}'")
        return None
    raw = store.get(key)
    try:
        return deserialize_corners(raw)
    except CornerPayloadError as exc:
        logger.error(f"Failed to parse [{exc.payload}]")
        return None
