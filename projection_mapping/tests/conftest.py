"""pytest configuration and fixtures for the keystone_warp test suite."""

from __future__ import annotations

from typing import Dict, List

import pytest
from loguru import logger

from keystone_warp.editing import QuadEditor
from keystone_warp.input import ViewportProjection


@pytest.fixture
def log_records() -> List[Dict[str, object]]:
    """Collect loguru records emitted during a test."""
    records: List[Dict[str, object]] = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(sink_id)


def messages_at(records: List[Dict[str, object]], level: str) -> List[str]:
    return [record["message"] for record in records if record["level"].name == level]


@pytest.fixture
def projection() -> ViewportProjection:
    """100x100 screen, y pointing down, so screen (x, y) -> viewport (x/100, 1 - y/100)."""
    return ViewportProjection(100, 100)


@pytest.fixture
def editor(projection: ViewportProjection) -> QuadEditor:
    quad = QuadEditor(projection, selection_radius=0.05)
    quad.begin_editing()
    quad.consume_dirty()
    return quad
