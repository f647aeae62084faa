"""Loguru sink setup driven by the logging config section."""

from __future__ import annotations

import sys

from loguru import logger

from keystone_warp.config import LoggingConfig

_STREAMS = {
    "stdout": sys.stdout,
    "stderr": sys.stderr,
}


def configure_logging(config: LoggingConfig) -> int:
    """Replace the default loguru sink with the configured one.

    ``output`` is ``stdout``, ``stderr`` or a file path. Returns the sink id.
    """
    logger.remove()
    sink = _STREAMS.get(config.output.lower(), config.output)
    sink_id = logger.add(sink, level=config.level)
    logger.debug(f"Logging to {config.output} at {config.level}")
    return sink_id
