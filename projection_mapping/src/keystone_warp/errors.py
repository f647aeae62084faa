"""Exception types raised by the keystone warp package."""

from __future__ import annotations


class KeystoneError(Exception):
    """Base class for all keystone warp errors."""


class CornerCountError(KeystoneError, ValueError):
    """A corner array did not hold exactly four 2D points."""


class PointerProtocolError(KeystoneError):
    """An input source broke the down/move/up contract for a pointer id."""


class CornerPayloadError(KeystoneError, ValueError):
    """A persisted corner payload could not be decoded."""

    def __init__(self, message: str, payload: str | None) -> None:
        super().__init__(message)
        self.payload = payload
