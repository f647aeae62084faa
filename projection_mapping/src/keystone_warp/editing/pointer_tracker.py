"""Bookkeeping of which live pointer drags which corner."""

from __future__ import annotations

from typing import Dict, Optional

from loguru import logger

from keystone_warp.errors import PointerProtocolError


class PointerTracker:
    """Partial mapping from live pointer ids to the corner index each one drags.

    A pointer id maps to at most one corner and a corner is claimed by at most
    one pointer; the first claim on a corner wins.
    """

    def __init__(self) -> None:
        self._corner_by_pointer: Dict[int, int] = {}

    def __contains__(self, pointer_id: int) -> bool:
        return pointer_id in self._corner_by_pointer

    def __len__(self) -> int:
        return len(self._corner_by_pointer)

    def claim(self, pointer_id: int, corner_index: int) -> bool:
        """Register ``pointer_id`` as dragging ``corner_index``.

        Returns False when the corner already belongs to another pointer.

        Raises:
            PointerProtocolError: if ``pointer_id`` is already registered.
        """
        if pointer_id in self._corner_by_pointer:
            raise PointerProtocolError(f"Pointer {pointer_id} pressed while already down")
        owner = self.owner_of(corner_index)
        if owner is not None:
            logger.debug(f"Corner {corner_index} already dragged by pointer {owner}; ignoring pointer {pointer_id}")
            return False
        self._corner_by_pointer[pointer_id] = corner_index
        return True

    def release(self, pointer_id: int) -> Optional[int]:
        """Forget ``pointer_id``, returning the corner it was dragging."""
        return self._corner_by_pointer.pop(pointer_id, None)

    def corner_for(self, pointer_id: int) -> Optional[int]:
        return self._corner_by_pointer.get(pointer_id)

    def owner_of(self, corner_index: int) -> Optional[int]:
        for pointer_id, corner in self._corner_by_pointer.items():
            if corner == corner_index:
                return pointer_id
        return None

    def clear(self) -> None:
        self._corner_by_pointer.clear()
