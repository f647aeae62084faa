"""Translates keyboard snapshots into discrete corner-editing commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Tuple, Union

import numpy as np

CTRL = "ctrl"
EDIT_KEY = "h"
RESET_KEY = "r"
SELECTION_KEYS: Tuple[str, ...] = ("0", "1", "2", "3")

ARROW_DIRECTIONS = {
    "up": (0.0, 1.0),
    "down": (0.0, -1.0),
    "right": (1.0, 0.0),
    "left": (-1.0, 0.0),
}


@dataclass(slots=True, frozen=True)
class KeySnapshot:
    """Keys that went down this tick and keys currently held."""

    pressed: FrozenSet[str] = field(default_factory=frozenset)
    held: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, pressed: Iterable[str] = (), held: Iterable[str] = ()) -> "KeySnapshot":
        pressed_set = frozenset(pressed)
        # a key pressed this tick is also held this tick
        return cls(pressed=pressed_set, held=frozenset(held) | pressed_set)


@dataclass(slots=True, frozen=True)
class ToggleEditing:
    pass


@dataclass(slots=True, frozen=True)
class ResetCorners:
    pass


@dataclass(slots=True, frozen=True)
class SelectCorners:
    indices: FrozenSet[int]


@dataclass(slots=True, frozen=True)
class NudgeCorners:
    direction: Tuple[float, float]


Command = Union[ToggleEditing, ResetCorners, SelectCorners, NudgeCorners]


class KeyboardCommands:
    """Key bindings for the corner editor.

    Ctrl+H enters edit mode and Ctrl alone leaves it. While editing, holding R
    resets the corners, holding 0-3 selects the matching corners and the arrow
    keys nudge the selection.
    """

    def commands(self, keys: KeySnapshot, editing: bool) -> List[Command]:
        commands: List[Command] = []

        if CTRL in keys.pressed and (editing or EDIT_KEY in keys.held):
            commands.append(ToggleEditing())
            editing = not editing

        if not editing:
            return commands

        if RESET_KEY in keys.held:
            commands.append(ResetCorners())

        selected = frozenset(i for i, key in enumerate(SELECTION_KEYS) if key in keys.held)
        commands.append(SelectCorners(selected))

        direction = np.zeros(2, dtype=np.float64)
        for key, delta in ARROW_DIRECTIONS.items():
            if key in keys.held:
                direction += delta
        if np.dot(direction, direction) > 0:
            commands.append(NudgeCorners((float(direction[0]), float(direction[1]))))

        return commands
