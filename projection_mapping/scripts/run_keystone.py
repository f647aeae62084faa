"""Show a frame source through the keystone warp with interactive corner editing."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Set

import cv2
from loguru import logger

from keystone_warp.config import KeystoneConfig, default_config, load_config
from keystone_warp.effect import HomographyEffect
from keystone_warp.errors import KeystoneError
from keystone_warp.input import KeyboardCommands, KeySnapshot, MouseTouchEmulator
from keystone_warp.sources import build_source
from keystone_warp.utils import configure_logging

# waitKeyEx codes for arrow keys on GTK, Windows and Cocoa builds of OpenCV
ARROW_CODES = {
    65361: "left", 65362: "up", 65363: "right", 65364: "down",
    2424832: "left", 2490368: "up", 2555904: "right", 2621440: "down",
    63234: "left", 63232: "up", 63235: "right", 63233: "down",
}
CTRL_H = 8
EDIT_TOGGLE = ord("e")
QUIT_KEYS = (ord("q"), 27)
SELECTION_CHARS = "0123"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Keystone-correct a frame source by dragging its corners")
    parser.add_argument("--config", type=Path, help="Path to keystone YAML configuration")
    parser.add_argument("--settings", type=Path, help="Override storage.settings_path")
    return parser.parse_args()


class KeyTranslator:
    """Folds one ``waitKeyEx`` code per tick into a key snapshot.

    OpenCV reports neither modifier state nor held keys, so Ctrl+H arrives as
    backspace, ``e`` stands in for the Ctrl toggle, and the digit selection
    keys latch on and off instead of being held.
    """

    def __init__(self) -> None:
        self._latched: Set[str] = set()

    def snapshot(self, code: int, editing: bool) -> KeySnapshot:
        if code < 0:
            return KeySnapshot.of(held=self._latched)

        pressed: Set[str] = set()
        char = chr(code & 0xFF) if code < 256 else ""
        if code == CTRL_H or (code == EDIT_TOGGLE and not editing):
            pressed |= {"ctrl", "h"}
        elif code == EDIT_TOGGLE:
            pressed.add("ctrl")
        elif code in ARROW_CODES:
            pressed.add(ARROW_CODES[code])
        elif char in SELECTION_CHARS:
            self._latched ^= {char}
        elif char.lower() == "r":
            pressed.add("r")

        if "ctrl" in pressed:
            self._latched.clear()
        return KeySnapshot.of(pressed=pressed, held=self._latched)


def main() -> None:
    args = parse_args()
    cfg: KeystoneConfig = load_config(args.config) if args.config else default_config()
    if args.settings:
        cfg.storage.settings_path = args.settings
    configure_logging(cfg.logging)

    effect = HomographyEffect.from_config(cfg)
    effect.activate()

    source = build_source(cfg.source, (cfg.display.width, cfg.display.height))
    mouse = MouseTouchEmulator()
    keyboard = KeyboardCommands()
    keys = KeyTranslator()

    window = cfg.display.window_name
    cv2.namedWindow(window, cv2.WINDOW_NORMAL)
    cv2.resizeWindow(window, cfg.display.width, cfg.display.height)
    if cfg.display.fullscreen:
        cv2.setWindowProperty(window, cv2.WND_PROP_FULLSCREEN, cv2.WINDOW_FULLSCREEN)
    cv2.setMouseCallback(window, mouse.handle_cv2_event)

    logger.info("Press Ctrl+H (or e) to edit corners, drag anchors or hold 0-3 with arrows, r to reset, q to quit")

    try:
        code = -1
        while True:
            frame = source.read()
            if frame is None:
                logger.warning("Frame unavailable, retrying...")
                code = cv2.waitKeyEx(10)
                if code in QUIT_KEYS:
                    break
                continue

            pointer_event = mouse.poll()
            commands = keyboard.commands(keys.snapshot(code, effect.editing), effect.editing)
            try:
                effect.tick(
                    pointer_events=[pointer_event] if pointer_event is not None else [],
                    commands=commands,
                )
            except KeystoneError as exc:
                logger.error(f"Tick failed: {exc}")

            cv2.imshow(window, effect.render(frame))

            code = cv2.waitKeyEx(1)
            if code in QUIT_KEYS:
                break
    finally:
        if effect.editing:
            effect.toggle_editing()
        effect.deactivate()
        source.release()
        cv2.destroyAllWindows()
        logger.info("Keystone loop stopped")


if __name__ == "__main__":
    main()
