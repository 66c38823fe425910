"""Keyboard input: reading raw bytes and decoding ANSI key sequences."""

from __future__ import annotations

import enum
import sys
from dataclasses import dataclass
from typing import BinaryIO

ESCAPE = 0x1B
_BRACKET = ord("[")


class KeyKind(enum.Enum):
    """The kinds of keys the game understands."""

    ARROW_UP = "Up"
    ARROW_DOWN = "Down"
    ARROW_LEFT = "Left"
    ARROW_RIGHT = "Right"
    CHAR = "Char"
    ESC = "Esc"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class KeyCode:
    """A decoded key press; ``char`` is set only for character keys."""

    kind: KeyKind
    char: str | None = None

    @classmethod
    def char_key(cls, char: str) -> KeyCode:
        """Build the key code for a single printable character."""
        if len(char) != 1:
            raise ValueError(f"expected a single character, got {char!r}")
        return cls(KeyKind.CHAR, char)

    def __str__(self) -> str:
        if self.kind is KeyKind.CHAR and self.char is not None:
            return self.char
        return self.kind.value


KeyCode.ARROW_UP = KeyCode(KeyKind.ARROW_UP)
KeyCode.ARROW_DOWN = KeyCode(KeyKind.ARROW_DOWN)
KeyCode.ARROW_LEFT = KeyCode(KeyKind.ARROW_LEFT)
KeyCode.ARROW_RIGHT = KeyCode(KeyKind.ARROW_RIGHT)
KeyCode.ESC = KeyCode(KeyKind.ESC)
KeyCode.UNKNOWN = KeyCode(KeyKind.UNKNOWN)

_ARROWS = {
    ord("A"): KeyCode.ARROW_UP,
    ord("D"): KeyCode.ARROW_LEFT,
    ord("B"): KeyCode.ARROW_DOWN,
    ord("C"): KeyCode.ARROW_RIGHT,
}


def query_keyboard_once(stream: BinaryIO | None = None, size: int = 10) -> list[KeyCode]:
    """Read up to ``size`` bytes from ``stream`` once and decode them."""
    if stream is None:
        stream = sys.stdin.buffer
    read = getattr(stream, "read1", None) or stream.read
    try:
        data = read(size)
    except BlockingIOError:
        return []
    if not data:
        return []
    return parse_ansi(bytes(data))


def parse_ansi(buf: bytes) -> list[KeyCode]:
    """Decode a byte buffer into key codes."""
    codes: list[KeyCode] = []
    cursor = 0
    while cursor < len(buf):
        if buf[cursor] == ESCAPE:
            code, cursor = parse_escaped(buf, cursor)
            codes.append(code)
            continue
        try:
            text = buf[cursor : cursor + 1].decode("utf-8")
        except UnicodeDecodeError:
            codes.append(KeyCode.UNKNOWN)
        else:
            codes.append(KeyCode.char_key(text))
        cursor += 1
    return codes


def parse_escaped(buf: bytes, cursor: int) -> tuple[KeyCode, int]:
    """Decode the escape sequence starting at ``cursor``.

    Returns the key code and the position just after the consumed bytes.
    Only arrow keys and a lone escape are recognised.
    """
    if cursor + 1 >= len(buf) or buf[cursor + 1] != _BRACKET:
        return KeyCode.ESC, cursor + 1
    if cursor + 2 >= len(buf):
        return KeyCode.ESC, cursor + 1
    arrow = _ARROWS.get(buf[cursor + 2])
    if arrow is None:
        return KeyCode.ESC, cursor + 1
    return arrow, cursor + 3