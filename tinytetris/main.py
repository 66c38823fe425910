"""Command-line entry point that starts the game."""

from __future__ import annotations

import argparse
import contextlib
import sys
from typing import Iterator, TextIO

from tinytetris.game import game_loop
from tinytetris.graphics import Canvas, init_gfx

WELCOME = "Welcome to TinyTetris.\nLaunching the game..."


class _ConsoleOutput:
    """Writes to whatever ``sys.stdout`` is at the time of the call."""

    def write(self, text: str) -> int:
        return sys.stdout.write(text)

    def flush(self) -> None:
        sys.stdout.flush()


@contextlib.contextmanager
def _cbreak(stream: TextIO) -> Iterator[None]:
    """Put a terminal into character-at-a-time mode for the duration."""
    try:
        interactive = stream.isatty()
    except (AttributeError, ValueError):
        interactive = False
    if not interactive:
        yield
        return
    try:
        import termios
        import tty
    except ImportError:
        yield
        return
    fd = stream.fileno()
    saved = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


def _parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        prog="tinytetris",
        description="Play a small falling-block puzzle game in the terminal.",
    )


def main(argv: list[str] | None = None) -> int:
    """Greet the player, set up the display and run the game until interrupted."""
    _parser().parse_args(argv)
    print(WELCOME)
    init_gfx(Canvas(output=_ConsoleOutput()))
    try:
        with _cbreak(sys.stdin):
            game_loop(sys.stdin.buffer)
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())