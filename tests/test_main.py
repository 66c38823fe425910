import sys

import pytest

from tinytetris.graphics import Rgb, graphics
from tinytetris.main import main


class _FakeBuffer:
    """Hands out the given chunks, then interrupts the game."""

    def __init__(self, chunks):
        self._chunks = list(chunks)

    def read1(self, size=-1):
        if not self._chunks:
            raise KeyboardInterrupt
        return self._chunks.pop(0)


class _FakeStdin:
    def __init__(self, chunks):
        self.buffer = _FakeBuffer(chunks)

    def isatty(self):
        return False


def _run(monkeypatch, chunks):
    monkeypatch.setattr(sys, "stdin", _FakeStdin(chunks))
    return main([])


def test_main_greets_and_returns_zero(monkeypatch, capsys):
    status = _run(monkeypatch, [])
    out = capsys.readouterr().out
    assert status == 0
    assert "Welcome to TinyTetris.\nLaunching the game..." in out
    assert "starting up..." in out


def test_main_draws_board_border_and_first_piece(monkeypatch, capsys):
    _run(monkeypatch, [])
    canvas = graphics()
    assert canvas.pixel(297, 150) == Rgb.WHITE
    assert canvas.pixel(405, 105) == Rgb.RED
    assert canvas.pixel(350, 250) == Rgb.BLACK


def test_main_moves_piece_left_on_arrow_key(monkeypatch, capsys):
    status = _run(monkeypatch, [b"\x1b[D"])
    canvas = graphics()
    assert status == 0
    assert canvas.pixel(395, 115) == Rgb.RED
    assert canvas.pixel(405, 115) == Rgb.BLACK


def test_main_rejects_unknown_option(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", _FakeStdin([]))
    with pytest.raises(SystemExit) as info:
        main(["--no-such-option"])
    assert info.value.code == 2


def test_main_help_exits_cleanly(capsys):
    with pytest.raises(SystemExit) as info:
        main(["--help"])
    assert info.value.code == 0
    assert "tinytetris" in capsys.readouterr().out