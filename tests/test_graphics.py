import io

import pytest

from tinytetris import graphics as gfx
from tinytetris.graphics import (
    Canvas,
    Point,
    Rectangle,
    Rgb,
    Size,
    Style,
    graphics,
    init_gfx,
)


def test_rgb_rejects_out_of_range():
    with pytest.raises(ValueError):
        Rgb(256, 0, 0)


def test_size_rejects_negative():
    with pytest.raises(ValueError):
        Size(-1, 5)


def test_style_rejects_unknown_alignment():
    with pytest.raises(ValueError):
        Style(stroke_alignment="diagonal")


def test_rectangle_center():
    rect = Rectangle(Point(300, 100), Size(10, 40))
    assert rect.center() == Point(304, 119)


def test_bounding_box_is_equal_copy():
    rect = Rectangle(Point(3, 4), Size(5, 6))
    box = rect.bounding_box()
    assert box == rect
    box.top_left.x = 99
    assert rect.top_left.x == 3


def test_fill_rectangle():
    canvas = Canvas(50, 50)
    canvas.draw_rectangle(Rectangle(Point(10, 10), Size(10, 10)), Style(fill_color=Rgb.RED))
    assert canvas.pixel(10, 10) == Rgb.RED
    assert canvas.pixel(19, 19) == Rgb.RED
    assert canvas.pixel(20, 20) == Rgb.BLACK
    assert canvas.pixel(9, 10) == Rgb.BLACK


def test_outside_stroke():
    canvas = Canvas(50, 50)
    style = Style(
        fill_color=Rgb.BLACK,
        stroke_color=Rgb.WHITE,
        stroke_width=4,
        stroke_alignment="outside",
    )
    canvas.draw_rectangle(Rectangle(Point(10, 10), Size(20, 20)), style)
    assert canvas.pixel(9, 15) == Rgb.WHITE
    assert canvas.pixel(6, 15) == Rgb.WHITE
    assert canvas.pixel(5, 15) == Rgb.BLACK
    assert canvas.pixel(10, 15) == Rgb.BLACK


def test_stroke_without_width_only_fills():
    canvas = Canvas(30, 30)
    style = Style(fill_color=Rgb.GREEN, stroke_color=Rgb.BLUE)
    canvas.draw_rectangle(Rectangle(Point(5, 5), Size(10, 10)), style)
    assert canvas.pixel(5, 5) == Rgb.GREEN
    assert canvas.pixel(14, 14) == Rgb.GREEN


def test_inside_stroke_without_fill_keeps_interior():
    canvas = Canvas(30, 30, background=Rgb.YELLOW)
    style = Style(stroke_color=Rgb.MAGENTA, stroke_width=2)
    canvas.draw_rectangle(Rectangle(Point(5, 5), Size(10, 10)), style)
    assert canvas.pixel(5, 5) == Rgb.MAGENTA
    assert canvas.pixel(6, 10) == Rgb.MAGENTA
    assert canvas.pixel(10, 10) == Rgb.YELLOW


def test_drawing_is_clipped():
    canvas = Canvas(20, 20)
    canvas.draw_rectangle(Rectangle(Point(15, 15), Size(10, 10)), Style(fill_color=Rgb.RED))
    assert canvas.pixel(19, 19) == Rgb.RED


def test_pixel_out_of_bounds():
    canvas = Canvas(10, 10)
    with pytest.raises(IndexError):
        canvas.pixel(10, 0)


def test_flush_writes_one_line_per_cell_row():
    out = io.StringIO()
    canvas = Canvas(20, 20, output=out, scale=10)
    canvas.flush()
    text = out.getvalue()
    assert text.startswith("\x1b[H")
    assert text.count("\n") == 2


def test_flush_without_output_is_silent():
    canvas = Canvas(20, 20)
    canvas.flush()
    assert canvas.pixel(0, 0) == Rgb.BLACK


def test_graphics_before_init_raises(monkeypatch):
    monkeypatch.setattr(gfx, "_GRAPHICS", None)
    with pytest.raises(RuntimeError):
        graphics()


def test_init_gfx_is_once(monkeypatch):
    monkeypatch.setattr(gfx, "_GRAPHICS", None)
    first = Canvas(10, 10)
    second = Canvas(10, 10)
    assert init_gfx(first) is first
    assert init_gfx(second) is first
    assert graphics() is first