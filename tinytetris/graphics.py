"""A small raster canvas with rectangle drawing and a shared instance."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TextIO

_ALIGNMENTS = ("inside", "center", "outside")


@dataclass(frozen=True)
class Rgb:
    """A 24-bit colour."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= 255:
                raise ValueError(f"colour channel out of range: {channel}")


Rgb.BLACK = Rgb(0, 0, 0)
Rgb.WHITE = Rgb(255, 255, 255)
Rgb.RED = Rgb(255, 0, 0)
Rgb.GREEN = Rgb(0, 255, 0)
Rgb.BLUE = Rgb(0, 0, 255)
Rgb.MAGENTA = Rgb(255, 0, 255)
Rgb.YELLOW = Rgb(255, 255, 0)


@dataclass
class Point:
    """A position in pixels."""

    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class Size:
    """A width and height in pixels."""

    width: int = 0
    height: int = 0

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"size must not be negative: {self.width}x{self.height}")


@dataclass
class Rectangle:
    """An axis-aligned rectangle given by its top-left corner and size."""

    top_left: Point = field(default_factory=Point)
    size: Size = field(default_factory=Size)

    def center(self) -> Point:
        """The centre point, rounded towards the top-left."""
        return Point(
            self.top_left.x + max(self.size.width - 1, 0) // 2,
            self.top_left.y + max(self.size.height - 1, 0) // 2,
        )

    def bounding_box(self) -> Rectangle:
        """A copy of this rectangle."""
        return Rectangle(Point(self.top_left.x, self.top_left.y), self.size)

    def _grown(self, amount: int) -> tuple[int, int, int, int]:
        x0 = self.top_left.x - amount
        y0 = self.top_left.y - amount
        x1 = self.top_left.x + self.size.width + amount
        y1 = self.top_left.y + self.size.height + amount
        return x0, y0, max(x1, x0), max(y1, y0)


@dataclass(frozen=True)
class Style:
    """How a rectangle is filled and outlined."""

    fill_color: Rgb | None = None
    stroke_color: Rgb | None = None
    stroke_width: int = 0
    stroke_alignment: str = "inside"

    def __post_init__(self) -> None:
        if self.stroke_alignment not in _ALIGNMENTS:
            raise ValueError(f"unknown stroke alignment: {self.stroke_alignment!r}")
        if self.stroke_width < 0:
            raise ValueError("stroke width must not be negative")


class Canvas:
    """A frame buffer that can be rendered to a terminal on flush."""

    def __init__(
        self,
        width: int = 640,
        height: int = 400,
        background: Rgb = Rgb.BLACK,
        output: TextIO | None = None,
        scale: int = 10,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("canvas dimensions must be positive")
        if scale <= 0:
            raise ValueError("scale must be positive")
        self.width = width
        self.height = height
        self.output = output
        self.scale = scale
        self._pixels = [[background] * width for _ in range(height)]
        self._lock = threading.Lock()

    def draw_rectangle(self, rectangle: Rectangle, style: Style) -> None:
        """Draw a styled rectangle, clipped to the canvas."""
        width = style.stroke_width if style.stroke_color is not None else 0
        if style.stroke_alignment == "outside":
            outer, inner = rectangle._grown(width), rectangle._grown(0)
        elif style.stroke_alignment == "center":
            outer, inner = rectangle._grown(width // 2), rectangle._grown(-(width - width // 2))
        else:
            outer, inner = rectangle._grown(0), rectangle._grown(-width)
        ox0, oy0, ox1, oy1 = outer
        ix0, iy0, ix1, iy1 = inner
        with self._lock:
            for y in range(max(oy0, 0), min(oy1, self.height)):
                row = self._pixels[y]
                for x in range(max(ox0, 0), min(ox1, self.width)):
                    if ix0 <= x < ix1 and iy0 <= y < iy1:
                        color = style.fill_color
                    else:
                        color = style.stroke_color
                    if color is not None:
                        row[x] = color

    def pixel(self, x: int, y: int) -> Rgb:
        """The colour at ``(x, y)``."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside the canvas")
        return self._pixels[y][x]

    def flush(self) -> None:
        """Render the canvas to the output stream, one cell per ``scale`` pixels."""
        if self.output is None:
            return
        half = self.scale // 2
        lines = ["\x1b[H"]
        with self._lock:
            for cy in range(self.height // self.scale):
                row = self._pixels[cy * self.scale + half]
                cells = (
                    f"\x1b[48;2;{c.r};{c.g};{c.b}m  "
                    for c in (row[cx * self.scale + half] for cx in range(self.width // self.scale))
                )
                lines.append("".join(cells) + "\x1b[0m\n")
        self.output.write("".join(lines))
        if hasattr(self.output, "flush"):
            self.output.flush()


_GRAPHICS: Canvas | None = None
_INIT_LOCK = threading.Lock()


def init_gfx(canvas: Canvas | None = None) -> Canvas:
    """Install the shared canvas once; later calls keep the first one."""
    global _GRAPHICS
    with _INIT_LOCK:
        if _GRAPHICS is None:
            _GRAPHICS = canvas if canvas is not None else Canvas()
        return _GRAPHICS


def graphics() -> Canvas:
    """The shared canvas installed by :func:`init_gfx`."""
    if _GRAPHICS is None:
        raise RuntimeError("graphics have not been initialised")
    return _GRAPHICS