"""The falling-block game: pieces, the board state and the main loop."""

from __future__ import annotations

import copy
import random
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, Callable

from tinytetris.graphics import Point, Rectangle, Rgb, Size, Style, graphics
from tinytetris.interface import KeyCode, KeyKind, query_keyboard_once

X_ANCHOR = 300
Y_ANCHOR = 100
MAX_X = 500
MAX_Y = 300

GRANULE_SIZE = 10
LINES = (MAX_Y - Y_ANCHOR) // GRANULE_SIZE
COLS = (MAX_X - X_ANCHOR) // GRANULE_SIZE

_SPAWN_X = X_ANCHOR + (MAX_X - X_ANCHOR) // 2

_RNG = random.Random(42)


def _trunc_div(a: int, b: int) -> int:
    """Integer division rounding towards zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


def _trunc_rem(a: int, b: int) -> int:
    """Remainder whose sign follows the dividend."""
    return a - b * _trunc_div(a, b)


def _row_of(element: PrimitiveBox) -> int:
    return _trunc_div(element.top_left().y - Y_ANCHOR, GRANULE_SIZE)


def _col_of(element: PrimitiveBox) -> int:
    return _trunc_div(element.top_left().x - X_ANCHOR, GRANULE_SIZE)


def is_blocked(element: PrimitiveBox, heights: list[int]) -> bool:
    """Whether the element rests on the stack (or the floor) below it."""
    return (
        element.top_left().y + element.inner.size.height
        >= MAX_Y - heights[_col_of(element)] * GRANULE_SIZE
    )


def would_be_blocked(element: PrimitiveBox, heights: list[int]) -> bool:
    """Whether the element overlaps the stack in its column."""
    return element.top_left().y >= MAX_Y - heights[_col_of(element)] * GRANULE_SIZE


def snap_to_grid(point: Point, scaler: int) -> Point:
    """Return ``point`` moved onto the grid; ``scaler`` sets the rounding threshold."""
    threshold = _trunc_div(GRANULE_SIZE, scaler)
    x, y = point.x, point.y
    dx = _trunc_rem(x, GRANULE_SIZE)
    dy = _trunc_rem(y, GRANULE_SIZE)
    x = x - dx if dx < threshold else x + GRANULE_SIZE - dx
    y = y - dy if dy < threshold else y + GRANULE_SIZE - dy
    return Point(x, y)


def _block_style(color: Rgb) -> Style:
    return Style(fill_color=color, stroke_color=color)


@dataclass(init=False)
class PrimitiveBox:
    """A single grid cell of a piece."""

    inner: Rectangle
    style: Style

    def __init__(self, x: int = 0, y: int = 0, color: Rgb = Rgb.WHITE) -> None:
        self.inner = Rectangle(Point(x, y), Size(GRANULE_SIZE, GRANULE_SIZE))
        self.style = _block_style(color)

    def is_in_bounds(self) -> bool:
        tl = self.inner.top_left
        return (
            tl.x >= X_ANCHOR
            and tl.x + self.inner.size.width <= MAX_X
            and tl.y >= Y_ANCHOR
            and tl.y + self.inner.size.height <= MAX_Y
        )

    def left(self) -> bool:
        self.inner.top_left.x -= GRANULE_SIZE
        return True

    def right(self) -> bool:
        self.inner.top_left.x += GRANULE_SIZE
        return True

    def down(self) -> bool:
        self.inner.top_left.y += GRANULE_SIZE
        return True

    def draw(self) -> None:
        graphics().draw_rectangle(self.inner, self.style)

    def top_left(self) -> Point:
        return Point(self.inner.top_left.x, self.inner.top_left.y)

    def bounding_box(self) -> Rectangle:
        return self.inner.bounding_box()


BoxPredicate = Callable[[PrimitiveBox], bool]


@dataclass
class Shape:
    """A group of boxes that move together around a pivot."""

    elements: list[PrimitiveBox] = field(default_factory=list)
    pivot: Point | None = None

    def __post_init__(self) -> None:
        if self.pivot is None:
            self.pivot = Point()
            self.recompute_pivot()

    def _clone(self) -> Shape:
        return copy.deepcopy(self)

    def _adopt(self, other: Shape) -> None:
        self.elements = other.elements
        self.pivot = other.pivot

    def extreme(
        self,
        cmp: Callable[[PrimitiveBox, PrimitiveBox], bool],
        stop: BoxPredicate,
    ) -> PrimitiveBox | None:
        """Scan the elements, switching to one whenever ``cmp`` prefers it.

        The scan ends early once the current element satisfies ``stop``.
        """
        if not self.elements:
            return None
        current = self.elements[0]
        for element in self.elements[1:]:
            if stop(current):
                break
            if cmp(current, element):
                current = element
        return current

    def leftmost(self) -> PrimitiveBox | None:
        return self.extreme(
            lambda lhs, rhs: rhs.top_left().x < lhs.top_left().x,
            lambda e: e.top_left().x == X_ANCHOR,
        )

    def rightmost(self) -> PrimitiveBox | None:
        return self.extreme(
            lambda lhs, rhs: rhs.top_left().x > lhs.top_left().x,
            lambda e: e.top_left().x + e.bounding_box().size.width == MAX_X,
        )

    def lowest(self) -> PrimitiveBox | None:
        return self.extreme(
            lambda lhs, rhs: rhs.top_left().y > lhs.top_left().y,
            lambda e: e.top_left().y + e.bounding_box().size.height == MAX_Y,
        )

    def highest(self) -> PrimitiveBox | None:
        return self.extreme(
            lambda lhs, rhs: rhs.top_left().y < lhs.top_left().y,
            lambda e: e.top_left().y == Y_ANCHOR,
        )

    def merge(self, other: Shape) -> None:
        self.elements.extend(other.elements)

    def split_at_y(self, y: int) -> Shape | None:
        """Remove and return the elements at or above ``y``; None if there are none."""
        above = [e for e in self.elements if e.top_left().y <= y]
        if not above:
            return None
        self.elements = [e for e in self.elements if e.top_left().y > y]
        return Shape(above, Point())

    def remove(self, condition: BoxPredicate) -> None:
        self.elements = [e for e in self.elements if not condition(e)]

    def recompute_pivot(self) -> None:
        self.pivot = snap_to_grid(self.bounding_box().center(), 1)

    def rotate_clockwise(self, blocked: BoxPredicate) -> bool:
        return self.rotate(blocked, -1, 1)

    def rotate_counterclockwise(self, blocked: BoxPredicate) -> bool:
        return self.rotate(blocked, 1, -1)

    def rotate(self, blocked: BoxPredicate, x_mul: int, y_mul: int) -> bool:
        """Rotate a quarter turn about the pivot unless a cell leaves the board or is blocked."""
        factor = 2
        cx, cy = self.pivot.x * factor, self.pivot.y * factor
        rotated = self._clone()
        for element in rotated.elements:
            tl = element.inner.top_left
            x = tl.x * factor - cx
            y = tl.y * factor - cy
            snapped = snap_to_grid(Point(x_mul * y + cx, y_mul * x + cy), factor)
            tl.x = _trunc_div(snapped.x, factor)
            tl.y = _trunc_div(snapped.y, factor)
            if not element.is_in_bounds() or blocked(element):
                return False
            if tl.x % GRANULE_SIZE or tl.y % GRANULE_SIZE:
                raise AssertionError(f"rotated cell off the grid at ({tl.x}, {tl.y})")
        self.elements = rotated.elements
        return True

    def left_checked(self, blocked: Callable[[Shape], bool]) -> bool:
        moved = self._clone()
        if not moved.left() or blocked(moved):
            return False
        self._adopt(moved)
        return True

    def right_checked(self, blocked: Callable[[Shape], bool]) -> bool:
        moved = self._clone()
        if not moved.right() or blocked(moved):
            return False
        self._adopt(moved)
        return True

    def left(self) -> bool:
        leftmost = self.leftmost()
        if leftmost is None or leftmost.top_left().x <= X_ANCHOR:
            return False
        self.pivot.x -= GRANULE_SIZE
        for element in self.elements:
            element.left()
        return True

    def right(self) -> bool:
        rightmost = self.rightmost()
        if rightmost is None or rightmost.top_left().x + rightmost.bounding_box().size.width >= MAX_X:
            return False
        self.pivot.x += GRANULE_SIZE
        for element in self.elements:
            element.right()
        return True

    def down(self) -> bool:
        lowest = self.lowest()
        if lowest is None or lowest.top_left().y + lowest.bounding_box().size.height >= MAX_Y:
            return False
        self.pivot.y += GRANULE_SIZE
        for element in self.elements:
            element.down()
        return True

    def draw(self) -> None:
        for element in self.elements:
            element.draw()

    def bounding_box(self) -> Rectangle:
        lowest, rightmost = self.lowest(), self.rightmost()
        leftmost, highest = self.leftmost(), self.highest()
        if lowest is None or rightmost is None or leftmost is None or highest is None:
            return Rectangle()
        left_x, top_y = leftmost.top_left().x, highest.top_left().y
        return Rectangle(
            Point(left_x, top_y),
            Size(
                rightmost.top_left().x + rightmost.bounding_box().size.width - left_x,
                lowest.top_left().y + lowest.bounding_box().size.height - top_y,
            ),
        )

    def top_left(self) -> Point:
        return self.bounding_box().top_left


class ShapeBuilder:
    """Builds the standard pieces at their spawn position."""

    def __init__(self, inner: Shape) -> None:
        self.inner = inner

    @classmethod
    def _from_cells(cls, cells: list[tuple[int, int]], color: Rgb) -> ShapeBuilder:
        return cls(
            Shape(
                [
                    PrimitiveBox(_SPAWN_X + dx * GRANULE_SIZE, Y_ANCHOR + dy * GRANULE_SIZE, color)
                    for dx, dy in cells
                ]
            )
        )

    @classmethod
    def long(cls) -> ShapeBuilder:
        return cls._from_cells([(0, 3), (0, 2), (0, 1), (0, 0)], Rgb.RED)

    @classmethod
    def quad(cls) -> ShapeBuilder:
        return cls._from_cells([(0, 1), (1, 1), (0, 0), (1, 0)], Rgb.GREEN)

    @classmethod
    def t(cls) -> ShapeBuilder:
        return cls._from_cells([(0, 1), (1, 1), (-1, 1), (0, 0)], Rgb.MAGENTA)

    @classmethod
    def z(cls) -> ShapeBuilder:
        return cls._from_cells([(1, 1), (2, 1), (0, 0), (1, 0)], Rgb.BLUE)

    @classmethod
    def l(cls) -> ShapeBuilder:  # noqa: E743
        return cls._from_cells([(0, 2), (1, 2), (0, 1), (0, 0)], Rgb.YELLOW)

    def build(self) -> Shape:
        return self.inner

    def with_color(self, color: Rgb) -> ShapeBuilder:
        for element in self.inner.elements:
            element.style = _block_style(color)
        return self


_PIECES = (ShapeBuilder.long, ShapeBuilder.quad, ShapeBuilder.t, ShapeBuilder.z, ShapeBuilder.l)


class GameState:
    """The board: settled cells, the falling piece, column heights and the score."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else _RNG
        self._reset()

    def _reset(self) -> None:
        print("starting up...")
        self.redraw()
        first = ShapeBuilder.long().build()
        first.draw()
        graphics().flush()
        self.score = 0
        self.line_counts = [0] * LINES
        self.heights = [0] * COLS
        self.settled_piece = Shape()
        self.falling_piece = first

    def _shape_blocked(self, shape: Shape) -> bool:
        return any(would_be_blocked(e, self.heights) for e in shape.elements)

    def _box_blocked(self, element: PrimitiveBox) -> bool:
        return would_be_blocked(element, self.heights)

    def next_piece(self) -> None:
        self.falling_piece = _PIECES[self._rng.randrange(len(_PIECES))]().build()

    def handle_input(self, key: KeyCode | None) -> None:
        piece = self.falling_piece
        if key is None or key.kind is KeyKind.ARROW_DOWN:
            piece.down()
        elif key.kind is KeyKind.ARROW_LEFT:
            piece.left_checked(self._shape_blocked)
        elif key.kind is KeyKind.ARROW_RIGHT:
            piece.right_checked(self._shape_blocked)
        elif key.kind is KeyKind.CHAR and key.char == "k":
            piece.rotate_counterclockwise(self._box_blocked)
        elif key.kind is KeyKind.CHAR and key.char == "l":
            piece.rotate_clockwise(self._box_blocked)

    def redraw(self) -> None:
        graphics().draw_rectangle(
            Rectangle(Point(X_ANCHOR, Y_ANCHOR), Size(MAX_X - X_ANCHOR, MAX_Y - Y_ANCHOR)),
            Style(
                fill_color=Rgb.BLACK,
                stroke_color=Rgb.WHITE,
                stroke_width=4,
                stroke_alignment="outside",
            ),
        )

    def validate(self) -> None:
        """Settle the falling piece if it has landed, then repaint the board."""
        self.redraw()
        if any(is_blocked(e, self.heights) for e in self.falling_piece.elements):
            self.handle_collision()
            self.next_piece()
        self.settled_piece.draw()
        self.falling_piece.draw()
        graphics().flush()

    def handle_collision(self) -> None:
        full: list[int] = []
        for element in self.falling_piece.elements:
            row, col = _row_of(element), _col_of(element)
            if row <= 1:
                self.restart()
                return
            self.heights[col] = LINES - row
            self.line_counts[row] += 1
            if self.line_counts[row] >= COLS:
                full.append(row)
                self.line_counts[row] = 0

        self.settled_piece.merge(copy.deepcopy(self.falling_piece))
        if full:
            self.clear_lines(sorted(full))

    def clear_lines(self, lines: list[int]) -> None:
        """Remove the given rows (sorted top to bottom) and drop everything above."""
        self.settled_piece.remove(lambda e: _row_of(e) in lines)

        dropped: list[Shape] = []
        for i, line in enumerate(lines):
            falling = self.settled_piece.split_at_y(line * GRANULE_SIZE + Y_ANCHOR)
            if falling is None:
                continue
            for _ in range(len(lines) - i):
                falling.down()
            dropped.append(falling)
        for falling in dropped:
            self.settled_piece.merge(falling)

        drop_amounts = [0] * LINES
        for line in lines:
            for row in range(line):
                drop_amounts[row] += 1
        for source in reversed(range(LINES)):
            if drop_amounts[source] > 0:
                target = source + drop_amounts[source]
                self.line_counts[target] = self.line_counts[source]
                self.line_counts[source] = 0

        self.calculate_heights()
        self.score += len(lines) * COLS

    def calculate_heights(self) -> None:
        for col in range(COLS):
            x = col * GRANULE_SIZE + X_ANCHOR
            top = self.settled_piece.extreme(
                lambda lhs, rhs, x=x: rhs.top_left().x == x
                and (rhs.top_left().y < lhs.top_left().y or lhs.top_left().x != x),
                lambda e, x=x: e.top_left().x == x and e.top_left().y == Y_ANCHOR,
            )
            if top is None or top.top_left().x != x:
                top_most = LINES
            else:
                top_most = _row_of(top)
            self.heights[col] = LINES - top_most

    def restart(self) -> None:
        print(f"You lost the game with {self.score} points. Restarting...", file=sys.stderr)
        self._reset()


def game_loop(stream: BinaryIO | None = None) -> None:
    """Run the game forever, reading keys from ``stream``."""
    state = GameState()
    while True:
        codes = query_keyboard_once(stream)
        state.handle_input(codes[0] if codes else None)
        state.validate()