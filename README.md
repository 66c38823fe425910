# tinytetris

A small falling-blocks puzzle game for the terminal. The playing field is
a 20 × 20 grid drawn onto an in-memory RGB canvas, which is rendered to
standard output with 24-bit colour escape sequences. Input is read as raw
key presses from standard input.

## Installing

```
pip install .
```

To run the test suite, install the test extra and run pytest:

```
pip install .[test]
pytest
```

## Playing

```
tinytetris
```

The command prints a greeting and starts the first piece. When standard
input is a terminal on a system with `termios`, it is switched to
character-at-a-time mode for the length of the game and restored
afterwards. Press Ctrl-C to quit.

Each read from standard input takes up to 10 bytes, and only the first
key decoded from them is acted on. After every read the board is checked
and repainted.

| Key         | Action                          |
|-------------|---------------------------------|
| Left arrow  | move the piece one column left  |
| Right arrow | move the piece one column right |
| Down arrow  | move the piece one row down     |
| `k`         | rotate counterclockwise         |
| `l`         | rotate clockwise                |

When a read returns no key at all (for example at the end of input) the
piece also moves one row down. Other keys, including Up and Esc, do
nothing.

A full row is cleared and everything above it moves down. Each cleared
row is worth one point for every column in it. When a piece settles in
one of the top two rows the game is lost: the score is printed to
standard error and a new game begins.

Pieces come in five shapes: long, quad, T, Z and L. Every game starts
with a long piece; the pieces after it are drawn from a random generator
seeded with a fixed value, so each run of the program produces the same
sequence.

## What it does not do

- Pieces do not fall on a timer: reading input waits for key presses, so
  the game only advances when input arrives.
- Esc opens no menu and there is no pause; the game runs until
  interrupted.
- Scores are not stored anywhere.

## Using it as a library

The building blocks can be used on their own:

- `tinytetris.interface` turns raw terminal bytes into key codes:
  `parse_ansi`, `parse_escaped`, `query_keyboard_once`, `KeyCode` and
  `KeyKind`.
- `tinytetris.graphics` provides a simple RGB canvas (`Canvas` with
  `draw_rectangle`, `pixel` and `flush`, plus `Rectangle`, `Point`,
  `Size`, `Style` and `Rgb`), and `init_gfx` and `graphics` to install
  and fetch the shared canvas.
- `tinytetris.game` holds the pieces (`PrimitiveBox`, `Shape`,
  `ShapeBuilder`), the game rules (`GameState`) and `game_loop`, which
  reads keys from a given binary stream.
- `tinytetris.main.main` is the function behind the `tinytetris` command.