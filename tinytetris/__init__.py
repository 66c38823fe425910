"""A tiny falling-blocks puzzle game: key decoding, an RGB canvas and the game rules."""

__version__ = "0.1.0"