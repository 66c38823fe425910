[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tinytetris"
version = "0.1.0"
description = "A tiny falling-blocks puzzle game rendered in the terminal and driven by raw key presses"
requires-python = ">=3.10"
dependencies = []
keywords = ["tetris", "game", "puzzle", "terminal", "blocks"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Puzzle Games",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tinytetris = "tinytetris.main:main"

[tool.hatch.build.targets.wheel]
packages = ["tinytetris"]

[tool.pytest.ini_options]
addopts = "-ra"
