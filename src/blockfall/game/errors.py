from __future__ import annotations


class EngineError(Exception):
    """Base class for errors raised by the falling-block engine."""


class RenderError(EngineError):
    """A render sink failed to draw or present cells.

    The logical grid write has already happened when this is raised.
    """


class OutOfBoundsError(EngineError, IndexError):
    """A cell coordinate falls outside the grid."""

    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        super().__init__(f"cell ({x}, {y}) outside {width}x{height} grid")
        self.x = x
        self.y = y


class SpawnBlockedError(EngineError):
    """The spawn position overlaps a settled cell or a wall."""
