from __future__ import annotations

from typing import Protocol

from .grid import TileColor


class RenderSink(Protocol):
    """Where the engine pushes changed cells.

    Implementations wrap their own failures in ``RenderError``.
    """

    def draw_cell(self, x: int, y: int, color: TileColor) -> None: ...

    def flush(self) -> None: ...


class NullRenderSink:
    def draw_cell(self, x: int, y: int, color: TileColor) -> None:
        pass

    def flush(self) -> None:
        pass
