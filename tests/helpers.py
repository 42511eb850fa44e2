from __future__ import annotations

from typing import List, Tuple

from blockfall.game import Engine, GameConfig, RenderError, TileColor


class RecordingSink:
    def __init__(self) -> None:
        self.draws: List[Tuple[int, int, TileColor]] = []
        self.flushes = 0

    def draw_cell(self, x: int, y: int, color: TileColor) -> None:
        self.draws.append((x, y, color))

    def flush(self) -> None:
        self.flushes += 1


class FailingSink:
    def draw_cell(self, x: int, y: int, color: TileColor) -> None:
        raise RenderError("display lost")

    def flush(self) -> None:
        raise RenderError("display lost")


def make_engine(**kwargs) -> Engine:
    return Engine(GameConfig(random_seed=0), **kwargs)


def fill_row(engine: Engine, y: int, skip=(), color: TileColor = TileColor.RED) -> None:
    """Settle every interior cell of row ``y`` except the columns in ``skip``."""
    for x in engine.grid.interior_columns:
        if x not in skip:
            engine.grid.set_unconditional(x, y, color, True)


def piece_cells_in_grid(engine: Engine) -> set:
    """Occupied cells that are not settled: the active piece as the grid sees it."""
    grid = engine.grid
    return {
        (x, y)
        for x, y, color in grid.cells()
        if color != TileColor.EMPTY and not grid.locked[y, x]
    }
