from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Iterable, Optional, Tuple

import numpy as np

from .errors import OutOfBoundsError


Coordinate = Tuple[int, int]
ChangeCallback = Callable[[int, int, "TileColor"], None]


class TileColor(IntEnum):
    EMPTY = 0
    WALL = 1
    YELLOW = 2
    GREEN = 3
    RED = 4
    PURPLE = 5
    ORANGE = 6
    BLUE = 7
    CYAN = 8


@dataclass(frozen=True)
class Cell:
    color: TileColor
    locked: bool


class GameGrid:
    """Fixed-size 2D grid of cells with walls on three sides.

    Two arrays back the grid: ``colors`` holds a TileColor per cell and
    ``locked`` marks settled cells (walls and landed pieces). Settled cells
    block movement and are skipped by the guarded :meth:`set`. Cells of the
    falling piece are occupied but unlocked.

    Arrays are indexed ``[y, x]``; the public methods take ``(x, y)``.
    """

    def __init__(self, width: int, height: int, wall_width: int = 2,
                 on_change: Optional[ChangeCallback] = None) -> None:
        self.width = int(width)
        self.height = int(height)
        self.wall_width = int(wall_width)
        if self.width <= 2 * self.wall_width or self.height < 2:
            raise ValueError(f"grid {self.width}x{self.height} has no interior")
        self.on_change = on_change
        self.colors = np.zeros((self.height, self.width), dtype=np.int8)
        self.locked = np.zeros((self.height, self.width), dtype=np.bool_)
        self._build_walls()

    def _build_walls(self) -> None:
        w = self.wall_width
        for mask in (np.s_[:, :w], np.s_[:, self.width - w:], np.s_[self.height - 1, :]):
            self.colors[mask] = TileColor.WALL
            self.locked[mask] = True

    @property
    def interior_columns(self) -> range:
        return range(self.wall_width, self.width - self.wall_width)

    @property
    def floor_row(self) -> int:
        return self.height - 1

    def _check(self, x: int, y: int) -> None:
        if not self.is_inside(x, y):
            raise OutOfBoundsError(x, y, self.width, self.height)

    def _notify(self, x: int, y: int) -> None:
        if self.on_change is not None:
            self.on_change(x, y, TileColor(int(self.colors[y, x])))

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_interior(self, x: int, y: int) -> bool:
        return x in self.interior_columns and 0 <= y < self.floor_row

    def get(self, x: int, y: int) -> Optional[Cell]:
        self._check(x, y)
        color = TileColor(int(self.colors[y, x]))
        if color == TileColor.EMPTY:
            return None
        return Cell(color, bool(self.locked[y, x]))

    def is_blocked(self, x: int, y: int) -> bool:
        self._check(x, y)
        return bool(self.locked[y, x])

    def any_blocked(self, cells: Iterable[Coordinate]) -> bool:
        return any(self.is_blocked(x, y) for x, y in cells)

    def set(self, x: int, y: int, color: TileColor) -> bool:
        """Write ``color`` unless the cell is settled. Returns whether it wrote."""
        self._check(x, y)
        if self.locked[y, x]:
            return False
        self.colors[y, x] = color
        self._notify(x, y)
        return True

    def set_unconditional(self, x: int, y: int, color: TileColor, locked: bool = False) -> None:
        self._check(x, y)
        self.colors[y, x] = color
        self.locked[y, x] = locked
        self._notify(x, y)

    def set_locked(self, x: int, y: int, locked: bool) -> None:
        self._check(x, y)
        self.locked[y, x] = locked

    def is_row_full(self, y: int) -> bool:
        if not 0 <= y < self.floor_row:
            return False
        cols = self.interior_columns
        return bool(np.all(self.colors[y, cols.start:cols.stop] != TileColor.EMPTY))

    def collapse_row(self, row: int) -> None:
        """Remove interior ``row`` and shift every interior row above it down by one."""
        for y in range(row, 0, -1):
            for x in self.interior_columns:
                above = TileColor(int(self.colors[y - 1, x]))
                self.set_unconditional(x, y, above, bool(self.locked[y - 1, x]))
        for x in self.interior_columns:
            self.set_unconditional(x, 0, TileColor.EMPTY, False)

    def count_occupied(self, rows: Optional[slice] = None) -> int:
        cols = self.interior_columns
        view = self.colors[rows if rows is not None else slice(0, self.floor_row), cols.start:cols.stop]
        return int(np.count_nonzero(view))

    def cells(self) -> Iterable[Tuple[int, int, TileColor]]:
        for y in range(self.height):
            for x in range(self.width):
                yield x, y, TileColor(int(self.colors[y, x]))

    def clone_state(self) -> np.ndarray:
        return self.colors.copy()
