from __future__ import annotations

from dataclasses import dataclass

from .grid import GameGrid


@dataclass
class Score:
    """Session score: one point per cleared row, never decreasing."""

    value: int = 0

    def add_rows(self, rows: int) -> int:
        if rows < 0:
            raise ValueError("score can only increase")
        self.value += rows
        return self.value


def top_rows_settled(grid: GameGrid, rows: int) -> bool:
    """True when a settled cell sits anywhere in the top ``rows`` interior rows."""
    cols = grid.interior_columns
    return bool(grid.locked[:rows, cols.start:cols.stop].any())
