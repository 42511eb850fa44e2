from __future__ import annotations

from typing import Dict, Tuple

from blockfall.game import TileColor


PALETTE: Dict[TileColor, Tuple[int, int, int]] = {
    TileColor.EMPTY: (20, 20, 26),
    TileColor.WALL: (90, 90, 100),
    TileColor.YELLOW: (240, 240, 0),   # O
    TileColor.GREEN: (0, 240, 0),      # S
    TileColor.RED: (240, 0, 0),        # Z
    TileColor.PURPLE: (160, 0, 240),   # T
    TileColor.ORANGE: (240, 160, 0),   # L
    TileColor.BLUE: (0, 0, 240),       # J
    TileColor.CYAN: (0, 240, 240),     # I
}


def color_for_tile(v: int) -> Tuple[int, int, int]:
    return PALETTE.get(v, (200, 200, 200))
