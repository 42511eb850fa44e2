from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, FrozenSet, List, Tuple

from .grid import TileColor


class PieceKind(IntEnum):
    O = 0
    S = 1
    Z = 2
    T = 3
    L = 4
    J = 5
    I = 6


Offset = Tuple[int, int]  # (row, col) inside the 4x4 box
Delta = Tuple[Tuple[Offset, ...], Tuple[Offset, ...]]  # (erase, draw)

ROTATION_STATES = 4

PIECE_COLORS: Dict[PieceKind, TileColor] = {
    PieceKind.O: TileColor.YELLOW,
    PieceKind.S: TileColor.GREEN,
    PieceKind.Z: TileColor.RED,
    PieceKind.T: TileColor.PURPLE,
    PieceKind.L: TileColor.ORANGE,
    PieceKind.J: TileColor.BLUE,
    PieceKind.I: TileColor.CYAN,
}

BASE_OFFSETS: Dict[PieceKind, Tuple[Offset, ...]] = {
    PieceKind.O: ((0, 0), (0, 1), (1, 0), (1, 1)),
    PieceKind.S: ((0, 1), (0, 2), (1, 0), (1, 1)),
    PieceKind.Z: ((0, 0), (0, 1), (1, 1), (1, 2)),
    PieceKind.T: ((0, 1), (1, 0), (1, 1), (1, 2)),
    PieceKind.L: ((0, 2), (1, 0), (1, 1), (1, 2)),
    PieceKind.J: ((0, 0), (1, 0), (1, 1), (1, 2)),
    PieceKind.I: ((1, 0), (1, 1), (1, 2), (1, 3)),
}


def _swap(delta: Delta) -> Delta:
    return delta[1], delta[0]


_I_FLAT: Delta = (((1, 0), (1, 2), (1, 3)), ((0, 1), (2, 1), (3, 1)))
_S_FLAT: Delta = (((0, 1), (0, 2)), ((0, 0), (2, 1)))
_Z_FLAT: Delta = (((0, 0), (0, 1)), ((0, 2), (2, 1)))

# Hand-tuned clockwise transitions out of each state, not a rotation matrix.
ROTATION_TABLE: Dict[PieceKind, Tuple[Delta, ...]] = {
    PieceKind.O: (((), ()),) * ROTATION_STATES,
    PieceKind.I: (_I_FLAT, _swap(_I_FLAT)) * 2,
    PieceKind.S: (_S_FLAT, _swap(_S_FLAT)) * 2,
    PieceKind.Z: (_Z_FLAT, _swap(_Z_FLAT)) * 2,
    PieceKind.T: (
        (((1, 0),), ((2, 1),)),
        (((0, 1),), ((1, 0),)),
        (((1, 2),), ((0, 1),)),
        (((2, 1),), ((1, 2),)),
    ),
    PieceKind.L: (
        (((1, 0), (0, 2), (1, 2)), ((0, 1), (2, 1), (2, 2))),
        (((0, 1), (2, 1), (2, 2)), ((1, 0), (2, 0), (1, 2))),
        (((1, 0), (2, 0), (1, 2)), ((0, 0), (0, 1), (2, 1))),
        (((0, 0), (0, 1), (2, 1)), ((1, 0), (0, 2), (1, 2))),
    ),
    PieceKind.J: (
        (((0, 0), (1, 0), (1, 2)), ((0, 1), (0, 2), (2, 1))),
        (((0, 1), (0, 2), (2, 1)), ((1, 0), (1, 2), (2, 2))),
        (((1, 0), (1, 2), (2, 2)), ((0, 1), (2, 0), (2, 1))),
        (((0, 1), (2, 0), (2, 1)), ((0, 0), (1, 0), (1, 2))),
    ),
}


def _fold_states(kind: PieceKind) -> List[FrozenSet[Offset]]:
    """Apply the table state by state, checking each transition is consistent."""
    current = frozenset(BASE_OFFSETS[kind])
    states = [current]
    for state, (erase, draw) in enumerate(ROTATION_TABLE[kind]):
        if not set(erase) <= current or current & set(draw):
            raise ValueError(f"rotation table for {kind.name} broken at state {state}")
        current = (current - set(erase)) | set(draw)
        if len(current) != 4:
            raise ValueError(f"{kind.name} state {state + 1} has {len(current)} cells")
        states.append(current)
    if states.pop() != states[0]:
        raise ValueError(f"{kind.name} does not return to its base shape")
    return states


STATE_CELLS: Dict[PieceKind, List[FrozenSet[Offset]]] = {kind: _fold_states(kind) for kind in PieceKind}

ENVELOPES: Dict[PieceKind, List[Tuple[int, int]]] = {
    kind: [(min(c for _, c in cells), max(c for _, c in cells)) for cells in states]
    for kind, states in STATE_CELLS.items()
}


def offsets(kind: PieceKind) -> Tuple[Offset, ...]:
    return BASE_OFFSETS[kind]


def rotation_delta(kind: PieceKind, from_state: int) -> Delta:
    """Cells to erase and to draw when rotating out of ``from_state``."""
    return ROTATION_TABLE[kind][from_state % ROTATION_STATES]


def cells(kind: PieceKind, state: int) -> FrozenSet[Offset]:
    return STATE_CELLS[kind][state % ROTATION_STATES]


def envelope(kind: PieceKind, state: int) -> Tuple[int, int]:
    return ENVELOPES[kind][state % ROTATION_STATES]


def color_for(kind: PieceKind) -> TileColor:
    return PIECE_COLORS[kind]


@dataclass
class ActivePiece:
    kind: PieceKind
    x: int
    y: int
    state: int = 0
    envelope: Tuple[int, int] = field(default=(0, 0))

    def __post_init__(self) -> None:
        self.envelope = envelope(self.kind, self.state)

    @property
    def color(self) -> TileColor:
        return color_for(self.kind)

    def cells_at(self, origin_x: int, origin_y: int, state: int | None = None) -> List[Tuple[int, int]]:
        """Absolute (x, y) cells with the box anchored at ``(origin_x, origin_y)``."""
        if state is None:
            state = self.state
        return [(origin_x + c, origin_y + r) for r, c in sorted(cells(self.kind, state))]

    def cells(self) -> List[Tuple[int, int]]:
        return self.cells_at(self.x, self.y)

    def rows(self) -> range:
        return range(self.y, self.y + 4)
