from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Iterable, List, Optional, Tuple

import numpy as np

from .errors import EngineError, SpawnBlockedError
from .grid import GameGrid, TileColor
from .pieces import ROTATION_STATES, ActivePiece, PieceKind, envelope, rotation_delta
from .rules import Score, top_rows_settled
from .sinks import NullRenderSink, RenderSink

logger = logging.getLogger(__name__)


class Intent(IntEnum):
    ROTATE_CW = 0
    MOVE_LEFT = 1
    MOVE_RIGHT = 2
    SOFT_DROP = 3
    NONE = 4


@dataclass
class GameConfig:
    width: int = 20
    height: int = 20
    wall_width: int = 2
    loss_rows: int = 3
    spawn_y: int = 0
    random_seed: Optional[int] = None


@dataclass
class StepResult:
    moved: bool = False
    collided: bool = False
    rows_cleared: int = 0
    lost: bool = False
    score: int = 0


class Engine:
    """Falling-block state machine over a walled grid.

    ``rotate``, ``move`` and ``tick`` return a collision flag: ``True`` means
    the piece has come to rest and the caller should ``disable_piece`` and
    spawn a replacement. ``step`` does that bookkeeping for one intent.
    Rejected moves and rotations are silent no-ops returning ``False``.

    Every grid write is queued and pushed to the render sink once the
    operation's logical writes are done, so a failing sink (``RenderError``)
    never leaves the grid half-updated.
    """

    def __init__(self, config: Optional[GameConfig] = None, sink: Optional[RenderSink] = None,
                 on_score_changed: Optional[Callable[[int], None]] = None,
                 on_loss: Optional[Callable[[], None]] = None) -> None:
        self.config = config or GameConfig()
        self.rng = random.Random(self.config.random_seed)
        self.sink: RenderSink = sink or NullRenderSink()
        self.on_score_changed = on_score_changed
        self.on_loss = on_loss
        self._dirty: List[Tuple[int, int]] = []
        self.grid = GameGrid(self.config.width, self.config.height, self.config.wall_width,
                             on_change=self._mark_dirty)
        self.score = Score()
        self.piece: Optional[ActivePiece] = None
        self.lost = False

    # Rendering

    def _mark_dirty(self, x: int, y: int, color: TileColor) -> None:
        self._dirty.append((x, y))

    def _present(self) -> None:
        dirty, self._dirty = self._dirty, []
        seen = set()
        for x, y in dirty:
            if (x, y) in seen:
                continue
            seen.add((x, y))
            self.sink.draw_cell(x, y, TileColor(int(self.grid.colors[y, x])))
        self.sink.flush()

    def redraw(self) -> None:
        """Push every cell to the sink, e.g. after a render failure."""
        self._dirty.clear()
        for x, y, color in self.grid.cells():
            self.sink.draw_cell(x, y, color)
        self.sink.flush()

    # Geometry helpers

    def _within_walls(self, kind: PieceKind, x: int, state: int) -> bool:
        left, right = envelope(kind, state)
        cols = self.grid.interior_columns
        return x + left >= cols.start and x + right < cols.stop

    def _in_grid(self, cells: Iterable[Tuple[int, int]]) -> bool:
        return all(self.grid.is_inside(x, y) for x, y in cells)

    def _resting_on(self, x: int, y: int) -> bool:
        return y + 1 < self.grid.height and self.grid.is_blocked(x, y + 1)

    # Spawning

    def _random_anchor(self, kind: PieceKind) -> int:
        left, right = envelope(kind, 0)
        cols = self.grid.interior_columns
        return self.rng.randint(cols.start - left, cols.stop - 1 - right)

    def spawn(self, kind: PieceKind, x: Optional[int] = None, y: Optional[int] = None) -> ActivePiece:
        if self.lost:
            raise EngineError("the session is lost")
        if self.piece is not None:
            raise EngineError("a piece is already active; disable it first")
        if x is None:
            x = self._random_anchor(kind)
        if y is None:
            y = self.config.spawn_y
        piece = ActivePiece(kind, x, y)
        cells = piece.cells()
        if (not self._within_walls(kind, x, piece.state) or not self._in_grid(cells)
                or self.grid.any_blocked(cells)):
            raise SpawnBlockedError(f"cannot spawn {kind.name} at ({x}, {y})")
        self.piece = piece
        for cx, cy in cells:
            self.grid.set(cx, cy, piece.color)
        self._present()
        return piece

    def spawn_random(self) -> ActivePiece:
        return self.spawn(self.rng.choice(list(PieceKind)))

    def start(self) -> ActivePiece:
        self.redraw()
        return self.spawn_random()

    # Piece operations

    def rotate(self) -> bool:
        collision = self._rotate()
        self._present()
        return collision

    def _rotate(self) -> bool:
        piece = self.piece
        if piece is None or self.lost:
            return False
        next_state = (piece.state + 1) % ROTATION_STATES
        erase, draw = rotation_delta(piece.kind, piece.state)
        targets = [(piece.x + c, piece.y + r) for r, c in draw]
        if not self._within_walls(piece.kind, piece.x, next_state) or not self._in_grid(targets):
            return False
        if self.grid.any_blocked(targets):
            return False
        collision = False
        for r, c in erase:
            self.grid.set(piece.x + c, piece.y + r, TileColor.EMPTY)
        for x, y in targets:
            self.grid.set(x, y, piece.color)
            collision |= self._resting_on(x, y)
        piece.state = next_state
        piece.envelope = envelope(piece.kind, next_state)
        if collision:
            logger.debug("rotation landed %s", piece)
        return collision

    def check_horizontal_collision(self, dx: int) -> bool:
        """True when shifting the piece ``dx`` columns would hit a settled cell."""
        piece = self.piece
        if piece is None or dx == 0:
            return False
        targets = piece.cells_at(piece.x + dx, piece.y)
        return not self._in_grid(targets) or self.grid.any_blocked(targets)

    def move(self, dx: int, dy: int) -> bool:
        if dx not in (-1, 0, 1) or dy not in (-1, 0, 1):
            raise ValueError(f"move deltas must be -1, 0 or 1, got ({dx}, {dy})")
        collision = self._move(dx, dy)
        self._present()
        return collision

    def _move(self, dx: int, dy: int) -> bool:
        piece = self.piece
        if piece is None or self.lost or (dx == 0 and dy == 0):
            return False
        if not self._within_walls(piece.kind, piece.x + dx, piece.state):
            return False
        if self.check_horizontal_collision(dx):
            return False
        targets = piece.cells_at(piece.x + dx, piece.y + dy)
        if not self._in_grid(targets) or self.grid.any_blocked(targets):
            # Already resting: a downward step lands the piece where it is.
            return dy > 0
        collision = False
        # Leading cells first so no cell lands on one that has not moved yet.
        for x, y in sorted(piece.cells(), key=lambda cell: (-dx * cell[0], -dy * cell[1])):
            self.grid.set(x, y, TileColor.EMPTY)
            self.grid.set(x + dx, y + dy, piece.color)
            if dy > 0:
                collision |= self._resting_on(x + dx, y + dy)
        piece.x += dx
        piece.y += dy
        if collision:
            logger.debug("landed %s", piece)
        return collision

    def tick(self) -> bool:
        return self.move(0, 1)

    # Settling

    def disable_piece(self) -> int:
        """Settle the active piece, clear full rows and return how many were cleared."""
        piece = self.piece
        if piece is None:
            return 0
        for x, y in piece.cells():
            self.grid.set_locked(x, y, True)
        cleared = self._clear_rows(piece.rows())
        self.piece = None
        self._present()
        return cleared

    def clear_row(self, rows: Optional[Iterable[int]] = None) -> int:
        """Clear full rows among ``rows`` (every row when omitted) on a settled board.

        A falling piece would be shifted out from under its anchor, so settle it
        with :meth:`disable_piece` first.
        """
        if self.piece is not None:
            raise EngineError("clear_row while a piece is falling; call disable_piece")
        if rows is None:
            rows = range(self.grid.floor_row)
        cleared = self._clear_rows(rows)
        self._present()
        return cleared

    def _clear_rows(self, rows: Iterable[int]) -> int:
        cleared = 0
        # Top to bottom: collapsing a row only shifts the rows above it.
        for y in sorted(rows):
            if not self.grid.is_row_full(y):
                continue
            self.grid.collapse_row(y)
            cleared += 1
            score = self.score.add_rows(1)
            logger.info("cleared row %d, score %d", y, score)
            if self.on_score_changed is not None:
                self.on_score_changed(score)
        return cleared

    def check_loss(self) -> bool:
        return top_rows_settled(self.grid, self.config.loss_rows)

    def _lose(self) -> None:
        self.lost = True
        logger.info("game over with score %d", self.score.value)
        if self.on_loss is not None:
            self.on_loss()

    # Driver

    def step(self, intent: Intent) -> StepResult:
        if self.lost:
            return StepResult(lost=True, score=self.score.value)
        piece = self.piece
        before = (piece.x, piece.y, piece.state) if piece is not None else None

        if intent == Intent.ROTATE_CW:
            collided = self.rotate()
        elif intent == Intent.MOVE_LEFT:
            collided = self.move(-1, 0)
        elif intent == Intent.MOVE_RIGHT:
            collided = self.move(1, 0)
        elif intent == Intent.SOFT_DROP:
            collided = self.tick()
        else:
            collided = False

        result = StepResult(collided=collided)
        result.moved = piece is not None and (piece.x, piece.y, piece.state) != before
        if collided:
            result.rows_cleared = self.disable_piece()
            result.lost = not self._respawn()
        elif self.piece is None:
            result.lost = not self._respawn()
        result.score = self.score.value
        return result

    def _respawn(self) -> bool:
        if not self.check_loss():
            try:
                self.spawn_random()
                return True
            except SpawnBlockedError as exc:
                logger.info("%s", exc)
        self._lose()
        return False

    def get_state(self) -> np.ndarray:
        return self.grid.clone_state()
