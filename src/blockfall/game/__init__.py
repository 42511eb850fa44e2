"""Game module for blockfall.

Exports the falling-block engine and supporting classes:
- GameGrid: walled grid of cells with lock flags and row compaction
- PieceKind / ActivePiece: tetromino catalog and the falling piece
- Score: monotonic row-clear counter
- Engine: move/rotate/tick state machine driven by Intents
- RenderSink: protocol for the drawing collaborator
"""

from .errors import EngineError, OutOfBoundsError, RenderError, SpawnBlockedError
from .grid import Cell, GameGrid, TileColor
from .pieces import ActivePiece, PieceKind
from .rules import Score
from .sinks import NullRenderSink, RenderSink
from .core import Engine, GameConfig, Intent, StepResult

__all__ = [
    "Cell",
    "GameGrid",
    "TileColor",
    "ActivePiece",
    "PieceKind",
    "Score",
    "RenderSink",
    "NullRenderSink",
    "Engine",
    "GameConfig",
    "Intent",
    "StepResult",
    "EngineError",
    "OutOfBoundsError",
    "RenderError",
    "SpawnBlockedError",
]
