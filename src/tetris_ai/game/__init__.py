"""Game module for the falling-block engine.

Exports the core game engine and supporting classes:
- TetrominoType: Enum of piece kinds (values double as colour tags)
- GameGrid: Grid representation, collision queries and line clearing
- PieceBag: Shared 7-bag piece sequencer
- ActivePiece / PieceState / Move: Falling piece state machine
- ScoringRules: Line-clear score table
- GameSession / GameConfig: Timed gravity, locking, scoring and spawning
"""

from .shapes import TetrominoType
from .grid import GameGrid
from .bag import PieceBag, BagCursor
from .pieces import ActivePiece, Move, PieceState, PieceStatus
from .rules import ScoringRules
from .core import Action, GameConfig, GameSession, SessionSnapshot, create_versus

__all__ = [
    "TetrominoType",
    "GameGrid",
    "PieceBag",
    "BagCursor",
    "ActivePiece",
    "Move",
    "PieceState",
    "PieceStatus",
    "ScoringRules",
    "Action",
    "GameConfig",
    "GameSession",
    "SessionSnapshot",
    "create_versus",
]
