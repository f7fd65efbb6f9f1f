from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import List, Tuple

from . import shapes
from .grid import GameGrid
from .shapes import TetrominoType


logger = logging.getLogger(__name__)


class Move(IntEnum):
    """Single-step transitions, in the planner's expansion order."""

    FALL = 0
    ROTATE_CW = 1
    ROTATE_CCW = 2
    ROTATE_180 = 3
    LEFT = 4
    RIGHT = 5


# (dr, dc, drot) per move
MOVE_DELTAS = {
    Move.FALL: (1, 0, 0),
    Move.ROTATE_CW: (0, 0, 1),
    Move.ROTATE_CCW: (0, 0, -1),
    Move.ROTATE_180: (0, 0, 2),
    Move.LEFT: (0, -1, 0),
    Move.RIGHT: (0, 1, 0),
}


class PieceStatus(Enum):
    FALLING = "falling"
    LOCKED = "locked"


@dataclass(frozen=True)
class PieceState:
    kind: TetrominoType
    rotation: int = 0
    row: int = 0
    col: int = 0

    def moved(self, dr: int, dc: int, drot: int) -> "PieceState":
        count = shapes.rotation_count(self.kind)
        return replace(
            self,
            rotation=(self.rotation + drot) % count,
            row=self.row + dr,
            col=self.col + dc,
        )

    def shape(self):
        return shapes.shape(self.kind, self.rotation)

    def cells(self) -> List[Tuple[int, int]]:
        return [(self.row + dr, self.col + dc) for dr, dc in shapes.cells(self.kind, self.rotation)]


class ActivePiece:
    """A falling piece bound to the board it will lock into."""

    def __init__(self, board: GameGrid, kind: TetrominoType, spawn_col: int, spawn_row: int = 0) -> None:
        self.board = board
        self.state = PieceState(TetrominoType(kind), 0, spawn_row, spawn_col)
        self.status = PieceStatus.FALLING
        self.fall_progress = 0.0

    @property
    def kind(self) -> TetrominoType:
        return self.state.kind

    @property
    def is_locked(self) -> bool:
        return self.status is PieceStatus.LOCKED

    def fits(self, state: PieceState | None = None) -> bool:
        s = self.state if state is None else state
        return self.board.can_place(s.kind, s.rotation, s.row, s.col)

    def try_move(self, dr: int, dc: int, drot: int) -> bool:
        if self.is_locked:
            return False
        candidate = self.state.moved(dr, dc, drot)
        if not self.fits(candidate):
            return False
        self.state = candidate
        return True

    def try_left(self) -> bool:
        return self.try_move(0, -1, 0)

    def try_right(self) -> bool:
        return self.try_move(0, 1, 0)

    def try_rotate_cw(self) -> bool:
        return self.try_move(0, 0, 1)

    def try_rotate_ccw(self) -> bool:
        return self.try_move(0, 0, -1)

    def try_rotate_180(self) -> bool:
        return self.try_move(0, 0, 2)

    def apply(self, move: Move) -> bool:
        dr, dc, drot = MOVE_DELTAS[Move(move)]
        return self.try_move(dr, dc, drot)

    def lock(self) -> None:
        """Write the piece's cells into the board and enter the terminal state."""
        if self.is_locked:
            return
        s = self.state
        self.board.place(s.kind, s.rotation, s.row, s.col)
        self.status = PieceStatus.LOCKED
        logger.debug("locked %s rot=%d at row=%d col=%d", s.kind.name, s.rotation, s.row, s.col)

    def soft_drop_or_lock(self) -> bool:
        """One-row drop. Returns False exactly when the piece locked instead."""
        if self.is_locked:
            return False
        if self.try_move(1, 0, 0):
            return True
        self.lock()
        return False

    def hard_drop(self) -> int:
        dropped = 0
        while self.try_move(1, 0, 0):
            dropped += 1
        self.lock()
        return dropped

    def fall(self, rows: float) -> bool:
        """Apply ``rows`` of fractional gravity. Returns False once the piece has locked."""
        if self.is_locked:
            return False
        self.fall_progress += rows
        while self.fall_progress >= 1.0:
            self.fall_progress -= 1.0
            if not self.soft_drop_or_lock():
                return False
        return True
