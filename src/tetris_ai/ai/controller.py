from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from tetris_ai.game import shapes
from tetris_ai.game.core import GameConfig
from tetris_ai.game.grid import GameGrid
from tetris_ai.game.pieces import ActivePiece
from tetris_ai.game.shapes import TetrominoType

from .planner import Plan, PlacementPlanner


logger = logging.getLogger(__name__)

# Cadence while travelling/rotating; once aligned we soft-drop every tick
MOVE_NS = 120_000_000
ROTATE_NS = 120_000_000


@dataclass
class SideState:
    """Per-side transient AI bookkeeping."""

    generation: int = 0
    target_col: int = 0
    target_rot: int = 0
    last_move_ns: Optional[int] = None
    last_rotate_ns: Optional[int] = None
    sweep_col: int = 0
    sweep_dir: int = 1  # ping-pong: +1 right, -1 left
    plan: Optional[Plan] = None


def column_healthy(board: GameGrid, col: int, depth: int = 6, max_empty: int = 2) -> bool:
    """At most ``max_empty`` open cells in the bottom ``depth`` rows of ``col``."""
    bottom = board.grid[max(0, board.rows - depth):, col]
    return int((bottom == 0).sum()) <= max_empty


class AiController:
    """Moves a side's active piece toward its planned target, one step per tick.

    A plan is computed once per spawn generation. ``planner`` is anything with
    the :meth:`PlacementPlanner.plan` signature (local or remote back end).
    """

    def __init__(
        self,
        planner=None,
        move_interval_ns: int = MOVE_NS,
        rotate_interval_ns: int = ROTATE_NS,
    ) -> None:
        self.planner = planner or PlacementPlanner()
        self.move_interval_ns = move_interval_ns
        self.rotate_interval_ns = rotate_interval_ns
        self.states: Dict[int, SideState] = {}

    @classmethod
    def from_config(cls, config: GameConfig, planner=None) -> "AiController":
        interval = config.ai_move_interval_ms * 1_000_000
        return cls(planner, move_interval_ns=interval, rotate_interval_ns=interval)

    def state_for(self, side_id: int) -> SideState:
        return self.states.setdefault(side_id, SideState())

    def forget(self, side_id: int) -> None:
        self.states.pop(side_id, None)

    def _replan(self, st: SideState, piece: ActivePiece, next_kind: Optional[TetrominoType]) -> None:
        plan = self.planner.plan(
            piece.board,
            piece.kind,
            next_kind,
            # A fresh generation means the piece still sits at its spawn cell
            spawn_col=piece.state.col,
            current_col=piece.state.col,
            sweep_col=st.sweep_col,
        )
        st.plan = plan
        st.target_col = plan.target_column
        st.target_rot = plan.target_rotation % shapes.rotation_count(piece.kind)

    def _advance_sweep(self, st: SideState, board: GameGrid) -> None:
        if not column_healthy(board, st.sweep_col):
            return
        st.sweep_col += st.sweep_dir
        if st.sweep_col <= 0:
            st.sweep_col = 0
            st.sweep_dir = 1
        elif st.sweep_col >= board.cols - 1:
            st.sweep_col = board.cols - 1
            st.sweep_dir = -1

    @staticmethod
    def _due(last: Optional[int], now_ns: int, interval: int) -> bool:
        return last is None or now_ns - last >= interval

    def drive(
        self,
        side_id: int,
        piece: Optional[ActivePiece],
        now_ns: int,
        generation: int,
        next_kind: Optional[TetrominoType] = None,
    ) -> bool:
        """Advance ``piece`` toward the plan. Returns False when the piece locked this tick."""
        if piece is None or piece.is_locked:
            return False

        st = self.state_for(side_id)
        if generation != st.generation:
            st.generation = generation
            self._replan(st, piece, next_kind)

        col = piece.state.col
        rot = piece.state.rotation

        if rot != st.target_rot:
            if self._due(st.last_rotate_ns, now_ns, self.rotate_interval_ns):
                count = shapes.rotation_count(piece.kind)
                if (st.target_rot - rot) % count <= count // 2:
                    piece.try_rotate_cw()
                else:
                    piece.try_rotate_ccw()
                st.last_rotate_ns = now_ns
            return True

        if col != st.target_col:
            if self._due(st.last_move_ns, now_ns, self.move_interval_ns):
                if col < st.target_col:
                    piece.try_right()
                else:
                    piece.try_left()
                st.last_move_ns = now_ns
            return True

        if piece.soft_drop_or_lock():
            return True
        self._advance_sweep(st, piece.board)
        return False
