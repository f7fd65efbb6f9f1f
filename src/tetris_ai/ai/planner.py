from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from tetris_ai.game import shapes
from tetris_ai.game.grid import GameGrid
from tetris_ai.game.shapes import TetrominoType

from .heuristics import PlannerWeights, cells_helping_critical_rows, cells_on_row, evaluate
from .reachability import reachable_landings


logger = logging.getLogger(__name__)

TIE_EPSILON = 1e-6


@dataclass(frozen=True)
class Plan:
    target_column: int
    target_rotation: int
    score: float = -math.inf
    landing_row: int = -1


@dataclass(frozen=True)
class Candidate:
    column: int
    rotation: int
    landing_row: int
    lines_cleared: int
    base_score: float
    lookahead_score: float
    score: float
    board_after: np.ndarray


def rotations_to_try(kind: Optional[TetrominoType]) -> Tuple[int, ...]:
    """Distinct orientations only: 1 for O, 2 for I/S/Z, 4 for T/J/L."""
    if kind is None:
        return (0,)
    return tuple(range(shapes.rotation_count(kind)))


def landing_row(board: GameGrid, kind: TetrominoType, rotation: int, col: int) -> Optional[int]:
    """Hard-drop row from the top, or None when blocked immediately at row 0."""
    if not board.can_place(kind, rotation, 0, col):
        return None
    row = 0
    while row + 1 < board.rows and board.can_place(kind, rotation, row + 1, col):
        row += 1
    return row


class PlacementPlanner:
    """Chooses a reachable ``(column, rotation)`` target for a falling piece.

    Every fitting column of every distinct rotation is kept only if a
    kick-free move sequence from spawn can come to rest there. It is placed at
    that resting row, scored on the post-clear board, optionally blended with
    the best reply of the next piece, and adjusted by small lateral-travel,
    sweep and edge terms.
    """

    def __init__(self, weights: Optional[PlannerWeights] = None) -> None:
        self.weights = weights or PlannerWeights()

    @staticmethod
    def spawn_column_for(board: GameGrid, kind: TetrominoType, spawn_col: int) -> int:
        return min(max(0, spawn_col), board.cols - shapes.width(kind, 0))

    def _placements(self, board: GameGrid, kind: TetrominoType, spawn_col: int, cap: int):
        """Yield ``(rotation, col, row, after, lines, base_score)`` for reachable placements."""
        w = self.weights
        rows, cols = board.rows, board.cols
        reachable = reachable_landings(board, kind, self.spawn_column_for(board, kind, spawn_col))
        bottom_empty = int(np.sum(board.grid[rows - 1] == 0))
        row_empties = board.row_empties().tolist()

        explored = 0
        for rot in rotations_to_try(kind):
            shape_w = shapes.width(kind, rot)
            if shape_w > cols:
                continue
            for col in range(cols - shape_w + 1):
                explored += 1
                if explored > cap:
                    return
                rows_reached = reachable.get((col, rot))
                if not rows_reached:
                    continue
                # Straight drop when a move sequence can end there, else the deepest reachable rest
                row = landing_row(board, kind, rot, col)
                if row not in rows_reached:
                    row = max(rows_reached)

                after = board.clone()
                after.place(kind, rot, row, col)
                lines = after.clear_full_rows()

                bottom_filled = cells_on_row(kind, rot, row, rows - 1)
                help1 = cells_helping_critical_rows(kind, rot, row, row_empties, 1)
                help2 = cells_helping_critical_rows(kind, rot, row, row_empties, 2) if help1 == 0 else 0
                help3 = (
                    cells_helping_critical_rows(kind, rot, row, row_empties, 3)
                    if help1 == 0 and help2 == 0
                    else 0
                )
                base = evaluate(after.grid, lines, bottom_empty, bottom_filled, row, help1, help2, help3, w)
                yield rot, col, row, after, lines, base

    def best_reply_score(
        self, board: GameGrid, kind: TetrominoType, spawn_col: int, sweep_col: int = 0
    ) -> float:
        """Best achievable score for ``kind`` on ``board`` (one ply, no further lookahead)."""
        w = self.weights
        best = -math.inf
        for _, col, _, _, _, base in self._placements(board, kind, spawn_col, w.lookahead_cap):
            s = base - w.lookahead_sweep_pull * abs(col - sweep_col)
            if s > best:
                best = s
        return w.no_reply_score if best == -math.inf else best

    def candidates(
        self,
        board: GameGrid,
        kind: TetrominoType,
        next_kind: Optional[TetrominoType] = None,
        spawn_col: int = 3,
        current_col: Optional[int] = None,
        sweep_col: Optional[int] = None,
    ) -> List[Candidate]:
        w = self.weights
        cols = board.cols
        if current_col is None:
            current_col = self.spawn_column_for(board, kind, spawn_col)
        if sweep_col is None:
            sweep_col = 0

        out: List[Candidate] = []
        for rot, col, row, after, lines, base in self._placements(board, kind, spawn_col, w.explore_cap):
            reply = 0.0
            if next_kind is not None:
                reply = self.best_reply_score(after, next_kind, spawn_col, sweep_col)
            score = base + w.lookahead * reply

            score -= w.distance_penalty * abs(col - current_col)
            score -= w.sweep_pull * abs(col - sweep_col)

            distance_to_edge = min(col, cols - 1 - col)
            local_height = int(after.column_heights()[col])
            shallow = max(0, w.edge_shallow_height - local_height)
            score += w.edge_pull * max(0, w.edge_reach - distance_to_edge) * shallow

            out.append(Candidate(col, rot, row, lines, base, reply, score, after.grid))
        return out

    def plan(
        self,
        board: GameGrid,
        kind: TetrominoType,
        next_kind: Optional[TetrominoType] = None,
        spawn_col: int = 3,
        current_col: Optional[int] = None,
        sweep_col: Optional[int] = None,
    ) -> Plan:
        kind = TetrominoType(kind)
        best: Optional[Candidate] = None
        for cand in self.candidates(board, kind, next_kind, spawn_col, current_col, sweep_col):
            if best is None or cand.score > best.score + TIE_EPSILON:
                best = cand
            elif abs(cand.score - best.score) < TIE_EPSILON and cand.landing_row > best.landing_row:
                best = cand

        if best is None:
            fallback = self.spawn_column_for(board, kind, spawn_col)
            logger.debug("no reachable placement for %s; falling back to column %d", kind.name, fallback)
            return Plan(fallback, 0)

        logger.debug(
            "plan %s -> col=%d rot=%d row=%d score=%.3f (lines=%d)",
            kind.name, best.column, best.rotation, best.landing_row, best.score, best.lines_cleared,
        )
        return Plan(best.column, best.rotation, best.score, best.landing_row)
