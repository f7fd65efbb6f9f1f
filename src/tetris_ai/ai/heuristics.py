"""Board features and the weighted placement score."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np

from tetris_ai.game import shapes
from tetris_ai.game.shapes import TetrominoType


@dataclass(frozen=True)
class PlannerWeights:
    """Empirically tuned constants. None of these are correctness guarantees."""

    lines: float = 3.40
    tetris: float = 2.00
    bottom_fill: float = 0.45
    low_gaps: float = 0.12
    height: float = -0.36
    holes: float = -0.82
    bumpiness: float = -0.18
    well: float = 0.05
    edge_cliff: float = -0.10
    help1: float = 0.90
    help2: float = 0.45
    help3: float = 0.20
    depth_bonus: float = 0.40
    # secondary terms
    lookahead: float = 0.65
    distance_penalty: float = 0.03
    sweep_pull: float = 0.05
    lookahead_sweep_pull: float = 0.03
    edge_pull: float = 0.02
    edge_shallow_height: int = 6
    edge_reach: int = 3
    no_reply_score: float = -5.0
    well_depth_cap: int = 6
    low_gap_base: int = 4
    # exploration caps
    explore_cap: int = 600
    lookahead_cap: int = 400


def column_heights(field: np.ndarray) -> np.ndarray:
    rows = field.shape[0]
    filled = field != 0
    top = np.argmax(filled, axis=0)
    return np.where(filled.any(axis=0), rows - top, 0)


def count_holes(field: np.ndarray) -> int:
    filled = field != 0
    covered = np.maximum.accumulate(filled, axis=0)
    return int(np.sum(covered & ~filled))


def low_gaps_score(field: np.ndarray, base: int = 4) -> int:
    """Reward for columns whose floor cells are still open."""
    rows = field.shape[0]
    filled_from_bottom = field[::-1] != 0
    empties = np.where(filled_from_bottom.any(axis=0), np.argmax(filled_from_bottom, axis=0), rows)
    open_cols = empties[empties > 0]
    return int(np.sum(np.maximum(1, base - open_cols)))


def well_score(heights: np.ndarray, cap: int = 6) -> int:
    if heights.size < 3:
        return 0
    left, mid, right = heights[:-2], heights[1:-1], heights[2:]
    is_well = (mid < left) & (mid < right)
    depth = np.minimum(cap, np.minimum(left, right) - mid)
    return int(np.sum(np.where(is_well, np.maximum(0, depth), 0)))


def edge_cliff(heights: np.ndarray) -> int:
    if heights.size < 2:
        return 0
    return int(max(0, heights[0] - heights[1]) + max(0, heights[-1] - heights[-2]))


def cells_on_row(kind: TetrominoType, rotation: int, base_row: int, target_row: int) -> int:
    return sum(1 for dr, _ in shapes.cells(kind, rotation) if base_row + dr == target_row)


def cells_helping_critical_rows(
    kind: TetrominoType, rotation: int, base_row: int, row_empties: Sequence[int], max_empty: int
) -> int:
    """Count piece cells landing in rows with 1..``max_empty`` empty cells before placement."""
    count = 0
    for dr, _ in shapes.cells(kind, rotation):
        r = base_row + dr
        if 0 <= r < len(row_empties) and 0 < row_empties[r] <= max_empty:
            count += 1
    return count


def board_features(field: np.ndarray, weights: PlannerWeights | None = None) -> Dict[str, int]:
    w = weights or PlannerWeights()
    heights = column_heights(field)
    return {
        "aggregate_height": int(heights.sum()),
        "max_height": int(heights.max()) if heights.size else 0,
        "holes": count_holes(field),
        "bumpiness": int(np.abs(np.diff(heights)).sum()),
        "low_gaps": low_gaps_score(field, w.low_gap_base),
        "well": well_score(heights, w.well_depth_cap),
        "edge_cliff": edge_cliff(heights),
    }


def evaluate(
    field: np.ndarray,
    lines_cleared: int,
    bottom_empty_before: int,
    bottom_filled: int,
    landing_row: int,
    help1: int,
    help2: int,
    help3: int,
    weights: PlannerWeights | None = None,
) -> float:
    """Weighted score of a post-placement, post-clear board."""
    w = weights or PlannerWeights()
    rows = field.shape[0]
    f = board_features(field, w)

    tetris_bonus = 1.0 if lines_cleared == 4 else 0.0
    bottom_help = bottom_filled * w.bottom_fill if bottom_empty_before > 0 else 0.0
    depth = max(0.0, landing_row / max(1, rows - 1))

    return (
        w.lines * lines_cleared
        + w.tetris * tetris_bonus
        + bottom_help
        + w.low_gaps * f["low_gaps"]
        + w.height * f["aggregate_height"]
        + w.holes * f["holes"]
        + w.bumpiness * f["bumpiness"]
        + w.well * f["well"]
        + w.edge_cliff * f["edge_cliff"]
        + w.help1 * help1
        + w.help2 * help2
        + w.help3 * help3
        + w.depth_bonus * depth
    )
