from __future__ import annotations

import numpy as np
import pytest

from tetris_ai.game import GameGrid


@pytest.fixture
def empty_board() -> GameGrid:
    return GameGrid(20, 10)


def garbage_board(seed: int, rows: int = 20, cols: int = 10, height: int = 6, density: float = 0.6) -> GameGrid:
    """Random bottom rows, each guaranteed to have at least one empty cell."""
    rng = np.random.default_rng(seed)
    board = GameGrid(rows, cols)
    for r in range(rows - height, rows):
        row = (rng.random(cols) < density).astype(np.int8) * 3
        row[rng.integers(cols)] = 0
        board.grid[r] = row
    return board


@pytest.fixture
def garbage():
    return garbage_board
