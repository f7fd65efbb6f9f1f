from __future__ import annotations

from typing import Iterable, Tuple

import numpy as np

from . import shapes
from .shapes import TetrominoType


Coordinate = Tuple[int, int]


class GameGrid:
    """Discrete ``rows x cols`` board.

    The grid uses 0 for empty cells and 1..7 for filled cells; the value is the
    colour tag of the piece kind that locked there. Row 0 is the top.
    """

    def __init__(self, rows: int, cols: int) -> None:
        self.rows = int(rows)
        self.cols = int(cols)
        self.grid = np.zeros((self.rows, self.cols), dtype=np.int8)

    @classmethod
    def from_array(cls, cells) -> "GameGrid":
        arr = np.asarray(cells, dtype=np.int8)
        rows, cols = arr.shape
        g = cls(rows, cols)
        g.grid[:, :] = arr
        return g

    def reset(self) -> None:
        self.grid.fill(0)

    def get(self, r: int, c: int) -> int:
        return int(self.grid[r, c])

    def set(self, r: int, c: int, v: int) -> None:
        self.grid[r, c] = v

    def in_bounds(self, r: int, c: int) -> bool:
        return 0 <= r < self.rows and 0 <= c < self.cols

    def is_empty(self, r: int, c: int) -> bool:
        return self.in_bounds(r, c) and self.grid[r, c] == 0

    def cells_free(self, cells: Iterable[Coordinate]) -> bool:
        grid = self.grid
        rows, cols = self.rows, self.cols
        for r, c in cells:
            if r < 0 or r >= rows or c < 0 or c >= cols:
                return False
            if grid[r, c] != 0:
                return False
        return True

    def can_place(self, kind: TetrominoType, rotation: int, row: int, col: int) -> bool:
        """True when every occupied cell of the shape is in bounds and empty."""
        return self.cells_free((row + dr, col + dc) for dr, dc in shapes.cells(kind, rotation))

    def place(self, kind: TetrominoType, rotation: int, row: int, col: int, value: int | None = None) -> None:
        """Write the shape's cells at its colour tag. Assumes the placement was validated."""
        v = shapes.color(kind) if value is None else value
        for dr, dc in shapes.cells(kind, rotation):
            self.grid[row + dr, col + dc] = v

    def clear_full_rows(self) -> int:
        full = np.all(self.grid != 0, axis=1)
        num = int(full.sum())
        if num == 0:
            return 0
        # Keep surviving rows in order, pad empty rows on top
        kept = self.grid[~full]
        new_rows = np.zeros((num, self.cols), dtype=np.int8)
        self.grid = np.vstack((new_rows, kept))
        return num

    def column_heights(self) -> np.ndarray:
        filled = self.grid != 0
        top = np.argmax(filled, axis=0)
        return np.where(filled.any(axis=0), self.rows - top, 0)

    def count_holes(self) -> int:
        filled = self.grid != 0
        covered = np.maximum.accumulate(filled, axis=0)
        return int(np.sum(covered & ~filled))

    def row_empties(self) -> np.ndarray:
        return np.sum(self.grid == 0, axis=1)

    def clone(self) -> "GameGrid":
        g = GameGrid(self.rows, self.cols)
        g.grid = self.grid.copy()
        return g

    def snapshot(self) -> np.ndarray:
        return self.grid.copy()
