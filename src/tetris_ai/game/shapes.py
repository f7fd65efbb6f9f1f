from __future__ import annotations

from enum import IntEnum
from typing import Dict, List, Optional, Tuple

import numpy as np


class TetrominoType(IntEnum):
    """Piece kinds. The integer value doubles as the colour tag written on lock."""

    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


Shape = np.ndarray
Offset = Tuple[int, int]


def _rot90(shape: Shape, k: int) -> Shape:
    k = k % 4
    if k == 0:
        return shape
    return np.rot90(shape, k, axes=(1, 0))  # rotate clockwise when k>0


BASE_SHAPES = {
    TetrominoType.I: np.array([[1, 1, 1, 1]], dtype=np.int8),
    TetrominoType.O: np.array([[1, 1], [1, 1]], dtype=np.int8),
    TetrominoType.T: np.array([[1, 1, 1], [0, 1, 0]], dtype=np.int8),
    TetrominoType.S: np.array([[0, 1, 1], [1, 1, 0]], dtype=np.int8),
    TetrominoType.Z: np.array([[1, 1, 0], [0, 1, 1]], dtype=np.int8),
    TetrominoType.J: np.array([[1, 0, 0], [1, 1, 1]], dtype=np.int8),
    TetrominoType.L: np.array([[0, 0, 1], [1, 1, 1]], dtype=np.int8),
}

ROTATION_COUNTS = {
    TetrominoType.I: 2,
    TetrominoType.O: 1,
    TetrominoType.T: 4,
    TetrominoType.S: 2,
    TetrominoType.Z: 2,
    TetrominoType.J: 4,
    TetrominoType.L: 4,
}

COLOR_NAMES = {
    TetrominoType.I: "cyan",
    TetrominoType.O: "yellow",
    TetrominoType.T: "purple",
    TetrominoType.S: "green",
    TetrominoType.Z: "red",
    TetrominoType.J: "blue",
    TetrominoType.L: "orange",
}


def _build_rotations() -> Dict[TetrominoType, Tuple[Shape, ...]]:
    table: Dict[TetrominoType, Tuple[Shape, ...]] = {}
    for kind, base in BASE_SHAPES.items():
        states: List[Shape] = []
        for r in range(ROTATION_COUNTS[kind]):
            s = np.ascontiguousarray(_rot90(base, r))
            s.setflags(write=False)
            states.append(s)
        table[kind] = tuple(states)
    return table


def _build_offsets(rotations: Dict[TetrominoType, Tuple[Shape, ...]]) -> Dict[TetrominoType, Tuple[Tuple[Offset, ...], ...]]:
    table: Dict[TetrominoType, Tuple[Tuple[Offset, ...], ...]] = {}
    for kind, states in rotations.items():
        table[kind] = tuple(
            tuple((int(dr), int(dc)) for dr, dc in zip(*np.nonzero(s))) for s in states
        )
    return table


ROTATIONS = _build_rotations()
CELL_OFFSETS = _build_offsets(ROTATIONS)
MAX_SHAPE_WIDTH = max(max(s.shape[1] for s in states) for states in ROTATIONS.values())


def rotation_count(kind: TetrominoType) -> int:
    return ROTATION_COUNTS[TetrominoType(kind)]


def shape(kind: TetrominoType, rotation: int = 0) -> Shape:
    """Occupancy matrix of ``kind`` at ``rotation`` (wrapped modulo its rotation count)."""
    states = ROTATIONS[TetrominoType(kind)]
    return states[rotation % len(states)]


def cells(kind: TetrominoType, rotation: int = 0) -> Tuple[Offset, ...]:
    """Occupied ``(dr, dc)`` offsets relative to the shape's top-left anchor."""
    states = CELL_OFFSETS[TetrominoType(kind)]
    return states[rotation % len(states)]


def width(kind: TetrominoType, rotation: int = 0) -> int:
    return int(shape(kind, rotation).shape[1])


def height(kind: TetrominoType, rotation: int = 0) -> int:
    return int(shape(kind, rotation).shape[0])


def color(kind: TetrominoType) -> int:
    return int(kind)


def color_name(kind: TetrominoType) -> str:
    return COLOR_NAMES[TetrominoType(kind)]


def kind_for_shape(matrix) -> Optional[Tuple[TetrominoType, int]]:
    """Reverse lookup of a (kind, rotation) pair from an occupancy matrix.

    Returns None when the matrix matches no catalog entry.
    """
    m = (np.asarray(matrix) != 0).astype(np.int8)
    if m.ndim != 2:
        return None
    for kind, states in ROTATIONS.items():
        for r, s in enumerate(states):
            if s.shape == m.shape and np.array_equal(s, m):
                return kind, r
    return None
