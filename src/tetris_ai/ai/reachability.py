"""Breadth-first search over ``(row, col, rotation)`` piece states.

Transitions mirror :class:`tetris_ai.game.pieces.ActivePiece` exactly: one-row
fall, in-place rotation by +1, -1 and +2 (no kicks), and one-column left/right
translation, each legal only when the resulting placement is unobstructed.
Expansion order is fixed so results are reproducible.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Dict, List, Optional, Set, Tuple

import numpy as np

from tetris_ai.game import shapes
from tetris_ai.game.grid import GameGrid
from tetris_ai.game.pieces import MOVE_DELTAS, Move
from tetris_ai.game.shapes import TetrominoType


Node = Tuple[int, int, int]  # row, col, rotation

EXPANSION_ORDER = (
    Move.FALL,
    Move.ROTATE_CW,
    Move.ROTATE_CCW,
    Move.ROTATE_180,
    Move.LEFT,
    Move.RIGHT,
)


def _search(
    board: GameGrid,
    kind: TetrominoType,
    spawn_col: int,
    target: Optional[Tuple[int, int]] = None,
) -> Tuple[Dict[Tuple[int, int], List[int]], Dict[Node, Tuple[Node, Move]], Optional[Node]]:
    """Run the BFS. Stops early at the first terminal state matching ``target``.

    Returns the terminal landings found (``(col, rotation) -> [rows]``), the
    parent map, and the matching terminal node when ``target`` was given.
    """
    count = shapes.rotation_count(kind)
    spawn_col = min(max(0, spawn_col), board.cols - 1)
    landings: Dict[Tuple[int, int], List[int]] = {}
    parents: Dict[Node, Tuple[Node, Move]] = {}

    if not board.can_place(kind, 0, 0, spawn_col):
        return landings, parents, None

    visited = np.zeros((board.rows, board.cols, count), dtype=np.bool_)
    start: Node = (0, spawn_col, 0)
    visited[start] = True
    queue: Deque[Node] = deque([start])

    while queue:
        node = queue.popleft()
        row, col, rot = node
        for move in EXPANSION_ORDER:
            dr, dc, drot = MOVE_DELTAS[move]
            nr, nc, nrot = row + dr, col + dc, (rot + drot) % count
            legal = board.in_bounds(nr, nc) and board.can_place(kind, nrot, nr, nc)
            if move is Move.FALL and not legal:
                # Nothing below: this state is a landing
                landings.setdefault((col, rot), []).append(row)
                if target is not None and (col, rot) == target:
                    return landings, parents, node
            if not legal or visited[nr, nc, nrot]:
                continue
            visited[nr, nc, nrot] = True
            parents[(nr, nc, nrot)] = (node, move)
            queue.append((nr, nc, nrot))
    return landings, parents, None


def reachable_landings(board: GameGrid, kind: TetrominoType, spawn_col: int) -> Dict[Tuple[int, int], List[int]]:
    """Every ``(col, rotation)`` reachable from spawn as a no-further-fall state, with its rows."""
    landings, _, _ = _search(board, kind, spawn_col)
    return landings


def reachable_targets(board: GameGrid, kind: TetrominoType, spawn_col: int) -> Set[Tuple[int, int]]:
    return set(reachable_landings(board, kind, spawn_col))


def path_exists(board: GameGrid, kind: TetrominoType, spawn_col: int, col: int, rotation: int) -> bool:
    target = (col, rotation % shapes.rotation_count(kind))
    _, _, found = _search(board, kind, spawn_col, target)
    return found is not None


def find_path(
    board: GameGrid, kind: TetrominoType, spawn_col: int, col: int, rotation: int
) -> Optional[List[Move]]:
    """Shortest move sequence from spawn to a terminal state at ``(col, rotation)``."""
    target = (col, rotation % shapes.rotation_count(kind))
    _, parents, found = _search(board, kind, spawn_col, target)
    if found is None:
        return None
    moves: List[Move] = []
    node = found
    while node in parents:
        node, move = parents[node]
        moves.append(move)
    moves.reverse()
    return moves
