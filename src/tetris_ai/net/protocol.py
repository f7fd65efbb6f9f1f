"""JSON-lines wire format of the remote planner.

Request (one line)::

    {"width": 10, "height": 20, "cells": [[...], ...],
     "currentShape": [[...]], "nextShape": [[...]] | null}

Response (one line)::

    {"opX": 4, "opRotate": 1}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from tetris_ai.game import shapes
from tetris_ai.game.grid import GameGrid
from tetris_ai.game.shapes import TetrominoType


Matrix = List[List[int]]


class ProtocolError(ValueError):
    """A line that does not decode into the expected message."""


def _matrix(value) -> Matrix:
    return np.asarray(value, dtype=int).tolist()


@dataclass
class PureGame:
    width: int
    height: int
    cells: Matrix
    current_shape: Matrix
    next_shape: Optional[Matrix] = None

    @classmethod
    def from_board(
        cls, board: GameGrid, kind: TetrominoType, next_kind: Optional[TetrominoType] = None
    ) -> "PureGame":
        return cls(
            width=board.cols,
            height=board.rows,
            cells=_matrix(board.grid),
            current_shape=_matrix(shapes.shape(kind, 0)),
            next_shape=_matrix(shapes.shape(next_kind, 0)) if next_kind is not None else None,
        )

    def to_json(self) -> str:
        return json.dumps({
            "width": self.width,
            "height": self.height,
            "cells": self.cells,
            "currentShape": self.current_shape,
            "nextShape": self.next_shape,
        })

    @classmethod
    def from_json(cls, line: str | bytes) -> "PureGame":
        try:
            data = json.loads(line)
            game = cls(
                width=int(data["width"]),
                height=int(data["height"]),
                cells=_matrix(data["cells"]),
                current_shape=_matrix(data["currentShape"]),
                next_shape=_matrix(data["nextShape"]) if data.get("nextShape") else None,
            )
        except (TypeError, KeyError, ValueError) as e:
            raise ProtocolError(f"malformed game request: {e}") from e
        if np.asarray(game.cells).shape != (game.height, game.width):
            raise ProtocolError("cells do not match width/height")
        return game

    def board(self) -> GameGrid:
        # Any non-zero value counts as occupied
        return GameGrid.from_array(np.asarray(self.cells) != 0)

    def current_kind(self) -> TetrominoType:
        found = shapes.kind_for_shape(self.current_shape)
        if found is None:
            raise ProtocolError(f"unknown current shape {self.current_shape}")
        return found[0]

    def next_kind(self) -> Optional[TetrominoType]:
        if self.next_shape is None:
            return None
        found = shapes.kind_for_shape(self.next_shape)
        return found[0] if found is not None else None


@dataclass
class OpMove:
    op_x: int
    op_rotate: int

    def to_json(self) -> str:
        return json.dumps({"opX": self.op_x, "opRotate": self.op_rotate})

    @classmethod
    def from_json(cls, line: str | bytes) -> "OpMove":
        try:
            data = json.loads(line)
            return cls(op_x=int(data["opX"]), op_rotate=int(data["opRotate"]))
        except (TypeError, KeyError, ValueError) as e:
            raise ProtocolError(f"malformed move response: {e}") from e
