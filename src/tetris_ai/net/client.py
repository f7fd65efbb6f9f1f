from __future__ import annotations

import logging
import socket
from typing import Optional

from tetris_ai.ai.planner import Plan, PlacementPlanner
from tetris_ai.game import shapes
from tetris_ai.game.grid import GameGrid
from tetris_ai.game.shapes import TetrominoType

from .protocol import OpMove, ProtocolError, PureGame


logger = logging.getLogger(__name__)

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 3000
DEFAULT_CONNECT_TIMEOUT = 2.0
DEFAULT_READ_TIMEOUT = 5.0
LINE_LIMIT = 1 << 20


class RemotePlannerError(Exception):
    """The remote planner could not be reached or answered with garbage."""


class TetrisClient:
    """Sends one game per connection and reads back one move line."""

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
    ) -> None:
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout

    def request_move(self, game: PureGame) -> OpMove:
        try:
            with socket.create_connection((self.host, self.port), timeout=self.connect_timeout) as sock:
                sock.settimeout(self.read_timeout)
                sock.sendall(game.to_json().encode("utf-8") + b"\n")
                with sock.makefile("rb") as reader:
                    line = reader.readline(LINE_LIMIT)
        except OSError as e:
            raise RemotePlannerError(f"{self.host}:{self.port}: {e}") from e
        if not line.strip():
            raise RemotePlannerError("empty response from server")
        try:
            return OpMove.from_json(line.decode("utf-8"))
        except (ProtocolError, UnicodeDecodeError) as e:
            raise RemotePlannerError(str(e)) from e


class RemotePlanner:
    """Planner back end that delegates to a remote service.

    Transport failures are logged and answered by ``fallback`` (the local
    planner by default) so the game keeps running.
    """

    def __init__(self, client: Optional[TetrisClient] = None, fallback: Optional[PlacementPlanner] = None) -> None:
        self.client = client or TetrisClient()
        self.fallback = fallback or PlacementPlanner()

    def plan(
        self,
        board: GameGrid,
        kind: TetrominoType,
        next_kind: Optional[TetrominoType] = None,
        spawn_col: int = 3,
        current_col: Optional[int] = None,
        sweep_col: Optional[int] = None,
    ) -> Plan:
        try:
            move = self.client.request_move(PureGame.from_board(board, kind, next_kind))
        except RemotePlannerError as e:
            logger.warning("remote planner unavailable (%s); planning locally", e)
            return self.fallback.plan(board, kind, next_kind, spawn_col, current_col, sweep_col)
        rotation = move.op_rotate % shapes.rotation_count(kind)
        column = min(max(0, move.op_x), board.cols - shapes.width(kind, rotation))
        return Plan(column, rotation)
