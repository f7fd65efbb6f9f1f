from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, List, Optional, Tuple

import numpy as np

from . import shapes
from .bag import BagCursor, PieceBag
from .grid import GameGrid
from .pieces import ActivePiece
from .rules import ScoringRules
from .shapes import TetrominoType


logger = logging.getLogger(__name__)

NANOS_PER_SECOND = 1_000_000_000

PieceSource = Callable[[], TetrominoType]


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE_CW = 2
    ROTATE_CCW = 3
    SOFT_DROP = 4
    HARD_DROP = 5
    NONE = 6


@dataclass(frozen=True)
class GameConfig:
    rows: int = 20
    cols: int = 10
    gravity_cps: float = 2.0
    spawn_col: int = 3
    players: int = 1
    seed: Optional[int] = None
    # Cadence of AI moves and rotations
    ai_move_interval_ms: int = 120
    # Largest tick delta simulated at once; longer gaps are dropped, not replayed
    max_tick_ms: int = 250


@dataclass(frozen=True)
class SessionSnapshot:
    board: np.ndarray
    piece_kind: Optional[TetrominoType]
    piece_rotation: int
    piece_row: int
    piece_col: int
    piece_cells: Tuple[Tuple[int, int], ...]
    next_kind: Optional[TetrominoType]
    score: int
    lines: int
    elapsed_seconds: float
    paused: bool
    game_over: bool


class GameSession:
    """One board: gravity, locking, scoring, spawning and game-over.

    The session is driven by ``tick(now_ns)`` with a monotonic clock; external
    input goes through ``step(action)``. When a controller is attached the
    session hands it the active piece every tick before gravity applies.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        source: Optional[PieceSource] = None,
        controller=None,
        side_id: int = 0,
    ) -> None:
        self.config = config or GameConfig()
        if self.config.cols < shapes.MAX_SHAPE_WIDTH:
            raise ValueError(
                f"board {self.config.cols}x{self.config.rows} is narrower than the widest piece "
                f"({shapes.MAX_SHAPE_WIDTH})"
            )
        if self.config.players not in (1, 2):
            raise ValueError(f"players must be 1 or 2, got {self.config.players}")
        self.rules = rules or ScoringRules()
        self._own_bag = source is None
        self.source: PieceSource = source or PieceBag(self.config.seed).next
        self.controller = controller
        self.side_id = side_id
        self.board = GameGrid(self.config.rows, self.config.cols)
        self.active: Optional[ActivePiece] = None
        self.next_kind: Optional[TetrominoType] = None
        self.score = 0
        self.lines_cleared_total = 0
        self.pieces_placed = 0
        self.generation = 0
        self.elapsed_ns = 0
        self.paused = False
        self.game_over = False
        self._last_tick_ns: Optional[int] = None
        self._spawn()

    # ---------- lifecycle ----------
    def restart(self) -> None:
        """Discard board, piece and plan state and start over from the configuration."""
        self.board.reset()
        self.active = None
        self.next_kind = None
        self.score = 0
        self.lines_cleared_total = 0
        self.pieces_placed = 0
        self.elapsed_ns = 0
        self.paused = False
        self.game_over = False
        self._last_tick_ns = None
        if self._own_bag:
            self.source = PieceBag(self.config.seed).next
        elif isinstance(self.source, BagCursor):
            # Rewind to the start of the shared sequence so versus sides stay in step
            self.source = self.source.bag.cursor()
        if self.controller is not None:
            self.controller.forget(self.side_id)
        logger.info("side %d restarted", self.side_id)
        self._spawn()

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False
        # Re-anchor the clock so the paused interval is never simulated
        self._last_tick_ns = None

    def toggle_pause(self) -> None:
        if self.paused:
            self.resume()
        else:
            self.pause()

    # ---------- spawning & locking ----------
    def spawn_column(self, kind: TetrominoType) -> int:
        max_col = self.board.cols - shapes.width(kind, 0)
        return min(max(0, self.config.spawn_col), max_col)

    def _spawn(self) -> None:
        if self.next_kind is None:
            self.next_kind = self.source()
        kind = self.next_kind
        self.next_kind = self.source()
        self.generation += 1
        self.active = ActivePiece(self.board, kind, self.spawn_column(kind))
        if not self.active.fits():
            self.game_over = True
            logger.info(
                "side %d game over: score=%d lines=%d pieces=%d",
                self.side_id, self.score, self.lines_cleared_total, self.pieces_placed,
            )
        else:
            logger.debug("side %d spawned %s (generation %d)", self.side_id, kind.name, self.generation)

    def _handle_lock(self) -> int:
        lines = self.board.clear_full_rows()
        self.lines_cleared_total += lines
        self.score += self.rules.score_for_lines(lines)
        self.pieces_placed += 1
        if lines:
            logger.debug("side %d cleared %d line(s), score=%d", self.side_id, lines, self.score)
        self._spawn()
        return lines

    # ---------- clock ----------
    def tick(self, now_ns: int) -> None:
        if self._last_tick_ns is None:
            self._last_tick_ns = now_ns
            return
        delta = now_ns - self._last_tick_ns
        self._last_tick_ns = now_ns
        if self.paused or self.game_over or self.active is None:
            return
        delta = max(0, min(delta, self.config.max_tick_ms * 1_000_000))
        self.elapsed_ns += delta

        if self.controller is not None:
            self.controller.drive(self.side_id, self.active, now_ns, self.generation, self.next_kind)
            if self.active.is_locked:
                self._handle_lock()
                return

        if not self.active.fall(self.config.gravity_cps * delta / NANOS_PER_SECOND):
            self._handle_lock()

    # ---------- input ----------
    def step(self, action: Action) -> int:
        """Apply one input action. Returns the number of lines cleared by it."""
        if self.paused or self.game_over or self.active is None:
            return 0
        piece = self.active
        if action == Action.LEFT:
            piece.try_left()
        elif action == Action.RIGHT:
            piece.try_right()
        elif action == Action.ROTATE_CW:
            piece.try_rotate_cw()
        elif action == Action.ROTATE_CCW:
            piece.try_rotate_ccw()
        elif action == Action.SOFT_DROP:
            if not piece.soft_drop_or_lock():
                return self._handle_lock()
        elif action == Action.HARD_DROP:
            piece.hard_drop()
            return self._handle_lock()
        return 0

    # ---------- observation ----------
    @property
    def elapsed_seconds(self) -> float:
        return self.elapsed_ns / NANOS_PER_SECOND

    def snapshot(self) -> SessionSnapshot:
        piece = self.active
        if piece is not None and not self.game_over:
            s = piece.state
            kind: Optional[TetrominoType] = s.kind
            rot, row, col = s.rotation, s.row, s.col
            cells = tuple(s.cells())
        else:
            kind, rot, row, col, cells = None, 0, 0, 0, ()
        return SessionSnapshot(
            board=self.board.snapshot(),
            piece_kind=kind,
            piece_rotation=rot,
            piece_row=row,
            piece_col=col,
            piece_cells=cells,
            next_kind=self.next_kind,
            score=self.score,
            lines=self.lines_cleared_total,
            elapsed_seconds=self.elapsed_seconds,
            paused=self.paused,
            game_over=self.game_over,
        )

    def get_state(self) -> np.ndarray:
        # Overlay current piece on a copy of the grid for observation
        state = self.board.snapshot()
        if self.active is not None and not self.game_over:
            for r, c in self.active.state.cells():
                if self.board.in_bounds(r, c):
                    # Use negative to indicate falling piece overlay
                    state[r, c] = -int(self.active.kind)
        return state


def create_versus(
    config: Optional[GameConfig] = None,
    controllers: Tuple[object, object] = (None, None),
    rules: Optional[ScoringRules] = None,
) -> List[GameSession]:
    """Two sessions reading one shared 7-bag sequence in identical order."""
    config = config or GameConfig(players=2)
    bag = PieceBag(config.seed)
    return [
        GameSession(config, rules=rules, source=bag.cursor(), controller=controllers[side], side_id=side)
        for side in range(2)
    ]
