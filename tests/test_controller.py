from tetris_ai.ai import AiController, Plan
from tetris_ai.ai.controller import MOVE_NS, column_healthy
from tetris_ai.game import ActivePiece, GameConfig, GameSession, TetrominoType


class RecordingPlanner:
    def __init__(self, column=0, rotation=0):
        self.column = column
        self.rotation = rotation
        self.calls = []

    def plan(self, board, kind, next_kind=None, spawn_col=3, current_col=None, sweep_col=None):
        self.calls.append((kind, next_kind, current_col, sweep_col, spawn_col))
        return Plan(self.column, self.rotation)


def test_drives_line_piece_to_planned_landing(empty_board):
    controller = AiController()
    piece = ActivePiece(empty_board, TetrominoType.I, 3)
    now = 0
    for _ in range(100):
        if not controller.drive(0, piece, now, generation=1):
            break
        now += MOVE_NS
    assert piece.is_locked
    assert (piece.state.col, piece.state.rotation, piece.state.row) == (0, 0, 19)
    assert empty_board.grid[19, :4].tolist() == [1, 1, 1, 1]


def test_plans_once_per_generation(empty_board):
    planner = RecordingPlanner(column=3)
    controller = AiController(planner)
    piece = ActivePiece(empty_board, TetrominoType.T, 3)
    for t in range(3):
        controller.drive(0, piece, t * MOVE_NS, generation=1, next_kind=TetrominoType.O)
    assert len(planner.calls) == 1
    assert planner.calls[0][:3] == (TetrominoType.T, TetrominoType.O, 3)

    other = ActivePiece(empty_board, TetrominoType.S, 3)
    controller.drive(0, other, 10 * MOVE_NS, generation=2)
    assert len(planner.calls) == 2


def test_moves_are_rate_limited(empty_board):
    controller = AiController(RecordingPlanner(column=0))
    piece = ActivePiece(empty_board, TetrominoType.T, 3)
    assert controller.drive(0, piece, 0, generation=1)
    assert piece.state.col == 2
    assert controller.drive(0, piece, MOVE_NS // 2, generation=1)
    assert piece.state.col == 2
    assert controller.drive(0, piece, MOVE_NS, generation=1)
    assert piece.state.col == 1
    # travelling never drops the piece
    assert piece.state.row == 0


def test_rotates_in_the_shorter_direction(empty_board):
    controller = AiController(RecordingPlanner(column=3, rotation=3))
    piece = ActivePiece(empty_board, TetrominoType.T, 3)
    controller.drive(0, piece, 0, generation=1)
    assert piece.state.rotation == 3


def test_aligned_piece_soft_drops_every_tick(empty_board):
    controller = AiController(RecordingPlanner(column=3))
    piece = ActivePiece(empty_board, TetrominoType.O, 3)
    for t in range(5):
        assert controller.drive(0, piece, t, generation=1)
    assert piece.state.row == 5


def test_sides_keep_separate_state(empty_board):
    controller = AiController(RecordingPlanner(column=3))
    a = ActivePiece(empty_board, TetrominoType.O, 3)
    controller.drive(0, a, 0, generation=1)
    controller.drive(1, a, 0, generation=1)
    assert set(controller.states) == {0, 1}
    controller.forget(1)
    assert set(controller.states) == {0}


def test_column_health(empty_board):
    assert not column_healthy(empty_board, 0)
    for r in range(16, 20):
        empty_board.set(r, 0, 1)
    assert column_healthy(empty_board, 0)


def test_sweep_advances_after_lock_on_healthy_column(empty_board):
    controller = AiController(RecordingPlanner(column=0))
    for r in range(14, 20):
        empty_board.set(r, 0, 1)
    piece = ActivePiece(empty_board, TetrominoType.O, 0)
    now = 0
    while controller.drive(0, piece, now, generation=1):
        now += 1
    assert controller.state_for(0).sweep_col == 1


def test_session_plays_itself():
    session = GameSession(GameConfig(seed=1), controller=AiController())
    now = 0
    for _ in range(300):
        session.tick(now)
        now += MOVE_NS
    assert session.pieces_placed >= 5
    assert not session.game_over


def test_plans_from_where_the_piece_spawned(empty_board):
    for r in range(1, 20):
        empty_board.set(r, 5, 3)
    controller = AiController()
    piece = ActivePiece(empty_board, TetrominoType.O, 7)
    controller.drive(0, piece, 0, generation=1)
    assert controller.state_for(0).target_col in {6, 7, 8}


def test_session_spawn_column_reaches_the_planner():
    planner = RecordingPlanner(column=7)
    session = GameSession(GameConfig(spawn_col=7, seed=2), controller=AiController(planner))
    session.tick(0)
    session.tick(MOVE_NS)
    assert planner.calls[0][4] == session.spawn_column(session.active.kind)


def test_cadence_comes_from_config():
    controller = AiController.from_config(GameConfig(ai_move_interval_ms=50))
    assert controller.move_interval_ns == 50_000_000
    assert controller.rotate_interval_ns == 50_000_000
