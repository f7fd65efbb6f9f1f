import pytest

from tetris_ai.game import ActivePiece, Move, PieceStatus, TetrominoType


def test_failed_move_leaves_state_untouched(empty_board):
    piece = ActivePiece(empty_board, TetrominoType.O, 0)
    before = piece.state
    assert piece.try_left() is False
    assert piece.state is before
    assert piece.try_move(-1, 0, 0) is False
    assert piece.state is before


def test_successful_move_replaces_state(empty_board):
    piece = ActivePiece(empty_board, TetrominoType.T, 3)
    before = piece.state
    assert piece.try_right()
    assert piece.state is not before
    assert (piece.state.row, piece.state.col) == (0, 4)
    assert (before.row, before.col) == (0, 3)


def test_rotation_wraps_modulo_count(empty_board):
    piece = ActivePiece(empty_board, TetrominoType.S, 3)
    assert piece.try_rotate_cw()
    assert piece.state.rotation == 1
    assert piece.try_rotate_cw()
    assert piece.state.rotation == 0
    assert piece.try_rotate_ccw()
    assert piece.state.rotation == 1


def test_blocked_rotation_is_rejected(empty_board):
    piece = ActivePiece(empty_board, TetrominoType.I, 3)
    empty_board.set(2, 3, 5)
    assert piece.try_rotate_cw() is False
    assert piece.state.rotation == 0


def test_soft_drop_then_lock(empty_board):
    piece = ActivePiece(empty_board, TetrominoType.O, 4)
    moves = 0
    while piece.soft_drop_or_lock():
        moves += 1
    assert moves == 18
    assert piece.status is PieceStatus.LOCKED
    assert piece.is_locked
    assert empty_board.get(18, 4) == int(TetrominoType.O)
    assert empty_board.get(19, 5) == int(TetrominoType.O)
    # locked is terminal
    assert piece.try_left() is False
    assert piece.soft_drop_or_lock() is False


def test_hard_drop_reports_rows(empty_board):
    piece = ActivePiece(empty_board, TetrominoType.I, 3)
    assert piece.try_rotate_cw()
    assert piece.hard_drop() == 16
    assert piece.is_locked
    assert [empty_board.get(r, 3) for r in range(16, 20)] == [1, 1, 1, 1]


def test_apply_uses_move_deltas(empty_board):
    piece = ActivePiece(empty_board, TetrominoType.T, 3)
    assert piece.apply(Move.FALL)
    assert piece.apply(Move.LEFT)
    assert piece.apply(Move.ROTATE_180)
    assert (piece.state.row, piece.state.col, piece.state.rotation) == (1, 2, 2)


def test_fractional_gravity_steps_on_row_boundaries(empty_board):
    piece = ActivePiece(empty_board, TetrominoType.T, 3)
    assert piece.fall(0.4)
    assert piece.state.row == 0
    assert piece.fall(0.4)
    assert piece.state.row == 0
    assert piece.fall(0.4)
    assert piece.state.row == 1
    assert piece.fall_progress == pytest.approx(0.2)
    assert piece.fall(2.0)
    assert piece.state.row == 3


def test_gravity_locks_when_blocked(empty_board):
    piece = ActivePiece(empty_board, TetrominoType.O, 0)
    assert piece.fall(100.0) is False
    assert piece.is_locked
    assert empty_board.get(19, 0) == int(TetrominoType.O)
