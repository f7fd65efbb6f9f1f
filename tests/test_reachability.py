import pytest

from tetris_ai.ai import find_path, path_exists, reachable_landings, reachable_targets
from tetris_ai.game import ActivePiece, TetrominoType


def _walled(board):
    for r in range(1, 20):
        board.set(r, 6, 3)
    return board


def test_empty_board_reaches_every_fitting_column(empty_board):
    targets = reachable_targets(empty_board, TetrominoType.T, 3)
    assert targets == {(c, 0) for c in range(8)} | {(c, 2) for c in range(8)} \
        | {(c, 1) for c in range(9)} | {(c, 3) for c in range(9)}


def test_landings_report_rows(empty_board):
    landings = reachable_landings(empty_board, TetrominoType.O, 3)
    assert landings[(0, 0)] == [18]
    assert landings[(8, 0)] == [18]


def test_wall_cuts_off_columns_behind_it(empty_board):
    board = _walled(empty_board)
    o_targets = reachable_targets(board, TetrominoType.O, 3)
    assert (7, 0) not in o_targets
    assert (8, 0) not in o_targets
    assert (4, 0) in o_targets

    i_targets = reachable_targets(board, TetrominoType.I, 3)
    for col in (7, 8, 9):
        assert (col, 1) not in i_targets
        assert not path_exists(board, TetrominoType.I, 3, col, 1)
    # a flat piece can slide along the open top row and rest on the wall
    assert (6, 0) in i_targets
    assert reachable_landings(board, TetrominoType.I, 3)[(6, 0)] == [0]


def test_blocked_spawn_reaches_nothing(empty_board):
    empty_board.set(0, 4, 1)
    assert reachable_landings(empty_board, TetrominoType.O, 3) == {}
    assert find_path(empty_board, TetrominoType.O, 3, 0, 0) is None


@pytest.mark.parametrize("seed", range(6))
@pytest.mark.parametrize("kind", list(TetrominoType))
def test_found_paths_replay_to_a_resting_state(garbage, seed, kind):
    board = garbage(seed)
    spawn_col = 3
    for col, rot in sorted(reachable_targets(board, kind, spawn_col)):
        path = find_path(board, kind, spawn_col, col, rot)
        assert path is not None
        piece = ActivePiece(board, kind, spawn_col)
        for move in path:
            assert piece.apply(move)
        assert (piece.state.col, piece.state.rotation) == (col, rot)
        assert not piece.fits(piece.state.moved(1, 0, 0))


def test_search_is_deterministic(garbage):
    board = garbage(42)
    first = find_path(board, TetrominoType.L, 3, 0, 3)
    for _ in range(3):
        assert find_path(board, TetrominoType.L, 3, 0, 3) == first
    assert reachable_landings(board, TetrominoType.L, 3) == reachable_landings(board, TetrominoType.L, 3)
