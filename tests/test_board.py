"""Unit tests for the tic-tac-toe board evaluator."""

from itertools import product

import pytest

from tictactoe.board import (
    WINNING_LINES,
    detect_winner,
    game_result,
    is_full,
    is_terminal,
    new_board,
    open_cells,
    other_mark,
)


def _all_boards():
    for cells in product((None, "X", "O"), repeat=9):
        yield list(cells)


@pytest.mark.parametrize("line", WINNING_LINES)
@pytest.mark.parametrize("mark", ["X", "O"])
def test_detects_every_line(line, mark):
    board = new_board()
    for index in line:
        board[index] = mark
    assert detect_winner(board) == mark
    assert game_result(board) == mark


def test_lines_are_rows_then_columns_then_diagonals():
    assert WINNING_LINES[:3] == ((0, 1, 2), (3, 4, 5), (6, 7, 8))
    assert WINNING_LINES[3:6] == ((0, 3, 6), (1, 4, 7), (2, 5, 8))
    assert WINNING_LINES[6:] == ((0, 4, 8), (2, 4, 6))


def test_no_winner_without_full_line():
    board = ["X", "X", None, "O", "O", None, None, None, None]
    assert detect_winner(board) is None
    assert game_result(board) is None
    assert not is_terminal(board)


def test_full_board_without_line_is_a_tie():
    board = ["X", "O", "X", "X", "O", "O", "O", "X", "X"]
    assert detect_winner(board) is None
    assert is_full(board)
    assert open_cells(board) == []
    assert game_result(board) == "tie"


def test_winner_matches_line_scan_for_all_boards():
    for board in _all_boards():
        expected = {
            board[a]
            for a, b, c in WINNING_LINES
            if board[a] is not None and board[a] == board[b] == board[c]
        }
        winner = detect_winner(board)
        if expected:
            assert winner in expected
        else:
            assert winner is None


def test_open_cells_and_is_full_agree_for_all_boards():
    for board in _all_boards():
        cells = open_cells(board)
        filled = sum(1 for c in board if c is not None)
        assert len(cells) + filled == 9
        assert cells == sorted(cells)
        assert is_full(board) == (not cells)


def test_evaluator_does_not_mutate_board():
    board = ["X", None, "O", None, "X", None, None, None, "O"]
    snapshot = list(board)
    detect_winner(board)
    open_cells(board)
    is_full(board)
    assert board == snapshot


def test_other_mark():
    assert other_mark("X") == "O"
    assert other_mark("O") == "X"
