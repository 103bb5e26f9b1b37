"""Tests for the tic-tac-toe minimax AI."""

from functools import lru_cache

import pytest

from tictactoe.ai import MinimaxAI, select_move
from tictactoe.board import (
    detect_winner,
    is_full,
    is_terminal,
    new_board,
    open_cells,
    other_mark,
)


@lru_cache(maxsize=None)
def _value(cells, mover):
    """Plain negamax game value, used as an oracle."""
    winner = detect_winner(cells)
    if winner is not None:
        return 1 if winner == mover else -1
    if is_full(cells):
        return 0
    return max(
        -_value(cells[:i] + (mover,) + cells[i + 1 :], other_mark(mover))
        for i in open_cells(cells)
    )


def _reachable_positions(first):
    seen = set()
    stack = [(tuple(new_board()), first)]
    while stack:
        cells, mover = stack.pop()
        if (cells, mover) in seen or is_terminal(cells):
            continue
        seen.add((cells, mover))
        for i in open_cells(cells):
            stack.append((cells[:i] + (mover,) + cells[i + 1 :], other_mark(mover)))
    return seen


def test_ai_blocks_row_threat():
    board = ["X", "X", None, "O", "O", None, None, None, None]
    choice = select_move(board, "O", "X")
    assert choice.index == 2
    assert choice.score == 1


def test_ai_takes_immediate_win():
    board = ["O", "O", None, "X", "X", None, None, None, None]
    choice = select_move(board, "O", "X")
    assert (choice.index, choice.score) == (2, 1)


def test_ai_blocks_column_threat():
    board = ["O", "X", None, None, "X", None, None, None, None]
    assert select_move(board, "O", "X").index == 7


def test_search_is_symmetric_between_marks():
    board = ["X", "X", None, "O", "O", None, None, None, None]
    mirrored = [other_mark(c) if c else None for c in board]
    assert select_move(board, "O", "X") == select_move(mirrored, "X", "O")


def test_ties_keep_lowest_index():
    # Every first move from an empty board draws; the first one is kept
    choice = select_move(new_board(), "X", "O")
    assert choice.index == 0
    assert choice.score == 0


def test_select_move_does_not_mutate_board():
    board = ["X", None, None, None, "O", None, None, None, None]
    snapshot = list(board)
    select_move(board, "X", "O")
    assert board == snapshot


@pytest.mark.parametrize("first", ["X", "O"])
def test_ai_is_optimal_in_every_reachable_position(first):
    for cells, mover in _reachable_positions(first):
        choice = select_move(list(cells), mover, other_mark(mover))
        assert cells[choice.index] is None
        best = _value(cells, mover)
        child = cells[: choice.index] + (mover,) + cells[choice.index + 1 :]
        assert -_value(child, other_mark(mover)) == best
        assert choice.score == best


@pytest.mark.parametrize("first", ["X", "O"])
def test_self_play_from_empty_board_is_a_tie(first):
    board = new_board()
    mover = first
    while not is_terminal(board):
        choice = select_move(board, mover, other_mark(mover))
        board[choice.index] = mover
        mover = other_mark(mover)
    assert detect_winner(board) is None
    assert is_full(board)


def test_decided_board_has_no_move():
    board = ["X", "X", "X", "O", "O", None, None, None, None]
    choice = select_move(board, "O", "X")
    assert choice.index is None
    assert choice.score == -1


def test_minimax_ai_refuses_full_board():
    ai = MinimaxAI(player="O")
    board = ["X", "O", "X", "X", "O", "O", "O", "X", "X"]
    with pytest.raises(RuntimeError):
        ai.choose(board)


def test_minimax_ai_returns_open_cell():
    ai = MinimaxAI(player="O")
    board = ["X", None, None, None, None, None, None, None, None]
    move = ai.choose(board)
    assert board[move] is None
    assert ai.opponent == "X"
