"""Board rules for classic 3x3 tic-tac-toe."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

Player = str  # "X" or "O"
Cell = Optional[Player]
Board = List[Cell]

MARKS: Tuple[Player, Player] = ("X", "O")
TIE = "tie"

WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


def new_board() -> Board:
    return [None] * 9


def other_mark(mark: Player) -> Player:
    return "O" if mark == "X" else "X"


def detect_winner(board: Sequence[Cell]) -> Optional[Player]:
    """Return the mark holding a full line, checking rows, columns, then diagonals."""
    for a, b, c in WINNING_LINES:
        v = board[a]
        if v is not None and v == board[b] == board[c]:
            return v
    return None


def open_cells(board: Sequence[Cell]) -> List[int]:
    return [i for i, c in enumerate(board) if c is None]


def is_full(board: Sequence[Cell]) -> bool:
    return all(c is not None for c in board)


def game_result(board: Sequence[Cell]) -> Optional[str]:
    """'X' or 'O' for a win, 'tie' for a full board, None while still open."""
    winner = detect_winner(board)
    if winner is not None:
        return winner
    if is_full(board):
        return TIE
    return None


def is_terminal(board: Sequence[Cell]) -> bool:
    return game_result(board) is not None
