"""Exhaustive minimax opponent for tic-tac-toe with a transposition table."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from .board import Cell, Player, detect_winner, is_full, open_cells, other_mark

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoveChoice:
    """Chosen cell and its game value for the side to move (+1 win, 0 tie, -1 loss).

    ``index`` is None only when the position was already decided.
    """

    index: Optional[int]
    score: int


# (cells, mover, waiting) -> MoveChoice
_TT: Dict[Tuple[Tuple[Cell, ...], Player, Player], MoveChoice] = {}


def select_move(
    board: Sequence[Cell], opponent_mark: Player, other: Player
) -> MoveChoice:
    """Pick the best cell for ``opponent_mark`` to play next.

    Every open cell is searched to the end of the game. Among equally scored
    moves the lowest index wins, and a guaranteed win stops the scan of
    sibling moves. The board is never mutated.
    """
    return _search(tuple(board), opponent_mark, other)


def _search(
    cells: Tuple[Cell, ...], mover: Player, waiting: Player
) -> MoveChoice:
    key = (cells, mover, waiting)
    hit = _TT.get(key)
    if hit is not None:
        return hit

    # Terminal scores are from the mover's point of view
    winner = detect_winner(cells)
    if winner is not None and winner == mover:
        result = MoveChoice(None, 1)
    elif winner is not None and winner == waiting:
        result = MoveChoice(None, -1)
    elif is_full(cells):
        result = MoveChoice(None, 0)
    else:
        result = _best_child(cells, mover, waiting)

    _TT[key] = result
    return result


def _best_child(
    cells: Tuple[Cell, ...], mover: Player, waiting: Player
) -> MoveChoice:
    moves = open_cells(cells)
    best_index: Optional[int] = None
    best_score = -2

    for idx in moves:
        child = cells[:idx] + (mover,) + cells[idx + 1 :]
        # Child is scored for the waiting side; negate back to ours
        score = -_search(child, waiting, mover).score
        if score > best_score:
            best_score, best_index = score, idx
        if score == 1:
            break

    if best_index is None:
        # Fallback to first open cell
        return MoveChoice(moves[0], 0)
    return MoveChoice(best_index, best_score)


def clear_cache() -> None:
    _TT.clear()


def cache_size() -> int:
    return len(_TT)


@dataclass
class MinimaxAI:
    """Automated player: MinimaxAI(player="O").choose(board) -> cell index."""

    player: Player = "O"

    @property
    def opponent(self) -> Player:
        return other_mark(self.player)

    def choose(self, board: Sequence[Cell]) -> int:
        choice = select_move(board, self.player, self.opponent)
        if choice.index is None:
            raise RuntimeError("No valid moves available")
        logger.debug(
            "AI %s picks %d (score %d, %d cached positions)",
            self.player,
            choice.index,
            choice.score,
            cache_size(),
        )
        return choice.index
