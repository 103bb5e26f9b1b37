"""Round and score bookkeeping for a tic-tac-toe table."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .board import (
    MARKS,
    TIE,
    Board,
    Player,
    game_result,
    new_board,
    open_cells,
)

logger = logging.getLogger(__name__)

Mode = str  # "single" (vs AI) or "two" (hot seat)

MODES: Tuple[Mode, ...] = ("single", "two")
AI_PLAYER: Player = "O"


def empty_scores() -> Dict[str, int]:
    return {"X": 0, "O": 0, TIE: 0}


@dataclass
class TicTacToeGame:
    mode: Mode = "single"
    board: Board = field(default_factory=new_board)
    x_next: bool = True
    scores: Dict[str, int] = field(default_factory=empty_scores)

    def __post_init__(self) -> None:
        if self.mode not in MODES:
            raise ValueError(f"Unknown mode {self.mode!r}")

    # ---- derived state ----

    @property
    def winner(self) -> Optional[str]:
        """'X', 'O', 'tie', or None while the round is open."""
        return game_result(self.board)

    @property
    def current_player(self) -> Player:
        return "X" if self.x_next else "O"

    @property
    def active(self) -> bool:
        return self.winner is None and bool(open_cells(self.board))

    @property
    def ai_player(self) -> Optional[Player]:
        return AI_PLAYER if self.mode == "single" else None

    def available_moves(self) -> List[int]:
        return open_cells(self.board) if self.active else []

    # ---- mutation ----

    def play_move(self, index: int, mark: Optional[Player] = None) -> Player:
        """Place ``mark`` (default: the side to move) and pass the turn."""
        if self.winner is not None:
            raise ValueError("Game already finished")
        if not 0 <= index < 9:
            raise ValueError("Cell index out of range")
        if self.board[index] is not None:
            raise ValueError("Cell already occupied")
        if mark is not None and mark not in MARKS:
            raise ValueError(f"Unknown mark {mark!r}")

        player = mark or self.current_player
        self.board[index] = player
        self.x_next = not self.x_next

        result = self.winner
        if result is not None:
            self.scores[result] += 1
            logger.info("Round finished: %s (scores %s)", result, self.scores)
        return player

    def restart(self) -> None:
        """Fresh board with X to move; scores carry over."""
        self.board = new_board()
        self.x_next = True

    def change_mode(self, mode: Mode) -> bool:
        if mode not in MODES:
            raise ValueError(f"Unknown mode {mode!r}")
        if mode == self.mode:
            return False
        self.mode = mode
        self.scores = empty_scores()
        self.restart()
        return True

    # ---- presentation helpers ----

    def status_text(self) -> str:
        winner = self.winner
        if winner is not None:
            if winner == TIE:
                return "It's a tie!"
            if self.mode == "single":
                return "You win! 🎉" if winner == "X" else "AI wins!"
            return "Player 1 wins!" if winner == "X" else "Player 2 wins!"
        if not self.active:
            return ""
        if self.mode == "single":
            return "Your turn" if self.x_next else "AI's turn"
        return "Player 1's turn" if self.x_next else "Player 2's turn"

    def score_labels(self) -> Dict[str, str]:
        if self.mode == "single":
            return {"X": "Player (X)", "O": "AI (O)", TIE: "Ties"}
        return {"X": "Player 1 (X)", "O": "Player 2 (O)", TIE: "Ties"}
