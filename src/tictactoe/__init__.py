"""Tic-tac-toe package exposing board rules, the minimax opponent, and the web application."""

from .ai import MinimaxAI, MoveChoice, select_move
from .board import detect_winner, is_full, open_cells
from .game import TicTacToeGame
from .ui import app

__all__ = [
    "MinimaxAI",
    "MoveChoice",
    "TicTacToeGame",
    "app",
    "detect_winner",
    "is_full",
    "open_cells",
    "select_move",
]
