"""FastAPI-powered web UI for playing tic-tac-toe in the browser."""

from __future__ import annotations

import logging
import os
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field, field_validator

from .ai import MinimaxAI
from .game import AI_PLAYER, MODES, Mode, TicTacToeGame

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """Container for an active table and its optional AI opponent."""

    game: TicTacToeGame
    ai: Optional[MinimaxAI]
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    # Bumped on restart / mode change so a sleeping AI turn knows it is stale
    ticket: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="Tic Tac Toe", description="Classic tic-tac-toe played in the browser")


AI_THINK_DELAY: float = float(os.environ.get("TICTACTOE_AI_DELAY", "0.42"))


def _validate_mode(value: str) -> str:
    if value not in MODES:
        raise ValueError(
            f"Unsupported mode {value!r}. Choose one of {', '.join(MODES)}."
        )
    return value


class NewGameRequest(BaseModel):
    """Request payload for opening a new table."""

    mode: str = Field(default="single", description="'single' vs AI or 'two' players")

    @field_validator("mode")
    @classmethod
    def ensure_supported_mode(cls, value: str) -> str:
        return _validate_mode(value)


class ModeRequest(BaseModel):
    """Request payload for switching play mode."""

    mode: str

    @field_validator("mode")
    @classmethod
    def ensure_supported_mode(cls, value: str) -> str:
        return _validate_mode(value)


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    index: int = Field(ge=0, le=8)


def _make_ai(mode: Mode) -> Optional[MinimaxAI]:
    return MinimaxAI(player=AI_PLAYER) if mode == "single" else None


def _create_session(mode: Mode) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    game = TicTacToeGame(mode=mode)
    session = GameSession(game=game, ai=_make_ai(mode))
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info("Created %s-player game %s", mode, session_id)
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _cancel_pending_ai(session: GameSession) -> None:
    # Caller holds session.lock
    if session.ai_pending:
        logger.debug("Cancelling pending AI move (ticket %d)", session.ticket)
    session.ticket += 1
    session.ai_pending = False


def _run_ai_turn(game_id: str, ticket: int) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, AI_THINK_DELAY))

    with session.lock:
        if session.ticket != ticket:
            logger.debug("Dropping stale AI move for game %s", game_id)
            return
        try:
            if not session.ai:
                return
            game = session.game
            if not game.active:
                return
            if game.current_player != session.ai.player:
                return
            index = session.ai.choose(game.board)
            game.play_move(index, mark=session.ai.player)
            session.move_log.append({"player": session.ai.player, "index": index})
        finally:
            session.ai_pending = False


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        game = session.game
        state: Dict[str, object] = {
            "id": game_id,
            "mode": game.mode,
            "board": list(game.board),
            "currentPlayer": game.current_player,
            "winner": game.winner,
            "active": game.active,
            "scores": dict(game.scores),
            "scoreLabels": game.score_labels(),
            "status": game.status_text(),
            "availableMoves": game.available_moves(),
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    index: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_ai = False
    ticket = 0
    with session.lock:
        game = session.game
        if not game.active:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")

        if session.ai and game.current_player == session.ai.player:
            raise HTTPException(status_code=400, detail="It is not your turn")

        try:
            player = game.play_move(index)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        session.move_log.append({"player": player, "index": index})

        should_schedule_ai = (
            session.ai is not None
            and game.active
            and game.current_player == session.ai.player
        )
        if should_schedule_ai:
            session.ai_pending = True
            ticket = session.ticket

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id, ticket)


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request.mode)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.index, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/restart")
def restart_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        _cancel_pending_ai(session)
        session.game.restart()
        session.move_log.clear()
    logger.info("Restarted game %s", game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/mode")
def change_mode(game_id: str, request: ModeRequest) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        if session.game.change_mode(request.mode):
            _cancel_pending_ai(session)
            session.ai = _make_ai(request.mode)
            session.move_log.clear()
            logger.info("Game %s switched to %s-player mode", game_id, request.mode)
    return _serialize_session(game_id, session)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\" data-theme=\"light\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tic Tac Toe</title>
    <style>
      :root {
        --primary: #1976d2;
        --secondary: #424242;
        --accent: #ffc107;
        --bg: #ffffff;
        --fg: #13203a;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
      }
      [data-theme='dark'] {
        --bg: #1a1a1a;
        --fg: #f2f2f2;
      }
      body {
        margin: 0;
        min-height: 100vh;
        display: flex;
        flex-direction: column;
        align-items: center;
        justify-content: center;
        background: var(--bg);
        color: var(--fg);
      }
      h1 {
        color: var(--primary);
        margin-bottom: 0;
      }
      .tagline {
        opacity: 0.7;
        margin-bottom: 12px;
      }
      .scoreboard {
        display: flex;
        gap: 1.5rem;
        margin-bottom: 1rem;
      }
      .board {
        display: grid;
        grid-template-columns: repeat(3, 80px);
        grid-template-rows: repeat(3, 80px);
        gap: 6px;
      }
      .cell {
        font-size: 2.4rem;
        font-weight: 700;
        border: 2px solid var(--secondary);
        border-radius: 8px;
        background: transparent;
        color: var(--secondary);
        cursor: pointer;
      }
      .cell.x {
        color: var(--primary);
      }
      .cell.o {
        color: var(--accent);
      }
      .cell:disabled {
        cursor: not-allowed;
      }
      #status {
        min-height: 32px;
        margin-top: 18px;
        font-weight: 600;
      }
      #message {
        min-height: 1.2rem;
        color: #c62828;
      }
      .controls {
        display: flex;
        gap: 0.75rem;
        margin-top: 1rem;
      }
      .controls button {
        padding: 0.5rem 1rem;
        border: none;
        border-radius: 6px;
        color: white;
        background: var(--secondary);
        cursor: pointer;
      }
      .controls button.active {
        background: var(--primary);
      }
      #restart {
        background: var(--accent);
        color: #222;
      }
      #theme-toggle {
        position: absolute;
        top: 1rem;
        right: 1rem;
      }
    </style>
  </head>
  <body>
    <button id=\"theme-toggle\" type=\"button\">Dark</button>
    <h1>Tic Tac Toe</h1>
    <div class=\"tagline\">Play against AI or a friend.</div>
    <div id=\"scoreboard\" class=\"scoreboard\"></div>
    <div id=\"board\" class=\"board\" aria-label=\"Tic Tac Toe Board\"></div>
    <div id=\"status\" aria-live=\"polite\"></div>
    <div id=\"message\" role=\"status\"></div>
    <div class=\"controls\">
      <button id=\"mode-single\" type=\"button\">Single Player</button>
      <button id=\"mode-two\" type=\"button\">Two Player</button>
      <button id=\"restart\" type=\"button\">Restart Game</button>
    </div>
    <script>
      const boardEl = document.getElementById('board');
      const scoreboardEl = document.getElementById('scoreboard');
      const statusEl = document.getElementById('status');
      const messageEl = document.getElementById('message');
      const singleButton = document.getElementById('mode-single');
      const twoButton = document.getElementById('mode-two');
      const restartButton = document.getElementById('restart');
      const themeToggle = document.getElementById('theme-toggle');

      let gameId = null;
      let gameState = null;
      let isRequestPending = false;
      let aiPollHandle = null;

      function stopAiPolling() {
        if (aiPollHandle !== null) {
          clearTimeout(aiPollHandle);
          aiPollHandle = null;
        }
      }

      function ensureAiPolling() {
        if (aiPollHandle !== null) return;
        aiPollHandle = window.setTimeout(pollAiState, 450);
      }

      async function request(url, body) {
        const options = body === undefined
          ? {}
          : {
              method: 'POST',
              headers: { 'Content-Type': 'application/json' },
              body: JSON.stringify(body),
            };
        const response = await fetch(url, options);
        if (!response.ok) {
          const payload = await response.json().catch(() => ({}));
          const detail = typeof payload?.detail === 'string' ? payload.detail : 'Request failed';
          throw new Error(detail);
        }
        return response.json();
      }

      async function run(action) {
        if (isRequestPending) return;
        isRequestPending = true;
        messageEl.textContent = '';
        try {
          setState(await action());
        } catch (error) {
          messageEl.textContent = error.message || 'Network error. Please try again.';
        } finally {
          isRequestPending = false;
        }
      }

      function startGame(mode) {
        stopAiPolling();
        return run(() => request('/api/game', { mode }));
      }

      function changeMode(mode) {
        if (!gameId) return startGame(mode);
        if (gameState && gameState.mode === mode) return;
        stopAiPolling();
        return run(() => request(`/api/game/${gameId}/mode`, { mode }));
      }

      function restartGame() {
        if (!gameId) return startGame('single');
        stopAiPolling();
        return run(() => request(`/api/game/${gameId}/restart`, {}));
      }

      function sendMove(index) {
        if (!gameState || !gameState.active || gameState.aiPending) return;
        return run(() => request(`/api/game/${gameId}/move`, { index }));
      }

      async function pollAiState() {
        aiPollHandle = null;
        if (!gameId) return;
        try {
          setState(await request(`/api/game/${gameId}`));
        } catch (error) {
          console.error('Polling failed', error);
        }
      }

      function setState(data) {
        gameId = data.id;
        gameState = data;
        render();
        if (gameState.aiPending && gameState.active) {
          ensureAiPolling();
        } else {
          stopAiPolling();
        }
      }

      function render() {
        boardEl.innerHTML = '';
        const moves = new Set(gameState.availableMoves);
        const humanTurn =
          gameState.mode === 'two' || (gameState.currentPlayer === 'X' && !gameState.aiPending);
        gameState.board.forEach((value, index) => {
          const cell = document.createElement('button');
          cell.type = 'button';
          cell.classList.add('cell');
          if (value) {
            cell.classList.add(value === 'X' ? 'x' : 'o');
            cell.textContent = value;
          }
          cell.setAttribute('aria-label', value ? `Cell: ${value}` : 'Empty cell');
          cell.disabled = !(moves.has(index) && humanTurn);
          cell.addEventListener('click', () => sendMove(index));
          boardEl.appendChild(cell);
        });

        scoreboardEl.innerHTML = '';
        ['X', 'O', 'tie'].forEach((key) => {
          const entry = document.createElement('div');
          entry.textContent = `${gameState.scoreLabels[key]}: ${gameState.scores[key]}`;
          scoreboardEl.appendChild(entry);
        });

        statusEl.textContent = gameState.status;
        singleButton.classList.toggle('active', gameState.mode === 'single');
        twoButton.classList.toggle('active', gameState.mode === 'two');
      }

      singleButton.addEventListener('click', () => changeMode('single'));
      twoButton.addEventListener('click', () => changeMode('two'));
      restartButton.addEventListener('click', restartGame);
      themeToggle.addEventListener('click', () => {
        const root = document.documentElement;
        const next = root.getAttribute('data-theme') === 'light' ? 'dark' : 'light';
        root.setAttribute('data-theme', next);
        themeToggle.textContent = next === 'light' ? 'Dark' : 'Light';
      });

      startGame('single');
    </script>
  </body>
</html>
"""
