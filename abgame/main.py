'''
1A2B API: you against the computer

Endpoints:
POST   /games                               -> start a game
GET    /games/{id}                          -> read state & histories
DELETE /games/{id}                          -> forget a game
POST   /games/{id}/reset                    -> fresh game in the same slot
PUT    /games/{id}/draft                    -> stage the whole draft guess
PUT    /games/{id}/draft/digits/{index}     -> stage one digit box
PUT    /games/{id}/draft/feedback           -> stage A or B for the computer's guess
POST   /games/{id}/guess                    -> submit a guess
POST   /games/{id}/feedback                 -> score the computer's guess
POST   /games/{id}/hint                     -> check the draft against your own history
POST   /games/{id}/correction               -> open the history editor after a complaint
PUT    /games/{id}/correction/{index}       -> fix one of your earlier answers
DELETE /games/{id}/correction               -> close the editor

Records of finished games:
GET    /records                             -> newest first
GET    /records/summary                     -> scoreboard
POST   /records/import                      -> load an exported list
DELETE /records                             -> clear

Rule problems (bad format, wrong turn...) are not HTTP errors: they come
back as a message key on the game state.
'''

import logging
import os
import random
from typing import Any, List, Optional

from fastapi import Body, FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware

from .random_client import fetch_secret
from .db import get_db                         # SQLAlchemy Session dependency
from .repository import MatchRecordRepository, to_guess_out  # DB-backed match records
from .bootstrap_db import create_all           # dev-only: create tables
from .session import GameSession
from .store import GameStore

from .schemas import (
    CorrectionOut,
    CorrectionRequest,
    DraftDigitRequest,
    DraftFeedbackOut,
    DraftFeedbackRequest,
    DraftGuessRequest,
    FeedbackRequest,
    GameState,
    GuessRequest,
    HintOut,
    HintRequest,
    ImportResult,
    MessageOut,
    RecordsSummaryOut,
    SavedMatchRecordV1,
)

APP_ENV = os.getenv("APP_ENV", "local")
COMPUTER_THINKING_MS = int(os.getenv("COMPUTER_THINKING_MS", "1000"))

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="1A2B API", version="1.0.0")

# Allow everything in dev so the docs and front-end work easily
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# --- Dev convenience: auto-create tables locally ---
if APP_ENV == "local":
    @app.on_event("startup")
    def _dev_create_tables():
        create_all()

# Live games are kept in memory for the lifetime of the process
_games = GameStore()

def get_games() -> GameStore:
    return _games

# Small factory so routes get a per-request record store (bound to the current DB session)
def get_records(session = Depends(get_db)) -> MatchRecordRepository:
    return MatchRecordRepository(session)

# --- Response builders ---

def _message_out(game: GameSession) -> MessageOut:
    return MessageOut(key=game.message.key, params=dict(game.message.params), type=game.message.type)

def _to_game_state(game: GameSession) -> GameState:
    return GameState(
        game_id=game.id,
        phase=game.phase,
        started=game.started,
        won=game.won,
        turn=game.turn,
        winner=game.winner,
        human_attempts=game.human_attempts,
        computer_attempts=game.computer_attempts,
        hints_remaining=game.hints_remaining,
        message=_message_out(game),
        draft_guess=list(game.draft.slots),
        draft_feedback=DraftFeedbackOut(A=game.draft_feedback.a, B=game.draft_feedback.b),
        computer_guess=game.computer_guess,
        final_turn=game.final_turn,
        candidate_count=game.candidate_count,
        candidates_exhausted=game.candidates_exhausted,
        correction=CorrectionOut(active=game.correction.active, show_history=game.correction.show_history),
        human_history=[to_guess_out(r) for r in game.human_history],
        computer_history=[to_guess_out(r) for r in game.computer_history],
        thinking_delay_ms=COMPUTER_THINKING_MS,
        # Keep UI behavior: when the game ends, include the secret in the response
        secret=game.secret if game.finished else None,
    )

def _found(game: Optional[GameSession]) -> GameState:
    if game is None:
        raise HTTPException(status_code=404, detail="Game not found")
    return _to_game_state(game)

# ---------------- Routes ----------------

@app.post("/games", response_model=GameState, summary="Start a new game")
def start_game(
    seed: Optional[int] = None,
    games: GameStore = Depends(get_games),
) -> GameState:
    """
    A seed makes the computer's choices repeatable (useful for demos and tests).
    """
    rng = random.Random(seed) if seed is not None else None
    secret = fetch_secret(rng)                      # random.org w/ local fallback
    return _to_game_state(games.create(secret, rng=rng))

@app.get("/games/{game_id}", response_model=GameState, summary="Get current game state")
def get_game(game_id: str, games: GameStore = Depends(get_games)) -> GameState:
    return _found(games.get(game_id))

@app.delete("/games/{game_id}", summary="Forget a game")
def delete_game(game_id: str, games: GameStore = Depends(get_games)) -> dict:
    if not games.discard(game_id):
        raise HTTPException(status_code=404, detail="Game not found")
    return {"message": "Game removed."}

@app.post("/games/{game_id}/reset", response_model=GameState, summary="Start over with a new secret")
def reset_game(game_id: str, games: GameStore = Depends(get_games)) -> GameState:
    game = games.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="Game not found")
    return _found(games.reset(game_id, fetch_secret(game.rng)))

# --- staged input ---

@app.put("/games/{game_id}/draft", response_model=GameState, summary="Stage the draft guess")
def update_draft(game_id: str, payload: DraftGuessRequest, games: GameStore = Depends(get_games)) -> GameState:
    try:
        game = games.update_draft_guess(game_id, payload.text)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    return _found(game)

@app.put("/games/{game_id}/draft/digits/{index}", response_model=GameState, summary="Stage one digit")
def update_draft_digit(
    game_id: str,
    index: int,
    payload: DraftDigitRequest,
    games: GameStore = Depends(get_games),
) -> GameState:
    try:
        game = games.update_draft_digit(game_id, index, payload.value)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    return _found(game)

@app.put("/games/{game_id}/draft/feedback", response_model=GameState, summary="Stage A or B")
def update_draft_feedback(
    game_id: str,
    payload: DraftFeedbackRequest,
    games: GameStore = Depends(get_games),
) -> GameState:
    try:
        game = games.update_draft_feedback(game_id, payload.which, payload.value)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    return _found(game)

# --- turns ---

@app.post("/games/{game_id}/guess", response_model=GameState, summary="Submit a guess")
def submit_guess(
    game_id: str,
    payload: Optional[GuessRequest] = None,
    games: GameStore = Depends(get_games),
    records: MatchRecordRepository = Depends(get_records),
) -> GameState:
    payload = payload or GuessRequest()
    return _found(games.guess(game_id, payload.guess, sink=records))

@app.post("/games/{game_id}/feedback", response_model=GameState, summary="Score the computer's guess")
def submit_feedback(
    game_id: str,
    payload: Optional[FeedbackRequest] = None,
    games: GameStore = Depends(get_games),
    records: MatchRecordRepository = Depends(get_records),
) -> GameState:
    payload = payload or FeedbackRequest()
    return _found(games.feedback(game_id, payload.a, payload.b, sink=records))

@app.post("/games/{game_id}/hint", response_model=HintOut, summary="Is my draft still possible?")
def check_hint(
    game_id: str,
    payload: Optional[HintRequest] = None,
    games: GameStore = Depends(get_games),
) -> HintOut:
    payload = payload or HintRequest()
    status, consistent, game = games.give_hint(game_id, payload.guess)
    if status == "not_found":
        raise HTTPException(status_code=404, detail="Game not found")
    return HintOut(consistent=consistent, hints_remaining=game.hints_remaining, message=_message_out(game))

# --- corrections ---

@app.post("/games/{game_id}/correction", response_model=GameState, summary="Open the history editor")
def begin_correction(game_id: str, games: GameStore = Depends(get_games)) -> GameState:
    try:
        game = games.begin_correction(game_id)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    return _found(game)

@app.put("/games/{game_id}/correction/{index}", response_model=GameState, summary="Fix an earlier answer")
def correct_feedback(
    game_id: str,
    index: int,
    payload: CorrectionRequest,
    games: GameStore = Depends(get_games),
) -> GameState:
    try:
        game = games.correct_feedback(game_id, index, payload.a, payload.b)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    return _found(game)

@app.delete("/games/{game_id}/correction", response_model=GameState, summary="Close the history editor")
def cancel_correction(game_id: str, games: GameStore = Depends(get_games)) -> GameState:
    return _found(games.cancel_correction(game_id))

# --- records ---

@app.get("/records", response_model=List[SavedMatchRecordV1], summary="Finished games, newest first")
def list_records(records: MatchRecordRepository = Depends(get_records)) -> List[SavedMatchRecordV1]:
    return records.list_records()

@app.get("/records/summary", response_model=RecordsSummaryOut, summary="Scoreboard")
def records_summary(records: MatchRecordRepository = Depends(get_records)) -> RecordsSummaryOut:
    return records.summary()

@app.post("/records/import", response_model=ImportResult, summary="Load exported records")
def import_records(
    payload: List[Any] = Body(...),
    records: MatchRecordRepository = Depends(get_records),
) -> ImportResult:
    return records.import_records(payload)

@app.delete("/records", summary="Clear all records")
def clear_records(records: MatchRecordRepository = Depends(get_records)) -> dict:
    removed = records.clear()
    return {"message": "Records cleared.", "removed": removed}
