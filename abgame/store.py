"""
In-memory store
Holds live games in memory. Finished games are handed to a record sink
(the database repository in the app) exactly once.
"""

import logging
import random
from threading import RLock
from typing import Callable, Dict, Optional, Protocol

from .session import GameSession, MatchRecord
from .types import Code, FeedbackSlot

logger = logging.getLogger(__name__)


class MatchRecordSink(Protocol):
    def append_match_record(self, record: MatchRecord) -> None:
        ...


class GameStore:
    def __init__(self) -> None:
        self._games: Dict[str, GameSession] = {}
        self._lock = RLock()

    def create(self, secret: Optional[Code] = None, rng: Optional[random.Random] = None) -> GameSession:
        game = GameSession(rng=rng)
        game.start_new_game(secret)
        with self._lock:
            self._games[game.id] = game
        logger.info("game %s started", game.id)
        return game

    def get(self, game_id: str) -> Optional[GameSession]:
        with self._lock:
            return self._games.get(game_id)

    def discard(self, game_id: str) -> bool:
        with self._lock:
            return self._games.pop(game_id, None) is not None

    def reset(self, game_id: str, secret: Optional[Code] = None) -> Optional[GameSession]:
        return self._apply(game_id, None, lambda game: game.reset_game(secret))

    # --- staged input ---

    def update_draft_guess(self, game_id: str, text: str) -> Optional[GameSession]:
        return self._apply(game_id, None, lambda game: game.update_draft_guess(text))

    def update_draft_digit(self, game_id: str, index: int, value: str) -> Optional[GameSession]:
        return self._apply(game_id, None, lambda game: game.update_draft_digit(index, value))

    def update_draft_feedback(self, game_id: str, which: FeedbackSlot, value: Optional[int]) -> Optional[GameSession]:
        return self._apply(game_id, None, lambda game: game.update_draft_feedback(which, value))

    # --- turns ---

    def guess(self, game_id: str, attempt: Optional[str] = None, sink: Optional[MatchRecordSink] = None) -> Optional[GameSession]:
        return self._apply(game_id, sink, lambda game: game.submit_guess(attempt))

    def feedback(
        self,
        game_id: str,
        a: Optional[int] = None,
        b: Optional[int] = None,
        sink: Optional[MatchRecordSink] = None,
    ) -> Optional[GameSession]:
        return self._apply(game_id, sink, lambda game: game.submit_feedback(a, b))

    def give_hint(self, game_id: str, attempt: Optional[str] = None):
        """
        Returns a tuple like ("ok", True/False, game)
        Or: ("refused", None, game) if the hint could not be given (see game.message)
            ("not_found", None, None) if no game
        """
        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                return ("not_found", None, None)
            consistent = game.check_hint(attempt)
            if consistent is None:
                return ("refused", None, game)
            return ("ok", consistent, game)

    # --- corrections ---

    def begin_correction(self, game_id: str) -> Optional[GameSession]:
        return self._apply(game_id, None, lambda game: game.begin_correction())

    def correct_feedback(self, game_id: str, index: int, a: int, b: int) -> Optional[GameSession]:
        return self._apply(game_id, None, lambda game: game.correct_feedback(index, a, b))

    def cancel_correction(self, game_id: str) -> Optional[GameSession]:
        return self._apply(game_id, None, lambda game: game.cancel_correction())

    def _apply(
        self,
        game_id: str,
        sink: Optional[MatchRecordSink],
        action: Callable[[GameSession], None],
    ) -> Optional[GameSession]:
        record = None
        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                return None

            was_finished = game.finished
            action(game)

            # Hand the record over exactly once, on the transition into a finished state
            if sink is not None and not was_finished and game.finished:
                record = game.record

        # outside the lock: the sink may write to the database
        if record is not None:
            sink.append_match_record(record)
        return game
