"""
One human-vs-computer 1A2B game.

The human guesses the computer's hidden number; the computer guesses the
number the human wrote down, and the human scores those guesses by hand.
The computer keeps the set of codes still consistent with that scoring,
complains when new feedback contradicts it, and lets the human correct an
earlier answer.

Rule problems (bad format, wrong turn, game over) never raise: they leave
the game untouched and set `message`. Broken preconditions on the
correction path raise ValueError.
"""

import logging
import random
from dataclasses import dataclass, replace
from time import time
from typing import List, Optional, Tuple
from uuid import uuid4

from . import messages
from .drafts import DraftFeedback, DraftGuess
from .engine import GuessRecord, calculate_feedback, format_feedback, validate_feedback, validate_number
from .messages import MessageInfo
from .random_client import generate_secret, pick_guess
from .solver import all_candidates, filter_by_feedback, is_consistent, is_guess_consistent_with_history, recompute_from_history
from .types import Code, FeedbackSlot, Phase, Player, Winner

logger = logging.getLogger(__name__)

HINT_BUDGET = 3
TERMINAL_PHASES = ("human_wins", "computer_wins", "draw")


@dataclass(frozen=True)
class MatchRecord:
    """Summary of a finished game, handed to the record store once."""
    id: str
    timestamp: float
    winner: Winner
    human_attempts: int
    computer_attempts: int
    total_rounds: int
    human_history: Tuple[GuessRecord, ...]
    computer_history: Tuple[GuessRecord, ...]


@dataclass
class CorrectionState:
    # armed by a complaint (or an empty candidate set)
    active: bool = False
    # the history editor is open
    show_history: bool = False


class GameSession:
    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.id = str(uuid4())
        self.rng = rng or random.Random()
        self.created_at = time()
        self.updated_at = self.created_at

        self.secret: Optional[Code] = None
        self.draft = DraftGuess()
        self.draft_feedback = DraftFeedback()
        self.started = False
        self.won = False
        self.phase: Phase = "not_started"
        self.turn: Player = "human"
        self.human_attempts = 0
        self.computer_attempts = 0
        self.hints_remaining = HINT_BUDGET
        self.message = MessageInfo()
        self.final_turn = False
        self.computer_guess: Optional[Code] = None
        self.winner: Optional[Winner] = None
        self.record: Optional[MatchRecord] = None
        self.correction = CorrectionState()

        self._candidates: set = set()
        self._human_history: List[GuessRecord] = []
        self._computer_history: List[GuessRecord] = []

    # --- read-only views ---

    @property
    def human_history(self) -> Tuple[GuessRecord, ...]:
        return tuple(self._human_history)

    @property
    def computer_history(self) -> Tuple[GuessRecord, ...]:
        return tuple(self._computer_history)

    @property
    def candidate_count(self) -> int:
        return len(self._candidates)

    @property
    def candidates_exhausted(self) -> bool:
        return self.started and not self._candidates

    @property
    def finished(self) -> bool:
        return self.phase in TERMINAL_PHASES

    # --- lifecycle ---

    def start_new_game(self, secret: Optional[Code] = None) -> None:
        """Fresh secret, empty histories, zeroed counters, full hint budget."""
        if secret is None:
            secret = generate_secret(self.rng)
        valid, key = validate_number(secret)
        if not valid:
            raise ValueError(f"Secret must be four unique digits ({key}).")

        self.secret = secret
        self.draft.clear()
        self.draft_feedback.clear()
        self.started = True
        self.won = False
        self.phase = "human_turn"
        self.turn = "human"
        self.human_attempts = 0
        self.computer_attempts = 0
        self.hints_remaining = HINT_BUDGET
        self.message = MessageInfo()
        self.final_turn = False
        self.computer_guess = None
        self.winner = None
        self.record = None
        self.correction = CorrectionState()
        self._candidates = all_candidates()
        self._human_history = []
        self._computer_history = []
        self._touch()

    def reset_game(self, secret: Optional[Code] = None) -> None:
        self.start_new_game(secret)

    # --- staged input ---

    def update_draft_guess(self, text: str) -> None:
        self.draft.set_text(text)
        self._touch()

    def update_draft_digit(self, index: int, value: str) -> None:
        self.draft.set_digit(index, value)
        self._touch()

    def update_draft_feedback(self, which: FeedbackSlot, value: Optional[int]) -> None:
        self.draft_feedback.set(which, value)
        self._touch()

    # --- human turn ---

    def submit_guess(self, guess: Optional[str] = None) -> None:
        """Score a guess (given, or the staged draft) against the hidden number."""
        if not self._can_act("human"):
            return

        code = guess if guess is not None else (self.draft.to_code() or self.draft.display())
        valid, key = validate_number(code)
        if not valid:
            self._say(key)
            return

        result = calculate_feedback(code, self.secret)
        record = GuessRecord(guess=code, result=result)
        self._human_history.append(record)
        self.human_attempts += 1
        self.draft.clear()

        if record.is_correct:
            if self.human_attempts > self.computer_attempts:
                # the computer is owed one last guess before anyone wins
                self.final_turn = True
                self._start_computer_turn()
            else:
                self._conclude("human")
        else:
            self._say(messages.YOUR_HINT, result=format_feedback(result))
            self._start_computer_turn()
        self._touch()

    def check_hint(self, guess: Optional[str] = None) -> Optional[bool]:
        """
        Could the drafted guess still be the computer's number, judging by
        the feedback the human has received so far? Costs one hint when
        the question can be answered; returns None when it was refused.
        """
        if not self._can_act(None):
            return None
        if self.hints_remaining <= 0:
            self._say(messages.NO_HINTS_REMAINING)
            return None
        if self.phase != "human_turn":
            self._say(messages.HINT_UNAVAILABLE)
            return None

        code = guess if guess is not None else (self.draft.to_code() or self.draft.display())
        valid, key = validate_number(code)
        if not valid:
            self._say(key)
            return None
        if not self._human_history:
            self._say(messages.HINT_NEEDS_HISTORY, remaining=self.hints_remaining)
            return None

        consistent = is_guess_consistent_with_history(code, self._human_history)
        self.hints_remaining -= 1
        if consistent:
            self._say(messages.HINT_CONSISTENT, type_="success", remaining=self.hints_remaining)
        else:
            self._say(messages.HINT_INCONSISTENT, remaining=self.hints_remaining)
        self._touch()
        return consistent

    # --- computer turn ---

    def submit_feedback(self, a: Optional[int] = None, b: Optional[int] = None) -> None:
        """Judge the computer's pending guess with the human's (A, B)."""
        if not self._can_act("computer"):
            return

        if a is None:
            a = self.draft_feedback.a
        if b is None:
            b = self.draft_feedback.b
        valid, key = validate_feedback(a, b)
        if not valid:
            self._say(key)
            return

        feedback = (a, b)
        guess = self.computer_guess
        if not is_consistent(guess, feedback, self._candidates):
            logger.info("game %s: feedback %s for %s contradicts history", self.id, format_feedback(feedback), guess)
            self.message = messages.complaint(guess, format_feedback(feedback), self.rng)
            self.correction.active = True
            self._touch()
            return

        record = GuessRecord(guess=guess, result=feedback)
        human_won = any(r.is_correct for r in self._human_history)

        if record.is_correct:
            self._computer_history.append(record)
            self.computer_attempts += 1
            self._conclude("draw" if human_won else "computer")
        elif human_won:
            # the final guess missed
            self._computer_history.append(record)
            self.computer_attempts += 1
            self._conclude("human")
        else:
            remaining = filter_by_feedback(self._candidates, guess, feedback)
            if not remaining:
                self._say(messages.NO_POSSIBLE_NUMBERS)
                self.correction.active = True
                self._touch()
                return
            self._computer_history.append(record)
            self._candidates = remaining
            self.computer_attempts += 1
            # consistent feedback settles any earlier complaint
            self.correction = CorrectionState()
            self._start_human_turn()
            self.message = MessageInfo()
        self.draft_feedback.clear()
        self._touch()

    # --- history correction ---

    def begin_correction(self) -> None:
        if not self.correction.active:
            raise ValueError("There is no complaint to resolve.")
        self.correction.show_history = True
        self._touch()

    def correct_feedback(self, index: int, a: int, b: int) -> None:
        """
        Replace the result of one of the computer's earlier guesses.
        Everything recorded after it was deduced from the bad answer and
        is dropped; the candidate set is rebuilt from scratch.
        """
        if self.phase != "computer_turn" or not self.correction.active:
            raise ValueError("Feedback can only be corrected after the computer complains.")
        if index < 0 or index >= len(self._computer_history):
            raise ValueError(f"No computer guess at index {index}.")
        valid, key = validate_feedback(a, b)
        if not valid:
            self._say(key)
            return

        self._computer_history[index] = replace(self._computer_history[index], result=(a, b))
        del self._computer_history[index + 1:]
        self._candidates = recompute_from_history(tuple(self._computer_history))
        logger.info(
            "game %s: corrected computer guess #%d to %s, %d candidates left",
            self.id, index + 1, format_feedback((a, b)), len(self._candidates),
        )

        self.correction = CorrectionState()
        self.message = MessageInfo()
        self.computer_guess = None
        self.draft_feedback.clear()
        if self.final_turn:
            # the human already found the number; the computer still owes its last guess
            self._start_computer_turn()
        else:
            # the interrupted turn still counts as played
            self.computer_attempts += 1
            self._start_human_turn()
        self._touch()

    def cancel_correction(self) -> None:
        self.correction = CorrectionState()
        self._touch()

    # --- helpers ---

    def _can_act(self, player: Optional[Player]) -> bool:
        if not self.started:
            self._say(messages.GAME_NOT_STARTED)
            return False
        if self.finished:
            self._say(messages.GAME_OVER)
            return False
        if player is not None and self.turn != player:
            self._say(messages.NOT_YOUR_TURN)
            return False
        return True

    def _say(self, key: str, type_: str = "info", **params) -> None:
        self.message = MessageInfo(key=key, params=params, type=type_)

    def _start_human_turn(self) -> None:
        self.phase = "human_turn"
        self.turn = "human"
        self.computer_guess = None

    def _start_computer_turn(self) -> None:
        self.phase = "computer_turn"
        self.turn = "computer"
        self.draft_feedback.clear()
        self.computer_guess = pick_guess(self._candidates, self.rng)
        if not self._candidates:
            # blind guess; any feedback will be refused until history is fixed
            self._say(messages.NO_POSSIBLE_NUMBERS, guess=self.computer_guess)
            self.correction.active = True
        elif self.final_turn:
            self._say(messages.COMPUTER_FINAL_GUESS, guess=self.computer_guess)
        else:
            self.message.params["guess"] = self.computer_guess

    def _conclude(self, winner: Winner) -> None:
        human_rounds = len(self._human_history)
        if winner == "draw":
            total_rounds = max(human_rounds, self.computer_attempts)
        else:
            total_rounds = human_rounds + self.computer_attempts

        self.phase = {"human": "human_wins", "computer": "computer_wins", "draw": "draw"}[winner]
        self.won = True
        self.winner = winner
        self.final_turn = False
        self.correction = CorrectionState()
        if winner == "human":
            self._say(messages.PLAYER_WON, type_="success")
        elif winner == "computer":
            self._say(messages.COMPUTER_WON, type_="success", computer_number=self.secret)
        else:
            self._say(messages.GAME_DRAW, type_="success")

        self.record = MatchRecord(
            id=str(uuid4()),
            timestamp=time(),
            winner=winner,
            human_attempts=self.human_attempts,
            computer_attempts=self.computer_attempts,
            total_rounds=total_rounds,
            human_history=tuple(self._human_history),
            computer_history=tuple(self._computer_history),
        )
        logger.info(
            "game %s finished: %s (human %d, computer %d)",
            self.id, winner, self.human_attempts, self.computer_attempts,
        )

    def _touch(self) -> None:
        self.updated_at = time()
