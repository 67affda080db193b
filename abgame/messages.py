"""
Message keys shown to players.

The engine never writes natural language: it picks a key plus a small
bag of named parameters and the client translates them.
"""

import random
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .types import MessageType

# validation
FOUR_DIGITS_REQUIRED = "four_digits_required"
DIGITS_MUST_BE_UNIQUE = "digits_must_be_unique"
INVALID_FEEDBACK = "invalid_feedback"

# turn flow
YOUR_HINT = "your_hint"                      # {result}
COMPUTER_FINAL_GUESS = "computer_final_guess"  # {guess}
PLAYER_WON = "player_won"
COMPUTER_WON = "computer_won"                # {computer_number}
GAME_DRAW = "game_draw"
NO_POSSIBLE_NUMBERS = "no_possible_numbers"
NOT_YOUR_TURN = "not_your_turn"
GAME_OVER = "game_over"
GAME_NOT_STARTED = "game_not_started"

# hints
NO_HINTS_REMAINING = "no_hints_remaining"
HINT_NEEDS_HISTORY = "hint_needs_history"
HINT_UNAVAILABLE = "hint_unavailable"
HINT_CONSISTENT = "hint_consistent"
HINT_INCONSISTENT = "hint_inconsistent"

COMPLAINTS = (
    "complaints.inconsistent",
    "complaints.unreasonable",
    "complaints.joking",
    "complaints.problematic",
    "complaints.wrong",
)


@dataclass
class MessageInfo:
    key: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)
    type: MessageType = "info"


def complaint(guess: str, feedback: str, rng: Optional[random.Random] = None) -> MessageInfo:
    """The computer objects to feedback that contradicts its deductions."""
    key = (rng or random).choice(COMPLAINTS)
    return MessageInfo(key=key, params={"guess": guess, "feedback": feedback}, type="complaint")
