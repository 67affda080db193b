"""
Candidate space: every 4-unique-digit code that could still be the hidden
number, given the feedback recorded so far.

All functions are pure and hand back new sets; callers own what they get.
"""

from itertools import permutations
from typing import FrozenSet, Iterable, Sequence

from .engine import DIGIT_COUNT, DIGITS, GuessRecord, calculate_feedback
from .types import Code, Feedback

# 10 * 9 * 8 * 7 = 5040 codes, built once
_UNIVERSE: FrozenSet[Code] = frozenset("".join(p) for p in permutations(DIGITS, DIGIT_COUNT))


def all_candidates() -> set:
    """All 5040 legal codes (a fresh, mutable copy)."""
    return set(_UNIVERSE)


def filter_by_feedback(candidates: Iterable[Code], guess: Code, feedback: Feedback) -> set:
    """
    Keep only the candidates that would answer `guess` with `feedback`
    if they were the hidden number. An empty result means the feedback
    contradicts what was recorded before.
    """
    wanted = tuple(feedback)
    return {c for c in candidates if calculate_feedback(guess, c) == wanted}


def recompute_from_history(history: Sequence[GuessRecord]) -> set:
    """Fold filter_by_feedback over the full universe, in history order."""
    candidates = all_candidates()
    for record in tuple(history):
        candidates = filter_by_feedback(candidates, record.guess, record.result)
    return candidates


def is_consistent(guess: Code, feedback: Feedback, candidates: Iterable[Code]) -> bool:
    """True if at least one candidate survives (guess, feedback)."""
    wanted = tuple(feedback)
    for c in candidates:
        if calculate_feedback(guess, c) == wanted:
            return True
    return False


def is_guess_consistent_with_history(candidate_guess: Code, history: Sequence[GuessRecord]) -> bool:
    """
    Could `candidate_guess` still be the opponent's number, given the
    feedback already received for `history`? Used for the player's hints.
    """
    return candidate_guess in recompute_from_history(history)
