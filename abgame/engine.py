"""
Pure game logic (no HTTP, no storage).
We compute two feedback numbers for each guess:
- A: how many indices are exactly correct (right digit, right place)
- B: how many digits appear in both codes but at a different place

Legal codes never repeat a digit, but scoring is defensive and counts
duplicates as a multiset over the positions that are not already an A.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .types import Code, Feedback

DIGIT_COUNT = 4
DIGITS = "0123456789"


def calculate_feedback(guess: Code, target: Code) -> Feedback:
    """
    Example:
      guess  = "1234"
      target = "1324"
      A = 2  (the 1 and the 4)
      B = 2  (2 and 3 are present, just swapped)
      Returns a tuple: (A, B)
    """

    # 0. Validate lengths match
    n = len(target)
    if n == 0 or len(guess) != n:
        raise ValueError("Guess and target must be the same non-zero length.")

    # 1. Count exact position matches --> A
    a = 0
    guess_counts = [0] * 10
    target_counts = [0] * 10
    for g, t in zip(guess, target):
        if g == t:
            a += 1
            continue
        # 2. Only non-A positions take part in B
        if g in DIGITS:
            guess_counts[int(g)] += 1
        if t in DIGITS:
            target_counts[int(t)] += 1

    # B is the sum of the smaller count for each digit
    b = 0
    for digit in range(10):
        b += min(guess_counts[digit], target_counts[digit])

    return (a, b)


def is_win(guess: Code, target: Code) -> bool:
    """Win = all digits match in order."""
    if len(target) == 0 or len(guess) != len(target):
        return False
    return calculate_feedback(guess, target)[0] == len(target)


def format_feedback(feedback: Feedback) -> str:
    """(1, 2) -> "1A2B", the way results are shown to players."""
    return f"{feedback[0]}A{feedback[1]}B"


def validate_number(number: str) -> Tuple[bool, Optional[str]]:
    """
    Checks a guess or secret has exactly four unique digits.
    Returns (valid, message_key); message_key is None when valid.
    """
    if len(number) != DIGIT_COUNT or not all(ch in DIGITS for ch in number):
        return (False, "four_digits_required")
    if len(set(number)) != DIGIT_COUNT:
        return (False, "digits_must_be_unique")
    return (True, None)


def validate_feedback(a: Optional[int], b: Optional[int]) -> Tuple[bool, Optional[str]]:
    """A and B must both be set, each in 0..4, and A + B <= 4."""
    if a is None or b is None:
        return (False, "invalid_feedback")
    if a < 0 or a > DIGIT_COUNT or b < 0 or b > DIGIT_COUNT or a + b > DIGIT_COUNT:
        return (False, "invalid_feedback")
    return (True, None)


@dataclass(frozen=True)
class GuessRecord:
    """One scored guess. Corrections swap in a new record rather than editing this one."""
    guess: Code
    result: Feedback

    @property
    def is_correct(self) -> bool:
        return self.result[0] == DIGIT_COUNT
