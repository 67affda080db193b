"""
Staged player input.

A draft guess is four slots, each empty or holding one digit. It only
becomes a code once every slot is filled; game rules (uniqueness, turn
order) are checked later, when the guess is submitted.
"""

from dataclasses import dataclass, field
from typing import Optional

from .engine import DIGIT_COUNT, DIGITS
from .types import Code, DraftSlots, FeedbackSlot


def _empty_slots() -> DraftSlots:
    return [None] * DIGIT_COUNT


@dataclass
class DraftGuess:
    slots: DraftSlots = field(default_factory=_empty_slots)

    def set_text(self, text: str) -> None:
        """
        Replace the whole draft. A space marks an empty slot, so "1 3"
        fills the first and third slots.
        """
        if len(text) > DIGIT_COUNT:
            raise ValueError(f"A guess has at most {DIGIT_COUNT} digits.")
        slots = _empty_slots()
        for index, ch in enumerate(text):
            if ch == " ":
                continue
            if ch not in DIGITS:
                raise ValueError("Only digits 0-9 can be entered.")
            slots[index] = ch
        self.slots = slots

    def set_digit(self, index: int, value: str) -> None:
        """Typing into one box: keep the last digit typed, '' clears it."""
        if index < 0 or index >= DIGIT_COUNT:
            raise ValueError(f"Digit index must be between 0 and {DIGIT_COUNT - 1}.")
        digits = [ch for ch in value if ch in DIGITS]
        self.slots[index] = digits[-1] if digits else None

    def clear(self) -> None:
        self.slots = _empty_slots()

    def to_code(self) -> Optional[Code]:
        """The canonical code, or None while a slot is still empty."""
        if any(slot is None for slot in self.slots):
            return None
        return "".join(self.slots)

    def display(self) -> str:
        return "".join(slot if slot is not None else " " for slot in self.slots).rstrip()


@dataclass
class DraftFeedback:
    a: Optional[int] = None
    b: Optional[int] = None

    def set(self, which: FeedbackSlot, value: Optional[int]) -> None:
        if which not in ("A", "B"):
            raise ValueError("Feedback slot must be 'A' or 'B'.")
        if value is not None and (value < 0 or value > DIGIT_COUNT):
            raise ValueError(f"Feedback values must be between 0 and {DIGIT_COUNT}.")
        if which == "A":
            self.a = value
        else:
            self.b = value

    def clear(self) -> None:
        self.a = None
        self.b = None
