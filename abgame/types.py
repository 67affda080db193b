"""
Labels for clarity.
"""

from typing import List, Literal, Optional, Tuple

Digit = str  # "0" -> "9"
Code = str  # 4 unique digits, ex. "0132"
Feedback = Tuple[int, int]  # (A, B)
DraftSlots = List[Optional[Digit]]  # 4 slots, None = empty

Player = Literal["human", "computer"]
Winner = Literal["human", "computer", "draw", "none"]
MessageType = Literal["info", "success", "complaint"]
Phase = Literal["not_started", "human_turn", "computer_turn", "human_wins", "computer_wins", "draw"]
FeedbackSlot = Literal["A", "B"]
