"""
Explicit validation & Pydantic models
- Request/response bodies exchanged with the client.
- The saved match record, versioned. Every stored or imported record is
  parsed against the schema of its own version; anything that does not
  parse is rejected instead of being guessed at.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

CURRENT_SCHEMA_VERSION = 1

WinnerLiteral = Literal["human", "computer", "draw", "none"]
PhaseLiteral = Literal["not_started", "human_turn", "computer_turn", "human_wins", "computer_wins", "draw"]


# 1. Feedback for one guess, {"A": 1, "B": 2}
class FeedbackOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    a: int = Field(..., alias="A", ge=0, le=4, description="Right digit, right place")
    b: int = Field(..., alias="B", ge=0, le=4, description="Right digit, wrong place")

    @model_validator(mode="after")
    def check_total(self) -> "FeedbackOut":
        if self.a + self.b > 4:
            raise ValueError("A + B cannot exceed 4.")
        return self


# 2. One scored guess in a history
class GuessRecordOut(BaseModel):
    guess: str = Field(..., pattern=r"^\d{4}$", description="The guessed code")
    result: FeedbackOut
    is_correct: bool = Field(..., description="True iff A == 4")

    @field_validator("guess")
    @classmethod
    def digits_unique(cls, guess: str) -> str:
        if len(set(guess)) != 4:
            raise ValueError("Guess digits must be unique.")
        return guess

    @model_validator(mode="after")
    def check_correct_flag(self) -> "GuessRecordOut":
        if self.is_correct != (self.result.a == 4):
            raise ValueError("is_correct must match A == 4.")
        return self


# 3. A message key the client translates
class MessageOut(BaseModel):
    key: Optional[str] = Field(None, description="Translation key; None means no message")
    params: Dict[str, Any] = Field(default_factory=dict, description="Named parameters for the key")
    type: Literal["info", "success", "complaint"] = "info"


class DraftFeedbackOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    a: Optional[int] = Field(None, alias="A")
    b: Optional[int] = Field(None, alias="B")


class CorrectionOut(BaseModel):
    active: bool = Field(..., description="A complaint is outstanding and history can be corrected")
    show_history: bool = Field(..., description="The history editor is open")


# 4. Everything the client may show about a game
class GameState(BaseModel):
    game_id: str
    phase: PhaseLiteral
    started: bool
    won: bool
    turn: Literal["human", "computer"]
    winner: Optional[WinnerLiteral] = None
    human_attempts: int
    computer_attempts: int
    hints_remaining: int
    message: MessageOut
    draft_guess: List[Optional[str]] = Field(..., description="Four slots, null = empty")
    draft_feedback: DraftFeedbackOut
    computer_guess: Optional[str] = Field(None, description="The computer's guess awaiting feedback")
    final_turn: bool = Field(..., description="The human found the number; the computer has one last guess")
    candidate_count: int = Field(..., description="Codes still consistent with the computer's history")
    candidates_exhausted: bool
    correction: CorrectionOut
    human_history: List[GuessRecordOut]
    computer_history: List[GuessRecordOut]
    thinking_delay_ms: int = Field(..., description="How long the client should pause before showing a computer guess")
    secret: Optional[str] = Field(None, description="The computer's number (only revealed once the game is over)")


# 5. Requests
class GuessRequest(BaseModel):
    guess: Optional[str] = Field(
        None, description="Four unique digits; omit to submit the staged draft. Format problems come back as a message."
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"guess": "0123"},
                {},
            ]
        }
    }


class FeedbackRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    a: Optional[int] = Field(None, alias="A", description="Omit to use the staged value")
    b: Optional[int] = Field(None, alias="B", description="Omit to use the staged value")


class DraftGuessRequest(BaseModel):
    text: str = Field(..., max_length=4, description="Digits, with spaces for empty slots")


class DraftDigitRequest(BaseModel):
    value: str = Field(..., max_length=8, description="What was typed into one box; '' clears it")


class DraftFeedbackRequest(BaseModel):
    which: Literal["A", "B"]
    value: Optional[int] = Field(None, ge=0, le=4)


class HintRequest(BaseModel):
    guess: Optional[str] = Field(None, description="Omit to check the staged draft")


class CorrectionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    a: int = Field(..., alias="A")
    b: int = Field(..., alias="B")


class HintOut(BaseModel):
    consistent: Optional[bool] = Field(None, description="None when the hint was refused")
    hints_remaining: int
    message: MessageOut


# 6. Saved match records
class SavedMatchRecordV1(BaseModel):
    schema_version: Literal[1] = 1
    id: str
    timestamp: float = Field(..., description="Seconds since the epoch")
    winner: WinnerLiteral
    human_attempts: int = Field(..., ge=0)
    computer_attempts: int = Field(..., ge=0)
    total_rounds: int = Field(..., ge=0)
    human_history: List[GuessRecordOut]
    computer_history: List[GuessRecordOut]

    @field_validator("timestamp")
    @classmethod
    def timestamp_in_range(cls, timestamp: float) -> float:
        # must survive the trip into a DATETIME column
        try:
            datetime.fromtimestamp(timestamp)
        except (OverflowError, OSError, ValueError):
            raise ValueError(f"Timestamp {timestamp!r} is out of range.")
        return timestamp


def _parse_legacy_result(value: Union[str, Dict[str, Any]]) -> Dict[str, int]:
    # old clients stored either {"A": 1, "B": 2} or "1A2B"
    if isinstance(value, str):
        text = value.strip().upper()
        if len(text) != 4 or text[1] != "A" or text[3] != "B" or not (text[0].isdigit() and text[2].isdigit()):
            raise ValueError(f"Unreadable result {value!r}.")
        return {"A": int(text[0]), "B": int(text[2])}
    if "A" not in value or "B" not in value:
        raise ValueError(f"Unreadable result {value!r}.")
    return {"A": value["A"], "B": value["B"]}


class LegacyGuessRecord(BaseModel):
    guess: str
    result: Union[str, Dict[str, Any]]
    isCorrect: bool

    def migrate(self) -> GuessRecordOut:
        return GuessRecordOut(
            guess=self.guess,
            result=FeedbackOut(**_parse_legacy_result(self.result)),
            is_correct=self.isCorrect,
        )


class LegacyMatchRecord(BaseModel):
    """Unversioned export written by the browser-only version of the game."""
    id: str
    timestamp: float = Field(..., description="Milliseconds since the epoch")
    winner: Optional[Literal["player", "computer", "draw"]] = None
    playerAttempts: int
    computerAttempts: int
    totalRounds: int
    playerHistory: List[LegacyGuessRecord]
    computerHistory: List[LegacyGuessRecord]

    def migrate(self) -> SavedMatchRecordV1:
        winner = {"player": "human", "computer": "computer", "draw": "draw", None: "none"}[self.winner]
        return SavedMatchRecordV1(
            id=self.id,
            timestamp=self.timestamp / 1000.0,
            winner=winner,
            human_attempts=self.playerAttempts,
            computer_attempts=self.computerAttempts,
            total_rounds=self.totalRounds,
            human_history=[r.migrate() for r in self.playerHistory],
            computer_history=[r.migrate() for r in self.computerHistory],
        )


def parse_saved_record(data: Dict[str, Any]) -> SavedMatchRecordV1:
    """
    Parse one stored/imported record by its version tag and bring it up to
    the current version. Raises ValueError (pydantic's ValidationError is
    one) when it does not fit its version's schema.
    """
    if not isinstance(data, dict):
        raise ValueError("A match record must be an object.")
    version = data.get("schema_version", 0)
    if version == 0:
        return LegacyMatchRecord.model_validate(data).migrate()
    if version == CURRENT_SCHEMA_VERSION:
        return SavedMatchRecordV1.model_validate(data)
    raise ValueError(f"Unknown match record version {version!r}.")


class ImportResult(BaseModel):
    imported: int
    skipped: int


# 7. Scoreboard built from the saved records
class RecordsSummaryOut(BaseModel):
    games_played: int = Field(..., description="Finished games on record")
    human_wins: int
    computer_wins: int
    draws: int
    average_rounds: Optional[float] = Field(None, description="Average total rounds per game")
    fastest_human_win: Optional[int] = Field(None, description="Fewest human attempts in a human win")
    fastest_computer_win: Optional[int] = Field(None, description="Fewest computer attempts in a computer win")
