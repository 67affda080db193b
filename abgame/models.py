"""
SQLAlchemy ORM models.

Tables:
- match_records: one row per finished game (histories stored as JSON)

Why JSON?
- Histories are short lists of {guess, result, is_correct}; JSON is simple & clear.
- Each row carries schema_version so old rows can be parsed by the schema
  they were written with.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Integer, DateTime, Enum, JSON
from sqlalchemy.orm import Mapped, mapped_column
from .db import Base
from .types import Winner  # reuse my literals for clarity


class MatchRecord(Base):
    __tablename__ = "match_records"

    # UUIDs generated in code; stored as strings
    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    schema_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # When the game finished
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    winner: Mapped[Winner] = mapped_column(
        Enum("human", "computer", "draw", "none", name="match_winner"),
        nullable=False,
        default="none",
    )

    # Counters
    human_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    computer_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_rounds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # list[{"guess": "0123", "result": {"A": 1, "B": 2}, "is_correct": false}]
    human_history: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    computer_history: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
