"""
DB-backed store for finished games.

Public methods:
- append_match_record(record) -> SavedMatchRecordV1
- list_records() -> list[SavedMatchRecordV1]   (newest first)
- summary() -> RecordsSummaryOut
- import_records(payload) -> ImportResult
- clear() -> int

The game engine only ever calls append_match_record; reading, importing
and clearing are for the records screen.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from .engine import GuessRecord
from .models import MatchRecord as MatchRecordORM
from .schemas import (
    CURRENT_SCHEMA_VERSION,
    FeedbackOut,
    GuessRecordOut,
    ImportResult,
    RecordsSummaryOut,
    SavedMatchRecordV1,
    parse_saved_record,
)
from .session import MatchRecord

logger = logging.getLogger(__name__)

# --- Small DTO builders ---

def to_guess_out(record: GuessRecord) -> GuessRecordOut:
    return GuessRecordOut(
        guess=record.guess,
        result=FeedbackOut(A=record.result[0], B=record.result[1]),
        is_correct=record.is_correct,
    )

def _to_saved(record: MatchRecord) -> SavedMatchRecordV1:
    return SavedMatchRecordV1(
        id=record.id,
        timestamp=record.timestamp,
        winner=record.winner,
        human_attempts=record.human_attempts,
        computer_attempts=record.computer_attempts,
        total_rounds=record.total_rounds,
        human_history=[to_guess_out(r) for r in record.human_history],
        computer_history=[to_guess_out(r) for r in record.computer_history],
    )

def _row_to_dict(row: MatchRecordORM) -> dict:
    return {
        "schema_version": row.schema_version,
        "id": row.id,
        "timestamp": row.created_at.timestamp(),
        "winner": row.winner,
        "human_attempts": row.human_attempts,
        "computer_attempts": row.computer_attempts,
        "total_rounds": row.total_rounds,
        "human_history": row.human_history,
        "computer_history": row.computer_history,
    }

def _history_json(history: Iterable[GuessRecordOut]) -> list:
    return [h.model_dump(by_alias=True) for h in history]


class MatchRecordRepository:
    """Persistence for match records (one row per finished game)."""

    def __init__(self, db: Session):
        self.db = db

    def append_match_record(self, record: MatchRecord) -> SavedMatchRecordV1:
        saved = _to_saved(record)
        self._add(saved)
        self.db.commit()
        logger.info("saved match record %s (%s)", saved.id, saved.winner)
        return saved

    def list_records(self) -> List[SavedMatchRecordV1]:
        rows = (
            self.db.execute(select(MatchRecordORM).order_by(MatchRecordORM.created_at.desc()))
            .scalars()
            .all()
        )
        records = []
        for row in rows:
            try:
                records.append(parse_saved_record(_row_to_dict(row)))
            except ValueError as exc:
                logger.warning("skipping unreadable match record %s: %s", row.id, exc)
        return records

    def summary(self) -> RecordsSummaryOut:
        records = self.list_records()
        human_wins = [r for r in records if r.winner == "human"]
        computer_wins = [r for r in records if r.winner == "computer"]
        draws = [r for r in records if r.winner == "draw"]

        avg = (sum(r.total_rounds for r in records) / len(records)) if records else None
        return RecordsSummaryOut(
            games_played=len(records),
            human_wins=len(human_wins),
            computer_wins=len(computer_wins),
            draws=len(draws),
            average_rounds=avg,
            fastest_human_win=min((r.human_attempts for r in human_wins), default=None),
            fastest_computer_win=min((r.computer_attempts for r in computer_wins), default=None),
        )

    def import_records(self, payload: List[Any]) -> ImportResult:
        """
        Load records exported by this or an older client. Records that do
        not match their version's schema, or whose id is already stored,
        are skipped.
        """
        imported = 0
        skipped = 0
        seen = set()
        for item in payload:
            try:
                saved = parse_saved_record(item)
            except ValueError as exc:
                logger.warning("skipping imported match record: %s", exc)
                skipped += 1
                continue
            if saved.id in seen or self.db.get(MatchRecordORM, saved.id) is not None:
                skipped += 1
                continue
            try:
                self._add(saved)
            except (OverflowError, OSError, ValueError) as exc:
                logger.warning("skipping imported match record %s: %s", saved.id, exc)
                skipped += 1
                continue
            seen.add(saved.id)
            imported += 1
        self.db.commit()
        return ImportResult(imported=imported, skipped=skipped)

    def clear(self) -> int:
        result = self.db.execute(delete(MatchRecordORM))
        self.db.commit()
        return result.rowcount or 0

    def _add(self, saved: SavedMatchRecordV1) -> None:
        row = MatchRecordORM(
            id=saved.id,
            schema_version=CURRENT_SCHEMA_VERSION,
            created_at=datetime.fromtimestamp(saved.timestamp),
            winner=saved.winner,
            human_attempts=saved.human_attempts,
            computer_attempts=saved.computer_attempts,
            total_rounds=saved.total_rounds,
            human_history=_history_json(saved.human_history),
            computer_history=_history_json(saved.computer_history),
        )
        self.db.add(row)
