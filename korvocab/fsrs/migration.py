"""
Legacy Migration - Interval-Doubling Records to Memory-Model Records

Older records scheduled reviews by doubling an interval:
    first review -> 1 day, then interval * 2 - incorrect answers (minimum 1)

Migration estimates the memory state from that history:
- stability = max(1, current interval)
- difficulty = 5 (unknown, neutral)
- lapses = total incorrect answers
- history replayed through the doubling rule to reconstruct the stability
  after each review

Records written during the intermediate FSRS era carry stability/difficulty
but no schema-version marker; their values are kept.

Migration is one-way and idempotent: records with the schema-version marker
are returned unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import ValidationError

from korvocab.errors import InvalidState
from korvocab.fsrs.constants import INITIAL_DIFFICULTY, REGIME_REVIEW, ReviewRating
from korvocab.fsrs.memory_state import clamp_difficulty, clamp_stability
from korvocab.fsrs.store import StoredRecord
from korvocab.schemas import (
    SCHEMA_VERSION,
    LegacyHistoryEntry,
    LegacyReviewRecord,
    ReviewHistoryEntry,
    ReviewRecord,
)

logger = logging.getLogger(__name__)


def legacy_next_interval(current_interval: float, incorrect: int) -> float:
    """
    Interval-doubling rule of the legacy scheduler.

    A word never reviewed gets one day; afterwards the interval doubles and
    shrinks by one day per incorrect answer, never below one day.
    """
    if current_interval <= 0:
        return 1
    return max(1, current_interval * 2 - incorrect)


def _legacy_rating(entry: LegacyHistoryEntry) -> ReviewRating:
    if entry.rating is not None:
        if entry.rating <= int(ReviewRating.AGAIN):
            return ReviewRating.AGAIN
        if entry.rating == int(ReviewRating.HARD):
            return ReviewRating.HARD
        return ReviewRating.GOOD
    return ReviewRating.GOOD if entry.correct > entry.incorrect else ReviewRating.AGAIN


def replay_legacy_history(
    history: tuple[LegacyHistoryEntry, ...],
    difficulty: float = INITIAL_DIFFICULTY
) -> tuple[ReviewHistoryEntry, ...]:
    """
    Remap legacy history entries, reconstructing stability by replaying the
    doubling rule. Stored intervals and FSRS-era values win over the replay.
    """
    interval = 0.0
    entries = []

    for item in history:
        if item.interval_after is not None:
            interval = item.interval_after
        else:
            interval = legacy_next_interval(interval, item.incorrect)

        if item.stability_after is not None and item.stability_after > 0:
            stability = item.stability_after
        else:
            stability = max(1.0, interval)

        resulting_difficulty = item.difficulty_after if item.difficulty_after is not None else difficulty

        entries.append(ReviewHistoryEntry(
            timestamp=item.date,
            rating=_legacy_rating(item).name.lower(),
            regime=REGIME_REVIEW,
            resulting_stability=clamp_stability(stability),
            resulting_difficulty=clamp_difficulty(resulting_difficulty),
        ))

    return tuple(entries)


def migrate_legacy_record(legacy: LegacyReviewRecord) -> ReviewRecord:
    """Convert one legacy record into the memory-model shape."""
    history = replay_legacy_history(legacy.review_history)

    if legacy.stability is not None and legacy.stability > 0:
        # Intermediate FSRS era: memory state already estimated
        stability = legacy.stability
        difficulty = legacy.difficulty if legacy.difficulty is not None else INITIAL_DIFFICULTY
        lapses = legacy.lapses if legacy.lapses is not None else sum(
            1 for h in history if h.rating == ReviewRating.AGAIN.name.lower()
        )
    else:
        stability = max(1.0, legacy.current_interval_days)
        difficulty = INITIAL_DIFFICULTY
        lapses = sum(item.incorrect for item in legacy.review_history)

    total_reviews = legacy.total_reviews
    if total_reviews is None:
        total_reviews = len(history)
    elif total_reviews != len(history):
        logger.warning(
            "Legacy record %s reports %s reviews but has %s history entries; using history length",
            legacy.vocabulary_id,
            total_reviews,
            len(history),
        )
        total_reviews = len(history)

    last_review_date = legacy.last_review_date
    if last_review_date is None and history:
        last_review_date = history[-1].timestamp

    return ReviewRecord(
        schema_version=SCHEMA_VERSION,
        vocabulary_id=legacy.vocabulary_id,
        origin_day_id=legacy.daily_chat_id,
        stability=clamp_stability(stability),
        difficulty=clamp_difficulty(difficulty),
        lapses=lapses,
        total_reviews=total_reviews,
        last_review_date=last_review_date,
        next_review_date=legacy.next_review_date,
        review_history=history,
        discovered_at=history[0].timestamp if history else None,
        is_starred=legacy.is_starred,
    )


def is_migrated(data: Any) -> bool:
    """True if a record (model or raw dict) carries the schema-version marker."""
    if isinstance(data, ReviewRecord):
        return True
    if isinstance(data, Mapping):
        version = data.get("schemaVersion", data.get("schema_version"))
        return version == SCHEMA_VERSION
    return False


def migrate_if_legacy(record: StoredRecord) -> ReviewRecord:
    """
    Resolve any stored record shape to a ReviewRecord.

    Args:
        record: ReviewRecord, LegacyReviewRecord, or a raw JSON dict of either

    Returns:
        ReviewRecord (the input itself when already migrated)

    Raises:
        InvalidState: the data matches neither shape
    """
    if isinstance(record, ReviewRecord):
        return record

    if isinstance(record, LegacyReviewRecord):
        legacy = record
    elif isinstance(record, Mapping):
        try:
            if is_migrated(record):
                return ReviewRecord.model_validate(dict(record))
            legacy = LegacyReviewRecord.model_validate(dict(record))
        except ValidationError as exc:
            raise InvalidState(f"Unreadable review record: {exc}") from exc
    else:
        raise InvalidState(f"Unsupported review record type: {type(record).__name__}")

    migrated = migrate_legacy_record(legacy)
    logger.info(
        "Migrated legacy review record %s (stability=%.2f, reviews=%s, lapses=%s)",
        migrated.vocabulary_id,
        migrated.stability,
        migrated.total_reviews,
        migrated.lapses,
    )
    return migrated


def iter_journal_records(journal: Any) -> Iterator[tuple[str, Mapping]]:
    """
    Walk an exported chat journal and yield (day_id, raw review record).

    Accepts the saved-data envelope ({"journal": [...]}) or the bare list of
    days. Records missing their day reference get the owning day's id.
    """
    days = journal.get("journal", []) if isinstance(journal, Mapping) else journal
    for day in days or []:
        day_id = day.get("id")
        for review in day.get("reviewSchedule") or []:
            record = dict(review)
            if not any(key in record for key in ("dailyChatId", "originDayId", "daily_chat_id", "origin_day_id")):
                record["dailyChatId" if not is_migrated(record) else "originDayId"] = day_id
            yield day_id, record


def iter_journal_vocabulary(journal: Any) -> Iterator[dict]:
    """Yield raw vocabulary items of an exported journal, tagged with their day id."""
    days = journal.get("journal", []) if isinstance(journal, Mapping) else journal
    for day in days or []:
        for item in day.get("vocabularies") or []:
            data = dict(item)
            data.setdefault("dailyChatId", day.get("id"))
            yield data
