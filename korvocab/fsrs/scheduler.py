"""
Scheduler - Rating Processor

Pure state transitions for review records (no storage calls).

Main workflow:
1. Load the record (caller's responsibility)
2. Pick the regime: first exposure (never rated) or subsequent review
3. Calculate retrievability (reviews only)
4. Apply the memory-model update
5. Return a new record + event data dict

The input record is never mutated. The caller persists the returned record
keyed by vocabulary id under its origin day.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple, Union

from korvocab.errors import InvalidRating
from korvocab.fsrs import memory_state
from korvocab.fsrs.constants import (
    FIRST_EXPOSURE_STATE,
    INITIAL_DIFFICULTY,
    INITIAL_STABILITY,
    REGIME_FIRST_EXPOSURE,
    REGIME_REVIEW,
    REVIEW_TO_FIRST_EXPOSURE,
    FirstExposureRating,
    ReviewRating,
)
from korvocab.fsrs.updates import update_after_rating
from korvocab.schemas import ReviewHistoryEntry, ReviewRecord, ReviewSettings, as_utc

logger = logging.getLogger(__name__)

RatingInput = Union[ReviewRating, FirstExposureRating, int, str]


# ---- Rating Parsing ----

def _parse_rating(value: RatingInput, enum_cls):
    allowed = [member.name.lower() for member in enum_cls]

    if isinstance(value, enum_cls):
        return value
    # IntEnum members of the other scale compare equal to ints; reject them explicitly
    if isinstance(value, (ReviewRating, FirstExposureRating, bool)):
        raise InvalidRating(value, allowed)
    if isinstance(value, int):
        try:
            return enum_cls(value)
        except ValueError:
            raise InvalidRating(value, allowed) from None
    if isinstance(value, str):
        try:
            return enum_cls[value.strip().upper()]
        except KeyError:
            raise InvalidRating(value, allowed) from None

    raise InvalidRating(value, allowed)


def parse_review_rating(value: RatingInput) -> ReviewRating:
    """Parse Again/Hard/Good; anything else raises InvalidRating."""
    return _parse_rating(value, ReviewRating)


def parse_first_exposure_rating(value: RatingInput) -> FirstExposureRating:
    """Parse Hard/Medium/Easy; anything else raises InvalidRating."""
    return _parse_rating(value, FirstExposureRating)


# ---- Record Creation ----

def new_review_record(
    vocabulary_id: str,
    origin_day_id: Optional[str],
    now: datetime
) -> ReviewRecord:
    """
    Create the record for a freshly collected word (never rated).

    New records are never due by elapsed time; the scheduler lists them
    separately.
    """
    return ReviewRecord(
        vocabulary_id=vocabulary_id,
        origin_day_id=origin_day_id,
        stability=INITIAL_STABILITY,
        difficulty=INITIAL_DIFFICULTY,
        next_review_date=now + timedelta(days=1),
        discovered_at=now,
    )


# ---- Rating Processing ----

def process_first_exposure(
    vocabulary_id: str,
    rating: RatingInput,
    now: datetime,
    origin_day_id: Optional[str] = None,
    existing: Optional[ReviewRecord] = None
) -> Tuple[ReviewRecord, dict]:
    """
    Initial learning of a word, rated by perceived difficulty.

    Easy -> S=7, D=3, review in 7 days
    Medium -> S=3, D=5, review in 3 days
    Hard -> S=1, D=7, review in 1 day

    Args:
        vocabulary_id: Word being learned
        rating: HARD, MEDIUM or EASY
        now: Review timestamp
        origin_day_id: Conversation day the word belongs to
        existing: Untouched record for this word, if one was created at collection time

    Returns:
        Tuple of (new_record, event_data_dict)

    Raises:
        InvalidRating: rating outside Hard/Medium/Easy, or the word already has history
    """
    if existing is not None and not existing.is_new:
        raise InvalidRating(
            rating,
            [member.name.lower() for member in ReviewRating],
            reason=f"word {vocabulary_id} already has history; use a review rating",
        )

    grade = parse_first_exposure_rating(rating)
    now = as_utc(now)
    stability, difficulty, interval_days = FIRST_EXPOSURE_STATE[grade]

    entry = ReviewHistoryEntry(
        timestamp=now,
        rating=grade.name.lower(),
        regime=REGIME_FIRST_EXPOSURE,
        resulting_stability=stability,
        resulting_difficulty=difficulty,
    )

    record = ReviewRecord(
        vocabulary_id=vocabulary_id,
        origin_day_id=origin_day_id if origin_day_id is not None else (existing.origin_day_id if existing else None),
        stability=stability,
        difficulty=difficulty,
        lapses=0,
        total_reviews=1,
        last_review_date=now,
        next_review_date=now + timedelta(days=interval_days),
        review_history=(entry,),
        discovered_at=existing.discovered_at if existing and existing.discovered_at else now,
        is_starred=existing.is_starred if existing else False,
    )

    event_data = {
        "vocabulary_id": vocabulary_id,
        "regime": REGIME_FIRST_EXPOSURE,
        "rating": grade.name.lower(),
        "timestamp": now,
        "stability_before": None,
        "difficulty_before": None,
        "retrievability_before": None,
        "stability_after": stability,
        "difficulty_after": difficulty,
        "next_review_date": record.next_review_date,
    }

    return record, event_data


def process_review(
    record: ReviewRecord,
    rating: RatingInput,
    now: datetime,
    settings: Optional[ReviewSettings] = None
) -> Tuple[ReviewRecord, dict]:
    """
    Process a review rating and return the updated record + event data.

    Records that were never rated go through the first-exposure rule instead,
    with Again/Hard/Good mapped to Hard/Medium/Easy.

    Args:
        record: Current record for the word
        rating: AGAIN, HARD or GOOD
        now: Review timestamp
        settings: Scheduling settings (desired retention)

    Returns:
        Tuple of (new_record, event_data_dict)

    Raises:
        InvalidRating: rating outside Again/Hard/Good
        InvalidState: now is earlier than the last review
    """
    grade = parse_review_rating(rating)
    settings = settings or ReviewSettings()
    now = as_utc(now)

    if record.is_new:
        first_grade = REVIEW_TO_FIRST_EXPOSURE[grade]
        logger.info(
            "No rated history for %s; applying first-exposure rule (%s -> %s)",
            record.vocabulary_id,
            grade.name.lower(),
            first_grade.name.lower(),
        )
        return process_first_exposure(
            record.vocabulary_id,
            first_grade,
            now,
            origin_day_id=record.origin_day_id,
            existing=record,
        )

    last_review = record.last_review_date
    if last_review is None and record.review_history:
        last_review = record.review_history[-1].timestamp

    days = memory_state.elapsed_days(last_review, now)
    retrievability = memory_state.calculate_retrievability(record.stability, days)

    new_stability, new_difficulty = update_after_rating(
        record.stability,
        record.difficulty,
        retrievability,
        grade,
    )

    entry = ReviewHistoryEntry(
        timestamp=now,
        rating=grade.name.lower(),
        regime=REGIME_REVIEW,
        resulting_stability=new_stability,
        resulting_difficulty=new_difficulty,
        retrievability=retrievability,
    )

    updated = record.model_copy(update={
        "stability": new_stability,
        "difficulty": new_difficulty,
        "lapses": record.lapses + (1 if grade == ReviewRating.AGAIN else 0),
        "total_reviews": record.total_reviews + 1,
        "last_review_date": now,
        "next_review_date": memory_state.next_review_date(
            now, new_stability, settings.desired_retention
        ),
        "review_history": record.review_history + (entry,),
    })

    event_data = {
        "vocabulary_id": record.vocabulary_id,
        "regime": REGIME_REVIEW,
        "rating": grade.name.lower(),
        "timestamp": now,
        "elapsed_days": days,
        "stability_before": record.stability,
        "difficulty_before": record.difficulty,
        "retrievability_before": retrievability,
        "stability_after": new_stability,
        "difficulty_after": new_difficulty,
        "next_review_date": updated.next_review_date,
    }

    logger.debug("Processed review: %s", event_data)

    return updated, event_data
