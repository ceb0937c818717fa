"""
FSRS - Memory Model for Vocabulary Reviews

Main API for the review engine.

This package implements a memory-model scheduler with:
- Power forgetting curve: R = (1 + FACTOR * t / S) ^ DECAY
- First-exposure ratings (Hard / Medium / Easy) for newly learned words
- Review ratings (Again / Hard / Good) for words with history
- One-way migration of interval-doubling records

Quick start:
    from korvocab import fsrs

    # Process a review (algorithm only, no storage calls)
    record, event_data = fsrs.process_review(record, fsrs.ReviewRating.GOOD, now)

    # Persist it
    store = fsrs.SqlAlchemyReviewStore()
    store.init_db()
    store.save_review_record(record.origin_day_id, record)
"""

# Core scheduler API (algorithm logic)
from korvocab.fsrs.scheduler import (
    new_review_record,
    parse_first_exposure_rating,
    parse_review_rating,
    process_first_exposure,
    process_review,
)

# Memory model
from korvocab.fsrs.memory_state import (
    calculate_retrievability,
    next_interval_days,
    next_review_date,
    sanitize_record,
)
from korvocab.fsrs.updates import update_after_rating

# Legacy migration
from korvocab.fsrs.migration import is_migrated, migrate_if_legacy

# Storage
from korvocab.fsrs.store import InMemoryReviewStore, ReviewRecordStore
from korvocab.fsrs.database import SqlAlchemyReviewStore, get_engine

# Constants and parameters
from korvocab.fsrs.constants import (
    FirstExposureRating,
    ReviewRating,
    MASTERED_STABILITY,
    S_MIN,
    S_MAX,
    D_MIN,
    D_MAX,
    U_RATING,
)


__all__ = [
    # Core algorithm
    "new_review_record",
    "parse_first_exposure_rating",
    "parse_review_rating",
    "process_first_exposure",
    "process_review",

    # Memory model
    "calculate_retrievability",
    "next_interval_days",
    "next_review_date",
    "sanitize_record",
    "update_after_rating",

    # Migration
    "is_migrated",
    "migrate_if_legacy",

    # Storage
    "InMemoryReviewStore",
    "ReviewRecordStore",
    "SqlAlchemyReviewStore",
    "get_engine",

    # Enums
    "FirstExposureRating",
    "ReviewRating",

    # Parameters
    "MASTERED_STABILITY",
    "S_MIN",
    "S_MAX",
    "D_MIN",
    "D_MAX",
    "U_RATING",
]
