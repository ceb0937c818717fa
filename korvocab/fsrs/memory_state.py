"""
Memory State - Retrievability and State Sanitizing

Key concepts:
- Stability (S): days until retrievability decays to the desired retention
- Difficulty (D): how hard the word is to learn (1-10 scale)
- Retrievability (R): probability of successful recall at time t

Forgetting curve (power law):
    R = (1 + FACTOR * t / S) ^ DECAY

With DECAY = -0.5 and FACTOR = 19/81, R(S, t=S) == 0.9.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Optional

from korvocab.errors import InvalidState
from korvocab.fsrs.constants import (
    D_MAX,
    D_MIN,
    DECAY,
    FACTOR,
    MAX_DESIRED_RETENTION,
    MIN_DESIRED_RETENTION,
    S_MAX,
    S_MIN,
)
from korvocab.schemas import ReviewRecord

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400.0


def calculate_retrievability(stability: float, elapsed_days: float) -> float:
    """
    Calculate retrievability using the power forgetting curve.

    Args:
        stability: Current stability in days (must be > 0)
        elapsed_days: Days since the last review (must be >= 0)

    Returns:
        Retrievability in (0, 1]

    Raises:
        InvalidState: stability <= 0 or elapsed_days < 0
    """
    if stability <= 0:
        raise InvalidState(f"stability must be positive, got {stability}")
    if elapsed_days < 0:
        raise InvalidState(f"elapsed time cannot be negative, got {elapsed_days} days")

    if elapsed_days == 0:
        return 1.0

    return (1.0 + FACTOR * elapsed_days / stability) ** DECAY


def elapsed_days(since: Optional[datetime], now: datetime) -> float:
    """
    Fractional days between two timestamps (0 if never reviewed).

    A negative result is returned as-is; calculate_retrievability rejects it.
    """
    if since is None:
        return 0.0
    return (now - since).total_seconds() / SECONDS_PER_DAY


def clamp_desired_retention(desired_retention: float) -> float:
    """Keep the retention target inside the range the model is tuned for."""
    return max(MIN_DESIRED_RETENTION, min(MAX_DESIRED_RETENTION, desired_retention))


def next_interval_days(stability: float, desired_retention: float = 0.9) -> int:
    """
    Days until retrievability falls to the desired retention.

    Solves R(S, t) = desired_retention for t. At a retention of 0.9 the
    interval equals the stability. Rounded half up, minimum one day.
    """
    retention = clamp_desired_retention(desired_retention)
    interval = stability / FACTOR * (retention ** (1 / DECAY) - 1)
    return max(1, int(math.floor(interval + 0.5)))


def next_review_date(now: datetime, stability: float, desired_retention: float = 0.9) -> datetime:
    """Derive the next review date from stability."""
    return now + timedelta(days=next_interval_days(stability, desired_retention))


def clamp_stability(stability: float) -> float:
    return max(S_MIN, min(S_MAX, stability))


def clamp_difficulty(difficulty: float) -> float:
    return max(D_MIN, min(D_MAX, difficulty))


def is_valid_state(stability: float, difficulty: float) -> bool:
    """True if the pair can be fed to the memory model without clamping."""
    if math.isnan(stability) or math.isnan(difficulty):
        return False
    return stability > 0 and D_MIN <= difficulty <= D_MAX


def sanitize_record(record: ReviewRecord) -> ReviewRecord:
    """
    Clamp a record read from storage back into the valid state space.

    Stability <= 0 or difficulty outside [1, 10] indicates storage corruption
    or a migration bug. The record is repaired and a warning logged; the
    corrupt values are never propagated. The review count follows the
    history length, as in legacy migration.
    """
    if is_valid_state(record.stability, record.difficulty) and \
            len(record.review_history) == record.total_reviews:
        return record

    stability = record.stability
    difficulty = record.difficulty
    if math.isnan(stability) or stability <= 0:
        stability = S_MIN
    if math.isnan(difficulty):
        difficulty = (D_MIN + D_MAX) / 2

    repaired = record.model_copy(update={
        "stability": clamp_stability(stability),
        "difficulty": clamp_difficulty(difficulty),
        "total_reviews": len(record.review_history),
    })

    logger.warning(
        "Invalid review state for %s (stability=%s, difficulty=%s, total_reviews=%s, history=%s); "
        "clamped to stability=%.3f, difficulty=%.3f",
        record.vocabulary_id,
        record.stability,
        record.difficulty,
        record.total_reviews,
        len(record.review_history),
        repaired.stability,
        repaired.difficulty,
    )
    return repaired


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
