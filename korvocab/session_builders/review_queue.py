"""
Review Queue - Due and New Pools

Builds the daily review queue from a snapshot of review records:
1. Due pool: records with history whose next review date has passed
2. New pool: records never rated

Queue Logic:
- Due items ordered by urgency (lowest stability first), truncated to a
  stable prefix of max_reviews_per_day
- New items ordered oldest-discovered-first, truncated to new_items_per_day
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Optional, Sequence

from korvocab.fsrs.constants import MASTERED_STABILITY, REGIME_REVIEW, ReviewRating
from korvocab.fsrs.memory_state import sanitize_record
from korvocab.schemas import DueAndNew, ReviewRecord, ReviewSettings, ScheduleStats, as_utc
from korvocab.session_builders.pool_utils import (
    due_records_from_snapshot,
    is_same_local_day,
    learner_timezone,
    oldest_discovered_first,
    split_new_and_reviewed,
    take_prefix,
)

logger = logging.getLogger(__name__)

_DIFFICULT_RATINGS = {
    ReviewRating.AGAIN.name.lower(): 0,
    ReviewRating.HARD.name.lower(): 1,
}


def get_due_and_new(
    records: Sequence[ReviewRecord],
    now: datetime,
    settings: Optional[ReviewSettings] = None
) -> DueAndNew:
    """
    Compute the due and new queues.

    Args:
        records: All review records of the learner (already migrated)
        now: Current time
        settings: Daily limits

    Returns:
        DueAndNew with both queues and counts
    """
    settings = settings or ReviewSettings()
    now = as_utc(now)
    records = [sanitize_record(r) for r in records]

    new, reviewed = split_new_and_reviewed(records)
    due = due_records_from_snapshot(reviewed, now)

    stats = ScheduleStats(
        due_today=len(due),
        new_available=len(new),
        total_tracked=len(records),
        mastered_count=sum(1 for r in reviewed if r.stability >= MASTERED_STABILITY),
        starred_count=sum(1 for r in records if r.is_starred),
    )

    result = DueAndNew(
        due=tuple(take_prefix(due, settings.max_reviews_per_day)),
        new=tuple(take_prefix(oldest_discovered_first(new), settings.new_items_per_day)),
        stats=stats,
    )

    logger.debug(
        "Queue built: %s due (%s shown), %s new (%s shown), %s tracked",
        stats.due_today,
        len(result.due),
        stats.new_available,
        len(result.new),
        stats.total_tracked,
    )
    return result


def difficult_today(
    records: Sequence[ReviewRecord],
    now: datetime,
    tz: tzinfo | str = "UTC"
) -> list[ReviewRecord]:
    """
    Records rated Again or Hard during the learner's current calendar day.

    Each record is ranked by the worst rating it got today: Again before Hard,
    then by the time of that rating.
    """
    now = as_utc(now)
    if isinstance(tz, str):
        tz = learner_timezone(tz)

    ranked = []
    for record in records:
        worst = None
        for entry in record.review_history:
            if entry.regime != REGIME_REVIEW or entry.rating not in _DIFFICULT_RATINGS:
                continue
            if not is_same_local_day(entry.timestamp, now, tz):
                continue
            key = (_DIFFICULT_RATINGS[entry.rating], entry.timestamp)
            if worst is None or key < worst:
                worst = key
        if worst is not None:
            ranked.append((worst, record))

    ranked.sort(key=lambda pair: pair[0])
    return [record for _, record in ranked]


def starred(records: Sequence[ReviewRecord]) -> list[ReviewRecord]:
    """Bookmarked records, in input order."""
    return [r for r in records if r.is_starred]
