"""
Pool utilities for session builders.

These helpers provide shared, minimal primitives for splitting review records
into pools and ordering them, without enforcing a single scheduling policy.
"""

from __future__ import annotations
import random
from datetime import datetime, timezone, tzinfo
from typing import Optional, Sequence, TypeVar
from zoneinfo import ZoneInfo

from korvocab.schemas import ReviewRecord


T = TypeVar("T")

_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


def split_new_and_reviewed(
    records: Sequence[ReviewRecord]
) -> tuple[list[ReviewRecord], list[ReviewRecord]]:
    """
    Partition records into (new, with_history). Input order is preserved.
    """
    new: list[ReviewRecord] = []
    reviewed: list[ReviewRecord] = []
    for record in records:
        (new if record.is_new else reviewed).append(record)
    return new, reviewed


def due_records_from_snapshot(
    records: Sequence[ReviewRecord],
    now: datetime
) -> list[ReviewRecord]:
    """
    Filter and sort due records from a snapshot (no storage calls).

    Most urgent first: lowest stability, ties by earliest next review date.
    New records are never due by elapsed time.
    """
    due = [r for r in records if not r.is_new and r.next_review_date <= now]
    due.sort(key=lambda r: (r.stability, r.next_review_date))
    return due


def oldest_discovered_first(records: Sequence[ReviewRecord]) -> list[ReviewRecord]:
    """
    Stable sort by discovery time; records without one go last.
    """
    return sorted(records, key=lambda r: r.discovered_at or _FAR_FUTURE)


def take_prefix(items: Sequence[T], limit: int) -> list[T]:
    """
    Truncate to the first `limit` items (never random).
    """
    return list(items[:max(0, limit)])


def sample_items(
    items: Sequence[T],
    count: int,
    rng: Optional[random.Random] = None
) -> list[T]:
    """
    Sample up to `count` items without replacement.
    """
    if count <= 0 or not items:
        return []
    rng = rng or random.Random()
    return rng.sample(list(items), min(count, len(items)))


def learner_timezone(name: str) -> tzinfo:
    """Resolve a timezone name ('UTC' or an IANA name like 'Asia/Seoul')."""
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def is_same_local_day(moment: datetime, now: datetime, tz: tzinfo) -> bool:
    """True if both timestamps fall on the same calendar day in `tz`."""
    return moment.astimezone(tz).date() == now.astimezone(tz).date()
