"""
Metric computations for review-load analytics.

All functions are read-only over a snapshot of review records.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Sequence

import pandas as pd

from korvocab.fsrs.constants import MASTERED_STABILITY
from korvocab.fsrs.memory_state import calculate_retrievability, elapsed_days
from korvocab.schemas import ReviewRecord


RECORD_COLUMNS = [
    "vocabulary_id",
    "origin_day_id",
    "stability",
    "difficulty",
    "lapses",
    "total_reviews",
    "last_review_date",
    "next_review_date",
    "retrievability",
    "is_new",
    "is_starred",
    "mastered",
]


def _current_retrievability(record: ReviewRecord, now: datetime) -> float:
    if record.is_new or record.last_review_date is None:
        return math.nan
    days = max(0.0, elapsed_days(record.last_review_date, now))
    return calculate_retrievability(record.stability, days)


def records_dataframe(records: Sequence[ReviewRecord], now: datetime) -> pd.DataFrame:
    """
    One row per record with its retrievability at `now` (NaN for new words).
    """
    if not records:
        return pd.DataFrame(columns=RECORD_COLUMNS)

    rows = [
        {
            "vocabulary_id": r.vocabulary_id,
            "origin_day_id": r.origin_day_id,
            "stability": r.stability,
            "difficulty": r.difficulty,
            "lapses": r.lapses,
            "total_reviews": r.total_reviews,
            "last_review_date": r.last_review_date,
            "next_review_date": r.next_review_date,
            "retrievability": _current_retrievability(r, now),
            "is_new": r.is_new,
            "is_starred": r.is_starred,
            "mastered": not r.is_new and r.stability >= MASTERED_STABILITY,
        }
        for r in records
    ]
    df = pd.DataFrame(rows, columns=RECORD_COLUMNS)
    df["last_review_date"] = pd.to_datetime(df["last_review_date"], utc=True)
    df["next_review_date"] = pd.to_datetime(df["next_review_date"], utc=True)
    return df


def build_forecast_index(now: datetime, days: int) -> pd.DatetimeIndex:
    """
    Dense UTC day index starting at today's UTC day.
    """
    start = pd.Timestamp(now).tz_convert("UTC").floor("D")
    return pd.date_range(start=start, periods=max(0, days), freq="D")


def forecast_review_load(
    records: Sequence[ReviewRecord],
    now: datetime,
    days: int = 14,
    max_per_day: int = 50
) -> pd.DataFrame:
    """
    Daily review counts for the next `days` days.

    Overdue words count on the first day. Reviews above `max_per_day` are
    carried to the following day; scheduled dates are not changed.

    Columns:
        scheduled: words whose next review falls on the day
        carried_in: overflow from the previous day
        reviews: reviews done that day (capped at max_per_day)
        overflow: reviews pushed to the next day
    """
    day_index = build_forecast_index(now, days)
    columns = ["scheduled", "carried_in", "reviews", "overflow"]
    if len(day_index) == 0:
        return pd.DataFrame(columns=columns, index=day_index, dtype="int64")

    df = records_dataframe(records, now)
    reviewed = df[~df["is_new"].astype(bool)] if not df.empty else df

    counts = {}
    if not reviewed.empty:
        # Whole days after the first forecast day; overdue words land on day 0
        offsets = (reviewed["next_review_date"] - day_index[0]) // pd.Timedelta(days=1)
        counts = offsets.clip(lower=0).astype("int64").value_counts().to_dict()
    scheduled = [int(counts.get(offset, 0)) for offset in range(len(day_index))]

    rows = []
    carry = 0
    for count in scheduled:
        total = int(count) + carry
        done = min(total, max(0, max_per_day))
        rows.append((int(count), carry, done, total - done))
        carry = total - done

    return pd.DataFrame(rows, columns=columns, index=day_index).astype("int64")


def rating_counts(records: Sequence[ReviewRecord]) -> pd.Series:
    """
    Number of history entries per (regime, rating).
    """
    entries = [
        (entry.regime, entry.rating)
        for record in records
        for entry in record.review_history
    ]
    if not entries:
        return pd.Series(dtype="int64")

    df = pd.DataFrame(entries, columns=["regime", "rating"])
    return df.groupby(["regime", "rating"]).size().astype("int64")


def compute_reviews_daily(records: Sequence[ReviewRecord]) -> pd.Series:
    """
    Rating events per UTC day, dense over the history range.
    """
    timestamps = [entry.timestamp for record in records for entry in record.review_history]
    if not timestamps:
        return pd.Series(dtype="int64")

    days = pd.to_datetime(pd.Series(timestamps), utc=True).dt.floor("D")
    counts = days.value_counts().sort_index()
    return counts.asfreq("D", fill_value=0).astype("int64")
