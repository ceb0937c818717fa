"""
Service layer to assemble the review analytics overview.
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from korvocab.analytics.metrics import (
    compute_reviews_daily,
    forecast_review_load,
    rating_counts,
    records_dataframe,
)
from korvocab.analytics.types import ReviewDashboardData
from korvocab.schemas import ReviewRecord, ReviewSettings


def build_review_dashboard(
    records: Sequence[ReviewRecord],
    now: datetime,
    settings: ReviewSettings | None = None,
    forecast_days: int = 14
) -> ReviewDashboardData:
    """
    Build all KPI values and series for a learner's review overview.
    """
    settings = settings or ReviewSettings()
    df = records_dataframe(records, now)

    if df.empty:
        new_count = mastered = 0
        mean_r = float("nan")
    else:
        new_count = int(df["is_new"].astype(bool).sum())
        mastered = int(df["mastered"].astype(bool).sum())
        mean_r = float(df["retrievability"].astype("float64").mean())

    return ReviewDashboardData(
        total_tracked=len(df),
        new_count=new_count,
        mastered_count=mastered,
        mean_retrievability=mean_r,
        forecast=forecast_review_load(records, now, forecast_days, settings.max_reviews_per_day),
        rating_counts=rating_counts(records),
        reviews_daily=compute_reviews_daily(records),
    )
