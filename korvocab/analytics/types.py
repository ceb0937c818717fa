"""
Types for review analytics.
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd


@dataclass(frozen=True)
class ReviewDashboardData:
    """
    Precomputed metrics and series for the review overview.
    """
    total_tracked: int
    new_count: int
    mastered_count: int
    mean_retrievability: float
    forecast: pd.DataFrame
    rating_counts: pd.Series
    reviews_daily: pd.Series
