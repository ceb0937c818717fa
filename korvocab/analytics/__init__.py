"""
Analytics package exports.
"""

from korvocab.analytics.metrics import (
    forecast_review_load,
    rating_counts,
    records_dataframe,
)
from korvocab.analytics.service import build_review_dashboard
from korvocab.analytics.types import ReviewDashboardData

__all__ = [
    "forecast_review_load",
    "rating_counts",
    "records_dataframe",
    "build_review_dashboard",
    "ReviewDashboardData",
]
