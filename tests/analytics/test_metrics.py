import math
from datetime import timedelta

import pandas as pd
import pytest

from korvocab.analytics import build_review_dashboard, forecast_review_load, rating_counts, records_dataframe
from korvocab.fsrs.scheduler import new_review_record, process_review
from korvocab.schemas import ReviewSettings


def test_records_dataframe(now, make_record):
    records = [
        make_record("w1", stability=10.0, last_review_date=now - timedelta(days=5)),
        new_review_record("w2", "day-1", now),
        make_record("w3", stability=40.0, is_starred=True),
    ]

    df = records_dataframe(records, now)

    assert list(df["vocabulary_id"]) == ["w1", "w2", "w3"]
    assert df.loc[0, "retrievability"] == pytest.approx(0.946, abs=1e-3)
    assert math.isnan(df.loc[1, "retrievability"])
    assert list(df["mastered"]) == [False, False, True]
    assert str(df["next_review_date"].dt.tz) == "UTC"


def test_empty_records_dataframe(now):
    df = records_dataframe([], now)
    assert df.empty
    assert "retrievability" in df.columns


def test_forecast_carries_overflow(now, make_record):
    records = (
        [make_record(f"over{i}", next_review_date=now - timedelta(days=2)) for i in range(3)]
        + [make_record(f"today{i}", next_review_date=now + timedelta(hours=1)) for i in range(2)]
        + [make_record(f"d2_{i}", next_review_date=now + timedelta(days=2)) for i in range(1)]
        + [new_review_record("fresh", "day-1", now - timedelta(days=5))]
    )

    forecast = forecast_review_load(records, now, days=4, max_per_day=2)

    assert len(forecast) == 4
    assert forecast.index[0] == pd.Timestamp("2024-03-01", tz="UTC")
    assert list(forecast["scheduled"]) == [5, 0, 1, 0]
    assert list(forecast["reviews"]) == [2, 2, 2, 0]
    assert list(forecast["carried_in"]) == [0, 3, 1, 0]
    assert list(forecast["overflow"]) == [3, 1, 0, 0]


def test_forecast_without_reviewed_records(now):
    forecast = forecast_review_load([new_review_record("w1", "day-1", now)], now, days=3)

    assert list(forecast["scheduled"]) == [0, 0, 0]


def test_rating_counts(now, make_record):
    record = make_record("w1", stability=5.0, total_reviews=2)
    record, _ = process_review(record, "again", now)
    record, _ = process_review(record, "again", now + timedelta(days=1))

    counts = rating_counts([record])

    assert counts[("review", "good")] == 2
    assert counts[("review", "again")] == 2
    assert rating_counts([]).empty


def test_review_dashboard(now, make_record):
    records = [
        make_record("w1", stability=45.0, next_review_date=now + timedelta(days=45)),
        new_review_record("w2", "day-1", now),
    ]

    dashboard = build_review_dashboard(records, now, ReviewSettings(max_reviews_per_day=10), forecast_days=7)

    assert dashboard.total_tracked == 2
    assert dashboard.new_count == 1
    assert dashboard.mastered_count == 1
    assert 0 < dashboard.mean_retrievability <= 1
    assert len(dashboard.forecast) == 7
    assert dashboard.reviews_daily.sum() == 1
