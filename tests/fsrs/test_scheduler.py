from datetime import timedelta

import pytest

from korvocab.errors import InvalidRating, InvalidState
from korvocab.fsrs.constants import FirstExposureRating, ReviewRating
from korvocab.fsrs.scheduler import (
    new_review_record,
    parse_first_exposure_rating,
    parse_review_rating,
    process_first_exposure,
    process_review,
)
from korvocab.schemas import ReviewSettings


@pytest.mark.parametrize("rating, expected", [
    (FirstExposureRating.EASY, (7.0, 3.0, 7)),
    (FirstExposureRating.MEDIUM, (3.0, 5.0, 3)),
    (FirstExposureRating.HARD, (1.0, 7.0, 1)),
])
def test_first_exposure_mapping(now, rating, expected):
    stability, difficulty, days = expected
    record, event = process_first_exposure("w1", rating, now, origin_day_id="day-1")

    assert record.stability == stability
    assert record.difficulty == difficulty
    assert record.next_review_date == now + timedelta(days=days)
    assert record.total_reviews == 1
    assert record.lapses == 0
    assert record.last_review_date == now
    assert record.origin_day_id == "day-1"
    assert len(record.review_history) == 1
    assert record.review_history[0].regime == "first_exposure"
    assert record.review_history[0].retrievability is None
    assert event["regime"] == "first_exposure"
    assert event["stability_after"] == stability


def test_first_exposure_keeps_collection_metadata(now):
    collected = new_review_record("w1", "day-1", now - timedelta(days=2))
    collected = collected.model_copy(update={"is_starred": True})

    record, _ = process_first_exposure("w1", "easy", now, existing=collected)

    assert record.discovered_at == now - timedelta(days=2)
    assert record.is_starred is True
    assert record.origin_day_id == "day-1"


def test_first_exposure_rejected_for_word_with_history(now, make_record):
    with pytest.raises(InvalidRating) as exc_info:
        process_first_exposure("w1", "medium", now, existing=make_record("w1"))

    message = str(exc_info.value)
    assert "already has history" in message
    assert "use a review rating" in message
    assert "expected one of" not in message


@pytest.mark.parametrize("value", ["again", "HARD", " Good ", 1, 3, ReviewRating.GOOD])
def test_parse_review_rating_accepts_known_values(value):
    assert isinstance(parse_review_rating(value), ReviewRating)


@pytest.mark.parametrize("value", ["medium", "easy", 0, 4, True, None, 2.0, FirstExposureRating.EASY])
def test_parse_review_rating_rejects_unknown_values(value):
    with pytest.raises(InvalidRating):
        parse_review_rating(value)


def test_parse_first_exposure_rating():
    assert parse_first_exposure_rating("Medium") is FirstExposureRating.MEDIUM
    with pytest.raises(InvalidRating):
        parse_first_exposure_rating("again")
    with pytest.raises(InvalidRating):
        parse_first_exposure_rating(ReviewRating.HARD)


def test_review_updates_record(now, make_record):
    record = make_record("w1", stability=10.0, last_review_date=now - timedelta(days=5))

    updated, event = process_review(record, "good", now)

    assert updated is not record
    assert updated.stability > 10.0
    assert updated.total_reviews == 2
    assert len(updated.review_history) == 2
    assert updated.last_review_date == now
    assert updated.lapses == 0
    assert event["retrievability_before"] == pytest.approx(0.946, abs=1e-3)
    assert updated.review_history[-1].retrievability == event["retrievability_before"]
    # Input record untouched
    assert record.total_reviews == 1
    assert record.stability == 10.0


def test_review_next_date_follows_stability(now, make_record):
    record = make_record("w1", stability=4.0)
    updated, _ = process_review(record, ReviewRating.HARD, now)

    expected_days = max(1, int(updated.stability + 0.5))
    assert updated.next_review_date == now + timedelta(days=expected_days)


def test_review_next_date_respects_desired_retention(now, make_record):
    record = make_record("w1", stability=20.0)
    default, _ = process_review(record, "good", now)
    cautious, _ = process_review(record, "good", now, ReviewSettings(desired_retention=0.95))

    assert cautious.stability == default.stability
    assert cautious.next_review_date < default.next_review_date


def test_again_counts_a_lapse(now, make_record):
    record = make_record("w1", stability=8.0)
    updated, _ = process_review(record, "again", now)

    assert updated.lapses == 1
    assert updated.stability < 8.0
    assert updated.review_history[-1].rating == "again"


def test_review_of_new_record_uses_first_exposure_rule(now):
    record = new_review_record("w1", "day-1", now - timedelta(days=1))
    updated, event = process_review(record, "hard", now)

    # Hard review -> Medium first exposure
    assert event["regime"] == "first_exposure"
    assert updated.stability == 3.0
    assert updated.difficulty == 5.0
    assert updated.next_review_date == now + timedelta(days=3)


def test_review_before_last_review_is_rejected(now, make_record):
    record = make_record("w1", last_review_date=now + timedelta(days=1))
    with pytest.raises(InvalidState):
        process_review(record, "good", now)


def test_invalid_rating_leaves_nothing_processed(now, make_record):
    record = make_record("w1")
    with pytest.raises(InvalidRating):
        process_review(record, "medium", now)
