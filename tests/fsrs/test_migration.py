import logging

import pytest

from korvocab.errors import InvalidState
from korvocab.fsrs.migration import (
    is_migrated,
    iter_journal_records,
    iter_journal_vocabulary,
    legacy_next_interval,
    migrate_if_legacy,
)
from korvocab.schemas import SCHEMA_VERSION, ReviewRecord


@pytest.fixture
def legacy_record():
    return {
        "vocabularyId": "w1",
        "dailyChatId": "day-1",
        "currentIntervalDays": 4,
        "nextReviewDate": "2024-03-05T09:00:00.000Z",
        "lastReviewDate": "2024-03-01T09:00:00.000Z",
        "totalReviews": 3,
        "reviewHistory": [
            {"date": "2024-02-25T09:00:00.000Z", "correctCount": 1, "incorrectCount": 0},
            {"date": "2024-02-26T09:00:00.000Z", "correctCount": 0, "incorrectCount": 2},
            {"date": "2024-03-01T09:00:00.000Z", "correctCount": 2, "incorrectCount": 1},
        ],
    }


def test_legacy_doubling_rule():
    assert legacy_next_interval(0, 0) == 1
    assert legacy_next_interval(1, 0) == 2
    assert legacy_next_interval(4, 1) == 7
    assert legacy_next_interval(2, 5) == 1


def test_migrates_legacy_record(legacy_record):
    record = migrate_if_legacy(legacy_record)

    assert record.schema_version == SCHEMA_VERSION
    assert record.vocabulary_id == "w1"
    assert record.origin_day_id == "day-1"
    assert record.stability == 4.0
    assert record.difficulty == 5.0
    assert record.lapses == 3
    assert record.total_reviews == 3
    assert record.next_review_date.isoformat() == "2024-03-05T09:00:00+00:00"
    assert [entry.rating for entry in record.review_history] == ["good", "again", "good"]


def test_history_replays_doubling_rule(legacy_record):
    record = migrate_if_legacy(legacy_record)
    # 0 -> 1, 1*2-2 -> 1 (floor), 1*2-1 -> 1
    assert [entry.resulting_stability for entry in record.review_history] == [1.0, 1.0, 1.0]

    legacy_record["reviewHistory"] = [
        {"date": "2024-02-25T09:00:00Z", "correctCount": 1, "incorrectCount": 0},
        {"date": "2024-02-26T09:00:00Z", "correctCount": 1, "incorrectCount": 0},
        {"date": "2024-02-28T09:00:00Z", "correctCount": 1, "incorrectCount": 0},
    ]
    record = migrate_if_legacy(legacy_record)
    assert [entry.resulting_stability for entry in record.review_history] == [1.0, 2.0, 4.0]


def test_migration_is_idempotent(legacy_record):
    once = migrate_if_legacy(legacy_record)
    twice = migrate_if_legacy(once)
    from_json = migrate_if_legacy(once.to_json_dict())

    assert twice is once
    assert from_json == once


def test_migrated_json_is_detected_by_marker(legacy_record):
    migrated = migrate_if_legacy(legacy_record).to_json_dict()

    assert is_migrated(migrated)
    assert not is_migrated(legacy_record)
    assert migrated["schemaVersion"] == SCHEMA_VERSION


def test_keeps_state_of_unversioned_fsrs_records(legacy_record):
    legacy_record.update({"stability": 12.5, "difficulty": 6.2, "lapses": 1})
    record = migrate_if_legacy(legacy_record)

    assert record.stability == 12.5
    assert record.difficulty == 6.2
    assert record.lapses == 1


def test_zero_interval_gets_minimum_stability(legacy_record):
    legacy_record.update({"currentIntervalDays": 0, "totalReviews": 0, "reviewHistory": []})
    record = migrate_if_legacy(legacy_record)

    assert record.stability == 1.0
    assert record.is_new


def test_mismatched_review_count_uses_history(legacy_record, caplog):
    legacy_record["totalReviews"] = 7
    with caplog.at_level(logging.WARNING, logger="korvocab.fsrs.migration"):
        record = migrate_if_legacy(legacy_record)

    assert record.total_reviews == len(record.review_history) == 3
    assert "reports 7 reviews" in caplog.text


def test_unreadable_record_raises_invalid_state():
    with pytest.raises(InvalidState):
        migrate_if_legacy({"vocabularyId": "w1"})
    with pytest.raises(InvalidState):
        migrate_if_legacy(["not", "a", "record"])


def test_journal_walk_fills_day_ids(legacy_record):
    del legacy_record["dailyChatId"]
    current = migrate_if_legacy(dict(legacy_record, vocabularyId="w2", dailyChatId="day-2")).to_json_dict()
    del current["originDayId"]
    journal = {
        "version": 5,
        "journal": [
            {"id": "day-1", "reviewSchedule": [legacy_record], "vocabularies": [{"id": "w1"}]},
            {"id": "day-2", "reviewSchedule": [current]},
        ],
    }

    pairs = list(iter_journal_records(journal))

    assert [day for day, _ in pairs] == ["day-1", "day-2"]
    assert migrate_if_legacy(pairs[0][1]).origin_day_id == "day-1"
    assert migrate_if_legacy(pairs[1][1]).origin_day_id == "day-2"
    assert list(iter_journal_vocabulary(journal)) == [{"id": "w1", "dailyChatId": "day-1"}]
    assert isinstance(migrate_if_legacy(pairs[1][1]), ReviewRecord)
