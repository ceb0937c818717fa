"""
Review Record Store - Storage Port

The engine depends on this abstraction only. Implementations:
- InMemoryReviewStore: dict keyed by vocabulary id (tests, embedding hosts)
- SqlAlchemyReviewStore: relational storage (korvocab.fsrs.database)

The store does not serialize writers: the host guarantees at most one writer
per vocabulary id at a time, otherwise the last write wins.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Optional, Union

from korvocab.schemas import LegacyReviewRecord, ReviewRecord

StoredRecord = Union[ReviewRecord, LegacyReviewRecord, Mapping]


class ReviewRecordStore(ABC):
    """Durable storage of one review record per vocabulary item."""

    @abstractmethod
    def load_all_review_records(self, learner_id: str) -> list[StoredRecord]:
        """
        Load every review record of a learner.

        Records may come back in any stored shape (current, legacy, or raw
        JSON); the engine resolves them through legacy migration.

        Raises:
            StorageUnavailable: the backing storage cannot be reached
        """

    @abstractmethod
    def save_review_record(self, day_id: Optional[str], record: ReviewRecord) -> None:
        """
        Persist a record under its conversation day, replacing any previous
        record for the same vocabulary id.

        Raises:
            StorageUnavailable: the backing storage cannot be reached
        """


class InMemoryReviewStore(ReviewRecordStore):
    """
    Review records kept in a dict keyed by vocabulary id.

    Seed data may contain raw JSON dicts (including legacy records).
    """

    def __init__(self, records: Optional[Iterable[StoredRecord]] = None, learner_id: str = "learner"):
        self.learner_id = learner_id
        self._records: dict[str, StoredRecord] = {}
        self._day_ids: dict[str, Optional[str]] = {}
        for record in records or []:
            vocabulary_id = _vocabulary_id_of(record)
            self._records[vocabulary_id] = record
            self._day_ids[vocabulary_id] = _day_id_of(record)

    def load_all_review_records(self, learner_id: str) -> list[StoredRecord]:
        if learner_id != self.learner_id:
            return []
        return list(self._records.values())

    def save_review_record(self, day_id: Optional[str], record: ReviewRecord) -> None:
        self._records[record.vocabulary_id] = record
        self._day_ids[record.vocabulary_id] = day_id

    def get(self, vocabulary_id: str) -> Optional[StoredRecord]:
        return self._records.get(vocabulary_id)

    def day_id_for(self, vocabulary_id: str) -> Optional[str]:
        """Conversation day the record was last saved under."""
        return self._day_ids.get(vocabulary_id)

    def __len__(self) -> int:
        return len(self._records)


def _vocabulary_id_of(record: StoredRecord) -> str:
    if isinstance(record, Mapping):
        return str(record.get("vocabularyId", record.get("vocabulary_id")))
    return record.vocabulary_id


def _day_id_of(record: StoredRecord) -> Optional[str]:
    if isinstance(record, ReviewRecord):
        return record.origin_day_id
    if isinstance(record, LegacyReviewRecord):
        return record.daily_chat_id
    return record.get("originDayId", record.get("dailyChatId"))
