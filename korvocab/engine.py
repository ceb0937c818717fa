"""
Review Engine - Facade over scheduling, rating and hint selection

Wires the pure memory-model functions to the injected storage:
- ReviewRecordStore: review records (read all, save one)
- VocabularyRepository: vocabulary items by id
- clock: current time (injected for tests)

Every rating is a read-modify-write of a single record. The host must not
submit two ratings for the same word concurrently; the last write wins.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Callable, Optional

from korvocab import config
from korvocab.errors import InvalidState, UnknownVocabulary
from korvocab.fsrs import migration
from korvocab.fsrs.constants import DEFAULT_HINT_LIMIT
from korvocab.fsrs.memory_state import sanitize_record, utc_now
from korvocab.fsrs.scheduler import (
    RatingInput,
    new_review_record,
    process_first_exposure,
    process_review,
)
from korvocab.fsrs.store import ReviewRecordStore, StoredRecord
from korvocab.lexicon_repo import VocabularyRepository
from korvocab.schemas import DueAndNew, ReviewRecord, ReviewSettings, VocabularyItem, as_utc
from korvocab.session_builders.chat_hints import ChatHintSelector
from korvocab.session_builders.review_queue import difficult_today, get_due_and_new, starred

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class ReviewEngine:
    """
    Spaced-repetition engine for one learner's vocabulary.
    """

    def __init__(
        self,
        store: ReviewRecordStore,
        vocabulary: VocabularyRepository,
        learner_id: Optional[str] = None,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        settings: Optional[ReviewSettings] = None
    ):
        self.store = store
        self.vocabulary = vocabulary
        self.learner_id = learner_id or config.get_default_learner_id()
        self.clock = clock or utc_now
        self.settings = settings or ReviewSettings()
        self.hints = ChatHintSelector(vocabulary.load_vocabulary_item, rng=rng)

    def now(self) -> datetime:
        """Current time from the injected clock; naive values are taken as UTC."""
        return as_utc(self.clock())

    # ---- Loading ----

    def load_records(self) -> list[ReviewRecord]:
        """
        Load all records of the learner in memory-model shape.

        Legacy records are migrated and invalid state is clamped. Records that
        cannot be read at all are skipped with an error log.
        """
        records = []
        for stored in self.store.load_all_review_records(self.learner_id):
            try:
                record = migration.migrate_if_legacy(stored)
            except InvalidState as exc:
                logger.error("Skipping unreadable review record: %s", exc)
                continue
            records.append(sanitize_record(record))
        return records

    def _find_record(self, vocabulary_id: str) -> Optional[ReviewRecord]:
        for record in self.load_records():
            if record.vocabulary_id == vocabulary_id:
                return record
        return None

    def _require_item(self, vocabulary_id: str) -> VocabularyItem:
        item = self.vocabulary.load_vocabulary_item(vocabulary_id)
        if item is None:
            raise UnknownVocabulary(vocabulary_id)
        return item

    def _save(self, record: ReviewRecord, item: VocabularyItem) -> None:
        day_id = record.origin_day_id if record.origin_day_id is not None else item.day_id
        self.store.save_review_record(day_id, record)

    # ---- Scheduling ----

    def get_due_and_new(self, settings: Optional[ReviewSettings] = None) -> DueAndNew:
        return get_due_and_new(self.load_records(), self.now(), settings or self.settings)

    def get_difficult_today(self) -> list[ReviewRecord]:
        return difficult_today(self.load_records(), self.now(), self.settings.timezone)

    def get_starred(self) -> list[ReviewRecord]:
        return starred(self.load_records())

    # ---- Ratings ----

    def rate_first_exposure(self, vocabulary_id: str, rating: RatingInput) -> ReviewRecord:
        """
        Record the first learning of a word (Hard / Medium / Easy).

        Raises:
            UnknownVocabulary: no vocabulary item backs the id
            InvalidRating: rating outside Hard/Medium/Easy, or the word already has history
        """
        item = self._require_item(vocabulary_id)
        existing = self._find_record(vocabulary_id)

        record, event_data = process_first_exposure(
            vocabulary_id,
            rating,
            self.now(),
            origin_day_id=existing.origin_day_id if existing and existing.origin_day_id else item.day_id,
            existing=existing,
        )
        self._save(record, item)
        logger.debug("First exposure saved: %s", event_data)
        return record

    def rate_review(self, vocabulary_id: str, rating: RatingInput) -> ReviewRecord:
        """
        Record a review (Again / Hard / Good).

        A word without rated history is learned through the first-exposure
        rule instead of failing.

        Raises:
            UnknownVocabulary: no vocabulary item backs the id
            InvalidRating: rating outside Again/Hard/Good
        """
        item = self._require_item(vocabulary_id)
        now = self.now()
        existing = self._find_record(vocabulary_id)
        if existing is None:
            existing = new_review_record(vocabulary_id, item.day_id, now)

        record, event_data = process_review(existing, rating, now, self.settings)
        self._save(record, item)
        logger.debug("Review saved: %s", event_data)
        return record

    # ---- Chat Hints ----

    def select_chat_hints(
        self,
        n: int = DEFAULT_HINT_LIMIT,
        session_id: str = "default"
    ) -> list[VocabularyItem]:
        """Words a conversation should try to use; stable within a session."""
        queue = self.get_due_and_new()
        return self.hints.select(session_id, queue.due, queue.new, n)

    def end_hint_session(self, session_id: str = "default") -> None:
        self.hints.end_session(session_id)

    # ---- Collection Management ----

    def register_vocabulary(self, item: VocabularyItem) -> ReviewRecord:
        """
        Store a newly collected word and create its untouched review record.

        An existing record for the same id is returned unchanged.
        """
        self.vocabulary.add_vocabulary_item(item)
        existing = self._find_record(item.id)
        if existing is not None:
            return existing

        record = new_review_record(item.id, item.day_id, item.created_at or self.now())
        self._save(record, item)
        return record

    def toggle_star(self, vocabulary_id: str) -> ReviewRecord:
        """Flip the learner's bookmark, creating a new record if none exists."""
        item = self._require_item(vocabulary_id)
        record = self._find_record(vocabulary_id)
        if record is None:
            record = new_review_record(vocabulary_id, item.day_id, self.now())

        record = record.model_copy(update={"is_starred": not record.is_starred})
        self._save(record, item)
        return record

    # ---- Migration ----

    def migrate_if_legacy(self, record: StoredRecord) -> ReviewRecord:
        return migration.migrate_if_legacy(record)

    def migrate_store(self) -> int:
        """
        Rewrite every legacy record of the learner in memory-model shape.

        Unreadable records are skipped with an error log and left as stored.

        Returns:
            Number of records migrated
        """
        migrated = 0
        for stored in self.store.load_all_review_records(self.learner_id):
            if migration.is_migrated(stored):
                continue
            try:
                record = migration.migrate_if_legacy(stored)
            except InvalidState as exc:
                logger.error("Skipping unreadable review record: %s", exc)
                continue
            self.store.save_review_record(record.origin_day_id, record)
            migrated += 1
        return migrated
