from datetime import datetime, timedelta, timezone
import random

import pytest

from korvocab.engine import ReviewEngine
from korvocab.fsrs.store import InMemoryReviewStore
from korvocab.lexicon_repo import InMemoryVocabularyRepository
from korvocab.schemas import ReviewHistoryEntry, ReviewRecord, VocabularyItem

DAY_0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Injected clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, days: float = 0, hours: float = 0) -> datetime:
        self.current = self.current + timedelta(days=days, hours=hours)
        return self.current


@pytest.fixture
def now():
    return DAY_0


@pytest.fixture
def clock():
    return FakeClock(DAY_0)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def vocabulary_items():
    words = [
        ("w1", "사과", "quả táo"),
        ("w2", "학교", "trường học"),
        ("w3", "친구", "bạn bè"),
        ("w4", "바다", "biển"),
        ("w5", "음식", "món ăn"),
    ]
    return [
        VocabularyItem(id=vid, korean=korean, gloss=gloss, day_id="day-1")
        for vid, korean, gloss in words
    ]


@pytest.fixture
def vocabulary(vocabulary_items):
    return InMemoryVocabularyRepository(vocabulary_items)


@pytest.fixture
def store():
    return InMemoryReviewStore(learner_id="learner")


@pytest.fixture
def engine(store, vocabulary, clock, rng):
    return ReviewEngine(store, vocabulary, learner_id="learner", clock=clock, rng=rng)


@pytest.fixture
def make_record(now):
    """Factory for records with rated history (one 'good' entry per review)."""

    def _make(
        vocabulary_id: str,
        stability: float = 5.0,
        difficulty: float = 5.0,
        next_review_date: datetime | None = None,
        total_reviews: int = 1,
        last_review_date: datetime | None = None,
        **extra
    ) -> ReviewRecord:
        last = last_review_date or now - timedelta(days=stability)
        history = tuple(
            ReviewHistoryEntry(
                timestamp=last - timedelta(days=total_reviews - 1 - i),
                rating="good",
                resulting_stability=stability,
                resulting_difficulty=difficulty,
            )
            for i in range(total_reviews)
        )
        return ReviewRecord(
            vocabulary_id=vocabulary_id,
            origin_day_id=extra.pop("origin_day_id", "day-1"),
            stability=stability,
            difficulty=difficulty,
            total_reviews=total_reviews,
            last_review_date=last if total_reviews else None,
            next_review_date=next_review_date or now,
            review_history=history,
            **extra
        )

    return _make
