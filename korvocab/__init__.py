"""
korvocab - spaced-repetition scheduling for Korean vocabulary collected in chat.

    from korvocab import ReviewEngine
    from korvocab.fsrs import InMemoryReviewStore
    from korvocab.lexicon_repo import InMemoryVocabularyRepository

    engine = ReviewEngine(InMemoryReviewStore(), InMemoryVocabularyRepository())
"""

from korvocab.engine import ReviewEngine
from korvocab.errors import (
    InvalidRating,
    InvalidState,
    ReviewEngineError,
    StorageUnavailable,
    UnknownVocabulary,
)

__version__ = "0.1.0"

__all__ = [
    "ReviewEngine",
    "ReviewEngineError",
    "InvalidRating",
    "InvalidState",
    "StorageUnavailable",
    "UnknownVocabulary",
]
