"""
Error kinds raised by the review engine.
"""

from __future__ import annotations


class ReviewEngineError(Exception):
    """Base class for all review engine errors."""


class InvalidRating(ReviewEngineError, ValueError):
    """A rating outside the allowed set for the current regime."""

    def __init__(self, rating: object, allowed: list[str], reason: str | None = None):
        self.rating = rating
        self.allowed = allowed
        message = f"Invalid rating {rating!r}; expected one of {', '.join(allowed)}"
        if reason:
            message = f"Invalid rating {rating!r}: {reason}"
        super().__init__(message)


class UnknownVocabulary(ReviewEngineError, LookupError):
    """No vocabulary item backs the referenced id."""

    def __init__(self, vocabulary_id: str):
        self.vocabulary_id = vocabulary_id
        super().__init__(f"Unknown vocabulary id: {vocabulary_id}")


class InvalidState(ReviewEngineError):
    """Memory state that the model cannot work with (e.g. stability <= 0)."""


class StorageUnavailable(ReviewEngineError):
    """The injected review record store could not be reached."""
