"""
Pydantic models for vocabulary items and their review state.

These models define the JSON layout of persisted review records. Field names
are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


SCHEMA_VERSION = 2  # Records carrying this marker are already in memory-model shape


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps as UTC so all comparisons are between aware datetimes."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class _Model(BaseModel):
    """Frozen model with camelCase aliases."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json_dict(self) -> dict:
        """Serialize to the persisted JSON layout."""
        return self.model_dump(mode="json", by_alias=True)


# ---- Vocabulary ----

class VocabularyItem(_Model):
    """
    A word collected from a conversation. Never mutated once created.
    """
    id: str
    korean: str = Field(..., description="Source-language text")
    gloss: str = Field(
        ...,
        validation_alias=AliasChoices("gloss", "vietnamese"),
        description="Target-language meaning",
    )
    example: Optional[str] = None
    day_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("day_id", "dayId", "dailyChatId"),
    )
    created_at: Optional[UtcDatetime] = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt", "createdDate"),
    )


# ---- Review State ----

class ReviewHistoryEntry(_Model):
    """One rating event, append-only."""
    timestamp: UtcDatetime
    rating: str
    regime: Literal["first_exposure", "review"] = "review"
    resulting_stability: float
    resulting_difficulty: float
    retrievability: Optional[float] = None  # R at review time, None on first exposure


class ReviewRecord(_Model):
    """
    Memory state of a single vocabulary item.

    At most one record exists per vocabulary id. `next_review_date` is always
    derived from stability by the rating processor.
    """
    schema_version: int = SCHEMA_VERSION
    vocabulary_id: str
    origin_day_id: Optional[str] = None

    stability: float
    difficulty: float
    lapses: int = 0
    total_reviews: int = 0

    last_review_date: Optional[UtcDatetime] = None
    next_review_date: UtcDatetime
    review_history: tuple[ReviewHistoryEntry, ...] = ()

    discovered_at: Optional[UtcDatetime] = None
    is_starred: bool = False

    @property
    def is_new(self) -> bool:
        """True while the word has never been rated."""
        return self.total_reviews == 0


class ReviewSettings(_Model):
    """Per-query scheduling configuration."""
    max_reviews_per_day: int = Field(default=50, ge=0)
    new_items_per_day: int = Field(default=20, ge=0)
    desired_retention: float = Field(default=0.9, gt=0.0, lt=1.0)
    timezone: str = "UTC"


class ScheduleStats(_Model):
    """Counts reported next to the due/new queues."""
    due_today: int
    new_available: int
    total_tracked: int
    mastered_count: int
    starred_count: int = 0


class DueAndNew(_Model):
    """Result of a scheduling query."""
    due: tuple[ReviewRecord, ...]
    new: tuple[ReviewRecord, ...]
    stats: ScheduleStats


# ---- Legacy (interval-doubling) Format ----

class LegacyHistoryEntry(_Model):
    """
    History entry of the interval-doubling era.

    Entries written during the intermediate FSRS era also carry a numeric
    rating and the resulting stability/difficulty.
    """
    date: UtcDatetime
    correct: int = Field(default=0, validation_alias=AliasChoices("correct", "correctCount"))
    incorrect: int = Field(default=0, validation_alias=AliasChoices("incorrect", "incorrectCount"))
    interval_after: Optional[float] = None
    rating: Optional[int] = None
    stability_after: Optional[float] = None
    difficulty_after: Optional[float] = None


class LegacyReviewRecord(_Model):
    """Review record without a schema-version marker."""
    vocabulary_id: str
    daily_chat_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("daily_chat_id", "dailyChatId", "originDayId"),
    )
    current_interval_days: float = 0
    next_review_date: UtcDatetime
    last_review_date: Optional[UtcDatetime] = None
    total_reviews: Optional[int] = None
    review_history: tuple[LegacyHistoryEntry, ...] = ()

    # Present on records written by the intermediate FSRS era
    stability: Optional[float] = None
    difficulty: Optional[float] = None
    lapses: Optional[int] = None
    is_starred: bool = False
