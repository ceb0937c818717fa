"""
SQLAlchemy ORM Models for Review Records

One row per (learner, vocabulary item). Timestamps are stored as ISO-8601
strings and the review history as a JSON array, mirroring the persisted
JSON layout of a review record.
"""

from sqlalchemy import Boolean, Column, Float, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ReviewRecordRow(Base):
    """
    Persistent memory state for a single vocabulary item.
    """
    __tablename__ = 'review_records'

    # Primary key: composite of learner_id and vocabulary_id
    learner_id = Column(String(255), primary_key=True, nullable=False)
    vocabulary_id = Column(String(255), primary_key=True, nullable=False)

    # Conversation day the word was collected on
    origin_day_id = Column(String(255), nullable=True)

    # Schema marker (legacy rows have none)
    schema_version = Column(Integer, nullable=True)

    # Memory state
    stability = Column(Float, nullable=True)
    difficulty = Column(Float, nullable=True)
    lapses = Column(Integer, nullable=False, default=0)
    total_reviews = Column(Integer, nullable=False, default=0)

    # Scheduling (ISO-8601 strings)
    last_review_date = Column(String(64), nullable=True)
    next_review_date = Column(String(64), nullable=False)
    discovered_at = Column(String(64), nullable=True)

    # Legacy interval-doubling field
    current_interval_days = Column(Float, nullable=True)

    # JSON array of history entries
    review_history = Column(Text, nullable=False, default="[]")

    is_starred = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<ReviewRecordRow({self.learner_id}, {self.vocabulary_id}, S={self.stability})>"
