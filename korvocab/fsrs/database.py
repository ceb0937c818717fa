"""
Database - Review Record Storage with SQLAlchemy

Handles all database operations for review records.
Algorithm logic is handled by the scheduler module.
"""

from __future__ import annotations

import json
import os
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from korvocab import config
from korvocab.errors import StorageUnavailable
from korvocab.fsrs.models import Base, ReviewRecordRow
from korvocab.fsrs.store import ReviewRecordStore, StoredRecord
from korvocab.schemas import ReviewRecord


def get_engine(database_url: Optional[str] = None) -> Engine:
    """
    Get SQLAlchemy engine for database connection.

    Uses connection pooling for server databases; SQLite keeps its default pool.

    Args:
        database_url: Connection string (defaults to DATABASE_URL)

    Returns:
        SQLAlchemy Engine instance
    """
    db_url = database_url or config.get_database_url()
    url = make_url(db_url)
    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(url.database)), exist_ok=True)
        return create_engine(db_url, echo=False)
    return create_engine(
        db_url,
        pool_size=5,           # Keep 5 connections open
        max_overflow=10,       # Allow up to 10 extra connections
        pool_pre_ping=True,    # Verify connections before use
        echo=False
    )


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _row_to_dict(row: ReviewRecordRow) -> dict:
    """
    Convert a row to the persisted JSON layout.

    Rows without a schema version are legacy records; None values are dropped
    so model defaults apply.
    """
    data = {
        "schemaVersion": row.schema_version,
        "vocabularyId": row.vocabulary_id,
        "originDayId": row.origin_day_id,
        "dailyChatId": row.origin_day_id,
        "stability": row.stability,
        "difficulty": row.difficulty,
        "lapses": row.lapses,
        "totalReviews": row.total_reviews,
        "lastReviewDate": row.last_review_date,
        "nextReviewDate": row.next_review_date,
        "discoveredAt": row.discovered_at,
        "currentIntervalDays": row.current_interval_days,
        "reviewHistory": json.loads(row.review_history or "[]"),
        "isStarred": bool(row.is_starred),
    }
    return {key: value for key, value in data.items() if value is not None}


class SqlAlchemyReviewStore(ReviewRecordStore):
    """
    Review records in a relational database, one row per learner and word.
    """

    def __init__(self, engine: Optional[Engine] = None, learner_id: Optional[str] = None):
        self.engine = engine or get_engine()
        self.learner_id = learner_id or config.get_default_learner_id()
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def get_session(self) -> Session:
        return self._session_factory()

    def init_db(self) -> None:
        """
        Create tables if they don't exist.

        Safe to call multiple times.
        """
        try:
            Base.metadata.create_all(self.engine)
        except OperationalError as exc:
            raise StorageUnavailable(f"Cannot initialize review database: {exc}") from exc

    def reset_db(self) -> None:
        """
        DANGEROUS: Delete all review records and recreate tables.
        """
        try:
            Base.metadata.drop_all(self.engine)
        except OperationalError as exc:
            raise StorageUnavailable(f"Cannot reset review database: {exc}") from exc
        self.init_db()

    def load_all_review_records(self, learner_id: str) -> list[StoredRecord]:
        """
        Load every stored record of a learner as JSON dicts.
        """
        session = self.get_session()
        try:
            rows = session.query(ReviewRecordRow).filter(
                ReviewRecordRow.learner_id == learner_id
            ).order_by(ReviewRecordRow.vocabulary_id).all()
            return [_row_to_dict(row) for row in rows]
        except OperationalError as exc:
            raise StorageUnavailable(f"Cannot load review records: {exc}") from exc
        finally:
            session.close()

    def save_review_record(self, day_id: Optional[str], record: ReviewRecord) -> None:
        """
        Save a record (insert or update) for this store's learner.
        """
        history = json.dumps(
            [entry.to_json_dict() for entry in record.review_history],
            ensure_ascii=False,
        )
        origin_day_id = day_id if day_id is not None else record.origin_day_id

        session = self.get_session()
        try:
            row = session.query(ReviewRecordRow).filter(
                ReviewRecordRow.learner_id == self.learner_id,
                ReviewRecordRow.vocabulary_id == record.vocabulary_id
            ).first()

            if row is None:
                row = ReviewRecordRow(
                    learner_id=self.learner_id,
                    vocabulary_id=record.vocabulary_id,
                )
                session.add(row)

            row.origin_day_id = origin_day_id
            row.schema_version = record.schema_version
            row.stability = record.stability
            row.difficulty = record.difficulty
            row.lapses = record.lapses
            row.total_reviews = record.total_reviews
            row.last_review_date = _iso(record.last_review_date)
            row.next_review_date = _iso(record.next_review_date)
            row.discovered_at = _iso(record.discovered_at)
            row.current_interval_days = None
            row.review_history = history
            row.is_starred = record.is_starred

            session.commit()
        except OperationalError as exc:
            session.rollback()
            raise StorageUnavailable(f"Cannot save review record {record.vocabulary_id}: {exc}") from exc
        finally:
            session.close()

    def save_legacy_row(self, data: dict) -> None:
        """
        Insert a raw legacy record (no schema version), e.g. from an export.
        """
        session = self.get_session()
        try:
            session.merge(ReviewRecordRow(
                learner_id=self.learner_id,
                vocabulary_id=data["vocabularyId"],
                origin_day_id=data.get("dailyChatId"),
                schema_version=None,
                stability=data.get("stability"),
                difficulty=data.get("difficulty"),
                lapses=data.get("lapses") or 0,
                total_reviews=data.get("totalReviews") or 0,
                last_review_date=data.get("lastReviewDate"),
                next_review_date=data["nextReviewDate"],
                current_interval_days=data.get("currentIntervalDays"),
                review_history=json.dumps(data.get("reviewHistory", []), ensure_ascii=False),
                is_starred=bool(data.get("isStarred", False)),
            ))
            session.commit()
        except OperationalError as exc:
            session.rollback()
            raise StorageUnavailable(f"Cannot save legacy record: {exc}") from exc
        finally:
            session.close()
