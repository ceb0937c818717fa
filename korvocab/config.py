"""
Configuration from environment variables.

A `.env` file in the working directory is loaded on import.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from sqlalchemy.engine import make_url

from korvocab.schemas import ReviewSettings

# Load environment
load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///logs/reviews.db"
DEFAULT_LEARNER_ID = "learner"


def is_test_mode() -> bool:
    """
    Check if running in test mode.

    Returns:
        True if TEST_MODE environment variable is set to 'true'
    """
    return os.getenv("TEST_MODE", "false").lower() == "true"


def get_database_url() -> str:
    """
    Get the database URL from environment variables.

    Uses TEST_MODE env var to determine which database to connect to:
    in test mode the database name gets a 'test_' prefix
    (reviews.db -> test_reviews.db, review_db -> test_review_db).

    Returns:
        Database URL (SQLAlchemy connection string)
    """
    base_url = os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL
    if not is_test_mode():
        return base_url

    url = make_url(base_url)
    if not url.database or url.database == ":memory:":
        return base_url

    head, sep, name = url.database.rpartition("/")
    if name.startswith("test_"):
        return base_url
    return url.set(database=f"{head}{sep}test_{name}").render_as_string(hide_password=False)


def get_default_learner_id() -> str:
    return os.getenv("DEFAULT_LEARNER_ID", DEFAULT_LEARNER_ID)


def get_mongo_uri() -> str:
    """
    Get the MongoDB connection string for the vocabulary collection.

    Raises:
        ValueError: MONGO_URI is not set
    """
    mongo_uri = os.getenv("MONGO_URI")
    if not mongo_uri:
        raise ValueError("MONGO_URI not found in environment variables")
    return mongo_uri


def load_review_settings() -> ReviewSettings:
    """
    Build ReviewSettings from the environment, falling back to model defaults.

    Raises:
        pydantic.ValidationError: a variable is set to an invalid value
    """
    values = {
        "max_reviews_per_day": os.getenv("MAX_REVIEWS_PER_DAY"),
        "new_items_per_day": os.getenv("NEW_ITEMS_PER_DAY"),
        "desired_retention": os.getenv("DESIRED_RETENTION"),
        "timezone": os.getenv("LEARNER_TIMEZONE"),
    }
    return ReviewSettings(**{key: value for key, value in values.items() if value})


def configure_logging(level: str | None = None) -> None:
    """Configure root logging from LOG_LEVEL (default INFO)."""
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
