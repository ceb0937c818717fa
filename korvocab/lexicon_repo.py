"""
Vocabulary repository: lookup of collected vocabulary items by id.

Implementations:
- InMemoryVocabularyRepository: dict keyed by id
- MongoVocabularyRepository: MongoDB collection of vocabulary documents
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Optional

from pydantic import ValidationError
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from korvocab import config
from korvocab.errors import StorageUnavailable
from korvocab.schemas import VocabularyItem

logger = logging.getLogger(__name__)

# Configuration
DB_NAME = "korean_trainer"
COLLECTION_NAME = "vocabulary"

# Global connection pool (reused across requests)
_client: Optional[MongoClient] = None
_collection: Optional[Collection] = None


class VocabularyRepository(ABC):
    """Source of truth for which vocabulary ids exist."""

    @abstractmethod
    def load_vocabulary_item(self, vocabulary_id: str) -> Optional[VocabularyItem]:
        """
        Look up a vocabulary item.

        Returns:
            The item, or None if no item backs this id

        Raises:
            StorageUnavailable: the backing storage cannot be reached
        """

    @abstractmethod
    def add_vocabulary_item(self, item: VocabularyItem) -> None:
        """Store a newly collected item (replaces an item with the same id)."""


class InMemoryVocabularyRepository(VocabularyRepository):

    def __init__(self, items: Optional[Iterable[VocabularyItem]] = None):
        self._items: dict[str, VocabularyItem] = {item.id: item for item in items or []}

    def load_vocabulary_item(self, vocabulary_id: str) -> Optional[VocabularyItem]:
        return self._items.get(vocabulary_id)

    def add_vocabulary_item(self, item: VocabularyItem) -> None:
        self._items[item.id] = item

    def __len__(self) -> int:
        return len(self._items)


# ---- Connection Management ----

def get_collection() -> Collection:
    """
    Get a connection to the MongoDB vocabulary collection.

    Uses a persistent connection pool that's reused across requests.

    Returns:
        MongoDB collection object
    """
    global _client, _collection

    # Return cached collection if it exists
    if _collection is not None:
        return _collection

    _client = MongoClient(
        config.get_mongo_uri(),
        maxPoolSize=10,  # Connection pool size
        minPoolSize=1,   # Keep at least 1 connection alive
        maxIdleTimeMS=60000  # Keep connections alive for 60 seconds
    )
    _collection = _client[DB_NAME][COLLECTION_NAME]

    return _collection


class MongoVocabularyRepository(VocabularyRepository):
    """
    Vocabulary documents keyed by their `id` field.

    Documents use the persisted camelCase layout (`korean`, `vietnamese` or
    `gloss`, `example`, `dailyChatId`, `createdDate`).
    """

    def __init__(self, collection: Optional[Collection] = None):
        self.collection = collection if collection is not None else get_collection()

    def load_vocabulary_item(self, vocabulary_id: str) -> Optional[VocabularyItem]:
        try:
            document = self.collection.find_one({"id": vocabulary_id}, {"_id": 0})
        except PyMongoError as exc:
            raise StorageUnavailable(f"Cannot load vocabulary item {vocabulary_id}: {exc}") from exc

        if document is None:
            return None

        try:
            return VocabularyItem.model_validate(document)
        except ValidationError as exc:
            logger.warning("Skipping malformed vocabulary document %s: %s", vocabulary_id, exc)
            return None

    def add_vocabulary_item(self, item: VocabularyItem) -> None:
        try:
            self.collection.replace_one({"id": item.id}, item.to_json_dict(), upsert=True)
        except PyMongoError as exc:
            raise StorageUnavailable(f"Cannot save vocabulary item {item.id}: {exc}") from exc
