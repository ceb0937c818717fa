"""
Chat Hints - Vocabulary Mission Sampling

Picks a bounded set of words for a conversation to weave in
("try to use these words"). Rules:
- Sample from the due pool, falling back to new words when nothing is due
- Words already hinted in another active session are skipped
- Within one session the same sample is reused until the session ends
- Words without a backing vocabulary item are never returned
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Optional, Sequence

from korvocab.fsrs.constants import DEFAULT_HINT_LIMIT
from korvocab.schemas import ReviewRecord, VocabularyItem
from korvocab.session_builders.pool_utils import sample_items

logger = logging.getLogger(__name__)

VocabularyLookup = Callable[[str], Optional[VocabularyItem]]


class ChatHintSelector:
    """
    Per-session hint sets, sampled with an injected random source.
    """

    def __init__(
        self,
        lookup: VocabularyLookup,
        rng: Optional[random.Random] = None,
        limit: int = DEFAULT_HINT_LIMIT
    ):
        self.lookup = lookup
        self.rng = rng or random.Random()
        self.limit = limit
        self._sessions: dict[str, list[VocabularyItem]] = {}

    def active_ids(self) -> set[str]:
        """Vocabulary ids reserved by sessions that have not ended."""
        return {item.id for items in self._sessions.values() for item in items}

    def _candidates(self, records: Sequence[ReviewRecord], reserved: set[str]) -> list[VocabularyItem]:
        items: list[VocabularyItem] = []
        seen: set[str] = set()
        for record in records:
            vocabulary_id = record.vocabulary_id
            if vocabulary_id in reserved or vocabulary_id in seen:
                continue
            seen.add(vocabulary_id)
            item = self.lookup(vocabulary_id)
            if item is None:
                logger.debug("No vocabulary item for %s; not offered as hint", vocabulary_id)
                continue
            items.append(item)
        return items

    def select(
        self,
        session_id: str,
        due: Sequence[ReviewRecord],
        new: Sequence[ReviewRecord],
        n: Optional[int] = None
    ) -> list[VocabularyItem]:
        """
        Get the hint words for a session, sampling them on first use.

        Args:
            session_id: Conversation session the hints belong to
            due: Due records, most urgent first
            new: New records
            n: Maximum number of hints (defaults to the selector limit)

        Returns:
            Up to n vocabulary items
        """
        count = self.limit if n is None else n
        if count <= 0:
            return []

        cached = self._sessions.get(session_id)
        if cached is not None:
            # Words removed since sampling drop out of the session
            backed = [item for item in cached if self.lookup(item.id) is not None]
            if len(backed) != len(cached):
                logger.debug("Dropped %s deleted words from session %s", len(cached) - len(backed), session_id)
                self._sessions[session_id] = backed
            return backed[:count]

        others = self.active_ids()
        pool = self._candidates(due, others)
        source = "due"
        if not pool:
            pool = self._candidates(new, others)
            source = "new"

        sample = sample_items(pool, count, self.rng)
        self._sessions[session_id] = sample

        logger.debug(
            "Hint sample for session %s: %s words from %s pool (%s candidates)",
            session_id,
            len(sample),
            source,
            len(pool),
        )
        return list(sample)

    def end_session(self, session_id: str) -> None:
        """Release a session's hints; the next select() for it resamples."""
        released = self._sessions.pop(session_id, None)
        if released is not None:
            logger.debug("Released %s hint words of session %s", len(released), session_id)
