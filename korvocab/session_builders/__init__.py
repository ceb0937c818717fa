"""Session builder modules for review queues and chat hints."""

from korvocab.session_builders.review_queue import (
    difficult_today,
    get_due_and_new,
    starred,
)
from korvocab.session_builders.chat_hints import ChatHintSelector

__all__ = [
    "get_due_and_new",
    "difficult_today",
    "starred",
    "ChatHintSelector",
]
