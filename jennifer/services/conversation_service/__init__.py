"""Conversation Service: bounded, per-session conversation memory.

Volatile by design - history lives in process memory only and is lost on
restart. One ConversationStore is built at startup and passed explicitly
to the chat relay.
"""

from .store import ConversationStore, InvalidSessionKeyError, MAX_TURNS

__all__ = [
    "ConversationStore",
    "InvalidSessionKeyError",
    "MAX_TURNS",
]
