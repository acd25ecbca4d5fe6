"""Conversation domain models.

A conversation is an ordered sequence of turns. Order is semantic: it is
exactly the message list handed back to the language model.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict


class Role(Enum):
    """Author of a conversation turn."""
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    """One message in a conversation.

    Immutable - created at append time and only ever discarded, never edited.
    """
    role: Role
    content: str

    @classmethod
    def user(cls, content: str) -> "Turn":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Turn":
        return cls(role=Role.ASSISTANT, content=content)

    def to_message(self) -> Dict[str, str]:
        """Convert to the chat-completion message shape."""
        return {"role": self.role.value, "content": self.content}

    @property
    def speaker(self) -> str:
        """Display name used in alert transcripts."""
        return "User" if self.role is Role.USER else "Jennifer"
