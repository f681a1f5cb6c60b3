"""Conversation-related data models."""

import uuid
from dataclasses import dataclass, field
from enum import Enum


class Sender(str, Enum):
    """Who authored a conversation entry."""

    USER = "user"
    ASSISTANT = "assistant"


def _new_entry_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class MessageEntry:
    """A single entry in the conversation log."""

    text: str
    sender: Sender
    is_processing: bool = False  # transient placeholder for an in-flight transfer
    entry_id: str = field(default_factory=_new_entry_id)

    @classmethod
    def user(cls, text: str) -> "MessageEntry":
        return cls(text=text, sender=Sender.USER)

    @classmethod
    def assistant(cls, text: str) -> "MessageEntry":
        return cls(text=text, sender=Sender.ASSISTANT)

    @classmethod
    def placeholder(cls, text: str) -> "MessageEntry":
        return cls(text=text, sender=Sender.ASSISTANT, is_processing=True)

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "text": self.text,
            "sender": self.sender.value,
            "is_processing": self.is_processing,
        }
