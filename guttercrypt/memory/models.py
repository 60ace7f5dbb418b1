"""Data models for the encrypted memory log.

Memory holds user notes, which are kept until removed, and a rolling
history of assistant exchanges, which is bounded.

Serialized field names are camelCase (``createdAt``, ``askedAt``,
``formatVersion``) so artifacts stay interchangeable across installs.
snake_case spellings are accepted when reading.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

MEMORY_FORMAT_VERSION = 1


def _field(data: dict[str, Any], camel: str, snake: str) -> Any:
    """Read a required field under either spelling."""
    if camel in data:
        return data[camel]
    if snake in data:
        return data[snake]
    raise KeyError(camel)


def _timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp, including a trailing ``Z``.

    Raises:
        ValueError: If the value is not a parseable timestamp
    """
    if not isinstance(value, str):
        raise ValueError(f"Invalid timestamp: {value!r}")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass
class Note:
    """A note the user wants the assistant to remember."""

    text: str
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "text": self.text,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Note":
        """Create from dictionary."""
        return cls(
            text=data["text"],
            created_at=_timestamp(_field(data, "createdAt", "created_at")),
        )


@dataclass
class Exchange:
    """One question/answer pair with the assistant."""

    question: str
    answer: str
    asked_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "question": self.question,
            "answer": self.answer,
            "askedAt": self.asked_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Exchange":
        """Create from dictionary."""
        return cls(
            question=data["question"],
            answer=data["answer"],
            asked_at=_timestamp(_field(data, "askedAt", "asked_at")),
        )


@dataclass
class Memory:
    """Decrypted contents of the memory artifact.

    Attributes:
        notes: User notes in insertion order
        conversations: Assistant exchanges, oldest first
        format_version: Schema version of the serialized document
    """

    notes: list[Note] = field(default_factory=list)
    conversations: list[Exchange] = field(default_factory=list)
    format_version: int = MEMORY_FORMAT_VERSION

    @property
    def is_empty(self) -> bool:
        return not self.notes and not self.conversations

    def add_note(self, text: str) -> Note:
        """Append a note."""
        note = Note(text=text)
        self.notes.append(note)
        return note

    def add_exchange(self, question: str, answer: str, limit: int) -> Exchange:
        """Append an exchange and drop the oldest ones beyond ``limit``."""
        exchange = Exchange(question=question, answer=answer)
        self.conversations.append(exchange)
        if len(self.conversations) > limit:
            self.conversations = self.conversations[-limit:] if limit > 0 else []
        return exchange

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "formatVersion": self.format_version,
            "notes": [note.to_dict() for note in self.notes],
            "conversations": [exchange.to_dict() for exchange in self.conversations],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Memory":
        """Create from dictionary."""
        return cls(
            notes=[Note.from_dict(n) for n in data.get("notes", [])],
            conversations=[Exchange.from_dict(c) for c in data.get("conversations", [])],
            format_version=data.get("formatVersion", data.get("format_version", MEMORY_FORMAT_VERSION)),
        )
