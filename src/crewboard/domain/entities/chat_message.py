"""Chat message entity for the shared message stream."""

from dataclasses import dataclass
from typing import Any

from crewboard.domain.entities.record import CREATED_AT_COLUMN, ID_COLUMN

AUTHOR_COLUMN = "Name"
TEXT_COLUMN = "Message"


@dataclass(frozen=True)
class ChatMessage:
    """A message in the chat stream. Messages are never edited or deleted.

    Attributes:
        id: Server-assigned UID, when the store provides one.
        created_at: Server-assigned timestamp.
        author: Display name of the poster.
        text: Message body.
    """

    id: str | None
    created_at: str | None
    author: str
    text: str

    @classmethod
    def from_store(cls, row: dict[str, Any]) -> "ChatMessage":
        """Build a message from a chat collection row."""
        return cls(
            id=str(row[ID_COLUMN]) if row.get(ID_COLUMN) else None,
            created_at=str(row[CREATED_AT_COLUMN]) if row.get(CREATED_AT_COLUMN) else None,
            author=str(row.get(AUTHOR_COLUMN) or ""),
            text=str(row.get(TEXT_COLUMN) or ""),
        )
