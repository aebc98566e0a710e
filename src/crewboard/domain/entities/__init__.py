"""Domain entities for Crewboard.

Entities are plain dataclasses describing records, schemas, chat
messages and the session. They have no dependencies on the network
client or the views.
"""

from crewboard.domain.entities.chat_message import ChatMessage
from crewboard.domain.entities.entity_schema import EntitySchema, FieldKind, FieldSpec
from crewboard.domain.entities.record import (
    CREATED_AT_COLUMN,
    ID_COLUMN,
    SYSTEM_COLUMNS,
    Record,
)
from crewboard.domain.entities.session import SessionState

__all__ = [
    "CREATED_AT_COLUMN",
    "ChatMessage",
    "EntitySchema",
    "FieldKind",
    "FieldSpec",
    "ID_COLUMN",
    "Record",
    "SYSTEM_COLUMNS",
    "SessionState",
]
