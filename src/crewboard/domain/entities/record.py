"""Record entity for rows held by the remote record store.

The store keys every row by ``UID`` and stamps it with ``Timestamp``.
Both are server-assigned; the remaining columns are entity-specific and
described by the collection's EntitySchema.
"""

from dataclasses import dataclass, field
from typing import Any

ID_COLUMN = "UID"
CREATED_AT_COLUMN = "Timestamp"

# Columns the client never edits
SYSTEM_COLUMNS = frozenset({ID_COLUMN, CREATED_AT_COLUMN})


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


@dataclass
class Record:
    """One row in a named collection.

    Attributes:
        id: Server-assigned UID. None only on the value returned from a
            create call when the store does not echo the new row.
        created_at: Server-assigned timestamp, as the store formats it.
        fields: Entity-specific column values keyed by column name.
    """

    id: str | None
    created_at: str | None = None
    fields: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_store(cls, row: dict[str, Any]) -> "Record":
        """Build a Record from a row as the store returns it.

        Args:
            row: Column name to value mapping, including UID and Timestamp.

        Returns:
            Record with system columns split from the entity fields.
        """
        if not isinstance(row, dict):
            raise ValueError(f"Expected a row object, got {type(row).__name__}")

        raw_id = row.get(ID_COLUMN)
        raw_created = row.get(CREATED_AT_COLUMN)
        return cls(
            id=_as_text(raw_id) or None,
            created_at=_as_text(raw_created) or None,
            fields={
                key: _as_text(value)
                for key, value in row.items()
                if key not in SYSTEM_COLUMNS
            },
        )

    def to_store(self) -> dict[str, str]:
        """Reassemble the row, system columns included.

        Used when copying a record verbatim, e.g. into its archive collection.
        """
        row: dict[str, str] = {}
        if self.id is not None:
            row[ID_COLUMN] = self.id
        if self.created_at is not None:
            row[CREATED_AT_COLUMN] = self.created_at
        row.update(self.fields)
        return row

    def get(self, name: str, default: str = "") -> str:
        """Get a field value, returning ``default`` when it is missing."""
        return self.fields.get(name, default)
