"""Entity schema definitions.

An EntitySchema is the static description of one record collection:
which columns it has, how each is entered and displayed, which column
is the human-readable title and which one carries the record's date.
Schemas are declared once at startup and never change afterwards.
"""

from dataclasses import dataclass
from enum import Enum


class FieldKind(str, Enum):
    """How a field is entered and displayed."""

    TEXT = "text"
    LONG_TEXT = "long_text"
    DATE = "date"


@dataclass(frozen=True)
class FieldSpec:
    """One column of a collection.

    Attributes:
        name: Column name exactly as the store uses it.
        kind: Entry/display kind.
        required: Whether add and edit refuse a blank value.
    """

    name: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False


@dataclass(frozen=True)
class EntitySchema:
    """Static description of one collection.

    Attributes:
        name: Remote collection name (the store's ``sheet``).
        label: Human-readable name shown above tables and summaries.
        fields: Ordered editable columns, excluding UID and Timestamp.
        title_field: Column shown as the record's title.
        date_field: Column holding the record's effective date, if any.
    """

    name: str
    label: str
    fields: tuple[FieldSpec, ...]
    title_field: str
    date_field: str | None = None

    def __post_init__(self) -> None:
        """Validate schema consistency after initialization."""
        if not self.name:
            raise ValueError("Schema name is required")
        if not self.fields:
            raise ValueError(f"Schema {self.name} must declare at least one field")

        names = [spec.name for spec in self.fields]
        if len(set(names)) != len(names):
            raise ValueError(f"Schema {self.name} declares duplicate fields")
        if self.title_field not in names:
            raise ValueError(f"Title field {self.title_field!r} is not a field of {self.name}")
        if self.date_field is not None:
            if self.date_field not in names:
                raise ValueError(f"Date field {self.date_field!r} is not a field of {self.name}")
            if self.field(self.date_field).kind is not FieldKind.DATE:
                raise ValueError(f"Date field {self.date_field!r} of {self.name} must be a date")

    @property
    def field_names(self) -> list[str]:
        """Column names in display order."""
        return [spec.name for spec in self.fields]

    def field(self, name: str) -> FieldSpec:
        """Get the FieldSpec for a column.

        Raises:
            KeyError: If the collection has no such column.
        """
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(name)

    def has_field(self, name: str) -> bool:
        return any(spec.name == name for spec in self.fields)

    def is_title(self, name: str) -> bool:
        return name == self.title_field
