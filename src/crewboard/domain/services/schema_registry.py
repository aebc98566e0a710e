"""Registry of the entity schemas known to the dashboard.

Declares the built-in crew department collections and resolves entity
type names to their schema and archive collection.
"""

from typing import Iterable

from crewboard.core.exceptions import ValidationError
from crewboard.domain.entities.entity_schema import EntitySchema, FieldKind, FieldSpec

DEFAULT_ARCHIVE_PREFIX = "Archive_"


def _crew_movement_fields() -> tuple[FieldSpec, ...]:
    return (
        FieldSpec("Vessel", FieldKind.TEXT, required=True),
        FieldSpec("Principal"),
        FieldSpec("Port"),
        FieldSpec("No. of Crew"),
        FieldSpec("Rank"),
        FieldSpec("Date", FieldKind.DATE),
        FieldSpec("Flight"),
    )


def _notice_fields() -> tuple[FieldSpec, ...]:
    return (
        FieldSpec("Title", FieldKind.TEXT, required=True),
        FieldSpec("Details", FieldKind.LONG_TEXT),
        FieldSpec("Date", FieldKind.DATE),
    )


def _subject_fields() -> tuple[FieldSpec, ...]:
    return (
        FieldSpec("Subject", FieldKind.TEXT, required=True),
        FieldSpec("Details", FieldKind.LONG_TEXT),
    )


DEFAULT_SCHEMAS: tuple[EntitySchema, ...] = (
    EntitySchema(
        name="Vessel_Join",
        label="Crew Joining",
        fields=_crew_movement_fields(),
        title_field="Vessel",
        date_field="Date",
    ),
    EntitySchema(
        name="Arrivals",
        label="Crew Arrivals",
        fields=_crew_movement_fields(),
        title_field="Vessel",
        date_field="Date",
    ),
    EntitySchema(
        name="Updates",
        label="Daily Updates",
        fields=_notice_fields(),
        title_field="Title",
        date_field="Date",
    ),
    EntitySchema(
        name="Memo",
        label="Memo",
        fields=_notice_fields(),
        title_field="Title",
        date_field="Date",
    ),
    EntitySchema(
        name="Training",
        label="Training",
        fields=_subject_fields(),
        title_field="Subject",
    ),
    EntitySchema(
        name="Pni",
        label="P&I / Events",
        fields=_subject_fields(),
        title_field="Subject",
    ),
)


class SchemaRegistry:
    """Lookup of EntitySchema by entity type name.

    Registration order is preserved; it is the order the dashboard shows
    and refreshes collections in.
    """

    def __init__(
        self,
        schemas: Iterable[EntitySchema] = DEFAULT_SCHEMAS,
        archive_prefix: str = DEFAULT_ARCHIVE_PREFIX,
    ) -> None:
        """Initialize the registry.

        Args:
            schemas: Schemas to register.
            archive_prefix: Prefix turning a collection name into its archive name.

        Raises:
            ValueError: If two schemas share a name or the prefix is empty.
        """
        if not archive_prefix:
            raise ValueError("archive_prefix must not be empty")

        self.archive_prefix = archive_prefix
        self._schemas: dict[str, EntitySchema] = {}
        for schema in schemas:
            if schema.name in self._schemas:
                raise ValueError(f"Duplicate schema name: {schema.name}")
            self._schemas[schema.name] = schema

    def get(self, entity_type: str) -> EntitySchema:
        """Get the schema for an entity type.

        Raises:
            ValidationError: If the entity type is not registered.
        """
        schema = self._schemas.get(entity_type)
        if schema is None:
            raise ValidationError(f"Unknown entity type: {entity_type}")
        return schema

    def __contains__(self, entity_type: object) -> bool:
        return entity_type in self._schemas

    def __iter__(self):
        return iter(self._schemas.values())

    def __len__(self) -> int:
        return len(self._schemas)

    @property
    def names(self) -> list[str]:
        """Registered entity type names in registration order."""
        return list(self._schemas)

    def archive_name_of(self, entity_type: str) -> str:
        """Name of the archive collection paired with a live collection."""
        self.get(entity_type)
        return f"{self.archive_prefix}{entity_type}"
