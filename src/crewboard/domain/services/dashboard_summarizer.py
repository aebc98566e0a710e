"""Dashboard summarizer for the overview cards.

Projects already-fetched collections into small rollups: the most recent
records of each entity type, newest first, reduced to a date and a title.
"""

from dataclasses import dataclass, field

from crewboard.domain.entities.record import Record
from crewboard.domain.services.record_validator import normalize_date
from crewboard.domain.services.schema_registry import SchemaRegistry

DEFAULT_SUMMARY_LIMIT = 5


@dataclass(frozen=True)
class SummaryItem:
    """One line of a dashboard card."""

    record_id: str | None
    date: str
    title: str


@dataclass(frozen=True)
class SummaryView:
    """Dashboard card for one entity type.

    Attributes:
        entity_type: Collection name.
        label: Human-readable collection label.
        items: Most recent records, newest first.
        total: Number of records the card was built from.
    """

    entity_type: str
    label: str
    items: tuple[SummaryItem, ...] = field(default_factory=tuple)
    total: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.items


class DashboardSummarizer:
    """Builds SummaryView cards. Pure: never touches the network."""

    def __init__(self, schemas: SchemaRegistry, limit: int = DEFAULT_SUMMARY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("Summary limit must be at least 1")
        self.schemas = schemas
        self.limit = limit

    def summarize(self, entity_type: str, records: list[Record]) -> SummaryView:
        """Summarize one collection.

        The store returns rows in append order, so the newest records are
        the last ones. The card keeps the last ``limit`` of them, reversed.

        Args:
            entity_type: Collection name.
            records: Records in the order the store returned them.

        Returns:
            SummaryView with at most ``limit`` items, newest first.
        """
        schema = self.schemas.get(entity_type)

        recent = records[-self.limit:]
        items = tuple(
            SummaryItem(
                record_id=record.id,
                date=self._date_of(record, schema.date_field),
                title=record.get(schema.title_field),
            )
            for record in reversed(recent)
        )

        return SummaryView(
            entity_type=entity_type,
            label=schema.label,
            items=items,
            total=len(records),
        )

    @staticmethod
    def _date_of(record: Record, date_field: str | None) -> str:
        # Collections without a date column fall back to the store timestamp
        value = record.get(date_field) if date_field else ""
        if not value.strip():
            value = record.created_at or ""
        return normalize_date(value)
