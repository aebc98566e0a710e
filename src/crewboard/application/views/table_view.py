"""Table rendering for one entity collection.

TableView turns a list of records into a TableRender: columns from the
schema, one row per record, and the edit/archive actions of each row.
It keeps no state between renders.
"""

from dataclasses import dataclass, field

from crewboard.core.events import DashboardEvent, EventRegistry, EventResult
from crewboard.domain.entities.entity_schema import EntitySchema, FieldKind
from crewboard.domain.entities.record import Record
from crewboard.domain.services.record_validator import normalize_date
from crewboard.domain.services.schema_registry import SchemaRegistry

EMPTY_MESSAGE = "No records yet"
ROW_ACTIONS = ("edit", "archive")


@dataclass(frozen=True)
class TableColumn:
    name: str
    kind: FieldKind
    is_title: bool = False


@dataclass(frozen=True)
class TableCell:
    field: str
    value: str
    emphasized: bool = False


@dataclass(frozen=True)
class TableRow:
    """One rendered record. ``record_id`` addresses the row's actions."""

    record_id: str | None
    cells: tuple[TableCell, ...]
    actions: tuple[str, ...] = ROW_ACTIONS


@dataclass(frozen=True)
class TableRender:
    """Renderable table for one collection.

    An empty collection renders with ``is_empty`` set, no columns and an
    explicit message, never as a bare header.
    """

    entity_type: str
    label: str
    columns: tuple[TableColumn, ...] = field(default_factory=tuple)
    rows: tuple[TableRow, ...] = field(default_factory=tuple)
    is_empty: bool = False
    empty_message: str = ""

    def as_text(self) -> str:
        """Plain-text rendering for terminals.

        Columns follow the schema order with the record id last. Title cells
        are upper-cased.
        """
        lines = [f"== {self.label} =="]
        if self.is_empty:
            lines.append(self.empty_message)
            return "\n".join(lines)

        header = [column.name for column in self.columns] + ["UID"]
        body = [
            [cell.value.upper() if cell.emphasized else cell.value for cell in row.cells]
            + [row.record_id or "-"]
            for row in self.rows
        ]
        widths = [
            max(len(line[index].replace("\n", " ")) for line in [header] + body)
            for index in range(len(header))
        ]
        for line in [header] + body:
            lines.append(
                "  ".join(
                    value.replace("\n", " ").ljust(width)
                    for value, width in zip(line, widths)
                ).rstrip()
            )
        return "\n".join(lines)


class TableView:
    """Renders collections and emits the actions requested on their rows."""

    def __init__(self, schemas: SchemaRegistry, events: EventRegistry) -> None:
        self.schemas = schemas
        self.events = events

    def render(self, entity_type: str, records: list[Record]) -> TableRender:
        """Render records in the order given.

        Args:
            entity_type: Collection name.
            records: Records to show; callers reverse them for newest-first.

        Raises:
            ValidationError: If the entity type is unknown.
        """
        schema = self.schemas.get(entity_type)

        if not records:
            return TableRender(
                entity_type=entity_type,
                label=schema.label,
                is_empty=True,
                empty_message=EMPTY_MESSAGE,
            )

        columns = tuple(
            TableColumn(name=spec.name, kind=spec.kind, is_title=schema.is_title(spec.name))
            for spec in schema.fields
        )
        rows = tuple(self._render_row(schema, record) for record in records)

        return TableRender(
            entity_type=entity_type,
            label=schema.label,
            columns=columns,
            rows=rows,
        )

    async def request_edit(self, entity_type: str, record_id: str) -> EventResult:
        """Emit ``edit_requested`` for a row."""
        self.schemas.get(entity_type)
        return await self.events.emit(
            DashboardEvent.EDIT_REQUESTED,
            {"entity_type": entity_type, "record_id": record_id},
        )

    async def request_archive(self, entity_type: str, record_id: str) -> EventResult:
        """Emit ``archive_requested`` for a row."""
        self.schemas.get(entity_type)
        return await self.events.emit(
            DashboardEvent.ARCHIVE_REQUESTED,
            {"entity_type": entity_type, "record_id": record_id},
        )

    @staticmethod
    def _render_row(schema: EntitySchema, record: Record) -> TableRow:
        cells = []
        for spec in schema.fields:
            value = record.get(spec.name)
            if spec.kind is FieldKind.DATE:
                value = normalize_date(value)
            cells.append(
                TableCell(field=spec.name, value=value, emphasized=schema.is_title(spec.name))
            )
        return TableRow(record_id=record.id, cells=tuple(cells))
