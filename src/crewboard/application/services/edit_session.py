"""Edit session for the record currently open in the edit form.

One EditSession exists per dashboard. Opening a record while another is
open or still loading discards the previous edit without sending it.

States:
    CLOSED -> LOADING -> OPEN -> SAVING -> CLOSED
                         OPEN -> CLOSED (cancel)
"""

from enum import Enum

from crewboard.core.events import DashboardEvent, EventRegistry
from crewboard.core.exceptions import CrewboardError, InvalidTransitionError, ValidationError
from crewboard.core.logging import get_logger
from crewboard.domain.entities.entity_schema import FieldKind
from crewboard.domain.entities.record import Record
from crewboard.domain.services.record_validator import RecordValidator, normalize_date
from crewboard.domain.services.schema_registry import SchemaRegistry
from crewboard.infrastructure.client.record_client import RecordClient

logger = get_logger(__name__)


class EditState(str, Enum):
    CLOSED = "closed"
    LOADING = "loading"
    OPEN = "open"
    SAVING = "saving"


class EditSession:
    """State machine for the open edit form.

    Every open/cancel bumps a generation number. A fetch or save that
    completes after its generation was superseded leaves the session alone.
    """

    def __init__(
        self,
        client: RecordClient,
        schemas: SchemaRegistry,
        events: EventRegistry,
    ) -> None:
        self.client = client
        self.schemas = schemas
        self.events = events

        self.state = EditState.CLOSED
        self.entity_type: str | None = None
        self.record_id: str | None = None
        self.snapshot: Record | None = None
        self._values: dict[str, str] = {}
        self._generation = 0

    @property
    def is_active(self) -> bool:
        """True while a record is loading or open in the form."""
        return self.state in (EditState.LOADING, EditState.OPEN)

    @property
    def field_values(self) -> dict[str, str]:
        """Copy of the current form values, in schema order."""
        return dict(self._values)

    @property
    def is_dirty(self) -> bool:
        """Whether any form value differs from its seeded value."""
        if self.snapshot is None or self.entity_type is None:
            return False
        return self._values != self._seed_values(self.entity_type, self.snapshot)

    async def open(self, entity_type: str, record_id: str) -> Record | None:
        """Load a record into the form.

        Returns:
            The fetched record, or None if this open was superseded while
            loading.

        Raises:
            ValidationError: If the entity type is unknown.
            TransportError, ApiError: If the fetch failed. The session is
                closed.
        """
        self.schemas.get(entity_type)

        if self.state is EditState.OPEN and self.is_dirty:
            logger.info(
                "Discarding unsaved edits",
                entity_type=self.entity_type,
                record_id=self.record_id,
            )

        generation = self._reset(EditState.LOADING)
        self.entity_type = entity_type
        self.record_id = record_id

        try:
            record = await self.client.fetch_one(entity_type, record_id)
        except CrewboardError:
            if generation == self._generation:
                self._reset(EditState.CLOSED)
            raise

        if generation != self._generation:
            logger.debug("Dropping superseded edit load", entity_type=entity_type, record_id=record_id)
            return None

        self.snapshot = record
        self._values = self._seed_values(entity_type, record)
        self.state = EditState.OPEN
        logger.debug("Edit session opened", entity_type=entity_type, record_id=record_id)
        return record

    def set_field(self, name: str, value: str) -> None:
        """Change one form value.

        Raises:
            InvalidTransitionError: If no record is open.
            ValidationError: If the field is not editable for this entity.
        """
        if self.state is not EditState.OPEN:
            raise InvalidTransitionError(f"Cannot edit fields while {self.state.value}")
        if name not in self._values:
            raise ValidationError(f"Unknown field '{name}' for {self.entity_type}")
        self._values[name] = value

    def update_fields(self, values: dict[str, str]) -> None:
        """Change several form values at once."""
        for name, value in values.items():
            self.set_field(name, value)

    async def submit(self) -> None:
        """Save the form values to the store.

        On success the session closes and ``record_after_update`` is
        emitted. On failure the session returns to OPEN with the edits
        kept.

        Raises:
            InvalidTransitionError: If no record is open.
            ValidationError: If a local check fails; nothing is sent.
            TransportError, ApiError: If the update failed.
        """
        if self.state is not EditState.OPEN:
            raise InvalidTransitionError(f"Cannot submit while {self.state.value}")

        entity_type = self.entity_type
        record_id = self.record_id
        schema = self.schemas.get(entity_type)
        seeded = self._seed_values(entity_type, self.snapshot)
        # Unedited dates go back as stored, parseable or not
        kept = {
            name: value
            for name, value in self._values.items()
            if schema.field(name).kind is FieldKind.DATE
            and value.strip()
            and value == seeded.get(name)
        }
        checked = RecordValidator.check(
            schema,
            {name: value for name, value in self._values.items() if name not in kept},
            partial=True,
        )
        values = {
            name: kept[name] if name in kept else checked.get(name, "")
            for name in schema.field_names
        }

        generation = self._generation
        self.state = EditState.SAVING

        try:
            await self.client.update(entity_type, record_id, values)
        except CrewboardError:
            if generation == self._generation:
                self.state = EditState.OPEN
            raise

        if generation == self._generation:
            self._reset(EditState.CLOSED)

        logger.info("Record updated", entity_type=entity_type, record_id=record_id)
        await self.events.emit(
            DashboardEvent.RECORD_AFTER_UPDATE,
            {"entity_type": entity_type, "record_id": record_id},
        )

    def cancel(self) -> None:
        """Close the form, discarding unsaved edits. No-op when closed."""
        if self.state is EditState.CLOSED:
            return
        logger.debug("Edit session cancelled", entity_type=self.entity_type, record_id=self.record_id)
        self._reset(EditState.CLOSED)

    def _reset(self, state: EditState) -> int:
        self._generation += 1
        self.state = state
        self.entity_type = None
        self.record_id = None
        self.snapshot = None
        self._values = {}
        return self._generation

    def _seed_values(self, entity_type: str, record: Record) -> dict[str, str]:
        schema = self.schemas.get(entity_type)
        return {
            spec.name: (
                normalize_date(record.get(spec.name))
                if spec.kind is FieldKind.DATE
                else record.get(spec.name)
            )
            for spec in schema.fields
        }
