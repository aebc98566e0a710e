"""Generic add-record action for every entity type."""

from typing import Any

from crewboard.core.events import DashboardEvent, EventRegistry
from crewboard.core.logging import get_logger
from crewboard.domain.entities.record import Record
from crewboard.domain.services.record_validator import RecordValidator
from crewboard.domain.services.schema_registry import SchemaRegistry
from crewboard.infrastructure.client.record_client import RecordClient

logger = get_logger(__name__)


class RecordService:
    """Adds records to any collection described by a schema."""

    def __init__(
        self,
        client: RecordClient,
        schemas: SchemaRegistry,
        events: EventRegistry,
    ) -> None:
        self.client = client
        self.schemas = schemas
        self.events = events

    async def add(self, entity_type: str, values: dict[str, Any]) -> Record:
        """Validate form values and append a record.

        Missing optional fields are sent blank; date values are normalized.

        Raises:
            ValidationError: If the entity type is unknown or a check fails.
            TransportError, ApiError: If the store call failed.
        """
        schema = self.schemas.get(entity_type)
        prepared = RecordValidator.check(schema, values)

        record = await self.client.create(entity_type, prepared)

        logger.info("Record added", entity_type=entity_type, record_id=record.id)
        await self.events.emit(
            DashboardEvent.RECORD_AFTER_CREATE,
            {"entity_type": entity_type, "record_id": record.id},
        )
        return record

