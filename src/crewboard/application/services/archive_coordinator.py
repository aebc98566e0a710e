"""Delete-as-archive for live records.

A record is never deleted outright. In ``client`` mode it is copied into
its archive collection first and only removed from the live collection
once the copy is confirmed:

    1. fetch_one(entity_type, id)
    2. create(archive_name_of(entity_type), record)   # same UID
    3. remove(entity_type, id)

If step 1 or 2 fails nothing is removed. If step 3 fails the record sits
in both collections and PartialFailure is raised for manual cleanup.

In ``server`` mode the store moves the row itself on delete, so a single
remove call is issued.
"""

from typing import Literal

from crewboard.core.events import DashboardEvent, EventRegistry
from crewboard.core.exceptions import CrewboardError, PartialFailure
from crewboard.core.logging import get_logger
from crewboard.domain.services.schema_registry import SchemaRegistry
from crewboard.infrastructure.client.record_client import RecordClient

logger = get_logger(__name__)

ArchiveMode = Literal["client", "server"]


class ArchiveCoordinator:
    """Moves live records into their archive collection."""

    def __init__(
        self,
        client: RecordClient,
        schemas: SchemaRegistry,
        events: EventRegistry,
        mode: ArchiveMode = "client",
    ) -> None:
        if mode not in ("client", "server"):
            raise ValueError(f"Unknown archive mode: {mode}")
        self.client = client
        self.schemas = schemas
        self.events = events
        self.mode = mode

    async def archive(self, entity_type: str, record_id: str) -> None:
        """Archive one record.

        Callers must have obtained the user's confirmation first.

        Raises:
            ValidationError: If the entity type is unknown.
            TransportError, ApiError: If fetching or copying failed; the
                live record is untouched.
            PartialFailure: If the copy was written but removal failed.
        """
        archive_collection = self.schemas.archive_name_of(entity_type)

        if self.mode == "server":
            await self.client.remove(entity_type, record_id)
        else:
            record = await self.client.fetch_one(entity_type, record_id)
            await self.client.create(archive_collection, record.to_store())
            logger.debug(
                "Archive copy written",
                entity_type=entity_type,
                record_id=record_id,
                archive_collection=archive_collection,
            )

            try:
                await self.client.remove(entity_type, record_id)
            except CrewboardError as e:
                logger.error(
                    "Archived record could not be removed from live collection",
                    entity_type=entity_type,
                    record_id=record_id,
                    archive_collection=archive_collection,
                    error=str(e),
                )
                raise PartialFailure(entity_type, record_id, archive_collection, e) from e

        logger.info(
            "Record archived",
            entity_type=entity_type,
            record_id=record_id,
            archive_collection=archive_collection,
            mode=self.mode,
        )
        await self.events.emit(
            DashboardEvent.RECORD_AFTER_ARCHIVE,
            {"entity_type": entity_type, "record_id": record_id},
        )
