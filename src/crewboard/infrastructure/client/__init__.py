"""Record store client."""

from crewboard.infrastructure.client.record_client import RecordClient
from crewboard.infrastructure.client.schemas import StoreAction, StoreEnvelope

__all__ = ["RecordClient", "StoreAction", "StoreEnvelope"]
