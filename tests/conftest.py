"""Pytest configuration for all tests."""

from typing import Any

import pytest
import structlog

from crewboard.core.config import Settings, get_settings
from crewboard.core.events import EventRegistry
from crewboard.core.exceptions import ApiError
from crewboard.domain.entities.record import Record
from crewboard.domain.services.schema_registry import SchemaRegistry

STORE_URL = "http://store.test/exec"


class InMemoryRecordClient:
    """Stand-in for RecordClient backed by dicts of rows.

    Mirrors the store's behaviour closely enough for the application
    services: rows keep append order, unknown UIDs are API errors, and
    every call is recorded in ``calls``. Set ``failures[(method, collection)]``
    to make the next matching call raise.
    """

    def __init__(self, chat_collection: str = "Chatboard") -> None:
        self.chat_collection = chat_collection
        self.tables: dict[str, list[dict[str, str]]] = {}
        self.calls: list[tuple[str, str, Any]] = []
        self.failures: dict[tuple[str, str], Exception] = {}
        self.closed = False
        self._counter = 0

    def seed(self, collection: str, rows: list[dict[str, str]]) -> None:
        self.tables[collection] = [dict(row) for row in rows]

    def ids(self, collection: str) -> list[str]:
        return [row.get("UID", "") for row in self.tables.get(collection, [])]

    def calls_to(self, method: str) -> list[tuple[str, str, Any]]:
        return [call for call in self.calls if call[0] == method]

    def _enter(self, method: str, collection: str, payload: Any = None) -> None:
        self.calls.append((method, collection, payload))
        error = self.failures.pop((method, collection), None)
        if error is not None:
            raise error

    def _find(self, collection: str, record_id: str) -> dict[str, str]:
        for row in self.tables.get(collection, []):
            if row.get("UID") == record_id:
                return row
        raise ApiError("UID not found")

    async def fetch_rows(self, collection: str) -> list[dict[str, Any]]:
        self._enter("fetch_rows", collection)
        return [dict(row) for row in self.tables.get(collection, [])]

    async def fetch_collection(self, collection: str) -> list[Record]:
        self._enter("fetch_collection", collection)
        return [Record.from_store(row) for row in self.tables.get(collection, [])]

    async def fetch_one(self, collection: str, record_id: str) -> Record:
        self._enter("fetch_one", collection, record_id)
        return Record.from_store(self._find(collection, record_id))

    async def create(self, collection: str, fields: dict[str, Any]) -> Record:
        self._enter("create", collection, dict(fields))
        self._counter += 1
        row = {key: str(value) for key, value in fields.items()}
        row.setdefault("UID", f"gen{self._counter}")
        row.setdefault("Timestamp", f"2024-03-{self._counter:02d}T08:00:00.000Z")
        self.tables.setdefault(collection, []).append(row)
        return Record.from_store(row)

    async def update(self, collection: str, record_id: str, fields: dict[str, Any]) -> None:
        self._enter("update", collection, (record_id, dict(fields)))
        row = self._find(collection, record_id)
        row.update({key: str(value) for key, value in fields.items()})

    async def remove(self, collection: str, record_id: str) -> None:
        self._enter("remove", collection, record_id)
        row = self._find(collection, record_id)
        self.tables[collection].remove(row)

    async def post_message(self, author: str, text: str) -> None:
        self._enter("post_message", self.chat_collection, (author, text))
        self._counter += 1
        self.tables.setdefault(self.chat_collection, []).append(
            {
                "UID": f"c{self._counter}",
                "Timestamp": f"2024-03-{self._counter:02d}T09:00:00.000Z",
                "Name": author,
                "Message": text,
            }
        )

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Settings are cached per process; reset around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo any structlog configuration a test applied."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


@pytest.fixture
def settings() -> Settings:
    """Settings for tests: no polling on start, fast interval."""
    return Settings(
        environment="testing",
        store_url=STORE_URL,
        refresh_interval_ms=1000,
        refresh_on_start=False,
    )


@pytest.fixture
def schemas() -> SchemaRegistry:
    return SchemaRegistry()


@pytest.fixture
def events() -> EventRegistry:
    return EventRegistry()


@pytest.fixture
def store() -> InMemoryRecordClient:
    """In-memory record store seeded with a few rows per collection."""
    client = InMemoryRecordClient()
    client.seed(
        "Updates",
        [
            {"UID": "u1", "Timestamp": "2024-01-01T07:00:00.000Z", "Title": "Safety Notice", "Details": "Wear PPE", "Date": "2024-01-01"},
            {"UID": "u2", "Timestamp": "2024-02-01T07:00:00.000Z", "Title": "Drill Schedule", "Details": "Fire drill", "Date": "2024-02-01"},
        ],
    )
    client.seed(
        "Memo",
        [
            {"UID": "m4", "Timestamp": "2024-01-10T07:00:00.000Z", "Title": "Leave Policy", "Details": "Updated", "Date": "2024-01-10"},
            {"UID": "m5", "Timestamp": "2024-01-11T07:00:00.000Z", "Title": "Port Rules", "Details": "Manila", "Date": "2024-01-11"},
        ],
    )
    client.seed(
        "Vessel_Join",
        [
            {"UID": "vj1", "Timestamp": "2024-01-05T07:00:00.000Z", "Vessel": "MV Horizon", "Principal": "Acme", "Port": "Singapore", "No. of Crew": "3", "Rank": "AB", "Date": "2024-01-20T00:00:00.000Z", "Flight": "SQ123"},
        ],
    )
    client.seed("Chatboard", [{"UID": "c0", "Timestamp": "2024-01-01T06:00:00.000Z", "Name": "Ops", "Message": "Good morning"}])
    client.seed("Users", [{"Username": "alice", "Password": "s3cret", "Role": "crewing"}])
    return client
