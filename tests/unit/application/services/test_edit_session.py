"""Tests for the edit form state machine."""

import asyncio

import pytest

from crewboard.application.services.edit_session import EditSession, EditState
from crewboard.core.events import DashboardEvent
from crewboard.core.exceptions import (
    ApiError,
    InvalidTransitionError,
    TransportError,
    ValidationError,
)


@pytest.fixture
def session(store, schemas, events):
    return EditSession(store, schemas, events)


@pytest.mark.asyncio
async def test_open_seeds_values_in_schema_order(session):
    record = await session.open("Memo", "m5")

    assert record.id == "m5"
    assert session.state is EditState.OPEN
    assert session.is_active
    assert list(session.field_values) == ["Title", "Details", "Date"]
    assert session.field_values["Title"] == "Port Rules"
    assert not session.is_dirty


@pytest.mark.asyncio
async def test_open_normalizes_date_fields(session):
    await session.open("Vessel_Join", "vj1")

    assert session.field_values["Date"] == "2024-01-20"
    assert not session.is_dirty


@pytest.mark.asyncio
async def test_open_unknown_entity_type(session, store):
    with pytest.raises(ValidationError):
        await session.open("Crew", "x1")

    assert store.calls == []
    assert session.state is EditState.CLOSED


@pytest.mark.asyncio
async def test_open_missing_record_closes_session(session):
    with pytest.raises(ApiError, match="UID not found"):
        await session.open("Memo", "m9")

    assert session.state is EditState.CLOSED
    assert session.field_values == {}


@pytest.mark.asyncio
async def test_submit_sends_values_and_closes(session, store, events):
    seen = []
    events.register(DashboardEvent.RECORD_AFTER_UPDATE, lambda e, d: seen.append(d))

    await session.open("Memo", "m5")
    session.set_field("Details", "Manila and Cebu")
    assert session.is_dirty

    await session.submit()

    assert store.calls_to("update") == [
        ("update", "Memo", ("m5", {"Title": "Port Rules", "Details": "Manila and Cebu", "Date": "2024-01-11"}))
    ]
    assert session.state is EditState.CLOSED
    assert seen == [{"entity_type": "Memo", "record_id": "m5"}]


@pytest.mark.asyncio
async def test_failed_submit_keeps_edits(session, store):
    await session.open("Memo", "m5")
    session.update_fields({"Title": "Port Rules 2024"})
    store.failures[("update", "Memo")] = TransportError("timed out")

    with pytest.raises(TransportError):
        await session.submit()

    assert session.state is EditState.OPEN
    assert session.record_id == "m5"
    assert session.field_values["Title"] == "Port Rules 2024"


@pytest.mark.asyncio
async def test_submit_validation_failure_sends_nothing(session, store):
    await session.open("Memo", "m5")
    session.set_field("Title", "")

    with pytest.raises(ValidationError, match="Title"):
        await session.submit()

    assert store.calls_to("update") == []
    assert session.state is EditState.OPEN


@pytest.mark.asyncio
async def test_submit_keeps_unparseable_stored_date(session, store):
    store.tables["Memo"][1]["Date"] = "TBA"

    await session.open("Memo", "m5")
    assert session.field_values["Date"] == "TBA"
    session.set_field("Title", "Port Rules (Manila)")

    await session.submit()

    assert store.calls_to("update") == [
        ("update", "Memo", ("m5", {"Title": "Port Rules (Manila)", "Details": "Manila", "Date": "TBA"}))
    ]
    assert session.state is EditState.CLOSED


@pytest.mark.asyncio
async def test_submit_rejects_edited_bad_date(session, store):
    await session.open("Memo", "m5")
    session.set_field("Date", "next week")

    with pytest.raises(ValidationError, match="Invalid date format"):
        await session.submit()

    assert store.calls_to("update") == []
    assert session.state is EditState.OPEN


@pytest.mark.asyncio
async def test_submit_when_closed(session):
    with pytest.raises(InvalidTransitionError):
        await session.submit()


def test_set_field_when_closed(session):
    with pytest.raises(InvalidTransitionError):
        session.set_field("Title", "x")


@pytest.mark.asyncio
async def test_set_unknown_field(session):
    await session.open("Memo", "m5")

    with pytest.raises(ValidationError):
        session.set_field("Vessel", "MV Horizon")


def test_cancel_when_closed_is_noop(session):
    session.cancel()

    assert session.state is EditState.CLOSED


@pytest.mark.asyncio
async def test_cancel_discards_edits(session, store):
    await session.open("Memo", "m5")
    session.set_field("Title", "Changed")

    session.cancel()

    assert session.state is EditState.CLOSED
    assert session.field_values == {}
    assert store.calls_to("update") == []


@pytest.mark.asyncio
async def test_opening_another_record_discards_unsaved_edits(session, store):
    await session.open("Memo", "m5")
    session.set_field("Title", "Unsaved")

    await session.open("Memo", "m4")

    assert session.record_id == "m4"
    assert session.field_values["Title"] == "Leave Policy"
    assert store.calls_to("update") == []


@pytest.mark.asyncio
async def test_superseded_load_is_dropped(session, store):
    release = asyncio.Event()
    original_fetch = store.fetch_one

    async def slow_fetch(collection, record_id):
        if record_id == "m4":
            await release.wait()
        return await original_fetch(collection, record_id)

    store.fetch_one = slow_fetch

    first = asyncio.create_task(session.open("Memo", "m4"))
    await asyncio.sleep(0)
    assert session.state is EditState.LOADING

    await session.open("Memo", "m5")
    release.set()

    assert await first is None
    assert session.record_id == "m5"
    assert session.field_values["Title"] == "Port Rules"


@pytest.mark.asyncio
async def test_cancel_during_save_leaves_session_closed(session, store):
    release = asyncio.Event()
    original_update = store.update

    async def slow_update(collection, record_id, fields):
        await release.wait()
        await original_update(collection, record_id, fields)

    store.update = slow_update

    await session.open("Memo", "m5")
    saving = asyncio.create_task(session.submit())
    await asyncio.sleep(0)
    assert session.state is EditState.SAVING

    session.cancel()
    release.set()
    await saving

    assert session.state is EditState.CLOSED
