"""Tests for the polling refresh scheduler."""

import asyncio

import pytest

from crewboard.application.services.chat_stream import ChatStream
from crewboard.application.services.edit_session import EditSession, EditState
from crewboard.application.services.refresh_scheduler import RefreshScheduler
from crewboard.application.views import TableView, ViewError, ViewState
from crewboard.core.events import DashboardEvent
from crewboard.core.exceptions import TransportError
from crewboard.domain.services import DashboardSummarizer, SummaryView


@pytest.fixture
def view_state():
    return ViewState()


@pytest.fixture
def make_scheduler(store, schemas, events, view_state):
    def _make(**kwargs):
        kwargs.setdefault("refresh_on_start", False)
        return RefreshScheduler(
            store,
            schemas,
            TableView(schemas, events),
            DashboardSummarizer(schemas),
            ChatStream(store, events),
            view_state,
            events,
            **kwargs,
        )

    return _make


async def _wait_for(condition, timeout=2.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while not condition():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.005)


@pytest.mark.asyncio
async def test_tick_paints_summaries_tables_and_chat(make_scheduler, view_state, schemas):
    scheduler = make_scheduler()
    view_state.open_view("Memo")

    report = await scheduler.trigger_now()

    assert report.ok
    assert set(view_state.summaries) == set(schemas.names)
    memo_card = view_state.summaries["Memo"]
    assert isinstance(memo_card, SummaryView)
    assert [item.record_id for item in memo_card.items] == ["m5", "m4"]
    assert [row.record_id for row in view_state.tables["Memo"].rows] == ["m5", "m4"]
    assert view_state.chat.messages[0].text == "Good morning"
    assert "chat" in report.refreshed


@pytest.mark.asyncio
async def test_failure_is_isolated_per_view(make_scheduler, view_state, store):
    scheduler = make_scheduler()
    view_state.open_view("Memo")
    view_state.open_view("Updates")
    # First Updates fetch is the dashboard card
    store.failures[("fetch_collection", "Updates")] = TransportError("timed out")

    report = await scheduler.trigger_now()

    assert report.failed == {"summary:Updates": "timed out"}
    assert view_state.summaries["Updates"] == ViewError("Updates", "timed out")
    assert isinstance(view_state.summaries["Memo"], SummaryView)
    assert not isinstance(view_state.tables["Updates"], ViewError)
    assert not isinstance(view_state.tables["Memo"], ViewError)


@pytest.mark.asyncio
async def test_failed_table_painted_as_error(make_scheduler, view_state, store):
    scheduler = make_scheduler(visible_types=lambda: ["Memo"])
    view_state.open_view("Memo")
    original_fetch = store.fetch_collection
    memo_fetches = []

    async def flaky_fetch(collection):
        if collection == "Memo":
            memo_fetches.append(collection)
            # Second Memo fetch of the tick is the table
            if len(memo_fetches) == 2:
                raise TransportError("table down")
        return await original_fetch(collection)

    store.fetch_collection = flaky_fetch

    report = await scheduler.trigger_now()

    assert report.failed == {"table:Memo": "table down"}
    assert view_state.tables["Memo"] == ViewError("Memo", "table down")
    assert isinstance(view_state.summaries["Memo"], SummaryView)
    assert "chat" in report.refreshed


@pytest.mark.asyncio
async def test_failed_chat_painted_as_error(make_scheduler, view_state, store):
    scheduler = make_scheduler(visible_types=lambda: [])
    store.failures[("fetch_rows", "Chatboard")] = TransportError("chat down")

    report = await scheduler.trigger_now()

    assert report.failed == {"chat": "chat down"}
    assert view_state.chat == ViewError("Chatboard", "chat down")


@pytest.mark.asyncio
async def test_trigger_only_skips_chat_and_other_tables(make_scheduler, view_state, store):
    scheduler = make_scheduler()
    view_state.open_view("Memo")
    view_state.open_view("Updates")

    report = await scheduler.trigger_now(only=["Memo"])

    assert "table:Memo" in report.refreshed
    assert "table:Updates" not in report.refreshed
    assert "chat" not in report.refreshed
    assert store.calls_to("fetch_rows") == []


@pytest.mark.asyncio
async def test_hidden_types_are_not_refreshed(make_scheduler, view_state, store):
    scheduler = make_scheduler(visible_types=lambda: ["Training", "Pni"])
    view_state.open_view("Memo")

    await scheduler.trigger_now()

    assert set(view_state.summaries) == {"Training", "Pni"}
    assert "Memo" not in view_state.tables
    assert {call[1] for call in store.calls_to("fetch_collection")} == {"Training", "Pni"}


@pytest.mark.asyncio
async def test_refresh_never_touches_edit_form(make_scheduler, view_state, store, schemas, events):
    session = EditSession(store, schemas, events)
    await session.open("Memo", "m5")
    session.set_field("Title", "Half typed")
    scheduler = make_scheduler()
    view_state.open_view("Memo")

    await scheduler.trigger_now()

    assert session.state is EditState.OPEN
    assert session.field_values["Title"] == "Half typed"


@pytest.mark.asyncio
async def test_tick_emits_event(make_scheduler, events):
    seen = []
    events.register(DashboardEvent.REFRESH_AFTER_TICK, lambda e, d: seen.append(d))

    await make_scheduler().trigger_now()

    assert seen == [{"tick": 1, "failed": []}]


@pytest.mark.asyncio
async def test_polling_ticks_until_stopped(make_scheduler):
    scheduler = make_scheduler(interval_ms=10, refresh_on_start=True)

    scheduler.start()
    assert scheduler.is_running
    await _wait_for(lambda: scheduler.tick_count >= 2)

    scheduler.stop()
    await scheduler.join()
    ticks = scheduler.tick_count
    await asyncio.sleep(0.05)

    assert not scheduler.is_running
    assert scheduler.tick_count == ticks


@pytest.mark.asyncio
async def test_stop_before_first_tick(make_scheduler):
    scheduler = make_scheduler(interval_ms=20)

    scheduler.start()
    scheduler.stop()
    await scheduler.join()
    await asyncio.sleep(0.05)

    assert scheduler.tick_count == 0


@pytest.mark.asyncio
async def test_stop_is_idempotent(make_scheduler):
    scheduler = make_scheduler(interval_ms=10)

    scheduler.stop()
    scheduler.start()
    scheduler.start()
    scheduler.stop()
    scheduler.stop()
    await scheduler.join()

    assert not scheduler.is_running


@pytest.mark.asyncio
async def test_failing_tick_keeps_loop_alive(make_scheduler, store):
    scheduler = make_scheduler(interval_ms=10, refresh_on_start=True)
    store.failures[("fetch_rows", "Chatboard")] = RuntimeError("unexpected")

    scheduler.start()
    await _wait_for(lambda: scheduler.tick_count >= 3)
    scheduler.stop()
    await scheduler.join()


def test_invalid_interval(make_scheduler):
    with pytest.raises(ValueError):
        make_scheduler().start(interval_ms=0)


@pytest.mark.asyncio
async def test_mutation_triggers_refresh(make_scheduler, view_state, events):
    scheduler = make_scheduler()
    view_state.open_view("Memo")
    scheduler.refresh_after_mutations()

    await events.emit(DashboardEvent.RECORD_AFTER_CREATE, {"entity_type": "Memo", "record_id": "gen1"})

    assert scheduler.tick_count == 1
    assert "Memo" in view_state.tables
