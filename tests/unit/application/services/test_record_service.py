import pytest

from crewboard.application.services.record_service import RecordService
from crewboard.core.events import DashboardEvent
from crewboard.core.exceptions import ApiError, ValidationError


@pytest.fixture
def service(store, schemas, events):
    return RecordService(store, schemas, events)


@pytest.mark.asyncio
async def test_add_sends_every_field(service, store, events):
    seen = []
    events.register(DashboardEvent.RECORD_AFTER_CREATE, lambda e, d: seen.append(d))

    record = await service.add("Memo", {"Title": "Shore Leave", "Date": "2024-03-05T00:00:00Z"})

    assert store.calls_to("create") == [
        ("create", "Memo", {"Title": "Shore Leave", "Details": "", "Date": "2024-03-05"})
    ]
    assert record.id == "gen1"
    assert store.ids("Memo")[-1] == "gen1"
    assert seen == [{"entity_type": "Memo", "record_id": "gen1"}]


@pytest.mark.asyncio
async def test_add_validation_failure_sends_nothing(service, store):
    with pytest.raises(ValidationError):
        await service.add("Vessel_Join", {"Port": "Busan"})

    assert store.calls == []


@pytest.mark.asyncio
async def test_add_unknown_entity_type(service, store):
    with pytest.raises(ValidationError, match="Unknown entity type"):
        await service.add("Crew", {"Title": "x"})


@pytest.mark.asyncio
async def test_add_store_failure_emits_nothing(service, store, events):
    seen = []
    events.register(DashboardEvent.RECORD_AFTER_CREATE, lambda e, d: seen.append(d))
    store.failures[("create", "Memo")] = ApiError("Sheet is locked")

    with pytest.raises(ApiError):
        await service.add("Memo", {"Title": "x"})

    assert seen == []

