import pytest

from crewboard.domain.entities import Record
from crewboard.domain.services import DashboardSummarizer, SchemaRegistry


def _memos(count):
    return [
        Record(id=f"m{n}", created_at=None, fields={"Title": f"Memo {n}", "Date": f"2024-01-0{n}"})
        for n in range(1, count + 1)
    ]


@pytest.fixture
def summarizer():
    return DashboardSummarizer(SchemaRegistry())


def test_keeps_last_five_newest_first(summarizer):
    view = summarizer.summarize("Memo", _memos(7))

    assert [item.record_id for item in view.items] == ["m7", "m6", "m5", "m4", "m3"]
    assert view.total == 7
    assert view.label == "Memo"


def test_fewer_records_than_limit(summarizer):
    view = summarizer.summarize("Memo", _memos(3))

    assert [item.title for item in view.items] == ["Memo 3", "Memo 2", "Memo 1"]


def test_empty_collection(summarizer):
    view = summarizer.summarize("Memo", [])

    assert view.is_empty
    assert view.total == 0


def test_updates_card_dates_and_titles(summarizer):
    records = [
        Record(id="u1", created_at="2024-01-01T09:00:00Z", fields={"Title": "Safety Notice", "Date": "2024-01-01T00:00:00.000Z"}),
        Record(id="u2", created_at="2024-02-01T09:00:00Z", fields={"Title": "Drill Schedule", "Date": "2024-02-01"}),
    ]

    view = summarizer.summarize("Updates", records)

    assert [(item.date, item.title) for item in view.items] == [
        ("2024-02-01", "Drill Schedule"),
        ("2024-01-01", "Safety Notice"),
    ]


def test_date_falls_back_to_timestamp(summarizer):
    records = [Record(id="t1", created_at="2024-05-06T10:00:00Z", fields={"Subject": "STCW refresher"})]

    view = summarizer.summarize("Training", records)

    assert view.items[0].date == "2024-05-06"
    assert view.items[0].title == "STCW refresher"


def test_custom_limit():
    view = DashboardSummarizer(SchemaRegistry(), limit=2).summarize("Memo", _memos(4))

    assert [item.record_id for item in view.items] == ["m4", "m3"]


def test_invalid_limit():
    with pytest.raises(ValueError):
        DashboardSummarizer(SchemaRegistry(), limit=0)
