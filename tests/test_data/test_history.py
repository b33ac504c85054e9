"""Tests for HistoryStore: per-day dedup, ordering, cap, corrupt data, today's mood."""

import json
from datetime import date, timedelta
from pathlib import Path

import pytest

from vibe.data.history import HistoryStore
from vibe.data.storage import JsonFileStorage
from vibe.models import Mood


class FakeToday:
    def __init__(self, day: date) -> None:
        self.day = day

    def __call__(self) -> date:
        return self.day

    def next_day(self) -> None:
        self.day += timedelta(days=1)


@pytest.fixture
def storage(tmp_path: Path) -> JsonFileStorage:
    return JsonFileStorage(tmp_path)


@pytest.fixture
def today() -> FakeToday:
    return FakeToday(date(2026, 10, 19))


@pytest.fixture
def store(storage: JsonFileStorage, today: FakeToday) -> HistoryStore:
    return HistoryStore(storage, today=today, clock=lambda: 1_760_000_000.0)


class TestRecordToday:
    def test_first_entry(self, store: HistoryStore) -> None:
        entry = store.record_today(63, Mood.GOOD)

        assert entry.date == "2026-10-19"
        assert store.get_history() == [entry]
        assert entry.created_at == 1_760_000_000.0

    def test_same_day_replaced_by_later_value(self, store: HistoryStore) -> None:
        store.record_today(40, Mood.BAD)
        store.record_today(70, Mood.GREAT)

        history = store.get_history()
        assert len(history) == 1
        assert history[0].score == 70
        assert history[0].mood == Mood.GREAT

    def test_most_recent_first(self, store: HistoryStore, today: FakeToday) -> None:
        store.record_today(10, Mood.BAD)
        today.next_day()
        store.record_today(20, Mood.MEH)
        today.next_day()
        store.record_today(30, Mood.GOOD)

        assert [e.score for e in store.get_history()] == [30, 20, 10]

    def test_rerecording_today_keeps_other_days_in_order(
        self, store: HistoryStore, today: FakeToday
    ) -> None:
        store.record_today(10, Mood.BAD)
        today.next_day()
        store.record_today(20, Mood.MEH)
        store.record_today(25, Mood.GOOD)

        history = store.get_history()
        assert [(e.date, e.score) for e in history] == [
            ("2026-10-20", 25),
            ("2026-10-19", 10),
        ]

    def test_capped_at_thirty_days(self, store: HistoryStore, today: FakeToday) -> None:
        for score in range(31):
            store.record_today(score, Mood.MEH)
            today.next_day()

        history = store.get_history()
        assert len(history) == 30
        assert history[0].score == 30
        assert history[-1].score == 1  # day 0 dropped

    def test_custom_limit(self, storage: JsonFileStorage, today: FakeToday) -> None:
        store = HistoryStore(storage, limit=2, today=today)
        for score in (1, 2, 3):
            store.record_today(score, Mood.MEH)
            today.next_day()
        assert [e.score for e in store.get_history()] == [3, 2]

    def test_persisted_document_shape(self, store: HistoryStore, tmp_path: Path) -> None:
        store.record_today(55, Mood.GOOD)

        document = json.loads((tmp_path / "dagens_vibe_history.json").read_text(encoding="utf-8"))
        assert document == [
            {"date": "2026-10-19", "score": 55, "mood": "good", "created_at": 1_760_000_000.0}
        ]


class TestCorruptStorage:
    def test_missing_document_is_empty(self, store: HistoryStore) -> None:
        assert store.get_history() == []

    def test_invalid_json_is_empty(self, store: HistoryStore, storage: JsonFileStorage) -> None:
        storage.set("dagens_vibe_history", "[{broken")
        assert store.get_history() == []

    def test_wrong_type_is_empty(self, store: HistoryStore, storage: JsonFileStorage) -> None:
        storage.write_json("dagens_vibe_history", {"date": "2026-10-19"})
        assert store.get_history() == []

    def test_undecodable_bytes_are_empty(
        self, store: HistoryStore, tmp_path: Path
    ) -> None:
        (tmp_path / "dagens_vibe_history.json").write_bytes(b"\xff\xfe[garbage")
        assert store.get_history() == []
        assert store.get_today_mood() == Mood.MEH

        store.record_today(42, Mood.MEH)
        assert [e.score for e in store.get_history()] == [42]

    def test_invalid_entry_is_skipped(self, store: HistoryStore, storage: JsonFileStorage) -> None:
        storage.write_json("dagens_vibe_history", [{"date": "2026-10-19", "score": 50, "mood": "ecstatic"}])
        assert store.get_history() == []

    def test_bad_entry_does_not_lose_valid_days(
        self, store: HistoryStore, storage: JsonFileStorage
    ) -> None:
        valid = [
            {
                "date": (date(2026, 10, 18) - timedelta(days=i)).isoformat(),
                "score": 40 + i,
                "mood": "good",
                "created_at": 1_759_900_000.0 - i,
            }
            for i in range(18)
        ]
        broken = [
            {"date": "2026-09-01", "score": 50, "mood": "vibes", "created_at": 1.0},
            {"date": "2026-08-31", "score": 50, "mood": "meh"},
            "not an entry",
        ]
        storage.write_json("dagens_vibe_history", valid[:9] + broken + valid[9:])

        assert len(store.get_history()) == 18

        store.record_today(70, Mood.GOOD)
        entries = store.get_history()

        assert len(entries) == 19
        assert entries[0].date == "2026-10-19"
        assert entries[1].date == "2026-10-18"
        assert entries[-1].score == 57

    def test_recording_over_corrupt_data_recovers(
        self, store: HistoryStore, storage: JsonFileStorage
    ) -> None:
        storage.set("dagens_vibe_history", "null,,")
        store.record_today(42, Mood.MEH)
        assert [e.score for e in store.get_history()] == [42]


class TestTodayMood:
    def test_default_when_nothing_recorded(self, store: HistoryStore) -> None:
        assert store.get_today_mood() == Mood.MEH

    def test_mood_recorded_today(self, store: HistoryStore) -> None:
        store.record_today(80, Mood.GREAT)
        assert store.get_today_mood() == Mood.GREAT

    def test_yesterdays_mood_ignored(self, store: HistoryStore, today: FakeToday) -> None:
        store.record_today(80, Mood.GREAT)
        today.next_day()
        assert store.get_today_mood() == Mood.MEH
