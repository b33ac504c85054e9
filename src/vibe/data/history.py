"""Rolling daily history of day scores.

One entry per calendar day, most recent first, capped at ``limit`` entries.
Recording a second score on the same day replaces the earlier entry.
Missing or corrupt storage reads as an empty history.
"""

import time
from collections.abc import Callable
from datetime import date, datetime
from zoneinfo import ZoneInfo

from vibe.data.storage import JsonFileStorage
from vibe.exceptions import StorageCorruptError
from vibe.logging import get_logger
from vibe.models import DEFAULT_MOOD, HistoryEntry, Mood

logger = get_logger(__name__)


class HistoryStore:
    """Persists one HistoryEntry per day.

    Args:
        storage: Key-value storage backend.
        key: Storage key of the history document.
        limit: Maximum number of days kept.
        today: Returns the current local calendar day. Injected by tests.
        clock: Returns the current Unix time, stored as ``created_at``.
        timezone: IANA zone defining the calendar day when ``today`` is not given.
    """

    def __init__(
        self,
        storage: JsonFileStorage,
        key: str = "dagens_vibe_history",
        limit: int = 30,
        today: Callable[[], date] | None = None,
        clock: Callable[[], float] = time.time,
        timezone: str = "Europe/Oslo",
    ) -> None:
        self._storage = storage
        self._key = key
        self._limit = limit
        tz = ZoneInfo(timezone)
        self._today = today or (lambda: datetime.now(tz).date())
        self._clock = clock

    def today_key(self) -> str:
        """Calendar-day key for today, e.g. ``2026-10-19``."""
        return self._today().isoformat()

    def get_history(self) -> list[HistoryEntry]:
        """Return all entries, most recent first. Never raises on bad data."""
        try:
            raw = self._storage.read_json(self._key)
        except StorageCorruptError as e:
            logger.warning("history_corrupt", key=self._key, error=str(e))
            return []
        except OSError as e:
            logger.warning("history_unreadable", key=self._key, error=str(e))
            return []

        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("history_corrupt", key=self._key, error="not a list")
            return []

        entries: list[HistoryEntry] = []
        for index, item in enumerate(raw):
            try:
                entries.append(HistoryEntry.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("history_entry_skipped", key=self._key, index=index, error=str(e))
        return entries

    def record_today(self, score: int, mood: Mood) -> HistoryEntry:
        """Store today's score, replacing any earlier entry for today."""
        today = self.today_key()
        entry = HistoryEntry(date=today, score=score, mood=mood, created_at=self._clock())

        history = [item for item in self.get_history() if item.date != today]
        history.insert(0, entry)
        del history[self._limit:]

        self._storage.write_json(self._key, [item.to_dict() for item in history])
        logger.debug("history_recorded", date=today, score=score, mood=mood.value)
        return entry

    def get_today_mood(self) -> Mood:
        """Mood recorded earlier today, or the default mood."""
        today = self.today_key()
        for entry in self.get_history():
            if entry.date == today:
                return entry.mood
        return DEFAULT_MOOD
