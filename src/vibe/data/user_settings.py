"""Persisted user settings (currently the selected location)."""

from typing import Any

from vibe.data.storage import JsonFileStorage
from vibe.exceptions import StorageCorruptError
from vibe.logging import get_logger
from vibe.models import DEFAULT_LOCATION, Location, find_location

logger = get_logger(__name__)


class SettingsStore:
    """Small JSON object of user preferences. Corrupt data reads as ``{}``."""

    def __init__(self, storage: JsonFileStorage, key: str = "dagens_vibe_settings") -> None:
        self._storage = storage
        self._key = key

    def get_settings(self) -> dict[str, Any]:
        try:
            raw = self._storage.read_json(self._key)
        except (StorageCorruptError, OSError) as e:
            logger.warning("settings_corrupt", key=self._key, error=str(e))
            return {}
        return raw if isinstance(raw, dict) else {}

    def save_settings(self, **updates: Any) -> dict[str, Any]:
        """Merge ``updates`` into the stored settings and return the result."""
        merged = {**self.get_settings(), **updates}
        self._storage.write_json(self._key, merged)
        return merged

    def get_location(self) -> Location:
        """The stored location, or the default when unset or unknown."""
        return find_location(self.get_settings().get("location_id")) or DEFAULT_LOCATION
