"""File-backed key-value storage for small JSON documents.

Each key maps to ``<data_dir>/<key>.json``. Writes go to a temporary file
that is then renamed over the target, so a crash mid-write leaves the
previous document intact.
"""

import json
import os
from pathlib import Path
from typing import Any

from vibe.exceptions import StorageCorruptError
from vibe.logging import get_logger

logger = get_logger(__name__)


class JsonFileStorage:
    """Synchronous key -> JSON document store.

    Usage:
        storage = JsonFileStorage("data")
        storage.write_json("dagens_vibe_settings", {"location_id": "NO5"})
        settings = storage.read_json("dagens_vibe_settings")
    """

    def __init__(self, data_dir: str | Path) -> None:
        self._dir = Path(data_dir)

    def _path(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    def get(self, key: str) -> str | None:
        """Return the raw stored text, or None if the key was never written.

        Raises:
            StorageCorruptError: If the stored bytes are not valid UTF-8.
        """
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            raise StorageCorruptError(f"{key} is not valid UTF-8: {e}") from e

    def set(self, key: str, text: str) -> None:
        """Replace the stored text for ``key``."""
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(text, encoding="utf-8")
        os.replace(tmp_path, path)

    def read_json(self, key: str) -> Any | None:
        """Decode the stored document.

        Returns None when the key is absent.

        Raises:
            StorageCorruptError: If the stored text is not valid UTF-8 JSON.
        """
        text = self.get(key)
        if text is None:
            return None
        try:
            return json.loads(text)
        except ValueError as e:
            raise StorageCorruptError(f"{key} is not valid JSON: {e}") from e

    def write_json(self, key: str, value: Any) -> None:
        self.set(key, json.dumps(value, ensure_ascii=False))
        logger.debug("storage_written", key=key)
