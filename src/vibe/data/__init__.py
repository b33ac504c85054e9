"""Persistence layer.

Provides the file-backed JSON key-value storage, the rolling day score
history, and the user settings store.
"""

from vibe.data.history import HistoryStore
from vibe.data.storage import JsonFileStorage
from vibe.data.user_settings import SettingsStore

__all__ = [
    "HistoryStore",
    "JsonFileStorage",
    "SettingsStore",
]
