"""Custom exceptions for the day score service.

All source, storage and scoring exceptions live here to avoid circular
imports between modules.
"""


class VibeError(Exception):
    """Base exception for all day score errors."""


class SourceUnavailableError(VibeError):
    """Raised inside a fetcher when its external source fails or returns junk.

    Never escapes a fetcher: it is converted into a degraded Signal.
    """

    def __init__(self, message: str, source: str = "") -> None:
        super().__init__(message)
        self.source = source


class StorageCorruptError(VibeError):
    """Raised when a persisted JSON document cannot be decoded."""


class ScoresNotReadyError(VibeError):
    """Raised when a total is requested while a fetch cycle is still outstanding."""


class UnknownLocationError(VibeError):
    """Raised when a location id is not one of the configured locations."""
