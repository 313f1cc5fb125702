"""Error taxonomy shared by the model, store and controllers."""

from __future__ import annotations


class MaptyError(Exception):
    """Base class for application errors."""


class ValidationError(MaptyError, ValueError):
    """Raised when a form value is missing, not finite or out of range."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class UnknownActivityError(MaptyError, ValueError):
    """Raised when an activity type has no entry in the dispatch table."""


class GeolocationError(MaptyError):
    """Raised when the current position cannot be obtained."""


class MapUnavailableError(MaptyError, RuntimeError):
    """Raised when the map is used before it exists."""


class StorageError(MaptyError):
    """Base class for persistence backend failures."""


class StorageReadError(StorageError):
    pass


class StorageWriteError(StorageError):
    pass
