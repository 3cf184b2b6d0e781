"""Exception classes for the dashboard copy and CSV import tools."""

from __future__ import annotations


class KibanaCopyError(Exception):
    """Base exception for all tool errors."""

    pass


class ConfigError(KibanaCopyError):
    """Bad or missing command line arguments."""

    pass


class StoreError(KibanaCopyError):
    """A document store request failed or returned a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(StoreError):
    """The requested document does not exist in the store."""

    pass


class FatalFetchError(KibanaCopyError):
    """The root dashboard is unavailable or its panels cannot be parsed."""

    pass


class PartialWriteError(KibanaCopyError):
    """A single visualization or saved search could not be written."""

    def __init__(self, object_type: str, object_id: str, status_code: int | None, message: str):
        self.object_type = object_type
        self.object_id = object_id
        self.status_code = status_code
        super().__init__(f"Failed to write {object_type} {object_id}: {status_code} {message}")


class RewriteSkipError(KibanaCopyError):
    """A saved search's searchSourceJSON cannot be parsed for index rewriting."""

    pass
