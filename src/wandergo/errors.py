"""Exception hierarchy shared by the offline layer and the CLI."""

from __future__ import annotations


class WanderGoError(Exception):
    """Base exception for WanderGo client errors."""

    pass


class StorageError(WanderGoError):
    """Reading from or writing to the local key-value store failed."""

    pass


class ApiError(WanderGoError):
    """The backend rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotAvailableOfflineError(WanderGoError):
    """No live data and no cached fallback exist for a request."""

    pass
