"""Exception hierarchy for pyincsync."""

from pathlib import Path
from typing import Optional, Union


class PyIncSyncError(Exception):
    """Base exception for all pyincsync errors.

    Args:
        message: Human-readable description of the failure
        path: Filesystem path involved in the failure, if any
    """

    def __init__(
        self, message: str, path: Optional[Union[str, Path]] = None
    ) -> None:
        self.message = message
        self.path = Path(path) if path is not None else None
        super().__init__(message)

    def __str__(self) -> str:
        if self.path is not None and str(self.path) not in self.message:
            return f"{self.message} ({self.path})"
        return self.message


class ConfigError(PyIncSyncError):
    """Configuration file is missing, unreadable or malformed."""


class FilesystemError(PyIncSyncError):
    """Listing, reading or writing the source/destination tree failed."""
