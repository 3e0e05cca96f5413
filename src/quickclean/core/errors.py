"""Typed failures for mutating operations."""

from __future__ import annotations

from pathlib import Path


class CleanerError(Exception):
    """Base class for failures of delete and clean operations."""

    default_message = "Operation failed"

    def __init__(self, path: Path | str, message: str | None = None) -> None:
        self.path = Path(path)
        super().__init__(f"{message or self.default_message}: {self.path}")


class PathNotFound(CleanerError):
    """The target no longer exists."""

    default_message = "The specified path does not exist"


class OperationNotAllowed(CleanerError):
    """The target is a guarded location that must not be removed here."""

    default_message = "Cleaning this location is not allowed"


class AccessDenied(CleanerError):
    """The process lacks permission to modify the target."""

    default_message = "Access denied"


class IOFailure(CleanerError):
    """An unexpected read or write error."""

    default_message = "I/O error"


def from_os_error(path: Path | str, exc: OSError) -> CleanerError:
    """Map an OSError raised while modifying *path* onto the error taxonomy."""
    if isinstance(exc, PermissionError):
        return AccessDenied(path, f"Access denied ({exc.strerror or exc})")
    if isinstance(exc, FileNotFoundError):
        return PathNotFound(path)
    return IOFailure(path, f"I/O error ({exc.strerror or exc})")
