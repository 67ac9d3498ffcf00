from __future__ import annotations

from typing import Optional


class FileCacheError(Exception):
    """Base error for the file cache server."""

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class ValidationError(FileCacheError):
    """Raised when user input is invalid."""


class AccessDeniedError(FileCacheError):
    """Raised when an operation tries to access data outside allowed scope."""


class PathTraversalError(AccessDeniedError):
    """Raised when a path escapes the configured project root."""


class ExtensionNotAllowedError(AccessDeniedError):
    """Raised when a file extension is not in the allow-list."""


class FileTooLargeError(FileCacheError):
    """Raised when a file (or new content) exceeds the size ceiling."""

    def __init__(self, message: str, *, path: Optional[str] = None, size: int = 0, limit: int = 0) -> None:
        super().__init__(message, path=path)
        self.size = size
        self.limit = limit


class NotFoundError(FileCacheError):
    """Raised when a requested resource is not found."""


class StorageIOError(FileCacheError):
    """Raised when a disk read or write fails for any other reason."""


class IntegrityMismatchError(FileCacheError):
    """Cached content no longer matches its fingerprint. Internal only."""
