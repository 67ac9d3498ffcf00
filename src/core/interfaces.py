"""Core protocol and interface definitions.

Defines the FileSystem protocol: the outbound filesystem abstraction the
cache engine and the secure gateway depend on. The real implementation
lives in sources.local_filesystem; tests use an in-memory fake.
"""

from __future__ import annotations

from typing import AbstractSet, List, Protocol

from core.models import FileStat


class FileSystem(Protocol):
    """Contract for the blocking filesystem operations used by the cache.

    Missing paths raise FileNotFoundError; other failures raise OSError.
    """

    def stat(self, path: str) -> FileStat:
        ...

    def exists(self, path: str) -> bool:
        ...

    def read_text(self, path: str) -> str:
        ...

    def write_text(self, path: str, content: str) -> None:
        ...

    def mkdir_all(self, path: str) -> None:
        ...

    def list_files(self, path: str, *, skip_dirs: AbstractSet[str] = frozenset()) -> List[str]:
        ...
