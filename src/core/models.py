"""Immutable dataclasses shared by the cache engine, gateway and tools.

CacheConfig enumerates every recognized option with its default and
validates them at construction. The rest are plain value objects
returned to callers (stats, stat results, batch read results).
"""

from __future__ import annotations

import sys
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List

from core.paths import normalize_extension

MIB = 1024 * 1024

DEFAULT_ALLOWED_EXTENSIONS: FrozenSet[str] = frozenset({
    "",
    ".js", ".ts", ".jsx", ".tsx", ".vue",
    ".py", ".java", ".go", ".rs",
    ".c", ".h", ".cc", ".cpp", ".hpp", ".cu", ".cuh",
    ".css", ".scss", ".sass", ".less", ".html", ".xml",
    ".json", ".yaml", ".yml", ".toml", ".ini", ".cfg",
    ".md", ".txt", ".sql", ".sh", ".bat", ".ps1", ".dockerfile",
})


def _default_fold_case() -> bool:
    # Windows and macOS filesystems are case-insensitive by default.
    return sys.platform.startswith("win") or sys.platform == "darwin"


@dataclass(frozen=True)
class CacheConfig:
    """Configuration for the cache engine and the secure gateway.

    Field groups:
    - Budgets: max_memory_usage, max_entries, max_file_size
    - Freshness: ttl_seconds, sweep_interval_seconds, integrity_check_enabled
    - Access policy: allowed_extensions
    - Batch reads: read_concurrency
    - Keys / logging: fold_case, eviction_warn_threshold
    """

    max_memory_usage: int = 256 * MIB
    max_entries: int = 10_000
    max_file_size: int = 10 * MIB

    ttl_seconds: float = 30 * 60.0
    sweep_interval_seconds: float = 5 * 60.0
    integrity_check_enabled: bool = True

    allowed_extensions: FrozenSet[str] = DEFAULT_ALLOWED_EXTENSIONS

    read_concurrency: int = 10

    fold_case: bool = field(default_factory=_default_fold_case)
    eviction_warn_threshold: int = 32

    def __post_init__(self) -> None:
        if self.max_memory_usage <= 0:
            raise ValueError("max_memory_usage must be positive")
        if self.max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        if self.max_file_size <= 0:
            raise ValueError("max_file_size must be positive")
        if self.ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if self.sweep_interval_seconds <= 0:
            raise ValueError("sweep_interval_seconds must be positive")
        if self.read_concurrency < 1:
            raise ValueError("read_concurrency must be at least 1")
        if self.eviction_warn_threshold < 1:
            raise ValueError("eviction_warn_threshold must be at least 1")
        if isinstance(self.allowed_extensions, str):
            raise ValueError("allowed_extensions must be a collection, not a string")

        # frozen: normalize through object.__setattr__
        object.__setattr__(
            self,
            "allowed_extensions",
            normalize_extensions(self.allowed_extensions),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["allowed_extensions"] = sorted(self.allowed_extensions)
        return d


def normalize_extensions(exts: Iterable[str]) -> FrozenSet[str]:
    return frozenset(normalize_extension(e) for e in exts)


@dataclass(frozen=True)
class CacheStats:
    entries: int
    total_bytes: int
    hits: int
    misses: int
    evictions: int
    hit_rate: float

    expirations: int = 0
    stale_removals: int = 0
    integrity_failures: int = 0
    rejections: int = 0

    max_memory_usage: int = 0
    max_entries: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FileStat:
    # Result of FileSystem.stat
    size: int
    mtime: float
    is_file: bool
    is_dir: bool


@dataclass(frozen=True)
class BatchReadError:
    path: str
    error_type: str
    message: str


@dataclass(frozen=True)
class BatchReadResult:
    """Outcome of a batch read.

    results maps each successfully read path (as requested) to its content;
    errors holds one entry per path that failed.
    """

    results: Dict[str, str] = field(default_factory=dict)
    errors: List[BatchReadError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def as_dict(self) -> Dict[str, Any]:
        return {
            "results": dict(self.results),
            "errors": [asdict(e) for e in self.errors],
        }
