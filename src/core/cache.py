"""In-memory LRU file content cache with TTL and integrity checks.

Entries are keyed by a normalized path and kept in an OrderedDict whose
order is the LRU order (head = least recently used). Two budgets bound the
cache: total content bytes and entry count. Every hit re-stats the backing
file and, when enabled, re-hashes the stored content, so a stale or
tampered entry is dropped instead of served.

Not thread-safe: all calls are expected on one thread (the event loop).
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, Union

from core import integrity
from core.errors import IntegrityMismatchError
from core.interfaces import FileSystem
from core.models import CacheConfig, CacheStats
from core.paths import cache_key

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(slots=True)
class CacheEntry:
    content: str
    size: int  # UTF-8 bytes
    source_path: str
    source_mtime: float
    fingerprint: Optional[str]
    created_at: float
    last_accessed_at: float
    access_count: int = 1


class CacheEngine:
    def __init__(
        self,
        config: CacheConfig,
        *,
        fs: FileSystem,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._config = config
        self._fs = fs
        self._clock = clock or time.monotonic
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._total_bytes = 0

        # Write fence: bumped by invalidate() and clear() so a read that
        # started before them cannot put its now outdated content back.
        self._epoch = 0
        self._generations: Dict[str, int] = {}

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0
        self._stale_removals = 0
        self._integrity_failures = 0
        self._rejections = 0

    @property
    def config(self) -> CacheConfig:
        return self._config

    @property
    def total_bytes(self) -> int:
        return self._total_bytes

    def __len__(self) -> int:
        return len(self._entries)

    def _key(self, path: PathLike) -> str:
        return cache_key(str(path), fold_case=self._config.fold_case)

    def get(self, path: PathLike, *, current_mtime: Optional[float] = None) -> Optional[str]:
        """Return cached content for path, or None on a miss.

        A hit requires the entry to be within its TTL, the backing file's
        mtime to be unchanged and (if enabled) the content fingerprint to
        still match. Any failed check removes the entry.

        Callers that already stat-ed the file pass its mtime as
        current_mtime. Without it the file is stat-ed here, synchronously.
        """
        key = self._key(path)
        entry = self._entries.get(key)
        if entry is None:
            return self._miss(key)

        now = self._clock()
        if now - entry.last_accessed_at > self._config.ttl_seconds:
            self._remove(key)
            self._evictions += 1
            self._expirations += 1
            logger.debug("cache.expired", extra={"key": key})
            return self._miss(key)

        mtime = current_mtime
        if mtime is None:
            try:
                mtime = self._fs.stat(str(path)).mtime
            except OSError:
                mtime = None
        if mtime is None or mtime != entry.source_mtime:
            self._remove(key)
            self._stale_removals += 1
            logger.debug("cache.stale", extra={"key": key, "cached_mtime": entry.source_mtime, "mtime": mtime})
            return self._miss(key)

        if self._config.integrity_check_enabled and entry.fingerprint is not None:
            try:
                integrity.ensure_intact(entry.content, entry.fingerprint, path=entry.source_path)
            except IntegrityMismatchError as e:
                # Never surfaced to callers: drop the entry and re-read from disk
                self._remove(key)
                self._integrity_failures += 1
                logger.warning("cache.integrity_mismatch", extra={"path": e.path, "detail": str(e)})
                return self._miss(key)

        entry.last_accessed_at = now
        entry.access_count += 1
        self._entries.move_to_end(key, last=True)
        self._hits += 1
        logger.debug("cache.hit", extra={"key": key, "access_count": entry.access_count})
        return entry.content

    def put(
        self,
        path: PathLike,
        content: str,
        source_mtime: float,
        *,
        generation: Optional[Tuple[int, int]] = None,
    ) -> bool:
        """Store content for path. Returns False if it was not cached.

        Never raises: oversized content is rejected and internal failures
        are logged, so a caller's read always succeeds.

        `generation` is the value of generation(path) taken before the
        content was read. If path was invalidated (or the cache cleared)
        since then, the content is outdated and is not stored.
        """
        key = self._key(path)
        if generation is not None and generation != self._generation_of(key):
            logger.debug("cache.put_superseded", extra={"key": key})
            return False
        try:
            size = len(content.encode("utf-8"))
            limit = min(self._config.max_file_size, self._config.max_memory_usage)
            if size > limit:
                self._rejections += 1
                logger.debug("cache.rejected", extra={"key": key, "size": size, "limit": limit})
                return False

            digest = integrity.fingerprint(content) if self._config.integrity_check_enabled else None

            # Replacing an entry is not an eviction.
            if key in self._entries:
                self._remove(key)

            evicted = self._evict_for(size)
            if evicted >= self._config.eviction_warn_threshold:
                logger.warning(
                    "cache.eviction_burst",
                    extra={"evicted": evicted, "entries": len(self._entries), "total_bytes": self._total_bytes},
                )

            now = self._clock()
            self._entries[key] = CacheEntry(
                content=content,
                size=size,
                source_path=str(path),
                source_mtime=source_mtime,
                fingerprint=digest,
                created_at=now,
                last_accessed_at=now,
            )
            self._total_bytes += size
            return True
        except Exception:
            logger.warning("cache.put_failed", extra={"key": key}, exc_info=True)
            return False

    def has(self, path: PathLike) -> bool:
        # Membership only: no stats, no LRU touch, no freshness checks.
        return self._key(path) in self._entries

    def generation(self, path: PathLike) -> Tuple[int, int]:
        """Opaque token that changes whenever path is invalidated or the cache is cleared."""
        return self._generation_of(self._key(path))

    def invalidate(self, path: PathLike) -> bool:
        key = self._key(path)
        # Bumped even without an entry: a read may be in flight for it
        self._generations[key] = self._generations.get(key, 0) + 1
        if key not in self._entries:
            return False
        self._remove(key)
        logger.debug("cache.invalidated", extra={"key": key})
        return True

    def clear(self) -> None:
        """Drop every entry. Counters are kept; see reset_stats()."""
        self._entries.clear()
        self._total_bytes = 0
        self._epoch += 1
        self._generations.clear()
        logger.info("cache.cleared")

    def reset_stats(self) -> None:
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0
        self._stale_removals = 0
        self._integrity_failures = 0
        self._rejections = 0

    def expire_older_than(self, now: Optional[float] = None) -> int:
        """Remove entries not accessed within the TTL. Returns how many."""
        if now is None:
            now = self._clock()
        ttl = self._config.ttl_seconds
        expired = [k for k, e in self._entries.items() if now - e.last_accessed_at > ttl]
        for key in expired:
            self._remove(key)
        self._evictions += len(expired)
        self._expirations += len(expired)
        if expired:
            logger.debug("cache.sweep", extra={"expired": len(expired), "entries": len(self._entries)})
        return len(expired)

    def update_limits(
        self,
        *,
        max_memory_usage: Optional[int] = None,
        max_entries: Optional[int] = None,
    ) -> int:
        """Apply new budgets and evict until they hold. Returns evictions."""
        changes = {}
        if max_memory_usage is not None:
            changes["max_memory_usage"] = max_memory_usage
        if max_entries is not None:
            changes["max_entries"] = max_entries
        # replace() re-runs CacheConfig validation
        self._config = replace(self._config, **changes)

        evicted = 0
        while self._entries and (
            self._total_bytes > self._config.max_memory_usage
            or len(self._entries) > self._config.max_entries
        ):
            self._evict_head()
            evicted += 1
        logger.info(
            "cache.limits_updated",
            extra={
                "max_memory_usage": self._config.max_memory_usage,
                "max_entries": self._config.max_entries,
                "evicted": evicted,
            },
        )
        return evicted

    def stats(self) -> CacheStats:
        lookups = self._hits + self._misses
        return CacheStats(
            entries=len(self._entries),
            total_bytes=self._total_bytes,
            hits=self._hits,
            misses=self._misses,
            evictions=self._evictions,
            hit_rate=(self._hits / lookups) if lookups else 0.0,
            expirations=self._expirations,
            stale_removals=self._stale_removals,
            integrity_failures=self._integrity_failures,
            rejections=self._rejections,
            max_memory_usage=self._config.max_memory_usage,
            max_entries=self._config.max_entries,
        )

    def _generation_of(self, key: str) -> Tuple[int, int]:
        return (self._epoch, self._generations.get(key, 0))

    def _miss(self, key: str) -> None:
        self._misses += 1
        logger.debug("cache.miss", extra={"key": key})
        return None

    def _evict_for(self, size: int) -> int:
        # Make room for one more entry of `size` bytes, LRU head first.
        evicted = 0
        while self._entries and (
            self._total_bytes + size > self._config.max_memory_usage
            or len(self._entries) + 1 > self._config.max_entries
        ):
            self._evict_head()
            evicted += 1
        return evicted

    def _evict_head(self) -> None:
        key, entry = self._entries.popitem(last=False)
        self._total_bytes -= entry.size
        self._evictions += 1
        logger.debug("cache.evicted", extra={"key": key, "size": entry.size, "access_count": entry.access_count})

    def _remove(self, key: str) -> None:
        entry = self._entries.pop(key)
        self._total_bytes -= entry.size
