"""Secure, cached file access under a project root.

SecureGateway is the only way callers reach file content. Every request
is validated first (traversal, extension allow-list, size ceiling) and
only then served from the CacheEngine or, on a miss, read from disk and
handed to the cache. Blocking disk work runs in worker threads; all cache
mutation stays on the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from core.cache import CacheEngine
from core.errors import (
    ExtensionNotAllowedError,
    FileCacheError,
    FileTooLargeError,
    NotFoundError,
    PathTraversalError,
    StorageIOError,
    ValidationError,
)
from core.interfaces import FileSystem
from core.models import BatchReadError, BatchReadResult, CacheConfig, CacheStats, FileStat
from core.paths import file_extension, glob_match, is_within_root, lexical_join
from sources.local_filesystem import LocalFileSystem

logger = logging.getLogger(__name__)

SKIP_DIRS = frozenset({".git", "node_modules", "dist", "build", "coverage", "__pycache__"})


class SecureGateway:
    def __init__(
        self,
        *,
        project_root: Path,
        cache: CacheEngine,
        config: Optional[CacheConfig] = None,
        fs: Optional[FileSystem] = None,
    ) -> None:
        self._project_root = project_root.resolve()
        self._cache = cache
        self._config = config or cache.config
        self._fs = fs or LocalFileSystem()

    @property
    def project_root(self) -> Path:
        return self._project_root

    @property
    def config(self) -> CacheConfig:
        return self._config

    @property
    def cache(self) -> CacheEngine:
        return self._cache

    def _resolve_under_root(self, rel_path: str) -> Path:
        raw = (rel_path or "").strip()
        if not raw:
            raise ValidationError("Path is empty")

        root = self._project_root.as_posix()

        # Lexical check first: rejects "../" escapes without any I/O
        if not is_within_root(root, raw):
            raise PathTraversalError(f"Path escapes project root: {rel_path}", path=rel_path)

        p = Path(lexical_join(root, raw)).resolve()

        # Symlinks inside the root may still point outside it
        try:
            p.relative_to(self._project_root)
        except ValueError as e:
            raise PathTraversalError(f"Path resolves outside project root: {rel_path}", path=rel_path) from e

        return p

    def _validate(self, rel_path: str) -> Path:
        p = self._resolve_under_root(rel_path)
        ext = file_extension(p.name)
        if ext not in self._config.allowed_extensions:
            raise ExtensionNotAllowedError(f"File extension not allowed: {ext!r}", path=rel_path)
        return p

    def _check_size(self, size: int, rel_path: str) -> None:
        limit = self._config.max_file_size
        if size > limit:
            raise FileTooLargeError(
                f"File too large: {size} bytes (max: {limit})",
                path=rel_path,
                size=size,
                limit=limit,
            )

    def _stat_file(self, target: str, rel_path: str) -> FileStat:
        try:
            st = self._fs.stat(target)
        except FileNotFoundError as e:
            raise NotFoundError(f"File not found: {rel_path}", path=rel_path) from e
        except OSError as e:
            raise StorageIOError(f"Failed to stat {rel_path}: {e}", path=rel_path) from e

        if not st.is_file:
            raise ValidationError(f"Not a file: {rel_path}", path=rel_path)
        self._check_size(st.size, rel_path)
        return st

    def _read_text(self, target: str, rel_path: str) -> str:
        try:
            return self._fs.read_text(target)
        except FileNotFoundError as e:
            raise NotFoundError(f"File not found: {rel_path}", path=rel_path) from e
        except OSError as e:
            raise StorageIOError(f"Failed to read {rel_path}: {e}", path=rel_path) from e

    def _write_text(self, target: str, content: str, rel_path: str) -> bool:
        # Returns True when the file did not exist before
        try:
            created = not self._fs.exists(target)
            self._fs.mkdir_all(str(Path(target).parent))
            self._fs.write_text(target, content)
        except OSError as e:
            raise StorageIOError(f"Failed to write {rel_path}: {e}", path=rel_path) from e
        return created

    async def read(self, path: str) -> str:
        """Return the text content of path (relative to the project root).

        Raises:
          ValidationError for an empty path or a directory,
          PathTraversalError / ExtensionNotAllowedError on policy violations,
          FileTooLargeError when the on-disk size exceeds max_file_size,
          NotFoundError when the file does not exist,
          StorageIOError for any other disk failure.
        """
        p = self._validate(path)
        target = str(p)

        st = await asyncio.to_thread(self._stat_file, target, path)

        cached = self._cache.get(target, current_mtime=st.mtime)
        if cached is not None:
            return cached

        # Taken before the disk read; a write that lands meanwhile changes it
        generation = self._cache.generation(target)
        content = await asyncio.to_thread(self._read_text, target, path)

        # A failed put only means "not cached"; the read still succeeds
        self._cache.put(target, content, st.mtime, generation=generation)
        return content

    async def write(self, path: str, content: str) -> None:
        """Write content to path atomically, then drop any cached copy."""
        if not isinstance(content, str):
            raise ValidationError("Content must be a string", path=path)

        p = self._validate(path)
        self._check_size(len(content.encode("utf-8")), path)

        target = str(p)
        created = await asyncio.to_thread(self._write_text, target, content, path)
        self._cache.invalidate(target)
        logger.debug("gateway.write", extra={"path": path, "new_file": created})

    async def read_many(self, paths: Sequence[str], *, concurrency: Optional[int] = None) -> BatchReadResult:
        """Read many files with at most `concurrency` reads in flight.

        Per-path failures are collected in the result, never raised.
        Duplicate paths are read once.
        """
        limit = self._config.read_concurrency if concurrency is None else int(concurrency)
        if limit < 1:
            raise ValidationError("concurrency must be at least 1")

        unique = list(dict.fromkeys(paths))
        sem = asyncio.Semaphore(limit)
        results: Dict[str, str] = {}
        errors: List[BatchReadError] = []

        async def _one(path: str) -> None:
            async with sem:
                try:
                    results[path] = await self.read(path)
                except FileCacheError as e:
                    errors.append(BatchReadError(path=path, error_type=type(e).__name__, message=str(e)))

        await asyncio.gather(*(_one(p) for p in unique))

        if errors:
            logger.warning(
                "gateway.batch_read_failures",
                extra={
                    "requested": len(unique),
                    "succeeded": len(results),
                    "failed": len(errors),
                    "failed_paths": [e.path for e in errors][:20],
                },
            )
        return BatchReadResult(results=results, errors=errors)

    async def list_files(self, *, root: str = ".", glob: str = "**/*") -> List[str]:
        """List readable files under root as sorted POSIX paths relative to the project root.

        Only files with an allowed extension are returned; vendored and
        build directories (SKIP_DIRS) are not descended into.
        """
        base = self._resolve_under_root(root or ".")

        try:
            files = await asyncio.to_thread(self._fs.list_files, str(base), skip_dirs=SKIP_DIRS)
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFoundError(f"Not a directory: {root}", path=root) from e
        except OSError as e:
            raise StorageIOError(f"Failed to list {root}: {e}", path=root) from e

        out: List[str] = []
        for f in files:
            fp = Path(f)
            if file_extension(fp.name) not in self._config.allowed_extensions:
                continue
            # Use POSIX-style paths to keep results stable across OSes
            if glob_match(fp.relative_to(base).as_posix(), glob):
                out.append(fp.relative_to(self._project_root).as_posix())
        return sorted(out)

    def invalidate(self, path: str) -> bool:
        p = self._resolve_under_root(path)
        return self._cache.invalidate(str(p))

    def get_stats(self) -> CacheStats:
        return self._cache.stats()

    def clear_cache(self) -> None:
        self._cache.clear()
