from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import AbstractSet, List

from core.models import FileStat


"""Local disk FileSystem implementation.

Thin blocking wrapper over pathlib/os. Callers run it in a worker thread
(asyncio.to_thread) and translate OSError into the project's errors.
"""


class LocalFileSystem:
    # Local disk implementation of FileSystem.

    def stat(self, path: str) -> FileStat:
        st = os.stat(path)
        p = Path(path)
        return FileStat(
            size=st.st_size,
            mtime=st.st_mtime,
            is_file=p.is_file(),
            is_dir=p.is_dir(),
        )

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def read_text(self, path: str) -> str:
        # Replace undecodable bytes rather than failing the read
        return Path(path).read_text(encoding="utf-8", errors="replace")

    def write_text(self, path: str, content: str) -> None:
        target = Path(path)

        # Write to a sibling temp file, then rename over the target so readers
        # never observe a half-written file.
        fd, tmp = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, target)
        except BaseException:
            try:
                os.unlink(tmp)
            except FileNotFoundError:
                pass
            raise

    def mkdir_all(self, path: str) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def list_files(self, path: str, *, skip_dirs: AbstractSet[str] = frozenset()) -> List[str]:
        base = Path(path)
        if not base.is_dir():
            raise NotADirectoryError(path)

        out: List[str] = []
        for dirpath, dirnames, filenames in os.walk(base):
            # Prune in place so os.walk never descends into skipped dirs
            dirnames[:] = sorted(d for d in dirnames if d not in skip_dirs)
            for name in filenames:
                out.append(os.path.join(dirpath, name))
        return sorted(out)
