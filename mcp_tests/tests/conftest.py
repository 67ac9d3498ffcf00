from typing import AbstractSet, Dict, List

import pytest

from core.models import FileStat


class DummyMCP:
    """Minimal FastMCP stand-in to capture tool and resource registration."""

    def __init__(self) -> None:
        self.tools = {}
        self.resources = {}

    def tool(self, *, name: str):
        def _decorator(fn):
            self.tools[name] = fn
            return fn
        return _decorator

    def resource(self, uri: str, **kwargs):
        def _decorator(fn):
            self.resources[uri] = fn
            return fn
        return _decorator


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFileSystem:
    """In-memory FileSystem that records every call."""

    def __init__(self) -> None:
        self.files: Dict[str, str] = {}
        self.mtimes: Dict[str, float] = {}
        self.dirs = set()
        self.calls: List[tuple] = []

    def add(self, path, content: str, mtime: float = 1.0) -> str:
        p = str(path)
        self.files[p] = content
        self.mtimes[p] = mtime
        return p

    def touch(self, path, mtime: float) -> None:
        self.mtimes[str(path)] = mtime

    def _is_dir(self, path: str) -> bool:
        prefix = path.rstrip("/") + "/"
        return path in self.dirs or any(f.startswith(prefix) for f in self.files)

    def stat(self, path: str) -> FileStat:
        self.calls.append(("stat", path))
        if path in self.files:
            return FileStat(
                size=len(self.files[path].encode("utf-8")),
                mtime=self.mtimes[path],
                is_file=True,
                is_dir=False,
            )
        if self._is_dir(path):
            return FileStat(size=0, mtime=0.0, is_file=False, is_dir=True)
        raise FileNotFoundError(path)

    def exists(self, path: str) -> bool:
        self.calls.append(("exists", path))
        return path in self.files or self._is_dir(path)

    def read_text(self, path: str) -> str:
        self.calls.append(("read_text", path))
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def write_text(self, path: str, content: str) -> None:
        self.calls.append(("write_text", path))
        self.files[path] = content
        self.mtimes[path] = self.mtimes.get(path, 0.0) + 1.0

    def mkdir_all(self, path: str) -> None:
        self.calls.append(("mkdir_all", path))
        self.dirs.add(path)

    def list_files(self, path: str, *, skip_dirs: AbstractSet[str] = frozenset()) -> List[str]:
        self.calls.append(("list_files", path))
        if not self._is_dir(path):
            raise NotADirectoryError(path)
        prefix = path.rstrip("/") + "/"
        out = []
        for f in self.files:
            if not f.startswith(prefix):
                continue
            segments = f[len(prefix):].split("/")[:-1]
            if any(s in skip_dirs for s in segments):
                continue
            out.append(f)
        return sorted(out)


@pytest.fixture
def dummy_mcp():
    return DummyMCP()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_fs():
    return FakeFileSystem()


@pytest.fixture
def root(tmp_path):
    # Resolved so it matches the paths SecureGateway hands to the filesystem
    return tmp_path.resolve()
