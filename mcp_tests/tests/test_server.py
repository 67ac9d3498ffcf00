import sys
import types
import uuid
import importlib.util
from pathlib import Path

import pytest

import config as config_mod
import core.sweeper as sweeper_mod


def _find_server_py() -> Path:
    root = Path(__file__).resolve().parents[2]
    candidates = [
        root / "server.py",
        root / "server" / "server.py",
        root / "src" / "server" / "server.py",
    ]
    for p in candidates:
        if p.exists():
            return p
    raise FileNotFoundError(f"Could not find server.py. Tried: {candidates}")


def _install_fakes(monkeypatch, captures: dict, project_root: Path):
    # ---- Fake mcp.server.fastmcp.FastMCP ----
    mcp_mod = types.ModuleType("mcp")
    mcp_server_mod = types.ModuleType("mcp.server")
    fastmcp_mod = types.ModuleType("mcp.server.fastmcp")

    class DummyFastMCP:
        def __init__(self, name: str, *, lifespan=None):
            captures["fastmcp_name"] = name
            captures["lifespan"] = lifespan
            captures["mcp_instance"] = self
            self.tools = {}
            self.resources = {}
            self.run_calls = []

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

        def run(self, *, transport: str):
            self.run_calls.append({"transport": transport})

    fastmcp_mod.FastMCP = DummyFastMCP

    # Mark package structure
    mcp_mod.__path__ = []
    mcp_server_mod.__path__ = []

    monkeypatch.setitem(sys.modules, "mcp", mcp_mod)
    monkeypatch.setitem(sys.modules, "mcp.server", mcp_server_mod)
    monkeypatch.setitem(sys.modules, "mcp.server.fastmcp", fastmcp_mod)

    # ---- Fake sweeper so the lifespan can be observed ----
    class FakeSweeper:
        def __init__(self, engine, *, interval_seconds: float):
            captures["sweeper"] = self
            self.engine = engine
            self.interval_seconds = interval_seconds
            self.events = []

        def start(self):
            self.events.append("start")

        async def stop(self):
            self.events.append("stop")

    monkeypatch.setattr(sweeper_mod, "CacheSweeper", FakeSweeper)
    monkeypatch.setattr(config_mod, "PROJECT_ROOT", project_root)


def _load_server_module(monkeypatch, captures: dict, project_root: Path):
    _install_fakes(monkeypatch, captures, project_root)

    server_path = _find_server_py()
    mod_name = f"server_under_test_{uuid.uuid4().hex}"
    spec = importlib.util.spec_from_file_location(mod_name, server_path)
    assert spec and spec.loader

    module = importlib.util.module_from_spec(spec)
    monkeypatch.setitem(sys.modules, mod_name, module)
    spec.loader.exec_module(module)
    return module


@pytest.mark.asyncio
async def test_server_wiring_and_lifespan(monkeypatch, root):
    (root / "a.py").write_text("x = 1", encoding="utf-8")
    captures = {}
    module = _load_server_module(monkeypatch, captures, root)

    assert captures["fastmcp_name"] == "file-cache-mcp"
    mcp = captures["mcp_instance"]

    assert set(mcp.tools) == {
        "read_file",
        "read_many",
        "write_file",
        "list_files",
        "invalidate_file",
        "get_cache_stats",
        "clear_cache",
    }
    assert set(mcp.resources) == {"cache://stats", "cache://config"}

    # every tool shares one gateway and therefore one cache
    assert await mcp.tools["read_file"](path="a.py") == "x = 1"
    stats = await mcp.tools["get_cache_stats"]()
    assert stats["entries"] == 1

    sweeper = captures["sweeper"]
    assert sweeper.interval_seconds == 300

    async with captures["lifespan"](mcp):
        assert sweeper.events == ["start"]
    assert sweeper.events == ["start", "stop"]

    # shutdown clears the cache
    stats = await mcp.tools["get_cache_stats"]()
    assert stats["entries"] == 0

    # main() runs stdio transport
    module.main()
    assert mcp.run_calls == [{"transport": "stdio"}]
