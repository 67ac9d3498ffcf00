"""MCP tools for cache maintenance: invalidate, stats and clear."""

from __future__ import annotations

from typing import Any, Dict

from mcp.server.fastmcp import FastMCP

from core.errors import ValidationError
from sources.secure_gateway import SecureGateway


def register(mcp: FastMCP, *, gateway: SecureGateway) -> None:
    @mcp.tool(name="invalidate_file")
    async def invalidate_file(path: str = "") -> bool:
        """Drop the cached copy of a file. Returns True if one was cached."""
        if not path or not path.strip():
            raise ValidationError("Missing file path")
        return gateway.invalidate(path)

    @mcp.tool(name="get_cache_stats")
    async def get_cache_stats() -> Dict[str, Any]:
        """Return cache statistics (entries, bytes, hits, misses, evictions, hit_rate)."""
        return gateway.get_stats().as_dict()

    @mcp.tool(name="clear_cache")
    async def clear_cache() -> str:
        """Drop every cached entry. Cumulative counters are kept."""
        gateway.clear_cache()
        return "Cache cleared"
