"""MCP tool that reads a batch of files with bounded concurrency."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from core.errors import ValidationError
from sources.secure_gateway import SecureGateway


def register(mcp: FastMCP, *, gateway: SecureGateway) -> None:
    @mcp.tool(name="read_many")
    async def read_many(paths: List[str], concurrency: Optional[int] = None) -> Dict[str, Any]:
        """Read several files at once.

        Params:
          - paths: file paths relative to the project root.
          - concurrency: max reads in flight (default from config).

        Returns:
          {"results": {path: content}, "errors": [{path, error_type, message}]}.
          A failing path never fails the whole batch.
        """
        if not paths:
            raise ValidationError("No paths given")

        result = await gateway.read_many(paths, concurrency=concurrency)
        return result.as_dict()
