"""MCP tool that reads a text file through the secure cached gateway.

Registers the 'read_file' tool which validates inputs and delegates to
SecureGateway.read, so every read is policy-checked and cached.
"""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from core.errors import ValidationError
from sources.secure_gateway import SecureGateway


def register(mcp: FastMCP, *, gateway: SecureGateway) -> None:
    @mcp.tool(name="read_file")
    async def read_file(path: str = "") -> str:
        """Read a text file under the project root and return its UTF-8 contents.

        Parameters:
          - path: file path relative to the project root (required).

        Returns:
          The file contents. Repeated reads of an unchanged file are served
          from the in-memory cache.

        Raises:
          ValidationError for a missing path or a directory,
          PathTraversalError if the path leaves the project root,
          ExtensionNotAllowedError for a disallowed extension,
          FileTooLargeError above the size ceiling, NotFoundError if absent.
        """
        if not path or not path.strip():
            raise ValidationError("Missing file path")

        return await gateway.read(path)
