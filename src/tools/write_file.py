"""MCP tool that writes a text file and invalidates its cached copy."""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from core.errors import ValidationError
from sources.secure_gateway import SecureGateway


def register(mcp: FastMCP, *, gateway: SecureGateway) -> None:
    @mcp.tool(name="write_file")
    async def write_file(path: str = "", content: str = "") -> str:
        """Write UTF-8 text to a file under the project root.

        Missing parent directories are created. The next read of the path
        returns the new content.

        Params:
          - path: file path relative to the project root (required).
          - content: text to write.

        Returns:
          A short confirmation message.
        """
        if not path or not path.strip():
            raise ValidationError("Missing file path")

        await gateway.write(path, content)
        return f"Wrote {len(content.encode('utf-8'))} bytes to {path}"
