"""MCP tool that lists readable files under the project root.

Registers the 'list_files' tool; results are already filtered by the
gateway's extension allow-list so every entry can be passed to read_file.
"""

from __future__ import annotations

from typing import List

from mcp.server.fastmcp import FastMCP

from sources.secure_gateway import SecureGateway


def register(mcp: FastMCP, *, gateway: SecureGateway) -> None:
    @mcp.tool(name="list_files")
    async def list_files(root: str = ".", glob: str = "**/*") -> List[str]:
        """List files under a directory and return a sorted list of paths.

        Params:
          - root: directory relative to the project root (default: ".").
          - glob: glob pattern relative to root, '**' supported (default: "**/*").

        Returns:
          Sorted POSIX paths relative to the project root.

        Raises:
          PathTraversalError if root leaves the project root; NotFoundError
          if root is not a directory.
        """
        return await gateway.list_files(root=root, glob=glob)
