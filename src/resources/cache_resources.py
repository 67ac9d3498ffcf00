import json

from mcp.server.fastmcp import FastMCP

from sources.secure_gateway import SecureGateway


def register_resources(mcp: FastMCP, *, gateway: SecureGateway) -> None:
    """
    Register read-only cache resources for the MCP server.
    """

    @mcp.resource(
        "cache://stats",
        mime_type="application/json",
        description="Live file cache statistics"
    )
    def cache_stats() -> str:
        return json.dumps(gateway.get_stats().as_dict(), indent=2)

    @mcp.resource(
        "cache://config",
        mime_type="application/json",
        description="Effective cache and access-policy configuration"
    )
    def cache_config() -> str:
        data = gateway.config.to_dict()
        data["project_root"] = gateway.project_root.as_posix()
        return json.dumps(data, indent=2)
