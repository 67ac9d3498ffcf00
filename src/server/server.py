"""Server bootstrap for the file cache MCP service.

Builds the cache stack once (config -> filesystem -> CacheEngine ->
SecureGateway -> CacheSweeper), injects the gateway into every tool and
resource, and starts the MCP server (stdio transport). The lifespan hook
starts the TTL sweeper and, on shutdown, stops it and clears the cache.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

from mcp.server.fastmcp import FastMCP

from config import LOG_LEVEL, PROJECT_ROOT, load_cache_config
from core.cache import CacheEngine
from core.sweeper import CacheSweeper
from sources.local_filesystem import LocalFileSystem
from sources.secure_gateway import SecureGateway

from tools.cache_admin import register as register_cache_admin
from tools.list_files import register as register_list_files
from tools.read_file import register as register_read_file
from tools.read_many import register as register_read_many
from tools.write_file import register as register_write_file

from resources.cache_resources import register_resources

logger = logging.getLogger(__name__)


def register_tools(mcp: FastMCP, *, gateway: SecureGateway) -> None:
    register_read_file(mcp, gateway=gateway)
    register_read_many(mcp, gateway=gateway)
    register_write_file(mcp, gateway=gateway)
    register_list_files(mcp, gateway=gateway)
    register_cache_admin(mcp, gateway=gateway)


def create_server() -> FastMCP:
    config = load_cache_config()
    fs = LocalFileSystem()
    cache = CacheEngine(config, fs=fs)
    gateway = SecureGateway(project_root=PROJECT_ROOT, cache=cache, config=config, fs=fs)
    sweeper = CacheSweeper(cache, interval_seconds=config.sweep_interval_seconds)

    @asynccontextmanager
    async def lifespan(_server: FastMCP) -> AsyncIterator[None]:
        sweeper.start()
        logger.info("server.started", extra={"project_root": str(PROJECT_ROOT)})
        try:
            yield
        finally:
            await sweeper.stop()
            cache.clear()
            logger.info("server.stopped")

    mcp = FastMCP("file-cache-mcp", lifespan=lifespan)
    register_tools(mcp, gateway=gateway)
    register_resources(mcp, gateway=gateway)
    return mcp


mcp = create_server()


def main() -> None:
    # stdout carries the stdio transport; logs go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
