"""Server bootstrap for the Bitbucket MCP service.

Creates the FastMCP instance, wires the Bitbucket client and config
provider into a shared tool context, registers the tools and starts the
MCP server (stdio transport).
"""

import logging
import sys

from mcp.server.fastmcp import FastMCP

from clients.bitbucket.client import BitbucketClient
from clients.bitbucket.settings import EnvConfigProvider
from config import BITBUCKET_MAX_CONCURRENCY, LOG_LEVEL
from core.context import ToolContext
from tools.catalog import register_all

mcp = FastMCP("bitbucket-mcp")


def build_context() -> ToolContext:
    client = BitbucketClient(max_concurrency=BITBUCKET_MAX_CONCURRENCY)
    return ToolContext(config_provider=EnvConfigProvider(), client=client)


def register_tools() -> None:
    register_all(mcp, context=build_context())


register_tools()


def configure_logging() -> None:
    # stdout is reserved for the MCP protocol
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    configure_logging()
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
