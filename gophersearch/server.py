"""
MCP tool server exposing the Gopher twitter search over stdio.

Tools:
- search_twitter(query)
"""

import asyncio
import threading
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from . import __version__
from .client import GopherClient
from .config import ClientConfig
from .logger import get_logger
from .search import search

SERVER_NAME = "gopher-search"


async def run_search(
    client: GopherClient,
    query: str,
    timeout: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Run a blocking search in a worker thread.

    If the awaiting task is cancelled the poll is told to stop, so the
    worker thread does not keep hitting the API after the caller left.
    """
    cancel = threading.Event()
    try:
        output = await asyncio.to_thread(
            search, query, client=client, cancel=cancel, timeout=timeout
        )
    except asyncio.CancelledError:
        cancel.set()
        raise
    return output.to_dict()


def create_server(config: ClientConfig, client: Optional[GopherClient] = None) -> FastMCP:
    """Build the FastMCP server with the search tool registered."""
    client = client or GopherClient(config)
    server = FastMCP(SERVER_NAME)

    @server.tool(
        name="search_twitter",
        description="search the Gopher AI twitter API",
    )
    async def search_twitter(query: str) -> Dict[str, Any]:
        """Search recent posts matching the query; errors come back in 'error'."""
        return await run_search(client, query)

    get_logger().info("MCP server ready", name=SERVER_NAME, version=__version__)
    return server


def run_server(config: ClientConfig) -> None:
    """Serve over stdio until the client disconnects."""
    client = GopherClient(config)
    try:
        create_server(config, client).run(transport="stdio")
    finally:
        client.close()
        get_logger().log_metrics_summary()
