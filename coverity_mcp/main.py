#!/usr/bin/env python3
"""
Coverity MCP - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Builds the Coverity client and the capability server
3. Auto-loads capability units
4. Runs the stdio or HTTP transport

All business logic is in the modules, following black box principles.
"""

import asyncio
import logging
import sys
from typing import Optional

import click
from dotenv import load_dotenv

from coverity_mcp import __version__
from coverity_mcp.config import ConfigProvider, EnvConfigProvider, ServerConfig
from coverity_mcp.logging_config import configure_logging
from coverity_mcp.modules.client import CoverityClient
from coverity_mcp.modules.host import CapabilityServer, run_stdio, serve_http
from coverity_mcp.modules.registry import LoadReport, auto_load_registry

logger = logging.getLogger("coverity_mcp.main")

SERVER_NAME = "coverity-mcp-server"


def create_server(client: CoverityClient, config_provider: ConfigProvider) -> CapabilityServer:
    """Create the capability server with its shared dependencies attached."""
    server = CapabilityServer(
        name=SERVER_NAME,
        version=__version__,
        instructions=(
            "Query Coverity Connect: list projects and streams, search defects, "
            "and inspect a defect's event trace and triage state."
        ),
    )
    server.state.client = client
    server.state.config_provider = config_provider
    return server


async def boot(
    server_config: ServerConfig,
    client: CoverityClient,
    config_provider: ConfigProvider,
) -> LoadReport:
    """Register capabilities and serve until the transport stops."""
    server = create_server(client, config_provider)
    try:
        report = await auto_load_registry(server)

        if server_config.transport == "http":
            await serve_http(server, server_config.host, server_config.port, server_config.log_level)
        else:
            await run_stdio(server)
    finally:
        await client.aclose()

    return report


@click.command()
@click.option(
    "--transport",
    type=click.Choice(["stdio", "http"]),
    default=None,
    help="Transport to serve on (default: TRANSPORT env var or stdio)",
)
@click.option("--host", "host", default=None, help="HTTP bind address (default: HTTP_HOST or 0.0.0.0)")
@click.option("--port", "port", type=int, default=None, help="HTTP port (default: PORT or 3000)")
@click.version_option(__version__, prog_name=SERVER_NAME)
def main(transport: Optional[str], host: Optional[str], port: Optional[int]) -> None:
    """Coverity Connect MCP server."""
    load_dotenv()
    config_provider = EnvConfigProvider()

    try:
        server_config = config_provider.get_server_config()
        configure_logging(server_config.log_level)
        coverity_config = config_provider.get_coverity_config()
    except ValueError as e:
        configure_logging()
        logger.error(f"Fatal error: {e}")
        sys.exit(1)

    server_config = ServerConfig(
        transport=transport or server_config.transport,
        host=host or server_config.host,
        port=port or server_config.port,
        log_level=server_config.log_level,
        debug=server_config.debug,
    )

    logger.info(
        f"Starting {SERVER_NAME} {__version__} "
        f"({server_config.transport}, Coverity at {coverity_config.base_url})"
    )
    client = CoverityClient(coverity_config)

    try:
        asyncio.run(boot(server_config, client, config_provider))
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
