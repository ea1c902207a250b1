"""JournalOwl MCP Server - Main entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    ErrorData,
    Resource,
    TextContent,
    Tool,
)

from .client import JournalOwlClient
from .config import LOG_LEVELS, VERSION, ServerConfig, load_config
from .errors import ConfigurationError, InvalidArgumentsError, UnknownResourceError, UnknownToolError
from .resources import MIME_TYPE, make_resources, read_resource
from .tools import execute_tool, make_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "journalowl-mcp"

# MCP's code for a resource URI the server does not know
RESOURCE_NOT_FOUND = -32002


def setup_logging(level: str = "INFO", format_string: Optional[str] = None, stream: Any = None) -> logging.Logger:
    """Set up logging for the server.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string for log messages
        stream: Output stream (defaults to stderr; stdout carries the MCP stream)

    Returns:
        The package logger
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    if stream is None:
        stream = sys.stderr

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=format_string,
        stream=stream,
        force=True,
    )

    package_logger = logging.getLogger("journalowl_mcp")
    package_logger.setLevel(getattr(logging, level.upper()))
    return package_logger


async def dispatch_tool(
    client: JournalOwlClient, name: str, arguments: Optional[dict[str, Any]]
) -> list[TextContent]:
    """Run a tool and translate any failure into an MCP protocol error."""
    try:
        text = await execute_tool(client, name, arguments)
    except UnknownToolError as e:
        raise McpError(ErrorData(code=METHOD_NOT_FOUND, message=str(e))) from e
    except InvalidArgumentsError as e:
        raise McpError(ErrorData(code=INVALID_PARAMS, message=str(e))) from e
    except Exception as e:
        logger.error(f"Tool {name} failed: {e}")
        raise McpError(ErrorData(code=INTERNAL_ERROR, message=f"Tool {name} failed: {e}")) from e

    return [TextContent(type="text", text=text)]


async def dispatch_resource(client: JournalOwlClient, uri: str) -> list[ReadResourceContents]:
    """Read a resource and translate any failure into an MCP protocol error."""
    try:
        text = await read_resource(client, uri)
    except UnknownResourceError as e:
        raise McpError(ErrorData(code=RESOURCE_NOT_FOUND, message=str(e))) from e
    except Exception as e:
        logger.error(f"Resource {uri} failed: {e}")
        raise McpError(ErrorData(code=INTERNAL_ERROR, message=f"Resource {uri} failed: {e}")) from e

    return [ReadResourceContents(content=text, mime_type=MIME_TYPE)]


def create_server(client: JournalOwlClient) -> Server:
    """Create and configure the MCP server.

    Args:
        client: Backend client shared by every request for the process lifetime

    Returns:
        Configured MCP Server instance
    """
    server = Server(SERVER_NAME, version=VERSION)
    tool_defs = make_tools()
    resource_defs = make_resources()

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """Return list of available tools."""
        return [
            Tool(
                name=t["name"],
                description=t["description"],
                inputSchema=t["inputSchema"],
            )
            for t in tool_defs.values()
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Handle tool invocation."""
        return await dispatch_tool(client, name, arguments)

    @server.list_resources()
    async def list_resources() -> list[Resource]:
        """Return list of available resources."""
        return [
            Resource(
                uri=r["uri"],
                name=r["name"],
                description=r["description"],
                mimeType=r["mimeType"],
            )
            for r in resource_defs.values()
        ]

    @server.read_resource()
    async def read(uri: Any) -> list[ReadResourceContents]:
        """Handle resource reads."""
        return await dispatch_resource(client, str(uri))

    return server


async def run_server(config: ServerConfig) -> None:
    """Run the MCP server with stdio transport."""
    async with JournalOwlClient.from_config(config) as client:
        server = create_server(client)

        async with stdio_server() as (read_stream, write_stream):
            logger.info(f"JournalOwl MCP Server v{VERSION} running on stdio")
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME,
        description="JournalOwl MCP Server - journaling tools for MCP-compatible agents",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Path to config file (default: auto-detect journalowl.toml/.json)",
    )
    parser.add_argument(
        "--base-url",
        help="JournalOwl API base URL (default: JOURNALOWL_API_URL or the production API)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Request timeout in seconds (default: 30)",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Log level (default: INFO)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {VERSION}",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Log to stderr at the requested level until the config says otherwise
    setup_logging(args.log_level or "INFO")

    try:
        config = load_config(
            args.config,
            base_url=args.base_url,
            timeout=args.timeout,
            log_level=args.log_level,
        )
        config.validate()
    except ConfigurationError as e:
        logger.error(f"Failed to initialize JournalOwl client: {e}")
        sys.exit(1)

    setup_logging(config.log_level)

    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


if __name__ == "__main__":  # pragma: no cover
    main()
