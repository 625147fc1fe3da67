#!/usr/bin/env python3
"""
Hashline Tools MCP Server

Serves hashline_read and hashline_edit over the Model Context Protocol.

Usage:
    hashline-tools-mcp                 # streamable HTTP on HASHLINE_MCP_HOST:HASHLINE_MCP_PORT
    hashline-tools-mcp --port 8001
    hashline-tools-mcp --stdio         # for agents that spawn the server locally

Every ``Settings`` field can be set as ``HASHLINE_<FIELD>``; the ones that
matter most here are WORKSPACE_ROOT, FINGERPRINT_MODE, MCP_HOST, MCP_PORT and
LOG_LEVEL.
"""

import argparse
import logging
import os
import signal
import sys

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from hashline_tools.config import Settings, settings
from hashline_tools.tools import register_all_tools

SERVER_NAME = "hashline-tools"

logger = logging.getLogger("hashline_tools")


def setup_logger(use_stdio: bool, level: str | None = None) -> None:
    """Attach one handler to the package logger; later calls are no-ops."""
    if logger.handlers:
        return

    # STDIO transport owns stdout
    handler = logging.StreamHandler(sys.stderr if use_stdio else sys.stdout)
    handler.setFormatter(
        logging.Formatter("[%(asctime)s] [%(levelname)s] [MCP] %(message)s", "%Y-%m-%d %H:%M:%S")
    )
    logger.addHandler(handler)
    logger.setLevel((level or settings.log_level).upper())


def create_app(config: Settings | None = None) -> FastMCP:
    """Build the server with both hashline tools and a ``/health`` route."""
    config = config or settings
    mcp = FastMCP(SERVER_NAME)

    tools = register_all_tools(mcp)
    logger.info(
        "Registered %s (workspace %s, %s fingerprints)",
        ", ".join(tools),
        os.path.abspath(config.workspace_root),
        config.fingerprint_mode,
    )

    @mcp.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> PlainTextResponse:
        return PlainTextResponse("OK", status_code=200)

    return mcp


def register_shutdown_handlers() -> None:
    """Exit cleanly on SIGINT/SIGTERM."""

    def shutdown_handler(signum, frame):
        logger.info("Received signal %s. Shutting down gracefully...", signum)
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown_handler)
    signal.signal(signal.SIGTERM, shutdown_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Hashline Tools MCP Server")
    parser.add_argument("--port", type=int, default=settings.mcp_port, help="HTTP server port")
    parser.add_argument("--host", default=settings.mcp_host, help="HTTP server host")
    parser.add_argument(
        "--stdio",
        action="store_true",
        help="Use STDIO transport instead of HTTP",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    setup_logger(use_stdio=args.stdio)
    register_shutdown_handlers()

    mcp = create_app()

    if args.stdio:
        logger.info("Starting MCP in STDIO mode")
        mcp.run(transport="stdio")
    else:
        logger.info("Starting HTTP server on %s:%d", args.host, args.port)
        mcp.run(transport="http", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
