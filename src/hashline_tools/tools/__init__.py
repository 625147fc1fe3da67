"""
Hashline MCP tools.

Usage:
    from fastmcp import FastMCP
    from hashline_tools.tools import register_all_tools

    mcp = FastMCP("hashline-tools")
    register_all_tools(mcp)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .hashline_edit import register_tools as register_hashline_edit
from .hashline_read import register_tools as register_hashline_read

if TYPE_CHECKING:
    from fastmcp import FastMCP


def register_all_tools(mcp: FastMCP) -> list[str]:
    """
    Register all hashline tools with a FastMCP server.

    Args:
        mcp: FastMCP server instance

    Returns:
        List of registered tool names
    """
    register_hashline_read(mcp)
    register_hashline_edit(mcp)
    return ["hashline_read", "hashline_edit"]


__all__ = ["register_all_tools"]
