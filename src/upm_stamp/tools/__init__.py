"""MCP tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .package import register_package_tool

if TYPE_CHECKING:  # pragma: no cover - import-time typing only
    from mcp.server.fastmcp import FastMCP
    from upm_stamp.config import StampConfig


def register_tools(mcp: "FastMCP", config: "StampConfig") -> None:
    """Register all MCP tools."""
    register_package_tool(mcp, config)


__all__ = [
    "register_tools",
    "register_package_tool",
]
