"""MCP tool registration helpers."""

from __future__ import annotations

import functools
import json
import logging
from typing import Any, Callable

from mcp.server.fastmcp import FastMCP
from mcp.types import TextContent

from upm_stamp.core.context import sync_request_context

logger = logging.getLogger(__name__)


def _minify_response(result: dict[str, Any]) -> TextContent:
    return TextContent(
        type="text",
        text=json.dumps(result, separators=(",", ":"), default=str),
    )


def canonical_tool(
    mcp: FastMCP,
    *,
    canonical_name: str,
    **tool_kwargs: Any,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Register ``func`` as the MCP tool ``canonical_name``.

    Each call runs as the operation ``mcp.<canonical_name>`` with an
    ``mcp_`` correlation ID. Envelope dicts are returned as minified JSON
    text. Failed envelopes are logged at WARNING, and unexpected exceptions
    are logged with their traceback and re-raised for FastMCP to report.

    Args:
        mcp: FastMCP instance
        canonical_name: Tool name clients call
        **tool_kwargs: Passed through to ``mcp.tool()``
    """
    operation = f"mcp.{canonical_name}"

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with sync_request_context(operation=operation, prefix="mcp") as ctx:
                try:
                    result = func(*args, **kwargs)
                except Exception:
                    logger.exception("%s raised after %.2fms", operation, ctx.elapsed_ms)
                    raise

                if not isinstance(result, dict):
                    return result
                if result.get("success") is False:
                    logger.warning(
                        "%s failed: %s (%s)",
                        operation,
                        result.get("error"),
                        result.get("data", {}).get("error_code"),
                    )
                else:
                    logger.debug("%s succeeded in %.2fms", operation, ctx.elapsed_ms)
                return _minify_response(result)

        return mcp.tool(name=canonical_name, **tool_kwargs)(wrapper)

    return decorator
