"""Request context for log correlation.

A CLI command or MCP tool call runs inside ``sync_request_context``. The
context holds a correlation ID and the name of the operation being run
(``package.create``, ``creator.init``, ``mcp.package`` ...). Log records
and response envelopes read both from here.

Usage:
    from upm_stamp.core.context import sync_request_context

    with sync_request_context(operation="package.create", prefix="cli") as ctx:
        ctx.correlation_id  # "cli_a1b2c3d4e5f6"
"""

from __future__ import annotations

import secrets
import time
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Dict, Generator, Optional

__all__ = [
    "correlation_id_var",
    "RequestContext",
    "generate_correlation_id",
    "sync_request_context",
    "get_correlation_id",
    "get_current_context",
]

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")
_operation_var: ContextVar[str] = ContextVar("operation", default="")
_start_time_var: ContextVar[float] = ContextVar("start_time", default=0.0)


def generate_correlation_id(prefix: str = "req") -> str:
    """Return ``{prefix}_{12 hex chars}``."""
    return f"{prefix}_{secrets.token_hex(6)}"


@dataclass(frozen=True)
class RequestContext:
    """What is running right now, and since when."""

    correlation_id: str = ""
    operation: str = ""
    start_time: float = 0.0

    @property
    def active(self) -> bool:
        return bool(self.correlation_id)

    @property
    def elapsed_ms(self) -> float:
        if self.start_time <= 0:
            return 0.0
        return round((time.time() - self.start_time) * 1000, 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "correlation_id": self.correlation_id,
            "operation": self.operation,
            "elapsed_ms": self.elapsed_ms,
        }


@contextmanager
def sync_request_context(
    *,
    operation: str = "",
    correlation_id: Optional[str] = None,
    prefix: str = "req",
) -> Generator[RequestContext, None, None]:
    """Run the with block as one correlated operation.

    Args:
        operation: Dotted name of the command or tool being run
        correlation_id: Reuse an existing ID instead of generating one
        prefix: Prefix for a generated ID ("cli", "mcp")
    """
    ctx = RequestContext(
        correlation_id=correlation_id or generate_correlation_id(prefix),
        operation=operation,
        start_time=time.time(),
    )
    tokens = (
        correlation_id_var.set(ctx.correlation_id),
        _operation_var.set(ctx.operation),
        _start_time_var.set(ctx.start_time),
    )
    try:
        yield ctx
    finally:
        correlation_id_var.reset(tokens[0])
        _operation_var.reset(tokens[1])
        _start_time_var.reset(tokens[2])


def get_correlation_id() -> str:
    """The active correlation ID, or "" outside a request context."""
    return correlation_id_var.get()


def get_current_context() -> RequestContext:
    return RequestContext(
        correlation_id=correlation_id_var.get(),
        operation=_operation_var.get(),
        start_time=_start_time_var.get(),
    )
