"""Request IDs and start/finish logging for CLI commands.

Each command decorated with ``cli_command`` runs inside a request context
(``cli_`` correlation ID plus a dotted operation name such as
``package.create``), which the envelope emitted by the command reports as
``meta.request_id``.
"""

import logging
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from upm_stamp.core.context import (
    correlation_id_var,
    generate_correlation_id,
    get_correlation_id,
    sync_request_context,
)

__all__ = [
    "generate_request_id",
    "get_request_id",
    "set_request_id",
    "cli_command",
    "get_cli_logger",
    "CLILogger",
]

T = TypeVar("T")


def generate_request_id() -> str:
    return generate_correlation_id(prefix="cli")


def get_request_id() -> str:
    """The current request ID, or "" outside a command."""
    return get_correlation_id()


def set_request_id(request_id: str) -> None:
    correlation_id_var.set(request_id)


class CLILogger:
    """Thin wrapper that takes log fields as keyword arguments.

    ``logger.info("Wrote creator file", path="tool.toml")`` logs the
    message with ``path`` rendered by the configured formatter.
    """

    def __init__(self, name: str = "upm_stamp.cli"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, message: str, fields: dict) -> None:
        self._logger.log(level, message, extra={"fields": fields})

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._log(logging.ERROR, message, fields)


_cli_logger = CLILogger()


def get_cli_logger() -> CLILogger:
    return _cli_logger


def cli_command(operation: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Run a click command as one correlated operation.

    Logs at DEBUG when the command starts and when it finishes, with its
    exit status and duration. ``SystemExit`` from the emit helpers counts
    as a failure unless its code is 0.

    Example:
        >>> @cli_command("package.create")
        ... def create_cmd(ctx):
        ...     ...
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            with sync_request_context(operation=operation, prefix="cli"):
                started = time.perf_counter()
                exit_code: Any = 0
                _cli_logger.debug("Command started")
                try:
                    return func(*args, **kwargs)
                except SystemExit as exc:
                    exit_code = exc.code or 0
                    raise
                except Exception as exc:
                    exit_code = 1
                    _cli_logger.error("Command crashed", error=str(exc))
                    raise
                finally:
                    _cli_logger.debug(
                        "Command finished",
                        exit_code=exit_code,
                        duration_ms=round((time.perf_counter() - started) * 1000, 2),
                    )

        return wrapper

    return decorator
