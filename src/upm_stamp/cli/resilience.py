"""Ctrl+C handling for CLI commands."""

from functools import wraps
from typing import Any, Callable, TypeVar

from upm_stamp.cli.logging import get_cli_logger, get_request_id
from upm_stamp.cli.output import emit_failure
from upm_stamp.core.responses import ErrorCode, ErrorType, error_response

__all__ = ["EXIT_INTERRUPTED", "handle_keyboard_interrupt"]

T = TypeVar("T")

# 128 + SIGINT
EXIT_INTERRUPTED = 130


def handle_keyboard_interrupt(
    operation: str,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Report Ctrl+C as a CANCELLED envelope on stderr and exit 130.

    ``PackageCreator.create_package`` removes its partial copy before the
    interrupt reaches this point, so a cancelled create can be re-run as is.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return func(*args, **kwargs)
            except KeyboardInterrupt:
                get_cli_logger().warning("Interrupted by user")
                emit_failure(
                    error_response(
                        f"{operation} interrupted",
                        error_code=ErrorCode.CANCELLED,
                        error_type=ErrorType.CANCELLED,
                        remediation="Re-run the command.",
                        request_id=get_request_id() or None,
                    ),
                    exit_code=EXIT_INTERRUPTED,
                )

        return wrapper

    return decorator
