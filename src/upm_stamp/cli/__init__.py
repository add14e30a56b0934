"""upm-stamp CLI - stamp out packages from a template folder.

All commands emit structured JSON to stdout for reliable parsing.
"""

from upm_stamp.cli.config import CLIContext, create_context
from upm_stamp.cli.logging import (
    cli_command,
    get_cli_logger,
    get_request_id,
    set_request_id,
)
from upm_stamp.cli.main import cli
from upm_stamp.cli.output import (
    emit,
    emit_error,
    emit_exception,
    emit_failure,
    emit_success,
)
from upm_stamp.cli.registry import get_context
from upm_stamp.cli.resilience import handle_keyboard_interrupt

__all__ = [
    # Entry point
    "cli",
    # Context
    "CLIContext",
    "create_context",
    "get_context",
    # Output
    "emit",
    "emit_error",
    "emit_exception",
    "emit_failure",
    "emit_success",
    # Logging
    "cli_command",
    "get_cli_logger",
    "get_request_id",
    "set_request_id",
    # Resilience
    "handle_keyboard_interrupt",
]
