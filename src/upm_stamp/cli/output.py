"""Envelope printing for the upm-stamp CLI.

Successful results are written to stdout and failures to stderr, one
minified response-v2 envelope per invocation.
"""

import json
import sys
from dataclasses import asdict
from typing import Any, Mapping, NoReturn, Sequence, Union

from upm_stamp.cli.logging import generate_request_id, get_request_id, set_request_id
from upm_stamp.core.errors import PackageCreationError
from upm_stamp.core.responses import (
    ToolResponse,
    error_from_exception,
    error_response,
    internal_error,
    success_response,
)


def _request_id() -> str:
    current = get_request_id()
    if not current:
        current = generate_request_id()
        set_request_id(current)
    return current


def _dumps(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"), default=str)


def emit(data: Any) -> None:
    """Print ``data`` to stdout as one line of JSON."""
    print(_dumps(data))


def emit_failure(response: ToolResponse, exit_code: int = 1) -> NoReturn:
    """Print a failure envelope to stderr, then exit with ``exit_code``."""
    print(_dumps(asdict(response)), file=sys.stderr)
    sys.exit(exit_code)


def emit_error(
    message: str,
    code: str = "INTERNAL_ERROR",
    *,
    error_type: str = "internal",
    remediation: str | None = None,
    details: Mapping[str, Any] | None = None,
) -> NoReturn:
    """Fail the command with an ad-hoc error.

    ``code`` and ``error_type`` take the string values of ErrorCode and
    ErrorType, e.g. ``code="CONFLICT", error_type="conflict"``.
    """
    emit_failure(
        error_response(
            message,
            error_code=code,
            error_type=error_type,
            remediation=remediation,
            details=details,
            request_id=_request_id(),
        )
    )


def emit_exception(exc: Union[PackageCreationError, OSError]) -> NoReturn:
    """Fail the command with the envelope for ``exc``.

    Package errors keep their own code; filesystem errors become INTERNAL_ERROR.
    """
    if isinstance(exc, PackageCreationError):
        emit_failure(error_from_exception(exc, request_id=_request_id()))
    emit_failure(internal_error(exc, request_id=_request_id()))


def emit_success(
    data: Any,
    *,
    warnings: Sequence[str] | None = None,
    telemetry: Mapping[str, Any] | None = None,
) -> None:
    """Print a success envelope. Non-dict results are stored under ``result``."""
    if not isinstance(data, dict):
        data = {"result": data}
    emit(
        asdict(
            success_response(
                data,
                warnings=warnings,
                telemetry=telemetry,
                request_id=_request_id(),
            )
        )
    )
