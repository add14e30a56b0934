"""
Response envelopes shared by the CLI and the MCP server.

Every command and tool call produces exactly one envelope:

    {
        "success": bool,
        "data": {...},         # result payload, or error_code/error_type/... on failure
        "error": str | null,
        "meta": {
            "version": "response-v2",
            "request_id": "cli_abc123"?,   # from the active request context
            "warnings": ["..."]?,
            "telemetry": {"duration_ms": 12.5}?
        }
    }

Failures always carry ``data.error_code`` and ``data.error_type``, plus
``remediation`` and ``details`` when there is something useful to say.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Sequence, Union

from upm_stamp.core.context import get_correlation_id

if TYPE_CHECKING:
    from upm_stamp.core.errors import PackageCreationError

RESPONSE_VERSION = "response-v2"


class ErrorCode(str, Enum):
    """Machine-readable error codes, SCREAMING_SNAKE_CASE."""

    # Bad input
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_REQUIRED = "MISSING_REQUIRED"
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_DESTINATION = "INVALID_DESTINATION"

    # Filesystem state
    NOT_FOUND = "NOT_FOUND"
    TEMPLATE_EMPTY = "TEMPLATE_EMPTY"
    CONFLICT = "CONFLICT"

    # Interruption
    CANCELLED = "CANCELLED"

    # Anything else
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorType(str, Enum):
    """Coarse error categories clients can branch on."""

    VALIDATION = "validation"  # fix the input and retry
    NOT_FOUND = "not_found"  # a path does not exist or is empty
    CONFLICT = "conflict"  # something already exists at the target
    CANCELLED = "cancelled"  # interrupted by the user, safe to re-run
    INTERNAL = "internal"  # filesystem or unexpected failure


@dataclass
class ToolResponse:
    """
    A response envelope. Serialize with ``dataclasses.asdict``.

    Attributes:
        success: Whether the operation completed
        data: Result payload, or error fields on failure
        error: Error message when success is False
        meta: Envelope metadata, always including the contract version
    """

    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=lambda: {"version": RESPONSE_VERSION})


def _code(value: Union[Enum, str]) -> str:
    return value.value if isinstance(value, Enum) else value


def _meta(
    request_id: Optional[str],
    warnings: Optional[Sequence[str]] = None,
    telemetry: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    meta: Dict[str, Any] = {"version": RESPONSE_VERSION}
    request_id = request_id or get_correlation_id()
    if request_id:
        meta["request_id"] = request_id
    if warnings:
        meta["warnings"] = list(warnings)
    if telemetry:
        meta["telemetry"] = dict(telemetry)
    return meta


def success_response(
    data: Optional[Mapping[str, Any]] = None,
    *,
    warnings: Optional[Sequence[str]] = None,
    telemetry: Optional[Mapping[str, Any]] = None,
    request_id: Optional[str] = None,
    **fields: Any,
) -> ToolResponse:
    """Build a success envelope.

    Args:
        data: Base payload.
        warnings: Non-fatal issues, reported in ``meta.warnings``.
        telemetry: Timing data, reported in ``meta.telemetry``.
        request_id: Defaults to the active correlation ID.
        **fields: Extra payload keys, merged over ``data``.
    """
    payload = {**(data or {}), **fields}
    return ToolResponse(
        success=True,
        data=payload,
        error=None,
        meta=_meta(request_id, warnings, telemetry),
    )


def error_response(
    message: str,
    *,
    error_code: Union[ErrorCode, str] = ErrorCode.INTERNAL_ERROR,
    error_type: Union[ErrorType, str] = ErrorType.INTERNAL,
    remediation: Optional[str] = None,
    details: Optional[Mapping[str, Any]] = None,
    data: Optional[Mapping[str, Any]] = None,
    request_id: Optional[str] = None,
) -> ToolResponse:
    """Build a failure envelope.

    Example:
        >>> error_response(
        ...     "Package folder already exists: Packages/MyTool",
        ...     error_code=ErrorCode.CONFLICT,
        ...     error_type=ErrorType.CONFLICT,
        ...     remediation="Remove the folder or pick another package_name",
        ... )
    """
    payload: Dict[str, Any] = dict(data or {})
    payload["error_code"] = _code(error_code)
    payload["error_type"] = _code(error_type)
    if remediation is not None:
        payload["remediation"] = remediation
    if details:
        payload["details"] = dict(details)
    return ToolResponse(success=False, data=payload, error=message, meta=_meta(request_id))


def validation_error(
    message: str,
    *,
    field: Optional[str] = None,
    details: Optional[Mapping[str, Any]] = None,
    remediation: Optional[str] = None,
    request_id: Optional[str] = None,
) -> ToolResponse:
    """A VALIDATION_ERROR envelope; ``field`` is recorded in ``details``."""
    merged = dict(details or {})
    if field:
        merged.setdefault("field", field)
    return error_response(
        message,
        error_code=ErrorCode.VALIDATION_ERROR,
        error_type=ErrorType.VALIDATION,
        remediation=remediation,
        details=merged,
        request_id=request_id,
    )


def error_from_exception(
    exc: "PackageCreationError",
    *,
    request_id: Optional[str] = None,
) -> ToolResponse:
    """Map a ``PackageCreationError`` onto its envelope."""
    return error_response(
        str(exc),
        error_code=exc.error_code,
        error_type=exc.error_type,
        remediation=exc.remediation,
        details=exc.details,
        request_id=request_id,
    )


def internal_error(
    exc: BaseException,
    *,
    request_id: Optional[str] = None,
) -> ToolResponse:
    """An INTERNAL_ERROR envelope for a filesystem or unexpected failure."""
    remediation = "Check file permissions and free disk space, then re-run with --log-level DEBUG."
    request_id = request_id or get_correlation_id()
    if request_id:
        remediation += f" Reference: {request_id}"
    return error_response(
        f"{type(exc).__name__}: {exc}",
        error_code=ErrorCode.INTERNAL_ERROR,
        error_type=ErrorType.INTERNAL,
        remediation=remediation,
        request_id=request_id,
    )
