"""Exceptions raised while stamping a package from a template."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from upm_stamp.core.responses import ErrorCode, ErrorType

__all__ = [
    "PackageCreationError",
    "PackageNotReadyError",
    "InvalidDestinationError",
    "DestinationExistsError",
    "TemplateEmptyError",
    "RenameConflictError",
    "CreatorFileError",
    "CreatorFileNotFoundError",
]


class PackageCreationError(Exception):
    """Base exception for package creation.

    Attributes:
        error_code: Canonical error code surfaced in response envelopes
        error_type: Error category for routing
        remediation: Actionable guidance for resolving the error
        details: Machine-readable context
    """

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR
    error_type: ErrorType = ErrorType.INTERNAL
    default_remediation: Optional[str] = None

    def __init__(
        self,
        message: str,
        *,
        remediation: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(message)
        self.remediation = remediation or self.default_remediation
        self.details: Dict[str, Any] = dict(details) if details else {}


class PackageNotReadyError(PackageCreationError):
    """The creator is missing a template, destination or required property."""

    error_code = ErrorCode.VALIDATION_ERROR
    error_type = ErrorType.VALIDATION
    default_remediation = (
        "Run `upm-stamp package validate` to see which checks fail."
    )


class InvalidDestinationError(PackageCreationError):
    """The destination is not an existing folder."""

    error_code = ErrorCode.INVALID_DESTINATION
    error_type = ErrorType.VALIDATION
    default_remediation = "Point the destination at an existing folder."


class DestinationExistsError(PackageCreationError):
    """A package folder with the same name already exists at the destination."""

    error_code = ErrorCode.CONFLICT
    error_type = ErrorType.CONFLICT
    default_remediation = "Remove the existing folder or choose another package name."


class TemplateEmptyError(PackageCreationError):
    """The template folder has no child assets."""

    error_code = ErrorCode.TEMPLATE_EMPTY
    error_type = ErrorType.NOT_FOUND
    default_remediation = "Point the template source at a populated package skeleton."


class RenameConflictError(PackageCreationError):
    """Renaming a tokenized asset would overwrite an existing one."""

    error_code = ErrorCode.CONFLICT
    error_type = ErrorType.CONFLICT
    default_remediation = (
        "Make sure tokenized names in the template resolve to distinct names."
    )


class CreatorFileError(PackageCreationError):
    """The creator file is missing or malformed."""

    error_code = ErrorCode.INVALID_FORMAT
    error_type = ErrorType.VALIDATION
    default_remediation = "Run `upm-stamp creator init PATH` to write a fresh creator file."


class CreatorFileNotFoundError(CreatorFileError):
    """The creator file path does not exist."""

    error_code = ErrorCode.NOT_FOUND
    error_type = ErrorType.NOT_FOUND
