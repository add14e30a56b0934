"""Core package-stamping logic shared by the CLI and the MCP server."""

from upm_stamp.core.creator_file import (
    build_creator,
    load_creator_file,
    render_creator_template,
    resolve_creator,
)
from upm_stamp.core.errors import (
    CreatorFileError,
    CreatorFileNotFoundError,
    DestinationExistsError,
    InvalidDestinationError,
    PackageCreationError,
    PackageNotReadyError,
    RenameConflictError,
    TemplateEmptyError,
)
from upm_stamp.core.properties import PackageProperties
from upm_stamp.core.template import (
    CreationResult,
    PackageCreator,
    PackagePlan,
    ReadinessReport,
)
from upm_stamp.core.tokens import replace_tokens, token_map

__all__ = [
    "PackageProperties",
    "PackageCreator",
    "ReadinessReport",
    "PackagePlan",
    "CreationResult",
    "replace_tokens",
    "token_map",
    "build_creator",
    "load_creator_file",
    "resolve_creator",
    "render_creator_template",
    "PackageCreationError",
    "PackageNotReadyError",
    "InvalidDestinationError",
    "DestinationExistsError",
    "TemplateEmptyError",
    "RenameConflictError",
    "CreatorFileError",
    "CreatorFileNotFoundError",
]
