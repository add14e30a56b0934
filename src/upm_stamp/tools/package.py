"""Unified package tool with action routing.

Actions:
    create    Copy the template and replace tokens in the copy
    plan      Describe what create would do, without writing
    validate  Report readiness checks
    tokens    List tokens and their resolved values
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from mcp.server.fastmcp import FastMCP

from upm_stamp.config import StampConfig
from upm_stamp.core.creator_file import resolve_creator
from upm_stamp.core.errors import PackageCreationError
from upm_stamp.core.naming import canonical_tool
from upm_stamp.core.properties import PackageProperties
from upm_stamp.core.responses import (
    ToolResponse,
    error_from_exception,
    internal_error,
    success_response,
    validation_error,
)
from upm_stamp.core.template import PackageCreator
from upm_stamp.core.tokens import token_map

logger = logging.getLogger(__name__)


def _handle_create(creator: PackageCreator) -> ToolResponse:
    result = creator.create_package()
    return success_response(
        result.to_dict(),
        warnings=result.warnings or None,
        telemetry={"duration_ms": result.duration_ms},
    )


def _handle_plan(creator: PackageCreator) -> ToolResponse:
    plan = creator.plan_package()
    return success_response(
        {"dry_run": True, **plan.to_dict()},
        warnings=plan.warnings or None,
    )


def _handle_validate(creator: PackageCreator) -> ToolResponse:
    report = creator.readiness()
    package_root = creator.package_root
    return success_response(
        report.to_dict(),
        package_root=str(package_root) if package_root else None,
    )


def _handle_tokens(creator: PackageCreator) -> ToolResponse:
    properties = creator.properties
    return success_response(
        package_id=properties.package_id,
        package_namespace=properties.package_namespace,
        tokens=[{"token": token, "value": value} for token, value in token_map(properties)],
        required=PackageProperties.required_field_names(),
    )


_ACTIONS: Dict[str, Callable[[PackageCreator], ToolResponse]] = {
    "create": _handle_create,
    "plan": _handle_plan,
    "validate": _handle_validate,
    "tokens": _handle_tokens,
}


def _dispatch_package_action(
    *,
    action: str,
    config: StampConfig,
    creator_file: Optional[str] = None,
    template_source: Optional[str] = None,
    destination: Optional[str] = None,
    properties: Optional[Dict[str, Any]] = None,
    regenerate_guids: Optional[bool] = None,
) -> Dict[str, Any]:
    handler = _ACTIONS.get(action)
    if handler is None:
        return asdict(
            validation_error(
                f"Unsupported package action: {action}",
                field="action",
                details={"allowed": sorted(_ACTIONS)},
                remediation=f"Use one of: {', '.join(sorted(_ACTIONS))}",
            )
        )

    unknown = [key for key in properties or {} if PackageProperties.resolve_key(key) is None]
    if unknown:
        return asdict(
            validation_error(
                f"Unknown package properties: {', '.join(unknown)}",
                field="properties",
                details={"unknown": unknown, "known": PackageProperties.field_names()},
            )
        )

    try:
        creator = resolve_creator(
            creator_file=Path(creator_file) if creator_file else None,
            template_source=Path(template_source) if template_source else None,
            destination=Path(destination) if destination else None,
            overrides=properties,
            regenerate_guids=regenerate_guids,
            config=config,
        )
        response = handler(creator)
    except PackageCreationError as exc:
        response = error_from_exception(exc)
    except OSError as exc:
        logger.exception("package %s hit a filesystem error", action)
        response = internal_error(exc)

    return asdict(response)


def register_package_tool(mcp: FastMCP, config: StampConfig) -> None:
    """Register the consolidated package tool."""

    @canonical_tool(mcp, canonical_name="package")
    def package(
        action: str,
        creator_file: Optional[str] = None,
        template_source: Optional[str] = None,
        destination: Optional[str] = None,
        properties: Optional[Dict[str, Any]] = None,
        regenerate_guids: Optional[bool] = None,
    ) -> dict:
        """Create Unity packages from a template folder.

        Args:
            action: One of create, plan, validate, tokens.
            creator_file: Path to a creator TOML file.
            template_source: Template folder (overrides the creator file).
            destination: Destination folder (overrides the creator file).
            properties: Package properties to set, e.g. {"package_name": "MyTool"}.
            regenerate_guids: Give copied .meta files fresh GUIDs.
        """
        return _dispatch_package_action(
            action=action,
            config=config,
            creator_file=creator_file,
            template_source=template_source,
            destination=destination,
            properties=properties,
            regenerate_guids=regenerate_guids,
        )

    logger.debug("Registered package tool")


__all__ = [
    "register_package_tool",
]
