"""Package commands for the upm-stamp CLI.

Provides create, plan, validate and tokens commands. Every command reads
the creator file (if any) and applies command-line overrides on top.
"""

from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar

import click

from upm_stamp.cli.logging import cli_command, get_cli_logger
from upm_stamp.cli.output import emit_error, emit_exception, emit_success
from upm_stamp.cli.registry import get_context
from upm_stamp.cli.resilience import handle_keyboard_interrupt
from upm_stamp.core.creator_file import resolve_creator
from upm_stamp.core.errors import PackageCreationError
from upm_stamp.core.properties import PackageProperties
from upm_stamp.core.template import PackageCreator
from upm_stamp.core.tokens import token_map

logger = get_cli_logger()

T = TypeVar("T")


def _parse_assignments(values: Tuple[str, ...]) -> Dict[str, str]:
    """Parse repeated KEY=VALUE options into a dict."""
    overrides: Dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            emit_error(
                f"Invalid --set value: {item!r}",
                code="INVALID_FORMAT",
                error_type="validation",
                remediation="Use --set key=value, e.g. --set package_name=MyTool",
            )
        if PackageProperties.resolve_key(key) is None:
            emit_error(
                f"Unknown package property: {key}",
                code="VALIDATION_ERROR",
                error_type="validation",
                remediation="Run `upm-stamp package tokens` to list property names.",
                details={"field": key, "known": PackageProperties.field_names()},
            )
        overrides[key] = value
    return overrides


def creator_options(func: Callable[..., T]) -> Callable[..., T]:
    """Attach the shared --template/--destination/--set/--guids options."""
    options = [
        click.option(
            "--template",
            "template_source",
            type=click.Path(file_okay=False),
            help="Template folder to copy (overrides the creator file).",
        ),
        click.option(
            "--destination",
            type=click.Path(file_okay=False),
            help="Folder the new package is created in (overrides the creator file).",
        ),
        click.option(
            "--set",
            "assignments",
            multiple=True,
            metavar="KEY=VALUE",
            help="Set a package property, e.g. --set package_name=MyTool. Repeatable.",
        ),
        click.option(
            "--guids/--no-guids",
            "regenerate_guids",
            default=None,
            help="Give copied .meta files fresh GUIDs (default from config).",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _load_creator(
    ctx: click.Context,
    template_source: Optional[str],
    destination: Optional[str],
    assignments: Tuple[str, ...],
    regenerate_guids: Optional[bool],
) -> PackageCreator:
    cli_ctx = get_context(ctx)
    overrides = _parse_assignments(assignments)
    try:
        return resolve_creator(
            creator_file=cli_ctx.creator_file,
            template_source=Path(template_source) if template_source else None,
            destination=Path(destination) if destination else None,
            overrides=overrides,
            regenerate_guids=regenerate_guids,
            config=cli_ctx.config,
        )
    except PackageCreationError as exc:
        emit_exception(exc)


def _with_creator(func: Callable[..., Any]) -> Callable[..., Any]:
    """Resolve the creator from shared options and pass it on."""

    @wraps(func)
    def wrapper(
        ctx: click.Context,
        template_source: Optional[str],
        destination: Optional[str],
        assignments: Tuple[str, ...],
        regenerate_guids: Optional[bool],
        **kwargs: Any,
    ) -> Any:
        creator = _load_creator(
            ctx, template_source, destination, assignments, regenerate_guids
        )
        return func(ctx, creator, **kwargs)

    return wrapper


@click.group("package")
def package_group() -> None:
    """Create packages from a template folder."""
    pass


@package_group.command("create")
@creator_options
@click.pass_context
@cli_command("package.create")
@handle_keyboard_interrupt("package.create")
@_with_creator
def package_create_cmd(ctx: click.Context, creator: PackageCreator) -> None:
    """Copy the template and replace tokens in the copy.

    The new package lands in DESTINATION/PACKAGE_NAME.
    """
    try:
        result = creator.create_package()
    except (PackageCreationError, OSError) as exc:
        logger.error("Package creation failed", error=str(exc))
        emit_exception(exc)

    emit_success(
        result.to_dict(),
        warnings=result.warnings or None,
        telemetry={"duration_ms": result.duration_ms},
    )


@package_group.command("plan")
@creator_options
@click.pass_context
@cli_command("package.plan")
@handle_keyboard_interrupt("package.plan")
@_with_creator
def package_plan_cmd(ctx: click.Context, creator: PackageCreator) -> None:
    """Show what `package create` would do without writing anything."""
    try:
        plan = creator.plan_package()
    except (PackageCreationError, OSError) as exc:
        emit_exception(exc)

    emit_success(
        {"dry_run": True, **plan.to_dict()},
        warnings=plan.warnings or None,
    )


@package_group.command("validate")
@creator_options
@click.option(
    "--strict",
    is_flag=True,
    help="Exit with an error when the creator is not ready.",
)
@click.pass_context
@cli_command("package.validate")
@_with_creator
def package_validate_cmd(
    ctx: click.Context,
    creator: PackageCreator,
    strict: bool,
) -> None:
    """Check whether a package can be created.

    Reports the template, destination and property checks.
    """
    report = creator.readiness()
    if strict and not report.is_ready:
        emit_error(
            "Creator is not ready: " + "; ".join(report.reasons),
            code="VALIDATION_ERROR",
            error_type="validation",
            remediation="Fill in the missing values in the creator file or pass --set.",
            details=report.to_dict(),
        )

    emit_success(
        {
            **report.to_dict(),
            "template_source": str(creator.template_source) if creator.template_source else None,
            "destination": str(creator.destination) if creator.destination else None,
            "package_root": str(creator.package_root) if creator.package_root else None,
        }
    )


@package_group.command("tokens")
@creator_options
@click.pass_context
@cli_command("package.tokens")
@_with_creator
def package_tokens_cmd(ctx: click.Context, creator: PackageCreator) -> None:
    """List every token and the value it resolves to."""
    properties = creator.properties
    emit_success(
        {
            "package_id": properties.package_id,
            "package_namespace": properties.package_namespace,
            "tokens": [
                {"token": token, "value": value} for token, value in token_map(properties)
            ],
            "properties": PackageProperties.field_names(),
            "required": PackageProperties.required_field_names(),
            "tokenizable_suffixes": list(creator.tokenizable_suffixes),
        }
    )
