"""Creator file commands for the upm-stamp CLI."""

from pathlib import Path
from typing import Optional

import click

from upm_stamp.cli.logging import cli_command, get_cli_logger
from upm_stamp.cli.output import emit_error, emit_exception, emit_success
from upm_stamp.cli.registry import get_context
from upm_stamp.core.creator_file import (
    DEFAULT_CREATOR_FILENAME,
    load_creator_file,
    render_creator_template,
)
from upm_stamp.core.errors import PackageCreationError

logger = get_cli_logger()


@click.group("creator")
def creator_group() -> None:
    """Manage creator files."""
    pass


@creator_group.command("init")
@click.argument(
    "path",
    required=False,
    default=DEFAULT_CREATOR_FILENAME,
    type=click.Path(dir_okay=False),
)
@click.option("--template", "template_source", default="", help="Template folder to record.")
@click.option("--destination", default="", help="Destination folder to record.")
@click.option("--force", is_flag=True, help="Overwrite an existing file.")
@click.pass_context
@cli_command("creator.init")
def creator_init_cmd(
    ctx: click.Context,
    path: str,
    template_source: str,
    destination: str,
    force: bool,
) -> None:
    """Write a blank creator file to PATH (default: package-creator.toml)."""
    target = Path(path)
    if target.exists() and not force:
        emit_error(
            f"Creator file already exists: {target}",
            code="CONFLICT",
            error_type="conflict",
            remediation="Pass --force to overwrite it.",
            details={"path": str(target)},
        )

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(
        render_creator_template(template_source=template_source, destination=destination),
        encoding="utf-8",
    )
    logger.info("Wrote creator file", path=str(target))

    emit_success({"path": str(target), "overwritten": force})


@creator_group.command("show")
@click.argument("path", required=False, type=click.Path(dir_okay=False))
@click.pass_context
@cli_command("creator.show")
def creator_show_cmd(ctx: click.Context, path: Optional[str]) -> None:
    """Show a creator file's settings and whether it is ready."""
    cli_ctx = get_context(ctx)
    creator_path = Path(path) if path else cli_ctx.creator_file
    if creator_path is None:
        emit_error(
            "No creator file given",
            code="MISSING_REQUIRED",
            error_type="validation",
            remediation="Pass PATH, use --creator or run `upm-stamp creator init`.",
        )

    try:
        creator = load_creator_file(creator_path, cli_ctx.config)
    except PackageCreationError as exc:
        emit_exception(exc)

    emit_success(
        {
            "path": str(creator_path),
            "template_source": str(creator.template_source) if creator.template_source else None,
            "destination": str(creator.destination) if creator.destination else None,
            "regenerate_guids": creator.regenerate_guids,
            "package": creator.properties.to_dict(),
            "readiness": creator.readiness().to_dict(),
        }
    )
