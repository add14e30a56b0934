"""Wires the command groups onto the root `upm-stamp` group."""

import click

from upm_stamp.cli.config import CLIContext


def get_context(ctx: click.Context) -> CLIContext:
    """Return the CLIContext the root group stored on ``ctx``."""
    return ctx.find_root().obj["cli_context"]


def register_all_commands(cli: click.Group) -> None:
    # Imported here because the command modules import this one.
    from upm_stamp.cli.commands import creator_group, package_group
    from upm_stamp.cli.output import emit_success

    for group in (package_group, creator_group):
        cli.add_command(group)

    @cli.command("version")
    @click.pass_context
    def version(ctx: click.Context) -> None:
        """Print the upm-stamp version and active creator file."""
        cli_ctx = get_context(ctx)
        emit_success(
            {
                "name": "upm-stamp",
                "version": cli_ctx.config.server_version,
                "json_only": True,
                "creator_file": str(cli_ctx.creator_file) if cli_ctx.creator_file else None,
            }
        )
