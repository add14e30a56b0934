"""upm-stamp CLI entry point.

JSON-only output, one envelope per command.
"""

import click

from upm_stamp.cli.config import create_context
from upm_stamp.cli.registry import register_all_commands


@click.group()
@click.option(
    "--config",
    "config_file",
    envvar="UPM_STAMP_CONFIG_FILE",
    type=click.Path(dir_okay=False),
    help="Path to an upm-stamp.toml config file.",
)
@click.option(
    "--creator",
    "creator_file",
    type=click.Path(dir_okay=False),
    help="Creator file holding template, destination and package properties.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Override the configured log level.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: str | None,
    creator_file: str | None,
    log_level: str | None,
) -> None:
    """upm-stamp - stamp out Unity packages from a template folder.

    All commands output JSON. Logs go to stderr.
    """
    ctx.ensure_object(dict)
    ctx.obj["cli_context"] = create_context(
        creator_file=creator_file,
        config_file=config_file,
        log_level=log_level,
    )


register_all_commands(cli)


if __name__ == "__main__":
    cli()
