"""CLI command groups."""

from upm_stamp.cli.commands.creator import creator_group
from upm_stamp.cli.commands.package import package_group

__all__ = [
    "creator_group",
    "package_group",
]
