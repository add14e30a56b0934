"""upm-stamp - stamp out Unity packages from a template folder."""

from upm_stamp.config import StampConfig, get_config
from upm_stamp.core import (
    PackageCreator,
    PackageProperties,
    load_creator_file,
    replace_tokens,
)

__version__ = "0.1.0"

__all__ = [
    "StampConfig",
    "get_config",
    "PackageCreator",
    "PackageProperties",
    "load_creator_file",
    "replace_tokens",
]
