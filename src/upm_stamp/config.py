"""
Settings for upm-stamp, read in three layers. Each layer overrides the
one before it:

1. Built-in defaults
2. A TOML file: ``--config``/``UPM_STAMP_CONFIG_FILE``, else ``upm-stamp.toml``
   or ``.upm-stamp.toml`` in the working directory
3. ``UPM_STAMP_*`` environment variables

Environment variables:
- UPM_STAMP_CONFIG_FILE: TOML file to read instead of the defaults above
- UPM_STAMP_LOG_LEVEL: DEBUG, INFO, WARNING or ERROR
- UPM_STAMP_STRUCTURED_LOGGING: true for JSON log lines on stderr
- UPM_STAMP_TOKENIZABLE_SUFFIXES: comma list of extensions whose contents get tokens replaced
- UPM_STAMP_REGENERATE_GUIDS: true/false, fresh GUIDs for copied .meta files
- UPM_STAMP_IGNORE_NAMES: comma list of file/folder names never copied
- UPM_STAMP_CREATOR_FILE: creator file used when none is passed explicitly
"""

import logging
import os
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError, version as get_package_version
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from upm_stamp.core.logging_config import configure_logging
from upm_stamp.core.template import DEFAULT_IGNORE_NAMES
from upm_stamp.core.tokens import DEFAULT_TOKENIZABLE_SUFFIXES

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILES = ("upm-stamp.toml", ".upm-stamp.toml")


def _get_version() -> str:
    try:
        return get_package_version("upm-stamp")
    except PackageNotFoundError:
        return "0.1.0"  # running from a source checkout


_PACKAGE_VERSION = _get_version()


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes", "on")


def _parse_list(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        items = value
    else:
        items = str(value).split(",")
    return [str(item).strip() for item in items if str(item).strip()]


@dataclass
class TemplateSettings:
    """How template files are copied and rewritten.

    Attributes:
        tokenizable_suffixes: Extensions whose file contents go through token replacement
        regenerate_guids: Assign fresh GUIDs to copied .meta files
        ignore_names: File and folder name globs skipped while planning and copying
    """

    tokenizable_suffixes: List[str] = field(
        default_factory=lambda: list(DEFAULT_TOKENIZABLE_SUFFIXES)
    )
    regenerate_guids: bool = True
    ignore_names: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_NAMES))

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "TemplateSettings":
        """Build settings from the `[template]` table."""
        defaults = cls()
        return cls(
            tokenizable_suffixes=_parse_list(
                data.get("tokenizable_suffixes", defaults.tokenizable_suffixes)
            ),
            regenerate_guids=_parse_bool(data.get("regenerate_guids", True)),
            ignore_names=_parse_list(data.get("ignore_names", defaults.ignore_names)),
        )


@dataclass
class StampConfig:
    """Effective settings for one CLI run or server process."""

    log_level: str = "INFO"
    structured_logging: bool = False

    # Template handling
    template: TemplateSettings = field(default_factory=TemplateSettings)

    # Default creator file
    creator_file: Optional[Path] = None

    # MCP server identity
    server_name: str = "upm-stamp"
    server_version: str = field(default_factory=lambda: _PACKAGE_VERSION)

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "StampConfig":
        """Layer defaults, the TOML file and the environment, in that order."""
        config = cls()

        toml_path = config_file or os.environ.get("UPM_STAMP_CONFIG_FILE")
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            for default_path in DEFAULT_CONFIG_FILES:
                if Path(default_path).exists():
                    config._load_toml(Path(default_path))
                    break

        config._apply_env()
        return config

    def _load_toml(self, path: Path) -> None:
        """Apply the `[logging]`, `[template]`, `[creator]` and `[server]` tables."""
        if not path.is_file():
            logger.warning(f"Config file not found: {path}")
            return

        try:
            with open(path, "rb") as handle:
                data = tomllib.load(handle)

            logging_table = data.get("logging", {})
            self.log_level = str(logging_table.get("level", self.log_level)).upper()
            if "structured" in logging_table:
                self.structured_logging = _parse_bool(logging_table["structured"])

            if "template" in data:
                self.template = TemplateSettings.from_toml_dict(data["template"])

            creator_file = data.get("creator", {}).get("file")
            if creator_file:
                # Relative to the config file, not the working directory.
                self.creator_file = (path.parent / creator_file).resolve()

            server_table = data.get("server", {})
            self.server_name = server_table.get("name", self.server_name)
            self.server_version = server_table.get("version", self.server_version)

        except (OSError, tomllib.TOMLDecodeError, AttributeError, TypeError, ValueError) as e:
            logger.error(f"Error loading config file {path}: {e}")

    def _apply_env(self) -> None:
        env = os.environ
        if env.get("UPM_STAMP_LOG_LEVEL"):
            self.log_level = env["UPM_STAMP_LOG_LEVEL"].upper()
        if env.get("UPM_STAMP_STRUCTURED_LOGGING"):
            self.structured_logging = _parse_bool(env["UPM_STAMP_STRUCTURED_LOGGING"])
        if env.get("UPM_STAMP_TOKENIZABLE_SUFFIXES"):
            self.template.tokenizable_suffixes = _parse_list(env["UPM_STAMP_TOKENIZABLE_SUFFIXES"])
        if env.get("UPM_STAMP_REGENERATE_GUIDS"):
            self.template.regenerate_guids = _parse_bool(env["UPM_STAMP_REGENERATE_GUIDS"])
        if env.get("UPM_STAMP_IGNORE_NAMES"):
            self.template.ignore_names = _parse_list(env["UPM_STAMP_IGNORE_NAMES"])
        if env.get("UPM_STAMP_CREATOR_FILE"):
            self.creator_file = Path(env["UPM_STAMP_CREATOR_FILE"])

    def setup_logging(self) -> None:
        """Install the log handler for this process."""
        configure_logging(
            level=self.log_level,
            format="structured" if self.structured_logging else "human",
        )


_config: Optional[StampConfig] = None


def get_config() -> StampConfig:
    """Return the process-wide config, loading it on first use."""
    global _config
    if _config is None:
        _config = StampConfig.from_env()
    return _config


def set_config(config: Optional[StampConfig]) -> None:
    """Replace the process-wide config; None forces a reload on next use."""
    global _config
    _config = config
