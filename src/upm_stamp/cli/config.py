"""CLI configuration.

Resolves the effective configuration and creator file for a CLI command,
leveraging the shared upm_stamp.config module.
"""

from pathlib import Path
from typing import Optional

from upm_stamp.config import StampConfig, get_config, set_config
from upm_stamp.core.creator_file import DEFAULT_CREATOR_FILENAME


class CLIContext:
    """CLI execution context with resolved configuration.

    Holds the effective configuration for a CLI command, including
    any overrides from command-line options.
    """

    def __init__(
        self,
        creator_file: Optional[str] = None,
        config: Optional[StampConfig] = None,
    ):
        """Initialize CLI context.

        Args:
            creator_file: Explicit creator file override from --creator.
            config: Optional config (uses global if not provided).
        """
        self._creator_file_override = creator_file
        self._config = config or get_config()

    @property
    def config(self) -> StampConfig:
        return self._config

    @property
    def creator_file(self) -> Optional[Path]:
        """Get the creator file to load, if any.

        Resolution order:
        1. CLI --creator option (highest priority)
        2. StampConfig.creator_file (from env/TOML)
        3. package-creator.toml in the working directory
        """
        if self._creator_file_override:
            return Path(self._creator_file_override)
        if self._config.creator_file:
            return self._config.creator_file
        default = Path(DEFAULT_CREATOR_FILENAME)
        if default.is_file():
            return default
        return None


def create_context(
    creator_file: Optional[str] = None,
    config_file: Optional[str] = None,
    log_level: Optional[str] = None,
) -> CLIContext:
    """Create a CLI context with optional overrides.

    Loads configuration, applies the log level override and configures
    logging for the command.
    """
    config = StampConfig.from_env(config_file) if config_file else get_config()
    if log_level:
        config.log_level = log_level.upper()
    set_config(config)
    config.setup_logging()
    return CLIContext(creator_file=creator_file, config=config)
