"""FastMCP server for upm-stamp.

Serves the `package` tool over stdio so an assistant can validate, plan
and create packages the same way the CLI does. Logs go to stderr; stdout
belongs to the protocol.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from mcp.server.fastmcp import FastMCP

from upm_stamp.config import StampConfig, get_config
from upm_stamp.tools import register_tools

logger = logging.getLogger(__name__)

SERVER_INSTRUCTIONS = """\
Stamp out Unity packages from a template folder.

Call `package` with action="validate" first to see which properties are
missing, action="plan" to preview renames and rewritten files, then
action="create". Pass a creator file path, or template_source,
destination and properties inline.
"""


def create_server(config: Optional[StampConfig] = None) -> FastMCP:
    """Build the server with logging set up from ``config``."""
    config = config or get_config()
    config.setup_logging()

    mcp = FastMCP(name=config.server_name, instructions=SERVER_INSTRUCTIONS)
    register_tools(mcp, config)

    logger.info(
        "Server ready: %s v%s (creator file: %s)",
        config.server_name,
        config.server_version,
        config.creator_file or "none",
    )
    return mcp


def main() -> None:
    """Console entry point for `upm-stamp-mcp`."""
    try:
        create_server().run()
    except KeyboardInterrupt:
        logger.info("Server stopped")
        sys.exit(0)
    except Exception:
        logger.exception("Server crashed")
        sys.exit(1)


if __name__ == "__main__":
    main()
