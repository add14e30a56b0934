"""upm-stamp CLI module entry point.

Enables running the CLI via: python -m upm_stamp.cli
"""

from upm_stamp.cli.main import cli

if __name__ == "__main__":
    cli()
