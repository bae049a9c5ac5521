#!/usr/bin/env python3
"""sandcheck CLI - compile-check a project inside a pinned container."""

import sys

from pydantic import Field
from pydantic_settings import CliApp, CliPositionalArg, SettingsConfigDict

from sandcheck.core.config import State
from sandcheck.core.errors import InvalidTarget
from sandcheck.core.log import logger
from sandcheck.core.yaml_settings import cli_arguments
from sandcheck.runner.check import CheckRunner


class CliState(State):
    """Run the toolchain's check step for a project in a disposable,
    version-pinned container.

    Prints nothing and exits 0 when the check passes. When it fails,
    prints the compiler output verbatim and exits non-zero (2 if the
    path is not a directory).

    Configuration sources (in priority order):
    1. Command-line arguments (--config.check.image rust:1.80.0)
    2. Environment variables
       (SANDCHECK_CONFIG__CHECK__IMAGE=rust:1.80.0)
    3. .env file
    4. --include files, sandcheck.yaml in the current directory,
       user config, package defaults
    """

    target: CliPositionalArg[str] = Field(
        description="Path to the project directory to check"
    )

    model_config = SettingsConfigDict(cli_prog_name="sandcheck")

    def cli_cmd(self):
        """Run the check and exit with its status."""
        with logger:
            try:
                exit_code = CheckRunner(self.config.check).run(self.target)
            except InvalidTarget as e:
                logger.error(
                    "Invalid target", target=e.target, reason=e.reason
                )
                exit_code = e.exit_code
        raise SystemExit(exit_code)


def main(argv: list[str] | None = None):
    """Main entry point for CLI."""
    args = sys.argv[1:] if argv is None else argv
    with cli_arguments(args):
        CliApp.run(CliState, cli_args=args)


if __name__ == "__main__":
    main()
