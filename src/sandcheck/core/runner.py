"""Command execution using the invoke library."""

import shlex
from typing import IO

from invoke import Context, Result

from sandcheck.core.log import logger


class Runner(Context):
    """Wrapper around invoke.Context with a single execute() entry point.

    Uses a separate method name so invoke's own run() stays untouched.
    """

    def execute(
        self,
        command: str | list[str],
        capture: IO[str] | None = None,
        check: bool = True,
    ) -> Result:
        """Execute a command and wait for it to finish.

        Args:
            command: Command string, or argv list that is shell-quoted
                before execution
            capture: Text stream that receives stdout and stderr
                interleaved as they arrive
            check: If True, raise on non-zero exit code

        Returns:
            invoke.Result with stdout, stderr, exited (return code)

        Raises:
            invoke.UnexpectedExit: If check=True and command returns
                non-zero
        """
        if not isinstance(command, str):
            command = shlex.join(command)

        kwargs = {
            "hide": True,  # Never echo to our own stdout/stderr
            "warn": not check,
            "in_stream": False,
        }

        # An explicit stream overrides hide for that stream
        if capture is not None:
            kwargs["out_stream"] = capture
            kwargs["err_stream"] = capture

        logger.debug("Executing command", command=command)
        return self.run(command, **kwargs)
