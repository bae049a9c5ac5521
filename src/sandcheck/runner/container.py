"""Container runtime invocation for isolated checks."""

import shlex
from pathlib import Path
from typing import IO

from invoke.exceptions import Failure, ThreadException

from sandcheck.core.config import CheckConfig
from sandcheck.core.errors import ExecutionLaunchFailure
from sandcheck.core.log import logger
from sandcheck.core.runner import Runner


class ContainerRuntime:
    """Runs the configured check command in a disposable container."""

    def __init__(self, config: CheckConfig, runner: Runner | None = None):
        """Initialize container runtime.

        Args:
            config: Image, mount and command settings
            runner: Command runner (a fresh Runner if None)
        """
        self.config = config
        self.runner = runner or Runner()

    def command_for(self, source: Path) -> list[str]:
        """Build the runtime argv that checks source.

        Args:
            source: Canonical host path to bind-mount

        Returns:
            Argument list starting with the runtime executable
        """
        config = self.config
        argv = [config.runtime, "run"]
        if config.remove:
            argv.append("--rm")
        argv += [
            "-v", f"{source}:{config.mount_path}",
            "-w", config.container_workdir,
            config.image,
        ]
        argv += config.command
        return argv

    def run(self, source: Path, sink: IO[str]) -> int:
        """Run the check against source, streaming output into sink.

        Args:
            source: Canonical host path of the project
            sink: Text stream receiving combined stdout/stderr

        Returns:
            Exit code of the runtime process

        Raises:
            ExecutionLaunchFailure: If the process could not be started
                or its output could not be collected
        """
        argv = self.command_for(source)
        command = shlex.join(argv)

        try:
            result = self.runner.execute(argv, capture=sink, check=False)
        except (Failure, ThreadException, OSError) as e:
            raise ExecutionLaunchFailure(command, str(e) or type(e).__name__) from e

        logger.debug("Container exited", command=command, exit_code=result.exited)
        return result.exited
