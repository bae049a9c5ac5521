"""Check runner: validate a project, check it in a container, report."""

import sys
from pathlib import Path
from typing import TextIO

from sandcheck.core.capture import capture_sink, read_sink
from sandcheck.core.config import CheckConfig
from sandcheck.core.errors import ExecutionLaunchFailure
from sandcheck.core.log import logger
from sandcheck.core.result import ExecutionRecord
from sandcheck.core.target import resolve_target
from sandcheck.runner.container import ContainerRuntime


class CheckRunner:
    """Run the compiler check for one project and surface failures."""

    def __init__(
        self,
        config: CheckConfig | None = None,
        runtime: ContainerRuntime | None = None,
    ):
        """Initialize check runner.

        Args:
            config: Check settings (defaults if None)
            runtime: Container runtime (built from config if None)
        """
        self.config = config or CheckConfig()
        self.runtime = runtime or ContainerRuntime(self.config)

    def execute(self, target: str | Path) -> ExecutionRecord:
        """Check target in an isolated container and capture its output.

        Nothing is printed. The capture file exists only for the
        duration of the container run.

        Args:
            target: Path to the project directory

        Returns:
            ExecutionRecord with the exit code and combined output

        Raises:
            InvalidTarget: If target is not an existing directory;
                raised before anything is launched
            ExecutionLaunchFailure: If the container runtime could not
                be run; carries any output captured before the failure
        """
        source = resolve_target(target)
        logger.debug("Resolved target", target=str(target), source=str(source))

        with capture_sink(self.config.capture_dir) as sink:
            with logger.span("Checking {source}", source=str(source)):
                try:
                    exit_code = self.runtime.run(source, sink)
                except ExecutionLaunchFailure as e:
                    e.output = read_sink(sink)
                    raise
            output = read_sink(sink)

        record = ExecutionRecord(target=source, exit_code=exit_code, output=output)
        logger.info(
            "Check finished",
            source=str(source),
            exit_code=record.exit_code,
            success=record.success,
        )
        return record

    def run(self, target: str | Path, out: TextIO | None = None) -> int:
        """Check target, print the transcript on failure, return exit code.

        Success is silent even if the check produced output.

        Args:
            target: Path to the project directory
            out: Stream for the failure transcript (stdout if None)

        Returns:
            0 on success, otherwise a non-zero exit code

        Raises:
            InvalidTarget: If target is not an existing directory
        """
        out = out or sys.stdout

        try:
            record = self.execute(target)
        except ExecutionLaunchFailure as e:
            logger.error("Could not run check", command=e.command, reason=e.reason)
            self._emit(e.output, out)
            return e.exit_code

        if not record.success:
            self._emit(record.output, out)
        return record.status_code

    def check(self, target: str | Path) -> ExecutionRecord:
        """Like execute(), but raise CheckFailure if the check failed."""
        return self.execute(target).raise_for_status()

    def diagnostics(self, target: str | Path) -> str | None:
        """Return the check transcript if it failed, None if it passed."""
        record = self.execute(target)
        return None if record.success else record.output

    @staticmethod
    def _emit(text: str, out: TextIO) -> None:
        if text:
            out.write(text)
            out.flush()
