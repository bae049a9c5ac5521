"""Exception hierarchy for sandcheck.

Every error carries the process exit code it maps to, so the CLI can
terminate with it directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sandcheck.core.result import ExecutionRecord


class SandcheckError(Exception):
    """Base exception for all sandcheck errors."""

    exit_code = 1


class InvalidTarget(SandcheckError):
    """The target path is empty, missing, or not a directory."""

    exit_code = 2

    def __init__(self, target: str, reason: str):
        self.target = target
        self.reason = reason
        super().__init__(f"{target!r}: {reason}")


class ExecutionLaunchFailure(SandcheckError):
    """The container runtime could not be started or streamed.

    ``output`` holds whatever was captured before the failure, which
    may be nothing.
    """

    exit_code = 125

    def __init__(self, command: str, reason: str, output: str = ""):
        self.command = command
        self.reason = reason
        self.output = output
        super().__init__(f"failed to run {command!r}: {reason}")


class CheckFailure(SandcheckError):
    """The check command ran and exited non-zero."""

    def __init__(self, record: ExecutionRecord):
        self.record = record
        self.exit_code = record.status_code
        super().__init__(
            f"check of {record.target} failed with exit code "
            f"{record.exit_code}"
        )


__all__ = [
    "SandcheckError",
    "InvalidTarget",
    "ExecutionLaunchFailure",
    "CheckFailure",
]
