"""Result type for a single check execution."""

from pathlib import Path

from pydantic import BaseModel

from sandcheck.core.errors import CheckFailure


class ExecutionRecord(BaseModel):
    """Exit status and combined output of one isolated check run."""

    target: Path
    exit_code: int
    output: str = ""

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    @property
    def status_code(self) -> int:
        """Exit code to propagate to the invoking process.

        Mirrors the inner exit code when it is a valid process status,
        otherwise collapses to 1 so a failure can never read as 0.
        """
        if self.success:
            return 0
        if 0 < self.exit_code < 256:
            return self.exit_code
        return 1

    def raise_for_status(self) -> "ExecutionRecord":
        """Raise CheckFailure unless the check succeeded."""
        if not self.success:
            raise CheckFailure(self)
        return self
