"""sandcheck - sandboxed compile-check gate for projects."""

from sandcheck.core.errors import (
    CheckFailure,
    ExecutionLaunchFailure,
    InvalidTarget,
    SandcheckError,
)
from sandcheck.core.result import ExecutionRecord
from sandcheck.runner.check import CheckRunner

__all__ = [
    "CheckRunner",
    "ExecutionRecord",
    "SandcheckError",
    "InvalidTarget",
    "ExecutionLaunchFailure",
    "CheckFailure",
]
