"""Pytest configuration and fixtures for sandcheck tests."""

import os
import shlex
import tempfile
from dataclasses import dataclass
from pathlib import Path

import pytest

from sandcheck.core import log
from sandcheck.core.config import CheckConfig
from sandcheck.core.log import ConsoleSink, setup_logger

TEST_LOG_ROOT = Path(tempfile.gettempdir()) / "sandcheck-tests"


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Configure console-free logging for the test session.

    Console output would land in captured stdout/stderr and get in
    the way of asserting on the check transcript.
    """
    return setup_logger(
        log_root=TEST_LOG_ROOT,
        level="debug",
        console=ConsoleSink(enabled=False),
    )


@pytest.fixture(autouse=True)
def restore_logging(configure_logging):
    """Reinstall the session logger after tests that replace it.

    State() installs its configured logger globally, and that logger
    writes to whatever sys.stderr was at the time, possibly a capture
    buffer that is closed once the test ends.
    """
    yield
    if log._current_logger is not configure_logging:
        log.use_logger(configure_logging, TEST_LOG_ROOT)


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Keep config loading away from the real user and project files."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "xdg-state"))
    for name in list(os.environ):
        if name.startswith("SANDCHECK_"):
            monkeypatch.delenv(name)
    return tmp_path


@pytest.fixture
def project(tmp_path):
    """An empty project directory to check."""
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def capture_dir(tmp_path):
    """Directory that receives capture files, so leftovers are visible."""
    path = tmp_path / "capture"
    path.mkdir()
    return path


@dataclass
class StubRuntime:
    """A fake container runtime executable and its call log."""

    path: Path
    calls_file: Path

    @property
    def calls(self) -> list[list[str]]:
        """Argument lists of every invocation so far."""
        if not self.calls_file.exists():
            return []
        return [
            line.split() for line in self.calls_file.read_text().splitlines()
        ]

    def config(self, capture_dir: Path | None = None) -> CheckConfig:
        return CheckConfig(runtime=str(self.path), capture_dir=capture_dir)


@pytest.fixture
def stub_runtime(tmp_path):
    """Factory for stub runtimes with a canned exit code and output.

    The stub appends its arguments to a call log, prints the output
    without a trailing newline, and exits with the given code.
    """
    def make(exit_code=0, output="", stream="stdout"):
        calls_file = tmp_path / "runtime-calls.log"
        script = tmp_path / "fake-runtime"
        redirect = " >&2" if stream == "stderr" else ""
        script.write_text(
            "#!/bin/sh\n"
            f'printf "%s\\n" "$*" >> {shlex.quote(str(calls_file))}\n'
            f"printf '%s' {shlex.quote(output)}{redirect}\n"
            f"exit {exit_code}\n"
        )
        script.chmod(0o755)
        return StubRuntime(path=script, calls_file=calls_file)

    return make
