"""Tests for the invoke-based command Runner."""

import io

import pytest
from invoke.exceptions import UnexpectedExit

from sandcheck.core.runner import Runner


def test_string_command():
    """A string command runs through the shell."""
    result = Runner().execute("echo 'Hello World'")

    assert result.exited == 0
    assert result.stdout.strip() == "Hello World"


def test_argv_command_is_quoted():
    """Argument lists are shell-quoted, so spaces stay in one argument."""
    result = Runner().execute(["printf", "%s|", "two words", "x"])

    assert result.stdout == "two words|x|"


def test_failure_raises_when_checked():
    """check=True turns a non-zero exit into an exception."""
    with pytest.raises(UnexpectedExit):
        Runner().execute("exit 3")


def test_failure_returns_result_when_unchecked():
    """check=False hands back the exit code instead of raising."""
    result = Runner().execute("exit 3", check=False)

    assert result.exited == 3


def test_capture_receives_both_streams():
    """stdout and stderr both land in the capture stream."""
    capture = io.StringIO()

    Runner().execute(
        "echo to-out; echo to-err >&2", capture=capture, check=False
    )

    text = capture.getvalue()
    assert "to-out" in text
    assert "to-err" in text


def test_nothing_echoed_without_capture(capsys):
    """Output is captured in the result, never echoed to our streams."""
    result = Runner().execute("echo quiet; echo quieter >&2")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""
    assert "quiet" in result.stdout
