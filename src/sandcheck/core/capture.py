"""Temporary capture sink for combined process output."""

import contextlib
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import IO

from sandcheck.core.log import logger


@contextlib.contextmanager
def capture_sink(directory: Path | None = None) -> Iterator[IO[str]]:
    """Open a uniquely named temporary file for one run's output.

    The file is deleted when the block exits, whether it exits
    normally or by exception. Line endings are stored and read back
    untranslated.

    Args:
        directory: Where to create the file (system temp dir if None)

    Yields:
        Text file object open for reading and writing
    """
    if directory is not None:
        directory.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w+",
        encoding="utf-8",
        newline="",
        prefix="sandcheck-",
        suffix=".log",
        dir=directory,
    ) as sink:
        logger.debug("Opened capture sink", path=sink.name)
        yield sink
    logger.debug("Removed capture sink", path=sink.name)


def read_sink(sink: IO[str]) -> str:
    """Return everything written to the sink so far."""
    sink.flush()
    sink.seek(0)
    return sink.read()
