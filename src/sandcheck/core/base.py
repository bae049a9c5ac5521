"""Base classes for configuration models.

Kept separate from config.py and log.py so both can depend on it
without a circular import.
"""

from __future__ import annotations

import sys
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Closeable(Protocol):
    """Protocol for objects that support close()."""

    def close(self) -> None:
        ...


class BaseCloseable(BaseModel):
    """Model that closes its Closeable children on close().

    Subclasses become context managers. Closing walks the model
    fields and calls close() on every child that has it, so
    Config.close() reaches Logger.close() and from there each sink.
    """

    def close(self):
        """Close all closeable child objects.

        A failing child does not stop the others from closing; the
        error is reported on stderr.
        """
        for field_name in self.__class__.model_fields:
            child = getattr(self, field_name, None)
            if child is None:
                continue

            if isinstance(child, Closeable):
                try:
                    child.close()
                except Exception as e:
                    msg = f"Warning: Error closing {field_name}: {e}"
                    print(msg, file=sys.stderr)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


class BaseConfig(BaseCloseable):
    """Marker base for configuration sections loaded from YAML/env/CLI."""
    pass


__all__ = ["Closeable", "BaseCloseable", "BaseConfig"]
