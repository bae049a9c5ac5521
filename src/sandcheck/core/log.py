"""Logger with composable output sinks, backed by logfire."""

from __future__ import annotations

import contextlib
import sys
from abc import abstractmethod
from pathlib import Path
from typing import Any

from opentelemetry.proto.logs.v1 import logs_pb2
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult
from pydantic import Field, PrivateAttr, model_validator

from sandcheck.core.base import BaseConfig

_current_logger: Logger | None = None


class _LoggerProxy:
    """Forwards attribute access to the current logger.

    Before setup_logger() has run every method is a no-op, so modules
    can log at import time or from library code without configuring
    anything.
    """
    def __getattr__(self, name):
        if _current_logger is None:
            def _noop(*args, **kwargs):  # noqa: ARG001
                return contextlib.nullcontext()
            return _noop
        return getattr(_current_logger, name)

    def __enter__(self):
        if _current_logger is None:
            return self
        return _current_logger.__enter__()

    def __exit__(self, *args):
        if _current_logger is None:
            return False
        return _current_logger.__exit__(*args)


logger = _LoggerProxy()


class LevelFilteringExporter(SpanExporter):
    """Span exporter that drops spans below a minimum level."""

    # Level names to OpenTelemetry severity numbers
    _level_thresholds = {
        'trace': logs_pb2.SEVERITY_NUMBER_TRACE,
        'debug': logs_pb2.SEVERITY_NUMBER_DEBUG,
        'info': logs_pb2.SEVERITY_NUMBER_INFO,
        'warn': logs_pb2.SEVERITY_NUMBER_WARN,
        'error': logs_pb2.SEVERITY_NUMBER_ERROR,
        'fatal': logs_pb2.SEVERITY_NUMBER_FATAL,
    }

    def __init__(self, exporter: SpanExporter, min_level: str):
        self._exporter = exporter
        self._min_severity = self._level_thresholds.get(
            min_level.lower(), logs_pb2.SEVERITY_NUMBER_INFO
        )

    def export(self, spans: list[ReadableSpan]) -> SpanExportResult:
        filtered = [
            span for span in spans
            if (span.attributes or {}).get(
                'logfire.level_num', logs_pb2.SEVERITY_NUMBER_INFO
            ) >= self._min_severity
        ]
        if filtered:
            return self._exporter.export(filtered)
        return SpanExportResult.SUCCESS

    def shutdown(self) -> None:
        self._exporter.shutdown()

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return self._exporter.force_flush(timeout_millis)

    @classmethod
    def level_name(cls, level_num: int) -> str:
        """Map a severity number back to the closest level name."""
        for name in ['fatal', 'error', 'warn', 'info', 'debug', 'trace']:
            if level_num >= cls._level_thresholds[name]:
                return name
        return 'trace'


class Sink(BaseConfig):
    """Base class for log output sinks.

    Sinks are closed through the BaseCloseable cascade when the
    owning Logger closes.
    """

    enabled: bool = Field(default=True, description="Enable this sink")
    level: str | None = Field(
        default=None,
        description=(
            "Log level for this sink. If None, inherits from Logger.level. "
            "Valid: trace, debug, info, warn, error, fatal"
        )
    )

    _processor: Any = PrivateAttr(default=None)

    @abstractmethod
    def create_processor(self, log_root: Path):
        """Create an OpenTelemetry span processor, or None."""
        pass

    def close(self):
        if self._processor:
            with contextlib.suppress(Exception):
                self._processor.shutdown()


class ConsoleSink(Sink):
    """Console output sink.

    Writes to stderr unless told otherwise; stdout carries the check
    transcript and nothing else.
    """

    verbose: bool = Field(
        default=False,
        description="Show file, line and level with each message"
    )
    colors: str = Field(
        default="auto",
        description="Color mode: auto, always, never"
    )
    stream: str = Field(
        default="stderr",
        description="Where console output goes: stderr or stdout"
    )

    def create_processor(self, log_root: Path):
        """Console is configured through logfire.configure()."""
        return None

    def output(self):
        return sys.stdout if self.stream == "stdout" else sys.stderr


class FileSink(Sink):
    """Plain text log file sink."""

    enabled: bool = Field(
        default=False,
        description="Enable file logging"
    )
    path: str = Field(
        default="{log_root}/sandcheck.log",
        description="Log file path template"
    )
    format_template: str = Field(
        default="{timestamp:%Y-%m-%d %H:%M:%S} {level:<5} {message}",
        description="Line format; fields: timestamp, level, message"
    )

    _file: Any = PrivateAttr(default=None)

    def _format_span(self, span) -> str:
        from datetime import UTC, datetime

        attrs = span.attributes or {}
        level_num = attrs.get(
            'logfire.level_num', logs_pb2.SEVERITY_NUMBER_INFO
        )
        line = self.format_template.format(
            timestamp=datetime.fromtimestamp(span.start_time / 1e9, tz=UTC),
            level=LevelFilteringExporter.level_name(level_num),
            message=attrs.get('logfire.msg', span.name),
        )

        # Append user attributes passed as keyword arguments
        extras = {
            key: value for key, value in attrs.items()
            if not key.startswith(('code.', 'logfire.', 'otel.'))
        }
        if extras:
            extra_str = ' '.join(
                f"{k}={v!r}" for k, v in sorted(extras.items())
            )
            line = f"{line} | {extra_str}"
        return line + '\n'

    def create_processor(self, log_root: Path):
        from opentelemetry.sdk.trace.export import (
            BatchSpanProcessor,
            ConsoleSpanExporter,
        )

        log_path = Path(self.path.format(log_root=log_root))
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # Line buffered, stays open for the lifetime of the sink
        self._file = open(log_path, "a", buffering=1, encoding="utf-8")  # noqa: SIM115

        exporter = ConsoleSpanExporter(
            out=self._file,
            formatter=self._format_span,
        )
        return BatchSpanProcessor(
            LevelFilteringExporter(exporter, self.level or "info")
        )

    def close(self):
        # Processor first so pending spans reach the file
        super().close()
        if self._file and not self._file.closed:
            self._file.close()


class Logger(BaseConfig):
    """Logger with console and file sinks.

    Closing the logger closes every sink, so use it as a context
    manager around the work that logs.
    """

    level: str = Field(
        default="warn",
        description=(
            "Default log level for all sinks. Individual sinks can override. "
            "Valid: trace, debug, info, warn, error, fatal"
        )
    )
    console: ConsoleSink = Field(
        default_factory=ConsoleSink,
        description="Console output configuration"
    )
    file: FileSink = Field(
        default_factory=FileSink,
        description="File logging configuration"
    )

    @model_validator(mode='after')
    def _cascade_level_to_sinks(self) -> 'Logger':
        for sink in [self.console, self.file]:
            if sink.level is None:
                sink.level = self.level
        return self

    def setup(self, log_root: Path):
        """Create sink processors and configure logfire.

        Args:
            log_root: Root directory for log files
        """
        import logfire
        from logfire import ConsoleOptions

        for sink in [self.console, self.file]:
            if sink.enabled:
                sink._processor = sink.create_processor(log_root)

        processors = [
            sink._processor
            for sink in [self.file]
            if sink.enabled and sink._processor
        ]

        console_config = (
            ConsoleOptions(
                min_log_level=self.console.level,
                verbose=self.console.verbose,
                colors=self.console.colors,
                include_timestamps=True,
                output=self.console.output(),
            )
            if self.console.enabled
            else False
        )

        logfire.configure(
            service_name="sandcheck",
            send_to_logfire=False,
            console=console_config,
            additional_span_processors=processors or None,
        )

    def info(self, msg: str, **kwargs):
        import logfire
        logfire.info(msg, **kwargs)

    def debug(self, msg: str, **kwargs):
        import logfire
        logfire.debug(msg, **kwargs)

    def warn(self, msg: str, **kwargs):
        import logfire
        logfire.warn(msg, **kwargs)

    def error(self, msg: str, **kwargs):
        import logfire
        logfire.error(msg, **kwargs)

    def span(self, msg: str, **kwargs):
        """Create a span context manager.

        Usage:
            with logger.span("operation_name"):
                # work here
        """
        import logfire
        return logfire.span(msg, **kwargs)


def setup_logger(
    log_root: Path,
    level: str = "warn",
    console: ConsoleSink | None = None,
    file: FileSink | None = None,
) -> Logger:
    """Initialize the global logger singleton.

    Called by State once configuration has loaded. Tests call it
    directly to get a console-free logger.

    Args:
        log_root: Root directory for log files
        level: Default level for sinks that do not set their own
        console: Console sink config (or None for defaults)
        file: File sink config (or None for defaults)

    Returns:
        Logger: The initialized global logger instance
    """
    global _current_logger

    _current_logger = Logger(
        level=level,
        console=console or ConsoleSink(),
        file=file or FileSink(),
    )
    _current_logger.setup(log_root)

    return _current_logger


def use_logger(instance: Logger, log_root: Path) -> Logger:
    """Set up an already configured Logger and make it the global one.

    Used when the Logger comes from loaded configuration rather than
    being built here.
    """
    global _current_logger

    instance.setup(log_root)
    _current_logger = instance
    return instance
