"""logfire-backed logging with a console sink and a file sink.

Code logs through the module-level ``logger``. It does nothing until
setup_logger() installs a Logger, so library code and tests can log
without configuring anything first.
"""

from __future__ import annotations

import contextlib
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import logfire
from opentelemetry.proto.logs.v1 import logs_pb2
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
    SpanExportResult,
)
from pydantic import Field, PrivateAttr, model_validator

from syscheck.core.base import BaseConfig

# Highest first, so the first threshold a span reaches names its level
LEVELS = {
    "fatal": logs_pb2.SEVERITY_NUMBER_FATAL,
    "error": logs_pb2.SEVERITY_NUMBER_ERROR,
    "warn": logs_pb2.SEVERITY_NUMBER_WARN,
    "info": logs_pb2.SEVERITY_NUMBER_INFO,
    "debug": logs_pb2.SEVERITY_NUMBER_DEBUG,
    "trace": logs_pb2.SEVERITY_NUMBER_TRACE,
}

# Span attributes that are bookkeeping, not logging-call keywords
_INTERNAL_ATTRIBUTES = {
    "code.filepath",
    "code.lineno",
    "code.function",
    "logfire.msg",
    "logfire.msg_template",
    "logfire.level_num",
    "logfire.span_type",
    "logfire.json_schema",
}

_current_logger: Logger | None = None


def _severity(span: ReadableSpan) -> int:
    return (span.attributes or {}).get(
        "logfire.level_num", logs_pb2.SEVERITY_NUMBER_INFO
    )


def level_name(severity: int) -> str:
    """Map an OpenTelemetry severity number back to our level names."""
    for name, threshold in LEVELS.items():
        if severity >= threshold:
            return name
    return "unknown"


class _LoggerProxy:
    """Stands in for the current Logger; a no-op before setup."""

    def __getattr__(self, name):
        if _current_logger is None:
            return lambda *args, **kwargs: None
        return getattr(_current_logger, name)


logger = _LoggerProxy()


class LevelFilteringExporter(SpanExporter):
    """Forward only the spans at or above a minimum level."""

    def __init__(self, exporter: SpanExporter, min_level: str):
        self._exporter = exporter
        self._min_severity = LEVELS.get(
            min_level.lower(), logs_pb2.SEVERITY_NUMBER_INFO
        )

    def export(self, spans) -> SpanExportResult:
        kept = [s for s in spans if _severity(s) >= self._min_severity]
        if not kept:
            return SpanExportResult.SUCCESS
        return self._exporter.export(kept)

    def shutdown(self) -> None:
        self._exporter.shutdown()

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return self._exporter.force_flush(timeout_millis)


class Sink(BaseConfig):
    """One log destination with its own level."""

    enabled: bool = Field(default=True, description="Enable this sink")
    level: str | None = Field(
        default=None,
        description=(
            "Minimum level; inherits Logger.level when unset. "
            "Valid: trace, debug, info, warn, error, fatal"
        ),
    )


class ConsoleSink(Sink):
    """logfire's own console output on stdout."""

    colors: str = Field(
        default="auto",
        description="Color mode: auto, always, never",
    )

    def options(self) -> logfire.ConsoleOptions | bool:
        if not self.enabled:
            return False
        return logfire.ConsoleOptions(
            min_log_level=self.level,
            colors=self.colors,
            include_timestamps=True,
        )


class FileSink(Sink):
    """One line per log record, appended to a file.

    With format_template set to None each span is written as raw JSON.
    Newlines in messages are escaped so a record is always one line.
    """

    enabled: bool = Field(default=False, description="Enable file logging")
    path: str = Field(
        default="{log_root}/{run_name}/syscheck.log",
        description="Log file path template",
    )
    format_template: str | None = Field(
        default="{timestamp:%Y-%m-%d %H:%M:%S} {level:<5} {message}",
        description="Line template (None for raw span JSON)",
    )

    _file: Any = PrivateAttr(default=None)
    _processor: Any = PrivateAttr(default=None)

    def open(self, log_root: Path, run_name: str) -> BatchSpanProcessor:
        log_path = Path(self.path.format(log_root=log_root, run_name=run_name))
        log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(log_path, "a", buffering=1, encoding="utf-8")  # noqa: SIM115

        exporter = ConsoleSpanExporter(out=self._file, formatter=self.format_span)
        self._processor = BatchSpanProcessor(
            LevelFilteringExporter(exporter, self.level or "info")
        )
        return self._processor

    def format_span(self, span: ReadableSpan) -> str:
        if not self.format_template:
            return span.to_json() + os.linesep

        attrs = span.attributes or {}
        message = attrs.get("logfire.msg", span.name)
        line = self.format_template.format(
            timestamp=datetime.fromtimestamp(span.start_time / 1e9, tz=UTC),
            level=level_name(_severity(span)),
            message=_escape(message),
        )

        extras = sorted(
            (key, value)
            for key, value in attrs.items()
            if key not in _INTERNAL_ATTRIBUTES
            and not key.startswith(("otel.", "telemetry.", "service.", "process."))
        )
        if extras:
            line += " │ " + " ".join(f"{k}={v!r}" for k, v in extras)
        return line + "\n"

    def close(self):
        """Flush pending records, then close the file."""
        if self._processor is not None:
            self._processor.shutdown()
            self._processor = None
        if self._file is not None and not self._file.closed:
            with contextlib.suppress(OSError):
                self._file.close()


def _escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


class Logger(BaseConfig):
    """The sinks of one run, plus the logging calls used in syscheck."""

    level: str = Field(
        default="info",
        description="Level for sinks that do not set their own",
    )
    console: ConsoleSink = Field(default_factory=ConsoleSink)
    file: FileSink = Field(default_factory=FileSink)

    @model_validator(mode="after")
    def _cascade_level_to_sinks(self) -> Logger:
        for sink in (self.console, self.file):
            if sink.level is None:
                sink.level = self.level
        return self

    def setup(self, log_root: Path, run_name: str):
        processors = []
        if self.file.enabled:
            processors.append(self.file.open(log_root, run_name))

        logfire.configure(
            service_name=f"syscheck-{run_name}",
            send_to_logfire=False,
            console=self.console.options(),
            additional_span_processors=processors or None,
        )

    def trace(self, msg: str, **kwargs):
        logfire.trace(msg, **kwargs)

    def debug(self, msg: str, **kwargs):
        logfire.debug(msg, **kwargs)

    def info(self, msg: str, **kwargs):
        logfire.info(msg, **kwargs)

    def warn(self, msg: str, **kwargs):
        logfire.warn(msg, **kwargs)

    def error(self, msg: str, **kwargs):
        logfire.error(msg, **kwargs)

    def fatal(self, msg: str, **kwargs):
        logfire.fatal(msg, **kwargs)

    def span(self, msg: str, **kwargs):
        """Context manager grouping the records logged inside it."""
        return logfire.span(msg, **kwargs)


def setup_logger(
    log_root: Path,
    run_name: str,
    level: str = "info",
    console: ConsoleSink | None = None,
    file: FileSink | None = None,
) -> Logger:
    """Install a new global Logger, closing the previous one.

    Config calls this once settings have loaded; tests call it directly.
    """
    global _current_logger

    if _current_logger is not None:
        _current_logger.close()

    _current_logger = Logger(
        level=level,
        console=console or ConsoleSink(),
        file=file or FileSink(),
    )
    _current_logger.setup(log_root, run_name)
    return _current_logger


def bootstrap_logger() -> Logger:
    """Console-only logger for diagnostics emitted before config loads."""
    bootstrap = Logger(
        console=ConsoleSink(level="warn"),
        file=FileSink(enabled=False),
    )
    bootstrap.setup(log_root=Path.home(), run_name="bootstrap")
    return bootstrap
