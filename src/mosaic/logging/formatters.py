"""Log formatters for Mosaic.

JSON output for log shipping and a single-line text output with the
protocol context (operation, chain, message hash) appended.
"""

import json
import time
import traceback
from typing import Optional

from .core import LogContext, LogEntry, LogFormatter


class JSONFormatter(LogFormatter):
    """JSON log formatter."""

    def __init__(
        self,
        include_context: bool = True,
        include_exception: bool = True,
        include_extra: bool = True,
        timestamp_format: str = "iso",
        indent: Optional[int] = None,
    ):
        self.include_context = include_context
        self.include_exception = include_exception
        self.include_extra = include_extra
        self.timestamp_format = timestamp_format
        self.indent = indent

    def format(self, entry: LogEntry) -> str:
        """Format log entry as JSON."""
        data = {
            "timestamp": self._format_timestamp(entry.timestamp),
            "level": entry.level.value,
            "logger": entry.logger_name,
        }

        if self.include_context:
            data["context"] = entry.context.to_dict()

        if self.include_exception and entry.exception:
            data["exception"] = {
                "type": type(entry.exception).__name__,
                "message": str(entry.exception),
                "traceback": "".join(
                    traceback.format_exception(
                        type(entry.exception),
                        entry.exception,
                        entry.exception.__traceback__,
                    )
                ),
            }

        if self.include_extra and entry.extra:
            data["extra"] = entry.extra

        data["message"] = entry.message

        return json.dumps(data, indent=self.indent, default=str)

    def _format_timestamp(self, timestamp: float) -> str:
        """Format timestamp."""
        if self.timestamp_format == "iso":
            return (
                time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(timestamp))
                + f".{int((timestamp % 1) * 1000000):06d}Z"
            )
        elif self.timestamp_format == "unix":
            return str(timestamp)
        else:
            return time.strftime(self.timestamp_format, time.gmtime(timestamp))


class TextFormatter(LogFormatter):
    """Text log formatter."""

    def __init__(
        self,
        include_timestamp: bool = True,
        include_context: bool = True,
        timestamp_format: str = "%Y-%m-%d %H:%M:%S",
    ):
        self.include_timestamp = include_timestamp
        self.include_context = include_context
        self.timestamp_format = timestamp_format

    def format(self, entry: LogEntry) -> str:
        """Format log entry."""
        parts = []

        if self.include_timestamp:
            parts.append(time.strftime(self.timestamp_format, time.gmtime(entry.timestamp)))

        parts.append(f"[{entry.level.value.upper()}]")
        parts.append(f"{entry.logger_name}:")
        parts.append(entry.message)

        if self.include_context:
            context = self._format_context(entry.context)
            if context:
                parts.append(f"| {context}")

        if entry.exception is not None:
            parts.append(f"| {type(entry.exception).__name__}: {entry.exception}")

        return " ".join(parts)

    def _format_context(self, context: LogContext) -> str:
        """Format context."""
        parts = []
        if context.operation:
            parts.append(f"operation={context.operation}")
        if context.chain:
            parts.append(f"chain={context.chain}")
        if context.message_hash:
            parts.append(f"message={context.message_hash}")
        return " ".join(parts)
