"""Core logging interfaces and data structures for Mosaic.

This module defines the log levels, contexts, entries and the manager that
routes entries to handlers. Facilitator steps are logged through
:func:`get_logger` with a :class:`LogContext` naming the operation and the
message hash being driven.
"""

import json
import os
import sys
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class LogLevel(Enum):
    """Log levels."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


_LEVEL_ORDER = {level: index for index, level in enumerate(LogLevel)}


@dataclass
class LogContext:
    """Log context information."""

    component: Optional[str] = None
    operation: Optional[str] = None
    chain: Optional[str] = None
    message_hash: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary."""
        return {
            "component": self.component,
            "operation": self.operation,
            "chain": self.chain,
            "message_hash": self.message_hash,
            "metadata": self.metadata,
        }


@dataclass
class LogEntry:
    """Log entry data structure."""

    timestamp: float
    level: LogLevel
    message: str
    logger_name: str
    context: LogContext
    exception: Optional[BaseException] = None
    extra: Dict[str, Any] = field(default_factory=dict)
    thread_id: Optional[int] = None
    process_id: Optional[int] = None

    def __post_init__(self):
        if self.thread_id is None:
            self.thread_id = threading.get_ident()
        if self.process_id is None:
            self.process_id = os.getpid()

    def to_dict(self) -> Dict[str, Any]:
        """Convert log entry to dictionary."""
        return {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "message": self.message,
            "logger_name": self.logger_name,
            "context": self.context.to_dict(),
            "exception": str(self.exception) if self.exception else None,
            "extra": self.extra,
            "thread_id": self.thread_id,
            "process_id": self.process_id,
        }

    def to_json(self) -> str:
        """Convert log entry to JSON string."""
        return json.dumps(self.to_dict(), default=str)


class LogConfig:
    """Log configuration."""

    def __init__(
        self,
        name: str = "mosaic",
        level: LogLevel = LogLevel.INFO,
        format_type: str = "text",
        handlers: List[str] = None,
    ):
        self.name = name
        self.level = level
        self.format_type = format_type
        self.handlers = handlers or ["console"]


class LogFormatter(ABC):
    """Abstract log formatter."""

    @abstractmethod
    def format(self, entry: LogEntry) -> str:
        """Format log entry."""
        pass


class LogHandler(ABC):
    """Abstract log handler."""

    def __init__(self, name: str = None):
        self.name = name or self.__class__.__name__
        self.formatter: Optional[LogFormatter] = None
        self.level: LogLevel = LogLevel.DEBUG
        self._lock = threading.RLock()

    def set_formatter(self, formatter: LogFormatter) -> None:
        """Set formatter."""
        with self._lock:
            self.formatter = formatter

    def set_level(self, level: LogLevel) -> None:
        """Set log level."""
        with self._lock:
            self.level = level

    def should_handle(self, entry: LogEntry) -> bool:
        """Check if handler should handle the entry."""
        return _LEVEL_ORDER[entry.level] >= _LEVEL_ORDER[self.level]

    @abstractmethod
    def emit(self, entry: LogEntry) -> None:
        """Emit log entry."""
        pass

    def handle(self, entry: LogEntry) -> None:
        """Handle log entry."""
        if self.should_handle(entry):
            self.emit(entry)


class LogManager:
    """Log manager for orchestrating logging operations."""

    def __init__(self, config: LogConfig = None):
        self.config = config or LogConfig()
        self.loggers: Dict[str, "MosaicLogger"] = {}
        self.handlers: Dict[str, LogHandler] = {}
        self.formatters: Dict[str, LogFormatter] = {}
        self._lock = threading.RLock()

        self._setup_defaults()

    def _setup_defaults(self) -> None:
        """Setup default logging components."""
        from .formatters import JSONFormatter, TextFormatter
        from .handlers import ConsoleHandler

        self.add_formatter("json", JSONFormatter())
        self.add_formatter("text", TextFormatter())

        console = ConsoleHandler()
        console.set_formatter(self.formatters.get(self.config.format_type))
        self.add_handler("console", console)

    def get_logger(self, name: str) -> "MosaicLogger":
        """Get logger."""
        with self._lock:
            if name not in self.loggers:
                self.loggers[name] = MosaicLogger(name, self, self.config.level)
            return self.loggers[name]

    def add_handler(self, name: str, handler: LogHandler) -> None:
        """Add handler."""
        with self._lock:
            self.handlers[name] = handler
            if name not in self.config.handlers:
                self.config.handlers.append(name)

    def remove_handler(self, name: str) -> None:
        """Remove handler."""
        with self._lock:
            self.handlers.pop(name, None)
            if name in self.config.handlers:
                self.config.handlers.remove(name)

    def add_formatter(self, name: str, formatter: LogFormatter) -> None:
        """Add formatter."""
        with self._lock:
            self.formatters[name] = formatter

    def log(
        self,
        level: LogLevel,
        message: str,
        logger_name: str = "root",
        context: LogContext = None,
        exception: BaseException = None,
        extra: Dict[str, Any] = None,
    ) -> None:
        """Log a message."""
        with self._lock:
            context = context or LogContext()

            entry = LogEntry(
                timestamp=time.time(),
                level=level,
                message=message,
                logger_name=logger_name,
                context=context,
                exception=exception,
                extra=extra or {},
            )

            for handler_name in self.config.handlers:
                if handler_name in self.handlers:
                    self.handlers[handler_name].handle(entry)

    def shutdown(self) -> None:
        """Shutdown log manager."""
        with self._lock:
            for handler in self.handlers.values():
                if hasattr(handler, "close"):
                    handler.close()

            self.loggers.clear()
            self.handlers.clear()
            self.formatters.clear()


class MosaicLogger:
    """Mosaic logger implementation."""

    def __init__(self, name: str, manager: LogManager, level: LogLevel = LogLevel.INFO):
        self.name = name
        self.manager = manager
        self.level = level
        self._lock = threading.RLock()

    def set_level(self, level: LogLevel) -> None:
        """Set log level."""
        with self._lock:
            self.level = level

    def is_enabled_for(self, level: LogLevel) -> bool:
        """Check if logger is enabled for level."""
        with self._lock:
            return _LEVEL_ORDER[level] >= _LEVEL_ORDER[self.level]

    def log(
        self,
        level: LogLevel,
        message: str,
        context: LogContext = None,
        exception: BaseException = None,
        extra: Dict[str, Any] = None,
    ) -> None:
        """Log a message."""
        if self.is_enabled_for(level):
            self.manager.log(
                level=level,
                message=message,
                logger_name=self.name,
                context=context,
                exception=exception,
                extra=extra,
            )

    def trace(self, message: str, **kwargs) -> None:
        self.log(LogLevel.TRACE, message, **kwargs)

    def debug(self, message: str, **kwargs) -> None:
        self.log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self.log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self.log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self.log(LogLevel.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs) -> None:
        self.log(LogLevel.CRITICAL, message, **kwargs)

    def exception(self, message: str, **kwargs) -> None:
        """Log an error with the exception currently being handled."""
        exc_info = sys.exc_info()
        if exc_info[0] is not None:
            kwargs.setdefault("exception", exc_info[1])
        self.log(LogLevel.ERROR, message, **kwargs)


# Global log manager instance
_global_manager: Optional[LogManager] = None

# Loggers of a shut down manager, picked up by the next one
_detached_loggers: Dict[str, MosaicLogger] = {}


def _adopt(manager: LogManager, loggers: Dict[str, MosaicLogger], level: LogLevel = None) -> None:
    for name, logger in loggers.items():
        logger.manager = manager
        if level is not None:
            logger.set_level(level)
        manager.loggers[name] = logger
    _detached_loggers.clear()


def get_manager() -> LogManager:
    """Get the global log manager, creating it on first use."""
    global _global_manager
    if _global_manager is None:
        _global_manager = LogManager()
        _adopt(_global_manager, dict(_detached_loggers))
    return _global_manager


def get_logger(name: str = "root") -> MosaicLogger:
    """Get logger instance."""
    return get_manager().get_logger(name)


def setup_logging(config: LogConfig) -> LogManager:
    """Setup logging with configuration.

    Loggers handed out before this call keep working: they are moved onto the
    new manager with the configured level.
    """
    global _global_manager
    loggers = dict(_detached_loggers)
    if _global_manager is not None:
        loggers.update(_global_manager.loggers)
    _global_manager = LogManager(config)
    _adopt(_global_manager, loggers, config.level)
    return _global_manager


def shutdown_logging() -> None:
    """Shutdown logging."""
    global _global_manager
    if _global_manager is not None:
        _detached_loggers.update(_global_manager.loggers)
        _global_manager.shutdown()
        _global_manager = None
