"""
CIE Core Logging and Monitoring - Structured Logging

This module provides the console and JSON log formatters, a context-aware
logger wrapper with operation timing, and the one-call logging setup used by
the command line and the HTTP server.
"""

from __future__ import annotations
import sys
import json
import time
import logging
import threading
from typing import Dict, Optional, Any, TextIO
from datetime import datetime
from enum import Enum
from contextlib import contextmanager


class LogLevel(Enum):
    """Log levels"""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class StructuredFormatter(logging.Formatter):
    """Formatter for structured JSON logging"""

    def __init__(self, include_context: bool = True):
        super().__init__()
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON"""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info)
            }

        if self.include_context and getattr(record, "context", None):
            log_data["context"] = record.context

        if getattr(record, "sentence_id", None) is not None:
            log_data["sentence_id"] = record.sentence_id

        if getattr(record, "duration_ms", None) is not None:
            log_data["duration_ms"] = record.duration_ms

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Formatter for console output with colors"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m"
    }

    def __init__(self, use_colors: bool = True, stream: Optional[TextIO] = None):
        super().__init__()
        stream = stream or sys.stderr
        self.use_colors = use_colors and hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for console"""
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname

        if self.use_colors:
            color = self.COLORS.get(level, "")
            reset = self.COLORS["RESET"]
            level_str = f"{color}{level:8}{reset}"
        else:
            level_str = f"{level:8}"

        message = f"{timestamp} | {level_str} | {record.name} | {record.getMessage()}"

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


class ExtractionLogger:
    """Logger wrapper carrying context and sentence ids into every record"""

    _instances: Dict[str, "ExtractionLogger"] = {}
    _lock = threading.Lock()

    def __init__(self, name: str):
        self.name = name
        self._logger = logging.getLogger(name)
        self._context: Dict[str, Any] = {}

    @classmethod
    def get_logger(cls, name: str) -> "ExtractionLogger":
        """Get or create a logger instance"""
        with cls._lock:
            if name not in cls._instances:
                cls._instances[name] = cls(name)
            return cls._instances[name]

    def _log(self, level: LogLevel, message: str, **kwargs):
        """Internal log method"""
        extra = {
            "context": {**self._context, **kwargs.get("context", {})},
            "sentence_id": kwargs.get("sentence_id")
        }

        if "duration_ms" in kwargs:
            extra["duration_ms"] = kwargs["duration_ms"]

        self._logger.log(level.value, message, extra=extra, exc_info=kwargs.get("exc_info"))

    def debug(self, message: str, **kwargs):
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log(LogLevel.ERROR, message, **kwargs)

    @contextmanager
    def timed(self, operation: str, level: LogLevel = LogLevel.INFO):
        """Context manager for timing operations"""
        start_time = time.time()
        self._log(level, f"Starting: {operation}")

        try:
            yield
            duration_ms = (time.time() - start_time) * 1000
            self._log(level, f"Completed: {operation}", duration_ms=duration_ms)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._log(LogLevel.ERROR, f"Failed: {operation} - {e}", duration_ms=duration_ms, exc_info=True)
            raise

    @contextmanager
    def context(self, **kwargs):
        """Context manager for temporary context"""
        old_context = self._context.copy()
        self._context.update(kwargs)
        try:
            yield
        finally:
            self._context = old_context


def configure_logging(
    verbose: bool = False,
    debug: bool = False,
    json_format: bool = False,
    stream: Optional[TextIO] = None
) -> logging.Logger:
    """
    Configure the root logger for command line and server use.

    WARNING by default, INFO when verbose, DEBUG when debug. Log records go
    to stderr so that extraction output on stdout stays clean.
    """
    if debug:
        level = LogLevel.DEBUG
    elif verbose:
        level = LogLevel.INFO
    else:
        level = LogLevel.WARNING

    stream = stream or sys.stderr
    handler = logging.StreamHandler(stream)
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(ConsoleFormatter(stream=stream))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level.value)
    return root


def get_extraction_logger(name: str = "cie") -> ExtractionLogger:
    """Get extraction logger instance"""
    return ExtractionLogger.get_logger(name)
