"""
Centralized logging configuration for the Natours Service.

Structured logging over the standard logging module:
- correlation IDs attached to every entry
- JSON output for production and log files
- coloured console output for development
- error details extracted from exceptions
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from natours.core.config import config
from natours.middleware.request_context import get_correlation_id


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    RESERVED = {
        'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
        'levelno', 'lineno', 'module', 'msecs', 'message', 'pathname', 'process',
        'processName', 'relativeCreated', 'thread', 'threadName', 'exc_info',
        'exc_text', 'stack_info', 'taskName',
    }

    def format(self, record):
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": config.service_name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in self.RESERVED and key not in log_data:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored console formatter for development"""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record):
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')
        correlation_id = getattr(record, "correlationId", None) or "-"

        line = f"{color}[{timestamp}] {record.levelname}{reset} [{correlation_id}] - {record.getMessage()}"

        metadata = getattr(record, "metadata", None)
        if metadata:
            line += f" | {json.dumps(metadata, default=str)}"
        return line


class StructuredLogger:
    """
    Logger with structured metadata and correlation ID support.
    """

    def __init__(self, name: str = None):
        self.service_name = config.service_name
        self.environment = config.environment
        self._logger = logging.getLogger(name or config.service_name)
        self._setup_logging()

    def _setup_logging(self):
        """Configure the service logger with handlers"""
        level = getattr(logging, config.log_level.upper(), logging.INFO)

        self._logger.handlers.clear()
        self._logger.setLevel(level)
        self._logger.propagate = False

        if config.log_to_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)

            if config.log_format == "json":
                console_handler.setFormatter(JSONFormatter())
            else:
                console_handler.setFormatter(ConsoleFormatter())

            self._logger.addHandler(console_handler)

        if config.log_to_file:
            log_dir = os.path.dirname(config.log_file_path)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)

            file_handler = logging.FileHandler(config.log_file_path)
            file_handler.setLevel(level)
            file_handler.setFormatter(JSONFormatter())  # Always JSON for files

            self._logger.addHandler(file_handler)

    def _log(
        self,
        level: int,
        message: str,
        correlation_id: Optional[str] = None,
        user_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """Internal logging method"""
        extra = {
            "environment": self.environment,
            "correlationId": correlation_id or get_correlation_id(),
        }
        if user_id:
            extra["userId"] = user_id
        if metadata:
            extra["metadata"] = metadata

        self._logger.log(level, message, extra=extra)

    def debug(self, message: str, correlation_id: Optional[str] = None,
              user_id: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None):
        """Debug level logging"""
        self._log(logging.DEBUG, message, correlation_id, user_id, metadata)

    def info(self, message: str, correlation_id: Optional[str] = None,
             user_id: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None):
        """Info level logging"""
        self._log(logging.INFO, message, correlation_id, user_id, metadata)

    def warning(self, message: str, correlation_id: Optional[str] = None,
                user_id: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None):
        """Warning level logging"""
        self._log(logging.WARNING, message, correlation_id, user_id, metadata)

    def error(
        self,
        message: str,
        correlation_id: Optional[str] = None,
        user_id: Optional[str] = None,
        error: Optional[Union[str, Exception]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """Error level logging"""
        metadata = dict(metadata or {})

        if error:
            if isinstance(error, Exception):
                metadata["error"] = {
                    "type": type(error).__name__,
                    "message": str(error),
                }
            else:
                metadata["error"] = {"message": str(error)}

        self._log(logging.ERROR, message, correlation_id, user_id, metadata)


# Create and export the logger instance
logger = StructuredLogger()
