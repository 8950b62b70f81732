#!/usr/bin/env python3
"""
Centralized Logging System for SceneKit
Console logging everywhere, optional rotating log files, and structured
JSON output for production log collectors (journald, Loki, ...).
"""

import json
import logging
import logging.handlers
import os
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

IS_PRODUCTION = os.getenv('SCENEKIT_ENV', 'development') == 'production'
IS_DEV_MODE = '--dev' in sys.argv or os.getenv('SCENEKIT_DEV') == '1'

ENABLE_JSON_LOGS = os.getenv('SCENEKIT_JSON_LOGS', '0') == '1'

if IS_PRODUCTION and not IS_DEV_MODE:
    LOG_LEVEL = logging.INFO
    ENABLE_FILE_LOGGING = False
    ENABLE_ERROR_LOGS = True
    MAX_LOG_SIZE = 1 * 1024 * 1024
    BACKUP_COUNT = 2
    # Production defaults to JSON unless explicitly disabled
    if not ENABLE_JSON_LOGS and os.getenv('SCENEKIT_JSON_LOGS') is None:
        ENABLE_JSON_LOGS = True
else:
    LOG_LEVEL = logging.DEBUG if IS_DEV_MODE else logging.INFO
    ENABLE_FILE_LOGGING = os.getenv('SCENEKIT_FILE_LOGS', '0') == '1'
    ENABLE_ERROR_LOGS = ENABLE_FILE_LOGGING
    MAX_LOG_SIZE = 10 * 1024 * 1024
    BACKUP_COUNT = 5


def _get_app_log_dir() -> Path:
    """Get application log directory path-agnostically"""
    env_log_dir = os.getenv('SCENEKIT_LOG_DIR')
    if env_log_dir:
        return Path(env_log_dir)
    return Path.home() / ".scenekit" / "logs"


LOG_DIR = _get_app_log_dir()

_env_level = os.getenv('SCENEKIT_LOG_LEVEL')
if _env_level:
    LOG_LEVEL = getattr(logging, _env_level.upper(), LOG_LEVEL)

if ENABLE_FILE_LOGGING or ENABLE_ERROR_LOGS:
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
    except OSError:
        # Console-only logging if the directory is not writable
        ENABLE_FILE_LOGGING = False
        ENABLE_ERROR_LOGS = False

_FILE_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(filename)s:%(lineno)d | %(message)s'

_RESERVED_RECORD_KEYS = frozenset((
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName', 'relativeCreated',
    'thread', 'threadName', 'exc_info', 'exc_text', 'stack_info',
    'taskName', 'no_color',
))


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for console output."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'
    }

    def __init__(self) -> None:
        super().__init__('%(asctime)s | %(name)s | %(levelname)s | %(message)s', '%H:%M:%S')

    def format(self, record: logging.LogRecord) -> str:
        if getattr(record, 'no_color', False):
            return super().format(record)

        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']
        original = record.levelname
        record.levelname = f"{color}{original}{reset}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class JSONFormatter(logging.Formatter):
    """Structured JSON formatter for production observability.

    Example output:
        {"timestamp": "2026-10-18T06:30:00.123000Z", "level": "INFO",
         "logger": "housekeeping", "message": "Housekeeping task dispatched",
         "target": "10", "command": "turnOn"}
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_data: Dict[str, Any] = {
            'timestamp': created.isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.levelno >= logging.WARNING:
            log_data['source'] = f"{record.filename}:{record.lineno}"
            log_data['function'] = record.funcName

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        # Fields passed via logger.info("msg", extra={...})
        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_KEYS or key in log_data:
                continue
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data, ensure_ascii=True, sort_keys=True, default=str)


def _file_formatter() -> logging.Formatter:
    if ENABLE_JSON_LOGS:
        return JSONFormatter()
    return logging.Formatter(_FILE_FORMAT)


def setup_logging() -> logging.Logger:
    """Initialize logging for the application and return the main logger."""
    return setup_logger("scenekit")


def setup_logger(name: str) -> logging.Logger:
    """
    Sets up a logger with appropriate handlers based on environment

    Args:
        name: Logger name (usually module name)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Prevent duplicate handlers if logger already exists
    if logger.handlers:
        return logger

    logger.setLevel(LOG_LEVEL)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(LOG_LEVEL)
    if ENABLE_JSON_LOGS:
        console_handler.setFormatter(JSONFormatter())
    elif IS_PRODUCTION and not IS_DEV_MODE:
        console_handler.setFormatter(logging.Formatter('%(asctime)s | %(levelname)s | %(message)s'))
    else:
        console_handler.setFormatter(ColoredFormatter())
    logger.addHandler(console_handler)

    if ENABLE_FILE_LOGGING:
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                LOG_DIR / "scenekit.log",
                maxBytes=MAX_LOG_SIZE,
                backupCount=BACKUP_COUNT,
                encoding='utf-8'
            )
            file_handler.setLevel(LOG_LEVEL)
            file_handler.setFormatter(_file_formatter())
            logger.addHandler(file_handler)
        except OSError as exc:
            logger.warning("File logging disabled: %s", exc)

    if ENABLE_ERROR_LOGS:
        try:
            error_handler = logging.handlers.RotatingFileHandler(
                LOG_DIR / "scenekit_errors.log",
                maxBytes=MAX_LOG_SIZE,
                backupCount=BACKUP_COUNT,
                encoding='utf-8'
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(_file_formatter())
            logger.addHandler(error_handler)
        except OSError as exc:
            logger.warning("Error log file disabled: %s", exc)

    return logger


def log_startup(module_name: str) -> None:
    """Log startup information for a module."""
    logger = logging.getLogger(module_name)
    logger.info(f"Starting {module_name}")
    logger.info(f"Platform: {platform.platform()} | Python {platform.python_version()}")
    if ENABLE_FILE_LOGGING:
        logger.info(f"Logs: {LOG_DIR}")


def log_shutdown(logger: logging.Logger, component_name: str) -> None:
    """Log component shutdown and flush handlers."""
    logger.info(f"Shutting down {component_name}")
    for handler in logger.handlers:
        handler.flush()


def log_structured(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """Log a message with structured context fields.

    In JSON mode, context fields appear as separate JSON keys. In traditional
    mode they are appended to the message as key=value pairs.

    Example:
        >>> log_structured(logger, logging.INFO, "Housekeeping task dispatched",
        ...                target="10", command="turnOn")
    """
    if ENABLE_JSON_LOGS:
        logger.log(level, message, extra=context)
    elif context:
        context_str = " ".join(f"{k}={v}" for k, v in context.items())
        logger.log(level, f"{message} | {context_str}")
    else:
        logger.log(level, message)
