"""
Logging Configuration and Utilities

Structured logging for the allocation engine: structlog processors over
the standard library, JSON output through python-json-logger, and a
context-carrying adapter used by services and repositories.
"""

import sys
import logging
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from contextvars import ContextVar

import structlog
from pythonjsonlogger import jsonlogger

from hostel_allocation.config.settings import Settings

# Context variables for request tracking
request_id: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
actor_id: ContextVar[Optional[str]] = ContextVar('actor_id', default=None)

SENSITIVE_KEYS = ('password', 'token', 'secret', 'signature', 'authorization', 'cookie')


class RequestContextProcessor:
    """Add request context to log records"""

    def __init__(self, environment: str):
        self.environment = environment

    def __call__(self, logger, method_name, event_dict):
        req_id = request_id.get()
        if req_id:
            event_dict['request_id'] = req_id

        actor = actor_id.get()
        if actor:
            event_dict['actor_id'] = actor

        event_dict['timestamp'] = datetime.now(timezone.utc).isoformat()
        event_dict['service'] = 'hostel-allocation'
        event_dict['environment'] = self.environment
        return event_dict


class SanitizingProcessor:
    """Mask secrets before they reach a handler"""

    def __call__(self, logger, method_name, event_dict):
        _sanitize(event_dict)
        return event_dict


def _sanitize(payload: Dict[str, Any]) -> None:
    for key in list(payload.keys()):
        if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
            payload[key] = '[REDACTED]'
        elif isinstance(payload[key], dict):
            _sanitize(payload[key])


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter for structured logging"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['module'] = record.module
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno

        req_id = request_id.get()
        if req_id and 'request_id' not in log_record:
            log_record['request_id'] = req_id

        _sanitize(log_record)


class LoggingConfig:
    """Centralized logging configuration"""

    @staticmethod
    def configure_structured_logging(settings: Settings) -> None:
        """Configure structlog on top of the stdlib handlers"""
        processors = [
            RequestContextProcessor(settings.ENVIRONMENT),
            SanitizingProcessor(),
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]

        if settings.LOG_FORMAT == "json":
            processors.append(structlog.processors.JSONRenderer())
        else:
            processors.append(structlog.processors.KeyValueRenderer())

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            context_class=dict,
            cache_logger_on_first_use=True,
        )

    @staticmethod
    def configure_standard_logging(settings: Settings) -> None:
        """Configure standard Python logging"""
        level = getattr(logging, settings.LOG_LEVEL, logging.INFO)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)

        if settings.LOG_FORMAT == "json":
            formatter = CustomJsonFormatter(
                '%(asctime)s %(name)s %(levelname)s %(message)s'
            )
        else:
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )

        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        LoggingConfig._configure_library_loggers(settings)

    @staticmethod
    def _configure_library_loggers(settings: Settings) -> None:
        """Configure logging for external libraries"""
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

        if settings.DATABASE_ECHO:
            logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
        else:
            logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

        logging.getLogger("redis").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)


class LoggerAdapter:
    """Enhanced logger adapter with context management"""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self._context: Dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self.logger.name

    def add_context(self, **kwargs):
        """Add context to all log messages"""
        self._context.update(kwargs)
        return self

    def clear_context(self):
        self._context.clear()
        return self

    def _log(self, level: int, message: str, *args, **kwargs):
        extra = dict(kwargs.get('extra') or {})
        extra.update(self._context)
        kwargs['extra'] = extra
        self.logger.log(level, message, *args, **kwargs)

    def debug(self, message: str, *args, **kwargs):
        self._log(logging.DEBUG, message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs):
        self._log(logging.INFO, message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs):
        self._log(logging.WARNING, message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs):
        self._log(logging.ERROR, message, *args, **kwargs)

    def exception(self, message: str, *args, **kwargs):
        kwargs.setdefault('exc_info', True)
        self._log(logging.ERROR, message, *args, **kwargs)

    def critical(self, message: str, *args, **kwargs):
        self._log(logging.CRITICAL, message, *args, **kwargs)


def get_logger(name: Optional[str] = None) -> LoggerAdapter:
    """
    Get configured logger instance.

    Args:
        name: Logger name (defaults to the package logger)

    Returns:
        Enhanced logger adapter
    """
    return LoggerAdapter(logging.getLogger(name or 'hostel_allocation'))


def configure_logging(settings: Settings) -> None:
    """Initialize logging configuration; called once by the application factory"""
    LoggingConfig.configure_structured_logging(settings)
    LoggingConfig.configure_standard_logging(settings)

    get_logger(__name__).info("Logging system initialized", extra={
        'log_level': settings.LOG_LEVEL,
        'log_format': settings.LOG_FORMAT,
    })


__all__ = [
    'get_logger',
    'configure_logging',
    'LoggerAdapter',
    'LoggingConfig',
    'request_id',
    'actor_id',
]
