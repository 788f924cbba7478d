"""
Logging Configuration and Utilities

Structured logging for the workflow engine: stdlib handlers with an
optional JSON formatter, structlog processors for request context and
redaction of credentials (OTP codes, CAPTCHA answers, secrets).
"""

import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog
from pythonjsonlogger import jsonlogger

from civicdesk.config.settings import settings

# Context variables for request tracking
request_id: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
actor_id: ContextVar[Optional[str]] = ContextVar('actor_id', default=None)

SENSITIVE_KEYS = ('password', 'token', 'secret', 'code', 'otp', 'answer', 'authorization')


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    # identifiers (sequence codes, error codes, *_id keys) are not credentials
    if lowered in ('sequence_code', 'error_code', 'status_code') or lowered.endswith('_id'):
        return False
    return any(sensitive in lowered for sensitive in SENSITIVE_KEYS)


def request_context() -> Dict[str, str]:
    """Request and actor ids bound to the current context, if any."""
    context = {}
    req_id = request_id.get()
    if req_id:
        context['request_id'] = req_id
    uid = actor_id.get()
    if uid:
        context['actor_id'] = uid
    return context


def redact(values: Dict[str, Any]) -> Dict[str, Any]:
    """Mask sensitive entries of a mapping, recursing into nested dicts."""
    for key in list(values.keys()):
        if _is_sensitive(key):
            values[key] = '[REDACTED]'
        elif isinstance(values[key], dict):
            redact(values[key])
    return values


class RequestContextProcessor:
    """Add request context to log records"""

    def __call__(self, logger, method_name, event_dict):
        for key, value in request_context().items():
            event_dict.setdefault(key, value)

        event_dict['timestamp'] = datetime.now(timezone.utc).isoformat()
        event_dict['service'] = 'civicdesk'
        event_dict['environment'] = settings.ENVIRONMENT
        return event_dict


class SecurityLogProcessor:
    """Mark security-relevant events and remove credentials"""

    def __call__(self, logger, method_name, event_dict):
        if any(keyword in str(event_dict.get('event', '')).lower()
               for keyword in ('otp', 'captcha', 'permission', 'authoriz', 'verif')):
            event_dict['security_event'] = True
        redact(event_dict)
        return event_dict


class RedactingFilter(logging.Filter):
    """Stdlib counterpart of SecurityLogProcessor for `extra=` payloads"""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in list(record.__dict__.items()):
            if _is_sensitive(key):
                setattr(record, key, '[REDACTED]')
            elif isinstance(value, dict):
                setattr(record, key, redact(dict(value)))
        return True


class RequestContextFilter(logging.Filter):
    """Stamp request and actor ids onto every stdlib record"""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in request_context().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter for structured logging"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['module'] = record.module
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno

        for key in ('request_id', 'actor_id'):
            value = getattr(record, key, None)
            if value:
                log_record[key] = value

        if record.exc_info:
            log_record['exception'] = self.formatException(record.exc_info)


class LoggingConfig:
    """Centralized logging configuration"""

    @staticmethod
    def configure_structured_logging(json_output: bool) -> None:
        processors = [
            RequestContextProcessor(),
            SecurityLogProcessor(),
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]

        if json_output:
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
    def configure_standard_logging(level: str, json_output: bool) -> None:
        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, level, logging.INFO))
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        if json_output:
            formatter = CustomJsonFormatter('%(asctime)s %(name)s %(levelname)s %(message)s')
        else:
            formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(formatter)
        console_handler.addFilter(RequestContextFilter())
        console_handler.addFilter(RedactingFilter())
        root_logger.addHandler(console_handler)

        # Reduce noise from external libraries
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("sqlalchemy.engine").setLevel(
            logging.INFO if settings.DATABASE_ECHO else logging.WARNING
        )


def configure_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """Configure stdlib and structlog logging from settings."""
    level = (level or settings.LOG_LEVEL).upper()
    json_output = settings.LOG_JSON if json_output is None else json_output
    LoggingConfig.configure_standard_logging(level, json_output)
    LoggingConfig.configure_structured_logging(json_output)


class LoggerAdapter:
    """Logger adapter carrying bound context into every record"""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self._context: Dict[str, Any] = {}

    def add_context(self, **kwargs) -> "LoggerAdapter":
        self._context.update(kwargs)
        return self

    def _log(self, level: int, message: str, *args, **kwargs):
        extra = request_context()
        extra.update(kwargs.get('extra') or {})
        extra.update(self._context)
        kwargs['extra'] = redact(extra)
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


def get_logger(name: Optional[str] = None) -> LoggerAdapter:
    """
    Get configured logger instance.

    Args:
        name: Logger name (defaults to caller's module)

    Returns:
        Enhanced logger adapter
    """
    if name is None:
        import inspect
        frame = inspect.currentframe()
        caller_frame = frame.f_back
        name = caller_frame.f_globals.get('__name__', 'civicdesk')

    return LoggerAdapter(logging.getLogger(name))


def get_struct_logger(name: Optional[str] = None):
    """structlog logger for call sites that emit key/value events."""
    return structlog.get_logger(name or 'civicdesk')
