"""Structured logging configuration using structlog.

Log entries carry the service name, environment, request correlation ID and,
when a span is active, the OpenTelemetry trace and span IDs. Credentials in
MongoDB connection strings are redacted before rendering.
"""

import logging
import re
import sys
from typing import Any, Callable, Iterable, List, Optional

import structlog
from structlog.types import EventDict, Processor

# Credentials between the scheme and the host of a connection string
_URI_CREDENTIALS = re.compile(r"(mongodb(?:\+srv)?://)[^@/\s]+@")

# Chatty third-party loggers held at WARNING
NOISY_LOGGERS = ("pymongo", "urllib3", "opentelemetry")


def app_context_processor(app_name: str, environment: str) -> Callable[..., EventDict]:
    """Build a processor that tags every log entry with app and environment.

    Args:
        app_name: Application name
        environment: Deployment environment

    Returns:
        structlog processor
    """

    def add_app_context(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", app_name)
        event_dict.setdefault("environment", environment)
        return event_dict

    return add_app_context


def redact_connection_strings(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Replace user:password in any MongoDB URI found in string values."""
    for key, value in event_dict.items():
        if isinstance(value, str) and "mongodb" in value:
            event_dict[key] = _URI_CREDENTIALS.sub(r"\1***@", value)
    return event_dict


def add_trace_context(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add the active OpenTelemetry trace and span IDs, if any."""
    from opentelemetry import trace

    span = trace.get_current_span()
    if span.is_recording():
        span_context = span.get_span_context()
        event_dict["trace_id"] = format(span_context.trace_id, "032x")
        event_dict["span_id"] = format(span_context.span_id, "016x")

    return event_dict


def build_processors(app_name: str, environment: str, json_logs: bool) -> List[Processor]:
    """Processor chain shared by every logger, ending in the renderer."""
    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        app_context_processor(app_name, environment),
        add_trace_context,
        redact_connection_strings,
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    return processors


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    service_name: Optional[str] = None,
    environment: str = "production",
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render JSON lines instead of console output
        service_name: Service name added to every entry
        environment: Deployment environment added to every entry
        quiet_loggers: Third-party loggers limited to WARNING
    """
    level = getattr(logging, log_level.upper())

    structlog.configure(
        processors=build_processors(service_name or "mr-travels-web", environment, json_logs),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def bind_context(**kwargs: Any) -> None:
    """Bind values to every log entry emitted in the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all context variables."""
    structlog.contextvars.clear_contextvars()
