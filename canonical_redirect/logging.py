"""
Structured logging for the canonical redirect service.

Every entry carries the emitting component and, when a span is recording,
its trace_id/span_id, so a logged 301 can be found from the request trace.
Output format, level and component default to the service settings.

@module canonical_redirect/logging
"""

import logging
import sys
from collections.abc import Iterable

import structlog
from opentelemetry import trace
from structlog.typing import EventDict, Processor, WrappedLogger

from canonical_redirect.config import settings

# Package logger; every module logger is a child of it.
LOGGER_NAMESPACE = __name__.rpartition(".")[0]

# Paths whose uvicorn access lines are dropped.
QUIET_PATHS: tuple[str, ...] = ("/health",)


class AccessPathFilter(logging.Filter):
    """Drop access log lines for polled endpoints such as health checks."""

    def __init__(self, paths: Iterable[str] = QUIET_PATHS) -> None:
        super().__init__()
        self.paths = tuple(paths)

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        return not any(f" {path} " in message or f" {path}?" in message for path in self.paths)


def add_trace_context(
    _logger: WrappedLogger,
    _method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add trace_id and span_id of the current span, when one is recording."""
    span = trace.get_current_span()
    if span and span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def add_service_fields(service: str, component: str) -> Processor:
    """
    Create a processor that stamps the service and component on each entry.

    Parameters
    ----------
    service : str
        Service name, shared with the tracing resource.
    component : str
        Process role, e.g. "server" or "cli".

    Returns
    -------
    Processor
        structlog processor adding ``service`` and ``component``.
    """

    def add_fields(
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        event_dict.setdefault("service", service)
        event_dict.setdefault("component", component)
        return event_dict

    return add_fields


def shared_processors(component: str) -> list[Processor]:
    """Processors applied to both structlog and standard library records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_trace_context,
        add_service_fields(settings.otel_service_name, component),
    ]


def select_renderer(json_logs: bool) -> Processor:
    """JSON lines for collectors, colored console output for a terminal."""
    if json_logs:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(
    component: str | None = None,
    *,
    json_logs: bool | None = None,
    log_level: str | None = None,
) -> None:
    """
    Configure structlog and route standard logging through it.

    Parameters
    ----------
    component : str | None
        Process role added to every entry. Defaults to ``settings.log_component``.
    json_logs : bool | None
        Force JSON (True) or console (False) output. Defaults to ``settings.json_logs``.
    log_level : str | None
        Level for the service's own loggers. Defaults to ``settings.log_level``.
    """
    component = component or settings.log_component
    json_logs = settings.json_logs if json_logs is None else json_logs
    level = (log_level or settings.log_level).upper()

    processors = shared_processors(component)

    structlog.configure(
        processors=[
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # uvicorn and starlette log through the standard library
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                select_renderer(json_logs),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(LOGGER_NAMESPACE).setLevel(level)

    access = logging.getLogger("uvicorn.access")
    if not any(isinstance(f, AccessPathFilter) for f in access.filters):
        access.addFilter(AccessPathFilter())


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, normally called with ``__name__``."""
    return structlog.get_logger(name)
