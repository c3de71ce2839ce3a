"""
OpenTelemetry tracing configuration.

Provides FastAPI auto-instrumentation and span attributes for redirect
decisions.

@module canonical_redirect/tracing
"""

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.semconv.resource import ResourceAttributes

from canonical_redirect import __version__
from canonical_redirect.config import settings
from canonical_redirect.logging import get_logger
from canonical_redirect.models.canonical import Decision, Redirect

logger = get_logger(__name__)


def init_tracing() -> None:
    """Set up trace export over OTLP when OTEL_TRACING_ENABLED is true."""
    if not settings.otel_tracing_enabled:
        logger.info("Tracing disabled (OTEL_TRACING_ENABLED != true)")
        return

    logger.info(
        "Initializing tracing",
        service=settings.otel_service_name,
        endpoint=settings.otel_exporter_otlp_endpoint,
    )

    resource = Resource.create({
        ResourceAttributes.SERVICE_NAME: settings.otel_service_name,
        ResourceAttributes.SERVICE_VERSION: __version__,
        ResourceAttributes.DEPLOYMENT_ENVIRONMENT: settings.environment,
    })

    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint))
    )
    trace.set_tracer_provider(provider)

    logger.info("Tracing initialized successfully")


def instrument_fastapi(app: FastAPI) -> None:
    """
    Instrument FastAPI application with OpenTelemetry.

    Parameters
    ----------
    app : FastAPI
        The FastAPI application instance.
    """
    if settings.otel_tracing_enabled:
        FastAPIInstrumentor.instrument_app(app)
        logger.info("FastAPI instrumented with OpenTelemetry")


def record_decision(decision: Decision) -> None:
    """Attach the canonical URL decision to the current span."""
    span = trace.get_current_span()
    if not span.is_recording():
        return
    span.set_attribute("canonical.redirect", isinstance(decision, Redirect))
    if isinstance(decision, Redirect):
        span.set_attribute("canonical.url", decision.canonical_url)
