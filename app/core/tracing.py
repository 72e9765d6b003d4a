"""
OpenTelemetry distributed tracing configuration.

Provides:
- Automatic instrumentation for FastAPI
- Custom spans for load test runs
- Trace context propagation
- Export to the console or an OTLP collector
"""
from contextlib import contextmanager
from typing import Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.propagate import set_global_textmap
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Status, StatusCode
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from app.core.config import settings
from app.log.logging import logger

# Global tracer
_tracer: Optional[trace.Tracer] = None


def init_tracing() -> Optional[trace.Tracer]:
    """
    Initialize OpenTelemetry tracing.

    Returns:
        Configured tracer or None if tracing is disabled.
    """
    global _tracer

    if not settings.tracing_enabled:
        logger.info("Tracing is disabled via configuration")
        return None

    if _tracer is not None:
        return _tracer

    resource = Resource.create({
        SERVICE_NAME: settings.service_name,
        SERVICE_VERSION: settings.service_version,
        "deployment.environment": settings.environment
    })

    provider = TracerProvider(resource=resource)

    if settings.tracing_exporter == "otlp":
        exporter = OTLPSpanExporter(endpoint=settings.otlp_endpoint)
        logger.info(f"OTLP exporter configured: {settings.otlp_endpoint}")
    else:
        exporter = ConsoleSpanExporter()
        logger.info("Console exporter configured for tracing")

    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    set_global_textmap(TraceContextTextMapPropagator())

    _tracer = trace.get_tracer(settings.service_name, settings.service_version)

    logger.info("OpenTelemetry tracing initialized")
    return _tracer


def get_tracer() -> Optional[trace.Tracer]:
    """Get the configured tracer."""
    return _tracer


@contextmanager
def create_span(name: str, attributes: Optional[dict] = None):
    """
    Create a new span for tracing.

    Args:
        name: Span name.
        attributes: Optional span attributes.

    Yields:
        The created span, or None when tracing is disabled.
    """
    if _tracer is None:
        yield None
        return

    with _tracer.start_as_current_span(name, kind=trace.SpanKind.INTERNAL) as span:
        if attributes:
            for key, value in attributes.items():
                span.set_attribute(key, value)
        yield span


def add_span_attributes(attributes: dict) -> None:
    """
    Add attributes to the current span.

    Args:
        attributes: Dictionary of attributes to add.
    """
    span = trace.get_current_span()
    if span and span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, value)


def record_exception(exception: Exception) -> None:
    """Record an exception in the current span."""
    span = trace.get_current_span()
    if span and span.is_recording():
        span.record_exception(exception)
        span.set_status(Status(StatusCode.ERROR, str(exception)))


def instrument_fastapi(app) -> None:
    """
    Instrument FastAPI application with OpenTelemetry.

    Args:
        app: FastAPI application instance.
    """
    if not settings.tracing_enabled:
        return

    FastAPIInstrumentor.instrument_app(app)
    logger.info("FastAPI instrumented for tracing")
