"""OpenTelemetry configuration and utilities."""

import inspect
import logging
import socket
from collections.abc import Iterator
from contextlib import contextmanager
from functools import wraps
from typing import Any, Optional
from urllib.parse import parse_qs

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.semconv.resource import ResourceAttributes
from opentelemetry.trace.status import Status, StatusCode

from analyze_fastapi.app.config import settings

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

_tracer_provider: Optional[TracerProvider] = None
_span_processors: list[BatchSpanProcessor] = []
_is_setup_complete = False


def _enrich_span_with_request_details(span: trace.Span, scope: dict[str, Any]) -> None:
    """Tag request spans with the query-string corpus and analyzer defaults."""
    if not span or not span.is_recording():
        return

    params = parse_qs(scope.get("query_string", b"").decode("latin-1"))
    for key in ("corpus", "index"):
        if params.get(key):
            span.set_attribute("app.analyze.default_corpus", params[key][0])
            break
    if params.get("analyzer"):
        span.set_attribute("app.analyze.default_analyzer", params["analyzer"][0])


def _is_collector_available(host: str, port: int, timeout: float = 0.5) -> bool:
    """Check if an OpenTelemetry collector is listening at host:port."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def _build_exporter() -> SpanExporter:
    endpoint = settings.OTEL_EXPORTER_OTLP_ENDPOINT.strip()
    if not endpoint:
        logger.info("OTLP endpoint not configured. Using console exporter.")
        return ConsoleSpanExporter()

    try:
        host_port = endpoint.replace("http://", "").replace("https://", "").split(":")
        host = host_port[0]
        port = int(host_port[1]) if len(host_port) > 1 else 4317
    except ValueError as e:
        logger.warning("Invalid OTLP endpoint %s: %s. Using console exporter.", endpoint, e)
        return ConsoleSpanExporter()

    if not _is_collector_available(host, port):
        logger.warning(
            "OTLP collector not available at %s:%d. Using console exporter.", host, port
        )
        return ConsoleSpanExporter()

    logger.info("OTLP collector is available at %s:%d", host, port)
    return OTLPSpanExporter(endpoint=endpoint, insecure=not settings.OTLP_SECURE, timeout=3)


def setup_telemetry(app: FastAPI) -> None:
    """Set up OpenTelemetry tracing for the FastAPI application."""
    global _tracer_provider, _is_setup_complete

    if not settings.OTEL_ENABLED:
        logger.info("OpenTelemetry instrumentation is disabled")
        return

    if _is_setup_complete:
        logger.debug("OpenTelemetry already configured, skipping setup")
        return

    if hasattr(trace.get_tracer_provider(), "add_span_processor"):
        logger.warning(
            "TracerProvider already exists, skipping telemetry setup to avoid conflicts"
        )
        return

    try:
        resource = Resource.create(
            {
                ResourceAttributes.SERVICE_NAME: settings.OTEL_SERVICE_NAME,
                ResourceAttributes.SERVICE_VERSION: settings.API_VERSION,
            }
        )
        _tracer_provider = TracerProvider(
            resource=resource,
            sampler=ParentBased(root=TraceIdRatioBased(settings.OTEL_TRACES_SAMPLER_ARG)),
        )
        trace.set_tracer_provider(_tracer_provider)

        processor = BatchSpanProcessor(_build_exporter())
        _tracer_provider.add_span_processor(processor)
        _span_processors.append(processor)

        FastAPIInstrumentor.instrument_app(
            app,
            excluded_urls=settings.OTEL_PYTHON_FASTAPI_EXCLUDED_URLS,
            server_request_hook=_enrich_span_with_request_details,
        )
        _is_setup_complete = True
        logger.info("OpenTelemetry instrumentation configured successfully")

    except Exception as e:
        logger.error("Failed to configure OpenTelemetry: %s", str(e))
        logger.exception(e)


def shutdown_telemetry() -> None:
    """Shut down span processors so buffered spans are flushed."""
    global _tracer_provider, _is_setup_complete

    if not _is_setup_complete:
        return

    logger.info("Shutting down OpenTelemetry components...")
    for processor in _span_processors:
        try:
            processor.shutdown()
        except Exception as e:
            logger.warning("Error shutting down span processor: %s", e)

    _span_processors.clear()
    _tracer_provider = None
    _is_setup_complete = False
    logger.info("OpenTelemetry shutdown completed")


@contextmanager
def trace_span(name: str, **attributes: Any) -> Iterator[Optional[trace.Span]]:
    """Run a block inside a span, recording any exception on it.

    Attributes whose value is None are not set. Yields None when telemetry
    is disabled.
    """
    if not settings.OTEL_ENABLED:
        yield None
        return

    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(name, record_exception=False) as span:
        span.set_attributes({k: v for k, v in attributes.items() if v is not None})
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise
        span.set_status(Status(StatusCode.OK))


def trace_method(name=None):
    """Decorator to add OpenTelemetry tracing to a route function.

    Works for both sync and async functions; sync route handlers keep
    running on FastAPI's thread pool.
    """

    def decorator(func):
        span_name = name or func.__name__

        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                with trace_span(span_name, **{"function.name": func.__name__}):
                    return await func(*args, **kwargs)

            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            with trace_span(span_name, **{"function.name": func.__name__}):
                return func(*args, **kwargs)

        return wrapper

    return decorator
