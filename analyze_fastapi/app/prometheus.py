"""Prometheus metrics integration for FastAPI."""

import logging
from typing import Callable

from fastapi import FastAPI
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from starlette.responses import Response

from analyze_fastapi.app.config import settings

logger = logging.getLogger(__name__)

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total count of HTTP requests",
    ["method", "endpoint", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
)
ERROR_COUNT = Counter(
    "http_errors_total",
    "Total count of HTTP errors",
    ["method", "endpoint", "status_code"],
)
ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of currently active HTTP requests",
    ["method", "endpoint"],
)
ANALYZE_SUBREQUESTS = Counter(
    "analyze_subrequests_total",
    "Total count of analyzed sub-requests",
    ["analyzer", "corpus"],
)
ANALYZE_TOKENS_EMITTED = Counter(
    "analyze_tokens_emitted_total",
    "Total count of tokens emitted by analyzers",
    ["analyzer", "corpus"],
)


def monitored_suffixes() -> list[str]:
    """Path suffixes that HTTP metrics are collected for."""
    return [
        suffix.strip()
        for suffix in settings.PROMETHEUS_MONITORED_PATHS.split(",")
        if suffix.strip()
    ]


def is_monitored(path: str) -> bool:
    """Check whether ``path`` is an API path ending in a monitored suffix.

    Matching on the suffix covers corpus-scoped routes such as
    ``/api/v1/products/_analyze_api``.
    """
    prefix = f"/api/{settings.API_VERSION}/"
    if not path.startswith(prefix):
        return False
    return any(path.endswith(f"/{suffix}") for suffix in monitored_suffixes())


class PrometheusMiddleware:
    """ASGI middleware collecting Prometheus metrics on HTTP requests."""

    def __init__(self, app: FastAPI):
        self.app = app
        logger.info("Prometheus middleware initialized")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or not is_monitored(scope["path"]):
            return await self.app(scope, receive, send)

        path = scope["path"]
        method = scope["method"]
        ACTIVE_REQUESTS.labels(method=method, endpoint=path).inc()

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                status_code = message["status"]
                REQUEST_COUNT.labels(
                    method=method, endpoint=path, status_code=status_code
                ).inc()
                if status_code >= 400:
                    ERROR_COUNT.labels(
                        method=method, endpoint=path, status_code=status_code
                    ).inc()
            await send(message)
            if message["type"] == "http.response.end" and not message.get("more_body"):
                ACTIVE_REQUESTS.labels(method=method, endpoint=path).dec()

        try:
            with REQUEST_LATENCY.labels(method=method, endpoint=path).time():
                await self.app(scope, receive, send_wrapper)
        except Exception as e:
            ACTIVE_REQUESTS.labels(method=method, endpoint=path).dec()
            ERROR_COUNT.labels(method=method, endpoint=path, status_code=500).inc()
            logger.exception("Error in request: %s", str(e))
            raise


def track_subrequest(analyzer: str, corpus: str | None, token_count: int) -> None:
    """Record one analyzed sub-request and the tokens it produced.

    Args:
        analyzer: The analyzer name.
        corpus: The corpus scope, or None for the global registry.
        token_count: Number of tokens emitted.
    """
    corpus_label = corpus or "_global"
    ANALYZE_SUBREQUESTS.labels(analyzer=analyzer, corpus=corpus_label).inc()
    ANALYZE_TOKENS_EMITTED.labels(analyzer=analyzer, corpus=corpus_label).inc(token_count)


def metrics_endpoint() -> Callable:
    """Create metrics endpoint handler.

    Returns:
        Callable: Starlette endpoint handler function
    """

    async def metrics(request):
        return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)

    return metrics


def setup_prometheus(app: FastAPI) -> None:
    """Set up Prometheus metrics for FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(PrometheusMiddleware)
    app.add_route(f"/api/{settings.API_VERSION}/metrics", metrics_endpoint())
    logger.info(
        "Prometheus metrics setup complete. Monitoring suffixes: %s",
        ", ".join(monitored_suffixes()),
    )
