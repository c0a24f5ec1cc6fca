"""Tests for Prometheus metrics functionality."""

import asyncio
from typing import Any, MutableMapping
from unittest.mock import AsyncMock, Mock, patch

import pytest
from fastapi import FastAPI
from prometheus_client import REGISTRY

from analyze_fastapi.app.prometheus import (
    PrometheusMiddleware,
    is_monitored,
    metrics_endpoint,
    setup_prometheus,
    track_subrequest,
)


async def mock_receive() -> MutableMapping[str, Any]:
    return {"type": "http.request", "body": b""}


async def mock_send(message: MutableMapping[str, Any]) -> None:
    pass


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/api/v1/_analyze_api", True),
        ("/api/v1/products/_analyze_api", True),
        ("/api/v1/health", False),
        ("/_analyze_api", False),
        ("/api/v1/my_analyze_api", False),
    ],
)
def test_is_monitored(path: str, expected: bool) -> None:
    assert is_monitored(path) is expected


def test_track_subrequest() -> None:
    before = REGISTRY.get_sample_value(
        "analyze_tokens_emitted_total", {"analyzer": "standard", "corpus": "_global"}
    ) or 0.0

    track_subrequest("standard", None, 3)

    after = REGISTRY.get_sample_value(
        "analyze_tokens_emitted_total", {"analyzer": "standard", "corpus": "_global"}
    )
    assert after == before + 3


def test_metrics_endpoint_function() -> None:
    endpoint_func = metrics_endpoint()
    assert callable(endpoint_func)

    response = asyncio.run(endpoint_func(Mock()))
    assert response.media_type.startswith("text/plain")


def test_setup_prometheus_with_app() -> None:
    app = FastAPI()
    initial_middleware_count = len(app.user_middleware)
    initial_routes_count = len(app.routes)

    setup_prometheus(app)

    assert len(app.user_middleware) == initial_middleware_count + 1
    assert len(app.routes) == initial_routes_count + 1
    assert len([r for r in app.routes if "/metrics" in str(r)]) == 1


def test_prometheus_middleware_skips_unmonitored_paths() -> None:
    middleware = PrometheusMiddleware(FastAPI())
    mock_app = AsyncMock()
    middleware.app = mock_app

    scope = {"type": "http", "path": "/api/v1/health", "method": "GET"}
    asyncio.run(middleware(scope, mock_receive, mock_send))

    mock_app.assert_called_once_with(scope, mock_receive, mock_send)


def test_prometheus_middleware_counts_responses() -> None:
    middleware = PrometheusMiddleware(FastAPI())

    async def app(scope, receive, send):
        await send({"type": "http.response.start", "status": 400})
        await send({"type": "http.response.end"})

    middleware.app = app
    labels = {"method": "POST", "endpoint": "/api/v1/_analyze_api", "status_code": "400"}
    before = REGISTRY.get_sample_value("http_errors_total", labels) or 0.0

    scope = {"type": "http", "path": "/api/v1/_analyze_api", "method": "POST"}
    asyncio.run(middleware(scope, mock_receive, mock_send))

    assert REGISTRY.get_sample_value("http_errors_total", labels) == before + 1


def test_prometheus_middleware_exception_handling() -> None:
    middleware = PrometheusMiddleware(FastAPI())

    async def failing_app(scope: MutableMapping[str, Any], receive: Any, send: Any) -> None:
        raise RuntimeError("Pipeline crashed")

    middleware.app = failing_app
    scope = {"type": "http", "path": "/api/v1/_analyze_api", "method": "POST"}

    with pytest.raises(RuntimeError, match="Pipeline crashed"):
        asyncio.run(middleware(scope, mock_receive, mock_send))


def test_prometheus_middleware_non_http_scope() -> None:
    middleware = PrometheusMiddleware(FastAPI())
    mock_app = AsyncMock()
    middleware.app = mock_app

    websocket_scope = {"type": "websocket", "path": "/ws"}
    asyncio.run(middleware(websocket_scope, mock_receive, mock_send))

    mock_app.assert_called_once_with(websocket_scope, mock_receive, mock_send)


def test_monitored_paths_follow_settings() -> None:
    with patch("analyze_fastapi.app.prometheus.settings") as mock_settings:
        mock_settings.API_VERSION = "v2"
        mock_settings.PROMETHEUS_MONITORED_PATHS = "health, _analyze_api"
        assert is_monitored("/api/v2/health")
        assert not is_monitored("/api/v1/_analyze_api")
