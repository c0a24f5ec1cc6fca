"""Test configuration and fixtures."""

import os

# Must be set before the application settings are first loaded.
os.environ["OTEL_ENABLED"] = "false"
os.environ["OTEL_EXPORTER_OTLP_ENDPOINT"] = ""

from collections.abc import Iterator  # noqa: E402
from unittest.mock import MagicMock, patch  # noqa: E402

import pytest  # noqa: E402
from fakes import FakePipeline  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from analyze_fastapi.app.main import create_app  # noqa: E402
from analyze_fastapi.app.services.registry import (  # noqa: E402
    AnalyzerRegistry,
    CorpusRegistry,
    CorpusScope,
)
from analyze_fastapi.app.services.resolver import AnalyzerResolver  # noqa: E402


@pytest.fixture(autouse=True)
def disable_telemetry(monkeypatch: pytest.MonkeyPatch) -> None:
    """Disable OpenTelemetry for all tests.

    Args:
        monkeypatch: pytest's monkeypatch fixture for modifying values.
    """
    monkeypatch.setenv("OTEL_ENABLED", "false")
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "")

    from analyze_fastapi.app import telemetry
    from analyze_fastapi.app.config import settings

    monkeypatch.setattr(telemetry, "setup_telemetry", MagicMock())
    monkeypatch.setattr(telemetry, "shutdown_telemetry", MagicMock())
    monkeypatch.setattr(settings, "OTEL_ENABLED", False)

    telemetry._tracer_provider = None
    telemetry._span_processors.clear()
    telemetry._is_setup_complete = False


@pytest.fixture
def registry() -> AnalyzerRegistry:
    """Global analyzers: ``standard`` and ``keyword``."""
    return AnalyzerRegistry(
        {
            "standard": FakePipeline("standard"),
            "keyword": FakePipeline("keyword"),
        }
    )


@pytest.fixture
def corpora(registry: AnalyzerRegistry) -> CorpusRegistry:
    """A ``products`` corpus that overrides ``standard`` and adds ``sku``."""
    return CorpusRegistry(
        [
            CorpusScope(
                "products",
                {
                    "standard": FakePipeline("products.standard"),
                    "sku": FakePipeline("products.sku"),
                },
                parent=registry,
            )
        ]
    )


@pytest.fixture
def resolver(registry: AnalyzerRegistry, corpora: CorpusRegistry) -> AnalyzerResolver:
    return AnalyzerResolver(registry, corpora)


@pytest.fixture
def client(registry: AnalyzerRegistry, corpora: CorpusRegistry) -> Iterator[TestClient]:
    """Create a test client whose lifespan loads the fake registries.

    Yields:
        TestClient: A configured test client for making requests.
    """
    with patch(
        "analyze_fastapi.app.main.load_registries", return_value=(registry, corpora)
    ):
        with TestClient(create_app()) as test_client:
            yield test_client
