"""Application configuration management."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import model_validator
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).parent.parent.parent


class Settings(BaseSettings):
    """Application settings managed via Pydantic BaseSettings.

    Attributes:
        API_VERSION: The version of the API, used as the route prefix.
        OTEL_ENABLED: Whether OpenTelemetry instrumentation is enabled.
        OTEL_SERVICE_NAME: The service name for OpenTelemetry.
        OTEL_EXPORTER_OTLP_ENDPOINT: The OTLP endpoint for OpenTelemetry.
        OTEL_TRACES_SAMPLER_ARG: The sampling rate for traces.
        OTEL_PYTHON_FASTAPI_EXCLUDED_URLS: URLs to exclude from tracing.
        OTLP_SECURE: Whether to use a secure connection for OTLP.
        PROMETHEUS_MONITORED_PATHS: Comma-separated path suffixes to collect
            HTTP metrics for.
        LOG_LEVEL: The logging level for the application.
        SERVER_HOST: The host address for the server.
        SERVER_PORT: The port number for the server.
        ANALYZERS_CONFIG_PATH: Path to the analyzer registry YAML file. When
            unset, ``config/analyzers.yaml`` in the project root is used.
        DEFAULT_ANALYZER: Analyzer applied when neither the sub-request nor
            the ``analyzer`` query parameter names one. Empty disables it.
        MAX_TEXT_LENGTH: Maximum accepted request body size in bytes.
    """

    # API Version
    API_VERSION: str = "v1"

    # OpenTelemetry Configuration
    OTEL_ENABLED: bool = True
    OTEL_SERVICE_NAME: str = "analyze-fastapi"
    OTEL_EXPORTER_OTLP_ENDPOINT: str = "http://localhost:4317"
    OTEL_TRACES_SAMPLER_ARG: float = 1.0
    OTEL_PYTHON_FASTAPI_EXCLUDED_URLS: str = "health,metrics"
    OTLP_SECURE: bool = False

    # Prometheus Configuration
    PROMETHEUS_MONITORED_PATHS: str = "_analyze_api"

    # Logging Configuration
    LOG_LEVEL: str = "INFO"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # Analysis Configuration
    ANALYZERS_CONFIG_PATH: str | None = None
    DEFAULT_ANALYZER: str = ""
    MAX_TEXT_LENGTH: int = 1048576

    @model_validator(mode="before")
    @classmethod
    def _strip_inline_comments(cls, data: Any) -> Any:
        if isinstance(data, dict):
            cleaned_data = {}
            for key, value in data.items():
                if isinstance(value, str):
                    cleaned_data[key] = value.split("#")[0].strip()
                else:
                    cleaned_data[key] = value
            return cleaned_data
        return data

    @property
    def analyzers_config_file(self) -> Path:
        """Resolve the analyzer registry configuration file.

        Returns:
            ``ANALYZERS_CONFIG_PATH`` when set, otherwise the bundled
            ``config/analyzers.yaml`` in the project root.
        """
        if self.ANALYZERS_CONFIG_PATH:
            return Path(self.ANALYZERS_CONFIG_PATH)
        return PROJECT_ROOT / "config" / "analyzers.yaml"

    @property
    def default_analyzer(self) -> str | None:
        """The configured fallback analyzer name, or None when disabled."""
        return self.DEFAULT_ANALYZER or None

    @property
    def log_level(self) -> int:
        """Convert the string log level from settings to a logging constant.

        Returns:
            The integer value of the logging level (e.g., logging.INFO,
            logging.DEBUG). Defaults to logging.INFO if the configured
            LOG_LEVEL is invalid.
        """
        return getattr(logging, self.LOG_LEVEL.upper(), logging.INFO)

    class Config:
        """Pydantic configuration class for Settings."""

        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Create and cache a Settings instance.

    Returns:
        A cached instance of the Settings class.
    """
    return Settings()


settings = get_settings()
