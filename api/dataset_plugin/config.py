from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Optional

# DataSet Configuration
DATASET_URL: str = os.getenv("DATASET_URL", "https://app.scalyr.com")
DATASET_API_KEY: str | None = os.getenv("DATASET_API_KEY")
DATASET_REQUEST_TIMEOUT: float = float(os.getenv("DATASET_REQUEST_TIMEOUT", "10"))
DATASET_POLL_INTERVAL: float = float(os.getenv("DATASET_POLL_INTERVAL", "0.1"))
DATASET_QUERY_DEADLINE: float | None = (
    float(os.environ["DATASET_QUERY_DEADLINE"]) if os.getenv("DATASET_QUERY_DEADLINE") else None
)
DATASET_RELEASE_GRACE: float = float(os.getenv("DATASET_RELEASE_GRACE", "1"))

# Facet resources (variable editor, breakdown picker)
DATASET_FACET_LOOKBACK: int = int(os.getenv("DATASET_FACET_LOOKBACK", "86400"))
DATASET_FACET_MAX_VALUES: int = int(os.getenv("DATASET_FACET_MAX_VALUES", "100"))

# Logging Configuration
LOG_STRUCTURED: bool = os.getenv("LOG_STRUCTURED", "true").lower() == "true"
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# OpenTelemetry Configuration
OTEL_EXPORTER_OTLP_ENDPOINT: str | None = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
OTEL_SERVICE_NAME: str = os.getenv("OTEL_SERVICE_NAME", "dataset-datasource")
OTEL_SAMPLE_RATE: float = float(os.getenv("OTEL_SAMPLE_RATE", "1.0"))
ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

# HTTP Configuration
CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")


@dataclass(frozen=True)
class DataSetSettings:
    """Connection settings for one DataSet account."""
    url: str
    api_key: str
    request_timeout: float = 10.0
    poll_interval: float = 0.1
    query_deadline: Optional[float] = None
    release_grace: float = 1.0

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")


def load_settings() -> DataSetSettings:
    """Freeze the environment-provided DataSet settings."""
    return DataSetSettings(
        url=DATASET_URL,
        api_key=DATASET_API_KEY or "",
        request_timeout=DATASET_REQUEST_TIMEOUT,
        poll_interval=DATASET_POLL_INTERVAL,
        query_deadline=DATASET_QUERY_DEADLINE,
        release_grace=DATASET_RELEASE_GRACE,
    )
