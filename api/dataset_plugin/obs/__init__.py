"""
Observability module - Tracing, metrics, and logging.

Provides:
- OpenTelemetry distributed tracing
- Prometheus metrics collection
- Structured logging with correlation
- Tracing decorator for DataSet client calls
"""

from .otel import setup_tracing, shutdown_tracing
from .prometheus_metrics import prometheus_metrics
from .logging_setup import setup_logging, get_logger
from .decorators import traced

__all__ = [
    "setup_tracing",
    "shutdown_tracing",
    "prometheus_metrics",
    "setup_logging",
    "get_logger",
    "traced",
]
