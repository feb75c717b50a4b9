"""
DataSet datasource backend - Grafana datasource backed by DataSet long-running queries.

Provides:
- LRQ client (submit, poll, release) over a shared httpx transport
- Panel query translation into DataSet PLOT and PowerQuery requests
- Facet resources for the query editor and template variables
- Health check through the facet API
- OpenTelemetry tracing, Prometheus metrics, structured logging
"""

__version__ = "3.0.0"
__description__ = "Grafana datasource backend for the DataSet long-running query API"

# Export main application
from .main import app

__all__ = ["app"]
