"""
API routers module.

Provides:
- Query data endpoint for panel queries
- Facet resources for the query editor and variables
- Health, liveness and metrics endpoints
"""

from . import health, query, resources, metrics

__all__ = [
    "health",
    "query",
    "resources",
    "metrics"
]
