"""
Business logic services.

Provides:
- DataSet long-running query protocol and client
- Panel query translation and frame conversion
- Facet lookups and health check
"""

from .errors import (
    DataSetError,
    DataSetStatusError,
    DataSetTimeoutError,
    DataSetTransportError,
    QueryDeadlineExceeded,
    RequestEncodeError,
    ResponseDecodeError,
)
from .dataset_client import DataSetClient
from .query_service import query_data, facet_values, top_facets, check_health

__all__ = [
    "DataSetError",
    "DataSetStatusError",
    "DataSetTimeoutError",
    "DataSetTransportError",
    "QueryDeadlineExceeded",
    "RequestEncodeError",
    "ResponseDecodeError",
    "DataSetClient",
    "query_data",
    "facet_values",
    "top_facets",
    "check_health",
]
