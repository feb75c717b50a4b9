"""
Data models and schemas.

Provides:
- DataSet wire models for long-running query requests and results
- Pydantic models for the datasource API (query data, resources, health)
"""

from .lrq import (
    LRQRequest,
    LogOptions,
    PlotOptions,
    PQOptions,
    FacetQuery,
    FacetOptions,
    TopFacetRequest,
    TopFacetOptions,
    FacetRequest,
    LRQResult,
    LRQError,
)
from .schemas import (
    TimeRange,
    PanelQuery,
    QueryDataRequest,
    QueryDataResponse,
    DataResponse,
    Frame,
    FrameField,
    FacetQueryRequest,
    ValueListResponse,
    HealthResponse,
)

__all__ = [
    "LRQRequest",
    "LogOptions",
    "PlotOptions",
    "PQOptions",
    "FacetQuery",
    "FacetOptions",
    "TopFacetRequest",
    "TopFacetOptions",
    "FacetRequest",
    "LRQResult",
    "LRQError",
    "TimeRange",
    "PanelQuery",
    "QueryDataRequest",
    "QueryDataResponse",
    "DataResponse",
    "Frame",
    "FrameField",
    "FacetQueryRequest",
    "ValueListResponse",
    "HealthResponse",
]
