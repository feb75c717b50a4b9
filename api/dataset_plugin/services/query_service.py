from __future__ import annotations
import asyncio
import math
import time
from typing import Any, List, Optional
from pydantic import ValidationError
from dataset_plugin.config import DATASET_FACET_LOOKBACK, DATASET_FACET_MAX_VALUES
from dataset_plugin.models.lrq import (
    FacetOptions,
    FacetQuery,
    FacetRequest,
    FacetValuesResult,
    LRQRequest,
    LRQResult,
    PlotData,
    PlotOptions,
    PQOptions,
    TableData,
    TopFacetOptions,
    TopFacetRequest,
    TopFacetsResult,
)
from dataset_plugin.models.schemas import (
    DataResponse,
    Frame,
    FrameField,
    PanelQuery,
    QueryDataRequest,
    QueryDataResponse,
    TimeRange,
)
from dataset_plugin.obs.logging_setup import get_logger
from dataset_plugin.services.dataset_client import DataSetClient
from dataset_plugin.services.errors import DataSetError, ResponseDecodeError

logger = get_logger(__name__)

MAX_SLICES = 10000
DEFAULT_SLICES = 1000
HEALTH_CHECK_FIELD = "serverHost"

def slice_count(query: PanelQuery, time_range: TimeRange) -> int:
    """Number of plot buckets for a panel: one per interval, capped by maxDataPoints."""
    span_ms = max(time_range.to_ms - time_range.from_ms, 0)
    slices = query.maxDataPoints or DEFAULT_SLICES
    if query.intervalMs and span_ms:
        slices = min(slices, math.ceil(span_ms / query.intervalMs))
    return max(1, min(slices, MAX_SLICES))

def build_lrq_request(query: PanelQuery, time_range: TimeRange) -> LRQRequest:
    """Translate a panel query into a DataSet PLOT or PQ request."""
    start_time = time_range.from_ms // 1000
    end_time = math.ceil(time_range.to_ms / 1000)

    if query.queryType == "Power Query":
        return LRQRequest(
            query_type="PQ",
            start_time=start_time,
            end_time=end_time,
            pq=PQOptions(query=query.expression, result_type="TABLE"),
        )

    return LRQRequest(
        query_type="PLOT",
        start_time=start_time,
        end_time=end_time,
        plot=PlotOptions(
            expression=query.expression,
            slices=slice_count(query, time_range),
            frequency="HIGH",
            breakdown_facet=query.breakDownFacetValue or None,
        ),
    )

def _field_type(values: List[Any]) -> str:
    sample = next((v for v in values if v is not None), None)
    if isinstance(sample, bool):
        return "other"
    if isinstance(sample, (int, float)):
        return "number"
    if isinstance(sample, str):
        return "string"
    return "other"

def plot_frames(ref_id: str, data: PlotData) -> List[Frame]:
    """One frame per plot series: shared time field plus the sample values."""
    frames = []
    for series in data.plots:
        labels = {"facet": series.label} if series.label else None
        frames.append(Frame(
            name=series.label or ref_id,
            refId=ref_id,
            fields=[
                FrameField(name="time", type="time", values=list(data.x_axis)),
                FrameField(name=series.label or "value", type="number", values=list(series.samples), labels=labels),
            ],
        ))
    return frames

def table_frames(ref_id: str, data: TableData) -> List[Frame]:
    """A single frame with one field per table column."""
    fields = []
    for index, column in enumerate(data.columns):
        values = [row[index] if index < len(row) else None for row in data.values]
        fields.append(FrameField(name=column.name, type=_field_type(values), values=values))
    return [Frame(name=ref_id, refId=ref_id, fields=fields)]

def result_frames(query: PanelQuery, result: LRQResult) -> List[Frame]:
    data = result.data or {}
    if query.queryType == "Power Query":
        return table_frames(query.refId, TableData.model_validate(data))
    return plot_frames(query.refId, PlotData.model_validate(data))

async def run_query(client: DataSetClient, query: PanelQuery, time_range: TimeRange) -> DataResponse:
    """Run one panel query. Failures are reported on the response, not raised."""
    if not query.expression.strip():
        return DataResponse(frames=[])

    request = build_lrq_request(query, time_range)
    try:
        result = await client.do_lrq_request(request)
    except DataSetError as e:
        logger.warning("Panel query failed", ref_id=query.refId, query_type=query.queryType, error=str(e))
        return DataResponse(error=str(e))

    if result.error is not None:
        logger.warning("DataSet reported query error", ref_id=query.refId, error=result.error.message)
        return DataResponse(error=result.error.message or "DataSet reported an error")

    try:
        frames = result_frames(query, result)
    except ValidationError as e:
        logger.error("Unexpected result shape from DataSet", ref_id=query.refId, error=str(e))
        return DataResponse(error=f"Unexpected result shape from DataSet: {e.error_count()} errors")

    return DataResponse(frames=frames)

async def query_data(client: DataSetClient, request: QueryDataRequest) -> QueryDataResponse:
    """Run every panel query concurrently; each refId gets its own response."""
    responses = await asyncio.gather(*(
        run_query(client, query, request.range) for query in request.queries
    ))
    return QueryDataResponse(results={
        query.refId: response for query, response in zip(request.queries, responses)
    })

def _facet_window(now: Optional[float] = None) -> tuple[int, int]:
    end_time = int(now if now is not None else time.time())
    return end_time - DATASET_FACET_LOOKBACK, end_time

async def facet_values(client: DataSetClient, facet: str, now: Optional[float] = None) -> List[Any]:
    """Values of one facet over the lookback window, for template variables."""
    start_time, end_time = _facet_window(now)
    request = FacetQuery(
        start_time=start_time,
        end_time=end_time,
        facet_values=FacetOptions(name=facet, max_values=DATASET_FACET_MAX_VALUES),
    )
    result = await client.do_facet_values_request(request)
    try:
        payload = FacetValuesResult.model_validate(result.data or {})
    except ValidationError as e:
        raise ResponseDecodeError("facet values", str(e)) from e
    return [item.value for item in payload.facet.values]

async def top_facets(client: DataSetClient, now: Optional[float] = None) -> List[str]:
    """Most common facet names, for the breakdown picker."""
    start_time, end_time = _facet_window(now)
    request = TopFacetRequest(
        start_time=start_time,
        end_time=end_time,
        top_facets=TopFacetOptions(count=DATASET_FACET_MAX_VALUES),
    )
    result = await client.do_top_facet_request(request)
    try:
        payload = TopFacetsResult.model_validate(result.data or {})
    except ValidationError as e:
        raise ResponseDecodeError("top facets", str(e)) from e
    return [facet.name for facet in payload.facets]

async def check_health(client: DataSetClient) -> tuple[bool, str]:
    """Probe the account with a one-value facet request."""
    if not client.settings.api_key:
        return False, "DataSet API key is not configured"
    try:
        status_code = await client.do_facet_request(FacetRequest(max_count=1, field=HEALTH_CHECK_FIELD))
    except DataSetError as e:
        return False, str(e)
    if status_code != 200:
        return False, f"DataSet facet request returned status {status_code}"
    return True, "Data source is working"
