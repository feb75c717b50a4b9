"""
Wire shapes for the DataSet query APIs.

Requests are immutable and serialise to the camelCase JSON DataSet expects,
with unset option blocks omitted. Results keep any fields the service adds.
"""
from __future__ import annotations
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    def to_wire(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class LogOptions(WireModel):
    filter: str = ""
    limit: int = 1000
    cursor: Optional[str] = None
    ascending: bool = False


class PlotOptions(WireModel):
    expression: str
    slices: int = Field(1000, ge=1, le=10000)
    frequency: Literal["LOW", "HIGH"] = "HIGH"
    auto_align: bool = False
    breakdown_facet: Optional[str] = None


class PQOptions(WireModel):
    query: str
    result_type: Literal["TABLE", "PLOT"] = "TABLE"


class LRQRequest(WireModel):
    """Standard (LOG/PLOT) or PowerQuery (PQ) request."""
    query_type: Literal["LOG", "PLOT", "PQ"]
    start_time: int
    end_time: int
    log: Optional[LogOptions] = None
    plot: Optional[PlotOptions] = None
    pq: Optional[PQOptions] = None


class FacetOptions(WireModel):
    name: str
    filter: str = ""
    max_values: int = 100


class FacetQuery(WireModel):
    query_type: Literal["FACET_VALUES"] = "FACET_VALUES"
    start_time: int
    end_time: int
    facet_values: FacetOptions


class TopFacetOptions(WireModel):
    filter: str = ""
    count: int = 100
    determine_numeric_facets: bool = False


class TopFacetRequest(WireModel):
    query_type: Literal["TOP_FACETS"] = "TOP_FACETS"
    start_time: int
    end_time: int
    top_facets: TopFacetOptions = Field(default_factory=TopFacetOptions)


class FacetRequest(WireModel):
    """Body of the legacy /api/facetQuery call."""
    query_type: Literal["facet"] = "facet"
    max_count: int = 1
    field: str


class LRQError(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: str = ""


class LRQResult(BaseModel):
    """Response of a submit or poll call."""
    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)

    id: str
    steps_completed: int
    steps_total: int
    error: Optional[LRQError] = None
    data: Optional[Dict[str, Any]] = None

    @property
    def is_complete(self) -> bool:
        return self.steps_completed >= self.steps_total


# Result payloads. Only the fields the datasource reads are modelled.

class PlotSeries(BaseModel):
    model_config = ConfigDict(extra="allow")

    label: str = ""
    samples: List[Optional[float]] = Field(default_factory=list)


class PlotData(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)

    x_axis: List[int] = Field(default_factory=list)
    plots: List[PlotSeries] = Field(default_factory=list)


class TableColumn(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str


class TableData(BaseModel):
    model_config = ConfigDict(extra="allow")

    columns: List[TableColumn] = Field(default_factory=list)
    values: List[List[Any]] = Field(default_factory=list)


class FacetValue(BaseModel):
    model_config = ConfigDict(extra="allow")

    value: Any
    count: Optional[int] = None


class FacetValuesData(BaseModel):
    model_config = ConfigDict(extra="allow")

    values: List[FacetValue] = Field(default_factory=list)


class FacetValuesResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    facet: FacetValuesData = Field(default_factory=FacetValuesData)


class TopFacet(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    count: Optional[int] = None


class TopFacetsResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    facets: List[TopFacet] = Field(default_factory=list)
