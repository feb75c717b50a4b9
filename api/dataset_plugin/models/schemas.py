from __future__ import annotations
from typing import List, Literal, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field

class TimeRange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_ms: int = Field(..., alias="from", description="Range start, epoch milliseconds")
    to_ms: int = Field(..., alias="to", description="Range end, epoch milliseconds")

class PanelQuery(BaseModel):
    model_config = ConfigDict(extra="ignore")

    refId: str
    queryType: Literal["Standard", "Power Query"] = "Standard"
    expression: str = ""
    breakDownFacetValue: Optional[str] = None
    maxDataPoints: Optional[int] = Field(None, ge=1)
    intervalMs: Optional[int] = Field(None, ge=1)

class QueryDataRequest(BaseModel):
    queries: List[PanelQuery]
    range: TimeRange

class FrameField(BaseModel):
    name: str
    type: Literal["time", "number", "string", "other"]
    values: List[Any]
    labels: Optional[Dict[str, str]] = None

class Frame(BaseModel):
    name: str
    refId: str
    fields: List[FrameField]

class DataResponse(BaseModel):
    frames: List[Frame] = []
    error: Optional[str] = None

class QueryDataResponse(BaseModel):
    results: Dict[str, DataResponse]

class FacetQueryRequest(BaseModel):
    queryVariable: str = Field(..., min_length=1, description="Facet whose values populate the variable")

class ValueListResponse(BaseModel):
    value: List[Any]

class HealthResponse(BaseModel):
    status: Literal["OK", "ERROR"]
    message: str
