from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
from dataset_plugin.deps.client import get_dataset_client
from dataset_plugin.models.schemas import FacetQueryRequest, ValueListResponse
from dataset_plugin.obs.logging_setup import get_logger
from dataset_plugin.services.dataset_client import DataSetClient
from dataset_plugin.services.errors import DataSetError
from dataset_plugin.services.query_service import facet_values, top_facets

logger = get_logger(__name__)

router = APIRouter(prefix="/resources", tags=["resources"])

@router.post("/facet-query", response_model=ValueListResponse)
async def facet_query(
    request: FacetQueryRequest,
    client: DataSetClient = Depends(get_dataset_client),
) -> ValueListResponse:
    """Values of a facet, used to populate template variables."""
    try:
        values = await facet_values(client, request.queryVariable)
    except DataSetError as e:
        logger.error("Facet values lookup failed", facet=request.queryVariable, error=str(e))
        raise HTTPException(status_code=502, detail=str(e))
    return ValueListResponse(value=values)

@router.get("/top-facets", response_model=ValueListResponse)
async def top_facet_names(client: DataSetClient = Depends(get_dataset_client)) -> ValueListResponse:
    """Most common facet names, used by the breakdown picker."""
    try:
        names = await top_facets(client)
    except DataSetError as e:
        logger.error("Top facets lookup failed", error=str(e))
        raise HTTPException(status_code=502, detail=str(e))
    return ValueListResponse(value=names)
