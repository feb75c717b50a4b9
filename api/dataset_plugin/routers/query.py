from __future__ import annotations
from fastapi import APIRouter, Depends
from dataset_plugin.deps.client import get_dataset_client
from dataset_plugin.models.schemas import QueryDataRequest, QueryDataResponse
from dataset_plugin.services.dataset_client import DataSetClient
from dataset_plugin.services.query_service import query_data

router = APIRouter(prefix="/query", tags=["query"])

@router.post("", response_model=QueryDataResponse, response_model_exclude_none=True)
async def query_data_endpoint(
    request: QueryDataRequest,
    client: DataSetClient = Depends(get_dataset_client),
) -> QueryDataResponse:
    """Run panel queries; each refId carries its own frames or error."""
    return await query_data(client, request)
