from __future__ import annotations
import time
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from dataset_plugin import __version__
from dataset_plugin.deps.client import get_dataset_client
from dataset_plugin.models.schemas import HealthResponse
from dataset_plugin.obs.logging_setup import get_logger
from dataset_plugin.services.dataset_client import DataSetClient
from dataset_plugin.services.query_service import check_health

logger = get_logger(__name__)

router = APIRouter(tags=["health"])

@router.get("/health", response_model=HealthResponse)
async def health(client: DataSetClient = Depends(get_dataset_client)) -> HealthResponse:
    """
    Datasource health check.
    Probes DataSet with a facet request; the body reports OK or ERROR.
    """
    ok, message = await check_health(client)
    if not ok:
        logger.warning("Health check failed", reason=message)
    return HealthResponse(status="OK" if ok else "ERROR", message=message)

@router.get("/live")
async def liveness_check() -> JSONResponse:
    """Liveness probe; does not contact DataSet."""
    return JSONResponse({
        "status": "alive",
        "timestamp": time.time(),
        "service": "dataset-datasource",
        "version": __version__
    })
