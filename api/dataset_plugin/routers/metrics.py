from __future__ import annotations
from fastapi import APIRouter
from fastapi.responses import Response
from dataset_plugin.obs.prometheus_metrics import prometheus_metrics

router = APIRouter(tags=["metrics"])

@router.get("/metrics/prometheus")
async def prometheus_metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=prometheus_metrics.get_prometheus_metrics(),
        media_type=prometheus_metrics.get_content_type()
    )
