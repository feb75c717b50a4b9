from __future__ import annotations
import time
import uuid
from typing import Callable, Optional
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from dataset_plugin.obs.logging_setup import get_logger

logger = get_logger(__name__)

GRAFANA_ORG_HEADER = "X-Grafana-Org-Id"

class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tags each datasource call with a request id and logs it with the calling Grafana org."""

    def __init__(self, app, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    def _request_id(self, request: Request) -> str:
        return request.headers.get(self.header_name) or f"req_{uuid.uuid4().hex[:12]}"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = self._request_id(request)
        request.state.request_id = request_id
        org_id: Optional[str] = request.headers.get(GRAFANA_ORG_HEADER)
        start_time = time.time()

        response = await call_next(request)
        response.headers[self.header_name] = request_id

        logger.debug(
            "Datasource request handled",
            request_id=request_id,
            grafana_org=org_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.time() - start_time) * 1000, 2)
        )
        return response
