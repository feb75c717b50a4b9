from __future__ import annotations
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from dataset_plugin.obs.prometheus_metrics import prometheus_metrics

class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP metrics."""

    @staticmethod
    def _endpoint(request: Request) -> str:
        # The router stores the matched route in the shared scope; its template keeps labels bounded
        route = request.scope.get("route")
        return getattr(route, "path", request.url.path)

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        method = request.method

        try:
            response: Response = await call_next(request)
        except Exception:
            prometheus_metrics.record_request(method, self._endpoint(request), 500, time.time() - start_time)
            raise

        prometheus_metrics.record_request(
            method, self._endpoint(request), response.status_code, time.time() - start_time
        )
        return response
