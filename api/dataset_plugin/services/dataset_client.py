"""
HTTP client for the DataSet query APIs.

Runs long-running queries to completion (submit, poll, release) and sends
the legacy facet request used by the health check.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional, Union

import httpx
from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from dataset_plugin.config import DataSetSettings
from dataset_plugin.models.lrq import (
    FacetQuery,
    FacetRequest,
    LRQRequest,
    WireModel,
    LRQResult,
    TopFacetRequest,
)
from dataset_plugin.obs.decorators import traced
from dataset_plugin.obs.logging_setup import get_logger
from dataset_plugin.obs.prometheus_metrics import prometheus_metrics
from dataset_plugin.services import lrq_protocol
from dataset_plugin.services.errors import (
    DataSetError,
    DataSetStatusError,
    DataSetTimeoutError,
    DataSetTransportError,
    QueryDeadlineExceeded,
    RequestEncodeError,
    ResponseDecodeError,
)
from dataset_plugin.services.lrq_protocol import FORWARD_TAG_HEADER, LRQSession, Phase, PlannedCall

logger = get_logger(__name__)

_DEFAULT = object()

PollingRequest = Union[LRQRequest, FacetQuery, TopFacetRequest]


class _Deadline:
    """Remaining time budget for one query, in event-loop time."""

    def __init__(self, seconds: Optional[float]):
        self.seconds = seconds
        self._expires_at = None
        if seconds is not None:
            self._expires_at = asyncio.get_running_loop().time() + seconds

    def remaining(self) -> Optional[float]:
        if self._expires_at is None:
            return None
        return self._expires_at - asyncio.get_running_loop().time()

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def clip(self, timeout: float) -> float:
        remaining = self.remaining()
        if remaining is None:
            return timeout
        if remaining <= 0:
            raise QueryDeadlineExceeded(self.seconds)
        return min(timeout, remaining)

    async def sleep(self, delay: float) -> None:
        await asyncio.sleep(self.clip(delay))
        if self.expired:
            raise QueryDeadlineExceeded(self.seconds)

    def release_timeout(self, timeout: float, grace: float) -> float:
        """Timeout for the closing DELETE. Never less than the grace period, even once the budget is spent."""
        remaining = self.remaining()
        if remaining is None:
            return timeout
        return min(timeout, max(remaining, grace))


class DataSetClient:
    """
    Client for one DataSet account.

    Usage:
        async with DataSetClient(load_settings()) as client:
            result = await client.do_lrq_request(
                LRQRequest(query_type="PQ", start_time=t0, end_time=t1,
                           pq=PQOptions(query="serverHost = 'web' | count()"))
            )

    The httpx transport may be shared with the host application; a client
    only closes transports it created itself.
    """

    def __init__(self, settings: DataSetSettings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout),
            limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
        )

    async def close(self):
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http.aclose()

    async def __aenter__(self) -> "DataSetClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    # Public operations

    async def do_lrq_request(self, request: LRQRequest, *, deadline=_DEFAULT) -> LRQResult:
        """Run a standard (LOG/PLOT) or PowerQuery request to completion."""
        kind = "power_query" if request.query_type == "PQ" else "standard"
        return await self.execute(request, kind=kind, deadline=deadline)

    async def do_power_query(self, request: LRQRequest, *, deadline=_DEFAULT) -> LRQResult:
        if request.query_type != "PQ":
            raise ValueError(f"expected a PQ request, got {request.query_type}")
        return await self.execute(request, kind="power_query", deadline=deadline)

    async def do_facet_values_request(self, request: FacetQuery, *, deadline=_DEFAULT) -> LRQResult:
        return await self.execute(request, kind="facet_values", deadline=deadline)

    async def do_top_facet_request(self, request: TopFacetRequest, *, deadline=_DEFAULT) -> LRQResult:
        return await self.execute(request, kind="top_facets", deadline=deadline)

    @traced(operation_name="dataset.facet_request")
    async def do_facet_request(self, request: FacetRequest) -> int:
        """Send a legacy facet request and return the raw HTTP status code."""
        call = lrq_protocol.facet_call(self._encode(request))
        response = await self._send(call, self.settings.request_timeout)
        logger.debug("Result of request to facet", status_code=response.status_code, body=response.text)
        prometheus_metrics.record_facet_request(response.status_code)
        return response.status_code

    @traced(operation_name="dataset.lrq.execute")
    async def execute(
        self,
        request: PollingRequest,
        *,
        path: str = lrq_protocol.QUERIES_PATH,
        kind: str = "lrq",
        deadline=_DEFAULT,
    ) -> LRQResult:
        """
        Submit a long-running query, poll until it completes, then release it.

        Args:
            request: Query payload, sent as the body of the launch POST
            path: Submission path
            kind: Query kind label for metrics and logs
            deadline: Seconds allowed for the whole query; None for no limit.
                Defaults to the configured query deadline.

        Returns:
            The completed LRQResult

        Raises:
            DataSetError: If encoding, any submit/poll call, or decoding fails,
                or the deadline passes. Release failures are never raised.
        """
        budget = _Deadline(self.settings.query_deadline if deadline is _DEFAULT else deadline)
        started = time.monotonic()
        session = LRQSession()

        try:
            call = lrq_protocol.submit_call(self._encode(request), path)
            while True:
                response = await self._send(call, budget.clip(self.settings.request_timeout), budget)
                result = self._decode(call, response)
                session = lrq_protocol.observe(session, result, response.headers.get(FORWARD_TAG_HEADER))

                call = lrq_protocol.next_call(session, result)
                if call.phase is Phase.RELEASE:
                    break
                await budget.sleep(self.settings.poll_interval)
        except QueryDeadlineExceeded:
            logger.error(
                "DataSet query did not complete before deadline",
                kind=kind,
                query_id=session.query_id,
                deadline_seconds=budget.seconds,
                poll_rounds=session.poll_rounds,
            )
            prometheus_metrics.record_lrq(kind, "deadline", time.monotonic() - started)
            if session.query_id:
                await self._release(lrq_protocol.release_call(session), budget)
            raise QueryDeadlineExceeded(budget.seconds, session.query_id) from None
        except DataSetError:
            prometheus_metrics.record_lrq(kind, "error", time.monotonic() - started)
            raise

        await self._release(call, budget)

        prometheus_metrics.record_lrq(kind, "success", time.monotonic() - started, session.poll_rounds)
        logger.debug("DataSet query completed", kind=kind, query_id=result.id, poll_rounds=session.poll_rounds)
        return result

    # Transport

    def _encode(self, request: BaseModel) -> str:
        try:
            if isinstance(request, WireModel):
                return request.to_wire()
            return request.model_dump_json(by_alias=True, exclude_none=True)
        except (PydanticSerializationError, TypeError, ValueError) as e:
            logger.error("Error marshalling request to DataSet", error=str(e))
            raise RequestEncodeError(str(e)) from e

    async def _send(
        self,
        call: PlannedCall,
        timeout: float,
        budget: Optional[_Deadline] = None,
    ) -> httpx.Response:
        """Make one call, reading the body in full so the connection can be reused."""
        url = f"{self.settings.base_url}{call.path}"
        headers = lrq_protocol.request_headers(self.settings.api_key, call.forward_tag)
        phase = call.phase.value

        try:
            async with self._http.stream(
                call.method,
                url,
                params=call.params or None,
                content=call.body,
                headers=headers,
                timeout=timeout,
            ) as response:
                await response.aread()
        except httpx.TimeoutException as e:
            if budget is not None and budget.expired:
                raise QueryDeadlineExceeded(budget.seconds) from e
            if call.phase is not Phase.RELEASE:
                logger.error("Request to DataSet timed out", phase=phase, path=call.path, timeout_seconds=timeout)
            raise DataSetTimeoutError(phase, str(e) or "timed out") from e
        except httpx.HTTPError as e:
            if call.phase is not Phase.RELEASE:
                logger.error("Error sending request to DataSet", phase=phase, path=call.path, error=str(e))
            raise DataSetTransportError(phase, str(e)) from e

        return response

    def _decode(self, call: PlannedCall, response: httpx.Response) -> LRQResult:
        phase = call.phase.value
        if not response.is_success:
            logger.error(
                "DataSet rejected request",
                phase=phase,
                path=call.path,
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise DataSetStatusError(phase, response.status_code, response.text[:500])

        try:
            return LRQResult.model_validate_json(response.content)
        except ValidationError as e:
            logger.error("Error unmarshalling response from DataSet", phase=phase, path=call.path, error=str(e))
            raise ResponseDecodeError(phase, str(e)) from e

    async def _release(self, call: PlannedCall, budget: _Deadline) -> None:
        """Best-effort DELETE of a finished query. Failures are logged, never raised."""
        timeout = budget.release_timeout(self.settings.request_timeout, self.settings.release_grace)
        try:
            response = await self._send(call, timeout)
        except DataSetTimeoutError:
            logger.warning("Release request to DataSet timed out", path=call.path, timeout_seconds=timeout)
            prometheus_metrics.record_release_failure()
            return
        except DataSetError as e:
            logger.warning("Error sending release request to DataSet", path=call.path, error=str(e))
            prometheus_metrics.record_release_failure()
            return

        if not response.is_success:
            logger.warning("DataSet refused release request", path=call.path, status_code=response.status_code)
            prometheus_metrics.record_release_failure()
