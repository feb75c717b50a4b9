from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional, Union
import httpx
import pytest
from dataset_plugin.config import DataSetSettings
from dataset_plugin.models.lrq import LRQResult
from dataset_plugin.services.dataset_client import DataSetClient
from dataset_plugin.services.lrq_protocol import FORWARD_TAG_HEADER

BASE_URL = "https://dataset.test"
API_KEY = "test-api-key"

Reply = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]

def lrq_response(
    query_id: str,
    steps_completed: int,
    steps_total: int,
    data: Optional[Dict[str, Any]] = None,
    forward_tag: Optional[str] = None,
    **extra: Any,
) -> httpx.Response:
    """A submit/poll response as DataSet sends it."""
    body = {"id": query_id, "stepsCompleted": steps_completed, "stepsTotal": steps_total, **extra}
    if data is not None:
        body["data"] = data
    headers = {FORWARD_TAG_HEADER: forward_tag} if forward_tag else {}
    return httpx.Response(200, json=body, headers=headers)

def timeout(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("timed out", request=request)

def connect_error(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)

class FakeDataSet:
    """
    Scripted DataSet server for httpx.MockTransport.

    Submit and poll calls are answered from ``replies`` in order; the last
    reply repeats once the script runs out. DELETE calls get ``release``.
    """

    def __init__(self, replies: List[Reply], release: Reply = None):
        self.replies = list(replies)
        self.release = release if release is not None else httpx.Response(200, json={"status": "success"})
        self.requests: List[httpx.Request] = []

    def _answer(self, reply: Reply, request: httpx.Request) -> httpx.Response:
        if isinstance(reply, Exception):
            raise reply
        if callable(reply) and not isinstance(reply, httpx.Response):
            return reply(request)
        return reply

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "DELETE":
            return self._answer(self.release, request)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        return self._answer(reply, request)

    @property
    def calls(self) -> List[tuple]:
        return [(r.method, r.url.path) for r in self.requests]

    def client(self, **settings: Any) -> DataSetClient:
        options = {"url": BASE_URL, "api_key": API_KEY, "poll_interval": 0.0}
        options.update(settings)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return DataSetClient(DataSetSettings(**options), http_client=http_client)

class StubClient:
    """Stands in for DataSetClient in service and API tests."""

    def __init__(self, settings: Optional[DataSetSettings] = None):
        self.settings = settings or DataSetSettings(url=BASE_URL, api_key=API_KEY)
        self.requests: List[Any] = []
        self.results: Dict[str, Any] = {}
        self.facet_status = 200

    def _reply(self, key: str, request: Any) -> LRQResult:
        self.requests.append(request)
        outcome = self.results[key]
        if callable(outcome):
            outcome = outcome(request)
        if isinstance(outcome, Exception):
            raise outcome
        return LRQResult.model_validate({"id": "q", "stepsCompleted": 1, "stepsTotal": 1, **outcome})

    async def do_lrq_request(self, request, **kwargs):
        return self._reply(request.query_type, request)

    async def do_facet_values_request(self, request, **kwargs):
        return self._reply("FACET_VALUES", request)

    async def do_top_facet_request(self, request, **kwargs):
        return self._reply("TOP_FACETS", request)

    async def do_facet_request(self, request):
        self.requests.append(request)
        if isinstance(self.facet_status, Exception):
            raise self.facet_status
        return self.facet_status

@pytest.fixture
def stub_client() -> StubClient:
    return StubClient()
