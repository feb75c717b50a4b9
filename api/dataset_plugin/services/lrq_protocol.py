"""
DataSet long-running query (LRQ) protocol.

An LRQ is launched with a POST; its response may or may not hold the result,
which is signalled by ``stepsCompleted >= stepsTotal``. While incomplete the
query is pinged with GET requests addressed by the response ``id`` and the
last step count seen. Once complete a DELETE frees the server-side resources.
If the launch response carries a forward tag, every later ping and the DELETE
must echo it so they reach the same backend worker.

This module only decides which call comes next. It performs no I/O and does
no logging; ``dataset_client`` drives it over HTTP.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional
from urllib.parse import quote
from dataset_plugin.models.lrq import LRQResult

FORWARD_TAG_HEADER = "X-Dataset-Query-Forward-Tag"
QUERIES_PATH = "/v2/api/queries"
FACET_QUERY_PATH = "/api/facetQuery"

class Phase(str, Enum):
    SUBMIT = "submit"
    POLL = "poll"
    RELEASE = "release"
    FACET = "facet"

@dataclass(frozen=True)
class PlannedCall:
    """One HTTP call the protocol wants made."""
    phase: Phase
    method: str
    path: str
    params: Dict[str, Any] = field(default_factory=dict)
    body: Optional[str] = None
    forward_tag: Optional[str] = None

@dataclass(frozen=True)
class LRQSession:
    """State carried between the calls of a single query."""
    query_id: Optional[str] = None
    forward_tag: Optional[str] = None
    steps_seen: int = 0
    responses: int = 0

    @property
    def poll_rounds(self) -> int:
        return max(self.responses - 1, 0)

def request_headers(api_key: str, forward_tag: Optional[str] = None) -> Dict[str, str]:
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    if forward_tag:
        headers[FORWARD_TAG_HEADER] = forward_tag
    return headers

def submit_call(body: str, path: str = QUERIES_PATH) -> PlannedCall:
    return PlannedCall(phase=Phase.SUBMIT, method="POST", path=path, body=body)

def facet_call(body: str) -> PlannedCall:
    return PlannedCall(phase=Phase.FACET, method="POST", path=FACET_QUERY_PATH, body=body)

def observe(session: LRQSession, result: LRQResult, forward_tag: Optional[str] = None) -> LRQSession:
    """Fold a submit or poll response into the session.

    The forward tag is only taken from the first (launch) response; later
    responses cannot replace it.
    """
    tag = session.forward_tag
    if session.responses == 0 and forward_tag:
        tag = forward_tag
    return replace(
        session,
        query_id=result.id,
        forward_tag=tag,
        steps_seen=result.steps_completed,
        responses=session.responses + 1,
    )

def poll_call(session: LRQSession) -> PlannedCall:
    return PlannedCall(
        phase=Phase.POLL,
        method="GET",
        path=f"{QUERIES_PATH}/{quote(session.query_id or '', safe='')}",
        params={"lastStepSeen": session.steps_seen},
        forward_tag=session.forward_tag,
    )

def release_call(session: LRQSession) -> PlannedCall:
    return PlannedCall(
        phase=Phase.RELEASE,
        method="DELETE",
        path=f"{QUERIES_PATH}/{quote(session.query_id or '', safe='')}",
        forward_tag=session.forward_tag,
    )

def next_call(session: LRQSession, result: LRQResult) -> PlannedCall:
    """Poll again while the query is incomplete, otherwise release it."""
    if result.is_complete:
        return release_call(session)
    return poll_call(session)
