from __future__ import annotations
from prometheus_client import Counter, Histogram, Info, generate_latest, CONTENT_TYPE_LATEST
from dataset_plugin import __version__
from dataset_plugin.obs.logging_setup import get_logger

logger = get_logger(__name__)

# Inbound HTTP metrics
REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Long-running query metrics
LRQ_EXECUTIONS_TOTAL = Counter(
    'dataset_lrq_executions_total',
    'Long-running queries executed against DataSet',
    ['kind', 'outcome']
)

LRQ_DURATION = Histogram(
    'dataset_lrq_duration_seconds',
    'Wall time from submit to release of a long-running query',
    ['kind']
)

LRQ_POLL_ROUNDS = Histogram(
    'dataset_lrq_poll_rounds',
    'Poll requests issued before a long-running query completed',
    ['kind'],
    buckets=(0, 1, 2, 5, 10, 20, 50, 100, 200)
)

LRQ_RELEASE_FAILURES = Counter(
    'dataset_lrq_release_failures_total',
    'Best-effort release calls that failed'
)

FACET_REQUESTS_TOTAL = Counter(
    'dataset_facet_requests_total',
    'Simple facet requests by response status',
    ['status']
)

# Service info
SERVICE_INFO = Info(
    'service_info',
    'Service information'
)

def init_service_info():
    """Initialize service info metrics."""
    SERVICE_INFO.info({
        'version': __version__,
        'service': 'dataset-datasource',
    })

class PrometheusMetrics:
    """Prometheus metrics collector with convenience methods."""

    def __init__(self):
        init_service_info()
        logger.debug("Prometheus metrics initialized")

    def record_request(self, method: str, endpoint: str, status_code: int, duration_seconds: float):
        """Record HTTP request metrics."""
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=str(status_code)).inc()
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration_seconds)

    def record_lrq(self, kind: str, outcome: str, duration_seconds: float, poll_rounds: int = 0):
        """Record one long-running query execution."""
        LRQ_EXECUTIONS_TOTAL.labels(kind=kind, outcome=outcome).inc()
        LRQ_DURATION.labels(kind=kind).observe(duration_seconds)
        if outcome == "success":
            LRQ_POLL_ROUNDS.labels(kind=kind).observe(poll_rounds)

    def record_release_failure(self):
        LRQ_RELEASE_FAILURES.inc()

    def record_facet_request(self, status_code: int):
        FACET_REQUESTS_TOTAL.labels(status=str(status_code)).inc()

    def get_prometheus_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        return generate_latest()

    def get_content_type(self) -> str:
        """Get Prometheus content type."""
        return CONTENT_TYPE_LATEST

# Global Prometheus metrics instance
prometheus_metrics = PrometheusMetrics()
