from __future__ import annotations
from contextlib import asynccontextmanager
import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from . import __version__
from .config import CORS_ORIGINS, LOG_LEVEL, LOG_STRUCTURED, load_settings

# Import observability setup
from .obs.otel import setup_tracing, shutdown_tracing
from .obs.logging_setup import setup_logging, get_logger
from .obs.middleware import MetricsMiddleware

# Import middleware
from .middleware.request_id import RequestIDMiddleware

# Import services
from .services.dataset_client import DataSetClient

# Import routers
from .routers import health, metrics, query, resources

logger = get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan with startup and shutdown logic."""

    # Startup
    print(f"🚀 DataSet datasource v{__version__} starting up...")

    setup_tracing()
    setup_logging(level=LOG_LEVEL, structured=LOG_STRUCTURED)

    settings = load_settings()
    if not settings.api_key:
        logger.error("DATASET_API_KEY is not set; queries will be rejected by DataSet", url=settings.url)

    # One pooled transport shared by every query
    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout),
        limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
    )
    app.state.dataset_client = DataSetClient(settings, http_client=http_client)

    print(f"🎯 DataSet datasource ready, proxying to {settings.url}")

    yield

    # Shutdown
    print("🛑 DataSet datasource shutting down...")
    await http_client.aclose()
    try:
        shutdown_tracing()
    except Exception as e:
        print(f"Error during telemetry shutdown: {e}")

    print("👋 Shutdown complete")

# Create FastAPI app with lifespan
app = FastAPI(
    title="DataSet Datasource",
    version=__version__,
    description="Grafana datasource backend for DataSet long-running queries",
    lifespan=lifespan
)

# Request ID middleware
app.add_middleware(RequestIDMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Metrics middleware (before FastAPI instrumentation)
app.add_middleware(MetricsMiddleware)

# Auto-instrument FastAPI with OpenTelemetry
FastAPIInstrumentor.instrument_app(
    app,
    excluded_urls="/health,/live,/metrics/prometheus"
)

# Include routers
app.include_router(health.router)
app.include_router(query.router)
app.include_router(resources.router)
app.include_router(metrics.router)

@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": "DataSet Datasource",
        "version": __version__,
        "endpoints": {
            "query": "/query - Run panel queries (QueryData)",
            "facet_query": "/resources/facet-query - Facet values for template variables",
            "top_facets": "/resources/top-facets - Facet names for breakdowns",
            "health": "/health - Check DataSet connectivity",
            "live": "/live - Liveness probe",
            "prometheus": "/metrics/prometheus - Prometheus metrics"
        }
    }
