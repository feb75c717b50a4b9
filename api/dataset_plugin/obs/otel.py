from __future__ import annotations
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased, ALWAYS_ON
from opentelemetry.propagate import set_global_textmap
from opentelemetry.propagators.b3 import B3MultiFormat
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from dataset_plugin import __version__
from dataset_plugin.config import (
    ENVIRONMENT,
    OTEL_EXPORTER_OTLP_ENDPOINT,
    OTEL_SAMPLE_RATE,
    OTEL_SERVICE_NAME,
)

def setup_tracing() -> None:
    """Initialize OpenTelemetry tracing."""

    set_global_textmap(B3MultiFormat())

    resource = Resource.create({
        "service.name": OTEL_SERVICE_NAME,
        "service.version": __version__,
        "deployment.environment": ENVIRONMENT,
    })

    sampler = ALWAYS_ON if OTEL_SAMPLE_RATE >= 1.0 else TraceIdRatioBased(OTEL_SAMPLE_RATE)
    tracer_provider = TracerProvider(resource=resource, sampler=sampler)

    if OTEL_EXPORTER_OTLP_ENDPOINT:
        exporter = OTLPSpanExporter(endpoint=f"{OTEL_EXPORTER_OTLP_ENDPOINT}/v1/traces", timeout=10)
        tracer_provider.add_span_processor(BatchSpanProcessor(
            exporter,
            max_queue_size=512,
            max_export_batch_size=256,
            export_timeout_millis=30000
        ))
        print(f"🔍 OTLP exporter configured: {OTEL_EXPORTER_OTLP_ENDPOINT}")
    else:
        print("⚠️  No OTLP endpoint configured, using console exporter")
        tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(tracer_provider)

    # Outbound DataSet calls go through httpx
    HTTPXClientInstrumentor().instrument()
    LoggingInstrumentor().instrument(set_logging_format=False)

    print(f"🔍 OpenTelemetry configured for service: {OTEL_SERVICE_NAME}")

def shutdown_tracing() -> None:
    """Flush and stop the tracer provider, if it supports it."""
    tracer_provider = trace.get_tracer_provider()
    if hasattr(tracer_provider, "shutdown"):
        tracer_provider.shutdown()
