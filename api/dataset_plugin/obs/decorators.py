from __future__ import annotations
import functools
import inspect
from typing import Callable, Optional
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

def traced(operation_name: Optional[str] = None):
    """Decorator to add OpenTelemetry tracing to functions.

    Failures are recorded on the span only; the wrapped code logs its own errors.
    """

    def decorator(func: Callable) -> Callable:
        tracer = trace.get_tracer(__name__)
        span_name = operation_name or f"{func.__module__}.{func.__name__}"

        def _fail(span, e: Exception):
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            with tracer.start_as_current_span(span_name, record_exception=False) as span:
                span.set_attribute("function.name", func.__name__)
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _fail(span, e)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            with tracer.start_as_current_span(span_name, record_exception=False) as span:
                span.set_attribute("function.name", func.__name__)
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    _fail(span, e)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
