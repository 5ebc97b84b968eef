"""OpenTelemetry tracing configuration for the SigV4 client.

This module sets up distributed tracing with support for:
- AWS X-Ray trace ids and header propagation
- Optional OTLP export to a collector
- Request spans for signed AWS calls
"""

import os
from functools import wraps
from typing import Any, Callable, Optional, TypeVar, ParamSpec

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.propagate import set_global_textmap
from opentelemetry.propagators.aws import AwsXRayPropagator
from opentelemetry.sdk.extension.aws.trace import AwsXRayIdGenerator
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Status, StatusCode

P = ParamSpec("P")
T = TypeVar("T")

_tracer: trace.Tracer | None = None
_initialized = False


def init_tracing(
    service_name: str = "sigv4-client",
    otlp_endpoint: str | None = None,
    enable_console_export: bool = False,
) -> trace.Tracer:
    """Initialize OpenTelemetry tracing.

    Args:
        service_name: Name of the service for tracing
        otlp_endpoint: OTLP collector endpoint (e.g., "http://localhost:4317")
                      If None, uses OTEL_EXPORTER_OTLP_ENDPOINT env var
        enable_console_export: If True, also export spans to console

    Returns:
        Configured tracer instance
    """
    global _tracer, _initialized

    if _initialized and _tracer is not None:
        return _tracer

    resource = Resource.create({
        SERVICE_NAME: service_name,
        "deployment.environment": os.getenv("ENVIRONMENT", "development"),
    })

    provider = TracerProvider(
        resource=resource,
        id_generator=AwsXRayIdGenerator(),
    )

    set_global_textmap(AwsXRayPropagator())

    endpoint = otlp_endpoint or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True))
        )

    if enable_console_export or os.getenv("OTEL_CONSOLE_EXPORT", "").lower() == "true":
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)

    _tracer = trace.get_tracer(service_name)
    _initialized = True
    return _tracer


def get_tracer() -> trace.Tracer:
    """Get the tracer for client spans.

    Returns the tracer created by init_tracing() when it has run. Otherwise
    returns a tracer from whatever provider the application installed, so
    the global provider and propagator are left alone.
    """
    if _tracer is None:
        return trace.get_tracer(__name__)
    return _tracer


def traced(
    name: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator to run a function inside a span.

    Exceptions are recorded on the span and re-raised.
    """
    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        span_name = name or func.__name__

        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            with get_tracer().start_as_current_span(span_name) as span:
                for key, value in (attributes or {}).items():
                    span.set_attribute(key, value)
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.record_exception(e)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper

    return decorator


def add_request_span_attributes(
    span: trace.Span,
    service: Optional[str] = None,
    region: Optional[str] = None,
    method: Optional[str] = None,
    host: Optional[str] = None,
    status_code: Optional[int] = None,
) -> None:
    """Add AWS request attributes to a span, skipping unset values."""
    if service:
        span.set_attribute("aws.service", service)
    if region:
        span.set_attribute("aws.region", region)
    if method:
        span.set_attribute("http.method", method)
    if host:
        span.set_attribute("server.address", host)
    if status_code is not None:
        span.set_attribute("http.status_code", status_code)
