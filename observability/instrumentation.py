"""OpenTelemetry instrumentation for City Explorer.

Provider calls and store operations are wrapped in spans so a single
request can be followed from the route down to each outbound call.
Spans go nowhere until ``init_tracing`` installs a Phoenix tracer provider.
"""

import functools
import json
import logging
import os
from typing import Any, Callable, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

F = TypeVar("F", bound=Callable[..., Any])

TRACER_NAME = "city-explorer"

logger = logging.getLogger(__name__)

_tracer: trace.Tracer | None = None


def get_tracer() -> trace.Tracer:
    """Get the global tracer instance."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def init_tracing(
    project_name: str = "city-explorer",
    endpoint: str | None = None,
) -> None:
    """Register a Phoenix tracer provider and route our spans to it.

    Args:
        project_name: Name of the project in the Phoenix dashboard.
        endpoint: Collector endpoint. Defaults to PHOENIX_COLLECTOR_ENDPOINT
            or a local Phoenix server.
    """
    from phoenix.otel import register

    collector_endpoint = endpoint or os.getenv(
        "PHOENIX_COLLECTOR_ENDPOINT",
        "http://localhost:6006/v1/traces"
    )

    tracer_provider = register(
        project_name=project_name,
        endpoint=collector_endpoint,
    )

    global _tracer
    _tracer = trace.get_tracer(TRACER_NAME, tracer_provider=tracer_provider)

    logger.info(f"Tracing initialized for project {project_name}, sending to {collector_endpoint}")


def _serialize_value(value: Any) -> str:
    """Serialize a value to string for span attributes."""
    try:
        if isinstance(value, (dict, list, tuple)):
            return json.dumps(value, ensure_ascii=False, default=str)
        return str(value)
    except (TypeError, ValueError):
        return str(value)


def _record_error(span: Span, error: Exception) -> None:
    span.set_status(Status(StatusCode.ERROR, str(error)))
    span.set_attribute("error.type", type(error).__name__)
    span.set_attribute("error.message", str(error))


def trace_tool(
    name: str | None = None,
    capture_input: bool = True,
    capture_output: bool = True,
) -> Callable[[F], F]:
    """Decorator tracing a provider or store call with input/output capture.

    Args:
        name: Custom span name. Defaults to ``tool.<function name>``.
        capture_input: Whether to record the call arguments.
        capture_output: Whether to record the return value.

    Example:
        @trace_tool(name="api.geocode_address")
        def geocode_address(query: str) -> dict:
            ...
    """
    def decorator(func: F) -> F:
        span_name = name or f"tool.{func.__name__}"

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with get_tracer().start_as_current_span(span_name) as span:
                span.set_attribute("tool.name", func.__name__)
                if capture_input:
                    if args:
                        span.set_attribute("input.args", _serialize_value(args))
                    if kwargs:
                        span.set_attribute("input.kwargs", _serialize_value(kwargs))

                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    _record_error(span, e)
                    raise

                if capture_output and result is not None:
                    span.set_attribute("output.result", _serialize_value(result))
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper  # type: ignore

    return decorator


def trace_span(name: str) -> Callable[[F], F]:
    """Create a named span around a function that is not a tool call.

    Example:
        @trace_span("route.weather")
        def get_weather(data: str) -> list:
            ...
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with get_tracer().start_as_current_span(name) as span:
                span.set_attribute("function.name", func.__name__)
                try:
                    result = func(*args, **kwargs)
                    span.set_status(Status(StatusCode.OK))
                    return result
                except Exception as e:
                    _record_error(span, e)
                    raise

        return wrapper  # type: ignore

    return decorator
