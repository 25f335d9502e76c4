"""
Tracing decorators for floorsync components.

Provides decorators for adding spans to merge operations and other
synchronous entry points.
"""

import functools
import inspect
import time
from typing import Any, Callable, Optional, ParamSpec, TypeVar

from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

from floorsync.telemetry.config import get_tracer

P = ParamSpec("P")
T = TypeVar("T")


def trace_sync(
    name: Optional[str] = None,
    attributes: Optional[dict] = None,
    kind: SpanKind = SpanKind.INTERNAL,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Decorator for tracing synchronous functions.

    Args:
        name: Span name (defaults to function name)
        attributes: Static attributes to add to the span
        kind: Span kind (INTERNAL, SERVER, CLIENT, etc.)

    Example:
        @trace_sync("storage.save_floor_plan")
        def save(self, floor_plan):
            ...
    """
    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        span_name = name or func.__name__
        tracer = get_tracer(func.__module__)

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            with tracer.start_as_current_span(
                span_name,
                kind=kind,
                attributes=attributes,
            ) as span:
                try:
                    _add_arg_attributes(span, func, args, kwargs)

                    result = func(*args, **kwargs)

                    span.set_status(Status(StatusCode.OK))
                    return result

                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.record_exception(e)
                    raise

        return wrapper
    return decorator


def trace_merge(
    operation: Optional[str] = None,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Decorator for tracing merge operations.

    Tags the span with the floor plan id so merges of one plan can be
    filtered together.

    Args:
        operation: Operation name (defaults to function name)

    Example:
        @trace_merge("auto_merge")
        def auto_merge(self, base, pending_versions):
            ...
    """
    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        op = operation or func.__name__
        span_name = f"merge.{op}"
        tracer = get_tracer("floorsync.merge")

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            with tracer.start_as_current_span(
                span_name,
                kind=SpanKind.INTERNAL,
                attributes={"floorsync.merge.operation": op},
            ) as span:
                try:
                    floor_plan_id = _extract_floor_plan_id(args, kwargs)
                    if floor_plan_id:
                        span.set_attribute("floorsync.floor_plan.id", floor_plan_id)

                    start_time = time.perf_counter()
                    result = func(*args, **kwargs)
                    duration_ms = (time.perf_counter() - start_time) * 1000

                    span.set_attribute("floorsync.duration_ms", duration_ms)
                    span.set_status(Status(StatusCode.OK))
                    return result

                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.record_exception(e)
                    raise

        return wrapper
    return decorator


def _add_arg_attributes(span: trace.Span, func: Callable, args: tuple, kwargs: dict) -> None:
    """Add function arguments as span attributes (only simple types)."""
    param_names = list(inspect.signature(func).parameters.keys())

    for param_name, value in zip(param_names, args):
        if param_name == "self":
            continue
        if isinstance(value, (str, int, float, bool)):
            span.set_attribute(f"arg.{param_name}", value)
        elif hasattr(value, "id") and isinstance(getattr(value, "id"), str):
            span.set_attribute(f"arg.{param_name}.id", value.id)

    for key, value in kwargs.items():
        if isinstance(value, (str, int, float, bool)):
            span.set_attribute(f"arg.{key}", value)


def _extract_floor_plan_id(args: tuple, kwargs: dict) -> Optional[str]:
    """Extract a floor plan id from function arguments."""
    if "floor_plan_id" in kwargs:
        return str(kwargs["floor_plan_id"])

    candidates: list[Any] = [kwargs.get("base"), *args]
    for arg in candidates:
        # FloorPlan carries rooms and a version counter
        if hasattr(arg, "rooms") and hasattr(arg, "version") and hasattr(arg, "id"):
            return str(arg.id)
        if hasattr(arg, "floor_plan_id"):
            return str(arg.floor_plan_id)

    return None
