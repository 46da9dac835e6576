"""Prometheus metrics helpers for HTTP and workflow observability."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from time import perf_counter

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

HTTP_REQUESTS_TOTAL = Counter(
    "eduadmin_http_requests_total",
    "Total number of HTTP requests handled by the API.",
    ["method", "path", "status_code"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "eduadmin_http_request_duration_seconds",
    "HTTP request latency in seconds.",
    ["method", "path"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

WORKFLOW_TRANSITIONS_TOTAL = Counter(
    "eduadmin_workflow_transitions_total",
    "Workflow transition attempts by entity kind, action and outcome.",
    ["kind", "action", "outcome"],
)

OUTBOX_EFFECTS_DISPATCHED_TOTAL = Counter(
    "eduadmin_outbox_effects_dispatched_total",
    "Side effects dispatched from the outbox by type and outcome.",
    ["effect_type", "outcome"],
)


def _request_path_label(request: Request) -> str:
    route = request.scope.get("route")
    route_path = getattr(route, "path", None)
    if route_path:
        return str(route_path)
    return request.url.path


async def instrument_http_request(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Track request count and latency for each endpoint."""
    started_at = perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        path_label = _request_path_label(request)
        method_label = request.method.upper()
        duration_seconds = perf_counter() - started_at

        HTTP_REQUESTS_TOTAL.labels(
            method=method_label,
            path=path_label,
            status_code=str(status_code),
        ).inc()
        HTTP_REQUEST_DURATION_SECONDS.labels(
            method=method_label,
            path=path_label,
        ).observe(duration_seconds)


def record_workflow_transition(kind: str, action: str, outcome: str) -> None:
    """Count one workflow transition attempt."""
    WORKFLOW_TRANSITIONS_TOTAL.labels(kind=kind, action=action, outcome=outcome).inc()


def record_effect_dispatch(effect_type: str, outcome: str) -> None:
    """Count one outbox side-effect dispatch attempt."""
    OUTBOX_EFFECTS_DISPATCHED_TOTAL.labels(effect_type=effect_type, outcome=outcome).inc()


def build_metrics_response() -> Response:
    """Return metrics payload in Prometheus text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
