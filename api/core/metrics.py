"""
Prometheus metrics for the HTTP layer.

`GET /metrics` serves the default registry, which also carries
prometheus_client's process/platform collectors.
"""

from __future__ import annotations

import time

from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Counter, Histogram, generate_latest

HTTP_REQUESTS = Counter(
    "users_api_http_requests_total",
    "HTTP requests handled, by method, route template and status code.",
    ["method", "path", "status"],
)

HTTP_REQUEST_DURATION = Histogram(
    "users_api_http_request_duration_seconds",
    "HTTP request latency in seconds, by method and route template.",
    ["method", "path"],
)


def _route_template(request: Request) -> str:
    # Label by template (/users/{user_id}) so ids do not explode cardinality.
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path or "<unmatched>"


def install_metrics(app: FastAPI) -> None:
    @app.middleware("http")
    async def record_request_metrics(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        path = _route_template(request)
        HTTP_REQUEST_DURATION.labels(request.method, path).observe(time.perf_counter() - started)
        HTTP_REQUESTS.labels(request.method, path, str(response.status_code)).inc()
        return response

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
