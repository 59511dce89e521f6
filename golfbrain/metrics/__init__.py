"""Prometheus metrics for the scoring service.

HTTP traffic is recorded by :class:`MetricsMiddleware`, labelled with the
matched route template so path parameters do not explode label cardinality.
Domain counters are incremented by the tracker service.
"""

from __future__ import annotations

import os
import time
from typing import Any, Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

NAMESPACE = "golfbrain"
UNMATCHED_PATH = "unmatched"
# Scrapes and health checks are not user traffic.
UNTRACKED_PATHS = frozenset({"/metrics", "/health"})

REGISTRY = CollectorRegistry()
REQUESTS = Counter(
    "http_requests_total",
    "HTTP requests by route template",
    ["path", "method", "status"],
    namespace=NAMESPACE,
    registry=REGISTRY,
)
LATENCY = Histogram(
    "http_request_latency_seconds",
    "HTTP request latency (seconds)",
    ["path", "method"],
    namespace=NAMESPACE,
    registry=REGISTRY,
)
HOLES_COMPLETED = Counter(
    "holes_completed_total",
    "Holes committed through complete_hole",
    namespace=NAMESPACE,
    registry=REGISTRY,
)
ROUNDS_FINALIZED = Counter(
    "rounds_finalized_total",
    "Rounds finalized into history",
    namespace=NAMESPACE,
    registry=REGISTRY,
)
STORE_SAVE_FAILURES = Counter(
    "store_save_failures_total",
    "Aggregate saves that failed and were dropped",
    namespace=NAMESPACE,
    registry=REGISTRY,
)

BUILD_VERSION = os.getenv("BUILD_VERSION", "dev")
GIT_SHA = os.getenv("GIT_SHA", "unknown")


async def metrics_app(_req: Request | None = None) -> Response:
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


def _route_label(scope: dict[str, Any]) -> str:
    route = scope.get("route")
    template = getattr(route, "path", None)
    return template or UNMATCHED_PATH


class MetricsMiddleware:
    """ASGI middleware recording request counts and latency per route."""

    def __init__(self, app: Callable[..., Awaitable[Any]]):
        self.app = app

    async def __call__(
        self,
        scope: dict[str, Any],
        receive: Callable[..., Awaitable[Any]],
        send: Callable[..., Awaitable[Any]],
    ) -> None:
        if scope.get("type") != "http" or scope.get("path") in UNTRACKED_PATHS:
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "GET")
        started = time.perf_counter()
        status_code = 500

        async def _send(message: dict[str, Any]) -> None:
            nonlocal status_code
            if message.get("type") == "http.response.start":
                status_code = message.get("status", 200)
            await send(message)

        try:
            await self.app(scope, receive, _send)
        finally:
            # The router fills in scope["route"] once a route has matched.
            path = _route_label(scope)
            LATENCY.labels(path=path, method=method).observe(
                time.perf_counter() - started
            )
            REQUESTS.labels(path=path, method=method, status=str(status_code)).inc()


__all__ = [
    "NAMESPACE",
    "REGISTRY",
    "REQUESTS",
    "LATENCY",
    "HOLES_COMPLETED",
    "ROUNDS_FINALIZED",
    "STORE_SAVE_FAILURES",
    "BUILD_VERSION",
    "GIT_SHA",
    "metrics_app",
    "MetricsMiddleware",
]
