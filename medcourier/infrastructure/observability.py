# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time

from flask import Flask, Response, g, request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from medcourier.shared.config import load_config

REQUEST_LATENCY = Histogram(
    "medcourier_request_latency_seconds",
    "Request latency",
    labelnames=("endpoint",),
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5),
)
REQUEST_COUNTER = Counter(
    "medcourier_requests_total",
    "Number of processed requests",
    labelnames=("endpoint", "status"),
)
RATE_LIMITED_COUNTER = Counter(
    "medcourier_rate_limited_total",
    "Requests rejected by the rate limiter",
    labelnames=("limit_class",),
)
EXPIRY_NOTIFICATIONS = Counter(
    "medcourier_vehicle_expiry_notifications_total",
    "Notifications created by the vehicle expiry job",
    labelnames=("level",),
)


def metrics_enabled() -> bool:
    return load_config().observability.metrics_enabled


def observe_request(endpoint: str, status: int, duration: float) -> None:
    if not metrics_enabled():
        return
    REQUEST_LATENCY.labels(endpoint=endpoint).observe(duration)
    REQUEST_COUNTER.labels(endpoint=endpoint, status=str(status)).inc()


def configure_metrics(app: Flask) -> None:
    @app.before_request
    def _start_timer() -> None:
        g.metrics_start = time.perf_counter()

    @app.after_request
    def _record(response: Response) -> Response:
        if not metrics_enabled():
            return response
        start = g.get("metrics_start", time.perf_counter())
        observe_request(
            request.endpoint or "unmatched", response.status_code, time.perf_counter() - start
        )
        if response.status_code == 429 and g.get("rate_limit_class"):
            RATE_LIMITED_COUNTER.labels(limit_class=g.rate_limit_class).inc()
        return response


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST


__all__ = [
    "EXPIRY_NOTIFICATIONS",
    "RATE_LIMITED_COUNTER",
    "REQUEST_COUNTER",
    "REQUEST_LATENCY",
    "configure_metrics",
    "metrics_enabled",
    "observe_request",
    "render_metrics",
]
