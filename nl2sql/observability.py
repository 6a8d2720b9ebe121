from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import Counter, Histogram, start_http_server

from .config import ObservabilityConfig

REQUEST_LATENCY = Histogram(
    "nl2sql_request_latency_seconds",
    "Wall-clock time spent handling a request, LLM call included",
    ["endpoint"],
)
REQUEST_COUNTER = Counter("nl2sql_requests_total", "Handled requests by outcome", ["endpoint", "status"])


def init_metrics_server(cfg: ObservabilityConfig) -> None:
    if cfg.metrics_port > 0:
        start_http_server(cfg.metrics_port)


def elapsed_ms(start: float) -> int:
    """Milliseconds since ``start`` (a ``time.perf_counter()`` reading), never negative."""
    return max(0, int((time.perf_counter() - start) * 1000))


@contextmanager
def record_latency(endpoint: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        REQUEST_LATENCY.labels(endpoint=endpoint).observe(time.perf_counter() - start)


__all__ = ["REQUEST_COUNTER", "REQUEST_LATENCY", "elapsed_ms", "init_metrics_server", "record_latency"]
