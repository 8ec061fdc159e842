from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

_trace_id_ctx: ContextVar[str] = ContextVar("trace_id", default="")


def set_trace_id(trace_id: str) -> None:
    _trace_id_ctx.set(trace_id)


def get_trace_id() -> str:
    return _trace_id_ctx.get()


@dataclass(frozen=True)
class ApiRequestMetric:
    method: str
    path: str
    status_code: int
    duration_ms: float
    trace_id: str


class SearchMetricsCollector:
    def __init__(self) -> None:
        self._registry = CollectorRegistry()
        self._request_counter = Counter(
            "area_search_http_requests_total",
            "Total HTTP requests",
            labelnames=("method", "path", "status_code"),
            registry=self._registry,
        )
        self._request_latency = Histogram(
            "area_search_http_request_duration_ms",
            "HTTP request latency in milliseconds",
            labelnames=("method", "path"),
            buckets=(5, 10, 25, 50, 100, 250, 500, 1000, 3000),
            registry=self._registry,
        )
        self._search_counter = Counter(
            "area_search_searches_total",
            "Area searches by backend and outcome",
            labelnames=("backend", "outcome"),
            registry=self._registry,
        )
        self._search_results = Histogram(
            "area_search_result_count",
            "Establishments returned per area search",
            labelnames=("backend",),
            buckets=(0, 1, 10, 100, 500, 1000, 2500, 5000),
            registry=self._registry,
        )
        self._search_latency = Histogram(
            "area_search_duration_ms",
            "Area search latency in milliseconds",
            labelnames=("backend",),
            buckets=(5, 10, 25, 50, 100, 250, 500, 1000, 3000, 10000),
            registry=self._registry,
        )

    def observe(self, metric: ApiRequestMetric) -> None:
        self._request_counter.labels(metric.method, metric.path, str(metric.status_code)).inc()
        self._request_latency.labels(metric.method, metric.path).observe(metric.duration_ms)

    def observe_search(self, backend: str, outcome: str, result_count: int, duration_ms: float) -> None:
        self._search_counter.labels(backend, outcome).inc()
        if outcome == "ok":
            self._search_results.labels(backend).observe(result_count)
        self._search_latency.labels(backend).observe(duration_ms)

    def render(self) -> str:
        return generate_latest(self._registry).decode("utf-8")
