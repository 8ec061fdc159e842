from __future__ import annotations

from collections.abc import Iterable
import logging

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider

PROBE_PATHS = ("/healthz", "/readyz", "/metrics")
ACCESS_LOGGER = "uvicorn.access"


def _route(path: str) -> str:
    route = path.partition("?")[0]
    return route.rstrip("/") or "/"


class ProbeAccessLogFilter(logging.Filter):
    """Drop uvicorn access lines for successful probe and scrape requests.

    uvicorn logs ``(client, method, path, http_version, status)`` as record args;
    anything shaped differently is passed through untouched.
    """

    def __init__(self, paths: Iterable[str] = PROBE_PATHS) -> None:
        super().__init__()
        self.paths = frozenset(_route(path) for path in paths)

    def filter(self, record: logging.LogRecord) -> bool:
        args = record.args
        if not isinstance(args, tuple) or len(args) != 5:
            return True
        path, status = args[2], args[4]
        if not isinstance(path, str) or not isinstance(status, int):
            return True
        return status >= 400 or _route(path) not in self.paths


def install_probe_log_filter(paths: Iterable[str] = PROBE_PATHS) -> ProbeAccessLogFilter:
    access_logger = logging.getLogger(ACCESS_LOGGER)
    for existing in access_logger.filters:
        if isinstance(existing, ProbeAccessLogFilter):
            return existing
    probe_filter = ProbeAccessLogFilter(paths)
    access_logger.addFilter(probe_filter)
    return probe_filter


def configure_tracing(service_name: str, backend: str) -> None:
    # the global provider can only be set once per process
    if isinstance(trace.get_tracer_provider(), TracerProvider):
        return
    resource = Resource.create({"service.name": service_name, "search.backend": backend})
    trace.set_tracer_provider(TracerProvider(resource=resource))


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
