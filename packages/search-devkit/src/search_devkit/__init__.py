"""Common runtime devkit for area search service infrastructure concerns."""

from search_devkit.config import ServiceSettings, load_settings
from search_devkit.db import normalize_asyncpg_dsn
from search_devkit.observability import configure_logging, configure_tracing, install_probe_log_filter

__all__ = [
    "ServiceSettings",
    "configure_logging",
    "configure_tracing",
    "install_probe_log_filter",
    "load_settings",
    "normalize_asyncpg_dsn",
]
