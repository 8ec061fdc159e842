from __future__ import annotations

import logging

from area_engine.dataset import DatasetLoader
from area_engine.postgis_adapter import PostGISAdapter
from fastapi import Request
from search_devkit.config import ServiceSettings
from search_devkit.db import normalize_asyncpg_dsn

from area_search_service.metrics import SearchMetricsCollector
from area_search_service.orchestrator import SearchOrchestrator

logger = logging.getLogger(__name__)


def build_orchestrator(
    settings: ServiceSettings,
    metrics: SearchMetricsCollector | None = None,
) -> SearchOrchestrator:
    if settings.indexed_backend_configured:
        assert settings.DATABASE_URL is not None
        backend = PostGISAdapter(
            dsn=normalize_asyncpg_dsn(settings.DATABASE_URL),
            min_pool_size=settings.DB_POOL_MIN_SIZE,
            max_pool_size=settings.DB_POOL_MAX_SIZE,
        )
        logger.info("search_backend_selected", extra={"component": "area_search_service", "backend": "postgis"})
        return SearchOrchestrator(
            indexed_backend=backend,
            result_limit=settings.SEARCH_RESULT_LIMIT,
            metrics=metrics,
        )

    loader = DatasetLoader(
        settings.SAMPLE_DATASET_PATH,
        geo_column=settings.GEO_COLUMN,
        delimiter=settings.SAMPLE_DATASET_DELIMITER,
    )
    logger.info(
        "search_backend_selected",
        extra={
            "component": "area_search_service",
            "backend": "sample",
            "source": settings.SAMPLE_DATASET_PATH,
        },
    )
    return SearchOrchestrator(
        dataset_loader=loader,
        result_limit=settings.SEARCH_RESULT_LIMIT,
        metrics=metrics,
    )


def get_orchestrator(request: Request) -> SearchOrchestrator:
    return request.app.state.orchestrator
