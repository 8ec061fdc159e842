from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
import logging
from time import perf_counter
from typing import Any, Protocol

from area_engine.containment import search_points
from area_engine.dataset import DatasetLoader
from area_engine.errors import MissingGeometry
from area_engine.geometry import ValidGeometry, validate_geometry
from area_engine.models import EstablishmentPoint, LoadedDataset
from area_engine.postgis_adapter import DEFAULT_RESULT_LIMIT
from area_engine.presets import apply_presets, resolve_presets
from opentelemetry import trace

from area_search_service.columns import ColumnRegistry
from area_search_service.metrics import SearchMetricsCollector

logger = logging.getLogger(__name__)
_tracer = trace.get_tracer("area-search-service")


class SpatialBackend(Protocol):
    async def search(self, geometry: ValidGeometry, limit: int = ...) -> list[EstablishmentPoint]: ...

    async def sample_columns(self) -> list[str]: ...

    async def close(self) -> None: ...


@dataclass(frozen=True)
class SearchResult:
    points: list[EstablishmentPoint]
    columns: tuple[str, ...]
    is_sample_source: bool


@dataclass(frozen=True)
class ColumnsResult:
    columns: tuple[str, ...]
    is_sample_source: bool


class SearchOrchestrator:
    """Answers area searches from either the indexed store or the sample CSV.

    The backend is picked once at construction: with an indexed backend every
    query goes to the spatial store, otherwise to a linear scan over the sample
    dataset. The two are separate datasets and are never reconciled.
    """

    def __init__(
        self,
        *,
        indexed_backend: SpatialBackend | None = None,
        dataset_loader: DatasetLoader | None = None,
        result_limit: int = DEFAULT_RESULT_LIMIT,
        metrics: SearchMetricsCollector | None = None,
    ) -> None:
        if indexed_backend is None and dataset_loader is None:
            raise ValueError("either indexed_backend or dataset_loader is required")
        if result_limit <= 0:
            raise ValueError("result_limit must be > 0")
        self._indexed_backend = indexed_backend
        self._dataset_loader = dataset_loader
        self._result_limit = result_limit
        self._metrics = metrics
        if indexed_backend is not None:
            self._columns = ColumnRegistry(indexed_backend.sample_columns)
        else:
            assert dataset_loader is not None
            self._columns = ColumnRegistry(self._dataset_columns, excluded=(dataset_loader.geo_column,))

    @property
    def is_indexed(self) -> bool:
        return self._indexed_backend is not None

    @property
    def result_limit(self) -> int:
        return self._result_limit

    @property
    def backend_name(self) -> str:
        return "postgis" if self.is_indexed else "sample"

    async def warm_up(self) -> None:
        if self._dataset_loader is not None and not self.is_indexed:
            await self._load_dataset()

    async def close(self) -> None:
        if self._indexed_backend is not None:
            await self._indexed_backend.close()

    async def columns_only(self) -> ColumnsResult:
        columns = await self._columns.columns()
        return ColumnsResult(columns=columns, is_sample_source=not self.is_indexed)

    async def run_search(
        self,
        geometry: Mapping[str, Any] | None,
        presets: Sequence[str] = (),
    ) -> SearchResult:
        resolve_presets(presets)
        try:
            valid = validate_geometry(geometry)
        except MissingGeometry:
            columns = await self._columns.columns()
            return SearchResult(points=[], columns=columns, is_sample_source=not self.is_indexed)

        started = perf_counter()
        with _tracer.start_as_current_span("area_search") as span:
            span.set_attribute("search.backend", self.backend_name)
            try:
                if self._indexed_backend is not None:
                    points = await self._indexed_backend.search(valid, limit=self._result_limit)
                    if points:
                        self._columns.publish(points[0].fields.keys())
                else:
                    dataset = await self._load_dataset()
                    points = await asyncio.to_thread(search_points, dataset.points, valid)
                    points = points[: self._result_limit]
                columns = await self._columns.columns()
            except Exception:
                self._observe("failed", 0, started)
                raise
            projected = [point.project(columns) for point in apply_presets(points, presets)]
            span.set_attribute("search.result_count", len(projected))

        self._observe("ok", len(projected), started)
        logger.info(
            "area_search_completed",
            extra={
                "component": "area_search_service",
                "backend": self.backend_name,
                "result_count": len(projected),
            },
        )
        return SearchResult(points=projected, columns=columns, is_sample_source=not self.is_indexed)

    async def _load_dataset(self) -> LoadedDataset:
        assert self._dataset_loader is not None
        if self._dataset_loader.is_loaded:
            return self._dataset_loader.load()
        return await asyncio.to_thread(self._dataset_loader.load)

    async def _dataset_columns(self) -> tuple[str, ...]:
        dataset = await self._load_dataset()
        return dataset.columns

    def _observe(self, outcome: str, result_count: int, started: float) -> None:
        if self._metrics:
            self._metrics.observe_search(
                backend=self.backend_name,
                outcome=outcome,
                result_count=result_count,
                duration_ms=(perf_counter() - started) * 1000.0,
            )
