from __future__ import annotations

import asyncio
from collections.abc import Mapping
import json
import logging
from typing import Any, Awaitable, Callable

from area_engine.errors import BackendQueryFailed
from area_engine.geometry import WGS84_SRID, ValidGeometry
from area_engine.models import EstablishmentPoint

logger = logging.getLogger(__name__)

DEFAULT_RESULT_LIMIT = 5000

CONTAINED_ESTABLISHMENTS_SQL = f"""
SELECT lat, lon, fields
FROM establishments
WHERE ST_Within(geom, ST_GeomFromText($1, {WGS84_SRID}))
LIMIT $2
"""

SAMPLE_FIELDS_SQL = """
SELECT fields
FROM establishments
LIMIT 1
"""


class PostGISAdapter:
    def __init__(
        self,
        dsn: str,
        pool_factory: Callable[[str], Awaitable[Any]] | None = None,
        *,
        min_pool_size: int = 1,
        max_pool_size: int = 5,
    ) -> None:
        self._dsn = dsn
        self._pool = None
        self._pool_factory = pool_factory
        self._min_pool_size = min_pool_size
        self._max_pool_size = max_pool_size
        self._lock = asyncio.Lock()

    async def search(
        self,
        geometry: ValidGeometry,
        limit: int = DEFAULT_RESULT_LIMIT,
    ) -> list[EstablishmentPoint]:
        if limit <= 0:
            raise ValueError("limit must be > 0")
        rows = await self._fetch(CONTAINED_ESTABLISHMENTS_SQL, geometry.wkt, limit)
        try:
            return [self._to_point(row) for row in rows[:limit]]
        except (KeyError, TypeError, ValueError) as exc:
            raise BackendQueryFailed("spatial store returned an unexpected row") from exc

    async def sample_columns(self) -> list[str]:
        rows = await self._fetch(SAMPLE_FIELDS_SQL)
        if not rows:
            return []
        return list(_decode_fields(rows[0]["fields"]))

    async def close(self) -> None:
        async with self._lock:
            if self._pool is not None:
                await self._pool.close()
                self._pool = None

    async def _fetch(self, sql: str, *args: Any) -> list[Any]:
        try:
            pool = await self._get_pool()
            async with pool.acquire() as connection:
                return list(await connection.fetch(sql, *args))
        except Exception as exc:
            logger.exception("postgis_query_failed", extra={"component": "area_engine"})
            raise BackendQueryFailed("spatial store query failed") from exc

    async def _get_pool(self) -> Any:
        async with self._lock:
            if self._pool is None:
                self._pool = await self._create_pool()
            return self._pool

    async def _create_pool(self) -> Any:
        if self._pool_factory:
            return await self._pool_factory(self._dsn)
        try:
            import asyncpg
        except ImportError as exc:
            raise RuntimeError("asyncpg is required for postgis adapter") from exc
        return await asyncpg.create_pool(
            dsn=self._dsn,
            min_size=self._min_pool_size,
            max_size=self._max_pool_size,
        )

    def _to_point(self, row: Any) -> EstablishmentPoint:
        return EstablishmentPoint(
            lat=float(row["lat"]),
            lon=float(row["lon"]),
            fields=_decode_fields(row["fields"]),
        )


def _decode_fields(raw: Any) -> dict[str, str]:
    if raw is None:
        return {}
    if isinstance(raw, (str, bytes)):
        raw = json.loads(raw)
    if not isinstance(raw, Mapping):
        return {}
    return {str(key): "" if value is None else str(value) for key, value in raw.items()}
