from __future__ import annotations

from pathlib import Path

import pytest

from area_engine.dataset import DatasetLoader
from area_engine.errors import BackendQueryFailed
from area_engine.models import EstablishmentPoint

FIXTURES_DIR = Path(__file__).parent / "fixtures"

PARIS_BOX = {
    "type": "Polygon",
    "coordinates": [[[2.0, 48.5], [2.0, 49.0], [2.7, 49.0], [2.7, 48.5], [2.0, 48.5]]],
}

FRANCE_BOX = {
    "type": "Polygon",
    "coordinates": [[[-5.0, 41.0], [-5.0, 51.5], [9.8, 51.5], [9.8, 41.0], [-5.0, 41.0]]],
}


class FakeSpatialBackend:
    def __init__(
        self,
        points: list[EstablishmentPoint] | None = None,
        sample: list[str] | None = None,
        error: Exception | None = None,
        sample_error: Exception | None = None,
    ) -> None:
        self.points = points or []
        self.sample = sample or []
        self.error = error
        self.sample_error = sample_error or error
        self.search_calls: list[int] = []
        self.sample_calls = 0
        self.closed = False

    async def search(self, geometry, limit: int = 5000) -> list[EstablishmentPoint]:
        self.search_calls.append(limit)
        if self.error is not None:
            raise self.error
        return self.points[:limit]

    async def sample_columns(self) -> list[str]:
        self.sample_calls += 1
        if self.sample_error is not None:
            raise self.sample_error
        return list(self.sample)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def sample_csv() -> Path:
    return FIXTURES_DIR / "sample.csv"


@pytest.fixture
def sample_loader(sample_csv: Path) -> DatasetLoader:
    return DatasetLoader(sample_csv)


@pytest.fixture
def failing_backend() -> FakeSpatialBackend:
    return FakeSpatialBackend(error=BackendQueryFailed("spatial store query failed"))
