from __future__ import annotations

from pathlib import Path

import pytest

from area_engine.dataset import DatasetLoader
from area_engine.errors import BackendQueryFailed, DatasetLoadFailed, MalformedGeometry, UnknownPresetError
from area_engine.models import EstablishmentPoint
from area_search_service.metrics import SearchMetricsCollector
from area_search_service.orchestrator import SearchOrchestrator

from conftest import FRANCE_BOX, PARIS_BOX, FakeSpatialBackend

NON_GEO_COLUMNS = (
    "SIRET",
    "Dénomination de l'unité légale",
    "Etat administratif de l'établissement",
    "Etat administratif de l'unité légale",
    "Section de l'établissement",
    "Commune de l'établissement",
)


@pytest.mark.asyncio
async def test_sample_search_returns_only_paris(sample_loader: DatasetLoader) -> None:
    orchestrator = SearchOrchestrator(dataset_loader=sample_loader)

    result = await orchestrator.run_search(PARIS_BOX)

    assert [p.fields["SIRET"] for p in result.points] == ["55203253400646"]
    assert result.points[0].lat == pytest.approx(48.86)
    assert result.columns == NON_GEO_COLUMNS
    assert result.is_sample_source is True


@pytest.mark.asyncio
async def test_missing_geometry_returns_empty_result_with_columns(sample_loader: DatasetLoader) -> None:
    orchestrator = SearchOrchestrator(dataset_loader=sample_loader)

    result = await orchestrator.run_search(None)

    assert result.points == []
    assert result.columns == NON_GEO_COLUMNS
    assert result.is_sample_source is True


@pytest.mark.asyncio
async def test_malformed_geometry_is_a_client_fault(sample_loader: DatasetLoader) -> None:
    orchestrator = SearchOrchestrator(dataset_loader=sample_loader)

    with pytest.raises(MalformedGeometry):
        await orchestrator.run_search({"coordinates": "not-an-array"})


@pytest.mark.asyncio
async def test_unknown_preset_is_rejected_before_searching(sample_loader: DatasetLoader) -> None:
    orchestrator = SearchOrchestrator(dataset_loader=sample_loader)

    with pytest.raises(UnknownPresetError):
        await orchestrator.run_search(PARIS_BOX, presets=["nope"])
    assert not sample_loader.is_loaded


@pytest.mark.asyncio
async def test_sample_search_caps_and_filters(sample_loader: DatasetLoader) -> None:
    capped = SearchOrchestrator(dataset_loader=sample_loader, result_limit=2)
    result = await capped.run_search(FRANCE_BOX)
    assert [p.fields["SIRET"] for p in result.points] == ["55203253400646", "96950174900026"]

    orchestrator = SearchOrchestrator(dataset_loader=sample_loader)
    result = await orchestrator.run_search(FRANCE_BOX, presets=["closed"])
    assert [p.fields["SIRET"] for p in result.points] == ["38012986600039"]


@pytest.mark.asyncio
async def test_columns_only_does_not_need_a_search(sample_loader: DatasetLoader) -> None:
    orchestrator = SearchOrchestrator(dataset_loader=sample_loader)

    result = await orchestrator.columns_only()

    assert result.columns == NON_GEO_COLUMNS
    assert result.is_sample_source is True


@pytest.mark.asyncio
async def test_warm_up_loads_dataset_once(sample_loader: DatasetLoader) -> None:
    orchestrator = SearchOrchestrator(dataset_loader=sample_loader)

    await orchestrator.warm_up()
    loaded = sample_loader.load()
    await orchestrator.run_search(PARIS_BOX)

    assert sample_loader.load() is loaded


@pytest.mark.asyncio
async def test_warm_up_fails_fast_on_unreadable_dataset(tmp_path: Path) -> None:
    orchestrator = SearchOrchestrator(dataset_loader=DatasetLoader(tmp_path / "missing.csv"))

    with pytest.raises(DatasetLoadFailed):
        await orchestrator.warm_up()


@pytest.mark.asyncio
async def test_indexed_search_projects_rows_onto_first_row_columns() -> None:
    backend = FakeSpatialBackend(
        points=[
            EstablishmentPoint(lat=48.86, lon=2.35, fields={"SIRET": "1", "Ville": "PARIS"}),
            EstablishmentPoint(lat=48.87, lon=2.36, fields={"Ville": "PARIS", "Extra": "x"}),
        ]
    )
    orchestrator = SearchOrchestrator(indexed_backend=backend)

    result = await orchestrator.run_search(PARIS_BOX)

    assert result.is_sample_source is False
    assert result.columns == ("SIRET", "Ville")
    assert [list(p.fields.items()) for p in result.points] == [
        [("SIRET", "1"), ("Ville", "PARIS")],
        [("SIRET", ""), ("Ville", "PARIS")],
    ]
    assert backend.sample_calls == 0


@pytest.mark.asyncio
async def test_indexed_columns_are_stable_after_first_search() -> None:
    backend = FakeSpatialBackend(
        points=[EstablishmentPoint(lat=48.86, lon=2.35, fields={"SIRET": "1"})],
        sample=["SIRET", "Ville"],
    )
    orchestrator = SearchOrchestrator(indexed_backend=backend)

    first = await orchestrator.columns_only()
    await orchestrator.run_search(PARIS_BOX)
    second = await orchestrator.columns_only()

    assert first.columns == second.columns == ("SIRET", "Ville")
    assert first.is_sample_source is False
    assert backend.sample_calls == 1


@pytest.mark.asyncio
async def test_indexed_search_passes_result_limit() -> None:
    backend = FakeSpatialBackend(
        points=[EstablishmentPoint(lat=48.86, lon=2.35, fields={"SIRET": str(i)}) for i in range(6000)]
    )
    orchestrator = SearchOrchestrator(indexed_backend=backend)

    result = await orchestrator.run_search(PARIS_BOX)

    assert backend.search_calls == [5000]
    assert len(result.points) == 5000


@pytest.mark.asyncio
async def test_indexed_backend_failure_propagates_and_is_counted(failing_backend: FakeSpatialBackend) -> None:
    metrics = SearchMetricsCollector()
    orchestrator = SearchOrchestrator(indexed_backend=failing_backend, metrics=metrics)

    with pytest.raises(BackendQueryFailed):
        await orchestrator.run_search(PARIS_BOX)

    assert failing_backend.search_calls == [5000]
    assert 'area_search_searches_total{backend="postgis",outcome="failed"} 1.0' in metrics.render()


@pytest.mark.asyncio
async def test_column_lookup_failure_after_empty_search_is_counted() -> None:
    backend = FakeSpatialBackend(sample_error=BackendQueryFailed("spatial store query failed"))
    metrics = SearchMetricsCollector()
    orchestrator = SearchOrchestrator(indexed_backend=backend, metrics=metrics)

    with pytest.raises(BackendQueryFailed):
        await orchestrator.run_search(PARIS_BOX)

    assert backend.search_calls == [5000]
    assert backend.sample_calls == 1
    assert 'area_search_searches_total{backend="postgis",outcome="failed"} 1.0' in metrics.render()


@pytest.mark.asyncio
async def test_close_releases_indexed_backend() -> None:
    backend = FakeSpatialBackend()
    orchestrator = SearchOrchestrator(indexed_backend=backend)

    await orchestrator.close()

    assert backend.closed


def test_orchestrator_requires_a_backend() -> None:
    with pytest.raises(ValueError):
        SearchOrchestrator()
