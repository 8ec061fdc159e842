from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from area_engine.errors import SearchError
from area_engine.presets import PRESET_FILTERS, PRESET_GROUPS
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from search_devkit.config import ServiceSettings, load_settings
from search_devkit.observability import configure_logging, configure_tracing, install_probe_log_filter

from area_search_service.dependencies import build_orchestrator, get_orchestrator
from area_search_service.metrics import SearchMetricsCollector, get_trace_id
from area_search_service.middleware import ObservabilityMiddleware
from area_search_service.orchestrator import SearchOrchestrator
from area_search_service.responses import ApiError, api_error_from, error_response, success_response
from area_search_service.schemas import (
    ColumnsPayload,
    EstablishmentItem,
    PresetItem,
    SearchRequest,
    SearchResultPayload,
)

logger = logging.getLogger(__name__)


def create_app(
    settings: ServiceSettings | None = None,
    orchestrator: SearchOrchestrator | None = None,
) -> FastAPI:
    settings = settings or load_settings("area-search-service")
    configure_logging(settings.LOG_LEVEL)
    metrics = SearchMetricsCollector()
    orchestrator = orchestrator or build_orchestrator(settings, metrics=metrics)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # a broken sample dataset must stop startup instead of serving nothing
        await app.state.orchestrator.warm_up()
        try:
            yield
        finally:
            await app.state.orchestrator.close()

    app = FastAPI(title="Area Search Service", version="0.1.0", lifespan=lifespan)
    configure_tracing(settings.SERVICE_NAME, backend=orchestrator.backend_name)
    install_probe_log_filter()
    app.state.metrics = metrics
    app.state.orchestrator = orchestrator
    app.add_middleware(ObservabilityMiddleware, collector=metrics)

    @app.get("/healthz")
    async def healthz() -> dict[str, object]:
        return success_response({"status": "ok"}, meta={})

    @app.get("/readyz")
    async def readyz() -> dict[str, object]:
        return success_response({"status": "ready", "backend": app.state.orchestrator.backend_name}, meta={})

    @app.get("/metrics")
    async def prometheus_metrics() -> Response:
        return Response(content=app.state.metrics.render(), media_type="text/plain; version=0.0.4")

    @app.post("/v1/search")
    async def search(
        body: SearchRequest,
        service: SearchOrchestrator = Depends(get_orchestrator),
    ) -> dict[str, object]:
        try:
            result = await service.run_search(body.geometry, presets=body.presets)
        except SearchError as exc:
            raise api_error_from(exc) from exc
        payload = SearchResultPayload(
            points=[EstablishmentItem(lat=p.lat, lon=p.lon, fields=p.fields) for p in result.points],
            columns=list(result.columns),
            is_sample_source=result.is_sample_source,
        )
        return success_response(
            payload.model_dump(by_alias=True),
            meta={"count": len(result.points), "limit": service.result_limit},
        )

    @app.get("/v1/search/columns")
    async def search_columns(service: SearchOrchestrator = Depends(get_orchestrator)) -> dict[str, object]:
        try:
            result = await service.columns_only()
        except SearchError as exc:
            raise api_error_from(exc) from exc
        payload = ColumnsPayload(columns=list(result.columns), is_sample_source=result.is_sample_source)
        return success_response(payload.model_dump(by_alias=True), meta={"count": len(result.columns)})

    @app.get("/v1/search/presets")
    async def search_presets() -> dict[str, object]:
        items = [
            PresetItem(id=p.id, label=p.label, group=p.group, description=p.description).model_dump()
            for p in PRESET_FILTERS
        ]
        return success_response(items, meta={"groups": list(PRESET_GROUPS)})

    @app.exception_handler(ApiError)
    async def handle_api_error(_: Request, exc: ApiError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "area_search_failed",
                extra={"component": "area_search_service", "code": exc.code, "trace_id": get_trace_id()},
            )
        return JSONResponse(status_code=exc.status_code, content=error_response(exc.code, exc.message))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        message = "; ".join(err["msg"] for err in exc.errors())
        return JSONResponse(status_code=422, content=error_response("VALIDATION_ERROR", message))

    return app


app = create_app()
