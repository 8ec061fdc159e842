from __future__ import annotations

from dataclasses import dataclass

from area_engine.errors import (
    BackendQueryFailed,
    DatasetLoadFailed,
    MalformedGeometry,
    SearchError,
    UnknownPresetError,
)


@dataclass
class ApiError(Exception):
    code: str
    message: str
    status_code: int


def api_error_from(exc: SearchError) -> ApiError:
    if isinstance(exc, MalformedGeometry):
        return ApiError("INVALID_GEOMETRY", str(exc), 422)
    if isinstance(exc, UnknownPresetError):
        return ApiError("UNKNOWN_PRESET", str(exc), 422)
    if isinstance(exc, BackendQueryFailed):
        return ApiError("BACKEND_QUERY_FAILED", "Failed to search establishments", 502)
    if isinstance(exc, DatasetLoadFailed):
        return ApiError("DATASET_UNAVAILABLE", "Establishment dataset is unavailable", 503)
    return ApiError("SEARCH_FAILED", "Failed to search establishments", 500)


def success_response(data: object, meta: dict[str, object] | None = None) -> dict[str, object]:
    return {"success": True, "data": data, "meta": meta or {}}


def error_response(code: str, message: str) -> dict[str, object]:
    return {"success": False, "error": {"code": code, "message": message}}
