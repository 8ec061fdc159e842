from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SearchRequest(BaseModel):
    geometry: dict[str, Any] | None = None
    presets: list[str] = Field(default_factory=list)


class EstablishmentItem(BaseModel):
    lat: float
    lon: float
    fields: dict[str, str]


class SearchResultPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    points: list[EstablishmentItem]
    columns: list[str]
    is_sample_source: bool = Field(serialization_alias="isSampleSource")


class ColumnsPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    columns: list[str]
    is_sample_source: bool = Field(serialization_alias="isSampleSource")


class PresetItem(BaseModel):
    id: str
    label: str
    group: str
    description: str
