"""Area search engine core package."""

from area_engine.containment import search_points
from area_engine.dataset import DatasetLoader, parse_lat_lon
from area_engine.errors import (
    BackendQueryFailed,
    DatasetLoadFailed,
    MalformedGeometry,
    MissingGeometry,
    SearchError,
    SearchInputError,
    UnknownPresetError,
)
from area_engine.geometry import ValidGeometry, validate_geometry
from area_engine.models import EstablishmentPoint, LoadedDataset
from area_engine.postgis_adapter import PostGISAdapter
from area_engine.presets import PRESET_FILTERS, apply_presets

__all__ = [
    "BackendQueryFailed",
    "DatasetLoadFailed",
    "DatasetLoader",
    "EstablishmentPoint",
    "LoadedDataset",
    "MalformedGeometry",
    "MissingGeometry",
    "PRESET_FILTERS",
    "PostGISAdapter",
    "SearchError",
    "SearchInputError",
    "UnknownPresetError",
    "ValidGeometry",
    "apply_presets",
    "parse_lat_lon",
    "search_points",
    "validate_geometry",
]
