from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from shapely.errors import GEOSException
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

from area_engine.errors import MalformedGeometry, MissingGeometry

WGS84_SRID = 4326
SUPPORTED_TYPES = ("Polygon", "MultiPolygon")
MIN_RING_POSITIONS = 3


@dataclass(frozen=True)
class ValidGeometry:
    raw: Mapping[str, Any]
    shape: BaseGeometry

    @property
    def wkt(self) -> str:
        return self.shape.wkt

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        return self.shape.bounds


def validate_geometry(geometry: Mapping[str, Any] | None) -> ValidGeometry:
    """Check that a GeoJSON-like Polygon/MultiPolygon can be searched.

    ``None`` raises ``MissingGeometry``, which callers treat as "clear results".
    Empty or collapsed rings, non-finite coordinates and empty multipolygons are
    rejected as ``MalformedGeometry`` so they never reach a spatial store.
    Ring closure, winding order and self-intersection are left alone: open rings
    are closed implicitly and invalid shapes go to the containment test as-is.
    """
    if geometry is None:
        raise MissingGeometry("no geometry supplied")
    if not isinstance(geometry, Mapping):
        raise MalformedGeometry("geometry must be an object")
    coordinates = geometry.get("coordinates")
    if not isinstance(coordinates, (list, tuple)):
        raise MalformedGeometry("Invalid geometry: missing or invalid coordinates")

    geometry_type = geometry.get("type") or "Polygon"
    if geometry_type not in SUPPORTED_TYPES:
        raise MalformedGeometry(f"Invalid geometry: unsupported type {geometry_type!r}")

    try:
        if geometry_type == "Polygon":
            shape = _build_polygon(coordinates)
        else:
            shape = _build_multipolygon(coordinates)
    except (TypeError, ValueError, GEOSException) as exc:
        raise MalformedGeometry(f"Invalid geometry: {exc}") from exc
    return ValidGeometry(raw=geometry, shape=shape)


def _build_polygon(rings: Any) -> Polygon:
    rings = _as_sequence(rings, "ring list")
    if not rings:
        raise MalformedGeometry("Invalid geometry: polygon has no rings")
    shell, *holes = [_ring_positions(ring) for ring in rings]
    return Polygon(shell, holes)


def _ring_positions(ring: Any) -> list[tuple[float, float]]:
    positions = []
    for position in _as_sequence(ring, "ring"):
        position = _as_sequence(position, "position")
        if len(position) < 2:
            raise MalformedGeometry("Invalid geometry: position needs longitude and latitude")
        lon, lat = float(position[0]), float(position[1])
        if not (math.isfinite(lon) and math.isfinite(lat)):
            raise MalformedGeometry("Invalid geometry: coordinates must be finite numbers")
        positions.append((lon, lat))
    # A closed ring repeats its first position, so count distinct ones.
    if len(set(positions)) < MIN_RING_POSITIONS:
        raise MalformedGeometry(f"Invalid geometry: ring needs at least {MIN_RING_POSITIONS} distinct positions")
    return positions


def _build_multipolygon(coordinates: Any) -> MultiPolygon:
    members = _as_sequence(coordinates, "polygon")
    if not members:
        raise MalformedGeometry("Invalid geometry: multipolygon has no polygons")
    return MultiPolygon([_build_polygon(rings) for rings in members])


def _as_sequence(value: Any, label: str) -> list | tuple:
    if not isinstance(value, (list, tuple)):
        raise MalformedGeometry(f"Invalid geometry: {label} must be an array")
    return value
