from __future__ import annotations

from collections.abc import Iterable

from shapely.geometry import Point
from shapely.prepared import prep

from area_engine.geometry import ValidGeometry
from area_engine.models import EstablishmentPoint


def search_points(
    points: Iterable[EstablishmentPoint],
    geometry: ValidGeometry,
) -> list[EstablishmentPoint]:
    """Linear point-in-polygon scan, holes excluded, input order preserved.

    Points lying exactly on an edge are classified by GEOS ``contains`` and are
    not guaranteed either way.
    """
    min_lon, min_lat, max_lon, max_lat = geometry.bounds
    prepared = prep(geometry.shape)
    matched = []
    for point in points:
        if not (min_lon <= point.lon <= max_lon and min_lat <= point.lat <= max_lat):
            continue
        if prepared.contains(Point(point.lon, point.lat)):
            matched.append(point)
    return matched
