from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class EstablishmentPoint:
    lat: float
    lon: float
    fields: dict[str, str] = field(default_factory=dict)

    def project(self, columns: tuple[str, ...] | list[str]) -> EstablishmentPoint:
        projected = {column: self.fields.get(column, "") for column in columns}
        return EstablishmentPoint(lat=self.lat, lon=self.lon, fields=projected)


@dataclass(frozen=True)
class LoadedDataset:
    """Parsed sample dataset.

    ``columns`` is the full source header, geo column included; callers that
    show columns to users filter it out themselves.
    """

    points: tuple[EstablishmentPoint, ...]
    columns: tuple[str, ...]
    skipped_rows: int = 0
