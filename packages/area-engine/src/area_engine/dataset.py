from __future__ import annotations

import csv
import logging
import math
from pathlib import Path

from area_engine.errors import DatasetLoadFailed
from area_engine.models import EstablishmentPoint, LoadedDataset

logger = logging.getLogger(__name__)

DEFAULT_GEO_COLUMN = "Géolocalisation de l'établissement"


def parse_lat_lon(raw: str | None) -> tuple[float, float] | None:
    if not raw or not raw.strip():
        return None
    parts = raw.split(",")
    if len(parts) < 2:
        return None
    try:
        lat = float(parts[0].strip())
        lon = float(parts[1].strip())
    except ValueError:
        return None
    if not math.isfinite(lat) or not math.isfinite(lon):
        return None
    return lat, lon


class DatasetLoader:
    """Reads the sample CSV once and keeps the parsed dataset for the process."""

    def __init__(
        self,
        source_path: str | Path,
        *,
        geo_column: str = DEFAULT_GEO_COLUMN,
        delimiter: str = ",",
    ) -> None:
        self._source_path = Path(source_path)
        self._geo_column = geo_column
        self._delimiter = delimiter
        self._dataset: LoadedDataset | None = None

    @property
    def geo_column(self) -> str:
        return self._geo_column

    @property
    def is_loaded(self) -> bool:
        return self._dataset is not None

    def load(self) -> LoadedDataset:
        if self._dataset is not None:
            return self._dataset
        dataset = self._parse()
        # a racing first call may have published already; keep the first one
        if self._dataset is None:
            self._dataset = dataset
        return self._dataset

    def _parse(self) -> LoadedDataset:
        try:
            with self._source_path.open("r", encoding="utf-8-sig", newline="") as handle:
                reader = csv.DictReader(handle, delimiter=self._delimiter)
                header = tuple(reader.fieldnames or ())
                if not header:
                    raise DatasetLoadFailed(f"dataset has no header row: {self._source_path}")
                field_columns = tuple(column for column in header if column != self._geo_column)
                points: list[EstablishmentPoint] = []
                skipped = 0
                for row in reader:
                    coordinates = parse_lat_lon(row.get(self._geo_column))
                    if coordinates is None:
                        skipped += 1
                        continue
                    lat, lon = coordinates
                    fields = {column: row.get(column) or "" for column in field_columns}
                    points.append(EstablishmentPoint(lat=lat, lon=lon, fields=fields))
        except (OSError, UnicodeDecodeError, csv.Error) as exc:
            raise DatasetLoadFailed(f"cannot read dataset {self._source_path}: {exc}") from exc

        logger.info(
            "dataset_loaded",
            extra={
                "component": "area_engine",
                "source": str(self._source_path),
                "loaded_count": len(points),
                "skipped_count": skipped,
            },
        )
        return LoadedDataset(points=tuple(points), columns=header, skipped_rows=skipped)
