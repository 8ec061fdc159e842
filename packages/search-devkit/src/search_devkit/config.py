from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    SERVICE_NAME: str = "service"
    DATABASE_URL: str | None = None
    DB_POOL_MIN_SIZE: int = 1
    DB_POOL_MAX_SIZE: int = 5
    SAMPLE_DATASET_PATH: str = "data/sample.csv"
    SAMPLE_DATASET_DELIMITER: str = ","
    GEO_COLUMN: str = "Géolocalisation de l'établissement"
    SEARCH_RESULT_LIMIT: int = 5000
    LOG_LEVEL: str = "INFO"

    @property
    def indexed_backend_configured(self) -> bool:
        return bool(self.DATABASE_URL)


def load_settings(service_name: str) -> ServiceSettings:
    return ServiceSettings(SERVICE_NAME=service_name)
