from __future__ import annotations

_DRIVER_PREFIXES = ("postgresql+asyncpg://", "postgresql+psycopg://", "postgres://")


def normalize_asyncpg_dsn(dsn: str) -> str:
    """asyncpg only understands the bare ``postgresql://`` scheme."""
    for prefix in _DRIVER_PREFIXES:
        if dsn.startswith(prefix):
            return dsn.replace(prefix, "postgresql://", 1)
    return dsn
