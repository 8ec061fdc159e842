from search_devkit.db import normalize_asyncpg_dsn


def test_normalize_asyncpg_dsn() -> None:
    assert normalize_asyncpg_dsn("postgresql+asyncpg://u:p@h:5432/db") == "postgresql://u:p@h:5432/db"
    assert normalize_asyncpg_dsn("postgresql+psycopg://u:p@h:5432/db") == "postgresql://u:p@h:5432/db"
    assert normalize_asyncpg_dsn("postgres://u:p@h:5432/db") == "postgresql://u:p@h:5432/db"
    assert normalize_asyncpg_dsn("postgresql://u:p@h:5432/db") == "postgresql://u:p@h:5432/db"
