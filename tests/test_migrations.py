from pathlib import Path

from sqlalchemy import create_engine, inspect

from gotid_cloud.models import Base
from gotid_cloud.scripts.run_migrations import SCHEMA_TABLES, run_migrations_to_head


def _tables(url: str) -> set[str]:
    engine = create_engine(url)
    try:
        return set(inspect(engine).get_table_names())
    finally:
        engine.dispose()


def test_migrations_build_schema(tmp_path: Path, monkeypatch):
    url = f"sqlite+pysqlite:///{tmp_path / 'migrated.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    run_migrations_to_head()
    tables = _tables(url)
    assert SCHEMA_TABLES.issubset(tables)
    assert "alembic_version" in tables


def test_create_all_database_is_stamped(tmp_path: Path, monkeypatch):
    url = f"sqlite+pysqlite:///{tmp_path / 'bootstrapped.db'}"
    engine = create_engine(url)
    Base.metadata.create_all(engine)
    engine.dispose()

    monkeypatch.setenv("DATABASE_URL", url)
    run_migrations_to_head()
    assert "alembic_version" in _tables(url)
