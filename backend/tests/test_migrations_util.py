from __future__ import annotations

from pathlib import Path

from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, inspect, text

from backend.app.database import Base
from backend.app.migrations import run_database_migrations

BACKEND_DIR = Path(__file__).resolve().parents[1]


def _current_head() -> str:
    config = Config(str(BACKEND_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    return ScriptDirectory.from_config(config).get_current_head()


def _version(url: str) -> str:
    engine = create_engine(url, connect_args={"check_same_thread": False})
    try:
        with engine.connect() as connection:
            return connection.scalar(text("SELECT version_num FROM alembic_version"))
    finally:
        engine.dispose()


def test_run_database_migrations_creates_finance_tables(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'fresh.db'}"

    run_database_migrations(url)

    engine = create_engine(url, connect_args={"check_same_thread": False})
    inspector = inspect(engine)
    for table in ("customers", "orders", "order_items", "expenses", "alembic_version"):
        assert inspector.has_table(table)
    assert "expenses_incurred_at_idx" in {index["name"] for index in inspector.get_indexes("expenses")}
    engine.dispose()

    assert _version(url) == _current_head()

    # A second run is a no-op on an up to date database.
    run_database_migrations(url)
    assert _version(url) == _current_head()


def test_run_database_migrations_stamps_head_for_current_schema(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'current.db'}"

    engine = create_engine(url, connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    engine.dispose()

    run_database_migrations(url)

    assert _version(url) == _current_head()
