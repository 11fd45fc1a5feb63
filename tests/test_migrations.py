from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from booknotion.db import models  # noqa: F401
from booknotion.db.base import Base

ROOT = Path(__file__).resolve().parent.parent


def alembic_config(db_file):
    config = Config(str(ROOT / "alembic.ini"))
    config.set_main_option("sqlalchemy.url", f"sqlite+aiosqlite:///{db_file}")
    return config


def test_upgrade_creates_model_tables(tmp_path):
    db_file = tmp_path / "migrated.db"

    command.upgrade(alembic_config(db_file), "head")

    engine = create_engine(f"sqlite:///{db_file}")
    try:
        inspector = inspect(engine)
        tables = set(inspector.get_table_names())
        assert {"users", "sections", "notebooks", "alembic_version"} <= tables

        for table in Base.metadata.sorted_tables:
            columns = {c["name"] for c in inspector.get_columns(table.name)}
            assert columns == set(table.columns.keys())
    finally:
        engine.dispose()


def test_downgrade_drops_tables(tmp_path):
    db_file = tmp_path / "migrated.db"
    config = alembic_config(db_file)

    command.upgrade(config, "head")
    command.downgrade(config, "base")

    engine = create_engine(f"sqlite:///{db_file}")
    try:
        assert set(inspect(engine).get_table_names()) == {"alembic_version"}
    finally:
        engine.dispose()
