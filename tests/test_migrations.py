"""
Alembic migration smoke test
"""

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ALEMBIC_DIR = Path(__file__).resolve().parent.parent / "alembic"


def test_upgrade_creates_lifecycle_tables(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    config = Config()
    config.set_main_option("script_location", str(ALEMBIC_DIR))
    config.set_main_option("sqlalchemy.url", url)

    command.upgrade(config, "head")

    inspector = inspect(create_engine(url))
    assert {"plans", "accounts", "app_users", "view_as_sessions"} <= set(inspector.get_table_names())

    slug_index = [ix for ix in inspector.get_indexes("accounts") if ix["column_names"] == ["slug"]]
    assert slug_index and slug_index[0]["unique"]

    command.downgrade(config, "base")
    assert "accounts" not in inspect(create_engine(url)).get_table_names()
