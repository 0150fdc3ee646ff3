from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

MIGRATIONS_DIR = Path(__file__).resolve().parents[1] / "alembic"


def test_upgrade_runs_against_the_configured_url(tmp_path):
    target = tmp_path / "migrated.db"
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    config.set_main_option("sqlalchemy.url", f"sqlite:///{target}")

    command.upgrade(config, "head")

    engine = create_engine(f"sqlite:///{target}")
    try:
        assert "portal_sessions" in inspect(engine).get_table_names()
    finally:
        engine.dispose()
