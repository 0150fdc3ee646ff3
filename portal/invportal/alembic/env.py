# portal/invportal/alembic/env.py

from __future__ import annotations

import os
import sys
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

# __file__ = portal/invportal/alembic/env.py, so portal/ goes on sys.path.
PORTAL_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if PORTAL_DIR not in sys.path:
    sys.path.insert(0, PORTAL_DIR)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

from invportal.database import DATABASE_URL, Base, engine  # noqa: E402
from invportal.apps.accounts import models as accounts_models  # noqa: F401, E402

target_metadata = Base.metadata

# The portal may share a database with other services; autogenerate only
# ever looks at the portal's own tables.
PORTAL_TABLES = frozenset(target_metadata.tables)


def _include_object(obj, name, type_, reflected, compare_to) -> bool:
    if type_ == "table":
        return name in PORTAL_TABLES
    table = getattr(obj, "table", None)
    return table is None or table.name in PORTAL_TABLES


def _configured_url() -> str:
    """alembic.ini wins unless it still holds the driver:// placeholder."""
    url = (config.get_main_option("sqlalchemy.url") or "").strip()
    if not url or url.startswith("driver://"):
        url = DATABASE_URL
    config.set_main_option("sqlalchemy.url", url)
    return url


def _options(url: str) -> dict:
    return {
        "target_metadata": target_metadata,
        "include_object": _include_object,
        "compare_type": True,
        # SQLite can only ALTER through table copies.
        "render_as_batch": url.startswith("sqlite"),
    }


# ---------------------------------------------------------------------------
# OFFLINE / ONLINE
# ---------------------------------------------------------------------------

def run_migrations_offline() -> None:
    """Emit SQL without connecting."""
    url = _configured_url()
    context.configure(url=url, literal_binds=True, **_options(url))

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Migrate through the application's engine unless alembic.ini names another database."""
    url = _configured_url()
    if url == DATABASE_URL:
        connectable = engine
    else:
        connectable = create_engine(url, poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, **_options(url))

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
