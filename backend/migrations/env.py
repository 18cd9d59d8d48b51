# backend/migrations/env.py
from __future__ import annotations

import os
import sys
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

# Run from the repo root: backend/migrations/env.py -> two levels up
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.append(PROJECT_ROOT)

from backend.config import DATABASE_URL  # noqa: E402
from backend.database import Base  # noqa: E402
import backend.models  # noqa: F401,E402  registers users/profiles on Base.metadata

config = context.config

# ALEMBIC_DATABASE_URL / DATABASE_URL, then alembic.ini, then the app default
db_url = (
    os.getenv("ALEMBIC_DATABASE_URL")
    or os.getenv("DATABASE_URL")
    or config.get_main_option("sqlalchemy.url")
    or DATABASE_URL
)
config.set_main_option("sqlalchemy.url", db_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

CONFIGURE_OPTS = dict(
    target_metadata=Base.metadata,
    compare_type=True,
    compare_server_default=True,
    # SQLite cannot ALTER most constraints in place
    render_as_batch=db_url.startswith("sqlite"),
)


def run_migrations_offline() -> None:
    context.configure(url=db_url, literal_binds=True, **CONFIGURE_OPTS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section) or {},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, **CONFIGURE_OPTS)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
