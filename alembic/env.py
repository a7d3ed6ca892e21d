from __future__ import annotations

import os
import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from dotenv import load_dotenv
from sqlalchemy.engine import Connection

# Make ``golfdraft`` importable when alembic runs from the repo root
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))
load_dotenv(ROOT_DIR / ".env")

from golfdraft.db.engine import DEFAULT_SQLITE_URL, make_engine  # noqa: E402
from golfdraft.db.utils import resolve_sqlite_url  # noqa: E402
from golfdraft.models import Base  # noqa: E402 - import registers every table

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

DATABASE_URL = (
    resolve_sqlite_url(os.environ["DB_URL"], ROOT_DIR)
    if os.getenv("DB_URL")
    else DEFAULT_SQLITE_URL
)
# ConfigParser interpolation treats % specially
config.set_main_option("sqlalchemy.url", DATABASE_URL.replace("%", "%%"))


def _include_name(name, type_, parent_names) -> bool:
    # sqlite keeps bookkeeping tables such as sqlite_sequence
    if type_ == "table" and name and name.startswith("sqlite_"):
        return False
    return True


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        include_name=_include_name,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL for the migrations without a live connection."""
    _configure(url=DATABASE_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations against the configured database."""
    engine = make_engine(database_url=DATABASE_URL)
    connection: Connection
    with engine.connect() as connection:
        _configure(
            connection=connection,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
