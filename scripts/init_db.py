from __future__ import annotations

import sys
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

from golfdraft.db.engine import make_engine

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def alembic_config() -> Config:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    return cfg


def upgrade_db(target_revision: str = "head") -> None:
    """Apply Alembic migrations up to ``target_revision``."""
    command.upgrade(alembic_config(), target_revision)


def print_tables() -> None:
    """Print the tables the configured database now has."""
    engine = make_engine()
    tables = sorted(inspect(engine).get_table_names())
    print(f"{engine.url.render_as_string(hide_password=True)}: {', '.join(tables)}")


def main(argv: list[str]) -> None:
    upgrade_db(argv[0] if argv else "head")
    print_tables()


if __name__ == "__main__":
    main(sys.argv[1:])
