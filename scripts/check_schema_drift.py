from __future__ import annotations

import sys

from alembic.autogenerate import api as ag_api
from alembic.runtime.migration import MigrationContext
from sqlalchemy.engine import Engine

from golfdraft.db.engine import make_engine
from golfdraft.models import Base


def _include_name(name, type_, parent_names) -> bool:
    return not (type_ == "table" and name and name.startswith(("sqlite_", "alembic_")))


def diff_schema(engine: Engine) -> list:
    """Return the Alembic operations needed to bring the database in line with the models."""
    with engine.connect() as connection:
        context = MigrationContext.configure(
            connection=connection,
            opts={
                "compare_type": True,
                "compare_server_default": True,
                "include_name": _include_name,
                "render_as_batch": connection.dialect.name == "sqlite",
            },
        )
        upgrade_ops = ag_api.produce_migrations(context, Base.metadata).upgrade_ops
    if upgrade_ops is None:
        raise RuntimeError("Alembic produced no upgrade operations")
    return list(upgrade_ops.ops or [])


def _print_ops(ops, indent: int = 0) -> None:
    for op in ops:
        print(f"{'  ' * indent}- {op}")
        if getattr(op, "ops", None):
            _print_ops(op.ops, indent + 1)


def main() -> int:
    engine = make_engine()
    where = engine.url.render_as_string(hide_password=True)
    try:
        ops = diff_schema(engine)
    except Exception as exc:
        print(f"Schema drift check: ERROR for {where}: {exc}", file=sys.stderr)
        return 2
    if not ops:
        print(f"Schema drift check: OK for {where}.")
        return 0
    print(f"Schema drift check: FAILED for {where}:")
    _print_ops(ops)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
