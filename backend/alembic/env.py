"""Alembic environment for the TaskHub schema.

The target URL defaults to the app's DATABASE_URL; pass
`alembic -x database_url=sqlite:///other.db upgrade head` to migrate another
database. Connections come from an engine built here, so the SQLite pragma
listener in taskhub.db.database (foreign keys, WAL) applies to migrations too.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlmodel import create_engine

from taskhub.db.database import get_database_url, table_metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = table_metadata()


def _target_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("database_url") or get_database_url()


def _configure(**kwargs) -> None:
    # SQLite cannot ALTER most constraints in place
    context.configure(
        target_metadata=target_metadata,
        render_as_batch=True,
        compare_type=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout."""
    _configure(url=_target_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(_target_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
