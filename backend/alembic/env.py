"""
Alembic migration environment for the desk booking schema.

The database URL comes from DATABASE_URL_SYNC unless overridden on the
command line, e.g. `alembic -x url=sqlite:///desks.db upgrade head`.
SQLite targets use batch mode so ALTERs on seats/bookings work there too.
"""

from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context

from deskbooking.db.base import Base
from deskbooking.models import User, Seat, Booking, SlotClaim  # noqa: F401 - registers tables on Base.metadata
from deskbooking.core.config import get_settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)


def _database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("url") or get_settings().DATABASE_URL_SYNC


def _skip_empty_autogenerate(context, revision, directives):
    # `alembic revision --autogenerate` with no model changes writes nothing
    if config.cmd_opts is not None and getattr(config.cmd_opts, "autogenerate", False):
        script = directives[0]
        if script.upgrade_ops.is_empty():
            directives[:] = []


def _configure(database_url: str, **kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        render_as_batch=database_url.startswith("sqlite"),
        process_revision_directives=_skip_empty_autogenerate,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit the migration as SQL without a database connection."""
    url = _database_url()
    _configure(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = _database_url()
    connectable = engine_from_config(
        {"sqlalchemy.url": url},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        _configure(url, connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
