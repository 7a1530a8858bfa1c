"""
Alembic environment.

Used two ways: agencyhub.migrations.upgrade_database() hands over an
open connection through config.attributes, the `alembic` command line
opens its own from sqlalchemy.url (DATABASE_URL by default).
"""
from alembic import context
from sqlalchemy import engine_from_config, pool

import agencyhub.models  # noqa: F401  registers every table on Base.metadata
from agencyhub.config import get_settings
from agencyhub.database import Base
from agencyhub.utils.logging import setup_logging

config = context.config
settings = get_settings()

if config.get_main_option("sqlalchemy.url") is None:
    config.set_main_option("sqlalchemy.url", settings.DATABASE_URL.replace("%", "%%"))

# Invoked from the command line; inside the app logging is already set up
if config.config_file_name:
    setup_logging(log_level=settings.LOG_LEVEL)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connection = config.attributes.get("connection")
    if connection is not None:
        do_run_migrations(connection)
        return

    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        do_run_migrations(connection)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
