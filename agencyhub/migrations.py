"""
Schema Migrations

Alembic drives schema evolution. The script directory lives in
agencyhub/alembic (env.py + versions/), the applied revision is kept in
the alembic_version table.

Revisions that add columns go through add_column() below, which looks
at the live table first. Databases created from the current models
already have those columns, older ones get them on upgrade, and running
the same change twice never errors.

Usage:
    from agencyhub.database import engine
    from agencyhub.migrations import upgrade_database

    applied = upgrade_database(engine)  # [] when already at head

or, from the repository root, `alembic upgrade head`.
"""
from pathlib import Path
from typing import List, Optional

import sqlalchemy as sa
from alembic import command
from alembic.config import Config
from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy.engine import Connection, Engine

from agencyhub.config import get_settings
from agencyhub.utils.logging import get_logger

logger = get_logger(__name__)

SCRIPT_LOCATION = Path(__file__).resolve().parent / "alembic"


def alembic_config(connection: Optional[Connection] = None) -> Config:
    """Alembic configuration pointing at the bundled script directory."""
    config = Config()
    config.set_main_option("script_location", str(SCRIPT_LOCATION))
    # configparser interpolation treats % specially
    config.set_main_option("sqlalchemy.url", get_settings().DATABASE_URL.replace("%", "%%"))
    if connection is not None:
        config.attributes["connection"] = connection
    return config


def current_revision(connection: Connection) -> Optional[str]:
    return MigrationContext.configure(connection).get_current_revision()


def upgrade_database(engine: Engine, revision: str = "head") -> List[str]:
    """
    Upgrade the schema to `revision`.

    Runs in one transaction on the given engine and returns the revision
    ids applied by this call, oldest first.
    """
    config = alembic_config()
    script = ScriptDirectory.from_config(config)
    target = script.get_revision(revision).revision

    with engine.begin() as connection:
        current = current_revision(connection)
        if current == target:
            return []

        pending = [rev.revision for rev in script.iterate_revisions(target, current)]
        pending.reverse()

        config.attributes["connection"] = connection
        command.upgrade(config, revision)

    for rev in pending:
        logger.info(f"Migration applied: {rev} ({script.get_revision(rev).doc})")
    return pending


def has_column(bind: Connection, table_name: str, column_name: str) -> bool:
    return any(c["name"] == column_name for c in sa.inspect(bind).get_columns(table_name))


def add_column(operations: Operations, table_name: str, column: sa.Column, index: bool = False) -> bool:
    """
    Add a column to an existing table unless it is already there.

    `operations` is alembic's `op` inside a revision, or an Operations
    bound to a MigrationContext elsewhere. `index` also creates
    ix_<table>_<column>. Returns True when the column was created.

    The column must be nullable or carry a server default, otherwise
    existing rows could not satisfy it.
    """
    if not column.nullable and column.server_default is None:
        raise ValueError(
            f"Additive column {table_name}.{column.name} must be nullable or have a server default"
        )

    bind = operations.get_bind()
    if has_column(bind, table_name, column.name):
        logger.debug(f"Column {table_name}.{column.name} already present, skipping")
        return False

    if column.foreign_keys and bind.dialect.name == "sqlite":
        # SQLite cannot ALTER a constraint in; rebuild the table with it
        with operations.batch_alter_table(table_name, recreate="always") as batch:
            batch.add_column(sa.Column(column.name, column.type, nullable=column.nullable))
            for fk in column.foreign_keys:
                referent, remote_column = fk.target_fullname.rsplit(".", 1)
                batch.create_foreign_key(
                    f"fk_{table_name}_{column.name}",
                    referent,
                    [column.name],
                    [remote_column],
                    ondelete=fk.ondelete,
                )
    else:
        operations.add_column(table_name, column)

    if index:
        operations.create_index(f"ix_{table_name}_{column.name}", table_name, [column.name])

    logger.info(f"Added column {table_name}.{column.name}")
    return True


def add_columns(operations: Operations, table_name: str, *columns: sa.Column) -> List[str]:
    """Add several columns to one table; returns the names actually created."""
    return [column.name for column in columns if add_column(operations, table_name, column)]
