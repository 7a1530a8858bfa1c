import pytest
from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext
from sqlalchemy import Column, ForeignKey, Integer, String, create_engine, inspect, text

from agencyhub.migrations import add_column, current_revision, upgrade_database

REVISIONS = ["0001", "0002", "0003", "0004"]


@pytest.fixture
def scratch_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'scratch.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def widgets(scratch_engine):
    with scratch_engine.begin() as connection:
        connection.execute(text("CREATE TABLE widgets (id INTEGER PRIMARY KEY)"))
        connection.execute(text("INSERT INTO widgets (id) VALUES (1)"))
    return scratch_engine


def operations_for(connection):
    return Operations(MigrationContext.configure(connection))


def columns_of(engine, table):
    return [(c["name"], str(c["type"]), c["nullable"]) for c in inspect(engine).get_columns(table)]


def schema_of(engine):
    return {table: columns_of(engine, table) for table in inspect(engine).get_table_names()}


def test_add_column_twice_is_a_no_op(widgets):
    with widgets.begin() as connection:
        assert add_column(operations_for(connection), "widgets", Column("colour", String(20), nullable=True)) is True
    first = columns_of(widgets, "widgets")

    with widgets.begin() as connection:
        assert add_column(operations_for(connection), "widgets", Column("colour", String(20), nullable=True)) is False
    second = columns_of(widgets, "widgets")

    assert first == second
    assert [name for name, _, _ in second] == ["id", "colour"]


def test_add_column_with_numeric_server_default(widgets):
    with widgets.begin() as connection:
        add_column(operations_for(connection), "widgets", Column("stock", Integer, nullable=False, server_default="0"))

    with widgets.connect() as connection:
        assert connection.execute(text("SELECT stock FROM widgets")).scalar() == 0


def test_add_column_with_text_server_default(widgets):
    column = Column("status", String(20), nullable=False, server_default="in progress")
    with widgets.begin() as connection:
        assert add_column(operations_for(connection), "widgets", column) is True

    with widgets.connect() as connection:
        assert connection.execute(text("SELECT status FROM widgets")).scalar() == "in progress"


def test_add_column_refuses_required_column_without_default(widgets):
    with widgets.begin() as connection:
        with pytest.raises(ValueError):
            add_column(operations_for(connection), "widgets", Column("sku", String(20), nullable=False))


def test_upgrade_applies_each_revision_once(scratch_engine):
    assert upgrade_database(scratch_engine) == REVISIONS
    schema = schema_of(scratch_engine)
    assert {"agencies", "users", "clients", "projects", "leads", "quotes", "contacts", "tasks"} <= set(schema)

    assert upgrade_database(scratch_engine) == []
    assert schema_of(scratch_engine) == schema

    with scratch_engine.connect() as connection:
        assert current_revision(connection) == "0004"


def test_upgrade_in_steps(scratch_engine):
    assert upgrade_database(scratch_engine, "0002") == ["0001", "0002"]
    assert upgrade_database(scratch_engine) == ["0003", "0004"]


def test_upgrade_brings_an_older_schema_up_to_date(scratch_engine):
    # agencies and tasks as they looked before industry and lead links
    with scratch_engine.begin() as connection:
        connection.execute(text(
            "CREATE TABLE agencies ("
            "id VARCHAR(36) PRIMARY KEY, name VARCHAR(255) NOT NULL, slug VARCHAR(100) NOT NULL UNIQUE, "
            "created_at DATETIME NOT NULL, updated_at DATETIME NOT NULL)"
        ))
        connection.execute(text(
            "CREATE TABLE tasks ("
            "id VARCHAR(36) PRIMARY KEY, agency_id VARCHAR(36) NOT NULL, title VARCHAR(255) NOT NULL)"
        ))
        connection.execute(text("INSERT INTO tasks (id, agency_id, title) VALUES ('t1', 'a1', 'Call back')"))

    upgrade_database(scratch_engine)

    inspector = inspect(scratch_engine)
    assert "industry" in [c["name"] for c in inspector.get_columns("agencies")]
    assert {"lead_id", "start_time", "end_time", "estimated_hours"} <= {c["name"] for c in inspector.get_columns("tasks")}

    lead_links = [fk for fk in inspector.get_foreign_keys("tasks") if fk["constrained_columns"] == ["lead_id"]]
    assert len(lead_links) == 1
    assert lead_links[0]["referred_table"] == "leads"
    assert "ix_tasks_lead_id" in [index["name"] for index in inspector.get_indexes("tasks")]

    with scratch_engine.connect() as connection:
        assert connection.execute(text("SELECT title FROM tasks WHERE id = 't1'")).scalar() == "Call back"


def test_failed_upgrade_leaves_no_revision_stamped(scratch_engine, monkeypatch):
    def refuse(operations, table_name, column, index=False):
        raise RuntimeError("disk full")

    monkeypatch.setattr("agencyhub.migrations.add_column", refuse)

    with pytest.raises(RuntimeError):
        upgrade_database(scratch_engine)

    with scratch_engine.connect() as connection:
        assert current_revision(connection) is None


def test_foreign_key_column_is_skipped_when_present(scratch_engine):
    upgrade_database(scratch_engine)

    with scratch_engine.begin() as connection:
        column = Column("lead_id", String(36), ForeignKey("leads.id"), nullable=True)
        assert add_column(operations_for(connection), "tasks", column, index=True) is False
