"""
Database Engine and Sessions

One engine per process, a session per request (get_db) and the declarative
Base the models register on. PostgreSQL in production, SQLite for tests
and local runs.
"""
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool

from agencyhub.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

IS_SQLITE = settings.DATABASE_URL.startswith("sqlite")
IS_POSTGRES = settings.DATABASE_URL.startswith("postgresql")

engine = create_engine(
    settings.DATABASE_URL,
    poolclass=QueuePool,
    pool_size=settings.DATABASE_POOL_SIZE,
    max_overflow=settings.DATABASE_MAX_OVERFLOW,
    pool_pre_ping=True,
    echo=settings.DEBUG,
    # the ASGI server hands sessions to worker threads
    connect_args={"check_same_thread": False} if IS_SQLITE else {},
)

# Records stay readable after commit so endpoints can serialize them
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

Base = declarative_base()


@event.listens_for(engine, "connect")
def on_connect(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    if IS_POSTGRES:
        cursor.execute("SET TIME ZONE 'UTC'")
    elif IS_SQLITE:
        # SQLite ignores foreign keys, ON DELETE SET NULL included, without this
        cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    logger.debug("Opened database connection")


def get_db() -> Session:
    """FastAPI dependency: a session that is closed when the request ends."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Upgrade the schema to the latest Alembic revision. Returns the revisions applied."""
    from agencyhub.migrations import upgrade_database

    applied = upgrade_database(engine)
    if applied:
        logger.info(f"Schema upgraded to {applied[-1]}")
    else:
        logger.debug("Schema is up to date")
    return applied
