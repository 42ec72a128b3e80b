"""Database configuration and session management.

The store defaults to SQLite. When the URL points at SQLite the engine is
configured with WAL mode and foreign key enforcement:

    - **WAL (Write-Ahead Logging)**: readers are not blocked while a request
      writes a response or issues an OTP.

    - **Foreign Keys**: disabled by default in SQLite. Enabled so a response
      can only reference an existing session and participant.

    - **check_same_thread=False**: FastAPI may hand a connection to a worker
      thread other than the one that created it.

Uniqueness rules (one response per session/participant pair, one OTP row per
phone number, unique refresh tokens) are declared on the models and enforced
here, in the store, rather than by read-then-write checks alone.
"""

from sqlalchemy import event as sa_event
from sqlmodel import Session, SQLModel, create_engine

from studio.core.config import settings

connect_args = (
    {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
)

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


@sa_event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    These settings are connection-level, not database-level, so they must
    be set each time a new connection is established from the pool.
    """
    if not settings.database_url.startswith("sqlite"):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_and_tables():
    """Create all database tables (one-time startup migration)."""
    # Import models so their tables are registered on the metadata
    import studio.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session
