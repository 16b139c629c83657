"""Database session configuration."""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from wtf_dial.core.settings import settings


READ_ONLY_OPTION = "wtf_dial_read_only"


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


def configure_sqlite(engine: Engine) -> Engine:
    """Make SQLite transactions safe for concurrent dial recomputes.

    pysqlite defers BEGIN until the first write, so two transactions could both
    read a dial's value before either holds the write lock. Every transaction
    here starts with BEGIN IMMEDIATE instead, which serializes writers the way
    ``SELECT ... FOR UPDATE`` does on PostgreSQL. Foreign keys are enabled so
    deleting a dial cascades to its memberships and history.

    Sessions started with :func:`begin_read` get a plain deferred BEGIN and
    never take the write lock.
    """
    if engine.dialect.name != "sqlite":
        return engine

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn: Any) -> None:
        if conn.get_execution_options().get(READ_ONLY_OPTION):
            conn.exec_driver_sql("BEGIN")
        else:
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def begin_read(session: Session) -> Session:
    """Start ``session`` as a read-only transaction.

    Must be called before the session runs any statement.
    """
    session.connection(execution_options={READ_ONLY_OPTION: True})
    return session


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a session factory bound to ``engine``.

    Objects stay readable after commit because services hand schemas built
    from them back to callers once the session is closed.
    """
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


# Ensure model modules are imported so that metadata is populated when create_all runs.
import wtf_dial.models  # noqa: E402,F401

engine = configure_sqlite(
    create_engine(
        settings.database_url_sync,
        pool_pre_ping=True,
        echo=settings.sql_debug,
    )
)

SessionLocal = make_session_factory(engine)


def get_session_factory() -> sessionmaker[Session]:
    """Return the session factory for dependency injection."""
    return SessionLocal


def create_tables() -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def drop_tables() -> None:
    """Drop all database tables."""
    Base.metadata.drop_all(bind=engine)
