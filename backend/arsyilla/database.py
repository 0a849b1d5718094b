"""Engine, session factory and table creation for the placement registry.

Nothing here is built at import time. ``create_app`` calls ``build_engine``
with ``settings.database_url`` and keeps the engine and session factory on
``app.state``; ``get_db`` reads them back from the request.
"""

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def is_postgresql(url: str) -> bool:
    return url.startswith("postgresql")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # Off by default in SQLite; folders.user_id relies on it for ON DELETE CASCADE.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str) -> Engine:
    """Create the engine for ``url``.

    In-memory SQLite (``sqlite://``, used by the test suite) must reuse a
    single connection or every new connection sees an empty database.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url:
        kwargs["poolclass"] = StaticPool
    sqlite_engine = create_engine(url, **kwargs)
    event.listen(sqlite_engine, "connect", _enable_sqlite_foreign_keys)
    return sqlite_engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create any missing tables. Existing tables are left untouched."""
    from . import models  # noqa: F401  (registers User and Folder on Base.metadata)

    Base.metadata.create_all(bind=engine)


def get_db(request: Request):
    """FastAPI dependency yielding one session per request.

    Rolls back on an unhandled exception so the connection goes back to the
    pool clean.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
