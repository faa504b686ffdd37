# spending_api/database.py
import sqlite3
from datetime import date
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.event import listen
from sqlalchemy.pool import StaticPool

from .config import settings


class Base(DeclarativeBase):
    pass


def _fk_pragma_on_connect(dbapi_con, con_record):
    """Ensures that the foreign key pragma is enabled for SQLite connections."""
    dbapi_con.execute('PRAGMA foreign_keys=ON')
    # Python 3.12+ deprecates the implicit date adapter
    sqlite3.register_adapter(date, lambda val: val.isoformat())


def build_engine(database_url: str) -> Engine:
    """
    Creates an engine for the given URL.

    SQLite needs 'check_same_thread' disabled because FastAPI serves sync
    routes from a thread pool, and an in-memory database must share a single
    connection or every new connection would see an empty database.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    sqlite_engine = create_engine(database_url, **kwargs)
    listen(sqlite_engine, 'connect', _fk_pragma_on_connect)
    return sqlite_engine


engine = build_engine(settings.get_database_url())

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
