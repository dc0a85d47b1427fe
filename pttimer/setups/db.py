"""Database connection and session management.

Setups live in a single SQLite file next to the settings::

    ~/.pttimer/pttimer.db

Tests call ``configure_engine("sqlite:///:memory:")`` before ``init_db()``;
an in-memory database is held on one shared connection so every session
sees the same tables.
"""

from contextlib import contextmanager

import structlog
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session as OrmSession
from sqlalchemy.pool import StaticPool

from ..settings import APP_DATA_DIR
from .models import Base, Setup

log = structlog.get_logger()

DB_PATH = APP_DATA_DIR / "pttimer.db"

_engine: Engine | None = None
_SessionFactory: sessionmaker | None = None


def _make_engine(url: str) -> Engine:
    options = {"connect_args": {"check_same_thread": False}, "echo": False}
    if url.endswith(":memory:"):
        options["poolclass"] = StaticPool
    return create_engine(url, **options)


def _get_engine() -> Engine:
    global _engine
    if _engine is None:
        DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        _engine = _make_engine(f"sqlite:///{DB_PATH}")
    return _engine


def _get_session_factory() -> sessionmaker:
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


def _add_missing_columns(engine: Engine) -> None:
    """Bring a ``setups`` table from an older release up to date.

    Added columns carry their scalar default so rows already stored
    read back sensibly; a missing sound column reads as silent.
    """
    table = Setup.__table__
    existing = {c["name"] for c in inspect(engine).get_columns(table.name)}
    missing = [c for c in table.columns if c.name not in existing]
    if not missing:
        return
    with engine.begin() as conn:
        for column in missing:
            ddl = f"{column.name} {column.type.compile(dialect=engine.dialect)}"
            if column.default is not None and column.default.is_scalar:
                ddl += f" DEFAULT {column.default.arg!r}"
            conn.execute(text(f"ALTER TABLE {table.name} ADD COLUMN {ddl}"))
            log.info("setups_column_added", column=column.name)


# ── public API ────────────────────────────────────────────────────────────


def configure_engine(url: str) -> None:
    """Point the setup library at another database URL."""
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _SessionFactory = None
    _engine = _make_engine(url)


def init_db() -> None:
    """Create the tables, or add columns a newer schema introduced."""
    engine = _get_engine()
    Base.metadata.create_all(engine)
    _add_missing_columns(engine)
    log.debug("database_ready", url=str(engine.url))


@contextmanager
def get_session():
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    session: OrmSession = _get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
