"""
Database connection and session.

Schema source of truth: rentals.models. On startup, Base.metadata.create_all(bind=engine)
creates all tables from the current models. The request-scoped Session is the unit of
work: multi-row writes go through atomic(db) so they commit or roll back together.
"""
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from rentals.config import get_settings


def build_engine(url: str, **kwargs) -> Engine:
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        eng = create_engine(url, **kwargs)

        @event.listens_for(eng, "connect")
        def _on_sqlite_connect(dbapi_conn, _record):
            # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
            # Let SQLAlchemy emit BEGIN itself so SAVEPOINTs (begin_nested) behave
            dbapi_conn.isolation_level = None

        @event.listens_for(eng, "begin")
        def _on_sqlite_begin(conn):
            conn.exec_driver_sql("BEGIN")

        return eng
    return create_engine(url, pool_pre_ping=True, **kwargs)


settings = get_settings()
engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session):
    """Commit everything written inside the block, or roll all of it back."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
