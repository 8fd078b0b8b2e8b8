"""Database engine and per-request sessions

The engine (and its connection pool) is created once per process; each
request gets its own session through ``get_db``.
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

from vidtube.core.config import settings
from vidtube.models.base import Base


def _engine_options(database_url: str) -> dict:
    if make_url(database_url).get_backend_name() == "sqlite":
        # Handlers run on the worker threadpool, not the thread that opened the connection
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_recycle": 3600}


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency for FastAPI endpoints"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create any missing tables"""
    Base.metadata.create_all(bind=engine)


def close_db():
    """Release pooled connections on shutdown"""
    engine.dispose()
