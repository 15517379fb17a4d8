"""Database engine and session for the memories store: SQLite (dev) / PostgreSQL (prod)."""
from collections.abc import Generator
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from utils.config import DATABASE_URL

# Tests must never open the real memories database.
if os.environ.get("TESTING") == "true":
    url = DATABASE_URL
    if "memories.db" in url or (":memory:" not in url and "test" not in url.lower().split("?")[0]):
        raise RuntimeError(
            "Tests must not run against the memories database. Set TESTING_DATABASE_URL to "
            "sqlite:///:memory: (or another URL containing :memory: or 'test')."
        )

_is_sqlite = DATABASE_URL.startswith("sqlite")
_engine_kw: dict = {"echo": False}
if _is_sqlite:
    _engine_kw["connect_args"] = {"check_same_thread": False}
    # One shared connection, otherwise every session sees its own empty in-memory DB.
    if ":memory:" in DATABASE_URL:
        _engine_kw["poolclass"] = StaticPool
else:
    _engine_kw["pool_pre_ping"] = True

engine = create_engine(DATABASE_URL, **_engine_kw)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request, closed afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
