"""
Database engine, session factory and declarative base
"""
from datetime import datetime, timezone

from sqlalchemy import JSON, create_engine
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, sessionmaker
import logging

from edupal.config import settings

logger = logging.getLogger(__name__)

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the TIMESTAMP columns of the schema"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_db():
    """FastAPI dependency yielding a request-scoped session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create missing tables. Views such as the leaderboard are owned by the database."""
    # Register all models on Base.metadata
    import edupal.models  # noqa: F401

    tables = [t for t in Base.metadata.sorted_tables if not t.info.get("is_view")]
    Base.metadata.create_all(bind=bind or engine, tables=tables)
    logger.info(f"Ensured {len(tables)} tables exist")
