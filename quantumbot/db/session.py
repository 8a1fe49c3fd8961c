"""
Database configuration and session management.
Provides database engine, session factory and the declarative Base.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from quantumbot.core.config import get_settings

DATABASE_URL = get_settings().DATABASE_URL

# Render/Neon style 'postgres://' urls are not accepted by SQLAlchemy 1.4+
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

engine_kwargs = {"pool_pre_ping": True}
if DATABASE_URL.startswith("sqlite"):
    # SQLite specific setting for multi-threaded access
    engine_kwargs["connect_args"] = {"check_same_thread": False}
    if DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
        # in-memory db must share one connection or every session sees an empty db
        engine_kwargs["poolclass"] = StaticPool

engine = create_engine(DATABASE_URL, **engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db():
    """Create tables if they don't exist. Fails loudly if the db is unreachable."""
    from quantumbot import models  # noqa: F401  registers the tables on Base

    Base.metadata.create_all(bind=engine)


def get_db():
    """
    Get database session with automatic cleanup.
    Used as a FastAPI dependency.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
