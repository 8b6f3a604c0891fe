import logging
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from database.base import Base
from core.config import settings

logger = logging.getLogger(__name__)


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _is_in_memory(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def _build_engine(url: str):
    kwargs = {"echo": settings.DB_ECHO}
    if _is_sqlite(url):
        kwargs["connect_args"] = {"check_same_thread": False}
        # An in-memory database lives and dies with its connection
        if _is_in_memory(url):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


# Create database engine
engine = _build_engine(settings.DATABASE_URL)


@event.listens_for(engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    if _is_sqlite(settings.DATABASE_URL):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables():
    """Create every table registered on the declarative base"""
    import models  # noqa: F401  registers all mappers on Base.metadata
    Base.metadata.create_all(bind=engine)


def init_db():
    """Open the store: create/verify the schema and seed reference data."""
    from database.seed import seed_categories

    create_tables()
    db = SessionLocal()
    try:
        inserted = seed_categories(db)
        logger.info(f"Database ready ({inserted} categories seeded)")
    finally:
        db.close()


def close_db():
    """Release every pooled connection on shutdown."""
    engine.dispose()
    logger.info("Database connections closed")


# Dependency to get database session
def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
