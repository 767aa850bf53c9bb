from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from mediecho.config import get_settings

Base = declarative_base()


def get_database_url() -> str:
    """Get database URL from settings."""
    url = get_settings().database_url
    # Ensure psycopg (v3) driver is used
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    elif url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+psycopg://", 1)
    return url


DATABASE_URL = get_database_url()


def get_engine():
    """Get or create database engine."""
    connect_args = {}
    if DATABASE_URL.startswith("sqlite"):
        # Sync endpoints run in FastAPI's threadpool
        connect_args["check_same_thread"] = False
    return create_engine(
        DATABASE_URL,
        echo=get_settings().debug,
        connect_args=connect_args,
    )


engine = get_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    """Create tables for the default SQLite dev database.

    PostgreSQL deployments are managed by Alembic; this only verifies
    connectivity there.
    """
    import mediecho.models  # noqa: F401  (registers tables on Base.metadata)

    if DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    else:
        with engine.connect():
            pass


def get_db():
    """Dependency for FastAPI routes to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
