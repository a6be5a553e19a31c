"""
SQL database connection and setup
Only used when CONVERSIONS_STORAGE=database; the JSON blob store needs none of this
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from core.config import DATABASE_URL, logger

# Base class for ORM models
Base = declarative_base()

engine = None
SessionLocal = None

if DATABASE_URL:
    engine = create_engine(
        DATABASE_URL,
        pool_pre_ping=True,  # Verify connections before using
        echo=False  # Set to True for SQL query logging in development
    )
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_session_factory():
    """Return the configured session factory, failing loudly when DATABASE_URL is unset."""
    if SessionLocal is None:
        raise ValueError("DATABASE_URL environment variable is required for the database store")
    return SessionLocal


def get_db():
    """
    Dependency for FastAPI routes to get database session
    Usage:
        @router.get("/items")
        def list_items(db: Session = Depends(get_db)):
            ...
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """
    Initialize database tables
    Call this on application startup
    """
    # Register models on Base.metadata
    import models.conversions  # noqa: F401

    target = bind or engine
    if target is None:
        logger.info("[database] DATABASE_URL not set; skipping schema init")
        return
    Base.metadata.create_all(bind=target)
