import logging

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker

from mayspace.core.config import settings, is_sqlite

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url


def _engine_kwargs(url: str) -> dict:
    if is_sqlite(url):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_timeout": settings.DATABASE_POOL_TIMEOUT,
        "pool_recycle": settings.DATABASE_POOL_RECYCLE,
    }


def enable_sqlite_foreign_keys(engine) -> None:
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection."""

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_engine(DATABASE_URL, echo=False, **_engine_kwargs(DATABASE_URL))
if is_sqlite(DATABASE_URL):
    enable_sqlite_foreign_keys(engine)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def test_connection() -> bool:
    """Test database connection - NON-BLOCKING."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        return True
    except Exception as e:
        logger.warning(f"[DB] Connection check failed: {e}")
        return False


def init_db() -> None:
    """Create all tables that do not exist yet."""
    # Import all models so they're registered with Base
    import mayspace.models  # noqa: F401
    from mayspace.db.base import Base

    Base.metadata.create_all(bind=engine)
    logger.info("[DB] Tables initialized")


def close_db_connection() -> None:
    """Close database connections."""
    engine.dispose()
    logger.info("[DB] Connections closed")
