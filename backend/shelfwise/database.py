from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from shelfwise.core.config import settings
import logging
import time

logger = logging.getLogger(__name__)

logger.info("SHELFWISE DATABASE_URL = %s", settings.get_masked_database_url())

if settings.DATABASE_URL.startswith("sqlite"):
    # In-memory SQLite must share one connection across threads (tests, local dev)
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
else:
    # Create engine with connection pooling and pre-ping to verify connections
    engine = create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,
        echo=False,
    )

# Add slow query logging (DEBUG mode only)
if settings.DEBUG:
    SLOW_QUERY_THRESHOLD_MS = 200.0

    @event.listens_for(engine, "before_cursor_execute")
    def receive_before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        """Store query start time before execution."""
        context._query_start_time = time.perf_counter()

    @event.listens_for(engine, "after_cursor_execute")
    def receive_after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        """Log slow queries after execution."""
        if hasattr(context, "_query_start_time"):
            elapsed_ms = (time.perf_counter() - context._query_start_time) * 1000
            if elapsed_ms >= SLOW_QUERY_THRESHOLD_MS:
                statement_first_line = statement.split("\n")[0].strip()[:100]
                logger.warning(f"SLOW_QUERY: {elapsed_ms:.2f}ms - {statement_first_line}")

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """
    Ensure the user_books table exists.

    The library table is owned by the mobile app's backend; this only creates it
    for local development and tests. create_all() never alters existing tables.
    """
    # Import models so they're registered with Base.metadata
    from shelfwise import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
