"""Pytest configuration for backend tests."""
import sys
import os
from pathlib import Path
import pytest
from sqlalchemy.orm import sessionmaker, Session

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Point the app at the test database before shelfwise.core.config is imported.
# Defaults to a shared in-memory SQLite database; set TEST_DATABASE_URL to use Postgres.
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-for-shelfwise-tests")
os.environ["DEBUG"] = "false"

from shelfwise.database import Base, engine as app_engine  # noqa: E402

# Import the models module so that all tables are registered with Base.metadata
import shelfwise.models  # noqa: F401,E402


@pytest.fixture(scope="session")
def engine():
    """
    Test database engine with all tables created.

    This is the app's own engine, already bound to TEST_DATABASE_URL above.
    """
    Base.metadata.create_all(bind=app_engine)
    yield app_engine
    Base.metadata.drop_all(bind=app_engine)


@pytest.fixture(scope="function")
def db(engine) -> Session:
    """
    Create a database session for each test.

    Uses a transaction that is rolled back after each test for isolation.
    """
    connection = engine.connect()
    transaction = connection.begin()

    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
    )
    session = SessionLocal()

    yield session

    session.close()
    transaction.rollback()
    connection.close()
