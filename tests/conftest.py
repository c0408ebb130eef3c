"""Pytest configuration for backend tests."""
import sys
import os
from datetime import datetime
from pathlib import Path
from uuid import uuid4
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Import database components
from bookspace.database import Base, get_db

# Import the entire models module to ensure all models are registered with Base.metadata
# This must happen before create_all() so that all table definitions are available
import bookspace.models  # noqa: F401
from bookspace.models import Book, User


# In-memory SQLite unless TEST_DATABASE_URL points somewhere else (e.g. a Postgres test DB).
# Never the application's DATABASE_URL.
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")

# Wednesday; with weeks starting on Sunday the current week is May 12 - May 18
NOW = datetime(2024, 5, 15, 12, 0, 0)


@pytest.fixture(scope="session")
def engine():
    """Session-wide test engine with every table created."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        # One shared connection so the in-memory database survives across threads
        test_engine = create_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        test_engine = create_engine(TEST_DATABASE_URL, pool_pre_ping=True)

    if not Base.metadata.tables:
        raise RuntimeError(
            "No tables registered in Base.metadata. "
            "Did you import bookspace.models? All model classes must be imported before create_all()."
        )

    Base.metadata.create_all(bind=test_engine)

    yield test_engine

    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Session:
    """
    Create a database session for each test.

    Uses a transaction that is rolled back after each test for isolation.
    Commits made by the code under test stay inside that transaction.
    """
    connection = engine.connect()
    transaction = connection.begin()

    TestingSessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
    )
    session = TestingSessionLocal()

    yield session

    session.close()
    transaction.rollback()
    connection.close()


def _make_user(db: Session, name: str) -> User:
    user = User(
        auth_user_id=str(uuid4()),
        email=f"{name.lower()}@example.com",
        name=name,
        favorite_genres=[],
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db: Session) -> User:
    return _make_user(db, "Reader")


@pytest.fixture
def other_user(db: Session) -> User:
    return _make_user(db, "Other")


@pytest.fixture
def make_book(db: Session):
    """Factory for catalog books; only the fields a test cares about need passing."""

    def _make_book(
        title: str = "Test Book",
        genres=None,
        moods=None,
        page_count: int = 300,
        rating: float = 0,
        ratings_count: int = 0,
        author=None,
    ) -> Book:
        book = Book(
            title=title,
            author=author or ["Test Author"],
            description=f"Description for {title}",
            release_year=2020,
            slug=f"{title.lower().replace(' ', '-')}-{uuid4().hex[:8]}",
            page_count=page_count,
            rating=rating,
            ratings_count=ratings_count,
            tags=[],
            moods=moods or [],
            genres=genres if genres is not None else ["fiction"],
        )
        db.add(book)
        db.commit()
        db.refresh(book)
        return book

    return _make_book


@pytest.fixture
def auth(user: User) -> dict:
    """Mutable holder for the user the client acts as; swap auth["user"] to change it."""
    return {"user": user}


@pytest.fixture
def client(db: Session, auth: dict):
    """
    TestClient wired to the test session, a pinned clock, a fresh
    recommendation cache and the user in auth["user"].
    """
    from fastapi.testclient import TestClient
    from bookspace.main import app
    from bookspace.core.auth import get_current_user
    from bookspace.services.cache import TTLCache
    from bookspace.services.recommendation_engine import get_recommendation_cache
    from bookspace.utils.timing import current_time

    cache = TTLCache(ttl_seconds=3600)

    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_current_user] = lambda: auth["user"]
    app.dependency_overrides[current_time] = lambda: NOW
    app.dependency_overrides[get_recommendation_cache] = lambda: cache

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def anon_client(db: Session):
    """TestClient that goes through real bearer-token authentication."""
    from fastapi.testclient import TestClient
    from bookspace.main import app

    app.dependency_overrides[get_db] = lambda: db

    yield TestClient(app)

    app.dependency_overrides.clear()
