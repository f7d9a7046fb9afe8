"""
Pytest fixtures shared across the unit and integration suites.

Settings are read at import time, so the environment is pinned before any
``brigade`` module is imported: an in-memory SQLite database, the database
record store and the in-memory fallback cache.
"""
import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RECORD_STORE_BACKEND"] = "database"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-32-chars"
os.environ.pop("REDIS_URL", None)
os.environ.pop("LOG_DIR", None)

from typing import Callable, Dict  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from brigade.api.dependencies import get_local_cache  # noqa: E402
from brigade.core.cache import InMemoryCache  # noqa: E402
from brigade.core.database import create_db_and_tables, engine  # noqa: E402
from brigade.core.security import create_access_token  # noqa: E402
from brigade.models.user import User  # noqa: E402


@pytest.fixture
def db_session():
    """Fresh schema per test on the shared in-memory engine."""
    create_db_and_tables()
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def user_factory(db_session: Session) -> Callable[..., User]:
    """Factory that persists users with a given membership tier."""
    counter = {"n": 0}

    def _create(tier: str = "free", is_active: bool = True) -> User:
        counter["n"] += 1
        user = User(
            email=f"chef{counter['n']}@brigade.test",
            name=f"Chef {counter['n']}",
            tier=tier,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _create


@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    def _headers(user: User) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}

    return _headers


@pytest.fixture
def local_cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def client(db_session: Session, local_cache: InMemoryCache):
    """TestClient with a per-test fallback cache."""
    from brigade.main import app

    app.dependency_overrides[get_local_cache] = lambda: local_cache
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
