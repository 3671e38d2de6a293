"""
Shared test fixtures and configuration for the Employee Directory API tests.
"""
import os

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG"] = "true"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-min-32-chars"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import CallerIdentity, create_access_token
from app.services.auth_service import AuthService
from app.services.employee_service import EmployeeService
from app.services.media_service import PhotoResolver
from tests.utils.fakes import FakeUploader, InMemoryEmployeeStore, InMemoryUserStore


@pytest.fixture
def caller():
    """An authenticated caller identity."""
    return CallerIdentity(id="user-1", username="admin", email="admin@example.com")


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def employee_store():
    return InMemoryEmployeeStore()


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def photo_resolver(uploader):
    return PhotoResolver(uploader)


@pytest.fixture
def auth_service(user_store):
    return AuthService(user_store)


@pytest.fixture
def employee_service(employee_store, photo_resolver):
    return EmployeeService(employee_store, photo_resolver)


@pytest.fixture
def employee_data():
    """A complete, valid employee input."""
    return {
        "first_name": "A",
        "last_name": "B",
        "email": "a@b.com",
        "gender": "M",
        "designation": "Eng",
        "salary": 2000,
        "date_of_joining": "2024-01-01",
        "department": "R&D",
    }


@pytest.fixture
def auth_headers(caller):
    """Authorization header carrying a valid token for ``caller``."""
    return {"Authorization": f"Bearer {create_access_token(caller)}"}


@pytest_asyncio.fixture
async def db_session():
    """AsyncSession bound to a fresh in-memory SQLite database."""
    from app.db.session import init_db

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    SessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with SessionLocal() as session:
        yield session
    await engine.dispose()
