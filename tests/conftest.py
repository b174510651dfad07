"""
Test configuration and fixtures for the HomeDirect API and client core.
Provides database fixtures, test data factories, and common test utilities.
"""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")

import uuid
from typing import AsyncGenerator, Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from homedirect.main import app
from homedirect.database import Base, get_db
from homedirect.models.user import User
from homedirect.models.property import Property
from homedirect.repositories.user import UserRepository
from homedirect.repositories.property import PropertyRepository
from homedirect.repositories.favorite import FavoriteRepository
from homedirect.services.auth import AuthService
from homedirect.services.email import EmailService
from homedirect.services.property import PropertyService
from homedirect.services.favorite import FavoriteService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
DEFAULT_PASSWORD = "testpassword123"


@pytest.fixture
async def db_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker:
    return async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async client for the app; every request gets its own database session."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def mail_outbox(monkeypatch) -> List[Dict[str, str]]:
    """Capture verification emails instead of sending them."""
    outbox: List[Dict[str, str]] = []

    async def fake_send_verification_email(self, user, code):
        outbox.append({"email": user.email, "code": code})
        return True

    monkeypatch.setattr(EmailService, "send_verification_email", fake_send_verification_email)
    return outbox


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    """Create a user repository instance."""
    return UserRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    """Create a property repository instance."""
    return PropertyRepository(db_session)


@pytest.fixture
def favorite_repository(db_session: AsyncSession) -> FavoriteRepository:
    return FavoriteRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession, mail_outbox) -> AuthService:
    """Create an auth service instance with captured email."""
    return AuthService(db_session)


@pytest.fixture
def property_service(db_session: AsyncSession) -> PropertyService:
    """Create a property service instance."""
    return PropertyService(db_session)


@pytest.fixture
def favorite_service(db_session: AsyncSession) -> FavoriteService:
    return FavoriteService(db_session)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        username: Optional[str] = None,
        email: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
        first_name: str = "Test",
        last_name: str = "User",
        is_admin: bool = False,
        is_verified: bool = False
    ) -> dict:
        """Create user data dictionary."""
        suffix = uuid.uuid4().hex[:8]
        return {
            "username": username or f"user{suffix}",
            "email": email or f"test{suffix}@example.com",
            "password": password,
            "first_name": first_name,
            "last_name": last_name,
            "is_admin": is_admin,
            "is_verified": is_verified
        }

    @staticmethod
    async def create_user(user_repo: UserRepository, **kwargs) -> User:
        """Create a test user in the database."""
        return await user_repo.create_user(UserFactory.create_user_data(**kwargs))


class PropertyFactory:
    """Factory for creating test listings."""

    @staticmethod
    def create_property_data(
        owner_id: int,
        title: str = "Test Property",
        description: str = "A beautiful test property near the park",
        price: int = 100000,
        property_type: str = "apartment",
        listing_type: str = "sale",
        region: str = "Test Region",
        city: str = "Test City",
        district: str = "Central",
        address: str = "1 Test Street",
        area: int = 50,
        rooms: int = 2,
        photos: Optional[List[str]] = None,
        approved: bool = True
    ) -> dict:
        """Create property data dictionary."""
        return {
            "owner_id": owner_id,
            "title": title,
            "description": description,
            "price": price,
            "property_type": property_type,
            "listing_type": listing_type,
            "region": region,
            "city": city,
            "district": district,
            "address": address,
            "area": area,
            "rooms": rooms,
            "photos": photos if photos is not None else [],
            "approved": approved
        }

    @staticmethod
    async def create_property(property_repo: PropertyRepository, owner_id: int, **kwargs) -> Property:
        """Create a test listing in the database."""
        return await property_repo.create_property(
            PropertyFactory.create_property_data(owner_id=owner_id, **kwargs)
        )


@pytest.fixture
def user_factory(user_repository: UserRepository):
    async def create(**kwargs) -> User:
        return await UserFactory.create_user(user_repository, **kwargs)
    return create


@pytest.fixture
def property_factory(property_repository: PropertyRepository):
    async def create(owner_id: int, **kwargs) -> Property:
        return await PropertyFactory.create_property(property_repository, owner_id, **kwargs)
    return create


# Common test fixtures
@pytest.fixture
async def test_user(user_repository: UserRepository) -> User:
    """Create a verified regular user."""
    return await UserFactory.create_user(
        user_repository,
        username="owner",
        email="owner@test.com",
        first_name="Olga",
        is_verified=True
    )


@pytest.fixture
async def test_unverified_user(user_repository: UserRepository) -> User:
    """Create a user who has not verified the email yet."""
    return await UserFactory.create_user(
        user_repository,
        username="newbie",
        email="newbie@test.com",
        first_name="Nina"
    )


@pytest.fixture
async def test_other_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        username="stranger",
        email="stranger@test.com",
        is_verified=True
    )


@pytest.fixture
async def test_admin(user_repository: UserRepository) -> User:
    """Create a test admin user."""
    return await UserFactory.create_user(
        user_repository,
        username="admin",
        email="admin@test.com",
        first_name="Anna",
        is_admin=True,
        is_verified=True
    )


@pytest.fixture
async def test_property(property_repository: PropertyRepository, test_user: User) -> Property:
    """Create an approved listing."""
    return await PropertyFactory.create_property(
        property_repository,
        owner_id=test_user.id,
        title="Approved Apartment",
        price=150000,
        area=60,
        rooms=2
    )


@pytest.fixture
async def test_pending_property(property_repository: PropertyRepository, test_user: User) -> Property:
    """Create a listing awaiting moderation."""
    return await PropertyFactory.create_property(
        property_repository,
        owner_id=test_user.id,
        title="Pending House",
        property_type="house",
        price=300000,
        area=120,
        rooms=5,
        approved=False
    )


async def _login(client: AsyncClient, username: str, password: str = DEFAULT_PASSWORD) -> None:
    response = await client.post("/api/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text


@pytest.fixture
def login_as(async_client: AsyncClient):
    """Log the shared async client in as the given user."""
    async def login(user: User, password: str = DEFAULT_PASSWORD) -> AsyncClient:
        await _login(async_client, user.username, password)
        return async_client
    return login


@pytest.fixture
async def user_client(async_client: AsyncClient, test_user: User) -> AsyncClient:
    """Async client logged in as the verified regular user."""
    await _login(async_client, test_user.username)
    return async_client


@pytest.fixture
async def admin_client(async_client: AsyncClient, test_admin: User) -> AsyncClient:
    """Async client logged in as the administrator."""
    await _login(async_client, test_admin.username)
    return async_client


@pytest.fixture
def stored_verification_code(session_factory):
    """Read the outstanding verification code of an account."""
    async def read(email: str) -> Optional[str]:
        async with session_factory() as session:
            result = await session.execute(
                select(User.verification_code).where(User.email == email.lower())
            )
            return result.scalar_one_or_none()
    return read