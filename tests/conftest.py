"""Pytest fixtures for PolicyHub tests."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
import structlog
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from policyhub.api.dependencies import get_db
from policyhub.auth.sessions import SessionService
from policyhub.config.settings import Settings
from policyhub.core.security import hash_password
from policyhub.db.models import Base, OAuthAccount, Organization, User, UserPassword
from policyhub.organizations.provisioner import OrganizationProvisioner

TEST_PASSWORD = "correct-horse-battery"


# =============================================================================
# Structlog Configuration Fixture
# =============================================================================


@pytest.fixture(scope="function", autouse=True)
def reset_structlog_after_test():
    """Reset structlog configuration after each test.

    create_app() configures structlog globally; this keeps one test's
    logging setup from leaking into the next.
    """
    yield
    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


# =============================================================================
# Database fixtures
# =============================================================================


@pytest_asyncio.fixture
async def test_engine():
    """Fresh in-memory SQLite database per test.

    StaticPool keeps every session on the one connection that holds the
    in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


# =============================================================================
# Settings and app fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Create settings for testing."""
    return Settings(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        ENVIRONMENT="test",
        DEBUG=True,
        log_level="DEBUG",
        SESSION_COOKIE_SECURE=False,
        SESSION_CLEANUP_PROBABILITY=0.0,
        GOOGLE_DRIVE_API_BASE="https://drive.test/drive/v3",
    )


@pytest.fixture
def test_app(test_settings: Settings, session_factory) -> FastAPI:
    """Create a FastAPI test application backed by the per-test database."""
    from policyhub.api.app import create_app

    app = create_app(settings=test_settings)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest_asyncio.fixture
async def test_client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for API testing.

    Calls the test application directly without network overhead.
    """
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as client:
        yield client


# =============================================================================
# Domain fixtures
# =============================================================================


async def create_user(
    db: AsyncSession,
    organization_id: int,
    *,
    email: str,
    role: str = "user",
    password: str | None = TEST_PASSWORD,
    has_logged_in: bool = False,
    oauth_provider: str | None = None,
    display_name: str = "Test User",
) -> User:
    """Insert a user (with optional password and OAuth link) and commit."""
    user = User(
        email=email,
        display_name=display_name,
        role=role,
        organization_id=organization_id,
        is_active=True,
        has_logged_in=has_logged_in,
    )
    db.add(user)
    await db.flush()

    if password is not None:
        db.add(UserPassword(user_id=user.id, password_hash=hash_password(password)))
    if oauth_provider is not None:
        db.add(
            OAuthAccount(
                user_id=user.id,
                provider=oauth_provider,
                provider_user_id=f"{oauth_provider}-{user.id}",
            )
        )
    await db.commit()
    return user


@pytest_asyncio.fixture
async def organization(db_session: AsyncSession) -> Organization:
    """An organization provisioned with default portals and settings."""
    return await OrganizationProvisioner(db_session).create_organization(
        "Acme Widgets Ltd", domain="acme.test"
    )


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession, organization: Organization) -> User:
    return await create_user(
        db_session,
        organization.id,
        email="admin@acme.example.com",
        role="admin",
        has_logged_in=True,
    )


@pytest_asyncio.fixture
async def member_user(db_session: AsyncSession, organization: Organization) -> User:
    return await create_user(db_session, organization.id, email="member@acme.example.com")


async def _session_client(
    app: FastAPI, db: AsyncSession, settings: Settings, user: User
) -> AsyncClient:
    session = await SessionService(db, settings).create_session(user.id)
    client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    client.cookies.set(settings.SESSION_COOKIE_NAME, session.id)
    return client


@pytest_asyncio.fixture
async def admin_client(
    test_app: FastAPI, db_session: AsyncSession, test_settings: Settings, admin_user: User
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client carrying a session cookie for an admin."""
    client = await _session_client(test_app, db_session, test_settings, admin_user)
    async with client:
        yield client


@pytest_asyncio.fixture
async def member_client(
    test_app: FastAPI, db_session: AsyncSession, test_settings: Settings, member_user: User
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client carrying a session cookie for a non-admin member."""
    client = await _session_client(test_app, db_session, test_settings, member_user)
    async with client:
        yield client


@pytest.fixture
def user_factory(db_session: AsyncSession):
    """Callable inserting users into the test database.

    Usage:
        user = await user_factory(org.id, email="a@b.example.com", role="admin")
    """

    async def _create(organization_id: int, **kwargs) -> User:
        return await create_user(db_session, organization_id, **kwargs)

    return _create
