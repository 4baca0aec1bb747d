"""Pytest configuration and fixtures."""

import os
import re
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Any

# Set test environment before importing app
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool
from sqlmodel import SQLModel

from reviewapp.api.deps import get_email_service
from reviewapp.config import settings
from reviewapp.database import get_session
from reviewapp.main import app
from reviewapp.models import User
from reviewapp.services.accounts import AccountService
from reviewapp.services.auth import create_token
from reviewapp.services.email import EmailBackend, EmailService
from reviewapp.services.security import hash_password

TEST_PASSWORD = "correct-horse"


@dataclass
class SentEmail:
    to: str
    subject: str
    html: str
    text: str | None
    sender: str | None


class RecordingEmailBackend(EmailBackend):
    """Email backend that keeps messages in memory for assertions."""

    def __init__(self, deliver: bool = True):
        self.deliver = deliver
        self.sent: list[SentEmail] = []

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
        sender: str | None = None,
    ) -> bool:
        self.sent.append(SentEmail(to=to, subject=subject, html=html, text=text, sender=sender))
        return self.deliver

    def last(self, subject: str | None = None) -> SentEmail:
        messages = [m for m in self.sent if subject is None or m.subject == subject]
        assert messages, f"no email sent with subject {subject!r}"
        return messages[-1]


def extract_otp(message: SentEmail) -> str:
    """Pull the OTP out of a verification email."""
    match = re.search(r"OTP: (\d+)", message.text or "")
    assert match, "verification email has no OTP"
    return match.group(1)


def extract_reset_link(message: SentEmail) -> tuple[str, str]:
    """Pull (token, user_id) out of a password reset email."""
    match = re.search(r"token=([0-9a-f]+)&id=([A-Za-z0-9_-]+)", message.text or "")
    assert match, "reset email has no link"
    return match.group(1), match.group(2)


@pytest.fixture
async def test_engine():
    """Create a fresh test database for each test."""
    url = settings.database_url_test
    if url.startswith("sqlite"):
        engine = create_async_engine(
            url,
            echo=False,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_async_engine(url, echo=False, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with async_session_factory() as session:
        yield session


@pytest.fixture
def outbox() -> RecordingEmailBackend:
    """Collects every email the app sends during a test."""
    return RecordingEmailBackend()


@pytest.fixture
def mailer(outbox: RecordingEmailBackend) -> EmailService:
    return EmailService(backend=outbox, config=settings)


@pytest.fixture
def accounts(session: AsyncSession, mailer: EmailService) -> AccountService:
    return AccountService(session, settings, mailer)


@pytest.fixture
async def client(session: AsyncSession, mailer: EmailService) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_email_service] = lambda: mailer

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def user(session: AsyncSession) -> User:
    """Create a verified test user whose password is TEST_PASSWORD."""
    user = User(
        name="Test User",
        email="test@example.com",
        password_hash=hash_password(TEST_PASSWORD),
        is_verified=True,
    )
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def unverified_user(session: AsyncSession) -> User:
    """Create a test user who has not verified their email."""
    user = User(
        name="New User",
        email="new@example.com",
        password_hash=hash_password(TEST_PASSWORD),
    )
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
def user_token(user: User) -> str:
    """Create a JWT token for the test user."""
    return create_token(user)


@pytest.fixture
def auth_headers(user_token: str) -> dict[str, str]:
    """Create authorization headers for the test user."""
    return {"Authorization": f"Bearer {user_token}"}


# Helper to make authenticated requests
class AuthenticatedClient:
    """Wrapper for AsyncClient with authentication."""

    def __init__(self, client: AsyncClient, headers: dict[str, str]):
        self.client = client
        self.headers = headers

    async def get(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.get(url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.post(url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.patch(url, **kwargs)


@pytest.fixture
def authenticated_client(client: AsyncClient, auth_headers: dict[str, str]) -> AuthenticatedClient:
    """Create an authenticated test client."""
    return AuthenticatedClient(client, auth_headers)
