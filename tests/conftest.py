"""Pytest configuration and fixtures for userauth.

Tests run against an in-memory SQLite database (aiosqlite, one shared
connection). Environment is set before userauth.main is imported because
create_app() validates settings at import.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-userauth-0123456789abcdef")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("SMTP_HOST", None)

from dataclasses import dataclass, field  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from userauth.api.v1.dependencies import get_mailer  # noqa: E402
from userauth.core.config import get_settings  # noqa: E402
from userauth.infrastructure.persistence import models  # noqa: E402,F401
from userauth.infrastructure.persistence.database import (  # noqa: E402
    Base,
    get_db,
    get_db_transactional,
)
from userauth.infrastructure.persistence.repositories import UserRepository  # noqa: E402
from userauth.infrastructure.security import BcryptPasswordHasher, TokenCodec  # noqa: E402
from userauth.main import app  # noqa: E402


@dataclass
class SentMail:
    kind: str
    to_email: str
    token: str


@dataclass
class RecordingMailer:
    """Mailer fake: records every message instead of sending it."""

    sent: list[SentMail] = field(default_factory=list)

    async def send_password_reset(self, to_email: str, token: str, display_name: str) -> None:
        self.sent.append(SentMail("password_reset", to_email, token))

    async def send_admin_password_set(self, user: Any, token: str) -> None:
        self.sent.append(SentMail("admin_set_password", user.email, token))

    @property
    def last_token(self) -> str:
        return self.sent[-1].token


@pytest.fixture
async def engine():
    """Fresh in-memory database with all tables per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncSession:
    """Database session for repository/integration tests. Rolls back after test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec.from_settings(get_settings())


@pytest.fixture
def hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
async def client(session_factory, mailer) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI) backed by the test database.

    get_db and get_db_transactional share one override so a request uses a
    single transactional session, committed when the request succeeds.
    """

    async def _override_db():
        async with session_factory() as session:
            async with session.begin():
                yield session

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_db_transactional] = _override_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


PASSWORD = "Password1"


async def register_and_login(
    client: AsyncClient, email: str, password: str = PASSWORD, full_name: str = "Test User"
) -> dict[str, Any]:
    """Register through the API and return the login response body."""
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "full_name": full_name},
    )
    assert response.status_code == 201, response.text
    response = await client.post(
        "/api/v1/auth/login", json={"email": email, "password": password}
    )
    assert response.status_code == 200, response.text
    return response.json()


def bearer(session: dict[str, Any]) -> dict[str, str]:
    return {"Authorization": f"Bearer {session['access_token']}"}


async def grant_role(session_factory, user_id: str, role: str) -> None:
    """Set a user's role directly in the database (role management has no API)."""
    async with session_factory() as session:
        async with session.begin():
            await UserRepository(session).update_fields(user_id, {"role": role})


@pytest.fixture
async def user_session(client) -> dict[str, Any]:
    """Login response of a freshly registered regular user."""
    return await register_and_login(client, "member@acme.io", full_name="Member")


@pytest.fixture
async def auth_headers(user_session) -> dict[str, str]:
    return bearer(user_session)


@pytest.fixture
async def admin_session(client, session_factory) -> dict[str, Any]:
    """Login response of a registered user promoted to admin."""
    session = await register_and_login(client, "admin@acme.io", full_name="Admin")
    await grant_role(session_factory, session["user"]["id"], "admin")
    return session


@pytest.fixture
async def admin_headers(admin_session) -> dict[str, str]:
    return bearer(admin_session)
