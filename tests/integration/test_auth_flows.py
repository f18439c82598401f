"""End-to-end session and reset flows through the services, backed by the SQLite test database."""

import pytest
from sqlalchemy import select

from userauth.application.services import (
    CredentialService,
    PasswordResetService,
    UserService,
)
from userauth.application.services.password_reset_service import FORGOT_PASSWORD_MESSAGE
from userauth.domain.exceptions import (
    AuthenticationException,
    UserAlreadyExistsException,
    ValidationException,
)
from userauth.infrastructure.persistence.models.token import Token
from userauth.infrastructure.persistence.repositories import TokenLedger, UserRepository

PASSWORD = "Password1"


@pytest.fixture
def user_repo(db_session) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def ledger(db_session) -> TokenLedger:
    return TokenLedger(db_session)


@pytest.fixture
def credentials(user_repo, ledger, codec, hasher) -> CredentialService:
    return CredentialService(user_repo, ledger, codec, hasher)


@pytest.fixture
def resets(user_repo, ledger, codec, hasher, mailer) -> PasswordResetService:
    return PasswordResetService(user_repo, ledger, codec, hasher, mailer)


@pytest.fixture
def users(user_repo, ledger, hasher, resets) -> UserService:
    return UserService(user_repo, ledger, hasher, resets)


@pytest.fixture
async def u1(users):
    return await users.register("u1@acme.io", PASSWORD, "User One", "u1")


async def test_session_lifecycle(credentials, u1) -> None:
    """register -> login -> refresh keeps the refresh token -> logout -> refresh fails."""
    session = await credentials.login(u1.email, PASSWORD)

    refreshed = await credentials.refresh(session.refresh_token)
    assert refreshed.refresh_token == session.refresh_token
    assert refreshed.access_token

    again = await credentials.refresh(session.refresh_token)
    assert again.refresh_token == session.refresh_token

    await credentials.logout(session.refresh_token)
    with pytest.raises(AuthenticationException):
        await credentials.refresh(session.refresh_token)


async def test_second_login_invalidates_first_refresh_token(credentials, u1) -> None:
    first = await credentials.login(u1.email, PASSWORD)
    second = await credentials.login(u1.email, PASSWORD)

    with pytest.raises(AuthenticationException):
        await credentials.refresh(first.refresh_token)
    assert (await credentials.refresh(second.refresh_token)).refresh_token == second.refresh_token


async def test_refresh_fails_once_ledger_row_is_gone(credentials, ledger, u1) -> None:
    session = await credentials.login(u1.email, PASSWORD)
    await ledger.invalidate_all_refresh(u1.id)
    with pytest.raises(AuthenticationException):
        await credentials.refresh(session.refresh_token)


async def test_logout_twice_and_unknown_token_succeed(credentials, u1) -> None:
    session = await credentials.login(u1.email, PASSWORD)
    assert (await credentials.logout(session.refresh_token)).message
    assert (await credentials.logout(session.refresh_token)).message
    assert (await credentials.logout("never-issued")).message


async def test_forgot_password_is_indistinguishable(resets, users, mailer, u1) -> None:
    await users.admin_create_user(u1, "pending@acme.io", "Pending User")
    mailer.sent.clear()

    hit = await resets.forgot_password(u1.email)
    miss = await resets.forgot_password("nonexistent@acme.io")
    unverified = await resets.forgot_password("pending@acme.io")

    assert hit.message == miss.message == unverified.message == FORGOT_PASSWORD_MESSAGE
    assert [m.to_email for m in mailer.sent] == [u1.email]


async def test_reset_protocol(resets, credentials, mailer, u1) -> None:
    """forgot -> verify once -> reset -> login with the new password only."""
    session = await credentials.login(u1.email, PASSWORD)
    await resets.forgot_password(u1.email)
    token = mailer.last_token

    with pytest.raises(ValidationException):
        await resets.reset_password(token, "NewPass1", "NewPass1")

    assert (await resets.verify_reset_token(token)).verified is True
    with pytest.raises(AuthenticationException):
        await resets.verify_reset_token(token)

    await resets.reset_password(token, "NewPass1", "NewPass1")
    with pytest.raises(ValidationException):
        await resets.reset_password(token, "NewPass1", "NewPass1")
    with pytest.raises(AuthenticationException):
        await resets.verify_reset_token(token)

    with pytest.raises(AuthenticationException):
        await credentials.login(u1.email, PASSWORD)
    assert (await credentials.login(u1.email, "NewPass1")).user.id == u1.id
    with pytest.raises(AuthenticationException):
        await credentials.refresh(session.refresh_token)


async def test_new_forgot_request_supersedes_previous_token(resets, mailer, u1) -> None:
    await resets.forgot_password(u1.email)
    old_token = mailer.last_token
    await resets.forgot_password(u1.email)
    new_token = mailer.last_token

    with pytest.raises(AuthenticationException):
        await resets.verify_reset_token(old_token)
    assert (await resets.verify_reset_token(new_token)).verified is True


async def test_admin_created_user_sets_own_password(
    users, resets, credentials, mailer, u1
) -> None:
    created = await users.admin_create_user(u1, "Grace@Acme.io", "Grace Hopper", role="editor")
    assert created.email == "grace@acme.io"
    assert created.is_verified is False
    assert created.created_by_id == u1.id

    sent = mailer.sent[-1]
    assert (sent.kind, sent.to_email) == ("admin_set_password", "grace@acme.io")

    with pytest.raises(AuthenticationException):
        await credentials.login("grace@acme.io", "anything-at-all")

    await resets.verify_reset_token(sent.token)
    await resets.reset_password(sent.token, "GracePass1", "GracePass1")

    session = await credentials.login("grace@acme.io", "GracePass1")
    assert session.user.is_verified is True
    assert session.user.role == "editor"


async def test_suspended_user_loses_sessions(users, credentials, u1) -> None:
    target = await users.register("target@acme.io", PASSWORD, "Target")
    session = await credentials.login(target.email, PASSWORD)

    await users.suspend_user(target.id, actor_id=u1.id)

    with pytest.raises(AuthenticationException):
        await credentials.refresh(session.refresh_token)
    with pytest.raises(AuthenticationException):
        await credentials.login(target.email, PASSWORD)


async def test_deleted_email_stays_taken(users, u1) -> None:
    target = await users.register("gone@acme.io", PASSWORD, "Gone")
    await users.delete_user(target.id, actor_id=u1.id)
    with pytest.raises(UserAlreadyExistsException):
        await users.register("gone@acme.io", PASSWORD, "Gone Again")


async def test_login_with_long_non_ascii_profile(users, credentials, ledger) -> None:
    """Refresh tokens carrying large claims still fit the ledger row."""
    email = "a" * 64 + "@" + "b" * 60 + ".acme.io"
    user = await users.register(email, PASSWORD, "Ω" * 200)

    session = await credentials.login(email, PASSWORD)

    assert len(session.refresh_token) > Token.__table__.c.subject.type.length
    row = await ledger.find_refresh(session.refresh_token)
    assert row.user_id == user.id
    assert len(row.subject) <= Token.__table__.c.subject.type.length
    refreshed = await credentials.refresh(session.refresh_token)
    assert refreshed.refresh_token == session.refresh_token


@pytest.mark.parametrize("action", ["suspend_user", "delete_user"])
async def test_removing_account_drops_pending_set_password_link(
    db_session, users, u1, action
) -> None:
    created = await users.admin_create_user(u1, "pending@acme.io", "Pending User")

    await getattr(users, action)(created.id, actor_id=u1.id)

    rows = await db_session.execute(select(Token).where(Token.user_id == created.id))
    assert rows.scalars().all() == []
