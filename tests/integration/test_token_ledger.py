"""Token ledger integration tests against the SQLite test database."""

from datetime import timedelta

import pytest

from userauth.domain.enums import TokenType
from userauth.infrastructure.persistence.models.token import Token
from userauth.infrastructure.persistence.repositories import TokenLedger, UserRepository
from userauth.shared.utils.datetime import utc_now


@pytest.fixture
async def user_id(db_session) -> str:
    repo = UserRepository(db_session)
    user = await repo.create_user(
        email="ledger@acme.io",
        hashed_password="x",
        full_name="Ledger User",
        is_verified=True,
    )
    return user.id


@pytest.fixture
def ledger(db_session) -> TokenLedger:
    return TokenLedger(db_session)


def in_one_hour():
    return utc_now() + timedelta(hours=1)


async def test_store_refresh_replaces_previous_token(ledger, user_id) -> None:
    """A user holds one refresh token; a new login displaces the old one."""
    first = await ledger.store_refresh(user_id, "refresh-1", in_one_hour())
    second = await ledger.store_refresh(user_id, "refresh-2", in_one_hour())

    assert second.id != first.id
    assert await ledger.find_refresh("refresh-1") is None
    found = await ledger.find_refresh("refresh-2")
    assert found is not None
    assert found.user_id == user_id


async def test_store_refresh_keeps_digest_not_token(ledger, user_id) -> None:
    """Long tokens are stored as a fixed-size digest that fits the subject column."""
    token = "eyJ." + "\u03a9" * 2000
    row = await ledger.store_refresh(user_id, token, in_one_hour())

    assert row.subject != token
    assert len(row.subject) == 64
    assert len(row.subject) <= Token.__table__.c.subject.type.length
    assert (await ledger.find_refresh(token)).id == row.id


async def test_find_refresh_ignores_expired_rows(ledger, user_id) -> None:
    await ledger.store_refresh(user_id, "stale", utc_now() - timedelta(seconds=1))
    assert await ledger.find_refresh("stale") is None


async def test_invalidate_refresh_reports_removal(ledger, user_id) -> None:
    await ledger.store_refresh(user_id, "refresh-1", in_one_hour())
    assert await ledger.invalidate_refresh("refresh-1") is True
    assert await ledger.invalidate_refresh("refresh-1") is False
    assert await ledger.find_refresh("refresh-1") is None


async def test_invalidate_all_refresh_keeps_reset_rows(ledger, user_id) -> None:
    await ledger.store_refresh(user_id, "refresh-1", in_one_hour())
    await ledger.store_reset(user_id, "jti-1", in_one_hour())

    assert await ledger.invalidate_all_refresh(user_id) is True
    assert await ledger.find_refresh("refresh-1") is None
    assert await ledger.find_and_verify_reset("jti-1", user_id) is not None


async def test_store_reset_rejects_refresh_kind(ledger, user_id) -> None:
    with pytest.raises(ValueError):
        await ledger.store_reset(user_id, "jti-1", in_one_hour(), TokenType.REFRESH)


async def test_find_and_verify_reset_requires_owner_and_kind(db_session, ledger, user_id) -> None:
    other = await UserRepository(db_session).create_user(
        email="other@acme.io", hashed_password="x", full_name="Other"
    )
    await ledger.store_reset(user_id, "jti-1", in_one_hour())

    assert await ledger.find_and_verify_reset("jti-1", other.id) is None
    assert (
        await ledger.find_and_verify_reset("jti-1", user_id, TokenType.ADMIN_SET_PASSWORD)
        is None
    )


async def test_find_and_verify_reset_ignores_expired_rows(ledger, user_id) -> None:
    await ledger.store_reset(user_id, "jti-1", utc_now() - timedelta(seconds=1))
    assert await ledger.find_and_verify_reset("jti-1", user_id) is None


async def test_verify_then_consume_once(ledger, user_id) -> None:
    row = await ledger.store_reset(user_id, "jti-1", in_one_hour())

    assert await ledger.mark_verified(row.id) is True
    assert await ledger.mark_verified(row.id) is False

    verified = await ledger.find_and_verify_reset("jti-1", user_id)
    assert verified.verified_at is not None
    assert verified.used_at is None

    assert await ledger.clear_verification(row.id) is True
    assert await ledger.clear_verification(row.id) is False

    spent = await ledger.find_and_verify_reset("jti-1", user_id)
    assert spent.verified_at is None
    assert spent.used_at is not None
    assert await ledger.mark_verified(row.id) is False


async def test_clear_verification_requires_verified_row(ledger, user_id) -> None:
    row = await ledger.store_reset(user_id, "jti-1", in_one_hour())
    assert await ledger.clear_verification(row.id) is False


async def test_reissue_replaces_reset_row_with_clean_state(ledger, user_id) -> None:
    first = await ledger.store_reset(user_id, "jti-1", in_one_hour())
    await ledger.mark_verified(first.id)

    second = await ledger.store_reset(user_id, "jti-2", in_one_hour())

    assert second.id != first.id
    assert second.verified_at is None
    assert second.used_at is None
    assert await ledger.find_and_verify_reset("jti-1", user_id) is None
    assert await ledger.mark_verified(first.id) is False


async def test_reset_kinds_are_independent(ledger, user_id) -> None:
    await ledger.store_reset(user_id, "jti-reset", in_one_hour())
    await ledger.store_reset(user_id, "jti-admin", in_one_hour(), TokenType.ADMIN_SET_PASSWORD)

    assert await ledger.find_and_verify_reset("jti-reset", user_id) is not None
    assert (
        await ledger.find_and_verify_reset("jti-admin", user_id, TokenType.ADMIN_SET_PASSWORD)
        is not None
    )
    assert await ledger.invalidate_reset(user_id, TokenType.ADMIN_SET_PASSWORD) is True
    assert await ledger.find_and_verify_reset("jti-reset", user_id) is not None


async def test_cleanup_expired_removes_only_expired_rows(ledger, user_id) -> None:
    await ledger.store_refresh(user_id, "stale", utc_now() - timedelta(minutes=5))
    await ledger.store_reset(user_id, "jti-live", in_one_hour())

    assert await ledger.cleanup_expired() == 1
    assert await ledger.find_and_verify_reset("jti-live", user_id) is not None
