"""DTOs for user use cases (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class UserResult:
    """User read-model (result of login, get_profile, admin_create_user, etc.). No password."""

    id: str
    email: str
    full_name: str
    user_name: str | None
    role: str | None
    is_verified: bool
    is_active: bool
    created_by_id: str | None = None
    created_at: datetime | None = None


def user_to_result(u: Any) -> UserResult:
    """Build UserResult from a user entity; the password hash is never copied."""
    return UserResult(
        id=u.id,
        email=u.email,
        full_name=u.full_name,
        user_name=u.user_name,
        role=u.role,
        is_verified=u.is_verified,
        is_active=u.is_active,
        created_by_id=u.created_by_id,
        created_at=u.created_at,
    )
