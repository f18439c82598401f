"""Token ledger row: persisted refresh and password-reset tokens."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from userauth.infrastructure.persistence.database import Base
from userauth.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class Token(CuidMixin, TimestampMixin, Base):
    """Ledger row. Table: auth_token. At most one row per (user_id, kind).

    subject holds the SHA-256 hex digest of the refresh token for
    kind=refresh and the random jti for the reset kinds. verified_at and
    used_at are only meaningful for the reset kinds: verified_at marks a
    successful verify step, used_at marks consumption (the row is then
    spent until replaced by a new issuance).
    """

    __tablename__ = "auth_token"

    kind: Mapped[str] = mapped_column(String(50), nullable=False)
    subject: Mapped[str] = mapped_column(String(512), nullable=False, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    user_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("app_user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "kind", name="uq_auth_token_user_kind"),
    )
