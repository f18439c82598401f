"""JWT token codec: signing and verification of access, refresh and reset tokens.

Stateless: output depends only on claims, secret and clock. ACCESS and RESET
share the primary secret; REFRESH uses its own secret when configured.
Every token carries a ``typ`` claim so one kind can never be replayed as another.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import ExpiredSignatureError, JWTError, jwt

from userauth.core.config import Settings
from userauth.domain.enums import TokenPurpose
from userauth.domain.exceptions import InvalidTokenError
from userauth.shared.utils.generators import generate_jti

_RESERVED_CLAIMS = frozenset({"exp", "iat", "typ"})


@dataclass(frozen=True)
class TokenTTLs:
    """Lifetime per token purpose."""

    access: timedelta = timedelta(hours=24)
    refresh: timedelta = timedelta(days=90)
    reset: timedelta = timedelta(hours=1)

    def for_purpose(self, purpose: TokenPurpose) -> timedelta:
        return {
            TokenPurpose.ACCESS: self.access,
            TokenPurpose.REFRESH: self.refresh,
            TokenPurpose.RESET: self.reset,
        }[purpose]


class TokenCodec:
    """Issue and verify compact signed tokens. No I/O, no persistence."""

    def __init__(
        self,
        secret_key: str,
        *,
        refresh_secret_key: str | None = None,
        algorithm: str = "HS256",
        ttls: TokenTTLs | None = None,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key is required")
        self._secret_key = secret_key
        self._refresh_secret_key = refresh_secret_key or secret_key
        self._algorithm = algorithm
        self.ttls = ttls or TokenTTLs()

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenCodec":
        """Build the codec from application settings (secrets and TTLs)."""
        return cls(
            settings.secret_key.get_secret_value(),
            refresh_secret_key=settings.refresh_signing_key,
            algorithm=settings.algorithm,
            ttls=TokenTTLs(
                access=timedelta(minutes=settings.access_token_expire_minutes),
                refresh=timedelta(days=settings.refresh_token_expire_days),
                reset=timedelta(minutes=settings.reset_token_expire_minutes),
            ),
        )

    def _secret_for(self, purpose: TokenPurpose) -> str:
        if purpose is TokenPurpose.REFRESH:
            return self._refresh_secret_key
        return self._secret_key

    def issue(
        self,
        purpose: TokenPurpose,
        payload: dict[str, Any],
        ttl: timedelta | None = None,
        *,
        now: datetime | None = None,
    ) -> str:
        """Sign payload as a token of the given purpose.

        Args:
            purpose: Selects secret, default TTL and the ``typ`` claim.
            payload: Claims to encode; must include ``sub``. A ``jti`` is
                added when absent so two tokens issued in the same second differ.
            ttl: Optional lifetime; defaults to the purpose TTL.
            now: Issue time (tests); defaults to the current UTC time.

        Returns:
            Encoded JWT string.
        """
        if not payload.get("sub"):
            raise ValueError("Token payload requires a 'sub' claim")
        clash = _RESERVED_CLAIMS.intersection(payload)
        if clash:
            raise ValueError(f"Token payload must not set reserved claims: {sorted(clash)}")
        issued_at = now or datetime.now(UTC)
        expire = issued_at + (ttl if ttl is not None else self.ttls.for_purpose(purpose))
        to_encode = dict(payload)
        to_encode.setdefault("jti", generate_jti())
        to_encode["typ"] = purpose.value
        to_encode["iat"] = int(issued_at.timestamp())
        to_encode["exp"] = int(expire.timestamp())
        encoded = jwt.encode(
            to_encode,
            self._secret_for(purpose),
            algorithm=self._algorithm,
        )
        return cast(str, encoded)

    def verify(self, purpose: TokenPurpose, token: str) -> dict[str, Any]:
        """Verify signature, expiry and type; return the decoded payload.

        Raises:
            InvalidTokenError: If the token is expired, tampered, signed with
                another secret, missing required claims, or of another type.
        """
        if not token:
            raise InvalidTokenError("malformed", "Empty token")
        try:
            payload = jwt.decode(
                token,
                self._secret_for(purpose),
                algorithms=[self._algorithm],
                options={"require_exp": True, "require_sub": True},
            )
        except ExpiredSignatureError as e:
            raise InvalidTokenError("expired", "Token has expired") from e
        except JWTError as e:
            raise InvalidTokenError("malformed", "Token could not be decoded") from e
        if payload.get("typ") != purpose.value:
            raise InvalidTokenError("wrong_type", f"Expected a {purpose.value} token")
        if not payload.get("sub"):
            raise InvalidTokenError("malformed", "Token missing required claim: sub")
        return payload
