"""Access token signing and refresh secret generation."""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import secrets

from jose import JWTError, jwt

from app.config import Settings
from app.services.errors import InvalidToken
from app.utils.clock import Clock, utcnow

REFRESH_SECRET_BYTES = 64


def _from_epoch(value) -> datetime:
    return datetime.fromtimestamp(value, timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class AccessClaims:
    """Verified contents of an access token."""

    user_id: str
    email: str
    issued_at: datetime
    expires_at: datetime


class TokenCodec:
    """Signs short-lived access tokens and mints opaque refresh secrets."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_ttl: timedelta = timedelta(minutes=15),
        refresh_token_ttl: timedelta = timedelta(days=30),
        clock: Clock = utcnow,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_ttl = access_token_ttl
        self.refresh_token_ttl = refresh_token_ttl
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock = utcnow) -> "TokenCodec":
        return cls(
            secret_key=settings.secret_key,
            algorithm=settings.algorithm,
            access_token_ttl=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_token_ttl=timedelta(days=settings.refresh_token_expire_days),
            clock=clock,
        )

    def issue_access_token(self, user_id: str, email: str) -> str:
        """Create a signed JWT access token for a user."""
        now = self.clock()
        payload = {
            "sub": user_id,
            "userId": user_id,
            "email": email,
            "type": "access",
            "iat": now,
            "exp": now + self.access_token_ttl,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_access_token(self, token: str) -> AccessClaims:
        """Decode and validate an access token.

        Raises InvalidToken when the signature, expiry or payload shape is wrong.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            raise InvalidToken() from exc

        if payload.get("type") != "access":
            raise InvalidToken("Invalid token type")

        user_id = payload.get("userId") or payload.get("sub")
        email = payload.get("email")
        if not user_id or not email or "iat" not in payload or "exp" not in payload:
            raise InvalidToken("Invalid token payload")

        try:
            issued_at = _from_epoch(payload["iat"])
            expires_at = _from_epoch(payload["exp"])
        except (TypeError, ValueError, OverflowError, OSError) as exc:
            raise InvalidToken("Invalid token payload") from exc

        if expires_at <= self.clock():
            raise InvalidToken()

        return AccessClaims(user_id=user_id, email=email, issued_at=issued_at, expires_at=expires_at)

    def issue_refresh_secret(self) -> str:
        """Random hex refresh secret; never derived from user data."""
        return secrets.token_hex(REFRESH_SECRET_BYTES)

    def refresh_expiry(self) -> datetime:
        return self.clock() + self.refresh_token_ttl
