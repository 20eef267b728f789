"""Sign-up, sign-in, refresh and revocation flows over refresh-token sessions.

A session moves through these states:

    active --refresh--> rotated   (revoked, replaced_by_token set)
    active --logout/revoke/sign-in on same device/deactivation--> revoked
    active --time--> expired      (computed from expires_at, never stored)

Revocation is permanent. Each flow runs inside the request's database
transaction and commits once at the end, so a failed flow leaves no partial
state behind.
"""
from dataclasses import dataclass
import logging

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.models.auth import RefreshSession
from app.models.user import User
from app.schemas.auth import DeviceInfo, SecurityContext
from app.services.anomaly_detector import AnomalyDetector, AnomalyPolicy
from app.services.errors import (
    AccountDeactivated,
    EmailAlreadyRegistered,
    InvalidCredentials,
    InvalidRefreshToken,
    RefreshTokenExpired,
    SessionNotFound,
    UserInactive,
    UserNotFound,
)
from app.services.session_store import SessionStore
from app.services.token_codec import TokenCodec
from app.services.users import UserDirectory, verify_password
from app.utils.clock import Clock, from_iso, to_iso, utcnow

logger = logging.getLogger(__name__)

SUSPICIOUS_ACTIVITY_WARNING = "Suspicious activity detected"


@dataclass
class AuthResult:
    """Tokens handed back to the client after a successful flow."""

    user: User
    access_token: str
    refresh_token: str
    session: RefreshSession
    warning: str | None = None


class SessionManager:
    def __init__(
        self,
        db: Session,
        settings: Settings | None = None,
        clock: Clock = utcnow,
        codec: TokenCodec | None = None,
        policy: AnomalyPolicy | None = None,
    ):
        settings = settings or get_settings()
        self.clock = clock
        self.codec = codec or TokenCodec.from_settings(settings, clock=clock)
        self.store = SessionStore(
            db,
            clock=clock,
            read_retries=settings.store_read_retries,
            retry_backoff_seconds=settings.store_retry_backoff_seconds,
        )
        self.users = UserDirectory(
            db,
            read_retries=settings.store_read_retries,
            retry_backoff_seconds=settings.store_retry_backoff_seconds,
        )
        self.detector = AnomalyDetector(self.store, policy or AnomalyPolicy.from_settings(settings))

    def _new_session(
        self,
        user_id: str,
        secret: str,
        device: DeviceInfo,
        ip_address: str | None,
        user_agent: str | None,
        usage_count: int,
        suspicious: bool,
    ) -> RefreshSession:
        now = self.clock()
        session = RefreshSession(
            user_id=user_id,
            refresh_secret=secret,
            created_at=to_iso(now),
            expires_at=to_iso(self.codec.refresh_expiry()),
            is_revoked=0,
            device_id=device.device_id,
            device_name=device.device_name,
            platform=device.platform,
            app_version=device.app_version,
            os_version=device.os_version,
            ip_address=ip_address,
            user_agent=user_agent,
            last_used_at=to_iso(now),
            usage_count=usage_count,
            suspicious_activity=1 if suspicious else 0,
        )
        return self.store.create(session)

    def _issue(self, user: User, session: RefreshSession, warning: str | None = None) -> AuthResult:
        return AuthResult(
            user=user,
            access_token=self.codec.issue_access_token(user.id, user.email),
            refresh_token=session.refresh_secret,
            session=session,
            warning=warning,
        )

    def sign_up(
        self,
        email: str,
        password: str,
        name: str,
        device: DeviceInfo,
        security: SecurityContext | None = None,
    ) -> AuthResult:
        security = security or SecurityContext()
        try:
            if self.users.find_by_email(email) is not None:
                raise EmailAlreadyRegistered()
            user = self.users.create_user(email, password, name)
            session = self._new_session(
                user.id,
                self.codec.issue_refresh_secret(),
                device,
                security.ip_address,
                security.user_agent,
                usage_count=1,
                suspicious=False,
            )
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise

        logger.info(f"User {user.id} signed up on {device.platform} device")
        return self._issue(user, session)

    def sign_in(
        self,
        email: str,
        password: str,
        device: DeviceInfo,
        security: SecurityContext | None = None,
    ) -> AuthResult:
        """Start a new session, replacing any active session on the same device."""
        security = security or SecurityContext()
        try:
            user = self.users.find_by_email(email)
            if user is None or not verify_password(password, user.password_hash):
                raise InvalidCredentials()
            if not user.is_active:
                raise AccountDeactivated()

            suspicious = self.detector.is_suspicious(user.id, device)
            replaced = self.store.revoke_active_for_device(user.id, device.device_id, self.clock())
            session = self._new_session(
                user.id,
                self.codec.issue_refresh_secret(),
                device,
                security.ip_address,
                security.user_agent,
                usage_count=1,
                suspicious=suspicious,
            )
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise

        if replaced:
            logger.info(f"Sign-in for user {user.id} replaced {replaced} session(s) on the same device")
        return self._issue(user, session, SUSPICIOUS_ACTIVITY_WARNING if suspicious else None)

    def refresh(self, refresh_secret: str, security: SecurityContext | None = None) -> AuthResult:
        """Rotate a session: revoke the presented one and issue its successor.

        The old session is only revoked if it is still unrevoked at write time,
        so two refreshes racing on one secret produce exactly one successor.
        """
        security = security or SecurityContext()
        now = self.clock()
        try:
            session = self.store.find_by_secret(refresh_secret)
            if session is None or session.is_revoked:
                raise InvalidRefreshToken()
            if from_iso(session.expires_at) <= now:
                raise RefreshTokenExpired()

            user = self.users.find_by_id(session.user_id)
            if user is None or not user.is_active:
                raise UserInactive()

            session.last_used_at = to_iso(now)
            session.usage_count = (session.usage_count or 0) + 1
            if security.ip_address:
                session.ip_address = security.ip_address
            self.store.update(session)

            new_secret = self.codec.issue_refresh_secret()
            if not self.store.mark_rotated(session.id, new_secret, now):
                raise InvalidRefreshToken()

            successor = self._new_session(
                user.id,
                new_secret,
                DeviceInfo(
                    device_id=session.device_id,
                    device_name=session.device_name,
                    platform=session.platform,
                    app_version=session.app_version,
                    os_version=session.os_version,
                ),
                session.ip_address,
                session.user_agent,
                usage_count=0,
                suspicious=bool(session.suspicious_activity),
            )
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise

        logger.debug(f"Rotated session {session.id} -> {successor.id}")
        return self._issue(user, successor)

    def logout(self, refresh_secret: str) -> bool:
        """Revoke the session behind a secret. Unknown or revoked secrets are fine."""
        try:
            session = self.store.find_by_secret(refresh_secret)
            revoked = False
            if session is not None:
                revoked = self.store.revoke(session.id, self.clock())
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise
        return revoked

    def logout_all(self, user_id: str) -> int:
        try:
            count = self.store.revoke_all_active_for_user(user_id, self.clock())
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise
        return count

    def list_sessions(self, user_id: str) -> list[RefreshSession]:
        return self.store.find_active_by_user(user_id)

    def revoke_session(self, session_id: str, actor: User) -> RefreshSession:
        """Revoke one session owned by the actor; admins may revoke any session."""
        owner_id = None if actor.is_admin else actor.id
        try:
            session = self.store.find_by_id(session_id, user_id=owner_id)
            if session is None:
                raise SessionNotFound()
            self.store.revoke(session.id, self.clock())
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise
        return session

    def set_user_active(self, user_id: str, active: bool) -> tuple[User, int]:
        """Change a user's status; deactivation revokes all their active sessions.

        Both changes commit together so status and session validity never diverge.
        """
        revoked = 0
        try:
            user = self.users.find_by_id(user_id)
            if user is None:
                raise UserNotFound()
            self.users.set_active(user, active)
            if not active:
                revoked = self.store.revoke_all_active_for_user(user.id, self.clock())
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise

        logger.info(f"User {user_id} set {'active' if active else 'inactive'}, {revoked} session(s) revoked")
        return user, revoked

    def deactivate_user(self, user_id: str) -> int:
        _, revoked = self.set_user_active(user_id, False)
        return revoked

    def toggle_user_status(self, user_id: str) -> tuple[User, int]:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise UserNotFound()
        return self.set_user_active(user_id, not user.is_active)

    def validate(self, user_id: str) -> User:
        """Fast existence and status check for an already verified access token."""
        user = self.users.find_by_id(user_id)
        if user is None:
            raise UserNotFound()
        if not user.is_active:
            raise AccountDeactivated()
        return user
