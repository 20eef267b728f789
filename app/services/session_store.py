"""Persistence for refresh-token sessions."""
from datetime import datetime
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.auth import RefreshSession
from app.services.errors import DuplicateSecret
from app.services.store import SqlStore
from app.utils.clock import Clock, to_iso, utcnow

logger = logging.getLogger(__name__)


class SessionStore(SqlStore):
    """Lookup, revocation and rotation bookkeeping for RefreshSession rows.

    Each method is atomic on its own; SessionManager sequences them and
    decides when to commit.
    """

    def __init__(
        self,
        db: Session,
        clock: Clock = utcnow,
        read_retries: int = 1,
        retry_backoff_seconds: float = 0.05,
    ):
        super().__init__(db, read_retries=read_retries, retry_backoff_seconds=retry_backoff_seconds)
        self.clock = clock

    def _active_filter(self, now: datetime):
        return (
            RefreshSession.is_revoked == 0,
            RefreshSession.expires_at > to_iso(now),
        )

    # Writes

    def create(self, session: RefreshSession) -> RefreshSession:
        """Insert a new session; DuplicateSecret if the secret already exists."""

        def _insert():
            self.db.add(session)
            try:
                self.db.flush()
            except IntegrityError as exc:
                self.rollback()
                raise DuplicateSecret() from exc
            return session

        return self._write(_insert, "create session")

    def update(self, session: RefreshSession) -> RefreshSession:
        def _flush():
            self.db.add(session)
            self.db.flush()
            return session

        return self._write(_flush, "update session")

    def revoke(self, session_id: str, at: datetime) -> bool:
        """Revoke one session. Revoking an already revoked session is a no-op."""

        def _revoke():
            return self.db.query(RefreshSession).filter(
                RefreshSession.id == session_id,
                RefreshSession.is_revoked == 0,
            ).update(
                {"is_revoked": 1, "revoked_at": to_iso(at)},
                synchronize_session="evaluate",
            )

        return self._write(_revoke, "revoke session") > 0

    def revoke_all_active_for_user(self, user_id: str, at: datetime) -> int:
        def _revoke_all():
            return self.db.query(RefreshSession).filter(
                RefreshSession.user_id == user_id,
                *self._active_filter(at),
            ).update(
                {"is_revoked": 1, "revoked_at": to_iso(at)},
                synchronize_session="evaluate",
            )

        count = self._write(_revoke_all, "revoke user sessions")
        logger.info(f"Revoked {count} active sessions for user {user_id}")
        return count

    def revoke_active_for_device(self, user_id: str, device_id: str, at: datetime) -> int:
        def _revoke_device():
            return self.db.query(RefreshSession).filter(
                RefreshSession.user_id == user_id,
                RefreshSession.device_id == device_id,
                *self._active_filter(at),
            ).update(
                {"is_revoked": 1, "revoked_at": to_iso(at)},
                synchronize_session="evaluate",
            )

        return self._write(_revoke_device, "revoke device sessions")

    def mark_rotated(self, session_id: str, replaced_by: str, at: datetime) -> bool:
        """Revoke a session as rotated, only if nobody revoked it first.

        Returns False when the session was already revoked, which is how a
        concurrent refresh with the same secret loses.
        """

        def _mark():
            return self.db.query(RefreshSession).filter(
                RefreshSession.id == session_id,
                RefreshSession.is_revoked == 0,
            ).update(
                {"is_revoked": 1, "revoked_at": to_iso(at), "replaced_by_token": replaced_by},
                synchronize_session="evaluate",
            )

        return self._write(_mark, "rotate session") == 1

    def purge_expired(self, before: datetime | None = None) -> int:
        """Physically delete sessions whose expiry has passed."""
        cutoff = to_iso(before or self.clock())

        def _purge():
            return self.db.query(RefreshSession).filter(
                RefreshSession.expires_at < cutoff,
            ).delete(synchronize_session=False)

        count = self._write(_purge, "purge expired sessions")
        if count:
            logger.info(f"Purged {count} expired sessions")
        return count

    # Reads

    def find_by_secret(self, secret: str) -> RefreshSession | None:
        return self._read(
            lambda: self.db.query(RefreshSession).filter(RefreshSession.refresh_secret == secret).first(),
            "find session by secret",
        )

    def find_by_id(self, session_id: str, user_id: str | None = None) -> RefreshSession | None:
        def _find():
            query = self.db.query(RefreshSession).filter(RefreshSession.id == session_id)
            if user_id is not None:
                query = query.filter(RefreshSession.user_id == user_id)
            return query.first()

        return self._read(_find, "find session by id")

    def find_active_by_user(self, user_id: str) -> list[RefreshSession]:
        now = self.clock()
        return self._read(
            lambda: self.db.query(RefreshSession)
            .filter(RefreshSession.user_id == user_id, *self._active_filter(now))
            .order_by(RefreshSession.last_used_at.desc())
            .all(),
            "find active sessions",
        )

    def find_by_device_and_user(self, user_id: str, device_id: str) -> list[RefreshSession]:
        return self._read(
            lambda: self.db.query(RefreshSession)
            .filter(RefreshSession.user_id == user_id, RefreshSession.device_id == device_id)
            .order_by(RefreshSession.created_at.desc())
            .all(),
            "find device sessions",
        )

    def find_created_since(self, user_id: str, since: datetime) -> list[RefreshSession]:
        return self._read(
            lambda: self.db.query(RefreshSession)
            .filter(RefreshSession.user_id == user_id, RefreshSession.created_at > to_iso(since))
            .all(),
            "find recent sessions",
        )

    def count_active(self, user_id: str | None = None) -> int:
        now = self.clock()

        def _count():
            query = self.db.query(RefreshSession).filter(*self._active_filter(now))
            if user_id is not None:
                query = query.filter(RefreshSession.user_id == user_id)
            return query.count()

        return self._read(_count, "count active sessions")

    def find_suspicious_active(self, limit: int = 50) -> list[RefreshSession]:
        now = self.clock()
        return self._read(
            lambda: self.db.query(RefreshSession)
            .filter(RefreshSession.suspicious_activity == 1, *self._active_filter(now))
            .order_by(RefreshSession.created_at.desc())
            .limit(limit)
            .all(),
            "find suspicious sessions",
        )

    def find_created_since_all(self, since: datetime, limit: int = 100) -> list[RefreshSession]:
        return self._read(
            lambda: self.db.query(RefreshSession)
            .filter(RefreshSession.created_at > to_iso(since))
            .order_by(RefreshSession.created_at.desc())
            .limit(limit)
            .all(),
            "find recent logins",
        )
