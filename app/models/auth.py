"""Authentication/session models."""
import uuid
from datetime import datetime

from sqlalchemy import Column, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.database import Base
from app.utils.clock import from_iso, now_iso

PLATFORMS = ("ios", "android", "web")

STATE_ACTIVE = "active"
STATE_ROTATED = "rotated"
STATE_REVOKED = "revoked"
STATE_EXPIRED = "expired"


class RefreshSession(Base):
    """One device login, tracked for rotation and revocation.

    Device columns are written once at creation. Security columns are usage
    telemetry and change on every refresh.
    """

    __tablename__ = "refresh_sessions"
    __table_args__ = (
        Index("ix_refresh_sessions_user_active", "user_id", "is_revoked", "expires_at"),
        Index("ix_refresh_sessions_user_device", "user_id", "device_id"),
        Index("ix_refresh_sessions_expires_at", "expires_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    refresh_secret = Column(String(128), unique=True, nullable=False, index=True)
    created_at = Column(String(26), nullable=False, default=now_iso)
    expires_at = Column(String(26), nullable=False)
    is_revoked = Column(Integer, nullable=False, default=0)  # SQLite boolean
    revoked_at = Column(String(26))
    replaced_by_token = Column(String(128), index=True)

    # Device info
    device_id = Column(String(255), nullable=False)
    device_name = Column(String(255), nullable=False)
    platform = Column(String(10), nullable=False)
    app_version = Column(String(50))
    os_version = Column(String(50))

    # Security info
    ip_address = Column(String(45))
    user_agent = Column(String(255))
    last_used_at = Column(String(26))
    usage_count = Column(Integer, nullable=False, default=0)
    suspicious_activity = Column(Integer, nullable=False, default=0)  # SQLite boolean

    user = relationship("User", back_populates="refresh_sessions")

    def is_usable(self, now: datetime) -> bool:
        return not self.is_revoked and from_iso(self.expires_at) > now

    def state(self, now: datetime) -> str:
        """Lifecycle state; ``expired`` is computed, never stored."""
        if self.is_revoked:
            return STATE_ROTATED if self.replaced_by_token else STATE_REVOKED
        if from_iso(self.expires_at) <= now:
            return STATE_EXPIRED
        return STATE_ACTIVE
