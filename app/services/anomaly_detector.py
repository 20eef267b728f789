"""Sign-in anomaly heuristics.

This is advisory only. A flagged sign-in still succeeds; the flag is stored
on the new session and surfaced to the client as a warning. Do not treat it
as an access control.
"""
from dataclasses import dataclass
from datetime import timedelta
import logging

from app.config import Settings
from app.schemas.auth import DeviceInfo
from app.services.session_store import SessionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnomalyPolicy:
    """Thresholds for flagging a sign-in. A rule fires when its count is strictly greater."""

    max_active_sessions: int = 5
    max_recent_devices: int = 3
    recent_window: timedelta = timedelta(minutes=60)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnomalyPolicy":
        return cls(
            max_active_sessions=settings.suspicious_max_active_sessions,
            max_recent_devices=settings.suspicious_max_recent_devices,
            recent_window=timedelta(minutes=settings.suspicious_window_minutes),
        )


class AnomalyDetector:
    def __init__(self, store: SessionStore, policy: AnomalyPolicy | None = None):
        self.store = store
        self.policy = policy or AnomalyPolicy()

    def is_suspicious(self, user_id: str, device_info: DeviceInfo) -> bool:
        """Evaluate the sign-in rules for a user before their new session is created."""
        active_sessions = self.store.find_active_by_user(user_id)
        if len(active_sessions) > self.policy.max_active_sessions:
            logger.warning(
                f"Suspicious sign-in for user {user_id}: {len(active_sessions)} active sessions"
            )
            return True

        since = self.store.clock() - self.policy.recent_window
        recent_sessions = self.store.find_created_since(user_id, since)
        recent_devices = {session.device_id for session in recent_sessions}
        if len(recent_devices) > self.policy.max_recent_devices:
            logger.warning(
                f"Suspicious sign-in for user {user_id} on {device_info.platform}: "
                f"{len(recent_devices)} devices in the last window"
            )
            return True

        return False
