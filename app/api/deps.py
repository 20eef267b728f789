"""Shared FastAPI dependencies."""
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.models.user import User
from app.services.errors import Forbidden, Unauthorized, UserInactive
from app.services.session_manager import SessionManager
from app.services.token_codec import AccessClaims
from app.utils.clock import Clock, utcnow

bearer_scheme = HTTPBearer(auto_error=False)

__all__ = [
    "get_db",
    "get_clock",
    "get_session_manager",
    "get_token_claims",
    "get_current_user",
    "require_admin",
]


def get_clock() -> Clock:
    """Time source for request handling; overridden in tests."""
    return utcnow


def get_session_manager(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> SessionManager:
    return SessionManager(db, settings=get_settings(), clock=clock)


def get_token_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    manager: SessionManager = Depends(get_session_manager),
) -> AccessClaims:
    """Verify the bearer access token without touching the database."""
    if not credentials:
        raise Unauthorized()
    return manager.codec.verify_access_token(credentials.credentials)


def get_current_user(
    claims: AccessClaims = Depends(get_token_claims),
    manager: SessionManager = Depends(get_session_manager),
) -> User:
    user = manager.users.find_by_id(claims.user_id)
    if not user or not user.is_active:
        raise UserInactive()
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise Forbidden()
    return current_user
