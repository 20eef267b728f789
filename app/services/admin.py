"""Read-only aggregates for the admin dashboard."""
from datetime import timedelta

from sqlalchemy.orm import Session

from app.models.auth import RefreshSession
from app.models.product import Product
from app.models.user import User
from app.services.session_store import SessionStore
from app.services.users import UserDirectory
from app.utils.clock import Clock, utcnow


def _session_summary(session: RefreshSession, user: User | None) -> dict:
    return {
        "id": session.id,
        "user_id": session.user_id,
        "user_email": user.email if user else None,
        "user_name": user.name if user else None,
        "device_id": session.device_id,
        "device_name": session.device_name,
        "platform": session.platform,
        "ip_address": session.ip_address,
        "suspicious": bool(session.suspicious_activity),
        "is_revoked": bool(session.is_revoked),
        "created_at": session.created_at,
        "last_used_at": session.last_used_at,
    }


def count_user_products(db: Session, user_id: str) -> int:
    return db.query(Product).filter(Product.user_id == user_id).count()


def get_user_details(db: Session, user_id: str, clock: Clock = utcnow) -> tuple[User, list[RefreshSession]] | None:
    """Get a user together with their active sessions."""
    user = UserDirectory(db).find_by_id(user_id)
    if user is None:
        return None
    return user, SessionStore(db, clock=clock).find_active_by_user(user_id)


def get_security_insights(db: Session, clock: Clock = utcnow) -> dict:
    """Suspicious sessions still in use and sign-ins from the last 24 hours."""
    store = SessionStore(db, clock=clock)
    suspicious = store.find_suspicious_active(limit=50)
    recent = store.find_created_since_all(clock() - timedelta(hours=24), limit=100)

    user_ids = {s.user_id for s in suspicious} | {s.user_id for s in recent}
    users = {u.id: u for u in db.query(User).filter(User.id.in_(user_ids)).all()} if user_ids else {}

    return {
        "stats": {
            "total_active_sessions": store.count_active(),
            "suspicious_sessions": len(suspicious),
            "last_24h_logins": len(recent),
        },
        "suspicious_sessions": [_session_summary(s, users.get(s.user_id)) for s in suspicious],
        "recent_logins": [_session_summary(s, users.get(s.user_id)) for s in recent],
    }


def get_dashboard_stats(db: Session, clock: Clock = utcnow) -> dict:
    return {
        "users": UserDirectory(db).count_users(),
        "products": {
            "total": db.query(Product).count(),
            "wishlisted": db.query(Product).filter(Product.is_wishlisted == 1).count(),
        },
        "sessions": {"active": SessionStore(db, clock=clock).count_active()},
    }
