"""Admin API endpoints. Every route requires an active admin."""
import math

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.auth import to_session_response
from app.api.deps import get_clock, get_db, get_session_manager, require_admin
from app.schemas.admin import (
    DashboardStatsResponse,
    Pagination,
    SecurityInsightsResponse,
    UserDetailResponse,
    UserListResponse,
    UserStats,
    UserStatusResponse,
)
from app.schemas.auth import UserResponse
from app.services.admin import count_user_products, get_dashboard_stats, get_security_insights, get_user_details
from app.services.errors import UserNotFound
from app.services.session_manager import SessionManager
from app.utils.clock import Clock

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=DashboardStatsResponse)
def dashboard_stats(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    """User counts and active session totals."""
    return get_dashboard_stats(db, clock)


@router.get("/users", response_model=UserListResponse)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str | None = None,
    manager: SessionManager = Depends(get_session_manager),
):
    """Get all users with pagination, optionally filtered by name or email."""
    users, total = manager.users.list_users(page=page, limit=limit, search=search)
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        pagination=Pagination(total=total, page=page, pages=math.ceil(total / limit)),
    )


@router.get("/users/{user_id}", response_model=UserDetailResponse)
def user_details(
    user_id: str,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    details = get_user_details(db, user_id, clock)
    if details is None:
        raise UserNotFound()
    user, sessions = details
    return UserDetailResponse(
        user=UserResponse.model_validate(user),
        stats=UserStats(active_sessions=len(sessions), product_count=count_user_products(db, user_id)),
        sessions=[to_session_response(s) for s in sessions],
    )


@router.patch("/users/{user_id}/toggle-status", response_model=UserStatusResponse)
def toggle_user_status(
    user_id: str,
    manager: SessionManager = Depends(get_session_manager),
):
    """Activate or deactivate a user. Deactivation revokes all of their sessions."""
    user, revoked = manager.toggle_user_status(user_id)
    return UserStatusResponse(
        message="User status updated successfully",
        user=UserResponse.model_validate(user),
        revoked_sessions=revoked,
    )


@router.patch("/users/{user_id}/promote", response_model=UserStatusResponse)
def promote_to_admin(
    user_id: str,
    manager: SessionManager = Depends(get_session_manager),
):
    user = manager.users.find_by_id(user_id)
    if user is None:
        raise UserNotFound()
    manager.users.promote_to_admin(user)
    manager.users.commit()
    return UserStatusResponse(
        message="User promoted to admin successfully",
        user=UserResponse.model_validate(user),
    )


@router.get("/security/insights", response_model=SecurityInsightsResponse)
def security_insights(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    """Suspicious sessions still in use and sign-ins from the last day."""
    return get_security_insights(db, clock)
