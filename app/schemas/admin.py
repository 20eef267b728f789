"""Admin schemas."""
from pydantic import BaseModel

from app.schemas.auth import SessionResponse, UserResponse


class Pagination(BaseModel):
    total: int
    page: int
    pages: int


class UserListResponse(BaseModel):
    users: list[UserResponse]
    pagination: Pagination


class UserStats(BaseModel):
    active_sessions: int
    product_count: int


class UserDetailResponse(BaseModel):
    user: UserResponse
    stats: UserStats
    sessions: list[SessionResponse]


class UserStatusResponse(BaseModel):
    message: str
    user: UserResponse
    revoked_sessions: int = 0


class SessionSummary(BaseModel):
    """A session row joined with its owner, for admin review."""

    id: str
    user_id: str
    user_email: str | None = None
    user_name: str | None = None
    device_id: str
    device_name: str
    platform: str
    ip_address: str | None = None
    suspicious: bool
    is_revoked: bool
    created_at: str
    last_used_at: str | None = None


class SecurityStats(BaseModel):
    total_active_sessions: int
    suspicious_sessions: int
    last_24h_logins: int


class SecurityInsightsResponse(BaseModel):
    stats: SecurityStats
    suspicious_sessions: list[SessionSummary]
    recent_logins: list[SessionSummary]


class UserCounts(BaseModel):
    total: int
    active: int
    inactive: int
    admins: int


class ProductCounts(BaseModel):
    total: int
    wishlisted: int


class SessionCounts(BaseModel):
    active: int


class DashboardStatsResponse(BaseModel):
    users: UserCounts
    products: ProductCounts
    sessions: SessionCounts
