"""Authentication and session schemas."""
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

Platform = Literal["ios", "android", "web"]


class DeviceInfo(BaseModel):
    """Client device identity, fixed for the lifetime of a session."""

    model_config = ConfigDict(frozen=True)

    device_id: str = Field(..., min_length=1, max_length=255)
    device_name: str = Field(..., min_length=1, max_length=255)
    platform: Platform
    app_version: str | None = Field(None, max_length=50)
    os_version: str | None = Field(None, max_length=50)


class SecurityContext(BaseModel):
    """Network details of the request that created or used a session."""

    ip_address: str | None = None
    user_agent: str | None = None


class DeviceFields(BaseModel):
    """Optional device fields accepted in auth request bodies.

    Missing values fall back to the X-Device-* headers, then to defaults.
    """

    device_id: str | None = Field(None, max_length=255)
    device_name: str | None = Field(None, max_length=255)
    platform: Platform | None = None
    app_version: str | None = Field(None, max_length=50)
    os_version: str | None = Field(None, max_length=50)


class SignUpRequest(DeviceFields):
    """User registration request."""

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    name: str = Field(..., min_length=1, max_length=100)


class SignInRequest(DeviceFields):
    """User login request."""

    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    """Token refresh request."""

    refresh_token: str = Field(..., min_length=1)


class LogoutRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """User info response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    role: str
    is_active: bool
    created_at: str


class AuthResponse(BaseModel):
    """Tokens issued by sign-up and sign-in."""

    message: str
    user: UserResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    warning: str | None = None


class RefreshResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class SessionResponse(BaseModel):
    """Active session as shown to its owner. Never includes the secret."""

    id: str
    device: DeviceInfo
    ip_address: str | None
    last_used_at: str | None
    usage_count: int
    suspicious: bool
    created_at: str
    expires_at: str


class SessionListResponse(BaseModel):
    sessions: list[SessionResponse]


class LogoutAllResponse(BaseModel):
    message: str
    revoked_count: int


class ValidateResponse(BaseModel):
    valid: bool
    user: UserResponse


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
