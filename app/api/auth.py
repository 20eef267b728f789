"""Authentication and session API endpoints."""
from fastapi import APIRouter, Depends, Request, status
from pydantic import ValidationError

from app.api.deps import get_current_user, get_session_manager, get_token_claims
from app.models.auth import RefreshSession
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    DeviceFields,
    DeviceInfo,
    LogoutAllResponse,
    LogoutRequest,
    MessageResponse,
    RefreshRequest,
    RefreshResponse,
    SecurityContext,
    SessionListResponse,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
    UserResponse,
    ValidateResponse,
)
from app.services.errors import InvalidDeviceInfo
from app.services.session_manager import AuthResult, SessionManager
from app.services.token_codec import AccessClaims

router = APIRouter(prefix="/auth", tags=["auth"])


def get_request_ip(request: Request) -> str | None:
    """Extract best-effort client IP for session metadata."""
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


def get_device_info(fields: DeviceFields, request: Request) -> DeviceInfo:
    """Build device identity from the body, falling back to X-Device-* headers."""
    headers = request.headers
    try:
        return DeviceInfo(
            device_id=fields.device_id or headers.get("x-device-id") or "unknown",
            device_name=fields.device_name or headers.get("x-device-name") or "Unknown Device",
            platform=fields.platform or headers.get("x-platform") or "web",
            app_version=fields.app_version or headers.get("x-app-version"),
            os_version=fields.os_version or headers.get("x-os-version"),
        )
    except ValidationError as exc:
        raise InvalidDeviceInfo() from exc


def get_security_context(request: Request) -> SecurityContext:
    return SecurityContext(
        ip_address=get_request_ip(request),
        user_agent=request.headers.get("user-agent"),
    )


def to_session_response(session: RefreshSession) -> SessionResponse:
    return SessionResponse(
        id=session.id,
        device=DeviceInfo(
            device_id=session.device_id,
            device_name=session.device_name,
            platform=session.platform,
            app_version=session.app_version,
            os_version=session.os_version,
        ),
        ip_address=session.ip_address,
        last_used_at=session.last_used_at,
        usage_count=session.usage_count,
        suspicious=bool(session.suspicious_activity),
        created_at=session.created_at,
        expires_at=session.expires_at,
    )


def to_auth_response(result: AuthResult, message: str) -> AuthResponse:
    return AuthResponse(
        message=message,
        user=UserResponse.model_validate(result.user),
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        warning=result.warning,
    )


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def sign_up(
    user_data: SignUpRequest,
    request: Request,
    manager: SessionManager = Depends(get_session_manager),
):
    """Register a new user and start their first session."""
    result = manager.sign_up(
        email=user_data.email,
        password=user_data.password,
        name=user_data.name,
        device=get_device_info(user_data, request),
        security=get_security_context(request),
    )
    return to_auth_response(result, "User created successfully")


@router.post("/signin", response_model=AuthResponse, response_model_exclude_none=True)
def sign_in(
    user_data: SignInRequest,
    request: Request,
    manager: SessionManager = Depends(get_session_manager),
):
    """Sign in and get tokens. Replaces any active session on the same device."""
    result = manager.sign_in(
        email=user_data.email,
        password=user_data.password,
        device=get_device_info(user_data, request),
        security=get_security_context(request),
    )
    return to_auth_response(result, "Signed in successfully")


@router.post("/refresh", response_model=RefreshResponse)
def refresh_tokens(
    token_data: RefreshRequest,
    request: Request,
    manager: SessionManager = Depends(get_session_manager),
):
    """Exchange a refresh token for a new access token and a new refresh token."""
    result = manager.refresh(token_data.refresh_token, get_security_context(request))
    return RefreshResponse(access_token=result.access_token, refresh_token=result.refresh_token)


@router.post("/logout", response_model=MessageResponse)
def logout(
    token_data: LogoutRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    """Logout from the device holding this refresh token."""
    manager.logout(token_data.refresh_token)
    return MessageResponse(message="Logged out successfully")


@router.post("/logout-all", response_model=LogoutAllResponse)
def logout_all_devices(
    manager: SessionManager = Depends(get_session_manager),
    current_user: User = Depends(get_current_user),
):
    """Revoke every active session for the current user."""
    count = manager.logout_all(current_user.id)
    return LogoutAllResponse(message="Logged out from all devices successfully", revoked_count=count)


@router.get("/sessions", response_model=SessionListResponse)
def list_sessions(
    manager: SessionManager = Depends(get_session_manager),
    current_user: User = Depends(get_current_user),
):
    """List the current user's active sessions, most recently used first."""
    sessions = manager.list_sessions(current_user.id)
    return SessionListResponse(sessions=[to_session_response(s) for s in sessions])


@router.delete("/sessions/{session_id}", response_model=MessageResponse)
def revoke_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
    current_user: User = Depends(get_current_user),
):
    """Revoke one of the current user's sessions."""
    manager.revoke_session(session_id, current_user)
    return MessageResponse(message="Session revoked successfully")


@router.get("/validate", response_model=ValidateResponse)
def validate_token(
    claims: AccessClaims = Depends(get_token_claims),
    manager: SessionManager = Depends(get_session_manager),
):
    """Confirm the token's user still exists and is active."""
    user = manager.validate(claims.user_id)
    return ValidateResponse(valid=True, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user
