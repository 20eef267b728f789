"""Error taxonomy for the API services.

Every error carries a stable ``kind`` that the HTTP layer returns verbatim.
Only store-level conditions are retryable; everything else is terminal for
the request that raised it.
"""


class SessionError(Exception):
    """Base class for auth/session errors mapped to HTTP responses."""

    kind: str = "session_error"
    status_code: int = 400
    retryable: bool = False
    default_message: str = "Request could not be completed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCredentials(SessionError):
    kind = "invalid_credentials"
    status_code = 401
    default_message = "Invalid email or password"


class AccountDeactivated(SessionError):
    kind = "account_deactivated"
    status_code = 403
    default_message = "Account is deactivated"


class InvalidRefreshToken(SessionError):
    kind = "invalid_refresh_token"
    status_code = 401
    default_message = "Invalid refresh token"


class RefreshTokenExpired(SessionError):
    kind = "refresh_token_expired"
    status_code = 401
    default_message = "Refresh token expired"


class UserInactive(SessionError):
    kind = "user_inactive"
    status_code = 401
    default_message = "User not found or inactive"


class DuplicateSecret(SessionError):
    """Refresh secret collided with an existing session."""

    kind = "duplicate_secret"
    status_code = 503
    retryable = True
    default_message = "Could not issue session, please retry"


class StoreUnavailable(SessionError):
    kind = "store_unavailable"
    status_code = 503
    retryable = True
    default_message = "Service temporarily unavailable, please retry"


class Unauthorized(SessionError):
    kind = "unauthorized"
    status_code = 401
    default_message = "Access token required"


class InvalidToken(Unauthorized):
    kind = "invalid_token"
    default_message = "Invalid or expired token"


class Forbidden(SessionError):
    kind = "forbidden"
    status_code = 403
    default_message = "Forbidden: Admin access required"


class UserNotFound(SessionError):
    kind = "user_not_found"
    status_code = 404
    default_message = "User not found"


class SessionNotFound(SessionError):
    kind = "session_not_found"
    status_code = 404
    default_message = "Session not found"


class EmailAlreadyRegistered(SessionError):
    kind = "email_already_registered"
    status_code = 400
    default_message = "Email already registered"


class InvalidDeviceInfo(SessionError):
    kind = "invalid_device_info"
    status_code = 422
    default_message = "Invalid device information"


class ProductNotFound(SessionError):
    kind = "product_not_found"
    status_code = 404
    default_message = "Product not found"


class SavingsLogNotFound(SessionError):
    kind = "savings_log_not_found"
    status_code = 404
    default_message = "Savings log not found"
