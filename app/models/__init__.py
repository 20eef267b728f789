"""SQLAlchemy models package."""
from app.models.user import User
from app.models.profile import Profile
from app.models.auth import RefreshSession
from app.models.product import Product
from app.models.savings_log import SavingsLog

__all__ = [
    "User",
    "Profile",
    "RefreshSession",
    "Product",
    "SavingsLog",
]
