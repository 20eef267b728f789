"""User directory: accounts, passwords and roles."""
import logging

import bcrypt
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from app.models.profile import Profile
from app.models.user import ROLE_ADMIN, User
from app.services.errors import EmailAlreadyRegistered
from app.services.store import SqlStore

logger = logging.getLogger(__name__)

BCRYPT_MAX_BYTES = 72


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    encoded = plain_password.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_BYTES:
        return False
    return bcrypt.checkpw(encoded, hashed_password.encode("utf-8"))


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return bcrypt.hashpw(
        password.encode("utf-8"),
        bcrypt.gensalt(),
    ).decode("utf-8")


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserDirectory(SqlStore):
    """Read access to users, plus the few writes the auth flows need."""

    def find_by_email(self, email: str) -> User | None:
        normalized = normalize_email(email)
        return self._read(
            lambda: self.db.query(User).filter(User.email == normalized).first(),
            "find user by email",
        )

    def find_by_id(self, user_id: str) -> User | None:
        return self._read(
            lambda: self.db.query(User).filter(User.id == user_id).first(),
            "find user by id",
        )

    def create_user(self, email: str, password: str, name: str) -> User:
        """Create a user together with an empty savings profile."""
        user = User(
            email=normalize_email(email),
            name=name.strip(),
            password_hash=get_password_hash(password),
        )
        user.profile = Profile()

        def _insert():
            self.db.add(user)
            try:
                self.db.flush()
            except IntegrityError as exc:
                self.rollback()
                raise EmailAlreadyRegistered() from exc
            return user

        return self._write(_insert, "create user")

    def set_active(self, user: User, active: bool) -> User:
        def _set():
            user.is_active = 1 if active else 0
            self.db.flush()
            return user

        return self._write(_set, "set user status")

    def promote_to_admin(self, user: User) -> User:
        def _promote():
            user.role = ROLE_ADMIN
            self.db.flush()
            return user

        return self._write(_promote, "promote user")

    def list_users(self, page: int = 1, limit: int = 20, search: str | None = None) -> tuple[list[User], int]:
        """Page through users newest first, optionally matching name or email."""

        def _list():
            query = self.db.query(User)
            if search:
                pattern = f"%{search.strip()}%"
                query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
            total = query.count()
            users = (
                query.order_by(User.created_at.desc())
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )
            return users, total

        return self._read(_list, "list users")

    def count_users(self) -> dict[str, int]:
        def _count():
            total = self.db.query(User).count()
            active = self.db.query(User).filter(User.is_active == 1).count()
            admins = self.db.query(User).filter(User.role == ROLE_ADMIN).count()
            return {"total": total, "active": active, "inactive": total - active, "admins": admins}

        return self._read(_count, "count users")
