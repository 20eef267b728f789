import os
import sys
from datetime import timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef")

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app import models  # noqa: E402,F401
from app.api import admin, auth, deps, products, profile, savings_logs  # noqa: E402
from app.api.errors import register_exception_handlers  # noqa: E402
from app.database import Base  # noqa: E402
from app.models.auth import RefreshSession  # noqa: E402
from app.models.user import User  # noqa: E402
from app.services.session_manager import SessionManager  # noqa: E402
from app.services.users import get_password_hash  # noqa: E402
from app.utils.clock import to_iso, utcnow  # noqa: E402

PASSWORD = "TestPass123!"


class FrozenClock:
    """Clock that only moves when told to. Starts at the real current time."""

    def __init__(self, start=None):
        self.now = start or utcnow()

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def manager(db, clock):
    return SessionManager(db, clock=clock)


@pytest.fixture
def make_user(db):
    def _make_user(email="saver@example.com", name="Saver", role="user", is_active=True):
        user = User(
            email=email,
            name=name,
            password_hash=get_password_hash(PASSWORD),
            role=role,
            is_active=1 if is_active else 0,
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def make_session(db, clock):
    """Insert a session row directly, bypassing the manager."""
    counter = {"n": 0}

    def _make_session(user, device_id="device-1", created_at=None, expires_in=timedelta(days=30), revoked=False):
        counter["n"] += 1
        created = created_at or clock()
        session = RefreshSession(
            user_id=user.id,
            refresh_secret=f"{counter['n']:0128x}",
            created_at=to_iso(created),
            expires_at=to_iso(created + expires_in),
            is_revoked=1 if revoked else 0,
            revoked_at=to_iso(created) if revoked else None,
            device_id=device_id,
            device_name=f"Phone {device_id}",
            platform="ios",
            last_used_at=to_iso(created),
            usage_count=1,
        )
        db.add(session)
        db.commit()
        return session

    return _make_session


@pytest.fixture
def client(session_factory, clock):
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(auth.router, prefix="/api")
    app.include_router(profile.router, prefix="/api")
    app.include_router(products.router, prefix="/api")
    app.include_router(savings_logs.router, prefix="/api")
    app.include_router(admin.router, prefix="/api")

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_clock] = lambda: clock
    return TestClient(app)


def signup(client, email, device_id="device-1", platform="ios", name="Saver"):
    response = client.post(
        "/api/auth/signup",
        json={
            "email": email,
            "password": PASSWORD,
            "name": name,
            "device_id": device_id,
            "device_name": f"Phone {device_id}",
            "platform": platform,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def signin(client, email, device_id="device-1", platform="ios"):
    return client.post(
        "/api/auth/signin",
        json={
            "email": email,
            "password": PASSWORD,
            "device_id": device_id,
            "device_name": f"Phone {device_id}",
            "platform": platform,
        },
    )


def bearer(access_token):
    return {"Authorization": f"Bearer {access_token}"}
