from app.models.auth import RefreshSession

from conftest import PASSWORD, bearer, signin, signup


def test_signup_returns_tokens_and_user(client):
    data = signup(client, "alpha@example.com")

    assert data["message"] == "User created successfully"
    assert data["user"]["email"] == "alpha@example.com"
    assert data["user"]["role"] == "user"
    assert data["user"]["is_active"] is True
    assert data["token_type"] == "bearer"
    assert len(data["refresh_token"]) == 128
    assert data["access_token"]


def test_signup_with_existing_email_is_rejected(client):
    signup(client, "alpha@example.com")

    response = client.post(
        "/api/auth/signup",
        json={"email": "alpha@example.com", "password": PASSWORD, "name": "Again"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["kind"] == "email_already_registered"


def test_signup_validates_body(client):
    response = client.post(
        "/api/auth/signup",
        json={"email": "not-an-email", "password": "123", "name": ""},
    )

    assert response.status_code == 422


def test_signin_uses_device_headers_when_body_omits_them(client, session_factory):
    user_id = signup(client, "alpha@example.com", device_id="body-device")["user"]["id"]

    response = client.post(
        "/api/auth/signin",
        json={"email": "alpha@example.com", "password": PASSWORD},
        headers={
            "X-Device-Id": "header-device",
            "X-Device-Name": "Work Laptop",
            "X-Platform": "web",
            "User-Agent": "pytest-agent",
            "X-Forwarded-For": "203.0.113.7, 10.0.0.1",
        },
    )
    assert response.status_code == 200
    assert "warning" not in response.json()

    db = session_factory()
    try:
        session = db.query(RefreshSession).filter(
            RefreshSession.user_id == user_id,
            RefreshSession.device_id == "header-device",
        ).one()
        assert session.device_name == "Work Laptop"
        assert session.platform == "web"
        assert session.user_agent == "pytest-agent"
        assert session.ip_address == "203.0.113.7"
    finally:
        db.close()


def test_signin_with_invalid_platform_header_is_rejected(client):
    signup(client, "alpha@example.com")

    response = client.post(
        "/api/auth/signin",
        json={"email": "alpha@example.com", "password": PASSWORD},
        headers={"X-Platform": "windows-phone"},
    )

    assert response.status_code == 422
    assert response.json() == {
        "error": {"kind": "invalid_device_info", "message": "Invalid device information"}
    }


def test_signin_with_wrong_password_is_unauthorized(client):
    signup(client, "alpha@example.com")

    response = client.post(
        "/api/auth/signin",
        json={"email": "alpha@example.com", "password": "wrong-password"},
    )

    assert response.status_code == 401
    assert response.json() == {
        "error": {"kind": "invalid_credentials", "message": "Invalid email or password"}
    }
    assert response.headers["www-authenticate"] == "Bearer"


def test_signin_reports_suspicious_activity_as_warning(client):
    signup(client, "alpha@example.com", device_id="d0")
    for n in range(1, 4):
        assert signin(client, "alpha@example.com", device_id=f"d{n}").status_code == 200

    response = signin(client, "alpha@example.com", device_id="d4")

    assert response.status_code == 200
    assert response.json()["warning"] == "Suspicious activity detected"


def test_refresh_rotates_session_and_rejects_replay(client):
    old_token = signup(client, "beta@example.com")["refresh_token"]

    refresh_response = client.post("/api/auth/refresh", json={"refresh_token": old_token})
    assert refresh_response.status_code == 200
    new_token = refresh_response.json()["refresh_token"]
    assert new_token != old_token

    replay_response = client.post("/api/auth/refresh", json={"refresh_token": old_token})
    assert replay_response.status_code == 401
    assert replay_response.json()["error"]["kind"] == "invalid_refresh_token"

    assert client.post("/api/auth/refresh", json={"refresh_token": new_token}).status_code == 200


def test_refresh_after_expiry_is_rejected(client, clock):
    token = signup(client, "beta@example.com")["refresh_token"]
    clock.advance(days=31)

    response = client.post("/api/auth/refresh", json={"refresh_token": token})

    assert response.status_code == 401
    assert response.json()["error"]["kind"] == "refresh_token_expired"


def test_logout_is_idempotent(client):
    token = signup(client, "gamma@example.com")["refresh_token"]

    for refresh_token in (token, token, "unknown-token"):
        response = client.post("/api/auth/logout", json={"refresh_token": refresh_token})
        assert response.status_code == 200
        assert response.json()["message"] == "Logged out successfully"

    assert client.post("/api/auth/refresh", json={"refresh_token": token}).status_code == 401


def test_logout_all_requires_access_token(client):
    response = client.post("/api/auth/logout-all")

    assert response.status_code == 401
    assert response.json()["error"]["kind"] == "unauthorized"


def test_logout_all_revokes_all_refresh_sessions(client, session_factory):
    first = signup(client, "gamma@example.com", device_id="phone")
    second = signin(client, "gamma@example.com", device_id="tablet").json()

    response = client.post("/api/auth/logout-all", headers=bearer(first["access_token"]))
    assert response.status_code == 200
    assert response.json()["revoked_count"] == 2

    assert client.post("/api/auth/refresh", json={"refresh_token": second["refresh_token"]}).status_code == 401

    db = session_factory()
    try:
        assert db.query(RefreshSession).filter(RefreshSession.is_revoked == 0).count() == 0
    finally:
        db.close()


def test_sessions_list_hides_secrets_and_revoke_removes_one(client):
    first = signup(client, "delta@example.com", device_id="phone")
    signin(client, "delta@example.com", device_id="tablet", platform="android")
    headers = bearer(first["access_token"])

    sessions = client.get("/api/auth/sessions", headers=headers).json()["sessions"]
    assert sorted(s["device"]["device_id"] for s in sessions) == ["phone", "tablet"]
    assert all("refresh_token" not in s and "refresh_secret" not in s for s in sessions)

    tablet = next(s for s in sessions if s["device"]["device_id"] == "tablet")
    response = client.delete(f"/api/auth/sessions/{tablet['id']}", headers=headers)
    assert response.status_code == 200

    remaining = client.get("/api/auth/sessions", headers=headers).json()["sessions"]
    assert [s["device"]["device_id"] for s in remaining] == ["phone"]


def test_revoking_another_users_session_is_not_found(client):
    owner = signup(client, "owner@example.com")
    other = signup(client, "other@example.com")
    owner_session_id = client.get(
        "/api/auth/sessions", headers=bearer(owner["access_token"])
    ).json()["sessions"][0]["id"]

    response = client.delete(
        f"/api/auth/sessions/{owner_session_id}",
        headers=bearer(other["access_token"]),
    )

    assert response.status_code == 404
    assert response.json()["error"]["kind"] == "session_not_found"


def test_validate_and_me(client):
    data = signup(client, "epsilon@example.com")
    headers = bearer(data["access_token"])

    validate = client.get("/api/auth/validate", headers=headers)
    assert validate.status_code == 200
    assert validate.json()["valid"] is True
    assert validate.json()["user"]["id"] == data["user"]["id"]

    me = client.get("/api/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["email"] == "epsilon@example.com"


def test_invalid_access_token_is_rejected(client):
    response = client.get("/api/auth/validate", headers=bearer("garbage"))

    assert response.status_code == 401
    assert response.json()["error"]["kind"] == "invalid_token"


def test_access_token_stops_working_after_fifteen_minutes(client, clock):
    headers = bearer(signup(client, "zeta@example.com")["access_token"])
    assert client.get("/api/auth/validate", headers=headers).status_code == 200

    clock.advance(minutes=16)
    response = client.get("/api/auth/validate", headers=headers)

    assert response.status_code == 401
    assert response.json()["error"]["kind"] == "invalid_token"
