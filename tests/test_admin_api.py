from app.models.user import User

from conftest import bearer, signin, signup


def _make_admin(client, session_factory, email="admin@example.com"):
    data = signup(client, email, device_id="admin-console", platform="web", name="Admin")
    db = session_factory()
    try:
        db.query(User).filter(User.id == data["user"]["id"]).update({"role": "admin"})
        db.commit()
    finally:
        db.close()
    return bearer(data["access_token"])


def test_admin_routes_require_admin_role(client):
    user = signup(client, "plain@example.com")

    response = client.get("/api/admin/stats", headers=bearer(user["access_token"]))

    assert response.status_code == 403
    assert response.json()["error"]["kind"] == "forbidden"


def test_toggle_status_deactivates_and_revokes_sessions(client, session_factory):
    admin_headers = _make_admin(client, session_factory)
    target = signup(client, "target@example.com", device_id="phone")
    signin(client, "target@example.com", device_id="tablet")
    signin(client, "target@example.com", device_id="laptop")

    response = client.patch(
        f"/api/admin/users/{target['user']['id']}/toggle-status",
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["user"]["is_active"] is False
    assert response.json()["revoked_sessions"] == 3

    refresh = client.post("/api/auth/refresh", json={"refresh_token": target["refresh_token"]})
    assert refresh.status_code == 401

    assert signin(client, "target@example.com").status_code == 403
    validate = client.get("/api/auth/validate", headers=bearer(target["access_token"]))
    assert validate.status_code == 403
    assert validate.json()["error"]["kind"] == "account_deactivated"

    details = client.get(f"/api/admin/users/{target['user']['id']}", headers=admin_headers).json()
    assert details["stats"]["active_sessions"] == 0

    reactivated = client.patch(
        f"/api/admin/users/{target['user']['id']}/toggle-status",
        headers=admin_headers,
    )
    assert reactivated.json()["user"]["is_active"] is True
    assert signin(client, "target@example.com").status_code == 200


def test_list_users_supports_search_and_pagination(client, session_factory):
    admin_headers = _make_admin(client, session_factory)
    for n in range(3):
        signup(client, f"saver{n}@example.com", name=f"Saver {n}")
    signup(client, "someone@example.com", name="Someone Else")

    response = client.get("/api/admin/users", params={"search": "saver", "limit": 2}, headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert len(data["users"]) == 2
    assert data["pagination"] == {"total": 3, "page": 1, "pages": 2}


def test_user_details_for_unknown_user_is_not_found(client, session_factory):
    admin_headers = _make_admin(client, session_factory)

    response = client.get("/api/admin/users/missing", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["error"]["kind"] == "user_not_found"


def test_promote_to_admin(client, session_factory):
    admin_headers = _make_admin(client, session_factory)
    user = signup(client, "rising@example.com")

    response = client.patch(f"/api/admin/users/{user['user']['id']}/promote", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["user"]["role"] == "admin"
    assert client.get("/api/admin/stats", headers=bearer(user["access_token"])).status_code == 200


def test_stats_and_security_insights(client, session_factory):
    admin_headers = _make_admin(client, session_factory)
    signup(client, "busy@example.com", device_id="d0")
    for n in range(1, 5):
        signin(client, "busy@example.com", device_id=f"d{n}")

    stats = client.get("/api/admin/stats", headers=admin_headers).json()
    assert stats["users"] == {"total": 2, "active": 2, "inactive": 0, "admins": 1}
    assert stats["sessions"]["active"] == 6
    assert stats["products"] == {"total": 0, "wishlisted": 0}

    insights = client.get("/api/admin/security/insights", headers=admin_headers).json()
    assert insights["stats"]["suspicious_sessions"] == 1
    assert insights["stats"]["last_24h_logins"] == 6
    assert insights["suspicious_sessions"][0]["device_id"] == "d4"
    assert insights["suspicious_sessions"][0]["user_email"] == "busy@example.com"


def test_product_counts_in_stats_and_user_details(client, session_factory):
    admin_headers = _make_admin(client, session_factory)
    saver = signup(client, "saver@example.com")
    headers = bearer(saver["access_token"])
    client.post("/api/products", json={"name": "Ring", "price": 900, "is_wishlisted": True}, headers=headers)
    client.post("/api/products", json={"name": "Bike", "price": 400}, headers=headers)

    stats = client.get("/api/admin/stats", headers=admin_headers).json()
    assert stats["products"] == {"total": 2, "wishlisted": 1}

    details = client.get(f"/api/admin/users/{saver['user']['id']}", headers=admin_headers).json()
    assert details["stats"] == {"active_sessions": 1, "product_count": 2}


def test_security_insights_session_summary_shape(client, session_factory):
    admin_headers = _make_admin(client, session_factory)
    signup(client, "saver@example.com", device_id="phone", platform="android")

    insights = client.get("/api/admin/security/insights", headers=admin_headers).json()

    saver_login = next(s for s in insights["recent_logins"] if s["user_email"] == "saver@example.com")
    assert set(saver_login) == {
        "id",
        "user_id",
        "user_email",
        "user_name",
        "device_id",
        "device_name",
        "platform",
        "ip_address",
        "suspicious",
        "is_revoked",
        "created_at",
        "last_used_at",
    }
    assert saver_login["device_id"] == "phone"
    assert saver_login["platform"] == "android"
    assert saver_login["suspicious"] is False
    assert insights["stats"] == {"total_active_sessions": 2, "suspicious_sessions": 0, "last_24h_logins": 2}
