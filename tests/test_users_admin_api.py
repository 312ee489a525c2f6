from conftest import register

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "ok"
    assert client.get("/health").json() == {"status": "healthy"}


def test_first_user_is_admin(client, users):
    admin, _ = users["admin"]
    host, _ = users["host"]
    assert admin["is_admin"] is True
    assert host["is_admin"] is False
    assert host["is_host"] is True


def test_duplicate_email_conflicts(client, users):
    r = client.post(
        "/api/auth/register",
        json={"name": "Again", "email": "GUEST@example.com", "password": "secret123"},
    )
    assert r.status_code == 409


def test_register_validation(client):
    r = client.post("/api/auth/register", json={"name": "X", "email": "not-an-email", "password": "123"})
    assert r.status_code == 400
    fields = {e["field"] for e in r.json()["errors"]}
    assert {"body.email", "body.password"} <= fields


def test_login_and_me(client, users):
    r = client.post("/api/auth/login", json={"email": "guest@example.com", "password": "secret123"})
    assert r.status_code == 200
    token = r.json()["access_token"]
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).json()
    assert me["email"] == "guest@example.com"

    r = client.post("/api/auth/login", json={"email": "guest@example.com", "password": "wrong-pass"})
    assert r.status_code == 401
    assert r.json() == {"message": "Invalid credentials"}


def test_bad_token(client):
    r = client.get("/api/auth/me", headers={"Authorization": "Bearer nonsense"})
    assert r.status_code == 401
    assert r.json() == {"message": "Invalid or expired token"}


def test_update_profile_and_change_password(client, users):
    _, headers = users["guest"]
    r = client.put("/api/users", json={"phone": "555-0100", "is_host": True}, headers=headers)
    assert r.json()["phone"] == "555-0100"
    assert r.json()["is_host"] is True

    r = client.put(
        "/api/users/change-password",
        json={"current_password": "wrong", "new_password": "newsecret"},
        headers=headers,
    )
    assert r.status_code == 400

    r = client.put(
        "/api/users/change-password",
        json={"current_password": "secret123", "new_password": "newsecret"},
        headers=headers,
    )
    assert r.status_code == 200
    r = client.post("/api/auth/login", json={"email": "guest@example.com", "password": "newsecret"})
    assert r.status_code == 200


def test_profile_image_upload(client, users, storage):
    _, headers = users["guest"]
    r = client.post(
        "/api/users/profile-image",
        files={"profile_image": ("me.png", PNG, "image/png")},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    assert "/uploads/profile-images/profile-" in r.json()["profile_image"]


def test_delete_account(client, users):
    user, headers = register(client, "Temp", "temp@example.com")
    assert client.delete("/api/users", headers=headers).status_code == 200
    _, admin_headers = users["admin"]
    assert client.get(f"/api/users/{user['id']}", headers=admin_headers).status_code == 404


def test_amenities_public_read_admin_write(client, users):
    _, admin_headers = users["admin"]
    _, guest_headers = users["guest"]

    names = [a["name"] for a in client.get("/api/amenities").json()]
    assert "Wifi" in names
    assert client.get("/api/facilities").json() == client.get("/api/amenities").json()

    assert client.post("/api/amenities", json={"name": "Sauna"}, headers=guest_headers).status_code == 403
    r = client.post("/api/facilities", json={"facility_type": "Sauna"}, headers=admin_headers)
    assert r.status_code == 201
    sauna = r.json()
    assert client.post("/api/amenities", json={"name": "sauna"}, headers=admin_headers).status_code == 409

    r = client.put(f"/api/amenities/{sauna['id']}", json={"name": "Steam room", "icon": "spa"}, headers=admin_headers)
    assert r.json() == {"id": sauna["id"], "name": "Steam room", "icon": "spa"}
    assert client.delete(f"/api/amenities/{sauna['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/amenities/{sauna['id']}").status_code == 404


def test_admin_routes_need_admin(client, users):
    _, headers = users["guest"]
    assert client.get("/api/admin/stats", headers=headers).status_code == 403


def test_admin_stats_and_views(client, users, listing):
    _, admin_headers = users["admin"]
    stats = client.get("/api/admin/stats", headers=admin_headers).json()
    assert stats["users"] == {"total": 3, "admins": 1, "regular": 2}
    assert stats["properties"] == {"total": 1}
    assert stats["bookings"] == {"total": 0, "revenue": 0}
    assert stats["facilities"]["total"] == 6

    props = client.get("/api/admin/properties", headers=admin_headers).json()
    assert props[0]["owner_email"] == "host@example.com"
    assert props[0]["booking_count"] == 0
    assert client.get("/api/admin/bookings", headers=admin_headers).json() == []


def test_admin_status_rules(client, users):
    admin, admin_headers = users["admin"]
    host, _ = users["host"]

    r = client.put(f"/api/admin/users/{admin['id']}/admin-status", json={"is_admin": False}, headers=admin_headers)
    assert r.status_code == 409

    r = client.put(f"/api/admin/users/{host['id']}/admin-status", json={"is_admin": "yes"}, headers=admin_headers)
    assert r.status_code == 400

    r = client.put("/api/admin/users/999/admin-status", json={"is_admin": True}, headers=admin_headers)
    assert r.status_code == 404

    r = client.put(f"/api/admin/users/{host['id']}/admin-status", json={"is_admin": True}, headers=admin_headers)
    assert r.json()["is_admin"] is True
    r = client.put(f"/api/admin/users/{admin['id']}/admin-status", json={"is_admin": False}, headers=admin_headers)
    assert r.status_code == 200


def test_admin_facilities(client, users):
    _, admin_headers = users["admin"]
    r = client.post("/api/admin/facilities", json={"facility_type": "Gym"}, headers=admin_headers)
    assert r.status_code == 201
    gym_id = r.json()["id"]
    assert any(f["name"] == "Gym" for f in client.get("/api/admin/facilities", headers=admin_headers).json())
    assert client.delete(f"/api/admin/facilities/{gym_id}", headers=admin_headers).status_code == 200
