from datetime import timedelta

from cinegate.application.services.access_code_service import generate_access_code
from cinegate.config import get_settings
from cinegate.core.clock import utcnow
from conftest import ADMIN_AUTH


def test_admin_login(client):
    response = client.post("/api/admin-login", json={"username": "admin", "password": "admin-secret"})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Admin authentication successful",
        "expiresIn": 4 * 3600,
    }


def test_admin_login_rejects_and_throttles(client):
    for _ in range(5):
        response = client.post("/api/admin-login", json={"username": "admin", "password": "guess"})
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid credentials"

    response = client.post("/api/admin-login", json={"username": "admin", "password": "admin-secret"})
    assert response.status_code == 429


def test_admin_login_unconfigured(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "ADMIN_PASSWORD", "")

    response = client.post("/api/admin-login", json={"username": "admin", "password": "x"})

    assert response.status_code == 500
    assert response.json()["error"] == "Server configuration error"


def test_admin_routes_require_basic_auth(client):
    assert client.get("/api/admin/users").status_code == 401
    assert client.get("/api/admin/users", auth=("admin", "wrong")).status_code == 401
    assert client.get("/api/admin/users", auth=ADMIN_AUTH).status_code == 200


def test_list_users(client, make_user):
    make_user("alice")

    response = client.get("/api/admin/users", auth=ADMIN_AUTH)

    assert response.headers["cache-control"].startswith("no-store")
    [user] = response.json()["users"]
    assert user["username"] == "alice"
    assert user["isGuest"] is False
    assert user["isActive"] is True
    assert user["totalWatched"] == 0
    assert user["totalFavorites"] == 0


def test_generate_and_list_access_codes(client, make_user, codes):
    user = make_user("alice")
    generate_access_code(codes, user.id)

    issued = client.post("/api/admin/generate-access-code", auth=ADMIN_AUTH)
    assert issued.status_code == 200

    listing = client.get("/api/admin/access-codes", auth=ADMIN_AUTH).json()["accessCodes"]
    creators = {row["code"]: row["createdBy"] for row in listing}
    assert creators[issued.json()["code"]] == "Admin"
    assert "alice" in creators.values()
    assert {row["status"] for row in listing} == {"active"}


def test_codes_from_removed_users_show_unknown_creator(client, codes):
    generate_access_code(codes, "deleted-user-id")

    [row] = client.get("/api/admin/access-codes", auth=ADMIN_AUTH).json()["accessCodes"]

    assert row["createdBy"] == "Unknown User"


def test_revoke_access_code(client, codes):
    issued = generate_access_code(codes, "admin")
    code_id, code = issued.id, issued.code

    response = client.post("/api/admin/revoke-access-code", json={"codeId": code_id}, auth=ADMIN_AUTH)
    assert response.status_code == 200
    assert response.json()["message"] == "Access code revoked successfully"

    verify = client.post("/api/verify-access-code", json={"code": code})
    assert verify.status_code == 401
    assert verify.json()["error"] == "Invalid or expired access code"

    again = client.post("/api/admin/revoke-access-code", json={"codeId": code_id}, auth=ADMIN_AUTH)
    assert again.status_code == 200

    missing = client.post("/api/admin/revoke-access-code", json={}, auth=ADMIN_AUTH)
    assert missing.status_code == 400
    assert missing.json()["error"] == "Code ID is required"

    unknown = client.post("/api/admin/revoke-access-code", json={"codeId": 424242}, auth=ADMIN_AUTH)
    assert unknown.status_code == 404


def test_stats(client, codes, make_user):
    make_user("alice")
    used = generate_access_code(codes, "owner-used")
    generate_access_code(codes, "owner-active")
    generate_access_code(codes, "owner-expired", now=utcnow() - timedelta(hours=25))
    revoked = generate_access_code(codes, "owner-revoked")
    used_code, revoked_id = used.code, revoked.id

    client.post("/api/verify-access-code", json={"code": used_code})
    client.post("/api/admin/revoke-access-code", json={"codeId": revoked_id}, auth=ADMIN_AUTH)

    stats = client.get("/api/admin/stats", auth=ADMIN_AUTH).json()["stats"]

    assert stats["totalUsers"] == 1
    assert stats["activeUsers"] == 1
    assert stats["totalAccessCodes"] == 4
    assert stats["activeAccessCodes"] == 1
    assert stats["usedAccessCodes"] == 1
    assert stats["expiredAccessCodes"] == 1
    assert stats["revokedAccessCodes"] == 1


def test_remove_user_cascades(client, make_user, login, codes):
    user = make_user("alice")
    user_id = user.id
    login()
    client.post("/api/favorites/toggle", json={"tmdbId": 603, "title": "The Matrix"})
    client.post("/api/watch-history", json={"tmdbId": 603, "title": "The Matrix", "runtime": 136})
    own_code = client.post("/api/generate-access-code", json={}).json()["code"]

    response = client.post("/api/admin/remove-user", json={"userId": user_id}, auth=ADMIN_AUTH)

    assert response.status_code == 200
    assert response.json()["message"] == 'User "alice" removed successfully'
    assert codes.get_by_code(own_code) is None
    assert client.get("/api/auth/me").status_code == 401
    stats = client.get("/api/admin/stats", auth=ADMIN_AUTH).json()["stats"]
    assert stats["totalUsers"] == 0
    assert stats["totalFavorites"] == 0
    assert stats["totalWatchTime"] == 0

    again = client.post("/api/admin/remove-user", json={"userId": user_id}, auth=ADMIN_AUTH)
    assert again.status_code == 404


def test_watch_totals_use_default_runtimes(client, make_user, login):
    make_user("alice")
    make_user("bob")

    login("alice")
    client.post("/api/watch-history", json={"tmdbId": 1, "title": "Heat"})
    client.post("/api/watch-history", json={"tmdbId": 2, "title": "The Wire", "mediaType": "tv", "runtime": 0})
    client.post("/api/watch-history", json={"tmdbId": 3, "title": "The Matrix", "runtime": 136})
    login("bob")
    client.post("/api/watch-history", json={"tmdbId": 4, "title": "Lost", "mediaType": "tv"})

    stats = client.get("/api/admin/stats", auth=ADMIN_AUTH).json()["stats"]
    users = {row["username"]: row for row in client.get("/api/admin/users", auth=ADMIN_AUTH).json()["users"]}

    # 120 + 45 + 136 + 45 minutes
    assert stats["totalWatchTime"] == 6
    assert stats["totalMoviesWatched"] == 2
    assert stats["totalTvWatched"] == 2
    assert users["alice"]["totalWatched"] == 3
    assert users["bob"]["totalWatched"] == 1
