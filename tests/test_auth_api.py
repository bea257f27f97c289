"""Account routes and authentication middleware tests."""

from datetime import timedelta

import pytest

from fundspark.core.security import TokenService, token_service

PASSWORD = "secret123"


def _register(client, username="ada", role="creator"):
    return client.post(
        "/auth/register",
        json={"username": username, "email": f"{username}@example.com", "password": PASSWORD, "role": role},
    )


class TestRegisterAndLogin:
    def test_register_returns_user_and_tokens(self, client):
        response = _register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["user"]["role"] == "creator"
        assert "passwordHash" not in body["data"]["user"]
        assert body["data"]["token"]
        assert body["data"]["refreshToken"]

    def test_duplicate_email(self, client):
        _register(client)
        response = _register(client)
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_admin_cannot_self_register(self, client):
        response = _register(client, role="admin")
        assert response.status_code == 400

    def test_short_password_rejected(self, client):
        response = client.post(
            "/auth/register",
            json={"username": "bob", "email": "bob@example.com", "password": "123"},
        )
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_login(self, client):
        _register(client)
        response = client.post("/auth/login", json={"email": "ada@example.com", "password": PASSWORD})
        assert response.status_code == 200
        assert response.json()["data"]["user"]["username"] == "ada"

    def test_login_wrong_password(self, client):
        _register(client)
        response = client.post("/auth/login", json={"email": "ada@example.com", "password": "nope123"})
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid credentials"}


class TestAuthenticate:
    def test_me(self, client, backer, auth_headers):
        response = client.get("/auth/me", headers=auth_headers(backer))
        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == backer.id

    def test_missing_token(self, client):
        response = client.get("/auth/me")
        assert response.status_code == 401
        assert response.json()["message"] == "Access denied. No token provided."

    def test_malformed_header(self, client, backer, auth_headers):
        token = auth_headers(backer)["Authorization"].split()[1]
        response = client.get("/auth/me", headers={"Authorization": f"Token {token}"})
        assert response.status_code == 401

    def test_expired_token(self, client, backer):
        expired = TokenService(access_token_expiry=timedelta(seconds=-5)).create_access_token(
            backer.id, backer.email, backer.role
        )
        response = client.get("/auth/me", headers={"Authorization": f"Bearer {expired}"})
        assert response.status_code == 401

    def test_user_no_longer_exists(self, client):
        token = token_service.create_access_token(9999, "ghost@example.com", "backer")
        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert "User not found" in response.json()["message"]

    def test_refresh_token_is_not_an_access_token(self, client, backer):
        refresh = token_service.create_refresh_token(backer.id, backer.email, backer.role)
        response = client.get("/auth/me", headers={"Authorization": f"Bearer {refresh}"})
        assert response.status_code == 401


class TestOptionalAuth:
    def test_invalid_token_degrades_to_anonymous(self, client, creator, make_campaign):
        campaign = make_campaign(creator)
        response = client.get(
            f"/campaigns/{campaign.id}", headers={"Authorization": "Bearer garbage"}
        )
        assert response.status_code == 200
        assert response.json()["data"]["isBookmarked"] is False


class TestAccountMaintenance:
    def test_refresh(self, client, backer):
        refresh = token_service.create_refresh_token(backer.id, backer.email, backer.role)
        response = client.post("/auth/refresh", json={"refreshToken": refresh})
        assert response.status_code == 200
        claims = token_service.verify_token(response.json()["data"]["token"])
        assert claims.id == backer.id

    def test_update_profile(self, client, backer, auth_headers):
        response = client.put(
            "/auth/profile", json={"bio": "I back board games"}, headers=auth_headers(backer)
        )
        assert response.status_code == 200
        assert response.json()["data"]["user"]["bio"] == "I back board games"

    @pytest.mark.parametrize("username", [None, "   "])
    def test_update_profile_rejects_empty_username(self, client, backer, auth_headers, username):
        response = client.put(
            "/auth/profile", json={"username": username}, headers=auth_headers(backer)
        )

        assert response.status_code == 400
        assert response.json()["message"] == "username cannot be empty"
        me = client.get("/auth/me", headers=auth_headers(backer)).json()["data"]["user"]
        assert me["username"] == backer.username

    def test_change_password(self, client, backer, auth_headers):
        response = client.put(
            "/auth/change-password",
            json={"currentPassword": PASSWORD, "newPassword": "brand-new-pass"},
            headers=auth_headers(backer),
        )
        assert response.status_code == 200
        login = client.post(
            "/auth/login", json={"email": backer.email, "password": "brand-new-pass"}
        )
        assert login.status_code == 200

    def test_change_password_wrong_current(self, client, backer, auth_headers):
        response = client.put(
            "/auth/change-password",
            json={"currentPassword": "wrong-one", "newPassword": "brand-new-pass"},
            headers=auth_headers(backer),
        )
        assert response.status_code == 401
