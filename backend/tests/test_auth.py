"""
Authentication tests.

Verifies:
- Signup validation (400), duplicate detection (409) and token issuance
- Login by email: 200 on success, 404 unknown email, 401 wrong password
- Token verification: missing, tampered and expired tokens are rejected
"""

from datetime import timedelta

import pytest

from stockroom.services import token_service
from stockroom.services.token_service import Claims, TokenError
from tests.conftest import DEFAULT_PASSWORD, auth_headers


# =============================================================================
# SIGNUP
# =============================================================================


class TestSignup:

    def test_signup_creates_user_with_user_role(self, client):
        resp = client.post("/auth/signup", json={
            "username": "newbie",
            "email": "newbie@example.com",
            "password": "longenough",
        })
        assert resp.status_code == 201

        data = resp.get_json()
        assert data["message"] == "User created successfully"
        assert data["user"]["username"] == "newbie"
        assert data["user"]["role"] == "user"
        assert "password" not in data["user"]
        assert "password_hash" not in data["user"]

        claims = token_service.verify_token(data["token"])
        assert claims == Claims(user_id=data["user"]["id"], role="user")

    @pytest.mark.parametrize(
        "payload,message",
        [
            ({"username": "ab", "email": "a@example.com", "password": "longenough"},
             "Username must be at least 3 characters"),
            ({"username": "abc", "email": "not-an-email", "password": "longenough"},
             "Invalid email format"),
            ({"username": "abc", "email": "a@example.com", "password": "short"},
             "Password must be at least 8 characters"),
            ({}, "Username must be at least 3 characters"),
        ],
    )
    def test_signup_validation(self, client, payload, message):
        resp = client.post("/auth/signup", json=payload)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == message

    def test_password_longer_than_bcrypt_limit_is_400(self, client):
        resp = client.post("/auth/signup", json={
            "username": "longpass",
            "email": "longpass@example.com",
            "password": "a" * 80,
        })
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Password must be at most 72 bytes"

    def test_password_at_bcrypt_limit_is_accepted(self, client):
        resp = client.post("/auth/signup", json={
            "username": "maxpass",
            "email": "maxpass@example.com",
            "password": "a" * 72,
        })
        assert resp.status_code == 201

    @pytest.mark.parametrize(
        "payload",
        [
            {"username": 12345, "email": "a@example.com", "password": "longenough"},
            {"username": "abc", "email": ["a@example.com"], "password": "longenough"},
            {"username": "abc", "email": "a@example.com", "password": 123456789},
        ],
        ids=["int-username", "list-email", "int-password"],
    )
    def test_non_string_fields_are_400(self, client, payload):
        resp = client.post("/auth/signup", json=payload)
        assert resp.status_code == 400
        assert resp.get_json()["error"].endswith("must be a string")

    def test_non_object_body_is_400(self, client):
        resp = client.post("/auth/signup", json=["abc", "a@example.com"])
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Invalid JSON payload"}

    def test_duplicate_email_reports_email(self, client, regular_user):
        resp = client.post("/auth/signup", json={
            "username": "someoneelse",
            "email": regular_user.email,
            "password": "longenough",
        })
        assert resp.status_code == 409
        assert resp.get_json() == {"error": "email already exists", "field": "email"}

    def test_duplicate_username_reports_username(self, client, regular_user):
        resp = client.post("/auth/signup", json={
            "username": regular_user.username,
            "email": "fresh@example.com",
            "password": "longenough",
        })
        assert resp.status_code == 409
        assert resp.get_json()["field"] == "username"

    def test_email_reported_first_when_both_clash(self, client, regular_user):
        resp = client.post("/auth/signup", json={
            "username": regular_user.username,
            "email": regular_user.email,
            "password": "longenough",
        })
        assert resp.status_code == 409
        assert resp.get_json()["field"] == "email"


# =============================================================================
# LOGIN
# =============================================================================


class TestLogin:

    def test_login_returns_token_and_user(self, client, admin_user):
        resp = client.post("/auth/login", json={
            "email": admin_user.email,
            "password": DEFAULT_PASSWORD,
        })
        assert resp.status_code == 200

        data = resp.get_json()
        assert data["user"] == {"id": admin_user.id, "name": "admin", "role": "admin"}
        assert token_service.verify_token(data["token"]).role == "admin"

    def test_unknown_email_is_404(self, client, admin_user):
        resp = client.post("/auth/login", json={
            "email": "nobody@example.com",
            "password": DEFAULT_PASSWORD,
        })
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "User not found"

    def test_wrong_password_is_401(self, client, admin_user):
        resp = client.post("/auth/login", json={
            "email": admin_user.email,
            "password": "WrongPassword!",
        })
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid password"

    def test_missing_fields_is_400(self, client):
        resp = client.post("/auth/login", json={"email": "admin@stockroom.com"})
        assert resp.status_code == 400

    @pytest.mark.parametrize(
        "payload",
        [
            {"email": 5, "password": DEFAULT_PASSWORD},
            {"email": "admin@stockroom.com", "password": 123456789},
        ],
        ids=["int-email", "int-password"],
    )
    def test_non_string_fields_are_400(self, client, admin_user, payload):
        resp = client.post("/auth/login", json=payload)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Email and password must be strings"

    def test_overlong_password_is_401(self, client, admin_user):
        resp = client.post("/auth/login", json={
            "email": admin_user.email,
            "password": "a" * 100,
        })
        assert resp.status_code == 401


# =============================================================================
# TOKENS
# =============================================================================


class TestTokens:

    def test_me_returns_profile_and_claims(self, client, regular_user, user_headers):
        resp = client.get("/auth/me", headers=user_headers)
        assert resp.status_code == 200

        data = resp.get_json()
        assert data["user"]["email"] == regular_user.email
        assert data["claims"] == {"id": regular_user.id, "role": "user"}

    def test_missing_header_is_401(self, client):
        resp = client.get("/auth/me")
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Access denied"

    def test_non_bearer_header_is_401(self, client):
        resp = client.get("/auth/me", headers={"Authorization": "Basic abc"})
        assert resp.status_code == 401

    def test_tampered_token_is_401(self, client, user_headers):
        token = user_headers["Authorization"].split(" ", 1)[1]
        resp = client.get("/auth/me", headers=auth_headers(token[:-2] + "xx"))
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid token"

    def test_expired_token_is_401(self, client, user_claims):
        token = token_service.issue_token(user_claims, expires_in=timedelta(seconds=-5))
        resp = client.get("/auth/me", headers=auth_headers(token))
        assert resp.status_code == 401

    def test_token_signed_with_other_secret_is_rejected(self, app, user_claims):
        token = token_service.issue_token(user_claims)
        app.config["JWT_SECRET"] = "rotated"
        try:
            with pytest.raises(TokenError):
                token_service.verify_token(token)
        finally:
            app.config["JWT_SECRET"] = "test-jwt-secret"

    def test_token_expires_after_configured_lifetime(self, app, user_claims):
        from jose import jwt

        token = token_service.issue_token(user_claims)
        payload = jwt.get_unverified_claims(token)
        assert payload["exp"] - payload["iat"] == 60 * 60
