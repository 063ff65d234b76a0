"""Tests for bearer-token authentication and the service endpoints."""

import pytest


class TestRootAndHealth:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["service"] == "promptlib-backend"

    def test_health_connected(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": "connected"}

    def test_health_degraded(self, client, fake_db):
        fake_db.fail_on("categories", "select")
        data = client.get("/health").json()
        assert data["status"] == "degraded"
        assert data["database"].startswith("error:")


class TestAuthentication:
    def test_missing_header(self, client):
        response = client.get("/prompts")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_garbage_token(self, client):
        response = client.get("/prompts", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"

    def test_expired_token(self, client, make_token):
        token = make_token(expires_in=-60)
        response = client.get("/prompts", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_wrong_audience(self, client, make_token):
        token = make_token(audience="anon")
        response = client.get("/prompts", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_wrong_signature(self, client):
        from jose import jwt

        token = jwt.encode({"sub": "u", "aud": "authenticated"}, "some-other-secret", algorithm="HS256")
        response = client.get("/prompts", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_missing_subject(self, client, make_token):
        token = make_token(user_id=None)
        response = client.get("/prompts", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token payload"

    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", "/categories"),
            ("get", "/favorites"),
            ("get", "/projects"),
            ("get", "/exports/csv"),
            ("post", "/imports/csv"),
        ],
    )
    def test_every_route_requires_auth(self, client, method, path):
        response = getattr(client, method)(path)
        assert response.status_code in (401, 422)
        if method == "get":
            assert response.status_code == 401

    def test_valid_token(self, client, auth_headers):
        response = client.get("/prompts", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == []
