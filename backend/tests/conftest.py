"""Pytest configuration and fixtures."""

import os
import secrets
import sys
import time

import pytest

# Generate a unique test secret for this test run to prevent token forgery
_TEST_JWT_SECRET = f"test-only-{secrets.token_urlsafe(32)}"

# For unit tests, set mock values ONLY if not running integration tests
if not os.environ.get("RUN_INTEGRATION"):
    os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
    os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
    os.environ.setdefault("SUPABASE_JWT_SECRET", _TEST_JWT_SECRET)
else:
    # For integration tests, load from .env
    from pathlib import Path

    from dotenv import load_dotenv

    env_path = Path(__file__).parent.parent / ".env"

    # Safety check: require explicit confirmation for integration tests
    if not os.environ.get("CONFIRM_INTEGRATION_CREDENTIALS"):
        print("\n" + "=" * 70, file=sys.stderr)
        print(
            "⚠️  WARNING: Integration tests will use REAL credentials from .env",
            file=sys.stderr,
        )
        print("   Imports would write to the real prompt library.", file=sys.stderr)
        print("   Set CONFIRM_INTEGRATION_CREDENTIALS=yes to proceed.", file=sys.stderr)
        print("=" * 70 + "\n", file=sys.stderr)
        pytest.exit(
            "Integration tests require CONFIRM_INTEGRATION_CREDENTIALS=yes",
            returncode=1,
        )

    print("\n⚠️  Running integration tests with REAL credentials\n", file=sys.stderr)
    load_dotenv(env_path, override=True)

from app import database  # noqa: E402
from app.config import get_settings  # noqa: E402
from app.database import get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.rate_limit import limiter  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402

from promptlib.testing import FakeSupabaseClient  # noqa: E402

# Clearly fake ids that cannot collide with production users
TEST_USER_ID = "usr_TEST_ONLY_000001"
OTHER_USER_ID = "usr_TEST_ONLY_000002"
TEST_CATEGORY_ID = "33333333-3333-4333-8333-333333333333"


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep library event logs out of the real home directory."""
    monkeypatch.setenv("PROMPTLIB_DATA_DIR", str(tmp_path / "promptlib-home"))
    return tmp_path / "promptlib-home"


@pytest.fixture
def fake_db():
    """In-memory database seeded with one category."""
    return FakeSupabaseClient(
        {
            "categories": [
                {"id": TEST_CATEGORY_ID, "name": "Música", "slug": "musica", "sort_order": 1}
            ],
            "subcategory_groups": [],
            "prompts": [],
            "favorites": [],
            "projects": [],
            "project_prompts": [],
        }
    )


@pytest.fixture
def client(fake_db, monkeypatch):
    """Create a test client backed by the fake database."""
    monkeypatch.setattr(database, "_supabase_client", fake_db)
    app.dependency_overrides[get_db] = lambda: fake_db
    limiter.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_token():
    """Mint Supabase-style access tokens signed with the test secret."""

    def _make(user_id=TEST_USER_ID, audience="authenticated", expires_in=3600, **claims):
        settings = get_settings()
        payload = {"aud": audience, "exp": int(time.time()) + expires_in, "role": "authenticated"}
        if user_id is not None:
            payload["sub"] = user_id
        payload.update(claims)
        return jwt.encode(payload, settings.supabase_jwt_secret, algorithm=settings.jwt_algorithm)

    return _make


@pytest.fixture
def auth_headers(make_token):
    """Create auth headers with a test token."""
    return {"Authorization": f"Bearer {make_token(email='test@example.com')}"}


@pytest.fixture
def other_headers(make_token):
    return {"Authorization": f"Bearer {make_token(OTHER_USER_ID)}"}


@pytest.fixture
def category_id():
    return TEST_CATEGORY_ID


@pytest.fixture
def create_prompt(client, auth_headers):
    """POST a prompt as the test user and return the response body."""

    def _create(**fields):
        body = {"title": "Title", "content": "Content", "category_id": TEST_CATEGORY_ID}
        body.update(fields)
        response = client.post("/prompts", json=body, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
