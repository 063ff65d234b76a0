"""
Pytest fixtures and test configuration for promptlib tests.
"""

from typing import Any, Dict

import pytest

from promptlib import PromptLibrary
from promptlib.storage import SupabaseStorage
from promptlib.testing import FakeSupabaseClient
from promptlib.types import Prompt

USER_ID = "user-1"
OTHER_USER_ID = "user-2"
CATEGORY_ID = "11111111-1111-4111-8111-111111111111"
OTHER_CATEGORY_ID = "22222222-2222-4222-8222-222222222222"

_ENV_VARS = [
    "PROMPTLIB_USER_ID",
    "PROMPTLIB_SUPABASE_URL",
    "PROMPTLIB_SUPABASE_KEY",
    "PROMPTLIB_ACCESS_TOKEN",
    "PROMPTLIB_LOG_LEVEL",
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "SUPABASE_ANON_KEY",
]


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep credentials and logs out of the real ~/.promptlib."""
    home = tmp_path / "promptlib-home"
    monkeypatch.setenv("PROMPTLIB_DATA_DIR", str(home))
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def fake_client():
    """Fake supabase client seeded with two categories and no prompts."""
    return FakeSupabaseClient(
        {
            "categories": [
                {
                    "id": CATEGORY_ID,
                    "name": "Música",
                    "slug": "musica",
                    "icon": "🎵",
                    "color": "#ff0066",
                    "sort_order": 1,
                },
                {
                    "id": OTHER_CATEGORY_ID,
                    "name": "Escrita",
                    "slug": "escrita",
                    "sort_order": 2,
                },
            ],
            "subcategory_groups": [],
            "prompts": [],
            "favorites": [],
            "projects": [],
            "project_prompts": [],
        }
    )


@pytest.fixture
def storage(fake_client):
    return SupabaseStorage(USER_ID, client=fake_client)


@pytest.fixture
def lib(storage):
    return PromptLibrary(storage=storage)


@pytest.fixture
def make_prompt():
    """Factory for Prompt records that never touch storage."""
    counter = {"n": 0}

    def _make(**overrides: Any) -> Prompt:
        counter["n"] += 1
        fields: Dict[str, Any] = {
            "id": f"p{counter['n']}",
            "user_id": USER_ID,
            "title": f"Prompt {counter['n']}",
            "content": f"Content {counter['n']}",
            "rating": 0.0,
            "usage_count": 0,
            "legacy_score": 0.0,
        }
        fields.update(overrides)
        return Prompt(**fields)

    return _make


@pytest.fixture
def seed_prompt(storage):
    """Insert a prompt through storage and return it."""

    def _seed(**fields: Any) -> Prompt:
        data = {
            "title": "Seeded prompt",
            "content": "Seeded content",
            "category_id": CATEGORY_ID,
            "rating": 0.0,
        }
        data.update(fields)
        return storage.insert_prompt(data)

    return _seed


@pytest.fixture
def category_id():
    return CATEGORY_ID


@pytest.fixture
def other_category_id():
    return OTHER_CATEGORY_ID
