"""Tests for the PromptLibrary facade."""

import logging

import pytest

from promptlib import PromptLibrary
from promptlib.errors import NotFoundError, ValidationError
from promptlib.storage import SupabaseStorage


class TestInit:
    def test_user_from_storage(self, storage):
        assert PromptLibrary(storage=storage).user_id == "user-1"

    def test_user_from_environment(self, monkeypatch):
        monkeypatch.setenv("PROMPTLIB_USER_ID", "env-user")
        lib = PromptLibrary(supabase_url="https://x.supabase.co", supabase_key="k")
        assert lib.user_id == "env-user"
        assert isinstance(lib.storage, SupabaseStorage)
        assert lib.storage.user_id == "env-user"

    def test_user_required(self):
        with pytest.raises(ValidationError):
            PromptLibrary()

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            PromptLibrary(user_id="   ")


class TestCategories:
    def test_create_generates_slug(self, lib):
        category = lib.create_category("Produção Musical", icon="🎚")
        assert category.slug == "producao-musical"
        assert category.icon == "🎚"

    def test_create_requires_name(self, lib):
        with pytest.raises(ValidationError):
            lib.create_category("  ")

    def test_update(self, lib, category_id):
        assert lib.update_category(category_id, name=" Music ").name == "Music"

    def test_delete_missing(self, lib):
        with pytest.raises(NotFoundError):
            lib.delete_category("nope")

    def test_resolve_by_id_or_slug(self, lib, category_id):
        assert lib.resolve_category(category_id).slug == "musica"
        assert lib.resolve_category("musica").id == category_id
        with pytest.raises(NotFoundError):
            lib.resolve_category("unknown")


class TestGroups:
    def test_sort_order_continues_from_max(self, lib, fake_client, category_id):
        for name, order in (("A", 1), ("B", 5)):
            fake_client.insert_row(
                "subcategory_groups",
                {"name": name, "slug": name.lower(), "category_id": category_id, "sort_order": order},
            )

        group = lib.create_group(category_id, "Nova")

        assert group.sort_order == 6
        assert group.slug == "nova"
        assert group.created_by == "user-1"

    def test_first_group_gets_one(self, lib, category_id):
        assert lib.create_group(category_id, "Primeiro").sort_order == 1

    def test_explicit_sort_order(self, lib, category_id):
        assert lib.create_group(category_id, "X", sort_order=9).sort_order == 9

    def test_update_and_delete(self, lib, category_id):
        group = lib.create_group(category_id, "Old")
        assert lib.update_group(group.id, name="New").name == "New"
        lib.delete_group(group.id)
        with pytest.raises(NotFoundError):
            lib.delete_group(group.id)

    def test_subcategories(self, lib, category_id):
        group = lib.create_group(category_id, "G")
        for sub in ("Pop", "Rock", "Pop"):
            lib.create_prompt("t", f"c {sub}", category_id, subcategory_group_id=group.id, subcategory=sub)

        assert lib.subcategories(group.id) == [
            {"name": "Pop", "count": 2},
            {"name": "Rock", "count": 1},
        ]
        assert [s["name"] for s in lib.subcategories(group.id, order="name")] == ["Pop", "Rock"]


class TestPrompts:
    def test_create(self, lib, category_id):
        prompt = lib.create_prompt(
            " Title ", "Body", category_id, subcategory="  ", tags=["a", " a ", "", "b"], rating=4
        )
        assert prompt.title == "Title"
        assert prompt.subcategory is None
        assert prompt.tags == ["a", "b"]
        assert prompt.rating == 4.0
        assert prompt.usage_count == 0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"title": ""},
            {"title": "x" * 201},
            {"content": "   "},
            {"rating": 6},
            {"rating": -1},
            {"rating": "high"},
        ],
    )
    def test_create_validation(self, lib, category_id, kwargs):
        fields = {"title": "T", "content": "C", "category_id": category_id}
        fields.update(kwargs)
        with pytest.raises(ValidationError):
            lib.create_prompt(**fields)

    def test_list_is_meritocratic(self, lib, category_id):
        low = lib.create_prompt("low", "1", category_id, rating=1)
        high = lib.create_prompt("high", "2", category_id, rating=5)
        mid = lib.create_prompt("mid", "3", category_id, rating=3)

        assert [p.id for p in lib.list_prompts()] == [high.id, mid.id, low.id]
        assert [p.id for p in lib.list_prompts(limit=2)] == [high.id, mid.id]

    def test_list_by_category_slug(self, lib, category_id, other_category_id):
        lib.create_prompt("music", "1", category_id)
        lib.create_prompt("essay", "2", other_category_id)

        assert [p.title for p in lib.list_prompts(category_slug="escrita")] == ["essay"]

    def test_unknown_slug_does_not_filter(self, lib, category_id, other_category_id, caplog):
        lib.create_prompt("music", "1", category_id)
        lib.create_prompt("essay", "2", other_category_id)

        with caplog.at_level(logging.WARNING, logger="promptlib.library"):
            prompts = lib.list_prompts(category_slug="missing")

        assert len(prompts) == 2
        assert "Unknown category slug" in caplog.text

    def test_search_is_sanitized(self, lib, category_id):
        lib.create_prompt("Reggae chorus", "body", category_id)
        lib.create_prompt("Other", "body", category_id)

        assert [p.title for p in lib.list_prompts(search="reggae,")] == ["Reggae chorus"]
        assert len(lib.list_prompts(search="x" * 101)) == 2

    def test_favorites_only(self, lib, category_id):
        fav = lib.create_prompt("fav", "1", category_id)
        lib.create_prompt("other", "2", category_id)
        lib.add_favorite(fav.id)

        assert [p.id for p in lib.list_prompts(favorites_only=True)] == [fav.id]

    def test_update(self, lib, category_id):
        prompt = lib.create_prompt("T", "C", category_id)
        updated = lib.update_prompt(prompt.id, title="New", tags=["x", "x"])
        assert updated.title == "New"
        assert updated.tags == ["x"]
        assert updated.updated_at != prompt.updated_at

    def test_update_rejects_unknown_fields(self, lib, category_id):
        prompt = lib.create_prompt("T", "C", category_id)
        with pytest.raises(ValidationError, match="usage_count"):
            lib.update_prompt(prompt.id, usage_count=100)

    def test_get_missing(self, lib):
        with pytest.raises(NotFoundError):
            lib.get_prompt("missing")

    def test_record_copy(self, lib, category_id, isolated_home):
        prompt = lib.create_prompt("T", "C", category_id)

        once = lib.record_copy(prompt.id)
        twice = lib.record_copy(prompt.id)

        assert once.usage_count == 1
        assert twice.usage_count == 2
        assert twice.last_used_at is not None
        log = next((isolated_home / "logs").glob("library-events-*.log")).read_text(encoding="utf-8")
        assert log.count("| copy |") == 2
        assert f"id={prompt.id[:8]}..." in log

    def test_rate(self, lib, category_id):
        prompt = lib.create_prompt("T", "C", category_id)
        assert lib.rate_prompt(prompt.id, 3.5).rating == 3.5
        with pytest.raises(ValidationError):
            lib.rate_prompt(prompt.id, 5.5)

    def test_delete(self, lib, category_id):
        a = lib.create_prompt("a", "1", category_id)
        assert lib.delete_prompts([a.id, "missing"]) == 1
        assert lib.all_prompts() == []


class TestFavorites:
    def test_add_requires_existing_prompt(self, lib):
        with pytest.raises(NotFoundError):
            lib.add_favorite("missing")

    def test_toggle(self, lib, category_id):
        prompt = lib.create_prompt("T", "C", category_id)
        assert lib.toggle_favorite(prompt.id) is True
        assert lib.favorite_ids() == [prompt.id]
        assert lib.toggle_favorite(prompt.id) is False
        assert lib.favorite_ids() == []

    def test_remove(self, lib, category_id):
        prompt = lib.create_prompt("T", "C", category_id)
        lib.add_favorite(prompt.id)
        assert lib.remove_favorite(prompt.id) is True
        assert lib.remove_favorite(prompt.id) is False


class TestProjects:
    def test_create_and_list(self, lib):
        project = lib.create_project("  Album ", "  ")
        assert project.name == "Album"
        assert project.description is None
        assert [p.id for p in lib.list_projects()] == [project.id]

    def test_create_requires_name(self, lib):
        with pytest.raises(ValidationError):
            lib.create_project("")

    def test_add_twice_rejected(self, lib, category_id):
        prompt = lib.create_prompt("T", "C", category_id)
        project = lib.create_project("Album")
        lib.add_to_project(project.id, prompt.id)

        with pytest.raises(ValidationError, match="already in project"):
            lib.add_to_project(project.id, prompt.id)

    def test_add_many_ignores_duplicates(self, lib, fake_client, category_id):
        a = lib.create_prompt("a", "1", category_id)
        b = lib.create_prompt("b", "2", category_id)
        project = lib.create_project("Album")
        lib.add_to_project(project.id, a.id)

        assert lib.add_many_to_project(project.id, [a.id, b.id, b.id]) == 2
        assert len(fake_client.tables["project_prompts"]) == 2
        assert {e.prompt_id for e in lib.project_prompts(project.id)} == {a.id, b.id}

    def test_unknown_project(self, lib):
        with pytest.raises(NotFoundError):
            lib.project_prompts("missing")
        with pytest.raises(NotFoundError):
            lib.add_to_project("missing", "p")
        with pytest.raises(NotFoundError):
            lib.delete_project("missing")

    def test_other_users_prompts_cannot_be_added(self, lib, fake_client, category_id):
        other = PromptLibrary(storage=SupabaseStorage("user-2", client=fake_client))
        secret = other.create_prompt("Theirs", "SECRET of user-2", category_id)
        mine = lib.create_prompt("Mine", "Mine", category_id)
        project = lib.create_project("Album")

        assert lib.add_many_to_project(project.id, [secret.id, mine.id]) == 1
        with pytest.raises(NotFoundError):
            lib.add_to_project(project.id, secret.id)
        assert [e.prompt.content for e in lib.project_prompts(project.id)] == ["Mine"]

    def test_foreign_entries_never_listed(self, lib, fake_client, category_id):
        other = PromptLibrary(storage=SupabaseStorage("user-2", client=fake_client))
        secret = other.create_prompt("Theirs", "SECRET of user-2", category_id)
        project = lib.create_project("Album")
        fake_client.tables["project_prompts"].append(
            {"id": "pp-foreign", "project_id": project.id, "prompt_id": secret.id}
        )

        assert lib.project_prompts(project.id) == []

    def test_other_users_project_hidden(self, lib, fake_client):
        other = PromptLibrary(storage=SupabaseStorage("user-2", client=fake_client))
        project = other.create_project("Theirs")
        with pytest.raises(NotFoundError):
            lib.get_project(project.id)

    def test_remove_from_project(self, lib, category_id):
        prompt = lib.create_prompt("T", "C", category_id)
        project = lib.create_project("Album")
        lib.add_to_project(project.id, prompt.id)

        lib.remove_from_project(project.id, prompt.id)
        with pytest.raises(NotFoundError):
            lib.remove_from_project(project.id, prompt.id)

    def test_update(self, lib):
        project = lib.create_project("Album")
        assert lib.update_project(project.id, description="Songs").description == "Songs"
