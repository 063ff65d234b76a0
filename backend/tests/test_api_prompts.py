"""Tests for the prompt and favorite routes."""


class TestPromptRoutes:
    def test_create(self, client, auth_headers, fake_db, category_id):
        response = client.post(
            "/prompts",
            json={
                "title": "Chorus",
                "content": "Write a chorus",
                "category_id": category_id,
                "tags": ["pop", "pop", "short"],
                "rating": 4,
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Chorus"
        assert data["tags"] == ["pop", "short"]
        assert data["rating"] == 4.0
        assert "user_id" not in data
        assert fake_db.tables["prompts"][0]["user_id"] == "usr_TEST_ONLY_000001"

    def test_create_validation(self, client, auth_headers, category_id):
        for body in (
            {"title": "", "content": "c", "category_id": category_id},
            {"title": "t", "content": "c", "category_id": category_id, "rating": 9},
            {"title": "t", "category_id": category_id},
        ):
            assert client.post("/prompts", json=body, headers=auth_headers).status_code == 422

    def test_blank_content_is_bad_request(self, client, auth_headers, category_id):
        response = client.post(
            "/prompts",
            json={"title": "t", "content": "   ", "category_id": category_id},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert "Content" in response.json()["detail"]

    def test_list_best_first_with_joined_names(self, client, auth_headers, create_prompt):
        create_prompt(title="low", rating=1)
        create_prompt(title="high", rating=5)

        data = client.get("/prompts", headers=auth_headers).json()

        assert [p["title"] for p in data] == ["high", "low"]
        assert data[0]["category_name"] == "Música"
        assert data[0]["category_slug"] == "musica"

    def test_list_filters(self, client, auth_headers, create_prompt):
        create_prompt(title="Reggae", content="one", subcategory="Roots")
        create_prompt(title="Pop", content="two", subcategory="Dance")

        by_search = client.get("/prompts", params={"search": "reggae"}, headers=auth_headers).json()
        by_sub = client.get("/prompts", params={"subcategory": "Dance"}, headers=auth_headers).json()
        limited = client.get("/prompts", params={"limit": 1}, headers=auth_headers).json()

        assert [p["title"] for p in by_search] == ["Reggae"]
        assert [p["title"] for p in by_sub] == ["Pop"]
        assert len(limited) == 1

    def test_invalid_limit(self, client, auth_headers):
        assert client.get("/prompts", params={"limit": 0}, headers=auth_headers).status_code == 422

    def test_patch(self, client, auth_headers, create_prompt):
        prompt = create_prompt()

        response = client.patch(
            f"/prompts/{prompt['id']}", json={"title": "Renamed"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["title"] == "Renamed"
        assert response.json()["content"] == "Content"

    def test_patch_missing(self, client, auth_headers):
        response = client.patch("/prompts/nope", json={"title": "x"}, headers=auth_headers)
        assert response.status_code == 404

    def test_copy_counts_usage(self, client, auth_headers, create_prompt):
        prompt = create_prompt()

        client.post(f"/prompts/{prompt['id']}/copy", headers=auth_headers)
        data = client.post(f"/prompts/{prompt['id']}/copy", headers=auth_headers).json()

        assert data["usage_count"] == 2
        assert data["last_used_at"]

    def test_rating(self, client, auth_headers, create_prompt):
        prompt = create_prompt()
        url = f"/prompts/{prompt['id']}/rating"

        assert client.post(url, json={"rating": 3.5}, headers=auth_headers).json()["rating"] == 3.5
        assert client.post(url, json={"rating": 6}, headers=auth_headers).status_code == 422

    def test_bulk_delete(self, client, auth_headers, create_prompt, fake_db):
        a, b = create_prompt(), create_prompt()

        response = client.post(
            "/prompts/delete", json={"ids": [a["id"], b["id"], "missing"]}, headers=auth_headers
        )

        assert response.json() == {"deleted": 2}
        assert fake_db.tables["prompts"] == []

    def test_bulk_delete_requires_ids(self, client, auth_headers):
        assert client.post("/prompts/delete", json={"ids": []}, headers=auth_headers).status_code == 422

    def test_other_users_cannot_see_or_touch(self, client, auth_headers, other_headers, create_prompt):
        prompt = create_prompt()

        assert client.get("/prompts", headers=other_headers).json() == []
        assert client.post(f"/prompts/{prompt['id']}/copy", headers=other_headers).status_code == 404
        assert client.post(
            "/prompts/delete", json={"ids": [prompt["id"]]}, headers=other_headers
        ).json() == {"deleted": 0}
        assert len(client.get("/prompts", headers=auth_headers).json()) == 1

    def test_database_failure_is_bad_gateway(self, client, auth_headers, fake_db):
        fake_db.fail_on("prompts", "select")
        response = client.get("/prompts", headers=auth_headers)
        assert response.status_code == 502
        assert response.json() == {"detail": "Database request failed"}


class TestFavoriteRoutes:
    def test_add_list_remove(self, client, auth_headers, create_prompt):
        prompt = create_prompt()

        assert client.put(f"/favorites/{prompt['id']}", headers=auth_headers).status_code == 204
        assert client.put(f"/favorites/{prompt['id']}", headers=auth_headers).status_code == 204
        assert client.get("/favorites", headers=auth_headers).json() == {"prompt_ids": [prompt["id"]]}

        favorites = client.get("/prompts", params={"favorites": True}, headers=auth_headers).json()
        assert [p["id"] for p in favorites] == [prompt["id"]]

        assert client.delete(f"/favorites/{prompt['id']}", headers=auth_headers).status_code == 204
        assert client.delete(f"/favorites/{prompt['id']}", headers=auth_headers).status_code == 404

    def test_unknown_prompt(self, client, auth_headers):
        assert client.put("/favorites/missing", headers=auth_headers).status_code == 404
