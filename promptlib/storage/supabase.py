"""Supabase-backed storage.

Talks to the hosted Postgres database through the supabase client's REST
query builder. Every call is a single synchronous round trip; nothing is
batched or cached.
"""

import logging
import os
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from supabase import Client, create_client

from promptlib.errors import NotFoundError, StorageError
from promptlib.storage.base import (
    CATEGORIES_TABLE,
    FAVORITES_TABLE,
    PROJECT_PROMPTS_TABLE,
    PROJECTS_TABLE,
    PROMPTS_TABLE,
    SUBCATEGORY_GROUPS_TABLE,
)
from promptlib.types import (
    Category,
    Project,
    ProjectPrompt,
    Prompt,
    SubcategoryGroup,
    utc_now,
)

logger = logging.getLogger(__name__)

PROMPT_SELECT = (
    "*, categories(id, name, slug, icon, color), subcategory_groups(id, name, slug)"
)
PROJECT_PROMPT_SELECT = f"*, prompts({PROMPT_SELECT})"

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"


def _sort_order_key(item) -> tuple:
    return (item.sort_order is None, item.sort_order or 0)


class SupabaseStorage:
    """Storage over a Supabase project.

    Credentials come from the constructor or, failing that, from
    ``PROMPTLIB_SUPABASE_URL`` / ``SUPABASE_URL`` and
    ``PROMPTLIB_SUPABASE_KEY`` / ``SUPABASE_KEY`` / ``SUPABASE_ANON_KEY``.
    The client is created on first use unless an existing one is passed in
    (the API server shares one service client across requests).
    """

    def __init__(
        self,
        user_id: str,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        access_token: Optional[str] = None,
        client: Optional[Client] = None,
    ):
        self.user_id = user_id
        self.supabase_url = (
            supabase_url
            or os.environ.get("PROMPTLIB_SUPABASE_URL")
            or os.environ.get("SUPABASE_URL")
        )
        self.supabase_key = (
            supabase_key
            or os.environ.get("PROMPTLIB_SUPABASE_KEY")
            or os.environ.get("SUPABASE_KEY")
            or os.environ.get("SUPABASE_ANON_KEY")
        )
        self.access_token = access_token or os.environ.get("PROMPTLIB_ACCESS_TOKEN")
        self._client: Optional[Client] = client

    @property
    def client(self) -> Client:
        if self._client is None:
            if not self.supabase_url or self.supabase_key is None:
                raise ValueError(
                    "Supabase credentials required: set PROMPTLIB_SUPABASE_URL "
                    "and PROMPTLIB_SUPABASE_KEY"
                )
            parsed = urlparse(self.supabase_url)
            if parsed.scheme not in ("https", "http") or not parsed.netloc:
                raise ValueError(f"Invalid Supabase URL: {self.supabase_url}")
            if parsed.scheme == "http" and parsed.hostname not in ("localhost", "127.0.0.1"):
                raise ValueError("Supabase URL must use HTTPS (http is only allowed for localhost)")
            if not self.supabase_key.strip():
                raise ValueError("Supabase key cannot be empty")

            logger.debug(f"Connecting to Supabase at {parsed.netloc}")
            self._client = create_client(self.supabase_url, self.supabase_key)
            if self.access_token:
                # Row-level security evaluates the signed-in user's token
                self._client.postgrest.auth(self.access_token)
        return self._client

    def _execute(self, query, action: str):
        try:
            return query.execute()
        except Exception as e:
            raise StorageError(f"{action} failed: {e}", code=getattr(e, "code", None)) from e

    def _first(self, result) -> Optional[Dict[str, Any]]:
        return result.data[0] if result.data else None

    # === Categories ===

    def list_categories(self) -> List[Category]:
        result = self._execute(self.client.table(CATEGORIES_TABLE).select("*"), "list categories")
        return sorted((Category.from_row(r) for r in result.data), key=_sort_order_key)

    def get_category(self, category_id: str) -> Optional[Category]:
        result = self._execute(
            self.client.table(CATEGORIES_TABLE).select("*").eq("id", category_id).limit(1),
            "get category",
        )
        row = self._first(result)
        return Category.from_row(row) if row else None

    def get_category_by_slug(self, slug: str) -> Optional[Category]:
        result = self._execute(
            self.client.table(CATEGORIES_TABLE).select("*").eq("slug", slug).limit(1),
            "get category",
        )
        row = self._first(result)
        return Category.from_row(row) if row else None

    def create_category(self, category: Category) -> Category:
        result = self._execute(
            self.client.table(CATEGORIES_TABLE).insert(category.to_row()), "create category"
        )
        row = self._first(result)
        if not row:
            raise StorageError(f"create category returned no row for {category.name!r}")
        return Category.from_row(row)

    def update_category(self, category_id: str, updates: Dict[str, Any]) -> Category:
        result = self._execute(
            self.client.table(CATEGORIES_TABLE).update(updates).eq("id", category_id),
            "update category",
        )
        row = self._first(result)
        if not row:
            raise NotFoundError(f"Category not found: {category_id}")
        return Category.from_row(row)

    def delete_category(self, category_id: str) -> bool:
        result = self._execute(
            self.client.table(CATEGORIES_TABLE).delete().eq("id", category_id),
            "delete category",
        )
        return len(result.data) > 0

    # === Subcategory groups ===

    def list_subcategory_groups(self, category_id: Optional[str] = None) -> List[SubcategoryGroup]:
        query = self.client.table(SUBCATEGORY_GROUPS_TABLE).select("*")
        if category_id:
            query = query.eq("category_id", category_id)
        result = self._execute(query, "list subcategory groups")
        return sorted((SubcategoryGroup.from_row(r) for r in result.data), key=_sort_order_key)

    def create_subcategory_group(self, group: SubcategoryGroup) -> SubcategoryGroup:
        result = self._execute(
            self.client.table(SUBCATEGORY_GROUPS_TABLE).insert(group.to_row()),
            "create subcategory group",
        )
        row = self._first(result)
        if not row:
            raise StorageError(f"create subcategory group returned no row for {group.name!r}")
        return SubcategoryGroup.from_row(row)

    def update_subcategory_group(self, group_id: str, updates: Dict[str, Any]) -> SubcategoryGroup:
        result = self._execute(
            self.client.table(SUBCATEGORY_GROUPS_TABLE).update(updates).eq("id", group_id),
            "update subcategory group",
        )
        row = self._first(result)
        if not row:
            raise NotFoundError(f"Subcategory group not found: {group_id}")
        return SubcategoryGroup.from_row(row)

    def delete_subcategory_group(self, group_id: str) -> bool:
        result = self._execute(
            self.client.table(SUBCATEGORY_GROUPS_TABLE).delete().eq("id", group_id),
            "delete subcategory group",
        )
        return len(result.data) > 0

    # === Prompts ===

    def list_prompts(
        self,
        category_id: Optional[str] = None,
        group_id: Optional[str] = None,
        subcategory: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Prompt]:
        query = (
            self.client.table(PROMPTS_TABLE)
            .select(PROMPT_SELECT)
            .eq("user_id", self.user_id)
        )
        if category_id:
            query = query.eq("category_id", category_id)
        if group_id:
            query = query.eq("subcategory_group_id", group_id)
        if subcategory:
            query = query.eq("subcategory", subcategory)
        if search:
            query = query.or_(f"title.ilike.%{search}%,content.ilike.%{search}%")
        query = query.order("created_at", desc=True)
        if limit:
            query = query.limit(limit)
        result = self._execute(query, "list prompts")
        return [Prompt.from_row(r) for r in result.data]

    def get_prompt(self, prompt_id: str) -> Optional[Prompt]:
        result = self._execute(
            self.client.table(PROMPTS_TABLE)
            .select(PROMPT_SELECT)
            .eq("id", prompt_id)
            .eq("user_id", self.user_id)
            .limit(1),
            "get prompt",
        )
        row = self._first(result)
        return Prompt.from_row(row) if row else None

    def find_prompt_by_legacy_id(self, legacy_id: str) -> Optional[Prompt]:
        result = self._execute(
            self.client.table(PROMPTS_TABLE)
            .select("*")
            .eq("legacy_id", legacy_id)
            .eq("user_id", self.user_id)
            .limit(1),
            "find prompt by legacy_id",
        )
        row = self._first(result)
        return Prompt.from_row(row) if row else None

    def insert_prompt(self, data: Dict[str, Any]) -> Prompt:
        record = {**data, "user_id": self.user_id}
        result = self._execute(self.client.table(PROMPTS_TABLE).insert(record), "insert prompt")
        row = self._first(result)
        if not row:
            raise StorageError("insert prompt returned no row")
        return Prompt.from_row(row)

    def update_prompt(self, prompt_id: str, data: Dict[str, Any]) -> Prompt:
        result = self._execute(
            self.client.table(PROMPTS_TABLE)
            .update(data)
            .eq("id", prompt_id)
            .eq("user_id", self.user_id),
            "update prompt",
        )
        row = self._first(result)
        if not row:
            raise NotFoundError(f"Prompt not found: {prompt_id}")
        return Prompt.from_row(row)

    def delete_prompts(self, prompt_ids: List[str]) -> int:
        if not prompt_ids:
            return 0
        result = self._execute(
            self.client.table(PROMPTS_TABLE)
            .delete()
            .in_("id", list(prompt_ids))
            .eq("user_id", self.user_id),
            "delete prompts",
        )
        return len(result.data)

    def owned_prompt_ids(self, prompt_ids: List[str]) -> List[str]:
        if not prompt_ids:
            return []
        result = self._execute(
            self.client.table(PROMPTS_TABLE)
            .select("id")
            .in_("id", list(prompt_ids))
            .eq("user_id", self.user_id),
            "check prompt ownership",
        )
        return [r["id"] for r in result.data]

    def list_subcategory_values(self, group_id: str) -> List[Optional[str]]:
        result = self._execute(
            self.client.table(PROMPTS_TABLE)
            .select("subcategory")
            .eq("subcategory_group_id", group_id)
            .eq("user_id", self.user_id),
            "list subcategories",
        )
        return [r.get("subcategory") for r in result.data]

    # === Favorites ===

    def list_favorite_ids(self) -> List[str]:
        result = self._execute(
            self.client.table(FAVORITES_TABLE).select("prompt_id").eq("user_id", self.user_id),
            "list favorites",
        )
        return [r["prompt_id"] for r in result.data]

    def add_favorite(self, prompt_id: str) -> None:
        self._execute(
            self.client.table(FAVORITES_TABLE).upsert(
                {"user_id": self.user_id, "prompt_id": prompt_id},
                on_conflict="user_id,prompt_id",
            ),
            "add favorite",
        )

    def remove_favorite(self, prompt_id: str) -> bool:
        result = self._execute(
            self.client.table(FAVORITES_TABLE)
            .delete()
            .eq("user_id", self.user_id)
            .eq("prompt_id", prompt_id),
            "remove favorite",
        )
        return len(result.data) > 0

    # === Projects ===

    def list_projects(self) -> List[Project]:
        result = self._execute(
            self.client.table(PROJECTS_TABLE)
            .select("*")
            .eq("user_id", self.user_id)
            .order("updated_at", desc=True),
            "list projects",
        )
        return [Project.from_row(r) for r in result.data]

    def get_project(self, project_id: str) -> Optional[Project]:
        result = self._execute(
            self.client.table(PROJECTS_TABLE)
            .select("*")
            .eq("id", project_id)
            .eq("user_id", self.user_id)
            .limit(1),
            "get project",
        )
        row = self._first(result)
        return Project.from_row(row) if row else None

    def create_project(self, name: str, description: Optional[str] = None) -> Project:
        result = self._execute(
            self.client.table(PROJECTS_TABLE).insert(
                {"user_id": self.user_id, "name": name, "description": description}
            ),
            "create project",
        )
        row = self._first(result)
        if not row:
            raise StorageError(f"create project returned no row for {name!r}")
        return Project.from_row(row)

    def update_project(self, project_id: str, updates: Dict[str, Any]) -> Project:
        result = self._execute(
            self.client.table(PROJECTS_TABLE)
            .update({**updates, "updated_at": utc_now()})
            .eq("id", project_id)
            .eq("user_id", self.user_id),
            "update project",
        )
        row = self._first(result)
        if not row:
            raise NotFoundError(f"Project not found: {project_id}")
        return Project.from_row(row)

    def delete_project(self, project_id: str) -> bool:
        result = self._execute(
            self.client.table(PROJECTS_TABLE)
            .delete()
            .eq("id", project_id)
            .eq("user_id", self.user_id),
            "delete project",
        )
        return len(result.data) > 0

    def list_project_prompts(self, project_id: str) -> List[ProjectPrompt]:
        result = self._execute(
            self.client.table(PROJECT_PROMPTS_TABLE)
            .select(PROJECT_PROMPT_SELECT)
            .eq("project_id", project_id)
            .order("added_at", desc=True),
            "list project prompts",
        )
        return [ProjectPrompt.from_row(r) for r in result.data]

    def add_project_prompt(self, project_id: str, prompt_id: str) -> ProjectPrompt:
        result = self._execute(
            self.client.table(PROJECT_PROMPTS_TABLE).insert(
                {"project_id": project_id, "prompt_id": prompt_id}
            ),
            "add prompt to project",
        )
        row = self._first(result)
        if not row:
            raise StorageError("add prompt to project returned no row")
        return ProjectPrompt.from_row(row)

    def upsert_project_prompts(self, project_id: str, prompt_ids: List[str]) -> int:
        if not prompt_ids:
            return 0
        rows = [{"project_id": project_id, "prompt_id": pid} for pid in prompt_ids]
        result = self._execute(
            self.client.table(PROJECT_PROMPTS_TABLE).upsert(
                rows, on_conflict="project_id,prompt_id"
            ),
            "add prompts to project",
        )
        return len(result.data)

    def remove_project_prompt(self, project_id: str, prompt_id: str) -> bool:
        result = self._execute(
            self.client.table(PROJECT_PROMPTS_TABLE)
            .delete()
            .eq("project_id", project_id)
            .eq("prompt_id", prompt_id),
            "remove prompt from project",
        )
        return len(result.data) > 0
