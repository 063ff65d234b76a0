"""PromptLibrary - the main entry point for working with a prompt library.

Wraps a :class:`~promptlib.storage.base.Storage` backend with validation,
meritocratic ordering, usage tracking and the import/export pipelines. The
CLI and the HTTP API both go through this class.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from promptlib.errors import NotFoundError, StorageError, ValidationError
from promptlib.export import export_prompts
from promptlib.importers.csv_importer import (
    ProgressCallback,
    PromptCsvImporter,
    dedupe_tags,
)
from promptlib.importers.json_importer import PromptJsonImporter
from promptlib.logging_config import log_copy, log_export, log_import
from promptlib.ranking import aggregate_subcategories, filter_prompts, sanitize_search, sort_meritocratic
from promptlib.storage.base import Storage
from promptlib.storage.supabase import UNIQUE_VIOLATION, SupabaseStorage
from promptlib.types import (
    MAX_RATING,
    MIN_RATING,
    Category,
    ImportProgress,
    Project,
    ProjectPrompt,
    Prompt,
    SubcategoryGroup,
    utc_now,
)
from promptlib.utils import slugify

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 200
MAX_NAME_LENGTH = 100

_UUID_RE = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")

# Columns a caller may change through update_prompt
PROMPT_UPDATABLE_FIELDS = {
    "title",
    "content",
    "category_id",
    "subcategory_group_id",
    "subcategory",
    "rating",
    "tags",
}


def _require_text(value: Optional[str], field_name: str, max_length: Optional[int] = None) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} cannot be empty")
    value = str(value).strip()
    if max_length and len(value) > max_length:
        raise ValidationError(f"{field_name} too long (max {max_length} characters)")
    return value


def _validate_rating(rating: Any) -> float:
    try:
        value = float(rating)
    except (TypeError, ValueError):
        raise ValidationError(f"Rating must be a number, got {rating!r}")
    if not MIN_RATING <= value <= MAX_RATING:
        raise ValidationError(f"Rating must be between {MIN_RATING:g} and {MAX_RATING:g}")
    return value


def _clean_tags(tags: Optional[Sequence[str]]) -> List[str]:
    return dedupe_tags(t.strip() for t in (tags or []) if t and t.strip())


class PromptLibrary:
    """One user's prompt library."""

    def __init__(
        self,
        user_id: Optional[str] = None,
        storage: Optional[Storage] = None,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        access_token: Optional[str] = None,
    ):
        """Initialize the library.

        Args:
            user_id: Owner of the prompts (falls back to ``PROMPTLIB_USER_ID``)
            storage: Storage backend; a SupabaseStorage is created when omitted
            supabase_url: Supabase project URL
            supabase_key: Supabase anon or service key
            access_token: Signed-in user's access token for row-level security
        """
        if storage is not None and not user_id:
            user_id = storage.user_id
        self.user_id = _require_text(user_id or os.environ.get("PROMPTLIB_USER_ID"), "User ID")
        if storage is None:
            storage = SupabaseStorage(
                user_id=self.user_id,
                supabase_url=supabase_url,
                supabase_key=supabase_key,
                access_token=access_token,
            )
        self.storage = storage

    # === Categories ===

    def list_categories(self) -> List[Category]:
        return self.storage.list_categories()

    def create_category(
        self,
        name: str,
        slug: Optional[str] = None,
        icon: Optional[str] = None,
        color: Optional[str] = None,
        sort_order: Optional[int] = None,
    ) -> Category:
        name = _require_text(name, "Category name", MAX_NAME_LENGTH)
        category = Category(
            id=None,
            name=name,
            slug=slug or slugify(name),
            icon=icon,
            color=color,
            sort_order=sort_order,
        )
        return self.storage.create_category(category)

    def update_category(self, category_id: str, **updates: Any) -> Category:
        if "name" in updates:
            updates["name"] = _require_text(updates["name"], "Category name", MAX_NAME_LENGTH)
        return self.storage.update_category(category_id, updates)

    def delete_category(self, category_id: str) -> None:
        if not self.storage.delete_category(category_id):
            raise NotFoundError(f"Category not found: {category_id}")

    def resolve_category(self, category: str) -> Category:
        """Look a category up by id (a UUID) or otherwise by slug."""
        if _UUID_RE.match(category or ""):
            found = self.storage.get_category(category)
        else:
            found = self.storage.get_category_by_slug(category)
        if not found:
            raise NotFoundError(f"Category not found: {category}")
        return found

    # === Subcategory groups ===

    def list_groups(self, category_id: Optional[str] = None) -> List[SubcategoryGroup]:
        return self.storage.list_subcategory_groups(category_id)

    def create_group(
        self,
        category_id: str,
        name: str,
        slug: Optional[str] = None,
        sort_order: Optional[int] = None,
    ) -> SubcategoryGroup:
        name = _require_text(name, "Group name", MAX_NAME_LENGTH)
        if sort_order is None:
            existing = self.storage.list_subcategory_groups(category_id)
            sort_order = max((g.sort_order or 0 for g in existing), default=0) + 1
        group = SubcategoryGroup(
            id=None,
            name=name,
            slug=slug or slugify(name),
            category_id=category_id,
            sort_order=sort_order,
            created_by=self.user_id,
        )
        return self.storage.create_subcategory_group(group)

    def update_group(self, group_id: str, **updates: Any) -> SubcategoryGroup:
        if "name" in updates:
            updates["name"] = _require_text(updates["name"], "Group name", MAX_NAME_LENGTH)
        return self.storage.update_subcategory_group(group_id, updates)

    def delete_group(self, group_id: str) -> None:
        if not self.storage.delete_subcategory_group(group_id):
            raise NotFoundError(f"Subcategory group not found: {group_id}")

    def subcategories(self, group_id: str, order: str = "count") -> List[Dict[str, object]]:
        """Distinct subcategories of a group with their prompt counts."""
        return aggregate_subcategories(self.storage.list_subcategory_values(group_id), order=order)

    # === Prompts ===

    def list_prompts(
        self,
        category_slug: Optional[str] = None,
        group_id: Optional[str] = None,
        subcategory: Optional[str] = None,
        search: Optional[str] = None,
        favorites_only: bool = False,
        limit: Optional[int] = None,
    ) -> List[Prompt]:
        """List prompts in meritocratic order.

        An unknown ``category_slug`` does not filter (the web client behaves
        the same way). ``search`` is sanitized first; terms over 100
        characters are ignored.
        """
        category_id = None
        if category_slug:
            category = self.storage.get_category_by_slug(category_slug)
            if category:
                category_id = category.id
            else:
                logger.warning(f"Unknown category slug {category_slug!r}; not filtering")

        prompts = self.storage.list_prompts(
            category_id=category_id,
            group_id=group_id,
            subcategory=subcategory,
            search=sanitize_search(search),
        )
        if favorites_only:
            prompts = filter_prompts(prompts, favorites=set(self.storage.list_favorite_ids()))

        ranked = sort_meritocratic(prompts)
        return ranked[:limit] if limit else ranked

    def all_prompts(self) -> List[Prompt]:
        """Every prompt of the user, newest first."""
        return self.storage.list_prompts()

    def get_prompt(self, prompt_id: str) -> Prompt:
        prompt = self.storage.get_prompt(prompt_id)
        if not prompt:
            raise NotFoundError(f"Prompt not found: {prompt_id}")
        return prompt

    def create_prompt(
        self,
        title: str,
        content: str,
        category_id: str,
        subcategory_group_id: Optional[str] = None,
        subcategory: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        rating: float = 0.0,
    ) -> Prompt:
        data = {
            "title": _require_text(title, "Title", MAX_TITLE_LENGTH),
            "content": _require_text(content, "Content"),
            "category_id": _require_text(category_id, "Category"),
            "subcategory_group_id": subcategory_group_id or None,
            "subcategory": (subcategory or "").strip() or None,
            "tags": _clean_tags(tags),
            "rating": _validate_rating(rating),
            "usage_count": 0,
        }
        prompt = self.storage.insert_prompt(data)
        logger.info(f"Created prompt {prompt.id}")
        return prompt

    def update_prompt(self, prompt_id: str, **updates: Any) -> Prompt:
        unknown = set(updates) - PROMPT_UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        if "title" in updates:
            updates["title"] = _require_text(updates["title"], "Title", MAX_TITLE_LENGTH)
        if "content" in updates:
            updates["content"] = _require_text(updates["content"], "Content")
        if "rating" in updates:
            updates["rating"] = _validate_rating(updates["rating"])
        if "tags" in updates:
            updates["tags"] = _clean_tags(updates["tags"])
        updates["updated_at"] = utc_now()
        return self.storage.update_prompt(prompt_id, updates)

    def delete_prompts(self, prompt_ids: Sequence[str]) -> int:
        deleted = self.storage.delete_prompts(list(prompt_ids))
        logger.info(f"Deleted {deleted} of {len(prompt_ids)} prompt(s)")
        return deleted

    def record_copy(self, prompt_id: str) -> Prompt:
        """Count one use of a prompt (the user copied it)."""
        prompt = self.get_prompt(prompt_id)
        updated = self.storage.update_prompt(
            prompt_id,
            {"usage_count": (prompt.usage_count or 0) + 1, "last_used_at": utc_now()},
        )
        log_copy(self.user_id, prompt_id)
        return updated

    def rate_prompt(self, prompt_id: str, rating: float) -> Prompt:
        return self.storage.update_prompt(prompt_id, {"rating": _validate_rating(rating)})

    # === Favorites ===

    def favorite_ids(self) -> List[str]:
        return self.storage.list_favorite_ids()

    def add_favorite(self, prompt_id: str) -> None:
        self.get_prompt(prompt_id)
        self.storage.add_favorite(prompt_id)

    def remove_favorite(self, prompt_id: str) -> bool:
        return self.storage.remove_favorite(prompt_id)

    def toggle_favorite(self, prompt_id: str) -> bool:
        """Flip the favorite flag; returns True when the prompt is now a favorite."""
        if prompt_id in set(self.storage.list_favorite_ids()):
            self.storage.remove_favorite(prompt_id)
            return False
        self.add_favorite(prompt_id)
        return True

    # === Projects ===

    def list_projects(self) -> List[Project]:
        return self.storage.list_projects()

    def get_project(self, project_id: str) -> Project:
        project = self.storage.get_project(project_id)
        if not project:
            raise NotFoundError(f"Project not found: {project_id}")
        return project

    def create_project(self, name: str, description: Optional[str] = None) -> Project:
        name = _require_text(name, "Project name", MAX_NAME_LENGTH)
        return self.storage.create_project(name, (description or "").strip() or None)

    def update_project(self, project_id: str, **updates: Any) -> Project:
        if "name" in updates:
            updates["name"] = _require_text(updates["name"], "Project name", MAX_NAME_LENGTH)
        return self.storage.update_project(project_id, updates)

    def delete_project(self, project_id: str) -> None:
        if not self.storage.delete_project(project_id):
            raise NotFoundError(f"Project not found: {project_id}")

    def project_prompts(self, project_id: str) -> List[ProjectPrompt]:
        self.get_project(project_id)
        # The junction table is not scoped by user; never expose foreign prompts
        return [
            entry
            for entry in self.storage.list_project_prompts(project_id)
            if entry.prompt is None or entry.prompt.user_id == self.user_id
        ]

    def add_to_project(self, project_id: str, prompt_id: str) -> ProjectPrompt:
        self.get_project(project_id)
        if not self.storage.owned_prompt_ids([prompt_id]):
            raise NotFoundError(f"Prompt not found: {prompt_id}")
        try:
            return self.storage.add_project_prompt(project_id, prompt_id)
        except StorageError as e:
            if e.code == UNIQUE_VIOLATION:
                raise ValidationError("Prompt already in project") from e
            raise

    def add_many_to_project(self, project_id: str, prompt_ids: Sequence[str]) -> int:
        """Add several prompts at once; pairs already present are left alone.

        Ids that are not the user's own prompts are skipped.
        """
        self.get_project(project_id)
        requested = list(dict.fromkeys(prompt_ids))
        owned = set(self.storage.owned_prompt_ids(requested))
        skipped = len(requested) - len(owned)
        if skipped:
            logger.warning(f"Skipping {skipped} unknown prompt id(s) for project {project_id}")
        return self.storage.upsert_project_prompts(project_id, [pid for pid in requested if pid in owned])

    def remove_from_project(self, project_id: str, prompt_id: str) -> None:
        self.get_project(project_id)
        if not self.storage.remove_project_prompt(project_id, prompt_id):
            raise NotFoundError(f"Prompt {prompt_id} is not in project {project_id}")

    # === Import / export ===

    def import_csv(
        self,
        source: Union[str, Path],
        category_id: str,
        dry_run: bool = False,
        on_progress: Optional[ProgressCallback] = None,
        from_text: bool = False,
    ) -> ImportProgress:
        """Import a CSV file (or CSV text when ``from_text``) into a category."""
        category = self.resolve_category(category_id)
        importer = PromptCsvImporter(self.storage, self.user_id, category.id, dry_run=dry_run)
        if from_text:
            progress = importer.import_text(str(source), on_progress)
        else:
            progress = importer.import_file(source, on_progress)
        if not dry_run:
            log_import(self.user_id, "csv", progress)
        return progress

    def import_json(
        self,
        source: Union[str, Path],
        category_id: str,
        dry_run: bool = False,
        on_progress: Optional[ProgressCallback] = None,
        from_text: bool = False,
    ) -> ImportProgress:
        """Import a JSON export; raises ImportSourceError for an unusable document."""
        category = self.resolve_category(category_id)
        importer = PromptJsonImporter(self.storage, self.user_id, category.id, dry_run=dry_run)
        if from_text:
            progress = importer.import_text(str(source), on_progress)
        else:
            progress = importer.import_file(source, on_progress)
        if not dry_run:
            log_import(self.user_id, "json", progress)
        return progress

    def export(self, fmt: str = "csv") -> str:
        """Render every prompt of the user as CSV or JSON text."""
        prompts = self.all_prompts()
        document = export_prompts(prompts, fmt)
        log_export(self.user_id, fmt, len(prompts))
        return document
