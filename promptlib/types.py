"""
Shared record types for promptlib.

These dataclasses are the vocabulary between storage, the import pipeline,
the exporters and the CLI/API layers. Rows coming back from the hosted
database are plain dicts; ``from_row`` / ``to_row`` translate at the edge.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

MAX_TAGS = 10
MIN_RATING = 0.0
MAX_RATING = 5.0


def utc_now() -> str:
    """Get current timestamp as ISO string in UTC."""
    return datetime.now(timezone.utc).isoformat()


def _joined(row: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = row.get(key)
    return value if isinstance(value, dict) else {}


# === Taxonomy ===


@dataclass
class Category:
    """Taxonomy root. Managed by hand, never created by an import."""

    id: Optional[str]
    name: str
    slug: str
    icon: Optional[str] = None
    color: Optional[str] = None
    sort_order: Optional[int] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Category":
        return cls(
            id=row.get("id"),
            name=row.get("name") or "",
            slug=row.get("slug") or "",
            icon=row.get("icon"),
            color=row.get("color"),
            sort_order=row.get("sort_order"),
            created_at=row.get("created_at"),
        )

    def to_row(self) -> Dict[str, Any]:
        row = {
            "name": self.name,
            "slug": self.slug,
            "icon": self.icon,
            "color": self.color,
            "sort_order": self.sort_order,
        }
        if self.id:
            row["id"] = self.id
        return row


@dataclass
class SubcategoryGroup:
    """Second taxonomy level. May be created by an import."""

    id: Optional[str]
    name: str
    slug: str
    category_id: Optional[str] = None
    sort_order: Optional[int] = None
    created_by: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "SubcategoryGroup":
        return cls(
            id=row.get("id"),
            name=row.get("name") or "",
            slug=row.get("slug") or "",
            category_id=row.get("category_id"),
            sort_order=row.get("sort_order"),
            created_by=row.get("created_by"),
            created_at=row.get("created_at"),
        )

    def to_row(self) -> Dict[str, Any]:
        row = {
            "name": self.name,
            "slug": self.slug,
            "category_id": self.category_id,
            "sort_order": self.sort_order,
        }
        if self.created_by:
            row["created_by"] = self.created_by
        if self.id:
            row["id"] = self.id
        return row


# === Prompts ===


@dataclass
class Prompt:
    """A stored prompt.

    ``rating`` is the clamped 0-5 display rating; ``legacy_score`` keeps the
    raw rating from imported data. ``legacy_id`` is the content-derived
    identity key used to match rows across repeated imports.
    """

    id: Optional[str]
    user_id: str
    title: str
    content: str
    category_id: Optional[str] = None
    subcategory_group_id: Optional[str] = None
    subcategory: Optional[str] = None
    rating: Optional[float] = 0.0
    usage_count: int = 0
    legacy_score: Optional[float] = 0.0
    tags: List[str] = field(default_factory=list)
    legacy_id: Optional[str] = None
    last_used_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    # Denormalized from joined category / subcategory group rows
    category_name: Optional[str] = None
    category_slug: Optional[str] = None
    group_name: Optional[str] = None
    group_slug: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Prompt":
        category = _joined(row, "categories")
        group = _joined(row, "subcategory_groups")
        return cls(
            id=row.get("id"),
            user_id=row.get("user_id") or "",
            title=row.get("title") or "",
            content=row.get("content") or "",
            category_id=row.get("category_id"),
            subcategory_group_id=row.get("subcategory_group_id"),
            subcategory=row.get("subcategory"),
            rating=row.get("rating"),
            usage_count=row.get("usage_count") or 0,
            legacy_score=row.get("legacy_score"),
            tags=list(row.get("tags") or []),
            legacy_id=row.get("legacy_id"),
            last_used_at=row.get("last_used_at"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            category_name=category.get("name"),
            category_slug=category.get("slug"),
            group_name=group.get("name"),
            group_slug=group.get("slug"),
        )

    def to_row(self) -> Dict[str, Any]:
        """Columns of the ``prompts`` table (joined names are not written)."""
        row = {
            "user_id": self.user_id,
            "title": self.title,
            "content": self.content,
            "category_id": self.category_id,
            "subcategory_group_id": self.subcategory_group_id,
            "subcategory": self.subcategory,
            "rating": self.rating,
            "usage_count": self.usage_count,
            "legacy_score": self.legacy_score,
            "tags": list(self.tags),
            "legacy_id": self.legacy_id,
        }
        if self.id:
            row["id"] = self.id
        if self.created_at:
            row["created_at"] = self.created_at
        return row


# === Projects ===


@dataclass
class Project:
    """A named collection of prompts."""

    id: Optional[str]
    user_id: str
    name: str
    description: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Project":
        return cls(
            id=row.get("id"),
            user_id=row.get("user_id") or "",
            name=row.get("name") or "",
            description=row.get("description"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


@dataclass
class ProjectPrompt:
    """Junction row; unique on (project_id, prompt_id)."""

    id: Optional[str]
    project_id: str
    prompt_id: str
    added_at: Optional[str] = None
    prompt: Optional[Prompt] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ProjectPrompt":
        prompt_row = row.get("prompts")
        return cls(
            id=row.get("id"),
            project_id=row.get("project_id") or "",
            prompt_id=row.get("prompt_id") or "",
            added_at=row.get("added_at"),
            prompt=Prompt.from_row(prompt_row) if isinstance(prompt_row, dict) else None,
        )


# === Import pipeline ===


class ImportPhase(str, Enum):
    """Import pipeline states. Transitions only move forward."""

    IDLE = "idle"
    PARSING = "parsing"
    RECONCILING_TAXONOMY = "reconciling_taxonomy"
    UPSERTING = "upserting"
    DONE = "done"


@dataclass(frozen=True)
class CategoryPath:
    """A ``"Group > Subcategory"`` field split into its two taxonomy levels."""

    group: str
    subcategory: str


@dataclass
class ImportRecord:
    """A source row normalized for writing to the ``prompts`` table."""

    content: str
    title: str
    legacy_id: str
    group: str = ""
    subcategory: str = ""
    rating: float = 0.0
    legacy_score: float = 0.0
    tags: List[str] = field(default_factory=list)
    created_at: Optional[str] = None
    row_number: int = 0


@dataclass
class ImportProgress:
    """Running import counters. ``snapshot()`` is what observers receive."""

    current: int = 0
    total: int = 0
    inserted: int = 0
    updated: int = 0
    errors: int = 0
    groups_created: List[str] = field(default_factory=list)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "current": self.current,
            "total": self.total,
            "inserted": self.inserted,
            "updated": self.updated,
            "errors": self.errors,
            "groupsCreated": list(self.groups_created),
        }
