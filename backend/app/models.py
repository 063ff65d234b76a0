"""Pydantic models for API requests and responses."""

from typing import Literal

from pydantic import BaseModel, Field

from promptlib.types import Category, Project, ProjectPrompt, Prompt, SubcategoryGroup

# =============================================================================
# Prompt Models
# =============================================================================

class PromptOut(BaseModel):
    """A prompt with its category and group names inlined."""
    id: str
    title: str
    content: str
    category_id: str | None = None
    subcategory_group_id: str | None = None
    subcategory: str | None = None
    rating: float | None = None
    usage_count: int = 0
    legacy_score: float | None = None
    tags: list[str] = []
    legacy_id: str | None = None
    last_used_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    category_name: str | None = None
    category_slug: str | None = None
    group_name: str | None = None
    group_slug: str | None = None

    @classmethod
    def from_prompt(cls, prompt: Prompt) -> "PromptOut":
        data = {k: v for k, v in prompt.__dict__.items() if k != "user_id"}
        return cls(**data)


class PromptCreate(BaseModel):
    """Request to create a prompt."""
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    category_id: str
    subcategory_group_id: str | None = None
    subcategory: str | None = None
    tags: list[str] = []
    rating: float = Field(0.0, ge=0, le=5)


class PromptUpdate(BaseModel):
    """Partial prompt update; only fields that are set are written."""
    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, min_length=1)
    category_id: str | None = None
    subcategory_group_id: str | None = None
    subcategory: str | None = None
    tags: list[str] | None = None
    rating: float | None = Field(None, ge=0, le=5)


class RatingRequest(BaseModel):
    rating: float = Field(..., ge=0, le=5)


class BulkIdsRequest(BaseModel):
    """A list of prompt ids for bulk operations."""
    ids: list[str] = Field(..., min_length=1, max_length=1000)


class DeleteResponse(BaseModel):
    deleted: int


# =============================================================================
# Taxonomy Models
# =============================================================================

class CategoryOut(BaseModel):
    id: str
    name: str
    slug: str
    icon: str | None = None
    color: str | None = None
    sort_order: int | None = None

    @classmethod
    def from_category(cls, category: Category) -> "CategoryOut":
        return cls(
            id=category.id,
            name=category.name,
            slug=category.slug,
            icon=category.icon,
            color=category.color,
            sort_order=category.sort_order,
        )


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str | None = None
    icon: str | None = None
    color: str | None = None
    sort_order: int | None = None


class GroupOut(BaseModel):
    id: str
    name: str
    slug: str
    category_id: str | None = None
    sort_order: int | None = None

    @classmethod
    def from_group(cls, group: SubcategoryGroup) -> "GroupOut":
        return cls(
            id=group.id,
            name=group.name,
            slug=group.slug,
            category_id=group.category_id,
            sort_order=group.sort_order,
        )


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str | None = None
    sort_order: int | None = None


class SubcategoryCount(BaseModel):
    name: str
    count: int


# =============================================================================
# Project Models
# =============================================================================

class ProjectOut(BaseModel):
    id: str
    name: str
    description: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_project(cls, project: Project) -> "ProjectOut":
        return cls(
            id=project.id,
            name=project.name,
            description=project.description,
            created_at=project.created_at,
            updated_at=project.updated_at,
        )


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)


class ProjectPromptOut(BaseModel):
    id: str | None = None
    project_id: str
    prompt_id: str
    added_at: str | None = None
    prompt: PromptOut | None = None

    @classmethod
    def from_entry(cls, entry: ProjectPrompt) -> "ProjectPromptOut":
        return cls(
            id=entry.id,
            project_id=entry.project_id,
            prompt_id=entry.prompt_id,
            added_at=entry.added_at,
            prompt=PromptOut.from_prompt(entry.prompt) if entry.prompt else None,
        )


class AddedResponse(BaseModel):
    added: int


# =============================================================================
# Import Models
# =============================================================================

class ImportRequest(BaseModel):
    """File contents to import into a category (id or slug)."""
    category_id: str
    content: str = Field(..., max_length=10_000_000)
    dry_run: bool = False


class ImportReport(BaseModel):
    """Import counters, in the shape the web client's progress bar reads."""
    current: int
    total: int
    inserted: int
    updated: int
    errors: int
    groupsCreated: list[str]


class HealthResponse(BaseModel):
    status: Literal["healthy", "degraded"]
    database: str
