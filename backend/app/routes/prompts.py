"""Prompt routes: listing, editing, usage and rating."""

from fastapi import APIRouter, Query, status

from ..database import Library
from ..models import (
    BulkIdsRequest,
    DeleteResponse,
    PromptCreate,
    PromptOut,
    PromptUpdate,
    RatingRequest,
)

router = APIRouter(prefix="/prompts", tags=["prompts"])


@router.get("", response_model=list[PromptOut])
async def list_prompts(
    lib: Library,
    category: str | None = Query(None, description="Category slug"),
    group_id: str | None = None,
    subcategory: str | None = None,
    search: str | None = None,
    favorites: bool = False,
    limit: int | None = Query(None, ge=1, le=1000),
):
    """List the caller's prompts, best first.

    Ordered by rating, then usage count, then imported score, then most
    recent use. Search terms longer than 100 characters are ignored.
    """
    prompts = lib.list_prompts(
        category_slug=category,
        group_id=group_id,
        subcategory=subcategory,
        search=search,
        favorites_only=favorites,
        limit=limit,
    )
    return [PromptOut.from_prompt(p) for p in prompts]


@router.post("", response_model=PromptOut, status_code=status.HTTP_201_CREATED)
async def create_prompt(body: PromptCreate, lib: Library):
    prompt = lib.create_prompt(
        title=body.title,
        content=body.content,
        category_id=body.category_id,
        subcategory_group_id=body.subcategory_group_id,
        subcategory=body.subcategory,
        tags=body.tags,
        rating=body.rating,
    )
    return PromptOut.from_prompt(prompt)


@router.patch("/{prompt_id}", response_model=PromptOut)
async def update_prompt(prompt_id: str, body: PromptUpdate, lib: Library):
    updates = body.model_dump(exclude_unset=True)
    return PromptOut.from_prompt(lib.update_prompt(prompt_id, **updates))


@router.post("/delete", response_model=DeleteResponse)
async def delete_prompts(body: BulkIdsRequest, lib: Library):
    """Delete several prompts at once."""
    return DeleteResponse(deleted=lib.delete_prompts(body.ids))


@router.post("/{prompt_id}/copy", response_model=PromptOut)
async def record_copy(prompt_id: str, lib: Library):
    """Count one use of the prompt (called when the user copies it)."""
    return PromptOut.from_prompt(lib.record_copy(prompt_id))


@router.post("/{prompt_id}/rating", response_model=PromptOut)
async def rate_prompt(prompt_id: str, body: RatingRequest, lib: Library):
    return PromptOut.from_prompt(lib.rate_prompt(prompt_id, body.rating))
