"""Category, subcategory group and subcategory routes."""

from typing import Literal

from fastapi import APIRouter, status

from ..database import Library
from ..models import CategoryCreate, CategoryOut, GroupCreate, GroupOut, SubcategoryCount

router = APIRouter(tags=["taxonomy"])


@router.get("/categories", response_model=list[CategoryOut])
async def list_categories(lib: Library):
    return [CategoryOut.from_category(c) for c in lib.list_categories()]


@router.post("/categories", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
async def create_category(body: CategoryCreate, lib: Library):
    category = lib.create_category(
        body.name, slug=body.slug, icon=body.icon, color=body.color, sort_order=body.sort_order
    )
    return CategoryOut.from_category(category)


@router.get("/categories/{category_id}/groups", response_model=list[GroupOut])
async def list_groups(category_id: str, lib: Library):
    return [GroupOut.from_group(g) for g in lib.list_groups(category_id)]


@router.post(
    "/categories/{category_id}/groups",
    response_model=GroupOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_group(category_id: str, body: GroupCreate, lib: Library):
    """Create a subcategory group; sort_order defaults to after the last group."""
    category = lib.resolve_category(category_id)
    group = lib.create_group(category.id, body.name, slug=body.slug, sort_order=body.sort_order)
    return GroupOut.from_group(group)


@router.get("/groups/{group_id}/subcategories", response_model=list[SubcategoryCount])
async def list_subcategories(
    group_id: str,
    lib: Library,
    order: Literal["count", "name"] = "count",
):
    """Distinct subcategories in a group with prompt counts."""
    return lib.subcategories(group_id, order=order)
