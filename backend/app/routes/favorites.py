"""Favorite routes."""

from fastapi import APIRouter, HTTPException, Response, status

from ..database import Library

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("")
async def list_favorites(lib: Library):
    return {"prompt_ids": lib.favorite_ids()}


@router.put("/{prompt_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_favorite(prompt_id: str, lib: Library):
    lib.add_favorite(prompt_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{prompt_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_favorite(prompt_id: str, lib: Library):
    if not lib.remove_favorite(prompt_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not a favorite")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
