"""API routes."""

from .exports import router as exports_router
from .favorites import router as favorites_router
from .imports import router as imports_router
from .projects import router as projects_router
from .prompts import router as prompts_router
from .taxonomy import router as taxonomy_router

__all__ = [
    "prompts_router",
    "taxonomy_router",
    "favorites_router",
    "projects_router",
    "imports_router",
    "exports_router",
]
