"""Project routes."""

from fastapi import APIRouter, Response, status

from ..database import Library
from ..models import AddedResponse, BulkIdsRequest, ProjectCreate, ProjectOut, ProjectPromptOut

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=list[ProjectOut])
async def list_projects(lib: Library):
    """The caller's projects, most recently updated first."""
    return [ProjectOut.from_project(p) for p in lib.list_projects()]


@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
async def create_project(body: ProjectCreate, lib: Library):
    return ProjectOut.from_project(lib.create_project(body.name, body.description))


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: str, lib: Library):
    lib.delete_project(project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{project_id}/prompts", response_model=list[ProjectPromptOut])
async def list_project_prompts(project_id: str, lib: Library):
    return [ProjectPromptOut.from_entry(e) for e in lib.project_prompts(project_id)]


@router.post("/{project_id}/prompts", response_model=AddedResponse)
async def add_project_prompts(project_id: str, body: BulkIdsRequest, lib: Library):
    """Add prompts to a project. Prompts already in it are left as they are."""
    return AddedResponse(added=lib.add_many_to_project(project_id, body.ids))
