"""
Project store API routes.

GET    /projects               list stored projects (newest first)
GET    /projects/{project_id}  metadata, files and evaluation report
DELETE /projects/{project_id}  remove a project
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from generation_layer.api.dependencies import get_project_store
from generation_layer.api.models import ProjectListResponse, ProjectResponse
from generation_layer.persistence.project_store import LocalProjectStore

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=ProjectListResponse,
    summary="List generated projects",
)
async def list_projects(
    store: LocalProjectStore = Depends(get_project_store),
) -> ProjectListResponse:
    projects = await store.list_projects()
    return ProjectListResponse(projects=projects, count=len(projects))


@router.get(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Get a generated project",
    responses={404: {"description": "Project not found"}},
)
async def get_project(
    project_id: str,
    store: LocalProjectStore = Depends(get_project_store),
) -> ProjectResponse:
    """
    Get one project with its file contents.

    Raises:
        HTTPException: 404 if the project does not exist
    """
    project = await store.get_project(project_id)
    if project is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project not found: {project_id}",
        )
    return ProjectResponse(project=project)


@router.delete(
    "/{project_id}",
    summary="Delete a generated project",
    responses={404: {"description": "Project not found"}},
)
async def delete_project(
    project_id: str,
    store: LocalProjectStore = Depends(get_project_store),
) -> dict:
    deleted = await store.delete_project(project_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project not found: {project_id}",
        )
    logger.info("Project deleted via API", project_id=project_id)
    return {"success": True, "projectId": project_id}
