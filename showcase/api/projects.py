from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query

from showcase.api.deps import get_catalog_service, get_like_service
from showcase.auth.dependencies import get_current_account
from showcase.config import get_settings
from showcase.schemas import (
    AuthContext,
    LikeResponse,
    MessageResponse,
    ProjectFilter,
    ProjectResponse,
    ProjectWithAuthorResponse,
)
from showcase.services.catalog import CatalogService
from showcase.services.likes import LikeService

settings = get_settings()
router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get("", response_model=List[ProjectResponse])
async def list_projects(
    category: Optional[str] = Query(None, description="Category, or 'all'"),
    search: Optional[str] = Query(None, description="Case-insensitive title search"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    catalog: CatalogService = Depends(get_catalog_service)
):
    """
    List published projects, newest first.
    Public.
    """
    return await catalog.list_projects(
        ProjectFilter(category=category, search_text=search, limit=limit, offset=offset)
    )


@router.get("/{project_id}", response_model=ProjectWithAuthorResponse)
async def get_project(
    project_id: int,
    catalog: CatalogService = Depends(get_catalog_service)
):
    """
    Get a project with its author. Counts as one view.
    Public.
    """
    project = await catalog.get_with_author(project_id)
    response = ProjectWithAuthorResponse.model_validate(project)

    await catalog.increment_views(project_id)
    return response


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    payload: Dict[str, Any] = Body(...),
    auth: AuthContext = Depends(get_current_account),
    catalog: CatalogService = Depends(get_catalog_service)
):
    """
    Create a project owned by the caller.
    Requires: admin
    """
    return await catalog.create(payload, auth.account_id)


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    payload: Dict[str, Any] = Body(...),
    auth: AuthContext = Depends(get_current_account),
    catalog: CatalogService = Depends(get_catalog_service)
):
    """
    Partially update a project.
    Requires: admin
    """
    return await catalog.update(project_id, payload, auth.account_id)


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: int,
    auth: AuthContext = Depends(get_current_account),
    catalog: CatalogService = Depends(get_catalog_service)
):
    """
    Delete a project and its likes.
    Requires: admin
    """
    await catalog.delete(project_id, auth.account_id)
    return MessageResponse(message="Project deleted successfully")


@router.post("/{project_id}/like", response_model=LikeResponse)
async def toggle_like(
    project_id: int,
    auth: AuthContext = Depends(get_current_account),
    likes: LikeService = Depends(get_like_service)
):
    """
    Like the project, or unlike it if already liked.
    Requires: authentication
    """
    liked = await likes.toggle(project_id, auth.account_id)
    return LikeResponse(liked=liked)


@router.get("/{project_id}/liked", response_model=LikeResponse)
async def is_liked(
    project_id: int,
    auth: AuthContext = Depends(get_current_account),
    likes: LikeService = Depends(get_like_service)
):
    """
    Whether the caller likes the project.
    Requires: authentication
    """
    liked = await likes.is_liked(project_id, auth.account_id)
    return LikeResponse(liked=liked)
