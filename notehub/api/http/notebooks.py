from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from notehub.api.deps import get_request_context
from notehub.core.db import get_db
from notehub.domains.access.context import RequestContext
from notehub.domains.notebooks.schemas import (
    ApiResponse, CollaboratorCreate, CollaboratorResponse, MessageResponse,
    NotebookCreate, NotebookResponse, NotebookUpdate
)
from notehub.domains.notebooks.services import NotebookService

router = APIRouter(prefix="/notebooks", tags=["notebooks"])


@router.get("", response_model=ApiResponse[List[NotebookResponse]])
async def get_dashboard(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Собственные и общие тетради пользователя"""
    notebooks = await NotebookService(db).get_dashboard(ctx.user_id)
    return ApiResponse(data=[NotebookResponse.model_validate(nb) for nb in notebooks])


@router.post("", response_model=ApiResponse[NotebookResponse], status_code=status.HTTP_201_CREATED)
async def create_notebook(
    notebook_data: NotebookCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Создание новой тетради"""
    notebook = await NotebookService(db).create_notebook(notebook_data, ctx.user_id)
    return ApiResponse(data=NotebookResponse.model_validate(notebook))


@router.get("/search", response_model=ApiResponse[List[NotebookResponse]])
async def search_notebooks(
    q: Optional[str] = Query(None, max_length=255),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Поиск по названию и курсу"""
    notebooks = await NotebookService(db).search(q, ctx.user_id)
    return ApiResponse(data=[NotebookResponse.model_validate(nb) for nb in notebooks])


@router.get("/{notebook_id}", response_model=ApiResponse[NotebookResponse])
async def get_notebook(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Получение тетради по id"""
    notebook = await NotebookService(db).get_notebook(ctx.notebook_id, user_id=ctx.optional_user_id)
    return ApiResponse(data=NotebookResponse.model_validate(notebook))


@router.patch("/{notebook_id}", response_model=ApiResponse[NotebookResponse])
async def update_notebook(
    update_data: NotebookUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Изменение названия, курса или видимости"""
    notebook = await NotebookService(db).update_notebook(ctx.notebook_id, update_data, ctx.user_id)
    return ApiResponse(data=NotebookResponse.model_validate(notebook))


@router.delete("/{notebook_id}", response_model=ApiResponse[MessageResponse])
async def delete_notebook(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Удаление тетради"""
    await NotebookService(db).delete_notebook(ctx.notebook_id)
    return ApiResponse(data=MessageResponse(message="Notebook deleted"))


@router.get("/{notebook_id}/collaborators", response_model=ApiResponse[List[CollaboratorResponse]])
async def get_collaborators(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Список участников"""
    collaborators = await NotebookService(db).get_collaborators(ctx.notebook_id)
    return ApiResponse(data=[CollaboratorResponse.model_validate(c) for c in collaborators])


@router.post(
    "/{notebook_id}/collaborators",
    response_model=ApiResponse[MessageResponse],
    status_code=status.HTTP_201_CREATED
)
async def add_collaborator(
    collaborator_data: CollaboratorCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Выдача доступа по email"""
    await NotebookService(db).add_collaborator(ctx.notebook_id, collaborator_data, ctx.user_id)
    return ApiResponse(data=MessageResponse(message="Collaborator added"))


@router.delete("/{notebook_id}/collaborators/{user_id}", response_model=ApiResponse[MessageResponse])
async def remove_collaborator(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Отзыв доступа"""
    await NotebookService(db).remove_collaborator(ctx.notebook_id, ctx.param("user_id"))
    return ApiResponse(data=MessageResponse(message="Collaborator removed"))
