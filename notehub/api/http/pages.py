from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from notehub.api.deps import get_request_context
from notehub.core.db import get_db
from notehub.domains.access.context import RequestContext
from notehub.domains.notebooks.schemas import ApiResponse, MessageResponse, PageContent, PageResponse
from notehub.domains.notebooks.services import PageService

router = APIRouter(tags=["pages"])

# Pages of a notebook are reachable as /notebooks/{id}/pages and /notebooks/pages/{id}
NOTEBOOK_PAGES_PATHS = ("/notebooks/pages/{notebook_id}", "/notebooks/{notebook_id}/pages")


async def list_pages(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Страницы тетради"""
    pages = await PageService(db).get_pages(ctx.notebook_id)
    return ApiResponse(data=[PageResponse.model_validate(page) for page in pages])


async def create_page(
    page_data: PageContent,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Создание страницы"""
    page = await PageService(db).create_page(ctx.notebook_id, page_data.content)
    return ApiResponse(data=PageResponse.model_validate(page))


for path in NOTEBOOK_PAGES_PATHS:
    router.add_api_route(path, list_pages, methods=["GET"], response_model=ApiResponse[List[PageResponse]])
    router.add_api_route(
        path, create_page, methods=["POST"],
        response_model=ApiResponse[PageResponse], status_code=status.HTTP_201_CREATED
    )


@router.get("/pages/{page_id}", response_model=ApiResponse[PageResponse])
async def get_page(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Получение страницы"""
    page = await PageService(db).get_page(ctx.resource_id)
    return ApiResponse(data=PageResponse.model_validate(page))


@router.put("/pages/{page_id}", response_model=ApiResponse[PageResponse])
async def update_page(
    page_data: PageContent,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Обновление страницы"""
    page = await PageService(db).update_page(ctx.resource_id, page_data.content)
    return ApiResponse(data=PageResponse.model_validate(page))


@router.delete("/pages/{page_id}", response_model=ApiResponse[MessageResponse])
async def delete_page(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Удаление страницы"""
    await PageService(db).delete_page(ctx.resource_id)
    return ApiResponse(data=MessageResponse(message="Page deleted"))
