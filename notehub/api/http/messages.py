from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from notehub.api.deps import get_request_context
from notehub.core.db import get_db
from notehub.domains.access.context import RequestContext
from notehub.domains.notebooks.schemas import (
    ApiResponse, ChatMessageResponse, MessageResponse, TextCreate
)
from notehub.domains.notebooks.services import MessageService

router = APIRouter(tags=["messages"])

NOTEBOOK_MESSAGES_PATHS = ("/notebooks/messages/{notebook_id}", "/notebooks/{notebook_id}/messages")


async def list_messages(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """История чата тетради"""
    messages = await MessageService(db).get_messages(ctx.notebook_id)
    return ApiResponse(data=[ChatMessageResponse.model_validate(m) for m in messages])


async def send_message(
    message_data: TextCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Отправка сообщения в чат"""
    message = await MessageService(db).send(ctx.notebook_id, ctx.user_id, message_data.text)
    return ApiResponse(data=ChatMessageResponse.model_validate(message))


for path in NOTEBOOK_MESSAGES_PATHS:
    router.add_api_route(
        path, list_messages, methods=["GET"], response_model=ApiResponse[List[ChatMessageResponse]]
    )
    router.add_api_route(
        path, send_message, methods=["POST"],
        response_model=ApiResponse[ChatMessageResponse], status_code=status.HTTP_201_CREATED
    )


@router.delete("/messages/{message_id}", response_model=ApiResponse[MessageResponse])
async def delete_message(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Удаление сообщения автором или редактором"""
    await MessageService(db).delete_message(ctx.resource_id, ctx.user_id, ctx.decision)
    return ApiResponse(data=MessageResponse(message="Message deleted"))
