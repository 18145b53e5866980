from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from notehub.api.deps import get_request_context
from notehub.core.db import get_db
from notehub.domains.access.context import RequestContext
from notehub.domains.notebooks.schemas import (
    AnswerResponse, ApiResponse, QuestionResponse, TextCreate
)
from notehub.domains.notebooks.services import QnAService

router = APIRouter(tags=["qna"])


@router.get("/pages/{page_id}/questions", response_model=ApiResponse[List[QuestionResponse]])
async def get_thread(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Вопросы к странице вместе с ответами"""
    questions = await QnAService(db).get_thread(ctx.resource_id)
    return ApiResponse(data=[QuestionResponse.model_validate(q) for q in questions])


@router.post(
    "/pages/{page_id}/questions",
    response_model=ApiResponse[QuestionResponse],
    status_code=status.HTTP_201_CREATED
)
async def ask_question(
    question_data: TextCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Новый вопрос к странице"""
    question = await QnAService(db).ask(ctx.resource_id, ctx.user_id, question_data.text)
    return ApiResponse(data=QuestionResponse.model_validate(question))


@router.get("/questions/{question_id}/answers", response_model=ApiResponse[List[AnswerResponse]])
async def get_answers(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Ответы на вопрос"""
    answers = await QnAService(db).get_answers(ctx.resource_id)
    return ApiResponse(data=[AnswerResponse.model_validate(a) for a in answers])


@router.post(
    "/questions/{question_id}/answers",
    response_model=ApiResponse[AnswerResponse],
    status_code=status.HTTP_201_CREATED
)
async def post_answer(
    answer_data: TextCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Ответ на вопрос"""
    answer = await QnAService(db).answer(ctx.resource_id, ctx.user_id, answer_data.text)
    return ApiResponse(data=AnswerResponse.model_validate(answer))


@router.get("/answers/{answer_id}", response_model=ApiResponse[AnswerResponse])
async def get_answer(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    answer = await QnAService(db).get_answer(ctx.resource_id)
    return ApiResponse(data=AnswerResponse.model_validate(answer))
