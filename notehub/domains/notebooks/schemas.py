from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from notehub.core.schemas import CamelModel
from notehub.domains.access.entities import Role, Visibility

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Общая обертка успешного ответа"""
    success: bool = True
    data: T


class MessageResponse(CamelModel):
    message: str


def _required_text(v: str, label: str) -> str:
    if not v or not v.strip():
        raise ValueError(f'{label} is required')
    return v


class NotebookCreate(CamelModel):
    """Схема для создания тетради"""
    title: str = Field(..., max_length=255)
    course_name: str = Field(default="", max_length=255)
    visibility: Visibility = Visibility.PRIVATE

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return _required_text(v, 'Title').strip()


class NotebookUpdate(CamelModel):
    """Схема для обновления тетради"""
    title: Optional[str] = Field(None, max_length=255)
    course_name: Optional[str] = Field(None, max_length=255)
    visibility: Optional[Visibility] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if v is not None:
            return _required_text(v, 'Title').strip()
        return v


class NotebookResponse(CamelModel):
    """Схема для ответа с данными тетради"""
    id: int
    owner_id: int
    owner_name: Optional[str] = None
    title: str
    course_name: str
    visibility: Visibility
    user_role: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CollaboratorCreate(CamelModel):
    """Схема для выдачи доступа по email"""
    email: EmailStr
    role: Role = Role.VIEWER


class CollaboratorResponse(CamelModel):
    user_id: int
    name: str
    email: str
    role: Role

    model_config = ConfigDict(from_attributes=True)


class PageContent(CamelModel):
    """Схема для создания и обновления страницы"""
    content: str

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        return _required_text(v, 'Content')


class PageResponse(CamelModel):
    id: int
    notebook_id: int
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TextCreate(CamelModel):
    """Текст вопроса, ответа или сообщения"""
    text: str = Field(..., max_length=10000)

    @field_validator('text')
    @classmethod
    def validate_text(cls, v):
        return _required_text(v, 'Text').strip()


class AnswerResponse(CamelModel):
    id: int
    question_id: int
    user_id: int
    user_name: str
    text: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class QuestionResponse(CamelModel):
    id: int
    page_id: int
    user_id: int
    user_name: str
    text: str
    created_at: datetime
    answers: List[AnswerResponse] = []

    model_config = ConfigDict(from_attributes=True)


class ChatMessageResponse(CamelModel):
    id: int
    notebook_id: int
    user_id: int
    user_name: str
    text: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
