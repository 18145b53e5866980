import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from notehub.core.errors import AccessDenied, ResourceNotFound, ValidationFailed
from notehub.db.repositories.message_repository import MessageRepository
from notehub.db.repositories.notebook_repository import NotebookRepository
from notehub.db.repositories.page_repository import PageRepository
from notehub.db.repositories.qna_repository import QnARepository
from notehub.db.repositories.user_repository import UserRepository
from notehub.domains.access.entities import AccessDecision
from notehub.domains.notebooks.entities import (
    Answer, Collaborator, Message, Notebook, Page, Question
)
from notehub.domains.notebooks.schemas import CollaboratorCreate, NotebookCreate, NotebookUpdate

logger = logging.getLogger(__name__)


class NotebookService:
    """Сервис для работы с тетрадями и доступом к ним.

    Permission checks happen before these methods are called; they only
    handle what is left: missing rows and rules that depend on the payload.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.notebook_repository = NotebookRepository(session)
        self.user_repository = UserRepository(session)

    async def get_dashboard(self, user_id: int) -> List[Notebook]:
        """Тетради пользователя: собственные и общие"""
        return await self.notebook_repository.get_dashboard(user_id)

    async def search(self, query: Optional[str], user_id: int) -> List[Notebook]:
        """Поиск тетрадей"""
        if query is None or not query.strip():
            raise ValidationFailed("Missing search query")
        return await self.notebook_repository.search(query.strip(), user_id)

    async def create_notebook(self, data: NotebookCreate, owner_id: int) -> Notebook:
        """Создание новой тетради"""
        notebook = await self.notebook_repository.create(
            owner_id=owner_id,
            title=data.title,
            course_name=data.course_name,
            visibility=data.visibility
        )
        logger.info(f"User {owner_id} created notebook {notebook.id}")
        return notebook

    async def get_notebook(self, notebook_id: int, user_id: Optional[int] = None) -> Notebook:
        """Получение тетради по id"""
        notebook = await self.notebook_repository.get_by_id(notebook_id, user_id=user_id)
        if not notebook:
            raise ResourceNotFound("Notebook not found")
        return notebook

    async def update_notebook(self, notebook_id: int, data: NotebookUpdate, user_id: int) -> Notebook:
        """Обновление тетради"""
        updated = await self.notebook_repository.update(
            notebook_id,
            title=data.title,
            course_name=data.course_name,
            visibility=data.visibility
        )
        if not updated:
            raise ResourceNotFound("Notebook not found")
        return await self.get_notebook(notebook_id, user_id=user_id)

    async def delete_notebook(self, notebook_id: int) -> None:
        """Удаление тетради"""
        if not await self.notebook_repository.delete(notebook_id):
            raise ResourceNotFound("Notebook not found")
        logger.info(f"Deleted notebook {notebook_id}")

    async def get_collaborators(self, notebook_id: int) -> List[Collaborator]:
        return await self.notebook_repository.get_collaborators(notebook_id)

    async def add_collaborator(self, notebook_id: int, data: CollaboratorCreate, owner_id: int) -> None:
        """Выдача доступа пользователю по email"""
        user = await self.user_repository.get_by_email(data.email)
        if not user:
            raise ResourceNotFound("User not found")
        if user.id == owner_id:
            raise ValidationFailed("The owner already has full access")

        await self.notebook_repository.add_collaborator(notebook_id, user.id, data.role)
        logger.info(f"Granted {data.role.value} on notebook {notebook_id} to user {user.id}")

    async def remove_collaborator(self, notebook_id: int, user_id: int) -> None:
        """Отзыв доступа"""
        if not await self.notebook_repository.remove_collaborator(notebook_id, user_id):
            raise ResourceNotFound("Collaborator not found")
        logger.info(f"Revoked access to notebook {notebook_id} from user {user_id}")


class PageService:
    """Сервис для работы со страницами"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.page_repository = PageRepository(session)

    async def get_pages(self, notebook_id: int) -> List[Page]:
        return await self.page_repository.get_by_notebook(notebook_id)

    async def create_page(self, notebook_id: int, content: str) -> Page:
        return await self.page_repository.create(notebook_id, content)

    async def get_page(self, page_id: int) -> Page:
        page = await self.page_repository.get_by_id(page_id)
        if not page:
            raise ResourceNotFound("Page not found")
        return page

    async def update_page(self, page_id: int, content: str) -> Page:
        page = await self.page_repository.update(page_id, content)
        if not page:
            raise ResourceNotFound("Page not found")
        return page

    async def delete_page(self, page_id: int) -> None:
        if not await self.page_repository.delete(page_id):
            raise ResourceNotFound("Page not found")


class QnAService:
    """Вопросы к страницам и ответы на них"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.qna_repository = QnARepository(session)

    async def get_thread(self, page_id: int) -> List[Question]:
        return await self.qna_repository.get_thread(page_id)

    async def ask(self, page_id: int, user_id: int, text: str) -> Question:
        return await self.qna_repository.create_question(page_id, user_id, text)

    async def get_answers(self, question_id: int) -> List[Answer]:
        return await self.qna_repository.get_answers(question_id)

    async def answer(self, question_id: int, user_id: int, text: str) -> Answer:
        return await self.qna_repository.create_answer(question_id, user_id, text)

    async def get_answer(self, answer_id: int) -> Answer:
        answer = await self.qna_repository.get_answer(answer_id)
        if not answer:
            raise ResourceNotFound("Answer not found")
        return answer


class MessageService:
    """Чат тетради"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.message_repository = MessageRepository(session)

    async def get_messages(self, notebook_id: int) -> List[Message]:
        return await self.message_repository.get_by_notebook(notebook_id)

    async def send(self, notebook_id: int, user_id: int, text: str) -> Message:
        return await self.message_repository.create(notebook_id, user_id, text)

    async def delete_message(self, message_id: int, user_id: int, decision: AccessDecision) -> None:
        """Удаление сообщения автором или редактором тетради"""
        message = await self.message_repository.get_by_id(message_id)
        if not message:
            raise ResourceNotFound("Message not found")
        if not decision.can_edit and message.user_id != user_id:
            raise AccessDenied("Only the author or an editor can delete this message")

        await self.message_repository.delete(message_id)
