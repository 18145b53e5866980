import logging
from typing import Optional

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notehub.db.models import Answer, Collaborator, Message, Notebook, Page, Question
from notehub.domains.access.entities import Lookup, NotebookAccessFacts

logger = logging.getLogger(__name__)


class AccessRepository:
    """Чтения, нужные для проверки прав доступа"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_access_facts(
        self, notebook_id: int, user_id: Optional[int]
    ) -> Lookup[NotebookAccessFacts]:
        """Владелец, видимость и роли пользователя одним запросом"""
        stmt = (
            select(Notebook.id, Notebook.owner_id, Notebook.visibility, Collaborator.role)
            .select_from(Notebook)
            .outerjoin(
                Collaborator,
                and_(
                    Collaborator.notebook_id == Notebook.id,
                    Collaborator.user_id == user_id
                )
            )
            .where(Notebook.id == notebook_id)
        )

        try:
            rows = (await self.session.execute(stmt)).all()
        except SQLAlchemyError as e:
            return await self._failed(f"access facts for notebook {notebook_id}", e)

        if not rows:
            return Lookup.missing()

        first = rows[0]
        roles = frozenset(row.role for row in rows if row.role is not None)
        return Lookup.found(NotebookAccessFacts(
            notebook_id=first.id,
            owner_id=first.owner_id,
            visibility=first.visibility,
            roles=roles
        ))

    async def get_page_notebook_id(self, page_id: int) -> Lookup[int]:
        """Тетрадь, к которой относится страница"""
        return await self._parent(select(Page.notebook_id).where(Page.id == page_id), f"page {page_id}")

    async def get_question_page_id(self, question_id: int) -> Lookup[int]:
        """Страница, к которой относится вопрос"""
        return await self._parent(
            select(Question.page_id).where(Question.id == question_id), f"question {question_id}"
        )

    async def get_answer_question_id(self, answer_id: int) -> Lookup[int]:
        """Вопрос, к которому относится ответ"""
        return await self._parent(
            select(Answer.question_id).where(Answer.id == answer_id), f"answer {answer_id}"
        )

    async def get_message_notebook_id(self, message_id: int) -> Lookup[int]:
        """Тетрадь, к которой относится сообщение"""
        return await self._parent(
            select(Message.notebook_id).where(Message.id == message_id), f"message {message_id}"
        )

    async def _parent(self, stmt, what: str) -> Lookup[int]:
        try:
            parent_id = (await self.session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as e:
            return await self._failed(what, e)
        return Lookup.missing() if parent_id is None else Lookup.found(parent_id)

    async def _failed(self, what: str, error: SQLAlchemyError) -> Lookup:
        logger.exception(f"Storage read failed for {what}")
        await self.session.rollback()
        return Lookup.failed(str(error))
