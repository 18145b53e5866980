from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from notehub.db.models import Message as MessageModel
from notehub.db.models import User as UserModel
from notehub.domains.notebooks.entities import Message


class MessageRepository:
    """Репозиторий для сообщений чата тетради"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, notebook_id: int, user_id: int, text: str) -> Message:
        """Отправка сообщения"""
        db_message = MessageModel(notebook_id=notebook_id, user_id=user_id, text=text)

        self.session.add(db_message)
        await self.session.commit()
        await self.session.refresh(db_message)
        return await self.get_by_id(db_message.id)

    async def get_by_id(self, message_id: int) -> Optional[Message]:
        """Получение сообщения по id"""
        messages = await self._where(MessageModel.id == message_id)
        return messages[0] if messages else None

    async def get_by_notebook(self, notebook_id: int) -> List[Message]:
        """История чата, старые первыми"""
        return await self._where(MessageModel.notebook_id == notebook_id)

    async def delete(self, message_id: int) -> bool:
        """Удаление сообщения"""
        result = await self.session.execute(
            delete(MessageModel).where(MessageModel.id == message_id)
        )
        await self.session.commit()
        return result.rowcount > 0

    async def _where(self, condition) -> List[Message]:
        result = await self.session.execute(
            select(MessageModel, UserModel.name)
            .join(UserModel, MessageModel.user_id == UserModel.id)
            .where(condition)
            .order_by(MessageModel.created_at.asc(), MessageModel.id.asc())
        )
        return [
            Message(
                id=db_message.id,
                notebook_id=db_message.notebook_id,
                user_id=db_message.user_id,
                user_name=name,
                text=db_message.text,
                created_at=db_message.created_at
            )
            for db_message, name in result.all()
        ]
