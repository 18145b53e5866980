from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from notehub.core.errors import Conflict
from notehub.db.models.user import User as UserModel
from notehub.domains.identity.entities import User


class UserRepository:
    """Учетные записи: регистрация и поиск по id или email"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user: User) -> User:
        """Сохранение пользователя, email должен быть уникальным"""
        row = UserModel(name=user.name, email=user.email.lower(), password_hash=user.password_hash)
        self.session.add(row)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise Conflict("Email already registered")
        await self.session.refresh(row)
        return self._to_domain(row)

    async def get_by_id(self, user_id: int) -> Optional[User]:
        return await self._fetch_one(select(UserModel).where(UserModel.id == user_id))

    async def get_by_email(self, email: str) -> Optional[User]:
        """Email сравнивается без учета регистра"""
        return await self._fetch_one(select(UserModel).where(UserModel.email == email.lower()))

    async def email_exists(self, email: str) -> bool:
        count = await self.session.scalar(
            select(func.count(UserModel.id)).where(UserModel.email == email.lower())
        )
        return bool(count)

    async def _fetch_one(self, stmt) -> Optional[User]:
        row = (await self.session.execute(stmt)).scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    @staticmethod
    def _to_domain(row: UserModel) -> User:
        return User(
            id=row.id,
            name=row.name,
            email=row.email,
            password_hash=row.password_hash,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
