import logging
from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from notehub.core.errors import AuthInvalid, Conflict, ResourceNotFound
from notehub.core.security import PasswordHasher, SessionTokenService
from notehub.db.repositories.user_repository import UserRepository
from notehub.domains.identity.entities import User
from notehub.domains.identity.schemas import UserCreate, UserLogin

logger = logging.getLogger(__name__)


class IdentityService:
    """Сервис для работы с идентификацией и аутентификацией пользователей"""

    def __init__(self, session: AsyncSession, hasher: PasswordHasher, tokens: SessionTokenService):
        self.session = session
        self.hasher = hasher
        self.tokens = tokens
        self.user_repository = UserRepository(session)

    async def register_user(self, user_data: UserCreate) -> Tuple[User, str]:
        """Регистрация нового пользователя"""
        if await self.user_repository.email_exists(user_data.email):
            raise Conflict("Email already registered")

        user = User.create_user(
            name=user_data.name,
            email=user_data.email,
            password_hash=self.hasher.hash(user_data.password)
        )
        created = await self.user_repository.create(user)
        logger.info(f"Registered user {created.id}")

        return created, self.tokens.issue(created)

    async def authenticate_user(self, login_data: UserLogin) -> User:
        """Аутентификация пользователя"""
        user = await self.user_repository.get_by_email(login_data.email)

        # same answer for an unknown email and a wrong password
        if not user or not self.hasher.verify(login_data.password, user.password_hash):
            raise AuthInvalid("Invalid email or password")

        return user

    async def login_user(self, login_data: UserLogin) -> Tuple[User, str]:
        """Вход пользователя и создание JWT токена"""
        user = await self.authenticate_user(login_data)
        return user, self.tokens.issue(user)

    async def get_user(self, user_id: int) -> User:
        """Получение пользователя по id"""
        user = await self.user_repository.get_by_id(user_id)
        if not user:
            raise ResourceNotFound("User not found")
        return user
