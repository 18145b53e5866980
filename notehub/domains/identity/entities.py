from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar, Optional, Union


class User:
    """Сущность пользователя"""

    def __init__(
        self,
        id: Optional[int],
        name: str,
        email: str,
        password_hash: str,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.id = id
        self.name = name
        self.email = email
        self.password_hash = password_hash
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()

    @classmethod
    def create_user(cls, name: str, email: str, password_hash: str) -> "User":
        """Создание нового пользователя, id выдает БД"""
        return cls(
            id=None,
            name=name.strip(),
            email=email.lower(),
            password_hash=password_hash
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, User):
            return False
        return self.id == other.id

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, name={self.name})"


@dataclass(frozen=True)
class Authenticated:
    """Пользователь с действительным токеном"""

    user_id: int
    email: str
    name: str

    is_authenticated: ClassVar[bool] = True


@dataclass(frozen=True)
class Anonymous:
    """Гость без токена"""

    is_authenticated: ClassVar[bool] = False


ANONYMOUS = Anonymous()

Identity = Union[Authenticated, Anonymous]


@dataclass(frozen=True)
class Claims:
    """Данные из токена сессии"""

    subject: int
    email: str
    name: str
    issued_at: datetime
    expiry: datetime

    def to_identity(self) -> Authenticated:
        return Authenticated(user_id=self.subject, email=self.email, name=self.name)
