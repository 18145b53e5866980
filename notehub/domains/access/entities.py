import enum
from dataclasses import dataclass, field
from typing import FrozenSet, Generic, Optional, Protocol, TypeVar

T = TypeVar("T")


class Visibility(str, enum.Enum):
    PUBLIC = "Public"
    PRIVATE = "Private"


class Role(str, enum.Enum):
    """Роли участников. Владелец не хранится как роль"""

    EDITOR = "Editor"
    VIEWER = "Viewer"


OWNER_ROLE = "Owner"


class Permission(enum.Enum):
    """Право, которое маршрут требует на тетрадь"""

    AUTHENTICATED = "authenticated"  # any signed-in caller, no notebook involved
    VIEW = "view"
    EDIT = "edit"
    OWNER = "owner"


class ResourceKind(enum.Enum):
    NONE = "none"
    NOTEBOOK = "notebook"
    PAGE = "page"
    QUESTION = "question"
    ANSWER = "answer"
    MESSAGE = "message"


class LookupStatus(enum.Enum):
    FOUND = "found"
    MISSING = "missing"
    FAILED = "failed"


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """Результат чтения: найдено, нет строки или ошибка БД"""

    status: LookupStatus
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def found(cls, value: T) -> "Lookup[T]":
        return cls(LookupStatus.FOUND, value=value)

    @classmethod
    def missing(cls) -> "Lookup[T]":
        return cls(LookupStatus.MISSING)

    @classmethod
    def failed(cls, error: str) -> "Lookup[T]":
        return cls(LookupStatus.FAILED, error=error)

    @property
    def is_found(self) -> bool:
        return self.status is LookupStatus.FOUND


@dataclass(frozen=True)
class NotebookAccessFacts:
    """Все данные для решения, одним запросом"""

    notebook_id: int
    owner_id: int
    visibility: Visibility
    # roles of the asking user; a set, so duplicate rows collapse
    roles: FrozenSet[Role] = field(default_factory=frozenset)


@dataclass(frozen=True)
class AccessDecision:
    can_view: bool
    can_edit: bool
    is_owner: bool
    role: Optional[str] = None


DENY_ALL = AccessDecision(can_view=False, can_edit=False, is_owner=False)


@dataclass(frozen=True)
class ResourceRef:
    """Ресурс, на который указывает путь запроса"""

    kind: ResourceKind
    resource_id: Optional[int] = None
    # extra captured ids, e.g. the collaborator user id
    params: dict = field(default_factory=dict)


class AccessStore(Protocol):
    """Чтения из БД для проверки прав"""

    async def get_access_facts(
        self, notebook_id: int, user_id: Optional[int]
    ) -> Lookup[NotebookAccessFacts]:
        ...

    async def get_page_notebook_id(self, page_id: int) -> Lookup[int]:
        ...

    async def get_question_page_id(self, question_id: int) -> Lookup[int]:
        ...

    async def get_answer_question_id(self, answer_id: int) -> Lookup[int]:
        ...

    async def get_message_notebook_id(self, message_id: int) -> Lookup[int]:
        ...
