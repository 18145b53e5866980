"""Адресация ресурсов тетради по пути запроса.

Таблица маршрутов ниже перечисляет все защищенные эндпоинты. Для каждого
указано, какой сегмент задает ресурс, тип ресурса и какое право нужно
на его тетрадь. Маршруты проверяются по порядку, побеждает первый, поэтому
литеральные сегменты вроде ``search`` и ``pages`` стоят раньше захвата
``{...}`` в той же позиции.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from notehub.core.errors import AccessDenied, MalformedReference, ResourceNotFound
from notehub.domains.access.entities import (
    AccessStore, LookupStatus, Permission, ResourceKind, ResourceRef
)

logger = logging.getLogger(__name__)

# ids are stored in 32-bit integer columns
MAX_ID = 2 ** 31 - 1


def split_path(path: str) -> Tuple[str, ...]:
    return tuple(segment for segment in path.split("/") if segment)


def _is_capture(segment: str) -> bool:
    return segment.startswith("{") and segment.endswith("}")


@dataclass(frozen=True)
class Route:
    method: str
    pattern: str
    kind: ResourceKind
    permission: Permission
    allow_anonymous: bool = False
    denial: Optional[str] = None
    segments: Tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "segments", split_path(self.pattern))

    @property
    def id_param(self) -> Optional[str]:
        """Первый захват задает ресурс, остальные идут в params"""
        for segment in self.segments:
            if _is_capture(segment):
                return segment[1:-1]
        return None

    def match(self, method: str, segments: Sequence[str]) -> Optional[Dict[str, str]]:
        if method.upper() != self.method or len(segments) != len(self.segments):
            return None

        captured: Dict[str, str] = {}
        for expected, actual in zip(self.segments, segments):
            if _is_capture(expected):
                captured[expected[1:-1]] = actual
            elif expected != actual:
                return None
        return captured


def _route(method, pattern, kind=ResourceKind.NONE, permission=Permission.AUTHENTICATED,
           anonymous=False, denial=None) -> Route:
    return Route(method, pattern, kind, permission, allow_anonymous=anonymous, denial=denial)


NB = ResourceKind.NOTEBOOK
VIEW, EDIT, OWNER = Permission.VIEW, Permission.EDIT, Permission.OWNER

ROUTES: List[Route] = [
    _route("GET", "/auth/me"),
    _route("POST", "/auth/logout"),
    _route("GET", "/notebooks"),
    _route("POST", "/notebooks"),
    _route("GET", "/notebooks/search"),

    # flat forms: the id comes last
    _route("GET", "/notebooks/pages/{notebook_id}", NB, VIEW, anonymous=True),
    _route("POST", "/notebooks/pages/{notebook_id}", NB, EDIT),
    _route("GET", "/notebooks/messages/{notebook_id}", NB, VIEW, anonymous=True),
    _route("POST", "/notebooks/messages/{notebook_id}", NB, VIEW),

    _route("GET", "/notebooks/{notebook_id}", NB, VIEW, anonymous=True),
    _route("PATCH", "/notebooks/{notebook_id}", NB, OWNER,
           denial="Only owners can change notebook settings"),
    _route("DELETE", "/notebooks/{notebook_id}", NB, OWNER,
           denial="Only owners can delete notebooks"),

    # nested forms: the id sits under its parent collection
    _route("GET", "/notebooks/{notebook_id}/pages", NB, VIEW, anonymous=True),
    _route("POST", "/notebooks/{notebook_id}/pages", NB, EDIT),
    _route("GET", "/notebooks/{notebook_id}/messages", NB, VIEW, anonymous=True),
    _route("POST", "/notebooks/{notebook_id}/messages", NB, VIEW),
    _route("GET", "/notebooks/{notebook_id}/collaborators", NB, OWNER,
           denial="Only owners can view collaborators"),
    _route("POST", "/notebooks/{notebook_id}/collaborators", NB, OWNER,
           denial="Only owners can share"),
    _route("DELETE", "/notebooks/{notebook_id}/collaborators/{user_id}", NB, OWNER,
           denial="Only owners can remove collaborators"),

    _route("GET", "/pages/{page_id}", ResourceKind.PAGE, VIEW, anonymous=True),
    _route("PUT", "/pages/{page_id}", ResourceKind.PAGE, EDIT),
    _route("DELETE", "/pages/{page_id}", ResourceKind.PAGE, EDIT),
    _route("GET", "/pages/{page_id}/questions", ResourceKind.PAGE, VIEW, anonymous=True),
    _route("POST", "/pages/{page_id}/questions", ResourceKind.PAGE, VIEW),

    _route("GET", "/questions/{question_id}/answers", ResourceKind.QUESTION, VIEW, anonymous=True),
    _route("POST", "/questions/{question_id}/answers", ResourceKind.QUESTION, VIEW),
    _route("GET", "/answers/{answer_id}", ResourceKind.ANSWER, VIEW, anonymous=True),

    # the handler additionally requires edit rights or authorship
    _route("DELETE", "/messages/{message_id}", ResourceKind.MESSAGE, VIEW),
]

# one storage hop per level, walked until the notebook is reached
PARENT_HOPS = {
    ResourceKind.ANSWER: (ResourceKind.QUESTION, "get_answer_question_id"),
    ResourceKind.QUESTION: (ResourceKind.PAGE, "get_question_page_id"),
    ResourceKind.PAGE: (ResourceKind.NOTEBOOK, "get_page_notebook_id"),
    ResourceKind.MESSAGE: (ResourceKind.NOTEBOOK, "get_message_notebook_id"),
}


def parse_id(segment: str) -> int:
    """Положительный десятичный id, иначе MalformedReference"""
    if not segment.isascii() or not segment.isdigit():
        raise MalformedReference(f"Invalid id: {segment!r}")
    value = int(segment)
    if value < 1 or value > MAX_ID:
        raise MalformedReference(f"Invalid id: {segment!r}")
    return value


class ResourcePathResolver:
    def __init__(self, routes: Sequence[Route] = ROUTES, prefix: str = "/api"):
        self.routes = list(routes)
        self.prefix = split_path(prefix)

    def in_scope(self, path: str) -> bool:
        return split_path(path)[:len(self.prefix)] == self.prefix

    def strip_prefix(self, path: str) -> Tuple[str, ...]:
        segments = split_path(path)
        if self.prefix and segments[:len(self.prefix)] == self.prefix:
            return segments[len(self.prefix):]
        return segments

    def find(self, method: str, path: str) -> Optional[Tuple[Route, Dict[str, str]]]:
        """Первый подходящий маршрут и сырые захваты, id еще не разобраны"""
        segments = self.strip_prefix(path)
        for route in self.routes:
            captured = route.match(method, segments)
            if captured is not None:
                return route, captured
        return None

    @staticmethod
    def build_ref(route: Route, captured: Dict[str, str]) -> ResourceRef:
        ids = {name: parse_id(value) for name, value in captured.items()}
        id_param = route.id_param
        return ResourceRef(
            kind=route.kind,
            resource_id=ids.pop(id_param) if id_param else None,
            params=ids
        )

    def match(self, method: str, path: str) -> Tuple[Route, ResourceRef]:
        """Поиск маршрута и разбор захваченных id.

        Raises:
            ResourceNotFound: маршрут не найден
            MalformedReference: id не является целым числом
        """
        found = self.find(method, path)
        if found is None:
            raise ResourceNotFound("Endpoint not found")
        route, captured = found
        return route, self.build_ref(route, captured)

    async def resolve_notebook_id(self, ref: ResourceRef, store: AccessStore) -> Optional[int]:
        """Подъем по цепочке родителей до тетради.

        Raises:
            ResourceNotFound: ресурса в цепочке нет
            AccessDenied: ошибка чтения родителя из БД
        """
        if ref.kind is ResourceKind.NONE:
            return None

        kind, current = ref.kind, ref.resource_id
        while kind is not ResourceKind.NOTEBOOK:
            parent_kind, getter = PARENT_HOPS[kind]
            lookup = await getattr(store, getter)(current)

            if lookup.status is LookupStatus.MISSING:
                raise ResourceNotFound(f"{kind.value.capitalize()} not found")
            if lookup.status is LookupStatus.FAILED:
                logger.error(f"Parent lookup for {kind.value} {current} failed: {lookup.error}")
                raise AccessDenied()

            kind, current = parent_kind, lookup.value

        return current
