from dataclasses import dataclass
from typing import FrozenSet, Optional

from notehub.core.errors import AuthMissing, NotebookServiceError, ResourceNotFound
from notehub.core.security import SessionTokenService
from notehub.domains.access.entities import AccessDecision, AccessStore, Permission, ResourceRef
from notehub.domains.access.resolver import ResourcePathResolver, Route
from notehub.domains.access.services import AuthorizationEngine
from notehub.domains.identity.entities import ANONYMOUS, Authenticated, Identity


# reachable without a token, matched on the exact path
PUBLIC_ENDPOINTS: FrozenSet[str] = frozenset({"/auth/login", "/auth/register"})


@dataclass(frozen=True)
class RequestContext:
    """Контекст запроса: кто вызывает и к какому ресурсу"""

    identity: Identity
    route: Optional[Route] = None
    resource: Optional[ResourceRef] = None
    notebook_id: Optional[int] = None
    decision: Optional[AccessDecision] = None

    @property
    def user_id(self) -> int:
        if not isinstance(self.identity, Authenticated):
            raise AuthMissing()
        return self.identity.user_id

    @property
    def optional_user_id(self) -> Optional[int]:
        return self.identity.user_id if isinstance(self.identity, Authenticated) else None

    @property
    def resource_id(self) -> Optional[int]:
        return self.resource.resource_id if self.resource else None

    def param(self, name: str) -> int:
        return self.resource.params[name]


class RequestAuthorizer:
    """Проверка токена, разбор пути и проверка прав"""

    def __init__(
        self,
        tokens: SessionTokenService,
        resolver: ResourcePathResolver,
        allow_guest_read: bool = True
    ):
        self.tokens = tokens
        self.resolver = resolver
        self.allow_guest_read = allow_guest_read

    def is_public(self, path: str) -> bool:
        return "/" + "/".join(self.resolver.strip_prefix(path)) in PUBLIC_ENDPOINTS

    def early_auth_error(
        self,
        method: str,
        path: str,
        authorization: Optional[str]
    ) -> Optional[NotebookServiceError]:
        """Ошибка аутентификации для запроса под префиксом API, отклоненного до проверки прав"""
        if not self.resolver.in_scope(path) or self.is_public(path):
            return None
        allow_anonymous = self._admits_guest(self.resolver.find(method, path))
        try:
            self.tokens.identify(authorization, allow_anonymous=allow_anonymous)
        except NotebookServiceError as e:
            return e
        return None

    def _admits_guest(self, found) -> bool:
        return self.allow_guest_read and found is not None and found[0].allow_anonymous

    async def authorize(
        self,
        method: str,
        path: str,
        authorization: Optional[str],
        store: AccessStore
    ) -> RequestContext:
        if self.is_public(path):
            return RequestContext(identity=ANONYMOUS)

        found = self.resolver.find(method, path)
        allow_anonymous = self._admits_guest(found)

        # 401s come before any parsing or storage work
        identity = self.tokens.identify(authorization, allow_anonymous=allow_anonymous)

        if found is None:
            raise ResourceNotFound("Endpoint not found")
        route, captured = found
        ref = self.resolver.build_ref(route, captured)

        if route.permission is Permission.AUTHENTICATED:
            return RequestContext(identity=identity, route=route, resource=ref)

        notebook_id = await self.resolver.resolve_notebook_id(ref, store)
        decision = await AuthorizationEngine(store).check(
            identity, notebook_id, route.permission, message=route.denial
        )
        return RequestContext(
            identity=identity,
            route=route,
            resource=ref,
            notebook_id=notebook_id,
            decision=decision
        )
