import logging
from typing import AbstractSet, Optional

from notehub.core.errors import AccessDenied
from notehub.domains.access.entities import (
    DENY_ALL, OWNER_ROLE, AccessDecision, AccessStore, LookupStatus,
    NotebookAccessFacts, Permission, Role, Visibility
)
from notehub.domains.identity.entities import Authenticated, Identity

logger = logging.getLogger(__name__)

DENIAL_MESSAGES = {
    Permission.VIEW: "Access denied",
    Permission.EDIT: "Edit permission required",
    Permission.OWNER: "Only owners can manage this notebook",
}


def decide(identity: Identity, facts: NotebookAccessFacts) -> AccessDecision:
    """Решение о доступе по уже прочитанным данным тетради.

    view  = owner OR any collaborator row OR Public
    edit  = owner OR Editor row (visibility never grants edit)
    owner = identity is the stored owner
    """
    is_public = facts.visibility is Visibility.PUBLIC

    if not isinstance(identity, Authenticated):
        return AccessDecision(can_view=is_public, can_edit=False, is_owner=False)

    is_owner = identity.user_id == facts.owner_id
    is_editor = Role.EDITOR in facts.roles
    is_collaborator = bool(facts.roles)

    return AccessDecision(
        can_view=is_owner or is_collaborator or is_public,
        can_edit=is_owner or is_editor,
        is_owner=is_owner,
        role=role_label(is_owner, facts.roles)
    )


def role_label(is_owner: bool, roles: AbstractSet[Role]) -> Optional[str]:
    """Сильнейшая роль: Owner, затем Editor, затем Viewer"""
    if is_owner:
        return OWNER_ROLE
    if Role.EDITOR in roles:
        return Role.EDITOR.value
    if Role.VIEWER in roles:
        return Role.VIEWER.value
    return None


class AuthorizationEngine:
    """Проверка прав пользователя на тетрадь.

    Вложенные ресурсы сначала сводятся к своей тетради. Несуществующая тетрадь
    и ошибка чтения из БД дают отказ.
    """

    def __init__(self, store: AccessStore):
        self.store = store

    async def evaluate(self, identity: Identity, notebook_id: int) -> AccessDecision:
        user_id = identity.user_id if isinstance(identity, Authenticated) else None
        lookup = await self.store.get_access_facts(notebook_id, user_id)

        if lookup.status is LookupStatus.FAILED:
            logger.error(f"Access facts for notebook {notebook_id} unavailable: {lookup.error}")
            return DENY_ALL
        if lookup.status is LookupStatus.MISSING:
            return DENY_ALL

        return decide(identity, lookup.value)

    async def can_view(self, identity: Identity, notebook_id: int) -> bool:
        return (await self.evaluate(identity, notebook_id)).can_view

    async def can_edit(self, identity: Identity, notebook_id: int) -> bool:
        return (await self.evaluate(identity, notebook_id)).can_edit

    async def is_owner(self, identity: Identity, notebook_id: int) -> bool:
        return (await self.evaluate(identity, notebook_id)).is_owner

    async def check(
        self,
        identity: Identity,
        notebook_id: int,
        permission: Permission,
        message: Optional[str] = None
    ) -> AccessDecision:
        """Проверка ``permission``, AccessDenied если права нет"""
        decision = await self.evaluate(identity, notebook_id)

        if permission is Permission.VIEW:
            allowed = decision.can_view
        elif permission is Permission.EDIT:
            allowed = decision.can_edit
        elif permission is Permission.OWNER:
            allowed = decision.is_owner
        else:
            raise ValueError(f"{permission} is not a notebook permission")

        if not allowed:
            logger.info(f"Denied {permission.value} on notebook {notebook_id} to {identity}")
            raise AccessDenied(message or DENIAL_MESSAGES[permission])

        return decision
