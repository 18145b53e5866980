from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from notehub.core.db import get_db
from notehub.core.security import PasswordHasher, SessionTokenService
from notehub.db.repositories.access_repository import AccessRepository
from notehub.domains.access.context import RequestAuthorizer, RequestContext


async def get_request_context(
    request: Request,
    db: AsyncSession = Depends(get_db)
) -> RequestContext:
    """Зависимость: идентификация, разбор пути и проверка прав"""
    authorizer: RequestAuthorizer = request.app.state.authorizer
    return await authorizer.authorize(
        request.method,
        request.url.path,
        request.headers.get("Authorization"),
        AccessRepository(db)
    )


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


def get_token_service(request: Request) -> SessionTokenService:
    return request.app.state.tokens
