from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from notehub.api.deps import get_password_hasher, get_request_context, get_token_service
from notehub.core.db import get_db
from notehub.core.security import PasswordHasher, SessionTokenService
from notehub.domains.access.context import RequestContext
from notehub.domains.identity.entities import User
from notehub.domains.identity.schemas import AuthResponse, UserCreate, UserLogin, UserResponse
from notehub.domains.identity.services import IdentityService
from notehub.domains.notebooks.schemas import ApiResponse, MessageResponse

router = APIRouter(prefix="/auth", tags=["authentication"])


def _auth_response(user: User, token: str) -> ApiResponse[AuthResponse]:
    return ApiResponse(data=AuthResponse(user_id=user.id, name=user.name, email=user.email, token=token))


@router.post("/register", response_model=ApiResponse[AuthResponse], status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: SessionTokenService = Depends(get_token_service)
):
    """Регистрация нового пользователя"""
    identity_service = IdentityService(db, hasher, tokens)
    user, token = await identity_service.register_user(user_data)
    return _auth_response(user, token)


@router.post("/login", response_model=ApiResponse[AuthResponse])
async def login(
    login_data: UserLogin,
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: SessionTokenService = Depends(get_token_service)
):
    """Вход пользователя"""
    identity_service = IdentityService(db, hasher, tokens)
    user, token = await identity_service.login_user(login_data)
    return _auth_response(user, token)


@router.post("/logout", response_model=ApiResponse[MessageResponse])
async def logout(ctx: RequestContext = Depends(get_request_context)):
    """Выход пользователя (токен остается действительным до истечения срока)"""
    return ApiResponse(data=MessageResponse(message="Logged out successfully"))


@router.get("/me", response_model=ApiResponse[UserResponse])
async def get_current_user_info(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: SessionTokenService = Depends(get_token_service)
):
    """Получение информации о текущем пользователе"""
    user = await IdentityService(db, hasher, tokens).get_user(ctx.user_id)
    return ApiResponse(data=UserResponse(user_id=user.id, name=user.name, email=user.email))
