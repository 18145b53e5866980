import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notehub.api.http import auth_router, messages_router, notebooks_router, pages_router, qna_router
from notehub.core.config import Settings
from notehub.core.db import create_engine, create_schema, create_sessionmaker
from notehub.core.errors import NotebookServiceError
from notehub.core.security import PasswordHasher, SessionTokenService
from notehub.domains.access.context import RequestAuthorizer
from notehub.domains.access.resolver import ResourcePathResolver

logger = logging.getLogger(__name__)

VALUE_ERROR_PREFIX = "Value error, "


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    first = errors[0]
    message = first.get("msg", "Invalid request")
    if message.startswith(VALUE_ERROR_PREFIX):
        return message[len(VALUE_ERROR_PREFIX):]

    # named fields only, without list indexes and the "body" root
    names = [part for part in first.get("loc", ()) if isinstance(part, str) and part != "body"]
    return f"{names[-1]}: {message}" if names else message


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Сборка приложения: настройки, БД, сервисы токенов и проверки доступа"""
    settings = settings or Settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    engine = create_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.create_schema:
            await create_schema(engine)
        logger.info(f"NoteHub API started, guest reads {'on' if settings.allow_guest_read else 'off'}")
        yield
        await engine.dispose()

    app = FastAPI(
        title="NoteHub",
        description="Совместные конспекты с вопросами, ответами и чатом",
        version="1.0.0",
        lifespan=lifespan
    )

    # Настройка CORS для работы с frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    tokens = SessionTokenService.from_settings(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = create_sessionmaker(engine)
    app.state.hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.tokens = tokens
    app.state.authorizer = RequestAuthorizer(
        tokens,
        ResourcePathResolver(prefix=settings.api_prefix),
        allow_guest_read=settings.allow_guest_read
    )

    @app.exception_handler(NotebookServiceError)
    async def service_error_handler(request: Request, exc: NotebookServiceError):
        return _error_response(exc.status_code, exc.message)

    def early_auth_error(request: Request) -> Optional[NotebookServiceError]:
        return app.state.authorizer.early_auth_error(
            request.method, request.url.path, request.headers.get("Authorization")
        )

    # body and routing errors are raised before any dependency runs,
    # so 401 is checked here first
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        auth_error = early_auth_error(request)
        if auth_error is not None:
            return _error_response(auth_error.status_code, auth_error.message)
        return _error_response(400, _validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        auth_error = early_auth_error(request)
        if auth_error is not None:
            return _error_response(auth_error.status_code, auth_error.message)

        message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
        return _error_response(exc.status_code, message)

    # Подключаем роутеры; плоские пути /notebooks/pages/{id} раньше /notebooks/{id}
    for router in (auth_router, pages_router, messages_router, qna_router, notebooks_router):
        app.include_router(router, prefix=settings.api_prefix)

    @app.get("/")
    async def root():
        """Корневой эндпоинт"""
        return {
            "message": "NoteHub API",
            "version": "1.0.0",
            "docs": "/docs"
        }

    return app
