from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from notehub.core.config import Settings

# Базовый класс для моделей
Base = declarative_base()


def create_engine(settings: Settings) -> AsyncEngine:
    """Асинхронный движок"""
    return create_async_engine(settings.database_url, future=True, echo=settings.db_echo)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    # models must be imported so their tables are registered on Base.metadata
    import notehub.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Функция для dependency injection в FastAPI
async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    async with request.app.state.sessionmaker() as session:
        yield session
