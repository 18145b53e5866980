from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from notehub.db.models import Page as PageModel
from notehub.domains.notebooks.entities import Page


class PageRepository:
    """Репозиторий для работы со страницами"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, notebook_id: int, content: str) -> Page:
        """Создание новой страницы"""
        db_page = PageModel(notebook_id=notebook_id, content=content)

        self.session.add(db_page)
        await self.session.commit()
        await self.session.refresh(db_page)
        return self._to_domain(db_page)

    async def get_by_id(self, page_id: int) -> Optional[Page]:
        """Получение страницы по id"""
        result = await self.session.execute(
            select(PageModel)
            .where(PageModel.id == page_id)
            .execution_options(populate_existing=True)
        )
        db_page = result.scalar_one_or_none()
        return self._to_domain(db_page) if db_page else None

    async def get_by_notebook(self, notebook_id: int) -> List[Page]:
        """Страницы тетради в порядке создания"""
        result = await self.session.execute(
            select(PageModel)
            .where(PageModel.notebook_id == notebook_id)
            .order_by(PageModel.created_at.asc(), PageModel.id.asc())
        )
        return [self._to_domain(page) for page in result.scalars().all()]

    async def update(self, page_id: int, content: str) -> Optional[Page]:
        """Обновление содержимого страницы"""
        await self.session.execute(
            update(PageModel).where(PageModel.id == page_id).values(content=content)
        )
        await self.session.commit()
        return await self.get_by_id(page_id)

    async def delete(self, page_id: int) -> bool:
        """Удаление страницы вместе с вопросами"""
        db_page = await self.session.get(PageModel, page_id)
        if db_page is None:
            return False

        await self.session.delete(db_page)
        await self.session.commit()
        return True

    def _to_domain(self, db_page: PageModel) -> Page:
        """Преобразование модели БД в доменную сущность"""
        return Page(
            id=db_page.id,
            notebook_id=db_page.notebook_id,
            content=db_page.content,
            created_at=db_page.created_at,
            updated_at=db_page.updated_at
        )
