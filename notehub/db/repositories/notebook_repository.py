from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from notehub.db.models import Collaborator as CollaboratorModel
from notehub.db.models import Notebook as NotebookModel
from notehub.db.models import User as UserModel
from notehub.domains.access.entities import Role, Visibility
from notehub.domains.access.services import role_label
from notehub.domains.notebooks.entities import Collaborator, Notebook


class NotebookRepository:
    """Репозиторий для работы с тетрадями"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        owner_id: int,
        title: str,
        course_name: str = "",
        visibility: Visibility = Visibility.PRIVATE
    ) -> Notebook:
        """Создание новой тетради"""
        db_notebook = NotebookModel(
            owner_id=owner_id,
            title=title,
            course_name=course_name,
            visibility=visibility
        )

        self.session.add(db_notebook)
        await self.session.commit()
        await self.session.refresh(db_notebook)
        return await self.get_by_id(db_notebook.id, user_id=owner_id)

    async def get_by_id(self, notebook_id: int, user_id: Optional[int] = None) -> Optional[Notebook]:
        """Получение тетради по id вместе с ролью пользователя"""
        result = await self.session.execute(
            self._with_owner_name().where(NotebookModel.id == notebook_id)
        )
        row = result.first()
        if row is None:
            return None

        roles = await self._roles_for(user_id, [notebook_id])
        return self._to_domain(row.Notebook, row.owner_name, user_id, roles)

    async def update(
        self,
        notebook_id: int,
        title: Optional[str] = None,
        course_name: Optional[str] = None,
        visibility: Optional[Visibility] = None
    ) -> bool:
        """Обновление названия, курса и видимости"""
        values = {}
        if title is not None:
            values["title"] = title
        if course_name is not None:
            values["course_name"] = course_name
        if visibility is not None:
            values["visibility"] = visibility
        if not values:
            return True

        result = await self.session.execute(
            update(NotebookModel).where(NotebookModel.id == notebook_id).values(**values)
        )
        await self.session.commit()
        return result.rowcount > 0

    async def delete(self, notebook_id: int) -> bool:
        """Удаление тетради вместе со страницами, вопросами и сообщениями"""
        db_notebook = await self.session.get(NotebookModel, notebook_id)
        if db_notebook is None:
            return False

        await self.session.delete(db_notebook)
        await self.session.commit()
        return True

    async def get_dashboard(self, user_id: int) -> List[Notebook]:
        """Собственные тетради и тетради, к которым открыт доступ"""
        stmt = (
            self._with_owner_name()
            .where(or_(
                NotebookModel.owner_id == user_id,
                NotebookModel.id.in_(self._shared_with(user_id))
            ))
            .order_by(NotebookModel.updated_at.desc(), NotebookModel.id.desc())
        )
        return await self._list(stmt, user_id)

    async def search(self, query: str, user_id: int) -> List[Notebook]:
        """Поиск по названию и курсу среди доступных тетрадей"""
        stmt = (
            self._with_owner_name()
            .where(or_(
                NotebookModel.title.icontains(query, autoescape=True),
                NotebookModel.course_name.icontains(query, autoescape=True)
            ))
            .where(or_(
                NotebookModel.visibility == Visibility.PUBLIC,
                NotebookModel.owner_id == user_id,
                NotebookModel.id.in_(self._shared_with(user_id))
            ))
            .order_by(NotebookModel.updated_at.desc(), NotebookModel.id.desc())
        )
        return await self._list(stmt, user_id)

    async def get_collaborators(self, notebook_id: int) -> List[Collaborator]:
        """Список участников тетради, по одному на пользователя"""
        result = await self.session.execute(
            select(CollaboratorModel.role, UserModel.id, UserModel.name, UserModel.email)
            .join(UserModel, CollaboratorModel.user_id == UserModel.id)
            .where(CollaboratorModel.notebook_id == notebook_id)
            .order_by(UserModel.name.asc(), UserModel.id.asc())
        )

        collaborators: Dict[int, Collaborator] = {}
        for row in result.all():
            current = collaborators.get(row.id)
            # duplicate grants collapse to the strongest role
            if current is None or row.role is Role.EDITOR:
                collaborators[row.id] = Collaborator(
                    user_id=row.id, name=row.name, email=row.email, role=row.role
                )
        return list(collaborators.values())

    async def add_collaborator(self, notebook_id: int, user_id: int, role: Role) -> None:
        """Выдача роли пользователю"""
        self.session.add(CollaboratorModel(notebook_id=notebook_id, user_id=user_id, role=role))
        await self.session.commit()

    async def remove_collaborator(self, notebook_id: int, user_id: int) -> bool:
        """Отзыв всех ролей пользователя в тетради"""
        result = await self.session.execute(
            delete(CollaboratorModel).where(
                CollaboratorModel.notebook_id == notebook_id,
                CollaboratorModel.user_id == user_id
            )
        )
        await self.session.commit()
        return result.rowcount > 0

    @staticmethod
    def _with_owner_name():
        return (
            select(NotebookModel, UserModel.name.label("owner_name"))
            .join(UserModel, NotebookModel.owner_id == UserModel.id)
            .execution_options(populate_existing=True)
        )

    @staticmethod
    def _shared_with(user_id: int):
        return select(CollaboratorModel.notebook_id).where(CollaboratorModel.user_id == user_id)

    async def _list(self, stmt, user_id: int) -> List[Notebook]:
        rows = (await self.session.execute(stmt)).all()
        roles = await self._roles_for(user_id, [row.Notebook.id for row in rows])
        return [self._to_domain(row.Notebook, row.owner_name, user_id, roles) for row in rows]

    async def _roles_for(
        self, user_id: Optional[int], notebook_ids: Iterable[int]
    ) -> Dict[int, Set[Role]]:
        roles: Dict[int, Set[Role]] = defaultdict(set)
        notebook_ids = list(notebook_ids)
        if user_id is None or not notebook_ids:
            return roles

        result = await self.session.execute(
            select(CollaboratorModel.notebook_id, CollaboratorModel.role).where(
                CollaboratorModel.user_id == user_id,
                CollaboratorModel.notebook_id.in_(notebook_ids)
            )
        )
        for notebook_id, role in result.all():
            roles[notebook_id].add(role)
        return roles

    def _to_domain(
        self,
        db_notebook: NotebookModel,
        owner_name: str,
        user_id: Optional[int],
        roles: Dict[int, Set[Role]]
    ) -> Notebook:
        """Преобразование модели БД в доменную сущность"""
        is_owner = user_id is not None and db_notebook.owner_id == user_id
        return Notebook(
            id=db_notebook.id,
            owner_id=db_notebook.owner_id,
            title=db_notebook.title,
            course_name=db_notebook.course_name,
            visibility=db_notebook.visibility,
            created_at=db_notebook.created_at,
            updated_at=db_notebook.updated_at,
            owner_name=owner_name,
            user_role=role_label(is_owner, roles.get(db_notebook.id, set()))
        )
