from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from booknotion.db.base import utcnow
from booknotion.db.models.notebook import Notebook as NotebookModel

if TYPE_CHECKING:
    from booknotion.domains.notebooks.entities import Notebook

LIKE_ESCAPE = "\\"


def like_pattern(query: str) -> str:
    """Шаблон LIKE для поиска подстроки с экранированием % и _"""
    escaped = (
        query.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


class NotebookRepository:
    """Репозиторий для работы с тетрадями"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self, name: str, section_id: int, content: str, user_id: int
    ) -> "Notebook":
        """Создание новой тетради"""
        db_notebook = NotebookModel(
            name=name,
            content=content,
            section_id=section_id,
            user_id=user_id,
        )

        self.session.add(db_notebook)
        await self.session.commit()
        await self.session.refresh(db_notebook)
        return self._to_domain(db_notebook)

    async def get_by_user(self, user_id: int) -> List["Notebook"]:
        """Получение всех тетрадей пользователя"""
        result = await self.session.execute(
            select(NotebookModel)
            .where(NotebookModel.user_id == user_id)
            .order_by(NotebookModel.updated_at.desc(), NotebookModel.id.desc())
        )
        return [self._to_domain(n) for n in result.scalars().all()]

    async def get_by_section(self, section_id: int, user_id: int) -> List["Notebook"]:
        """Получение тетрадей раздела"""
        result = await self.session.execute(
            select(NotebookModel)
            .where(
                and_(NotebookModel.section_id == section_id, NotebookModel.user_id == user_id)
            )
            .order_by(NotebookModel.updated_at.desc(), NotebookModel.id.desc())
        )
        return [self._to_domain(n) for n in result.scalars().all()]

    async def get_by_id(self, notebook_id: int, user_id: int) -> Optional["Notebook"]:
        """Получение тетради по ID в пределах пользователя"""
        result = await self.session.execute(
            select(NotebookModel).where(
                and_(NotebookModel.id == notebook_id, NotebookModel.user_id == user_id)
            )
        )
        db_notebook = result.scalar_one_or_none()
        return self._to_domain(db_notebook) if db_notebook else None

    async def update(
        self, notebook_id: int, name: str, content: str, section_id: int, user_id: int
    ) -> int:
        """Полное обновление тетради, возвращает число измененных строк"""
        stmt = (
            update(NotebookModel)
            .where(and_(NotebookModel.id == notebook_id, NotebookModel.user_id == user_id))
            .values(name=name, content=content, section_id=section_id, updated_at=utcnow())
        )

        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount

    async def update_content(self, notebook_id: int, content: str, user_id: int) -> int:
        """Обновление только содержимого (автосохранение)"""
        stmt = (
            update(NotebookModel)
            .where(and_(NotebookModel.id == notebook_id, NotebookModel.user_id == user_id))
            .values(content=content, updated_at=utcnow())
        )

        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount

    async def delete(self, notebook_id: int, user_id: int) -> int:
        """Удаление тетради"""
        stmt = delete(NotebookModel).where(
            and_(NotebookModel.id == notebook_id, NotebookModel.user_id == user_id)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount

    async def search(
        self, query: str, user_id: int, section_id: Optional[int] = None
    ) -> List["Notebook"]:
        """Поиск тетрадей по подстроке в названии или содержимом"""
        pattern = like_pattern(query)
        base_query = select(NotebookModel).where(
            and_(
                NotebookModel.user_id == user_id,
                or_(
                    NotebookModel.name.ilike(pattern, escape=LIKE_ESCAPE),
                    NotebookModel.content.ilike(pattern, escape=LIKE_ESCAPE),
                ),
            )
        )

        if section_id is not None:
            base_query = base_query.where(NotebookModel.section_id == section_id)

        result = await self.session.execute(
            base_query.order_by(NotebookModel.updated_at.desc(), NotebookModel.id.desc())
        )
        return [self._to_domain(n) for n in result.scalars().all()]

    def _to_domain(self, db_notebook: NotebookModel) -> "Notebook":
        """Преобразование модели БД в доменную сущность"""
        from booknotion.domains.notebooks.entities import Notebook

        return Notebook(
            id=db_notebook.id,
            name=db_notebook.name,
            section_id=db_notebook.section_id,
            user_id=db_notebook.user_id,
            content=db_notebook.content,
            created_at=db_notebook.created_at,
            updated_at=db_notebook.updated_at,
        )
