from typing import TYPE_CHECKING, List, Optional, Tuple

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from booknotion.db.base import utcnow
from booknotion.db.models.notebook import Notebook as NotebookModel
from booknotion.db.models.section import Section as SectionModel

if TYPE_CHECKING:
    from booknotion.domains.notebooks.entities import Section


class SectionRepository:
    """Репозиторий для работы с разделами"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, name: str, user_id: int) -> "Section":
        """Создание нового раздела"""
        db_section = SectionModel(name=name, user_id=user_id)

        self.session.add(db_section)
        await self.session.commit()
        await self.session.refresh(db_section)
        return self._to_domain(db_section)

    async def get_by_user(self, user_id: int) -> List["Section"]:
        """Получение разделов пользователя, новые первыми"""
        result = await self.session.execute(
            select(SectionModel)
            .where(SectionModel.user_id == user_id)
            .order_by(SectionModel.created_at.desc(), SectionModel.id.desc())
        )
        return [self._to_domain(s) for s in result.scalars().all()]

    async def get_by_id(self, section_id: int, user_id: int) -> Optional["Section"]:
        """Получение раздела по ID в пределах пользователя"""
        result = await self.session.execute(
            select(SectionModel).where(
                and_(SectionModel.id == section_id, SectionModel.user_id == user_id)
            )
        )
        db_section = result.scalar_one_or_none()
        return self._to_domain(db_section) if db_section else None

    async def update(self, section_id: int, name: str, user_id: int) -> int:
        """Переименование раздела, возвращает число измененных строк"""
        stmt = (
            update(SectionModel)
            .where(and_(SectionModel.id == section_id, SectionModel.user_id == user_id))
            .values(name=name, updated_at=utcnow())
        )

        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount

    async def delete(self, section_id: int, user_id: int) -> Tuple[int, int]:
        """Удаление раздела вместе с тетрадями.

        Два последовательных выражения без общей транзакции: сначала тетради,
        потом сам раздел. Возвращает (удалено разделов, удалено тетрадей).
        """
        notebooks_result = await self.session.execute(
            delete(NotebookModel).where(
                and_(NotebookModel.section_id == section_id, NotebookModel.user_id == user_id)
            )
        )
        await self.session.commit()

        section_result = await self.session.execute(
            delete(SectionModel).where(
                and_(SectionModel.id == section_id, SectionModel.user_id == user_id)
            )
        )
        await self.session.commit()

        return section_result.rowcount, notebooks_result.rowcount

    async def count_notebooks(self, section_id: int, user_id: int) -> int:
        """Подсчет тетрадей в разделе"""
        result = await self.session.execute(
            select(func.count(NotebookModel.id)).where(
                and_(NotebookModel.section_id == section_id, NotebookModel.user_id == user_id)
            )
        )
        return result.scalar() or 0

    def _to_domain(self, db_section: SectionModel) -> "Section":
        """Преобразование модели БД в доменную сущность"""
        from booknotion.domains.notebooks.entities import Section

        return Section(
            id=db_section.id,
            name=db_section.name,
            user_id=db_section.user_id,
            created_at=db_section.created_at,
            updated_at=db_section.updated_at,
        )
