import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from booknotion.core.errors import NotFoundError, ValidationError
from booknotion.db.repositories.notebook_repository import NotebookRepository
from booknotion.db.repositories.section_repository import SectionRepository
from booknotion.domains.notebooks.entities import Notebook, Section

logger = logging.getLogger(__name__)


def section_not_found(message: str = "Section not found") -> NotFoundError:
    return NotFoundError(error=message, code="SECTION_NOT_FOUND")


def notebook_not_found() -> NotFoundError:
    return NotFoundError(error="Notebook not found", code="NOTEBOOK_NOT_FOUND")


class SectionService:
    """Сервис для работы с разделами"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.section_repository = SectionRepository(session)

    async def list_sections(self, user_id: int) -> List[Section]:
        return await self.section_repository.get_by_user(user_id)

    async def get_section(self, section_id: int, user_id: int) -> Section:
        """Получение раздела, NotFoundError если его нет у пользователя"""
        section = await self.section_repository.get_by_id(section_id, user_id)
        if not section:
            raise section_not_found()
        return section

    async def create_section(self, name: str, user_id: int) -> Section:
        section = await self.section_repository.create(name, user_id)
        logger.info(f"User {user_id} created section {section.id}")
        return section

    async def rename_section(self, section_id: int, name: str, user_id: int) -> Section:
        """Переименование раздела"""
        await self.get_section(section_id, user_id)

        changed = await self.section_repository.update(section_id, name, user_id)
        # Раздел мог исчезнуть между проверкой и записью
        if changed == 0:
            raise section_not_found()

        return await self.get_section(section_id, user_id)

    async def delete_section(self, section_id: int, user_id: int) -> int:
        """Удаление раздела и его тетрадей, возвращает число удаленных тетрадей"""
        await self.get_section(section_id, user_id)

        deleted_sections, deleted_notebooks = await self.section_repository.delete(
            section_id, user_id
        )
        if deleted_sections == 0:
            raise section_not_found()

        logger.info(
            f"User {user_id} deleted section {section_id} with {deleted_notebooks} notebooks"
        )
        return deleted_notebooks

    async def get_stats(self, section_id: int, user_id: int) -> dict:
        """Статистика раздела"""
        section = await self.get_section(section_id, user_id)
        total = await self.section_repository.count_notebooks(section_id, user_id)

        return {
            "section_id": section.id,
            "section_name": section.name,
            "total_notebooks": total,
            "created_at": section.created_at,
            "updated_at": section.updated_at,
        }


class NotebookService:
    """Сервис для работы с тетрадями"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.notebook_repository = NotebookRepository(session)
        self.section_repository = SectionRepository(session)

    async def _require_section(
        self, section_id: int, user_id: int, message: str = "Section not found"
    ) -> Section:
        section = await self.section_repository.get_by_id(section_id, user_id)
        if not section:
            raise section_not_found(message)
        return section

    async def list_notebooks(
        self, user_id: int, section_id: Optional[int] = None
    ) -> List[Notebook]:
        if section_id is not None:
            return await self.notebook_repository.get_by_section(section_id, user_id)
        return await self.notebook_repository.get_by_user(user_id)

    async def list_section_notebooks(self, section_id: int, user_id: int) -> List[Notebook]:
        """Тетради раздела, NotFoundError если раздела нет"""
        await self._require_section(section_id, user_id)
        return await self.notebook_repository.get_by_section(section_id, user_id)

    async def get_notebook(self, notebook_id: int, user_id: int) -> Notebook:
        notebook = await self.notebook_repository.get_by_id(notebook_id, user_id)
        if not notebook:
            raise notebook_not_found()
        return notebook

    async def create_notebook(
        self, name: str, section_id: Optional[int], content: str, user_id: int
    ) -> Notebook:
        """Создание тетради в разделе пользователя"""
        if section_id is None:
            raise ValidationError("Section ID is required")

        await self._require_section(section_id, user_id)

        notebook = await self.notebook_repository.create(name, section_id, content or "", user_id)
        logger.info(f"User {user_id} created notebook {notebook.id} in section {section_id}")
        return notebook

    async def update_notebook(
        self,
        notebook_id: int,
        user_id: int,
        name: Optional[str] = None,
        content: Optional[str] = None,
        section_id: Optional[int] = None,
    ) -> Notebook:
        """Обновление тетради; не переданные поля сохраняют текущие значения"""
        existing = await self.get_notebook(notebook_id, user_id)

        if section_id is not None and section_id != existing.section_id:
            await self._require_section(section_id, user_id)

        changed = await self.notebook_repository.update(
            notebook_id,
            name if name is not None else existing.name,
            content if content is not None else existing.content,
            section_id if section_id is not None else existing.section_id,
            user_id,
        )
        if changed == 0:
            raise notebook_not_found()

        return await self.get_notebook(notebook_id, user_id)

    async def update_content(self, notebook_id: int, content: Optional[str], user_id: int) -> Notebook:
        """Автосохранение: меняются только content и updated_at"""
        if content is None:
            raise ValidationError("Content is required")

        await self.get_notebook(notebook_id, user_id)

        changed = await self.notebook_repository.update_content(notebook_id, content, user_id)
        if changed == 0:
            raise notebook_not_found()

        return await self.get_notebook(notebook_id, user_id)

    async def delete_notebook(self, notebook_id: int, user_id: int) -> None:
        await self.get_notebook(notebook_id, user_id)

        deleted = await self.notebook_repository.delete(notebook_id, user_id)
        if deleted == 0:
            raise notebook_not_found()

        logger.info(f"User {user_id} deleted notebook {notebook_id}")

    async def duplicate_notebook(
        self,
        notebook_id: int,
        user_id: int,
        name: Optional[str] = None,
        section_id: Optional[int] = None,
    ) -> Notebook:
        """Копирование названия и содержимого в тот же или указанный раздел"""
        source = await self.get_notebook(notebook_id, user_id)

        target_section_id = section_id if section_id is not None else source.section_id
        await self._require_section(
            target_section_id, user_id, message="Target section not found"
        )

        copy = await self.notebook_repository.create(
            name or source.copy_name(), target_section_id, source.content, user_id
        )
        logger.info(f"User {user_id} duplicated notebook {notebook_id} as {copy.id}")
        return copy

    async def search_notebooks(
        self, query: Optional[str], user_id: int, section_id: Optional[int] = None
    ) -> List[Notebook]:
        """Поиск по подстроке в названии и содержимом"""
        query = (query or "").strip()
        if not query:
            raise ValidationError("Search term is required")

        return await self.notebook_repository.search(query, user_id, section_id)
