from datetime import datetime
from typing import Optional

COPY_SUFFIX = " - Copy"


class Section:
    """Сущность раздела (папки с тетрадями)"""

    def __init__(
        self,
        id: int,
        name: str,
        user_id: int,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.id = id
        self.name = name
        self.user_id = user_id
        self.created_at = created_at
        self.updated_at = updated_at

    def __eq__(self, other) -> bool:
        if not isinstance(other, Section):
            return False
        return self.id == other.id

    def __repr__(self) -> str:
        return f"Section(id={self.id}, name={self.name})"


class Notebook:
    """Сущность тетради (rich-text документа)"""

    def __init__(
        self,
        id: int,
        name: str,
        section_id: int,
        user_id: int,
        content: str = "",
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.id = id
        self.name = name
        self.section_id = section_id
        self.user_id = user_id
        self.content = content
        self.created_at = created_at
        self.updated_at = updated_at

    def copy_name(self) -> str:
        """Имя копии по умолчанию"""
        return f"{self.name}{COPY_SUFFIX}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Notebook):
            return False
        return self.id == other.id

    def __repr__(self) -> str:
        return f"Notebook(id={self.id}, name={self.name}, section_id={self.section_id})"
