from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _clean_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if not v.strip():
        raise ValueError('Name cannot be empty')
    return v.strip()


class SectionCreate(BaseModel):
    """Схема для создания раздела"""
    name: str = Field(..., max_length=255)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return _clean_name(v)


class SectionUpdate(SectionCreate):
    """Схема для переименования раздела"""
    pass


class SectionResponse(BaseModel):
    """Схема для ответа с данными раздела"""
    id: int
    name: str
    user_id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SectionUpdateResponse(BaseModel):
    message: str
    section: SectionResponse


class SectionDeleteResponse(BaseModel):
    """Ответ на удаление раздела с количеством удаленных тетрадей"""
    message: str
    deletedNotebooks: int


class SectionStatsResponse(BaseModel):
    """Статистика раздела"""
    section_id: int
    section_name: str
    total_notebooks: int
    created_at: datetime
    updated_at: datetime


class NotebookCreate(BaseModel):
    """Схема для создания тетради"""
    name: str = Field(..., max_length=255)
    section_id: int
    content: str = ""

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return _clean_name(v)


class NotebookUpdate(BaseModel):
    """Схема для обновления тетради, все поля необязательны"""
    name: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = None
    section_id: Optional[int] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return _clean_name(v)


class NotebookContentUpdate(BaseModel):
    """Схема для автосохранения содержимого"""
    content: str


class NotebookDuplicate(BaseModel):
    """Параметры копирования тетради"""
    name: Optional[str] = Field(None, max_length=255)
    section_id: Optional[int] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        # Пустое имя означает имя по умолчанию
        if v is not None and not v.strip():
            return None
        return _clean_name(v)


class NotebookResponse(BaseModel):
    """Схема для ответа с данными тетради"""
    id: int
    name: str
    content: str
    section_id: int
    user_id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotebookMutationResponse(BaseModel):
    message: str
    notebook: NotebookResponse


class ContentSavedResponse(BaseModel):
    message: str
    updated_at: datetime


class MessageResponse(BaseModel):
    message: str
