from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from booknotion.core.auth import get_current_identity
from booknotion.core.db import get_db
from booknotion.core.security import Identity
from booknotion.domains.notebooks.schemas import (
    NotebookResponse, SectionCreate, SectionDeleteResponse, SectionResponse,
    SectionStatsResponse, SectionUpdate, SectionUpdateResponse
)
from booknotion.domains.notebooks.services import NotebookService, SectionService

router = APIRouter(prefix="/sections", tags=["sections"])


def get_section_service(db: AsyncSession = Depends(get_db)) -> SectionService:
    return SectionService(db)


def get_notebook_service(db: AsyncSession = Depends(get_db)) -> NotebookService:
    return NotebookService(db)


@router.get("", response_model=List[SectionResponse])
async def list_sections(
    identity: Identity = Depends(get_current_identity),
    section_service: SectionService = Depends(get_section_service),
):
    """Все разделы пользователя"""
    sections = await section_service.list_sections(identity.user_id)
    return [SectionResponse.model_validate(s) for s in sections]


@router.post("", response_model=SectionResponse, status_code=status.HTTP_201_CREATED)
async def create_section(
    section_data: SectionCreate,
    identity: Identity = Depends(get_current_identity),
    section_service: SectionService = Depends(get_section_service),
):
    """Создание раздела"""
    section = await section_service.create_section(section_data.name, identity.user_id)
    return SectionResponse.model_validate(section)


@router.get("/{section_id}", response_model=SectionResponse)
async def get_section(
    section_id: int,
    identity: Identity = Depends(get_current_identity),
    section_service: SectionService = Depends(get_section_service),
):
    section = await section_service.get_section(section_id, identity.user_id)
    return SectionResponse.model_validate(section)


@router.put("/{section_id}", response_model=SectionUpdateResponse)
async def update_section(
    section_id: int,
    section_data: SectionUpdate,
    identity: Identity = Depends(get_current_identity),
    section_service: SectionService = Depends(get_section_service),
):
    """Переименование раздела"""
    section = await section_service.rename_section(
        section_id, section_data.name, identity.user_id
    )
    return SectionUpdateResponse(
        message="Section updated successfully",
        section=SectionResponse.model_validate(section),
    )


@router.delete("/{section_id}", response_model=SectionDeleteResponse)
async def delete_section(
    section_id: int,
    identity: Identity = Depends(get_current_identity),
    section_service: SectionService = Depends(get_section_service),
):
    """Удаление раздела и всех его тетрадей"""
    deleted_notebooks = await section_service.delete_section(section_id, identity.user_id)
    return SectionDeleteResponse(
        message="Section deleted successfully",
        deletedNotebooks=deleted_notebooks,
    )


@router.get("/{section_id}/notebooks", response_model=List[NotebookResponse])
async def list_section_notebooks(
    section_id: int,
    identity: Identity = Depends(get_current_identity),
    notebook_service: NotebookService = Depends(get_notebook_service),
):
    """Тетради раздела"""
    notebooks = await notebook_service.list_section_notebooks(section_id, identity.user_id)
    return [NotebookResponse.model_validate(n) for n in notebooks]


@router.get("/{section_id}/stats", response_model=SectionStatsResponse)
async def get_section_stats(
    section_id: int,
    identity: Identity = Depends(get_current_identity),
    section_service: SectionService = Depends(get_section_service),
):
    """Статистика раздела"""
    stats = await section_service.get_stats(section_id, identity.user_id)
    return SectionStatsResponse(**stats)
