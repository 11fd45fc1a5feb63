from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from booknotion.core.auth import get_current_identity
from booknotion.core.db import get_db
from booknotion.core.security import Identity
from booknotion.domains.notebooks.schemas import (
    ContentSavedResponse, MessageResponse, NotebookContentUpdate, NotebookCreate,
    NotebookDuplicate, NotebookMutationResponse, NotebookResponse, NotebookUpdate
)
from booknotion.domains.notebooks.services import NotebookService

router = APIRouter(prefix="/notebooks", tags=["notebooks"])


def get_notebook_service(db: AsyncSession = Depends(get_db)) -> NotebookService:
    return NotebookService(db)


@router.get("", response_model=List[NotebookResponse])
async def list_notebooks(
    section_id: Optional[int] = Query(None),
    identity: Identity = Depends(get_current_identity),
    notebook_service: NotebookService = Depends(get_notebook_service),
):
    """Тетради пользователя, при необходимости только из одного раздела"""
    notebooks = await notebook_service.list_notebooks(identity.user_id, section_id)
    return [NotebookResponse.model_validate(n) for n in notebooks]


@router.post("", response_model=NotebookResponse, status_code=status.HTTP_201_CREATED)
async def create_notebook(
    notebook_data: NotebookCreate,
    identity: Identity = Depends(get_current_identity),
    notebook_service: NotebookService = Depends(get_notebook_service),
):
    """Создание тетради"""
    notebook = await notebook_service.create_notebook(
        notebook_data.name,
        notebook_data.section_id,
        notebook_data.content,
        identity.user_id,
    )
    return NotebookResponse.model_validate(notebook)


# Объявлен до /{notebook_id}
@router.get("/search", response_model=List[NotebookResponse])
async def search_notebooks(
    q: Optional[str] = Query(None),
    section_id: Optional[int] = Query(None),
    identity: Identity = Depends(get_current_identity),
    notebook_service: NotebookService = Depends(get_notebook_service),
):
    """Поиск тетрадей по названию и содержимому"""
    notebooks = await notebook_service.search_notebooks(q, identity.user_id, section_id)
    return [NotebookResponse.model_validate(n) for n in notebooks]


@router.get("/{notebook_id}", response_model=NotebookResponse)
async def get_notebook(
    notebook_id: int,
    identity: Identity = Depends(get_current_identity),
    notebook_service: NotebookService = Depends(get_notebook_service),
):
    notebook = await notebook_service.get_notebook(notebook_id, identity.user_id)
    return NotebookResponse.model_validate(notebook)


@router.put("/{notebook_id}", response_model=NotebookMutationResponse)
async def update_notebook(
    notebook_id: int,
    notebook_data: NotebookUpdate,
    identity: Identity = Depends(get_current_identity),
    notebook_service: NotebookService = Depends(get_notebook_service),
):
    """Обновление названия, содержимого или раздела тетради"""
    notebook = await notebook_service.update_notebook(
        notebook_id,
        identity.user_id,
        name=notebook_data.name,
        content=notebook_data.content,
        section_id=notebook_data.section_id,
    )
    return NotebookMutationResponse(
        message="Notebook updated successfully",
        notebook=NotebookResponse.model_validate(notebook),
    )


@router.patch("/{notebook_id}/content", response_model=ContentSavedResponse)
async def update_notebook_content(
    notebook_id: int,
    content_data: NotebookContentUpdate,
    identity: Identity = Depends(get_current_identity),
    notebook_service: NotebookService = Depends(get_notebook_service),
):
    """Автосохранение содержимого"""
    notebook = await notebook_service.update_content(
        notebook_id, content_data.content, identity.user_id
    )
    return ContentSavedResponse(
        message="Content saved successfully",
        updated_at=notebook.updated_at,
    )


@router.delete("/{notebook_id}", response_model=MessageResponse)
async def delete_notebook(
    notebook_id: int,
    identity: Identity = Depends(get_current_identity),
    notebook_service: NotebookService = Depends(get_notebook_service),
):
    await notebook_service.delete_notebook(notebook_id, identity.user_id)
    return MessageResponse(message="Notebook deleted successfully")


@router.post(
    "/{notebook_id}/duplicate",
    response_model=NotebookMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def duplicate_notebook(
    notebook_id: int,
    duplicate_data: Optional[NotebookDuplicate] = None,
    identity: Identity = Depends(get_current_identity),
    notebook_service: NotebookService = Depends(get_notebook_service),
):
    """Копия тетради"""
    duplicate_data = duplicate_data or NotebookDuplicate()
    notebook = await notebook_service.duplicate_notebook(
        notebook_id,
        identity.user_id,
        name=duplicate_data.name,
        section_id=duplicate_data.section_id,
    )
    return NotebookMutationResponse(
        message="Notebook duplicated successfully",
        notebook=NotebookResponse.model_validate(notebook),
    )
