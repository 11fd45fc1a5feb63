from booknotion.domains.notebooks.entities import Section, Notebook
from booknotion.domains.notebooks.schemas import (
    SectionCreate, SectionUpdate, SectionResponse, SectionUpdateResponse,
    SectionDeleteResponse, SectionStatsResponse,
    NotebookCreate, NotebookUpdate, NotebookContentUpdate, NotebookDuplicate,
    NotebookResponse, NotebookMutationResponse, ContentSavedResponse, MessageResponse
)
from booknotion.domains.notebooks.services import SectionService, NotebookService

__all__ = [
    "Section", "Notebook",
    "SectionCreate", "SectionUpdate", "SectionResponse", "SectionUpdateResponse",
    "SectionDeleteResponse", "SectionStatsResponse",
    "NotebookCreate", "NotebookUpdate", "NotebookContentUpdate", "NotebookDuplicate",
    "NotebookResponse", "NotebookMutationResponse", "ContentSavedResponse", "MessageResponse",
    "SectionService", "NotebookService"
]
