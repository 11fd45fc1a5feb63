from booknotion.db.repositories.user_repository import UserRepository
from booknotion.db.repositories.section_repository import SectionRepository
from booknotion.db.repositories.notebook_repository import NotebookRepository

__all__ = [
    "UserRepository",
    "SectionRepository",
    "NotebookRepository",
]
