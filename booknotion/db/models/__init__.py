from booknotion.db.models.user import User
from booknotion.db.models.section import Section
from booknotion.db.models.notebook import Notebook

__all__ = [
    "User",
    "Section",
    "Notebook",
]
