from booknotion.api.http.health import router as health_router
from booknotion.api.http.auth import router as auth_router
from booknotion.api.http.sections import router as sections_router
from booknotion.api.http.notebooks import router as notebooks_router

__all__ = [
    "health_router",
    "auth_router",
    "sections_router",
    "notebooks_router",
]
