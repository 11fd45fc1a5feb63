from booknotion.domains.identity.entities import User
from booknotion.domains.identity.schemas import (
    UserCreate, UserLogin, UserSummary, UserResponse, AuthResponse, TokenResponse
)
from booknotion.domains.identity.services import IdentityService

__all__ = [
    "User",
    "UserCreate", "UserLogin", "UserSummary", "UserResponse",
    "AuthResponse", "TokenResponse",
    "IdentityService"
]
