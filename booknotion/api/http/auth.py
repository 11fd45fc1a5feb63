from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from booknotion.core.auth import get_credential_store, get_current_identity
from booknotion.core.db import get_db
from booknotion.core.security import CredentialStore, Identity
from booknotion.domains.identity.schemas import (
    AuthResponse, TokenResponse, UserCreate, UserLogin, UserResponse, UserSummary
)
from booknotion.domains.identity.services import IdentityService

router = APIRouter(prefix="/auth", tags=["authentication"])


def get_identity_service(
    db: AsyncSession = Depends(get_db),
    credentials: CredentialStore = Depends(get_credential_store),
) -> IdentityService:
    return IdentityService(db, credentials)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    identity_service: IdentityService = Depends(get_identity_service),
):
    """Регистрация нового пользователя"""
    user, token = await identity_service.register(
        user_data.username, user_data.email, user_data.password
    )
    return AuthResponse(
        message="User created successfully",
        token=token,
        user=UserSummary.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    login_data: UserLogin,
    identity_service: IdentityService = Depends(get_identity_service),
):
    """Вход пользователя"""
    user, token = await identity_service.login(login_data.email, login_data.password)
    return AuthResponse(
        message="Logged in successfully",
        token=token,
        user=UserSummary.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    identity: Identity = Depends(get_current_identity),
    identity_service: IdentityService = Depends(get_identity_service),
):
    """Получение информации о текущем пользователе"""
    user = await identity_service.get_profile(identity)
    return UserResponse.model_validate(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    identity: Identity = Depends(get_current_identity),
    identity_service: IdentityService = Depends(get_identity_service),
):
    """Обновление токена"""
    return TokenResponse(token=identity_service.refresh(identity))
