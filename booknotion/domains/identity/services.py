import logging
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from booknotion.core.errors import AuthError, ConflictError, NotFoundError, ValidationError
from booknotion.core.security import CredentialStore, Identity
from booknotion.db.repositories.user_repository import UserRepository
from booknotion.domains.identity.entities import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class IdentityService:
    """Сервис регистрации, входа и выпуска токенов"""

    def __init__(self, session: AsyncSession, credentials: CredentialStore):
        self.session = session
        self.credentials = credentials
        self.user_repository = UserRepository(session)

    async def register(
        self, username: Optional[str], email: Optional[str], password: Optional[str]
    ) -> Tuple[User, str]:
        """Регистрация нового пользователя, возвращает пользователя и токен"""
        username = (username or "").strip()
        email = (email or "").strip()
        if not username or not email or not password:
            raise ValidationError("Username, email and password are required")

        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )

        # Проверка существования email и username
        if await self.user_repository.email_exists(email) or \
                await self.user_repository.username_exists(username):
            raise ConflictError("User already exists", code="USER_EXISTS")

        user = User.create_user(
            username=username,
            email=email,
            password=password,
            credentials=self.credentials,
        )
        created = await self.user_repository.create(user)
        logger.info(f"Registered user {created.id} ({created.username})")

        return created, self.credentials.create_access_token(created.to_identity())

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """Вход пользователя и создание JWT токена"""
        user = await self.user_repository.get_by_email(email)

        if not user:
            logger.warning(f"Login attempt for unknown email {email}")
            raise NotFoundError(
                "This email is not registered. You need to sign up first.",
                code="USER_NOT_FOUND",
                error="User not found",
            )

        if not user.authenticate(password, self.credentials):
            logger.warning(f"Invalid password for user {user.id}")
            raise AuthError(
                "The password is incorrect. Check it and try again.",
                code="INVALID_PASSWORD",
                error="Invalid password",
            )

        return user, self.credentials.create_access_token(user.to_identity())

    async def get_profile(self, identity: Identity) -> User:
        """Профиль текущего пользователя"""
        user = await self.user_repository.get_by_id(identity.user_id)

        if not user:
            raise NotFoundError(error="User not found", code="USER_NOT_FOUND")

        return user

    def refresh(self, identity: Identity) -> str:
        """Обновление токена"""
        return self.credentials.refresh(identity)
