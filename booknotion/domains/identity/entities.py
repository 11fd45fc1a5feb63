from datetime import datetime
from typing import TYPE_CHECKING, Optional

from booknotion.core.security import Identity

if TYPE_CHECKING:
    from booknotion.core.security import CredentialStore


class User:
    """Сущность пользователя домена Identity"""

    def __init__(
        self,
        id: Optional[int],
        username: str,
        email: str,
        password_hash: str,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.id = id
        self.username = username
        self.email = email
        self.password_hash = password_hash
        self.created_at = created_at
        self.updated_at = updated_at

    def authenticate(self, password: str, credentials: "CredentialStore") -> bool:
        """Проверка пароля пользователя"""
        return credentials.verify_password(password, self.password_hash)

    def to_identity(self) -> Identity:
        return Identity(user_id=self.id, username=self.username, email=self.email)

    @classmethod
    def create_user(
        cls, username: str, email: str, password: str, credentials: "CredentialStore"
    ) -> "User":
        """Создание нового пользователя с хешированием пароля"""
        return cls(
            id=None,
            username=username,
            email=email,
            password_hash=credentials.hash_password(password),
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, User):
            return False
        return self.id == other.id

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, username={self.username})"
