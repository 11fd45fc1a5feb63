from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from booknotion.core.config import Settings
from booknotion.core.errors import AuthError

# bcrypt учитывает только первые 72 байта
BCRYPT_MAX_BYTES = 72


class Identity(BaseModel):
    """Данные пользователя из токена (контекст запроса)"""
    user_id: int
    username: str
    email: str


class CredentialStore:
    """Хеширование паролей и выпуск/проверка JWT токенов"""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_delta: timedelta = timedelta(days=7),
        bcrypt_rounds: int = 12,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_delta = expires_delta
        self.pwd_context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=bcrypt_rounds
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialStore":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expires_delta=timedelta(days=settings.access_token_expire_days),
            bcrypt_rounds=settings.bcrypt_rounds,
        )

    @staticmethod
    def _truncate(password: str) -> str:
        return password.encode("utf-8")[:BCRYPT_MAX_BYTES].decode("utf-8", "ignore")

    def hash_password(self, password: str) -> str:
        """Хеширование пароля"""
        return self.pwd_context.hash(self._truncate(password))

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Проверка пароля"""
        try:
            return self.pwd_context.verify(self._truncate(plain_password), hashed_password)
        except ValueError:
            # Хеш в неизвестном формате
            return False

    def create_access_token(
        self, identity: Identity, expires_delta: Optional[timedelta] = None
    ) -> str:
        """Создание JWT токена доступа"""
        expire = datetime.now(timezone.utc) + (expires_delta or self.expires_delta)
        to_encode: Dict[str, Any] = {
            "sub": str(identity.user_id),
            "username": identity.username,
            "email": identity.email,
            "exp": expire,
        }
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def verify_token(self, token: Optional[str]) -> Identity:
        """Проверка JWT токена и извлечение данных пользователя"""
        if not token:
            raise AuthError("Access token is required", code="TOKEN_REQUIRED")

        invalid = AuthError(
            "Invalid or expired token",
            code="INVALID_TOKEN",
            error="Invalid token",
            status_code=403,
        )
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError:
            raise invalid

        try:
            return Identity(
                user_id=int(payload["sub"]),
                username=payload["username"],
                email=payload["email"],
            )
        except (KeyError, TypeError, ValueError):
            raise invalid

    def refresh(self, identity: Identity) -> str:
        """Новый токен со свежим сроком действия, без проверки пароля"""
        return self.create_access_token(identity)


def extract_token_from_header(authorization: Optional[str]) -> Optional[str]:
    """Извлечение токена из заголовка Authorization"""
    if not authorization:
        return None

    parts = authorization.split()

    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]
