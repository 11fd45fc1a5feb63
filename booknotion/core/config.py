from typing import List, Optional

from pydantic_settings import BaseSettings

DEFAULT_JWT_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    app_name: str = "Book Notion"
    environment: str = "development"

    host: str = "0.0.0.0"
    port: int = 3000
    api_prefix: str = "/api"

    # Файл SQLite; database_url имеет приоритет, если задан
    db_path: str = "./data/booknotion.db"
    database_url: Optional[str] = None
    database_echo: bool = False

    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_days: int = 7
    bcrypt_rounds: int = 12

    allowed_origins: str = (
        "http://localhost:3000,http://localhost:8000,"
        "http://127.0.0.1:5500,http://127.0.0.1:3000"
    )
    frontend_url: Optional[str] = None

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def sqlalchemy_url(self) -> str:
        """URL базы данных для асинхронного движка"""
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{self.db_path}"

    @property
    def cors_origins(self) -> List[str]:
        """Список разрешенных источников для CORS"""
        origins = [o.strip() for o in self.allowed_origins.split(",") if o.strip()]
        if self.frontend_url:
            origins.append(self.frontend_url)
        return origins
