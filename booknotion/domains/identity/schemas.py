from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserCreate(BaseModel):
    """Схема для регистрации пользователя"""
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        if not v.strip():
            raise ValueError('Username cannot be empty')
        return v.strip()


class UserLogin(BaseModel):
    """Схема для входа пользователя"""
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserSummary(BaseModel):
    """Краткие данные пользователя в ответах авторизации"""
    id: int
    username: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class UserResponse(UserSummary):
    """Схема для ответа /auth/me"""
    created_at: datetime


class AuthResponse(BaseModel):
    """Ответ на регистрацию и вход"""
    message: str
    token: str
    user: UserSummary


class TokenResponse(BaseModel):
    """Ответ на обновление токена"""
    token: str
