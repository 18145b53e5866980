from pydantic import ConfigDict, EmailStr, Field, field_validator

from notehub.core.schemas import CamelModel


class UserCreate(CamelModel):
    """Схема для создания пользователя"""
    name: str = Field(..., max_length=100)
    email: EmailStr
    password: str = Field(..., max_length=128)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Name is required')
        return v.strip()

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if len(v) < 8:
            raise ValueError('Password must be at least 8 characters')
        return v


class UserLogin(CamelModel):
    """Схема для входа пользователя"""
    email: EmailStr
    password: str


class UserResponse(CamelModel):
    """Схема для ответа с данными пользователя"""
    user_id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(UserResponse):
    """Данные пользователя и новый токен"""
    token: str
