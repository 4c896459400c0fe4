import re
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from lms.models.user import UserRole
from lms.schemas.base import BaseSchema


def check_password_strength(value: str) -> str:
    """Enforce the registration password policy."""
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters")
    if not re.search(r"[A-Z]", value):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", value):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", value):
        raise ValueError("Password must contain at least one number")
    if not re.search(r"[^A-Za-z0-9]", value):
        raise ValueError("Password must contain at least one special character")
    return value


# Request schemas
class UserRegister(BaseModel):
    username: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return check_password_strength(v)


class LoginRequest(BaseModel):
    username: str
    password: str


class ChangePasswordRequest(BaseModel):
    user_id: int
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return check_password_strength(v)


# Response schemas
class UserResponse(BaseSchema):
    id: int
    username: str
    email: Optional[str] = None
    role: UserRole
    is_anonymous: bool = False
    created_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
    message: str


class Identity(BaseModel):
    """Claims carried by a verified bearer token."""
    user_id: int
    username: str
    role: UserRole
    is_anonymous: bool = False
