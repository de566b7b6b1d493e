"""Pydantic schemas for auth and user management endpoints."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from keygate.common.models import as_utc
from keygate.common.schemas import CamelModel
from keygate.users.models import UserModel


class UserRole(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    id: str
    username: str
    role: UserRole
    last_login: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_model(cls, user: UserModel) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            role=user.role,
            last_login=as_utc(user.last_login),
            created_at=as_utc(user.created_at),
        )


class LoginResponse(CamelModel):
    user: UserResponse
    token: str


class UserCreate(CamelModel):
    username: str = Field(..., min_length=3, max_length=30)
    password: str = Field(..., min_length=6)
    role: UserRole = UserRole.STAFF


class PasswordReset(CamelModel):
    new_password: str = Field(..., min_length=6)
