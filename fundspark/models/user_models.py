"""FundSpark — User Models."""

from datetime import datetime
from enum import Enum
from typing import Optional

import pydantic
from pydantic import EmailStr
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from fundspark.core.timeutils import utcnow
from fundspark.models.base import ApiModel


class UserRole(str, Enum):
    BACKER = "backer"
    CREATOR = "creator"
    ADMIN = "admin"


# ─────────────────────────────────────────────
# DATABASE MODEL
# ─────────────────────────────────────────────


class User(SQLModel, table=True):
    """Account record. Ownership and role drive every authorization decision."""

    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, unique=True, max_length=30)
    email: str = Field(index=True, unique=True)
    password_hash: str
    role: str = Field(default=UserRole.BACKER.value, description="backer | creator | admin")
    avatar: Optional[str] = None
    bio: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


# ─────────────────────────────────────────────
# PYDANTIC SCHEMAS
# ─────────────────────────────────────────────


class UserPublic(ApiModel):
    """A user with secret fields stripped."""

    id: int
    username: str
    email: str
    role: str
    avatar: Optional[str] = None
    bio: Optional[str] = None
    created_at: Optional[datetime] = None


class CreatorSummary(ApiModel):
    """Creator identity embedded in campaign responses."""

    id: int
    username: str
    email: str
    avatar: Optional[str] = None
    bio: Optional[str] = None


class AuthorSummary(ApiModel):
    """Author identity embedded in Q&A and backer listings."""

    id: int
    username: str
    avatar: Optional[str] = None


class RegisterRequest(ApiModel):
    username: str = pydantic.Field(min_length=3, max_length=30)
    email: EmailStr
    password: str = pydantic.Field(min_length=6)
    role: UserRole = UserRole.BACKER


class LoginRequest(ApiModel):
    email: EmailStr
    password: str


class RefreshRequest(ApiModel):
    refresh_token: str


class ProfileUpdate(ApiModel):
    username: Optional[str] = pydantic.Field(default=None, min_length=3, max_length=30)
    avatar: Optional[str] = None
    bio: Optional[str] = pydantic.Field(default=None, max_length=500)


class PasswordChange(ApiModel):
    current_password: str
    new_password: str = pydantic.Field(min_length=6)
