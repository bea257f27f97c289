"""FundSpark — Bookmark and Q&A Models."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

import pydantic
from sqlalchemy import Column, DateTime, JSON
from sqlmodel import SQLModel, Field, UniqueConstraint

from fundspark.core.timeutils import utcnow
from fundspark.models.base import ApiModel
from fundspark.models.user_models import AuthorSummary

MAX_CONTENT_LENGTH = 1000


class QandAType(str, Enum):
    QUESTION = "question"
    COMMENT = "comment"


# ─────────────────────────────────────────────
# DATABASE MODELS
# ─────────────────────────────────────────────


class Bookmark(SQLModel, table=True):
    """A user's saved reference to a campaign.

    The (user_id, campaign_id) constraint is authoritative: a duplicate insert
    means the campaign is already bookmarked.
    """

    __tablename__ = "bookmarks"
    __table_args__ = (
        UniqueConstraint("user_id", "campaign_id", name="uq_bookmark_user_campaign"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    campaign_id: int = Field(foreign_key="campaigns.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class QandA(SQLModel, table=True):
    """A question or comment on a campaign, optionally replying to another."""

    __tablename__ = "qanda"

    id: Optional[int] = Field(default=None, primary_key=True)
    campaign_id: int = Field(foreign_key="campaigns.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    type: str = Field(default=QandAType.COMMENT.value)
    content: str = Field(max_length=MAX_CONTENT_LENGTH)
    parent_id: Optional[int] = Field(default=None, foreign_key="qanda.id", index=True)
    is_creator_response: bool = False
    likes: int = 0
    liked_by: List[int] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, index=True, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


# ─────────────────────────────────────────────
# PYDANTIC SCHEMAS
# ─────────────────────────────────────────────


class CommentCreate(ApiModel):
    content: Optional[str] = pydantic.Field(default=None, max_length=MAX_CONTENT_LENGTH)
    type: QandAType = QandAType.COMMENT
    parent_id: Optional[int] = None


class QandARead(ApiModel):
    id: int
    campaign_id: int
    user: AuthorSummary
    type: str
    content: str
    parent_id: Optional[int] = None
    is_creator_response: bool = False
    likes: int = 0
    liked_by: List[int] = []
    created_at: datetime
    updated_at: datetime

    @classmethod
    def build(cls, entry: QandA, author: AuthorSummary) -> "QandARead":
        data = entry.model_dump(exclude={"user_id"})
        data["liked_by"] = list(entry.liked_by or [])
        data["user"] = author
        return cls.model_validate(data)
