"""FundSpark — Campaign Models.

A campaign is created ``pending``, reviewed by an admin into ``approved`` or
``rejected``, and accumulates funding only while ``approved`` and before its
end date. ``completed`` and ``cancelled`` close it out; nothing returns to
``pending``.
"""

import math
from datetime import datetime
from enum import Enum
from typing import Annotated, List, Optional

import pydantic
from pydantic import computed_field
from sqlalchemy import Column, DateTime, JSON
from sqlmodel import SQLModel, Field

from fundspark.core.timeutils import utcnow
from fundspark.models.base import ApiModel
from fundspark.models.engagement_models import QandARead
from fundspark.models.user_models import CreatorSummary

MIN_GOAL = 100

Tag = Annotated[str, pydantic.StringConstraints(strip_whitespace=True, max_length=30)]


class CampaignCategory(str, Enum):
    TECHNOLOGY = "technology"
    ART = "art"
    MUSIC = "music"
    FILM = "film"
    GAMES = "games"
    DESIGN = "design"
    FOOD = "food"
    FASHION = "fashion"
    PUBLISHING = "publishing"
    OTHER = "other"


class CampaignStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


REVIEW_STATUSES = {CampaignStatus.APPROVED.value, CampaignStatus.REJECTED.value}


def progress_percentage(current_amount: float, goal: float) -> int:
    """Funding progress rounded half-up and capped at 100."""
    if goal <= 0:
        return 0
    return min(math.floor(current_amount / goal * 100 + 0.5), 100)


# ─────────────────────────────────────────────
# DATABASE MODELS
# ─────────────────────────────────────────────


class Campaign(SQLModel, table=True):
    """A funding project with a goal, a deadline and a review status."""

    __tablename__ = "campaigns"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=100)
    description: str = Field(max_length=5000)
    goal: float = Field(description="Funding target, at least 100")
    current_amount: float = Field(default=0, description="Sum of completed pledges")
    image_url: str
    category: str = Field(index=True)
    status: str = Field(default=CampaignStatus.PENDING.value, index=True)
    creator_id: int = Field(foreign_key="users.id", index=True)
    end_date: datetime = Field(sa_type=DateTime)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    location: Optional[str] = Field(default=None, max_length=100)
    video_url: Optional[str] = None
    backer_count: int = Field(default=0)
    created_at: datetime = Field(default_factory=utcnow, index=True, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class RewardTier(SQLModel, table=True):
    """A pledge bracket offering a specific reward."""

    __tablename__ = "reward_tiers"

    id: Optional[int] = Field(default=None, primary_key=True)
    campaign_id: int = Field(foreign_key="campaigns.id", index=True)
    position: int = Field(default=0, description="Order within the campaign")
    title: str = Field(max_length=100)
    description: str = Field(max_length=500)
    amount: float
    estimated_delivery: datetime = Field(sa_type=DateTime)
    backer_count: int = Field(default=0)
    is_limited: bool = False
    limit_count: Optional[int] = None


# ─────────────────────────────────────────────
# PYDANTIC SCHEMAS: Requests
# ─────────────────────────────────────────────


class RewardTierInput(ApiModel):
    title: str = pydantic.Field(min_length=1, max_length=100)
    description: str = pydantic.Field(min_length=1, max_length=500)
    amount: float = pydantic.Field(ge=1, allow_inf_nan=False)
    estimated_delivery: datetime
    is_limited: bool = False
    limit_count: Optional[int] = pydantic.Field(default=None, ge=1)


class CampaignCreate(ApiModel):
    """Create payload. Presence of required fields is checked by the store."""

    title: Optional[str] = pydantic.Field(default=None, max_length=100)
    description: Optional[str] = pydantic.Field(default=None, max_length=5000)
    goal: Optional[float] = pydantic.Field(default=None, ge=MIN_GOAL, allow_inf_nan=False)
    image_url: Optional[str] = None
    category: Optional[CampaignCategory] = None
    end_date: Optional[datetime] = None
    reward_tiers: List[RewardTierInput] = []
    tags: List[Tag] = []
    location: Optional[str] = pydantic.Field(default=None, max_length=100)
    video_url: Optional[str] = None


class CampaignUpdate(ApiModel):
    """Editable campaign fields. Unset fields are left untouched."""

    title: Optional[str] = pydantic.Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = pydantic.Field(default=None, min_length=1, max_length=5000)
    goal: Optional[float] = pydantic.Field(default=None, ge=MIN_GOAL, allow_inf_nan=False)
    image_url: Optional[str] = None
    category: Optional[CampaignCategory] = None
    end_date: Optional[datetime] = None
    reward_tiers: Optional[List[RewardTierInput]] = None
    tags: Optional[List[Tag]] = None
    location: Optional[str] = pydantic.Field(default=None, max_length=100)
    video_url: Optional[str] = None


class StatusUpdate(ApiModel):
    status: Optional[str] = None


# ─────────────────────────────────────────────
# PYDANTIC SCHEMAS: Responses
# ─────────────────────────────────────────────


class RewardTierRead(ApiModel):
    id: int
    title: str
    description: str
    amount: float
    estimated_delivery: datetime
    backer_count: int = 0
    is_limited: bool = False
    limit_count: Optional[int] = None


class CampaignRead(ApiModel):
    """Campaign with its creator and reward tiers expanded."""

    id: int
    title: str
    description: str
    goal: float
    current_amount: float = 0
    image_url: str
    category: str
    status: str
    creator: CreatorSummary
    reward_tiers: List[RewardTierRead] = []
    end_date: datetime
    tags: List[str] = []
    location: Optional[str] = None
    video_url: Optional[str] = None
    backer_count: int = 0
    created_at: datetime
    updated_at: datetime

    @computed_field(alias="progressPercentage")
    @property
    def progress_percentage(self) -> int:
        return progress_percentage(self.current_amount, self.goal)

    @classmethod
    def build(
        cls,
        campaign: Campaign,
        creator: CreatorSummary,
        reward_tiers: List[RewardTier] | None = None,
    ) -> "CampaignRead":
        data = campaign.model_dump(exclude={"creator_id"})
        data["tags"] = list(campaign.tags or [])
        data["creator"] = creator
        data["reward_tiers"] = [
            RewardTierRead.model_validate(t) for t in (reward_tiers or [])
        ]
        return cls.model_validate(data)


class Pagination(ApiModel):
    page: int
    limit: int
    total: int
    pages: int


class CampaignPage(ApiModel):
    campaigns: List[CampaignRead]
    pagination: Pagination


class CampaignDetail(ApiModel):
    """Campaign detail view: the campaign, its Q&A thread and the viewer's bookmark."""

    campaign: CampaignRead
    qanda: List[QandARead] = []
    is_bookmarked: bool = False
