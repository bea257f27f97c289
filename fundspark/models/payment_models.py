"""FundSpark — Payment Models.

Payments are simulated pledges. A completed payment has already been counted
exactly once into its campaign's ``current_amount`` and ``backer_count``.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

import pydantic
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from fundspark.core.timeutils import utcnow
from fundspark.models.base import ApiModel
from fundspark.models.user_models import AuthorSummary


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
    BANK_TRANSFER = "bank_transfer"


# ─────────────────────────────────────────────
# DATABASE MODEL
# ─────────────────────────────────────────────


class Payment(SQLModel, table=True):
    """A backer's pledge against a campaign."""

    __tablename__ = "payments"

    id: Optional[int] = Field(default=None, primary_key=True)
    campaign_id: int = Field(foreign_key="campaigns.id", index=True)
    backer_id: int = Field(foreign_key="users.id", index=True)
    amount: float
    reward_tier_id: Optional[int] = Field(default=None, foreign_key="reward_tiers.id")
    status: str = Field(default=PaymentStatus.PENDING.value, index=True)
    payment_method: str = Field(default=PaymentMethod.STRIPE.value)
    transaction_id: str = Field(unique=True, description="Simulated gateway reference")
    notes: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=utcnow, index=True, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


# ─────────────────────────────────────────────
# PYDANTIC SCHEMAS
# ─────────────────────────────────────────────


class PaymentCreate(ApiModel):
    campaign_id: Optional[int] = None
    amount: Optional[float] = pydantic.Field(default=None, allow_inf_nan=False)
    reward_tier_id: Optional[int] = None
    payment_method: PaymentMethod = PaymentMethod.STRIPE
    notes: Optional[str] = pydantic.Field(default=None, max_length=500)


class PaymentRead(ApiModel):
    id: int
    campaign_id: int
    backer_id: int
    amount: float
    reward_tier_id: Optional[int] = None
    status: str
    payment_method: str
    transaction_id: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PaymentCampaignSummary(ApiModel):
    """Campaign projection shown in a backer's payment history."""

    id: int
    title: str
    image_url: str
    creator: AuthorSummary


class MyPaymentRead(PaymentRead):
    campaign: PaymentCampaignSummary


class CampaignPaymentRead(PaymentRead):
    backer: AuthorSummary
