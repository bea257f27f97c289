"""FundSpark — Payment Workflow.

Records simulated pledges. Creating the payment row and incrementing the
campaign's funding counters happen in one transaction: the counters are
bumped with a conditional ``UPDATE ... SET x = x + :amount`` so concurrent
pledges never lose updates, and any failure rolls the whole unit back.
"""

import math
import secrets
import string
import time
from typing import List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import aliased
from sqlmodel import Session, col, select

from fundspark.core.errors import Conflict, Internal, NotFound, ValidationError
from fundspark.core.logging import get_logger
from fundspark.core.timeutils import utcnow
from fundspark.models.campaign_models import Campaign, CampaignRead, CampaignStatus, RewardTier
from fundspark.models.payment_models import (
    CampaignPaymentRead,
    MyPaymentRead,
    Payment,
    PaymentCampaignSummary,
    PaymentCreate,
    PaymentRead,
    PaymentStatus,
)
from fundspark.models.user_models import AuthorSummary, User
from fundspark.stores.campaign_store import get_campaign_or_404, get_expanded

logger = get_logger("stores.payment")

MIN_PLEDGE = 1
_ALPHABET = string.ascii_lowercase + string.digits


def generate_transaction_id() -> str:
    """Simulated gateway reference: ``sim_<epoch ms>_<9 random chars>``."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    return f"sim_{int(time.time() * 1000)}_{suffix}"


def _claim_reward_tier(session: Session, tier: RewardTier) -> None:
    conditions = [col(RewardTier.id) == tier.id]
    if tier.is_limited and tier.limit_count is not None:
        conditions.append(col(RewardTier.backer_count) < col(RewardTier.limit_count))
    claimed = session.execute(
        update(RewardTier)
        .where(*conditions)
        .values(backer_count=RewardTier.backer_count + 1)
        .execution_options(synchronize_session=False)
    )
    if claimed.rowcount != 1:
        raise Conflict("Reward tier is sold out")


def _resolve_reward_tier(
    session: Session, campaign: Campaign, tier_id: Optional[int], amount: float
) -> Optional[RewardTier]:
    if tier_id is None:
        return None
    tier = session.get(RewardTier, tier_id)
    if not tier or tier.campaign_id != campaign.id:
        raise ValidationError("Invalid reward tier for this campaign")
    if amount < tier.amount:
        raise ValidationError(f"Pledge must be at least {tier.amount:g} for this reward")
    if tier.is_limited and tier.limit_count is not None and tier.backer_count >= tier.limit_count:
        raise Conflict("Reward tier is sold out")
    return tier


def process_payment(
    session: Session, request: PaymentCreate, backer_id: int
) -> Tuple[PaymentRead, CampaignRead]:
    """Accept a pledge and credit it to its campaign exactly once.

    Raises:
        ValidationError: missing campaign/amount, amount below the minimum,
            or an unusable reward tier.
        NotFound: the campaign does not exist.
        Conflict: the campaign is not approved, has ended, or the tier is full.
        Internal: the store failed; nothing was written.
    """
    if request.campaign_id is None or request.amount is None:
        raise ValidationError("Campaign ID and amount are required")
    amount = request.amount
    if not math.isfinite(amount) or amount < MIN_PLEDGE:
        raise ValidationError(f"Payment amount must be at least {MIN_PLEDGE}")

    campaign = get_campaign_or_404(session, request.campaign_id)
    if campaign.status != CampaignStatus.APPROVED.value:
        raise Conflict("Campaign is not approved for funding")
    now = utcnow()
    if now >= campaign.end_date:
        raise Conflict("Campaign has ended")
    tier = _resolve_reward_tier(session, campaign, request.reward_tier_id, amount)

    try:
        funded = session.execute(
            update(Campaign)
            .where(
                col(Campaign.id) == campaign.id,
                col(Campaign.status) == CampaignStatus.APPROVED.value,
                col(Campaign.end_date) > now,
            )
            .values(
                current_amount=Campaign.current_amount + amount,
                backer_count=Campaign.backer_count + 1,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if funded.rowcount != 1:
            raise Conflict("Campaign is no longer accepting pledges")
        if tier is not None:
            _claim_reward_tier(session, tier)

        payment = Payment(
            campaign_id=campaign.id,
            backer_id=backer_id,
            amount=amount,
            reward_tier_id=tier.id if tier else None,
            status=PaymentStatus.COMPLETED.value,
            payment_method=request.payment_method.value,
            transaction_id=generate_transaction_id(),
            notes=request.notes,
        )
        session.add(payment)
        session.commit()
    except Conflict:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(
            f"Payment failed, rolled back: {e}",
            extra={"entity_id": campaign.id, "user_id": backer_id},
        )
        raise Internal("Payment could not be processed") from e

    session.refresh(payment)
    logger.info(
        f"Payment {payment.transaction_id} completed for {amount:g}",
        extra={"entity_id": campaign.id, "user_id": backer_id},
    )
    return PaymentRead.model_validate(payment), get_expanded(session, campaign.id)


def list_my_payments(session: Session, backer_id: int) -> List[MyPaymentRead]:
    """A backer's payments, newest first, with campaign and creator name."""
    creator = aliased(User)
    rows = session.exec(
        select(Payment, Campaign, creator)
        .join(Campaign, col(Payment.campaign_id) == col(Campaign.id))
        .join(creator, col(Campaign.creator_id) == creator.id)
        .where(Payment.backer_id == backer_id)
        .order_by(col(Payment.created_at).desc(), col(Payment.id).desc())
    ).all()

    results = []
    for payment, campaign, owner in rows:
        data = PaymentRead.model_validate(payment).model_dump()
        data["campaign"] = PaymentCampaignSummary(
            id=campaign.id,
            title=campaign.title,
            image_url=campaign.image_url,
            creator=AuthorSummary.model_validate(owner),
        )
        results.append(MyPaymentRead.model_validate(data))
    return results


def list_campaign_payments(session: Session, campaign_id: int) -> List[CampaignPaymentRead]:
    """All payments against one campaign with backer identity expanded."""
    get_campaign_or_404(session, campaign_id)
    rows = session.exec(
        select(Payment, User)
        .join(User, col(Payment.backer_id) == col(User.id))
        .where(Payment.campaign_id == campaign_id)
        .order_by(col(Payment.created_at).desc(), col(Payment.id).desc())
    ).all()

    results = []
    for payment, backer in rows:
        data = PaymentRead.model_validate(payment).model_dump()
        data["backer"] = AuthorSummary.model_validate(backer)
        results.append(CampaignPaymentRead.model_validate(data))
    return results
