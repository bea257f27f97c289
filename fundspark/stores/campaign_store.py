"""FundSpark — Campaign Store.

Owns campaign records, their review lifecycle and reward tiers. Reference
expansion (creator identity, reward tiers) is an explicit join performed
here so read cost stays visible.
"""

from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import delete, update
from sqlmodel import Session, col, select

from fundspark.core.errors import Conflict, NotFound, ValidationError
from fundspark.core.logging import get_logger
from fundspark.core.policy import Action, Actor, ensure_allowed, is_admin
from fundspark.core.timeutils import to_naive_utc, utcnow
from fundspark.models.campaign_models import (
    REVIEW_STATUSES,
    Campaign,
    CampaignCreate,
    CampaignRead,
    CampaignStatus,
    CampaignUpdate,
    RewardTier,
    RewardTierInput,
)
from fundspark.models.engagement_models import Bookmark, QandA
from fundspark.models.user_models import CreatorSummary, User

logger = get_logger("stores.campaign")

REQUIRED_FIELDS = ("title", "description", "goal", "image_url", "category", "end_date")
NON_NULLABLE_FIELDS = set(REQUIRED_FIELDS)


# ── Expansion ──


def creator_summary(user: User, with_bio: bool = False) -> CreatorSummary:
    summary = CreatorSummary.model_validate(user)
    if not with_bio:
        summary.bio = None
    return summary


def _tiers_by_campaign(
    session: Session, campaign_ids: Iterable[int]
) -> Dict[int, List[RewardTier]]:
    ids = list(campaign_ids)
    if not ids:
        return {}
    tiers = session.exec(
        select(RewardTier)
        .where(col(RewardTier.campaign_id).in_(ids))
        .order_by(RewardTier.campaign_id, RewardTier.position, RewardTier.id)
    ).all()
    grouped: Dict[int, List[RewardTier]] = defaultdict(list)
    for tier in tiers:
        grouped[tier.campaign_id].append(tier)
    return grouped


def expand_campaigns(
    session: Session,
    rows: Sequence[Tuple[Campaign, User]],
    with_bio: bool = False,
) -> List[CampaignRead]:
    """Turn (campaign, creator) rows into response models with tiers attached."""
    tiers = _tiers_by_campaign(session, (c.id for c, _ in rows))
    return [
        CampaignRead.build(campaign, creator_summary(creator, with_bio), tiers.get(campaign.id, []))
        for campaign, creator in rows
    ]


def with_creator():
    return select(Campaign, User).join(User, col(Campaign.creator_id) == col(User.id))


def get_expanded(session: Session, campaign_id: int, with_bio: bool = False) -> CampaignRead:
    row = session.exec(with_creator().where(Campaign.id == campaign_id)).first()
    if not row:
        raise NotFound("Campaign not found")
    return expand_campaigns(session, [row], with_bio=with_bio)[0]


def get_campaign_or_404(session: Session, campaign_id: int) -> Campaign:
    campaign = session.get(Campaign, campaign_id)
    if not campaign:
        raise NotFound("Campaign not found")
    return campaign


# ── Validation helpers ──


def _future_end_date(value: datetime) -> datetime:
    end_date = to_naive_utc(value)
    if end_date <= utcnow():
        raise ValidationError("End date must be in the future")
    return end_date


def _replace_tiers(
    session: Session, campaign_id: int, tiers: List[RewardTierInput]
) -> None:
    session.execute(delete(RewardTier).where(col(RewardTier.campaign_id) == campaign_id))
    for position, tier in enumerate(tiers):
        session.add(
            RewardTier(
                campaign_id=campaign_id,
                position=position,
                title=tier.title,
                description=tier.description,
                amount=tier.amount,
                estimated_delivery=to_naive_utc(tier.estimated_delivery),
                is_limited=tier.is_limited,
                limit_count=tier.limit_count,
            )
        )


# ── Operations ──


def create_campaign(session: Session, fields: CampaignCreate, actor: Actor) -> CampaignRead:
    """Persist a new campaign in ``pending`` status owned by ``actor``."""
    ensure_allowed(actor, None, Action.CREATE, "Only creators can create campaigns")

    title = (fields.title or "").strip()
    values = {name: getattr(fields, name) for name in REQUIRED_FIELDS}
    values["title"] = title
    if any(v is None or v == "" for v in values.values()):
        raise ValidationError("Please provide all required fields")

    campaign = Campaign(
        title=title,
        description=fields.description,
        goal=fields.goal,
        image_url=fields.image_url,
        category=fields.category.value,
        end_date=_future_end_date(fields.end_date),
        tags=[t for t in fields.tags if t],
        location=fields.location,
        video_url=fields.video_url,
        status=CampaignStatus.PENDING.value,
        current_amount=0,
        backer_count=0,
        creator_id=actor.id,
    )
    session.add(campaign)
    session.flush()
    _replace_tiers(session, campaign.id, fields.reward_tiers)
    session.commit()

    logger.info("Campaign created", extra={"entity_id": campaign.id, "user_id": actor.id})
    return get_expanded(session, campaign.id)


def update_campaign(
    session: Session, campaign_id: int, changes: CampaignUpdate, actor: Actor
) -> CampaignRead:
    """Merge editable fields into a campaign.

    Owners may edit only while the campaign is pending; admins at any time.
    """
    campaign = get_campaign_or_404(session, campaign_id)
    ensure_allowed(actor, campaign, Action.UPDATE, "Not authorized to update this campaign")
    if campaign.status != CampaignStatus.PENDING.value and not is_admin(actor):
        raise Conflict(f"Cannot update {campaign.status} campaigns")

    values = changes.model_dump(exclude_unset=True, exclude={"reward_tiers"})
    for name, value in values.items():
        if value is None and name in NON_NULLABLE_FIELDS:
            raise ValidationError(f"{name} cannot be empty")
    if "end_date" in values:
        values["end_date"] = _future_end_date(values["end_date"])
    if "category" in values:
        values["category"] = changes.category.value
    if "title" in values:
        values["title"] = values["title"].strip()
        if not values["title"]:
            raise ValidationError("title cannot be empty")

    if changes.reward_tiers is not None and campaign.current_amount > 0:
        raise Conflict("Cannot change reward tiers after funding has started")

    for name, value in values.items():
        setattr(campaign, name, value)
    campaign.updated_at = utcnow()
    session.add(campaign)
    if changes.reward_tiers is not None:
        _replace_tiers(session, campaign.id, changes.reward_tiers)

    session.commit()
    logger.info("Campaign updated", extra={"entity_id": campaign_id, "user_id": actor.id})
    return get_expanded(session, campaign_id)


def delete_campaign(session: Session, campaign_id: int, actor: Actor) -> None:
    """Remove an unfunded campaign together with its tiers, bookmarks and Q&A."""
    campaign = get_campaign_or_404(session, campaign_id)
    ensure_allowed(actor, campaign, Action.DELETE, "Not authorized to delete this campaign")
    if campaign.current_amount > 0:
        raise Conflict("Cannot delete campaign that has received funding")

    session.execute(delete(Bookmark).where(col(Bookmark.campaign_id) == campaign_id))
    session.execute(delete(QandA).where(col(QandA.campaign_id) == campaign_id))
    session.execute(delete(RewardTier).where(col(RewardTier.campaign_id) == campaign_id))
    # A pledge may land between the check above and this statement
    removed = session.execute(
        delete(Campaign).where(
            col(Campaign.id) == campaign_id, col(Campaign.current_amount) == 0
        )
    )
    if removed.rowcount != 1:
        session.rollback()
        raise Conflict("Cannot delete campaign that has received funding")
    session.commit()
    logger.info("Campaign deleted", extra={"entity_id": campaign_id, "user_id": actor.id})


def set_status(
    session: Session, campaign_id: int, new_status: Optional[str], actor: Actor
) -> CampaignRead:
    """Admin review: move a campaign to ``approved`` or ``rejected``."""
    ensure_allowed(actor, None, Action.REVIEW, "Only admins can review campaigns")
    if new_status not in REVIEW_STATUSES:
        raise ValidationError("Invalid status. Must be approved or rejected")

    campaign = get_campaign_or_404(session, campaign_id)
    campaign.status = new_status
    campaign.updated_at = utcnow()
    session.add(campaign)
    session.commit()

    logger.info(f"Campaign {new_status}", extra={"entity_id": campaign_id, "user_id": actor.id})
    return get_expanded(session, campaign_id)


def list_mine(session: Session, actor_id: int) -> List[CampaignRead]:
    """Every campaign created by ``actor_id``, newest first, any status."""
    rows = session.exec(
        with_creator()
        .where(Campaign.creator_id == actor_id)
        .order_by(col(Campaign.created_at).desc(), col(Campaign.id).desc())
    ).all()
    return expand_campaigns(session, rows)


def complete_ended_campaigns(session: Session, now: Optional[datetime] = None) -> int:
    """Close out approved campaigns whose end date has passed."""
    now = now or utcnow()
    result = session.execute(
        update(Campaign)
        .where(
            col(Campaign.status) == CampaignStatus.APPROVED.value,
            col(Campaign.end_date) <= now,
        )
        .values(status=CampaignStatus.COMPLETED.value, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    session.commit()
    return result.rowcount or 0
