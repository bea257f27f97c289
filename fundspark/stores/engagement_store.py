"""FundSpark — Bookmarks and Q&A."""

from typing import List

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from fundspark.core.errors import ValidationError
from fundspark.core.logging import get_logger
from fundspark.core.policy import Actor
from fundspark.models.campaign_models import Campaign, CampaignRead
from fundspark.models.engagement_models import Bookmark, CommentCreate, QandA, QandARead
from fundspark.models.user_models import AuthorSummary, User
from fundspark.stores.campaign_store import expand_campaigns, get_campaign_or_404

logger = get_logger("stores.engagement")


# ── Bookmarks ──


def is_bookmarked(session: Session, campaign_id: int, user_id: int) -> bool:
    return (
        session.exec(
            select(Bookmark.id).where(
                Bookmark.user_id == user_id, Bookmark.campaign_id == campaign_id
            )
        ).first()
        is not None
    )


def toggle_bookmark(session: Session, campaign_id: int, user_id: int) -> bool:
    """Flip the bookmark for (user, campaign) and return the new state.

    Concurrent toggles from the same starting state agree on the outcome:
    losing a delete race still reports "removed", and losing an insert race
    to the unique constraint still reports "added".
    """
    get_campaign_or_404(session, campaign_id)

    if is_bookmarked(session, campaign_id, user_id):
        session.execute(
            delete(Bookmark).where(
                col(Bookmark.user_id) == user_id, col(Bookmark.campaign_id) == campaign_id
            )
        )
        session.commit()
        return False

    session.add(Bookmark(user_id=user_id, campaign_id=campaign_id))
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.info(
            "Bookmark already present",
            extra={"entity_id": campaign_id, "user_id": user_id},
        )
    return True


def list_bookmarked(session: Session, user_id: int) -> List[CampaignRead]:
    """Campaigns bookmarked by ``user_id``, most recent bookmark first."""
    rows = session.exec(
        select(Campaign, User)
        .join(Bookmark, col(Bookmark.campaign_id) == col(Campaign.id))
        .join(User, col(Campaign.creator_id) == col(User.id))
        .where(Bookmark.user_id == user_id)
        .order_by(col(Bookmark.created_at).desc(), col(Bookmark.id).desc())
    ).all()
    return expand_campaigns(session, rows)


# ── Q&A ──


def list_thread(session: Session, campaign_id: int) -> List[QandARead]:
    """All Q&A entries for a campaign, newest first, with authors expanded."""
    rows = session.exec(
        select(QandA, User)
        .join(User, col(QandA.user_id) == col(User.id))
        .where(QandA.campaign_id == campaign_id)
        .order_by(col(QandA.created_at).desc(), col(QandA.id).desc())
    ).all()
    return [QandARead.build(entry, AuthorSummary.model_validate(author)) for entry, author in rows]


def add_comment(
    session: Session, campaign_id: int, request: CommentCreate, actor: Actor
) -> QandARead:
    content = (request.content or "").strip()
    if not content:
        raise ValidationError("Content is required")

    campaign = get_campaign_or_404(session, campaign_id)
    if request.parent_id is not None:
        parent = session.get(QandA, request.parent_id)
        if not parent or parent.campaign_id != campaign_id:
            raise ValidationError("Parent entry not found on this campaign")

    entry = QandA(
        campaign_id=campaign_id,
        user_id=actor.id,
        type=request.type.value,
        content=content,
        parent_id=request.parent_id,
        is_creator_response=campaign.creator_id == actor.id,
    )
    session.add(entry)
    session.commit()
    session.refresh(entry)

    author = session.get(User, actor.id)
    logger.info("Comment added", extra={"entity_id": campaign_id, "user_id": actor.id})
    return QandARead.build(entry, AuthorSummary.model_validate(author))
