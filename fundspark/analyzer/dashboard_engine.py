"""FundSpark — Dashboard Summary Engine."""

from sqlalchemy import distinct, func
from sqlmodel import Session, col, select

from fundspark.core.logging import get_logger
from fundspark.models.analytics_models import DashboardStats
from fundspark.models.campaign_models import Campaign, CampaignStatus
from fundspark.models.payment_models import Payment, PaymentStatus

logger = get_logger("analyzer.dashboard")


def _count_campaigns(session: Session, status: str | None = None) -> int:
    query = select(func.count()).select_from(Campaign)
    if status:
        query = query.where(col(Campaign.status) == status)
    return session.exec(query).one()


def compute_dashboard(session: Session) -> DashboardStats:
    """Campaign counts by status, total completed funding and distinct backers."""
    completed = col(Payment.status) == PaymentStatus.COMPLETED.value
    total_funding = session.exec(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(completed)
    ).one()
    total_backers = session.exec(
        select(func.count(distinct(Payment.backer_id))).where(completed)
    ).one()

    stats = DashboardStats(
        total_campaigns=_count_campaigns(session),
        active_campaigns=_count_campaigns(session, CampaignStatus.APPROVED.value),
        pending_campaigns=_count_campaigns(session, CampaignStatus.PENDING.value),
        total_funding=float(total_funding),
        total_backers=total_backers,
    )
    logger.info("Dashboard stats computed")
    return stats
