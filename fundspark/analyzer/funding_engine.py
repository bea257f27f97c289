"""FundSpark — Funding Trend Engine.

Buckets completed payments by UTC calendar day over a trailing window.
"""

from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Tuple

from sqlmodel import Session, col, select

from fundspark.core.errors import ValidationError
from fundspark.core.logging import get_logger
from fundspark.core.timeutils import utcnow
from fundspark.models.analytics_models import FundingTrendPoint, FundingTrends
from fundspark.models.payment_models import Payment, PaymentStatus

logger = get_logger("analyzer.funding")

MAX_TREND_DAYS = 365


def compute_funding_trends(
    session: Session,
    days: int = 30,
    now: Optional[datetime] = None,
) -> FundingTrends:
    """Daily totals and counts of completed payments from ``now - days`` to ``now``."""
    if days < 1 or days > MAX_TREND_DAYS:
        raise ValidationError(f"days must be between 1 and {MAX_TREND_DAYS}")

    now = now or utcnow()
    start = now - timedelta(days=days)
    rows = session.exec(
        select(Payment.created_at, Payment.amount).where(
            Payment.status == PaymentStatus.COMPLETED.value,
            col(Payment.created_at) >= start,
            col(Payment.created_at) <= now,
        )
    ).all()

    buckets: Dict[date, Tuple[float, int]] = defaultdict(lambda: (0.0, 0))
    for created_at, amount in rows:
        total, count = buckets[created_at.date()]
        buckets[created_at.date()] = (total + amount, count + 1)

    trends: List[FundingTrendPoint] = [
        FundingTrendPoint(date=day, total_amount=round(total, 2), count=count)
        for day, (total, count) in sorted(buckets.items())
    ]
    logger.info(f"Computed {len(trends)} funding buckets over {days} days")
    return FundingTrends(days=days, trends=trends)
