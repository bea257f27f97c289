"""FundSpark — Analytics Output Models."""

import datetime
from typing import List

from fundspark.models.base import ApiModel


class FundingTrendPoint(ApiModel):
    """Completed payments bucketed into one calendar day (UTC)."""

    date: datetime.date
    total_amount: float
    count: int


class FundingTrends(ApiModel):
    days: int
    trends: List[FundingTrendPoint] = []


class DashboardStats(ApiModel):
    total_campaigns: int = 0
    active_campaigns: int = 0
    pending_campaigns: int = 0
    total_funding: float = 0.0
    total_backers: int = 0
