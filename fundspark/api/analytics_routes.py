"""FundSpark — Admin Analytics Routes."""

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from fundspark.analyzer.dashboard_engine import compute_dashboard
from fundspark.analyzer.funding_engine import MAX_TREND_DAYS, compute_funding_trends
from fundspark.api.deps import authorize
from fundspark.api.responses import ok
from fundspark.database import get_session
from fundspark.models.user_models import UserPublic, UserRole

router = APIRouter(prefix="/analytics", tags=["Analytics"])

require_admin = authorize(UserRole.ADMIN.value)


@router.get("/funding-trends")
def funding_trends(
    days: int = Query(30, ge=1, le=MAX_TREND_DAYS),
    user: UserPublic = Depends(require_admin),
    session: Session = Depends(get_session),
):
    """Completed-payment totals per calendar day over the last ``days`` days."""
    return ok(compute_funding_trends(session, days))


@router.get("/dashboard")
def dashboard(
    user: UserPublic = Depends(require_admin),
    session: Session = Depends(get_session),
):
    return ok(compute_dashboard(session))
