"""FundSpark — Campaign Read Views.

Filtered, sorted, text-searched and paginated listing plus the detail view.
Pages are ``limit`` rows wide: skip ``(page - 1) * limit``, take ``limit``.
"""

import math
from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, col, select

from fundspark.config import settings
from fundspark.core.errors import ValidationError
from fundspark.core.logging import get_logger
from fundspark.database import text_search
from fundspark.models.campaign_models import (
    Campaign,
    CampaignCategory,
    CampaignDetail,
    CampaignPage,
    CampaignStatus,
    Pagination,
)
from fundspark.stores.campaign_store import expand_campaigns, get_expanded, with_creator
from fundspark.stores.engagement_store import is_bookmarked, list_thread

logger = get_logger("stores.campaign_query")

MAX_PAGE_SIZE = 100
ALL = "all"

SORT_FIELDS = {
    "createdAt": Campaign.created_at,
    "updatedAt": Campaign.updated_at,
    "goal": Campaign.goal,
    "currentAmount": Campaign.current_amount,
    "endDate": Campaign.end_date,
    "backerCount": Campaign.backer_count,
    "title": Campaign.title,
}

SEARCH_COLUMNS = (Campaign.title, Campaign.description)
SEARCH_TAG_COLUMNS = (Campaign.tags,)


def _check_enum(value: str, enum_cls, label: str) -> str:
    allowed = {member.value for member in enum_cls}
    if value not in allowed:
        raise ValidationError(f"Invalid {label}. Must be one of: {', '.join(sorted(allowed))}")
    return value


def list_campaigns(
    session: Session,
    page: int = 1,
    limit: Optional[int] = None,
    category: Optional[str] = None,
    status: Optional[str] = CampaignStatus.APPROVED.value,
    search: Optional[str] = None,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
) -> CampaignPage:
    """Return one page of campaigns plus total count and page count.

    ``status`` and ``category`` accept ``"all"`` (or empty) to skip the filter.
    """
    limit = settings.default_page_size if limit is None else limit
    if page < 1:
        raise ValidationError("page must be at least 1")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
    if sort_by not in SORT_FIELDS:
        raise ValidationError(f"Cannot sort by {sort_by}")
    if sort_order not in ("asc", "desc"):
        raise ValidationError("sortOrder must be asc or desc")

    conditions = []
    if status and status != ALL:
        conditions.append(col(Campaign.status) == _check_enum(status, CampaignStatus, "status"))
    if category and category != ALL:
        conditions.append(col(Campaign.category) == _check_enum(category, CampaignCategory, "category"))
    if search and search.strip():
        conditions.append(text_search(SEARCH_COLUMNS, search, json_columns=SEARCH_TAG_COLUMNS))

    sort_column = col(SORT_FIELDS[sort_by])
    id_column = col(Campaign.id)
    if sort_order == "desc":
        ordering = (sort_column.desc(), id_column.desc())
    else:
        ordering = (sort_column.asc(), id_column.asc())

    rows = session.exec(
        with_creator()
        .where(*conditions)
        .order_by(*ordering)
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    total = session.exec(
        select(func.count()).select_from(Campaign).where(*conditions)
    ).one()

    logger.debug(f"Listed {len(rows)} of {total} campaigns (page {page})")
    return CampaignPage(
        campaigns=expand_campaigns(session, rows),
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            pages=math.ceil(total / limit),
        ),
    )


def get_campaign_detail(
    session: Session, campaign_id: int, viewer_id: Optional[int] = None
) -> CampaignDetail:
    """Campaign with creator (including bio), its Q&A thread and, for a signed-in
    viewer, whether they bookmarked it."""
    campaign = get_expanded(session, campaign_id, with_bio=True)
    bookmarked = viewer_id is not None and is_bookmarked(session, campaign_id, viewer_id)
    return CampaignDetail(
        campaign=campaign,
        qanda=list_thread(session, campaign_id),
        is_bookmarked=bookmarked,
    )
