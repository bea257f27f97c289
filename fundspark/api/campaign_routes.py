"""FundSpark — Campaign Routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from fundspark.api.deps import authenticate, authorize, optional_auth
from fundspark.api.responses import ok
from fundspark.database import get_session
from fundspark.models.campaign_models import CampaignCreate, CampaignUpdate, StatusUpdate
from fundspark.models.engagement_models import CommentCreate
from fundspark.models.user_models import UserPublic, UserRole
from fundspark.stores import campaign_query, campaign_store, engagement_store

router = APIRouter(prefix="/campaigns", tags=["Campaigns"])

require_creator = authorize(UserRole.CREATOR.value, UserRole.ADMIN.value)
require_admin = authorize(UserRole.ADMIN.value)


# ── Collection ──


@router.post("", status_code=201)
def create_campaign(
    fields: CampaignCreate,
    user: UserPublic = Depends(require_creator),
    session: Session = Depends(get_session),
):
    campaign = campaign_store.create_campaign(session, fields, user)
    return ok({"campaign": campaign}, "Campaign created successfully")


@router.get("")
def list_campaigns(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=campaign_query.MAX_PAGE_SIZE),
    category: Optional[str] = None,
    status: Optional[str] = "approved",
    search: Optional[str] = None,
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    session: Session = Depends(get_session),
):
    """List campaigns with filtering, text search, sorting and pagination."""
    result = campaign_query.list_campaigns(
        session,
        page=page,
        limit=limit,
        category=category,
        status=status,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return ok(result)


@router.get("/my-campaigns")
def my_campaigns(
    user: UserPublic = Depends(authenticate),
    session: Session = Depends(get_session),
):
    return ok({"campaigns": campaign_store.list_mine(session, user.id)})


@router.get("/bookmarked")
def bookmarked_campaigns(
    user: UserPublic = Depends(authenticate),
    session: Session = Depends(get_session),
):
    return ok({"campaigns": engagement_store.list_bookmarked(session, user.id)})


# ── Single campaign ──


@router.get("/{campaign_id}")
def get_campaign(
    campaign_id: int,
    viewer: Optional[UserPublic] = Depends(optional_auth),
    session: Session = Depends(get_session),
):
    """Campaign detail with Q&A thread and the viewer's bookmark flag."""
    detail = campaign_query.get_campaign_detail(
        session, campaign_id, viewer.id if viewer else None
    )
    return ok(detail)


@router.put("/{campaign_id}")
def update_campaign(
    campaign_id: int,
    changes: CampaignUpdate,
    user: UserPublic = Depends(authenticate),
    session: Session = Depends(get_session),
):
    campaign = campaign_store.update_campaign(session, campaign_id, changes, user)
    return ok({"campaign": campaign}, "Campaign updated successfully")


@router.delete("/{campaign_id}")
def delete_campaign(
    campaign_id: int,
    user: UserPublic = Depends(authenticate),
    session: Session = Depends(get_session),
):
    campaign_store.delete_campaign(session, campaign_id, user)
    return ok(message="Campaign deleted successfully")


@router.post("/{campaign_id}/bookmark")
def toggle_bookmark(
    campaign_id: int,
    user: UserPublic = Depends(authenticate),
    session: Session = Depends(get_session),
):
    bookmarked = engagement_store.toggle_bookmark(session, campaign_id, user.id)
    message = "Campaign bookmarked successfully" if bookmarked else "Campaign removed from bookmarks"
    return ok({"isBookmarked": bookmarked}, message)


@router.post("/{campaign_id}/comments", status_code=201)
def add_comment(
    campaign_id: int,
    request: CommentCreate,
    user: UserPublic = Depends(authenticate),
    session: Session = Depends(get_session),
):
    comment = engagement_store.add_comment(session, campaign_id, request, user)
    return ok({"comment": comment}, "Comment added successfully")


@router.put("/{campaign_id}/status")
def update_status(
    campaign_id: int,
    request: StatusUpdate,
    user: UserPublic = Depends(require_admin),
    session: Session = Depends(get_session),
):
    campaign = campaign_store.set_status(session, campaign_id, request.status, user)
    return ok({"campaign": campaign}, f"Campaign {campaign.status} successfully")
