"""Campaign store tests: creation, ownership rules, review and deletion."""

from datetime import timedelta

import pytest
from sqlmodel import select

from fundspark.core.errors import Conflict, Forbidden, NotFound, ValidationError
from fundspark.core.timeutils import utcnow
from fundspark.models.campaign_models import (
    Campaign,
    CampaignCreate,
    CampaignStatus,
    CampaignUpdate,
    RewardTier,
)
from fundspark.models.engagement_models import Bookmark, CommentCreate
from fundspark.models.user_models import UserRole
from fundspark.stores import campaign_store, engagement_store


def _create_fields(**overrides) -> CampaignCreate:
    data = {
        "title": "Solar Lantern",
        "description": "A pocket-sized solar lantern",
        "goal": 1000,
        "imageUrl": "https://img.example.com/lantern.png",
        "category": "technology",
        "endDate": (utcnow() + timedelta(days=7)).isoformat(),
        "tags": ["solar", "outdoor"],
        "rewardTiers": [
            {
                "title": "Early bird",
                "description": "One lantern",
                "amount": 25,
                "estimatedDelivery": (utcnow() + timedelta(days=60)).isoformat(),
            }
        ],
    }
    data.update(overrides)
    return CampaignCreate.model_validate(data)


class TestCreateCampaign:
    def test_creates_pending_campaign(self, session, creator):
        campaign = campaign_store.create_campaign(session, _create_fields(), creator)

        assert campaign.status == "pending"
        assert campaign.current_amount == 0
        assert campaign.backer_count == 0
        assert campaign.creator.id == creator.id
        assert campaign.creator.username == creator.username
        assert [t.title for t in campaign.reward_tiers] == ["Early bird"]
        assert campaign.tags == ["solar", "outdoor"]

    @pytest.mark.parametrize("missing", ["title", "description", "goal", "imageUrl", "category", "endDate"])
    def test_missing_required_field(self, session, creator, missing):
        with pytest.raises(ValidationError, match="required fields"):
            campaign_store.create_campaign(session, _create_fields(**{missing: None}), creator)

    def test_end_date_must_be_future(self, session, creator):
        past = (utcnow() - timedelta(minutes=1)).isoformat()
        with pytest.raises(ValidationError, match="future"):
            campaign_store.create_campaign(session, _create_fields(endDate=past), creator)

    def test_backer_cannot_create(self, session, backer):
        with pytest.raises(Forbidden):
            campaign_store.create_campaign(session, _create_fields(), backer)


class TestUpdateCampaign:
    def test_owner_updates_pending(self, session, creator, make_campaign):
        campaign = make_campaign(creator, status=CampaignStatus.PENDING)
        changes = CampaignUpdate.model_validate({"title": "Brighter Lantern", "goal": 2000})

        updated = campaign_store.update_campaign(session, campaign.id, changes, creator)

        assert updated.title == "Brighter Lantern"
        assert updated.goal == 2000
        assert updated.description == campaign.description

    def test_non_owner_forbidden(self, session, creator, make_user, make_campaign):
        campaign = make_campaign(creator, status=CampaignStatus.PENDING)
        other = make_user(UserRole.CREATOR)
        with pytest.raises(Forbidden):
            campaign_store.update_campaign(session, campaign.id, CampaignUpdate(title="x"), other)

    def test_owner_cannot_update_approved(self, session, creator, make_campaign):
        campaign = make_campaign(creator, status=CampaignStatus.APPROVED)
        with pytest.raises(Conflict, match="Cannot update approved campaigns"):
            campaign_store.update_campaign(session, campaign.id, CampaignUpdate(title="x"), creator)

    def test_admin_updates_approved(self, session, creator, admin, make_campaign):
        campaign = make_campaign(creator, status=CampaignStatus.APPROVED)
        updated = campaign_store.update_campaign(
            session, campaign.id, CampaignUpdate(title="Curated"), admin
        )
        assert updated.title == "Curated"
        assert updated.status == "approved"

    def test_missing_campaign(self, session, creator):
        with pytest.raises(NotFound):
            campaign_store.update_campaign(session, 999, CampaignUpdate(title="x"), creator)

    def test_required_field_cannot_be_nulled(self, session, creator, make_campaign):
        campaign = make_campaign(creator, status=CampaignStatus.PENDING)
        with pytest.raises(ValidationError):
            campaign_store.update_campaign(
                session, campaign.id, CampaignUpdate.model_validate({"title": None}), creator
            )

    def test_replaces_reward_tiers(self, session, creator, make_campaign):
        campaign = make_campaign(
            creator,
            status=CampaignStatus.PENDING,
            tiers=[{"title": "Old", "description": "old", "amount": 10}],
        )
        changes = CampaignUpdate.model_validate(
            {
                "rewardTiers": [
                    {
                        "title": "New",
                        "description": "new",
                        "amount": 50,
                        "estimatedDelivery": (utcnow() + timedelta(days=30)).isoformat(),
                        "isLimited": True,
                        "limitCount": 5,
                    }
                ]
            }
        )
        updated = campaign_store.update_campaign(session, campaign.id, changes, creator)
        assert [(t.title, t.limit_count) for t in updated.reward_tiers] == [("New", 5)]


class TestDeleteCampaign:
    def test_owner_deletes_unfunded(self, session, creator, backer, make_campaign):
        campaign = make_campaign(creator, status=CampaignStatus.PENDING)
        engagement_store.toggle_bookmark(session, campaign.id, backer.id)
        engagement_store.add_comment(session, campaign.id, CommentCreate(content="When?"), backer)

        campaign_store.delete_campaign(session, campaign.id, creator)

        assert session.get(Campaign, campaign.id) is None
        assert session.exec(select(Bookmark)).all() == []

    def test_funded_campaign_cannot_be_deleted(self, session, creator, admin, make_campaign):
        campaign = make_campaign(creator, current_amount=50)
        for actor in (creator, admin):
            with pytest.raises(Conflict, match="received funding"):
                campaign_store.delete_campaign(session, campaign.id, actor)
        assert session.get(Campaign, campaign.id) is not None

    def test_non_owner_forbidden(self, session, creator, backer, make_campaign):
        campaign = make_campaign(creator)
        with pytest.raises(Forbidden):
            campaign_store.delete_campaign(session, campaign.id, backer)

    def test_delete_removes_reward_tiers(self, session, creator, make_campaign):
        campaign = make_campaign(
            creator, tiers=[{"title": "T", "description": "d", "amount": 5}]
        )
        campaign_store.delete_campaign(session, campaign.id, creator)
        assert session.exec(select(RewardTier)).all() == []


class TestSetStatus:
    def test_admin_approves(self, session, creator, admin, make_campaign):
        campaign = make_campaign(creator, status=CampaignStatus.PENDING)
        reviewed = campaign_store.set_status(session, campaign.id, "approved", admin)
        assert reviewed.status == "approved"

    def test_admin_rejects(self, session, creator, admin, make_campaign):
        campaign = make_campaign(creator, status=CampaignStatus.PENDING)
        assert campaign_store.set_status(session, campaign.id, "rejected", admin).status == "rejected"

    @pytest.mark.parametrize("status", ["pending", "completed", "bogus", None])
    def test_invalid_status(self, session, creator, admin, make_campaign, status):
        campaign = make_campaign(creator, status=CampaignStatus.PENDING)
        with pytest.raises(ValidationError):
            campaign_store.set_status(session, campaign.id, status, admin)

    def test_owner_cannot_review(self, session, creator, make_campaign):
        campaign = make_campaign(creator, status=CampaignStatus.PENDING)
        with pytest.raises(Forbidden):
            campaign_store.set_status(session, campaign.id, "approved", creator)

    def test_missing_campaign(self, session, admin):
        with pytest.raises(NotFound):
            campaign_store.set_status(session, 404, "approved", admin)


class TestListMine:
    def test_all_statuses_newest_first(self, session, creator, make_user, make_campaign):
        first = make_campaign(creator, status=CampaignStatus.PENDING, title="First")
        second = make_campaign(creator, status=CampaignStatus.REJECTED, title="Second")
        make_campaign(make_user(UserRole.CREATOR), title="Someone else's")

        mine = campaign_store.list_mine(session, creator.id)

        assert [c.id for c in mine] == [second.id, first.id]


class TestLifecycleSweep:
    def test_completes_only_ended_approved(self, session, creator, make_campaign):
        ended = make_campaign(creator, end_in=timedelta(days=1))
        running = make_campaign(creator, end_in=timedelta(days=10))
        pending = make_campaign(creator, status=CampaignStatus.PENDING, end_in=timedelta(days=1))

        closed = campaign_store.complete_ended_campaigns(session, now=utcnow() + timedelta(days=2))

        assert closed == 1
        session.expire_all()
        assert session.get(Campaign, ended.id).status == "completed"
        assert session.get(Campaign, running.id).status == "approved"
        assert session.get(Campaign, pending.id).status == "pending"
