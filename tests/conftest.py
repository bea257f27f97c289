"""
Shared fixtures for FundSpark tests.

Each test gets its own file-backed SQLite database; the HTTP client overrides
the session dependency to point at it. Tokens are minted through the real
token service.
"""

import os
import tempfile
from datetime import timedelta

os.environ.setdefault("DATABASE_URL", f"sqlite:///{tempfile.gettempdir()}/fundspark-test.db")
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from fundspark.core.security import hash_password, token_service
from fundspark.core.timeutils import utcnow
from fundspark.database import build_engine, get_session, init_db
from fundspark.main import app
from fundspark.models.campaign_models import Campaign, CampaignStatus, RewardTier
from fundspark.models.user_models import User, UserRole

PASSWORD = "secret123"


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'fundspark.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    yield TestClient(app)
    app.dependency_overrides.clear()


# ====================
# Factories
# ====================


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def factory(role: UserRole = UserRole.BACKER, username: str | None = None) -> User:
        counter["n"] += 1
        name = username or f"{role.value}{counter['n']}"
        user = User(
            username=name,
            email=f"{name}@example.com",
            password_hash=hash_password(PASSWORD),
            role=role.value,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return factory


@pytest.fixture
def make_campaign(session):
    def factory(
        creator: User,
        status: CampaignStatus = CampaignStatus.APPROVED,
        goal: float = 1000,
        title: str = "Solar Lantern",
        description: str = "A pocket-sized solar lantern",
        category: str = "technology",
        tags: list | None = None,
        end_in: timedelta = timedelta(days=7),
        current_amount: float = 0,
        tiers: list | None = None,
    ) -> Campaign:
        campaign = Campaign(
            title=title,
            description=description,
            goal=goal,
            image_url="https://img.example.com/c.png",
            category=category,
            status=status.value,
            creator_id=creator.id,
            end_date=utcnow() + end_in,
            tags=tags or [],
            current_amount=current_amount,
        )
        session.add(campaign)
        session.flush()
        for position, tier in enumerate(tiers or []):
            session.add(
                RewardTier(
                    campaign_id=campaign.id,
                    position=position,
                    estimated_delivery=utcnow() + timedelta(days=60),
                    **tier,
                )
            )
        session.commit()
        session.refresh(campaign)
        return campaign

    return factory


@pytest.fixture
def backer(make_user):
    return make_user(UserRole.BACKER)


@pytest.fixture
def creator(make_user):
    return make_user(UserRole.CREATOR)


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN)


def _auth_headers(user: User) -> dict:
    token = token_service.create_access_token(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return _auth_headers
