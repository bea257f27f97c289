"""FundSpark — Account & Token Routes."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from fundspark.api.deps import authenticate
from fundspark.api.responses import ok
from fundspark.core.errors import Unauthorized
from fundspark.core.security import TokenType, token_service
from fundspark.database import get_session
from fundspark.models.user_models import (
    LoginRequest,
    PasswordChange,
    ProfileUpdate,
    RefreshRequest,
    RegisterRequest,
    UserPublic,
)
from fundspark.stores import user_store
from fundspark.core.logging import get_logger

logger = get_logger("api.accounts")

router = APIRouter(prefix="/auth", tags=["Auth"])


def _session_payload(user: UserPublic) -> dict:
    tokens = token_service.create_token_pair(user.id, user.email, user.role)
    return {"user": user, **tokens}


@router.post("/register", status_code=201)
def register(request: RegisterRequest, session: Session = Depends(get_session)):
    """Create a backer or creator account and sign it in."""
    user = user_store.register(session, request)
    return ok(_session_payload(user), "User registered successfully")


@router.post("/login")
def login(request: LoginRequest, session: Session = Depends(get_session)):
    user = user_store.authenticate_credentials(session, request.email, request.password)
    logger.info("User logged in", extra={"user_id": user.id})
    return ok(_session_payload(user), "Login successful")


@router.post("/refresh")
def refresh(request: RefreshRequest, session: Session = Depends(get_session)):
    """Exchange a refresh token for a fresh access token."""
    claims = token_service.verify_token(request.refresh_token, expected_type=TokenType.REFRESH)
    user = user_store.get_user(session, claims.id)
    if not user:
        raise Unauthorized("Token is not valid. User not found.")
    token = token_service.create_access_token(user.id, user.email, user.role)
    return ok({"token": token})


@router.get("/me")
def me(user: UserPublic = Depends(authenticate)):
    return ok({"user": user})


@router.put("/profile")
def update_profile(
    changes: ProfileUpdate,
    user: UserPublic = Depends(authenticate),
    session: Session = Depends(get_session),
):
    updated = user_store.update_profile(session, user.id, changes)
    return ok({"user": updated}, "Profile updated successfully")


@router.put("/change-password")
def change_password(
    change: PasswordChange,
    user: UserPublic = Depends(authenticate),
    session: Session = Depends(get_session),
):
    user_store.change_password(session, user.id, change)
    return ok(message="Password changed successfully")
