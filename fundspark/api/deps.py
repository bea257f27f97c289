"""FundSpark — Authentication & Authorization Dependencies.

``authenticate`` requires a valid bearer token, ``optional_auth`` degrades to
anonymous on a missing or bad token, and ``authorize(*roles)`` layers a role
check on top of ``authenticate``. The resolved user is bound to
``request.state.user`` with secret fields stripped.
"""

from typing import Optional

from fastapi import Depends, Header, Request
from sqlmodel import Session

from fundspark.core.errors import Forbidden, Unauthorized
from fundspark.core.logging import get_logger
from fundspark.core.security import token_service
from fundspark.database import get_session
from fundspark.models.user_models import User, UserPublic

logger = get_logger("api.auth")


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _resolve_user(session: Session, token: str) -> UserPublic:
    claims = token_service.verify_token(token)
    user = session.get(User, claims.id)
    if not user:
        raise Unauthorized("Token is not valid. User not found.")
    return UserPublic.model_validate(user)


def authenticate(
    request: Request,
    authorization: Optional[str] = Header(None),
    session: Session = Depends(get_session),
) -> UserPublic:
    """The signed-in user, or 401."""
    token = _bearer_token(authorization)
    if not token:
        raise Unauthorized("Access denied. No token provided.")
    user = _resolve_user(session, token)
    request.state.user = user
    return user


def optional_auth(
    request: Request,
    authorization: Optional[str] = Header(None),
    session: Session = Depends(get_session),
) -> Optional[UserPublic]:
    """The signed-in user if the token checks out, else None."""
    request.state.user = None
    token = _bearer_token(authorization)
    if not token:
        return None
    try:
        user = _resolve_user(session, token)
    except Unauthorized as e:
        logger.info(f"Invalid token in optional auth: {e.message}", extra={"endpoint": request.url.path})
        return None
    request.state.user = user
    return user


def authorize(*roles: str):
    """Build a dependency that admits only users whose role is in ``roles``."""

    def dependency(
        request: Request, user: UserPublic = Depends(authenticate)
    ) -> UserPublic:
        bound = getattr(request.state, "user", None)
        if bound is None:
            raise Forbidden("Access denied. Please authenticate first.")
        if bound.role not in roles:
            raise Forbidden(f"Access denied. Required role: {' or '.join(roles)}")
        return user

    return dependency
