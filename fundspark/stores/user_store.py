"""FundSpark — User Store.

Account registration, credential checks and profile edits. Password hashes
never leave this module; callers get ``UserPublic`` projections.
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, or_

from fundspark.core.errors import Conflict, NotFound, Unauthorized, ValidationError
from fundspark.core.logging import get_logger
from fundspark.core.security import hash_password, verify_password
from fundspark.core.timeutils import utcnow
from fundspark.models.user_models import (
    PasswordChange,
    ProfileUpdate,
    RegisterRequest,
    User,
    UserPublic,
    UserRole,
)

logger = get_logger("stores.user")


def get_user(session: Session, user_id: int) -> Optional[User]:
    return session.get(User, user_id)


def register(session: Session, request: RegisterRequest) -> UserPublic:
    if request.role == UserRole.ADMIN:
        raise ValidationError("Admin accounts cannot be self-registered")

    email = request.email.lower()
    existing = session.exec(
        select(User).where(or_(User.email == email, User.username == request.username))
    ).first()
    if existing:
        raise Conflict("User with this email or username already exists")

    user = User(
        username=request.username,
        email=email,
        password_hash=hash_password(request.password),
        role=request.role.value,
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("User with this email or username already exists")
    session.refresh(user)
    logger.info("User registered", extra={"user_id": user.id})
    return UserPublic.model_validate(user)


def authenticate_credentials(session: Session, email: str, password: str) -> UserPublic:
    user = session.exec(select(User).where(User.email == email.lower())).first()
    if not user or not verify_password(password, user.password_hash):
        raise Unauthorized("Invalid credentials")
    return UserPublic.model_validate(user)


def update_profile(session: Session, user_id: int, changes: ProfileUpdate) -> UserPublic:
    user = session.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    values = changes.model_dump(exclude_unset=True)
    if "username" in values and not (values["username"] or "").strip():
        raise ValidationError("username cannot be empty")
    for key, value in values.items():
        setattr(user, key, value)
    user.updated_at = utcnow()
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("Username is already taken")
    session.refresh(user)
    return UserPublic.model_validate(user)


def change_password(session: Session, user_id: int, change: PasswordChange) -> None:
    user = session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    if not verify_password(change.current_password, user.password_hash):
        raise Unauthorized("Current password is incorrect")

    user.password_hash = hash_password(change.new_password)
    user.updated_at = utcnow()
    session.add(user)
    session.commit()
    logger.info("Password changed", extra={"user_id": user.id})
