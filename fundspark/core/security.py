"""FundSpark — Identity & Token Service.

Issues and verifies signed identity tokens carrying ``id``, ``email`` and
``role``, and hashes account passwords with bcrypt.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

import bcrypt
import jwt

from fundspark.config import settings
from fundspark.core.errors import Unauthorized
from fundspark.core.logging import get_logger

logger = get_logger("security")


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass
class TokenClaims:
    """Identity carried inside a token."""

    id: int
    email: str
    role: str
    token_type: TokenType = TokenType.ACCESS


class TokenService:
    """Signs and verifies identity tokens.

    The signing secret and algorithm come from settings; callers treat the
    token itself as opaque.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        access_token_expiry: Optional[timedelta] = None,
        refresh_token_expiry: Optional[timedelta] = None,
    ):
        self.secret_key = secret_key or settings.jwt_secret
        self.algorithm = algorithm or settings.jwt_algorithm
        self.access_token_expiry = access_token_expiry or timedelta(
            days=settings.access_token_days
        )
        self.refresh_token_expiry = refresh_token_expiry or timedelta(
            days=settings.refresh_token_days
        )

    def _encode(self, claims: TokenClaims, lifetime: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "id": claims.id,
            "email": claims.email,
            "role": claims.role,
            "type": claims.token_type.value,
            "iat": int(now.timestamp()),
            "exp": int((now + lifetime).timestamp()),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def create_access_token(self, user_id: int, email: str, role: str) -> str:
        claims = TokenClaims(id=user_id, email=email, role=role)
        return self._encode(claims, self.access_token_expiry)

    def create_refresh_token(self, user_id: int, email: str, role: str) -> str:
        claims = TokenClaims(
            id=user_id, email=email, role=role, token_type=TokenType.REFRESH
        )
        return self._encode(claims, self.refresh_token_expiry)

    def create_token_pair(self, user_id: int, email: str, role: str) -> dict:
        return {
            "token": self.create_access_token(user_id, email, role),
            "refreshToken": self.create_refresh_token(user_id, email, role),
        }

    def verify_token(
        self, token: str, expected_type: TokenType = TokenType.ACCESS
    ) -> TokenClaims:
        """Decode a token, checking signature, expiry and token type.

        Raises:
            Unauthorized: for any token that fails verification.
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise Unauthorized("Token has expired.")
        except jwt.InvalidTokenError:
            raise Unauthorized("Token is not valid.")

        if payload.get("type") != expected_type.value:
            raise Unauthorized("Token is not valid.")
        try:
            return TokenClaims(
                id=int(payload["id"]),
                email=payload["email"],
                role=payload["role"],
                token_type=expected_type,
            )
        except (KeyError, TypeError, ValueError):
            raise Unauthorized("Token is not valid.")


token_service = TokenService()


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError as e:
        logger.error(f"Password verification failed: {e}")
        return False
