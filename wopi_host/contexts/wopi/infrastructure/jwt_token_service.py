"""
JWT-based access token validation.
"""

import jwt
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from ..domain.services import TokenService
from ..domain.models import WOPIToken

logger = logging.getLogger(__name__)


class JWTTokenService(TokenService):
    """JWT-based implementation of TokenService."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        token_ttl_hours: int = 24
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.token_ttl_hours = token_ttl_hours

    async def generate_token(
        self,
        file_id: str,
        user_id: str,
        user_name: Optional[str] = None,
        ttl: Optional[timedelta] = None
    ) -> WOPIToken:
        """
        Sign an access token bound to a file and a user. Issuing tokens is
        the job of the editing front end; this exists for local setups and
        tests.
        """
        now = datetime.now(timezone.utc).replace(microsecond=0)
        expires_at = now + (ttl if ttl is not None else timedelta(hours=self.token_ttl_hours))

        payload = {
            "jti": secrets.token_urlsafe(16),
            "sub": user_id,
            "file_id": file_id,
            "user_name": user_name,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "type": "access"
        }
        access_token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

        logger.info(f"Generated JWT token for user {user_id}, file {file_id}")
        return WOPIToken(
            access_token=access_token,
            file_id=file_id,
            user_id=user_id,
            user_name=user_name,
            created_at=now,
            expires_at=expires_at
        )

    async def validate_token(self, access_token: str) -> Optional[WOPIToken]:
        """Validate JWT access token."""
        try:
            payload = jwt.decode(
                access_token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]}
            )
        except jwt.ExpiredSignatureError:
            logger.warning("Token has expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid token: {str(e)}")
            return None

        if payload.get("type") != "access":
            logger.warning("Invalid token type")
            return None
        if not payload.get("file_id"):
            logger.warning("Token is not bound to a file")
            return None

        return WOPIToken(
            access_token=access_token,
            file_id=str(payload["file_id"]),
            user_id=str(payload["sub"]),
            user_name=payload.get("user_name"),
            created_at=datetime.fromtimestamp(payload.get("iat", 0), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        )
