"""
Opaque access tokens stored in Redis.
The token string is a random key; its binding to a file and a user lives
in Redis under a key that expires together with the token.
"""

import secrets
import json
from datetime import datetime, timedelta, timezone
from typing import Optional
import redis.asyncio as redis
import logging

from ..domain.services import TokenService
from ..domain.models import WOPIToken

logger = logging.getLogger(__name__)


class RedisTokenManager(TokenService):
    """Redis-based implementation of TokenService."""

    token_prefix = "wopi:token:"

    def __init__(
        self,
        redis_url: str,
        token_ttl_hours: int = 24,
        pool_size: int = 10,
        client: Optional[redis.Redis] = None
    ):
        self.redis_url = redis_url
        self.token_ttl_hours = token_ttl_hours
        self.pool = None
        if client is None:
            self.pool = redis.ConnectionPool.from_url(
                redis_url,
                max_connections=pool_size,
                decode_responses=True
            )
            client = redis.Redis.from_pool(self.pool)
        self.redis_client = client

    def _key(self, access_token: str) -> str:
        return f"{self.token_prefix}{access_token}"

    async def generate_token(
        self, file_id: str, user_id: str, user_name: Optional[str] = None
    ) -> WOPIToken:
        """Store a new opaque token bound to a file and a user."""
        access_token = secrets.token_urlsafe(32)
        now = datetime.now(timezone.utc)
        expires_at = now + timedelta(hours=self.token_ttl_hours)

        token_data = {
            "file_id": file_id,
            "user_id": user_id,
            "user_name": user_name,
            "expires_at": expires_at.isoformat(),
            "created_at": now.isoformat()
        }
        await self.redis_client.setex(
            self._key(access_token),
            self.token_ttl_hours * 3600,
            json.dumps(token_data)
        )

        logger.info(f"Generated token for file {file_id}, user {user_id}")
        return WOPIToken(
            access_token=access_token,
            file_id=file_id,
            user_id=user_id,
            user_name=user_name,
            expires_at=expires_at,
            created_at=now
        )

    async def validate_token(self, access_token: str) -> Optional[WOPIToken]:
        """Validate token and return token info if valid."""
        token_data_str = await self.redis_client.get(self._key(access_token))
        if not token_data_str:
            logger.warning("Token not found")
            return None

        try:
            token_data = json.loads(token_data_str)
            token = WOPIToken(
                access_token=access_token,
                file_id=token_data["file_id"],
                user_id=token_data["user_id"],
                user_name=token_data.get("user_name"),
                expires_at=datetime.fromisoformat(token_data["expires_at"]),
                created_at=datetime.fromisoformat(token_data["created_at"])
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Malformed token record: {str(e)}")
            return None

        if token.is_expired:
            logger.warning("Token expired")
            await self.redis_client.delete(self._key(access_token))
            return None

        return token

    async def close(self):
        """Close Redis connection."""
        await self.redis_client.aclose()
        if self.pool is not None:
            await self.pool.disconnect()
