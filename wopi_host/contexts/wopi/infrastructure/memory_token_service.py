"""
In-memory token service for development and tests.
In production, use JWT or Redis-based tokens.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from ..domain.models import WOPIToken
from ..domain.services import TokenService

logger = logging.getLogger(__name__)

DEVELOPMENT_TOKEN = "test-token"


class InMemoryTokenService(TokenService):
    """Simple token service keeping tokens in a dict."""

    def __init__(self, token_ttl_hours: int = 24, development_token: bool = False):
        self.token_ttl_hours = token_ttl_hours
        self.tokens: Dict[str, WOPIToken] = {}
        if development_token:
            self._create_development_token()

    def _create_development_token(self):
        """Create a wildcard token valid for any file."""
        now = datetime.now(timezone.utc)
        self.tokens[DEVELOPMENT_TOKEN] = WOPIToken(
            access_token=DEVELOPMENT_TOKEN,
            file_id="*",
            user_id="test-user",
            user_name="Test User",
            created_at=now,
            expires_at=now + timedelta(hours=self.token_ttl_hours)
        )
        logger.info("Created development wildcard token")

    async def generate_token(
        self,
        file_id: str,
        user_id: str,
        user_name: Optional[str] = None,
        ttl: Optional[timedelta] = None
    ) -> WOPIToken:
        """Generate a new token."""
        now = datetime.now(timezone.utc)
        token = WOPIToken(
            access_token=secrets.token_urlsafe(24),
            file_id=file_id,
            user_id=user_id,
            user_name=user_name,
            created_at=now,
            expires_at=now + (ttl if ttl is not None else timedelta(hours=self.token_ttl_hours))
        )
        self.tokens[token.access_token] = token
        logger.info(f"Generated token for file {file_id}, user {user_id}")
        return token

    async def validate_token(self, access_token: str) -> Optional[WOPIToken]:
        """Validate token."""
        token = self.tokens.get(access_token)
        if not token:
            logger.warning("Token not found")
            return None

        if token.is_expired:
            logger.warning("Token expired")
            del self.tokens[access_token]
            return None

        return token
