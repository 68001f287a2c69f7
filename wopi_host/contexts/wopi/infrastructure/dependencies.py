"""
Dependency injection configuration for WOPI context.
"""

import logging
from typing import Union
from fastapi import Depends

from ..domain.check_file_info import CheckFileInfoHandler
from ..domain.services import TokenService
from .config import WOPISettings, settings
from .jwt_token_service import JWTTokenService
from .memory_repository import InMemoryRepository
from .memory_token_service import InMemoryTokenService
from .repository_api_adapter import RepositoryApiAdapter
from .token_manager import RedisTokenManager

logger = logging.getLogger(__name__)

Repository = Union[InMemoryRepository, RepositoryApiAdapter]

# Singleton instances
_token_service = None
_repository = None


def get_token_service() -> TokenService:
    """Get token service based on configuration."""
    global _token_service
    if not _token_service:
        if settings.token_backend == "jwt":
            _token_service = JWTTokenService(
                secret_key=settings.jwt_secret_key,
                algorithm=settings.jwt_algorithm,
                token_ttl_hours=settings.token_ttl_hours
            )
            logger.info("Using JWT token service")
        elif settings.token_backend == "redis":
            _token_service = RedisTokenManager(
                redis_url=settings.redis_url,
                token_ttl_hours=settings.token_ttl_hours,
                pool_size=settings.redis_pool_size
            )
            logger.info("Using Redis token service")
        else:
            _token_service = InMemoryTokenService(
                token_ttl_hours=settings.token_ttl_hours,
                development_token=settings.environment == "development"
            )
            logger.info("Using in-memory token service")
    return _token_service


def get_repository() -> Repository:
    """Get content repository based on configuration."""
    global _repository
    if not _repository:
        if settings.repository_backend == "remote":
            _repository = RepositoryApiAdapter(
                api_url=settings.repository_api_url,
                api_key=settings.repository_api_key,
                timeout=settings.repository_timeout_seconds
            )
            logger.info("Using remote repository API adapter")
        else:
            _repository = InMemoryRepository()
            logger.info("Using in-memory repository")
    return _repository


# Dependency injection functions
async def get_wopi_settings() -> WOPISettings:
    """Dependency for settings."""
    return settings


async def get_current_token_service() -> TokenService:
    """Dependency for token service."""
    return get_token_service()


async def get_current_repository() -> Repository:
    """Dependency for the content repository."""
    return get_repository()


async def get_check_file_info_handler(
    token_service: TokenService = Depends(get_current_token_service),
    repository: Repository = Depends(get_current_repository),
    wopi_settings: WOPISettings = Depends(get_wopi_settings)
) -> CheckFileInfoHandler:
    """Dependency for the CheckFileInfo handler."""
    return CheckFileInfoHandler(
        token_service=token_service,
        metadata_store=repository,
        version_store=repository,
        policy=wopi_settings.file_policy,
        include_sha256=wopi_settings.include_sha256
    )


# Cleanup function for graceful shutdown
async def cleanup_services():
    """Cleanup services on shutdown."""
    global _token_service, _repository

    if isinstance(_token_service, RedisTokenManager):
        await _token_service.close()
    if isinstance(_repository, RepositoryApiAdapter):
        await _repository.close()

    _token_service = None
    _repository = None

    logger.info("Services cleaned up")
