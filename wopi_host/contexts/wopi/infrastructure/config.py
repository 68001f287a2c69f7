"""
WOPI context configuration.
"""

import os
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.models import FilePolicy


class WOPISettings(BaseSettings):
    """WOPI service configuration."""

    model_config = SettingsConfigDict(env_prefix="WOPI_", env_file=".env", extra="ignore")

    # Environment
    environment: str = "development"
    service_name: str = "wopi-host"
    version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 8000

    # Token settings
    token_backend: str = "memory"  # memory | jwt | redis
    jwt_secret_key: Optional[str] = None
    jwt_algorithm: str = "HS256"
    token_ttl_hours: int = 24

    # Redis settings
    redis_url: str = "redis://localhost:6379"
    redis_pool_size: int = 20

    # Repository settings
    repository_backend: str = "memory"  # memory | remote
    repository_api_url: str = "http://localhost:8080"
    repository_api_key: str = "development-key"
    repository_timeout_seconds: float = 10.0

    # WOPI protocol settings
    post_message_origin: Optional[str] = None
    differentiated_errors: bool = False
    include_sha256: bool = False

    # File policy
    user_can_write: bool = True
    disable_copy: bool = False
    disable_print: bool = False
    disable_export: bool = False
    hide_export_option: bool = False
    hide_save_option: bool = False
    hide_print_option: bool = False
    enable_owner_termination: bool = False

    # Logging settings
    log_level: str = "INFO"
    json_logs: bool = True

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        # Use SECRET_KEY if JWT secret not provided
        if not self.jwt_secret_key:
            self.jwt_secret_key = os.getenv("SECRET_KEY", "development-secret-key")

    @property
    def file_policy(self) -> FilePolicy:
        return FilePolicy(
            user_can_write=self.user_can_write,
            disable_copy=self.disable_copy,
            disable_print=self.disable_print,
            disable_export=self.disable_export,
            hide_export_option=self.hide_export_option,
            hide_save_option=self.hide_save_option,
            hide_print_option=self.hide_print_option,
            enable_owner_termination=self.enable_owner_termination,
        )


# Global settings instance
settings = WOPISettings()
