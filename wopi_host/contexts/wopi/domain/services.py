"""
WOPI domain services - abstract interfaces.
These define the contracts that infrastructure must implement.
"""

from abc import ABC, abstractmethod
from typing import Optional
from .models import FileMetadata, WOPIToken


class TokenService(ABC):
    """Service interface for access token validation."""

    @abstractmethod
    async def validate_token(self, access_token: str) -> Optional[WOPIToken]:
        """Validate token and return token info if valid, else None."""


class FileMetadataStore(ABC):
    """Read access to repository file metadata."""

    @abstractmethod
    async def get_metadata(self, file_id: str) -> Optional[FileMetadata]:
        """Get file metadata by ID, or None if the file does not exist."""


class VersionStore(ABC):
    """Version tracking of repository files."""

    @abstractmethod
    async def is_versioned(self, file_id: str) -> bool:
        """Check whether the file already has version history."""

    @abstractmethod
    async def ensure_versioning_enabled(self, file_id: str) -> None:
        """Enable version tracking for the file. Must be idempotent."""

    @abstractmethod
    async def get_version_label(self, file_id: str) -> Optional[str]:
        """Get the current version label of the file."""
