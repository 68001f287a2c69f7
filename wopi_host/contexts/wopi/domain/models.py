"""
WOPI domain models.
Each model has a single responsibility.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
import posixpath


@dataclass
class FileMetadata:
    """Read-only view of a repository file at request time."""
    file_id: str
    name: str
    size: int
    content_url: str
    creator: str
    modified: datetime
    version_label: Optional[str] = None

    @property
    def extension(self) -> str:
        """Get file extension including the dot, or an empty string."""
        return posixpath.splitext(self.name)[1]


@dataclass
class WOPIToken:
    """Represents a validated access token for WOPI."""
    access_token: str
    file_id: str
    user_id: str
    expires_at: datetime
    created_at: datetime
    user_name: Optional[str] = None

    @property
    def is_expired(self) -> bool:
        """Check if token is expired."""
        return datetime.now(timezone.utc) > self.expires_at

    def grants_access_to(self, file_id: str) -> bool:
        """Check whether the token is bound to the given file."""
        return self.file_id == "*" or self.file_id == file_id


@dataclass(frozen=True)
class RequestIdentity:
    """Authenticated user for the current request."""
    user_id: str
    friendly_name: Optional[str] = None

    @classmethod
    def from_token(cls, token: WOPIToken) -> "RequestIdentity":
        return cls(user_id=token.user_id, friendly_name=token.user_name)

    @property
    def display_name(self) -> str:
        return self.friendly_name or self.user_id


@dataclass(frozen=True)
class FilePolicy:
    """Permission and UI flags returned to the editor for every file."""
    user_can_write: bool = True
    disable_copy: bool = False
    disable_print: bool = False
    disable_export: bool = False
    hide_export_option: bool = False
    hide_save_option: bool = False
    hide_print_option: bool = False
    enable_owner_termination: bool = False


@dataclass
class CheckFileInfoResponse:
    """Response model for CheckFileInfo endpoint."""
    BaseFileName: str
    Size: int
    OwnerId: str
    UserId: str
    UserFriendlyName: str
    Version: str
    LastModifiedTime: str
    PostMessageOrigin: str
    UserCanWrite: bool
    DisableCopy: bool
    DisablePrint: bool
    DisableExport: bool
    HideExportOption: bool
    HideSaveOption: bool
    HidePrintOption: bool
    EnableOwnerTermination: bool
    SHA256: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary, excluding None values."""
        result = {}
        for key, value in self.__dict__.items():
            if value is not None:
                result[key] = value
        return result
