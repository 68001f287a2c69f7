"""
Data Transfer Objects for WOPI API.
These are separate from domain models to maintain clean architecture.
"""

from pydantic import BaseModel
from typing import Optional


class CheckFileInfoDTO(BaseModel):
    """CheckFileInfo response body."""

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


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str
