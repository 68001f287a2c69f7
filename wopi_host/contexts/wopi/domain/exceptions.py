"""
WOPI domain errors raised while answering CheckFileInfo.
"""

from typing import Any, Dict, Optional


class CheckFileInfoError(Exception):
    """Base error for a failed CheckFileInfo request."""

    error_code = "CHECK_FILE_INFO_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def cause_message(self) -> str:
        """Message of the error, followed by the underlying cause if any."""
        if self.__cause__ is not None:
            return f"{self.message}: {self.__cause__}"
        return self.message


class AuthError(CheckFileInfoError):
    """Access token is missing, malformed, expired or bound to another file."""

    error_code = "TOKEN_ERROR"


class NotFoundError(CheckFileInfoError):
    """File reference does not resolve."""

    error_code = "FILE_NOT_FOUND"

    def __init__(self, file_id: str):
        super().__init__(f"File not found: {file_id}", details={"file_id": file_id})
        self.file_id = file_id


class MetadataError(CheckFileInfoError):
    """Metadata store failure."""

    error_code = "METADATA_ERROR"


class VersioningError(CheckFileInfoError):
    """Version tracking could not be initialized or read."""

    error_code = "VERSIONING_ERROR"
