"""
CheckFileInfo handler.

Resolves an access token to a file, reads the file metadata and version
label from the repository and maps them, together with the configured
file policy, onto the WOPI CheckFileInfo response.
https://learn.microsoft.com/en-us/microsoft-365/cloud-storage-partner-program/rest/files/checkfileinfo
"""

import base64
import hashlib
import logging
from datetime import datetime, timezone
from typing import Optional

from .exceptions import (
    AuthError,
    CheckFileInfoError,
    MetadataError,
    NotFoundError,
    VersioningError,
)
from .models import (
    CheckFileInfoResponse,
    FileMetadata,
    FilePolicy,
    RequestIdentity,
    WOPIToken,
)
from .services import FileMetadataStore, TokenService, VersionStore

logger = logging.getLogger(__name__)


def format_last_modified(value: datetime) -> str:
    """
    Format a timestamp as ISO-8601 in UTC with millisecond precision,
    e.g. ``2016-11-29T10:15:30.123Z``. Naive values are taken as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return f"{value.strftime('%Y-%m-%dT%H:%M:%S')}.{value.microsecond // 1000:03d}Z"


def content_sha256(content_url: str) -> str:
    """Base64 encoded SHA-256 digest of a content locator."""
    digest = hashlib.sha256(content_url.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


class CheckFileInfoHandler:
    """Stateless CheckFileInfo request/response transform."""

    def __init__(
        self,
        token_service: TokenService,
        metadata_store: FileMetadataStore,
        version_store: VersionStore,
        policy: Optional[FilePolicy] = None,
        include_sha256: bool = False,
    ):
        self.token_service = token_service
        self.metadata_store = metadata_store
        self.version_store = version_store
        self.policy = policy or FilePolicy()
        self.include_sha256 = include_sha256

    async def handle(
        self, file_id: str, access_token: Optional[str], post_message_origin: str
    ) -> CheckFileInfoResponse:
        """Authenticate the request, then build the response for the file."""
        identity = await self.authenticate(file_id, access_token)
        return await self.check_file_info(file_id, identity, post_message_origin)

    async def authenticate(
        self, file_id: str, access_token: Optional[str]
    ) -> RequestIdentity:
        """Resolve the access token to the identity of the requesting user."""
        token = await self._validate_token(access_token)
        if token.is_expired:
            raise AuthError("Expired access token")
        if not token.grants_access_to(file_id):
            raise AuthError(
                f"Access token is not valid for file {file_id}",
                details={"file_id": file_id},
            )
        return RequestIdentity.from_token(token)

    async def check_file_info(
        self, file_id: str, identity: RequestIdentity, post_message_origin: str
    ) -> CheckFileInfoResponse:
        """Build the CheckFileInfo response for an authenticated user."""
        metadata = await self._get_metadata(file_id)
        version = await self._get_document_version(metadata)

        # The editor opens files without an extension read-only
        if not metadata.extension:
            logger.warning(f"File {file_id} name has no extension: {metadata.name!r}")

        policy = self.policy
        response = CheckFileInfoResponse(
            BaseFileName=metadata.name,
            Size=int(metadata.size),
            OwnerId=str(metadata.creator),
            UserId=identity.user_id,
            UserFriendlyName=identity.display_name,
            Version=version,
            LastModifiedTime=format_last_modified(metadata.modified),
            PostMessageOrigin=post_message_origin,
            UserCanWrite=policy.user_can_write,
            DisableCopy=policy.disable_copy,
            DisablePrint=policy.disable_print,
            DisableExport=policy.disable_export,
            HideExportOption=policy.hide_export_option,
            HideSaveOption=policy.hide_save_option,
            HidePrintOption=policy.hide_print_option,
            EnableOwnerTermination=policy.enable_owner_termination,
        )
        if self.include_sha256:
            response.SHA256 = content_sha256(metadata.content_url)
        return response

    async def _validate_token(self, access_token: Optional[str]) -> WOPIToken:
        if not access_token or not access_token.strip():
            raise AuthError("Missing access token")
        try:
            token = await self.token_service.validate_token(access_token)
        except Exception as e:
            raise AuthError("Access token validation failed") from e
        if not token:
            raise AuthError("Invalid or expired access token")
        return token

    async def _get_metadata(self, file_id: str) -> FileMetadata:
        try:
            metadata = await self.metadata_store.get_metadata(file_id)
        except CheckFileInfoError:
            raise
        except Exception as e:
            raise MetadataError(
                f"Unable to read metadata for file {file_id}",
                details={"file_id": file_id},
            ) from e
        if metadata is None:
            raise NotFoundError(file_id)
        return metadata

    async def _get_document_version(self, metadata: FileMetadata) -> str:
        """
        Get the current version label of the file. A label already carried
        by the metadata is used as is. Otherwise files that were never
        versioned get version tracking enabled first, then the label is
        read from the version store, so it is never empty for a stored
        document.
        """
        if metadata.version_label:
            return str(metadata.version_label)

        file_id = metadata.file_id
        try:
            if not await self.version_store.is_versioned(file_id):
                await self.version_store.ensure_versioning_enabled(file_id)
                logger.info(f"Enabled version tracking for file {file_id}")
            label = await self.version_store.get_version_label(file_id)
        except CheckFileInfoError:
            raise
        except Exception as e:
            raise VersioningError(
                f"Unable to determine version of file {file_id}",
                details={"file_id": file_id},
            ) from e
        if not label:
            raise VersioningError(
                f"File {file_id} has no version label", details={"file_id": file_id}
            )
        return str(label)
