"""
Remote content repository adapter.
Reads file metadata and version state from the repository's internal REST API.

Endpoints used, relative to the configured base URL:

    GET  /api/v1/files/{file_id}             file metadata
    GET  /api/v1/files/{file_id}/versioning  {"versioned": bool, "version_label": str | null}
    POST /api/v1/files/{file_id}/versioning  enable version tracking (idempotent)
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

import httpx

from ..domain.exceptions import NotFoundError
from ..domain.models import FileMetadata
from ..domain.services import FileMetadataStore, VersionStore

logger = logging.getLogger(__name__)


def parse_modified(value: Union[str, int, float]) -> datetime:
    """Parse an ISO-8601 string or epoch milliseconds into an aware datetime."""
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class RepositoryApiAdapter(FileMetadataStore, VersionStore):
    """Adapter to access file metadata from the content repository API."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.api_url,
            headers={
                "X-Internal-Api-Key": api_key,
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def _file_path(self, file_id: str, suffix: str = "") -> str:
        # Ids are opaque: escape every reserved character and dot-only segments
        segment = quote(file_id, safe="")
        if segment in (".", ".."):
            segment = segment.replace(".", "%2E")
        return f"/api/v1/files/{segment}{suffix}"

    async def _get_json(self, path: str, file_id: str) -> Dict[str, Any]:
        response = await self.client.get(path)
        if response.status_code == 404:
            raise NotFoundError(file_id)
        response.raise_for_status()
        return response.json()

    async def get_metadata(self, file_id: str) -> Optional[FileMetadata]:
        """Get file metadata from the repository."""
        try:
            data = await self._get_json(self._file_path(file_id), file_id)
        except NotFoundError:
            logger.warning(f"File not found in repository: {file_id}")
            return None

        return FileMetadata(
            file_id=file_id,
            name=data["name"],
            size=int(data["size"]),
            content_url=data.get("content_url", ""),
            creator=str(data["creator"]),
            modified=parse_modified(data["modified"]),
            version_label=data.get("version_label"),
        )

    async def is_versioned(self, file_id: str) -> bool:
        data = await self._get_json(self._file_path(file_id, "/versioning"), file_id)
        return bool(data.get("versioned"))

    async def ensure_versioning_enabled(self, file_id: str) -> None:
        response = await self.client.post(self._file_path(file_id, "/versioning"))
        if response.status_code == 404:
            raise NotFoundError(file_id)
        response.raise_for_status()
        logger.info(f"Requested version tracking for file {file_id}")

    async def get_version_label(self, file_id: str) -> Optional[str]:
        data = await self._get_json(self._file_path(file_id, "/versioning"), file_id)
        return data.get("version_label")

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()
