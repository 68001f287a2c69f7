"""
In-memory content repository for development and tests.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Dict, Optional

from ..domain.exceptions import NotFoundError
from ..domain.models import FileMetadata
from ..domain.services import FileMetadataStore, VersionStore

logger = logging.getLogger(__name__)

INITIAL_VERSION_LABEL = "1.0"


@dataclass
class StoredFile:
    metadata: FileMetadata
    content: bytes = b""
    versioned: bool = False


class InMemoryRepository(FileMetadataStore, VersionStore):
    """Keeps files, their metadata and version state in a dict."""

    def __init__(self):
        self.files: Dict[str, StoredFile] = {}
        self.versioning_initializations = 0
        self._versioning_lock = asyncio.Lock()

    def add_file(
        self,
        file_id: str,
        name: str,
        content: bytes,
        creator: str,
        modified: Optional[datetime] = None,
        version_label: Optional[str] = None,
    ) -> FileMetadata:
        """Store a file. Passing a version label marks it as already versioned."""
        metadata = FileMetadata(
            file_id=file_id,
            name=name,
            size=len(content),
            content_url=f"store://{file_id}",
            creator=creator,
            modified=modified or datetime.now(timezone.utc),
            version_label=version_label,
        )
        self.files[file_id] = StoredFile(
            metadata=metadata, content=content, versioned=version_label is not None
        )
        return metadata

    def _get(self, file_id: str) -> StoredFile:
        stored = self.files.get(file_id)
        if stored is None:
            raise NotFoundError(file_id)
        return stored

    async def get_metadata(self, file_id: str) -> Optional[FileMetadata]:
        stored = self.files.get(file_id)
        if stored is None:
            return None
        return replace(stored.metadata)

    async def is_versioned(self, file_id: str) -> bool:
        return self._get(file_id).versioned

    async def ensure_versioning_enabled(self, file_id: str) -> None:
        async with self._versioning_lock:
            stored = self._get(file_id)
            if stored.versioned:
                return
            stored.versioned = True
            stored.metadata.version_label = INITIAL_VERSION_LABEL
            self.versioning_initializations += 1
            logger.info(f"Initialized version history of file {file_id}")

    async def get_version_label(self, file_id: str) -> Optional[str]:
        return self._get(file_id).metadata.version_label
