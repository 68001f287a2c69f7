"""
Shared fixtures for WOPI host tests
"""
import asyncio
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from wopi_host.contexts.wopi.infrastructure.config import WOPISettings
from wopi_host.contexts.wopi.infrastructure.dependencies import (
    get_current_repository,
    get_current_token_service,
    get_wopi_settings,
)
from wopi_host.contexts.wopi.infrastructure.memory_repository import InMemoryRepository
from wopi_host.contexts.wopi.infrastructure.memory_token_service import InMemoryTokenService
from wopi_host.main import create_app

MODIFIED = datetime(2016, 11, 29, 10, 15, 30, 123456, tzinfo=timezone.utc)
CONTENT = b"PK\x03\x04 fake docx payload"


@pytest.fixture
def repository():
    repo = InMemoryRepository()
    repo.add_file("doc-1", "report.docx", CONTENT, creator="alice", modified=MODIFIED)
    repo.add_file(
        "doc-2", "budget.xlsx", b"x" * 2048, creator="bob",
        modified=MODIFIED, version_label="2.3",
    )
    return repo


@pytest.fixture
def token_service():
    return InMemoryTokenService()


@pytest.fixture
def wopi_settings():
    return WOPISettings(post_message_origin="https://ecm.example.com")


@pytest.fixture
def issue_token(token_service):
    """Issue a token for a file outside of any running event loop."""
    def _issue(file_id="doc-1", user_id="carol", user_name="Carol Jensen", **kwargs):
        token = asyncio.run(token_service.generate_token(file_id, user_id, user_name, **kwargs))
        return token.access_token
    return _issue


@pytest.fixture
def client(repository, token_service, wopi_settings):
    app = create_app()

    async def _token_service():
        return token_service

    async def _repository():
        return repository

    async def _settings():
        return wopi_settings

    app.dependency_overrides[get_current_token_service] = _token_service
    app.dependency_overrides[get_current_repository] = _repository
    app.dependency_overrides[get_wopi_settings] = _settings
    return TestClient(app)
