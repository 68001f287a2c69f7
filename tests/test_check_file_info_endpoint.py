"""
Test the CheckFileInfo endpoint
"""
import logging
import uuid
from datetime import timedelta

import pytest

from wopi_host.contexts.wopi.infrastructure.structured_logger import wopi_logger

from conftest import CONTENT

WOPI_KEYS = {
    "BaseFileName", "Size", "OwnerId", "UserId", "UserFriendlyName", "Version",
    "LastModifiedTime", "PostMessageOrigin", "UserCanWrite", "DisableCopy",
    "DisablePrint", "DisableExport", "HideExportOption", "HideSaveOption",
    "HidePrintOption", "EnableOwnerTermination",
}


def test_check_file_info(client, issue_token):
    """Valid token returns the full metadata document"""
    token = issue_token("doc-1")

    response = client.get(f"/wopi/files/doc-1?access_token={token}")

    assert response.status_code == 200
    data = response.json()
    assert set(data) == WOPI_KEYS
    assert data["BaseFileName"] == "report.docx"
    assert data["UserId"] == "carol"
    assert data["UserFriendlyName"] == "Carol Jensen"
    assert data["Version"] == "1.0"
    assert data["LastModifiedTime"] == "2016-11-29T10:15:30.123Z"
    assert data["PostMessageOrigin"] == "https://ecm.example.com"
    assert data["UserCanWrite"] is True
    assert data["EnableOwnerTermination"] is False


def test_token_in_authorization_header(client, issue_token):
    token = issue_token("doc-2")

    response = client.get("/wopi/files/doc-2", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["Size"] == 2048


def test_second_call_reuses_initialized_version(client, issue_token, repository):
    token = issue_token("doc-1")

    first = client.get("/wopi/files/doc-1", params={"access_token": token})
    second = client.get("/wopi/files/doc-1", params={"access_token": token})

    assert first.json()["Version"] == second.json()["Version"] == "1.0"
    assert repository.versioning_initializations == 1


def test_post_message_origin_defaults_to_request_host(client, issue_token, wopi_settings):
    wopi_settings.post_message_origin = None
    token = issue_token("doc-1")

    response = client.get("/wopi/files/doc-1", params={"access_token": token})

    assert response.json()["PostMessageOrigin"] == "http://testserver"


def test_sha256_when_enabled(client, issue_token, wopi_settings):
    wopi_settings.include_sha256 = True
    token = issue_token("doc-1")

    response = client.get("/wopi/files/doc-1", params={"access_token": token})

    assert response.status_code == 200
    assert "SHA256" in response.json()


def test_invalid_token_returns_400(client):
    """Invalid token yields a bad request and no metadata"""
    response = client.get("/wopi/files/doc-1", params={"access_token": "bogus"})

    assert response.status_code == 400
    data = response.json()
    assert data == {"detail": "error returning file info: Invalid or expired access token"}
    assert not WOPI_KEYS & set(data)


def test_missing_token_returns_400(client):
    response = client.get("/wopi/files/doc-1")

    assert response.status_code == 400
    assert "Missing access token" in response.json()["detail"]


def test_expired_token_returns_400(client, issue_token):
    token = issue_token("doc-1", ttl=timedelta(seconds=-5))

    response = client.get("/wopi/files/doc-1", params={"access_token": token})

    assert response.status_code == 400
    assert "BaseFileName" not in response.json()


def test_unknown_file_returns_400(client, issue_token):
    token = issue_token("nope")

    response = client.get("/wopi/files/nope", params={"access_token": token})

    assert response.status_code == 400
    assert response.json()["detail"] == "error returning file info: File not found: nope"


def test_differentiated_auth_error(client, wopi_settings):
    wopi_settings.differentiated_errors = True

    response = client.get("/wopi/files/doc-1", params={"access_token": "bogus"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_ERROR"


def test_differentiated_not_found(client, issue_token, wopi_settings):
    wopi_settings.differentiated_errors = True
    token = issue_token("nope")

    response = client.get("/wopi/files/nope", params={"access_token": token})

    assert response.status_code == 404
    error = response.json()["error"]
    assert error["code"] == "FILE_NOT_FOUND"
    assert error["details"] == {"file_id": "nope"}
    assert uuid.UUID(error["request_id"])


def test_differentiated_metadata_error(client, issue_token, wopi_settings, repository, monkeypatch):
    wopi_settings.differentiated_errors = True

    async def unreachable(file_id):
        raise ConnectionError("repository unreachable")

    monkeypatch.setattr(repository, "get_metadata", unreachable)
    token = issue_token("doc-1")

    response = client.get("/wopi/files/doc-1", params={"access_token": token})

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "METADATA_ERROR"
    assert error["message"] == "Unable to read metadata for file doc-1: repository unreachable"
    assert error["details"] == {"file_id": "doc-1"}
    assert "BaseFileName" not in response.json()


def test_differentiated_versioning_error(client, issue_token, wopi_settings, repository, monkeypatch):
    wopi_settings.differentiated_errors = True

    async def version_service_down(file_id):
        raise RuntimeError("version service down")

    monkeypatch.setattr(repository, "ensure_versioning_enabled", version_service_down)
    token = issue_token("doc-1")

    response = client.get("/wopi/files/doc-1", params={"access_token": token})

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "VERSIONING_ERROR"
    assert error["message"] == "Unable to determine version of file doc-1: version service down"
    assert uuid.UUID(error["request_id"])


def test_name_without_extension_is_served_unchanged(client, issue_token, repository, caplog):
    repository.add_file("doc-3", "README", CONTENT, creator="alice")
    token = issue_token("doc-3")

    with caplog.at_level(logging.WARNING, logger="wopi_host.contexts.wopi.domain.check_file_info"):
        response = client.get("/wopi/files/doc-3", params={"access_token": token})

    assert response.status_code == 200
    assert response.json()["BaseFileName"] == "README"
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert any("doc-3" in r.getMessage() and "no extension" in r.getMessage() for r in warnings)


def test_name_keeps_path_like_characters(client, issue_token, repository):
    repository.add_file("doc-5", "drafts/plan.odt", CONTENT, creator="alice")
    token = issue_token("doc-5")

    response = client.get("/wopi/files/doc-5", params={"access_token": token})

    assert response.json()["BaseFileName"] == "drafts/plan.odt"


@pytest.mark.parametrize("differentiated", [False, True])
def test_failure_is_logged_once(client, wopi_settings, monkeypatch, differentiated):
    wopi_settings.differentiated_errors = differentiated
    logged = []
    monkeypatch.setattr(wopi_logger, "log_error", lambda **kwargs: logged.append(kwargs))

    response = client.get("/wopi/files/doc-1", params={"access_token": "bogus"})

    assert response.status_code == (401 if differentiated else 400)
    assert len(logged) == 1
    assert logged[0]["error_type"] == "TOKEN_ERROR"
