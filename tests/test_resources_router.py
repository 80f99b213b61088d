"""Tests for the study resource endpoints."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from study_assistant.auth import CurrentUser, get_current_user
from study_assistant.exceptions import DocumentUnreadableError
from study_assistant.main import app
from study_assistant.models.analysis import AnalysisResult, Subject
from study_assistant.models.resources import Resource, UserProfile
from study_assistant.services.analyzer import AnalysisOutcome

RESOURCE_ID = "3f0c6f1e-8a57-4c1e-9a38-2f4d7b6c1a90"
MODULE = "study_assistant.routers.resources"
PDF_FILE = ("Lecture 1.pdf", b"%PDF-1.4 content", "application/pdf")


def _resource(**overrides) -> Resource:
    data = {
        "id": RESOURCE_ID,
        "title": "Lecture 1.pdf",
        "file_name": "Lecture 1.pdf",
        "file_url": "gs://bucket/resources/user-1/1_Lecture_1.pdf",
        "user_id": "user-1",
        "subject": "Physics",
        "topics": ["Optics"],
    }
    data.update(overrides)
    return Resource.model_validate(data)


@pytest.fixture
def client():
    app.dependency_overrides[get_current_user] = lambda: CurrentUser(id="user-1", name="Ada")
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def mocks():
    """Patch every collaborator the router talks to."""
    patches = {
        "validate_pdf": patch(f"{MODULE}.validate_pdf", new_callable=AsyncMock),
        "get_profile": patch(f"{MODULE}.get_profile", new_callable=AsyncMock),
        "analyze_pdf": patch(f"{MODULE}.analyze_pdf", new_callable=AsyncMock),
        "create_resource": patch(f"{MODULE}.create_resource", new_callable=AsyncMock),
        "get_resource": patch(f"{MODULE}.get_resource", new_callable=AsyncMock),
        "list_resources": patch(f"{MODULE}.list_resources", new_callable=AsyncMock),
        "delete_resource": patch(f"{MODULE}.delete_resource", new_callable=AsyncMock),
        "upload_bytes": patch(f"{MODULE}.upload_bytes"),
        "delete_blob": patch(f"{MODULE}.delete_blob"),
        "get_gemini_client": patch(f"{MODULE}.get_gemini_client"),
        "get_supabase_client": patch(f"{MODULE}.get_supabase_client"),
    }
    started = {name: p.start() for name, p in patches.items()}
    started["validate_pdf"].return_value = (PDF_FILE[1], "hash123", "Lecture_1.pdf")
    started["get_profile"].return_value = UserProfile(user_id="user-1", university="UCT")
    started["analyze_pdf"].return_value = AnalysisOutcome(
        result=AnalysisResult(subject=Subject.PHYSICS, topics=["Optics"]),
        excerpt="--- Page 1 --- Optics",
    )
    started["upload_bytes"].return_value = "gs://bucket/resources/user-1/1_Lecture_1.pdf"
    started["create_resource"].return_value = _resource()
    yield SimpleNamespace(**started)
    patch.stopall()


class TestUploadResource:
    def test_upload_success(self, client, mocks):
        response = client.post("/api/resources", files={"file": PDF_FILE})

        assert response.status_code == 201
        assert response.headers["X-Analysis-Status"] == "ok"
        assert response.json()["id"] == RESOURCE_ID
        assert response.json()["subject"] == "Physics"

        profile = mocks.analyze_pdf.call_args.args[2]
        assert profile.university == "UCT"

        storage_path = mocks.upload_bytes.call_args.args[0]
        assert storage_path.startswith("resources/user-1/")
        assert storage_path.endswith("_Lecture_1.pdf")

        analysis, file_info = mocks.create_resource.call_args.args[1:]
        assert analysis.subject == Subject.PHYSICS
        assert file_info["title"] == "Lecture 1.pdf"
        assert file_info["file_name"] == "Lecture 1.pdf"
        assert file_info["user_id"] == "user-1"
        assert file_info["user_name"] == "Ada"
        assert file_info["file_hash"] == "hash123"
        assert file_info["analysis_error"] is None

    def test_upload_custom_title(self, client, mocks):
        client.post("/api/resources", files={"file": PDF_FILE}, data={"title": "  Optics notes "})

        file_info = mocks.create_resource.call_args.args[2]
        assert file_info["title"] == "Optics notes"

    def test_upload_fallback_analysis_still_stored(self, client, mocks):
        mocks.analyze_pdf.return_value = AnalysisOutcome(error="Gemini API failed: boom")

        response = client.post("/api/resources", files={"file": PDF_FILE})

        assert response.status_code == 201
        assert response.headers["X-Analysis-Status"] == "fallback"
        analysis, file_info = mocks.create_resource.call_args.args[1:]
        assert analysis == AnalysisResult()
        assert file_info["analysis_error"] == "Gemini API failed: boom"

    def test_upload_rate_limited_analysis(self, client, mocks):
        mocks.analyze_pdf.return_value = AnalysisOutcome(error="Rate limit exceeded", rate_limited=True)

        response = client.post("/api/resources", files={"file": PDF_FILE})

        assert response.status_code == 201
        assert response.headers["X-Analysis-Status"] == "rate_limited"

    def test_upload_without_profile(self, client, mocks):
        mocks.get_profile.side_effect = RuntimeError("Failed to retrieve profile: timeout")

        response = client.post("/api/resources", files={"file": PDF_FILE})

        assert response.status_code == 201
        assert mocks.analyze_pdf.call_args.args[2] is None

    def test_upload_invalid_file(self, client, mocks):
        mocks.validate_pdf.side_effect = HTTPException(status_code=400, detail="Only PDF files are allowed (got text/plain)")

        response = client.post("/api/resources", files={"file": ("a.txt", b"hello", "text/plain")})

        assert response.status_code == 400
        mocks.analyze_pdf.assert_not_called()
        mocks.upload_bytes.assert_not_called()

    def test_upload_unreadable_pdf(self, client, mocks):
        mocks.analyze_pdf.side_effect = DocumentUnreadableError("Failed to parse PDF content")

        response = client.post("/api/resources", files={"file": PDF_FILE})

        assert response.status_code == 422
        assert response.json()["detail"] == "Failed to parse PDF content"
        mocks.upload_bytes.assert_not_called()

    def test_upload_storage_failure(self, client, mocks):
        mocks.upload_bytes.side_effect = Exception("bucket unreachable")

        response = client.post("/api/resources", files={"file": PDF_FILE})

        assert response.status_code == 500
        assert "Upload failed" in response.json()["detail"]
        mocks.create_resource.assert_not_called()

    def test_upload_db_failure_removes_blob(self, client, mocks):
        mocks.create_resource.side_effect = RuntimeError("Failed to insert resource: db down")

        response = client.post("/api/resources", files={"file": PDF_FILE})

        assert response.status_code == 500
        mocks.delete_blob.assert_called_once_with("gs://bucket/resources/user-1/1_Lecture_1.pdf")

    def test_upload_db_failure_keeps_error_when_cleanup_fails(self, client, mocks):
        mocks.create_resource.side_effect = RuntimeError("Failed to insert resource: db down")
        mocks.delete_blob.side_effect = Exception("bucket unreachable")

        response = client.post("/api/resources", files={"file": PDF_FILE})

        assert response.status_code == 500
        assert response.json()["detail"] == "Upload failed: Failed to insert resource: db down"

    def test_upload_requires_auth(self, mocks):
        response = TestClient(app).post("/api/resources", files={"file": PDF_FILE})

        assert response.status_code == 401
        mocks.validate_pdf.assert_not_called()


class TestListResources:
    def test_list(self, client, mocks):
        mocks.list_resources.return_value = [_resource(), _resource(id="other", title="Week 2")]

        response = client.get("/api/resources")

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [RESOURCE_ID, "other"]
        assert mocks.list_resources.call_args.args[1] == "user-1"

    def test_search(self, client, mocks):
        mocks.list_resources.return_value = [
            _resource(),
            _resource(id="bio", title="Cells", subject="Biology", topics=["Mitosis"]),
        ]

        response = client.get("/api/resources", params={"q": "mitosis"})

        assert [r["id"] for r in response.json()] == ["bio"]

    def test_list_failure(self, client, mocks):
        mocks.list_resources.side_effect = RuntimeError("Failed to list resources: boom")

        assert client.get("/api/resources").status_code == 500


class TestGetResource:
    def test_found(self, client, mocks):
        mocks.get_resource.return_value = _resource()

        response = client.get(f"/api/resources/{RESOURCE_ID}")

        assert response.status_code == 200
        assert response.json()["title"] == "Lecture 1.pdf"
        assert mocks.get_resource.call_args.args[1:] == (RESOURCE_ID, "user-1")

    def test_not_owned_or_missing(self, client, mocks):
        mocks.get_resource.return_value = None

        assert client.get(f"/api/resources/{RESOURCE_ID}").status_code == 404

    def test_invalid_id(self, client, mocks):
        mocks.get_resource.side_effect = ValueError("Invalid UUID format: nope")

        assert client.get("/api/resources/nope").status_code == 404


class TestDeleteResource:
    def test_delete(self, client, mocks):
        mocks.get_resource.return_value = _resource()
        mocks.delete_resource.return_value = True

        response = client.delete(f"/api/resources/{RESOURCE_ID}")

        assert response.status_code == 204
        mocks.delete_resource.assert_awaited_once()
        mocks.delete_blob.assert_called_once_with("gs://bucket/resources/user-1/1_Lecture_1.pdf")

    def test_delete_missing(self, client, mocks):
        mocks.get_resource.return_value = None

        response = client.delete(f"/api/resources/{RESOURCE_ID}")

        assert response.status_code == 404
        mocks.delete_resource.assert_not_called()
        mocks.delete_blob.assert_not_called()

    def test_delete_storage_error(self, client, mocks):
        mocks.get_resource.return_value = _resource()
        mocks.delete_blob.side_effect = Exception("permission denied")

        response = client.delete(f"/api/resources/{RESOURCE_ID}")

        assert response.status_code == 500
        assert "Error removing file" in response.json()["detail"]
