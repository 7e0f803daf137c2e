"""Tests for web application functionality."""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from apps.web.main import app


class TestWebApp:
    """Test web application endpoints."""

    def setup_method(self):
        """Setup test fixtures."""
        self.client = TestClient(app)

    def test_home_page(self):
        """Should serve the main HTML page."""
        response = self.client.get("/")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "DepGuard" in response.text

    def test_check_reports_version_conflict(self, conflicting_package_json):
        response = self.client.post("/api/check", json={"content": conflicting_package_json})

        assert response.status_code == 200
        data = response.json()
        assert data["has_conflict"] is True
        assert data["package_count"] == 1
        assert data["conflict"] == {
            "kind": "version_conflict",
            "title": "Version Conflict",
            "problems": ["left-pad has multiple versions: dependencies: 1.0.0, devDependencies: 2.0.0"],
            "source_file": "package.json",
        }

    def test_check_clean_manifest(self, sample_package_json):
        response = self.client.post("/api/check", json={"content": sample_package_json})

        assert response.status_code == 200
        data = response.json()
        assert data["has_conflict"] is False
        assert data["conflict"] is None
        assert data["package_count"] == 2

    def test_check_empty_content(self):
        """Should handle empty content gracefully."""
        response = self.client.post("/api/check", json={"content": "   "})

        assert response.status_code == 400
        assert "No content provided" in response.json()["detail"]

    def test_check_invalid_json(self):
        response = self.client.post("/api/check", json={"content": "{not json"})

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid package.json")

    def test_upload_file_success(self, conflicting_package_json):
        """Should successfully check an uploaded file."""
        files = {"file": ("package.json", conflicting_package_json, "application/json")}

        response = self.client.post("/api/upload", files=files)

        assert response.status_code == 200
        data = response.json()
        assert data["has_conflict"] is True
        assert data["conflict"]["source_file"] == "package.json"

    def test_upload_file_no_file(self):
        """Should handle missing file upload."""
        response = self.client.post("/api/upload", files={})

        assert response.status_code == 422  # FastAPI validation error

    def test_upload_file_invalid_encoding(self):
        """Should handle files with invalid UTF-8 encoding."""
        files = {"file": ("package.json", b'\x80\x81\x82', "application/json")}

        response = self.client.post("/api/upload", files=files)

        assert response.status_code == 400
        assert "valid UTF-8" in response.json()["detail"]

    def test_advise_static_fallback(self):
        with patch('apps.web.main.create_llm_client', return_value=None):
            response = self.client.post("/api/advise", json={
                "kind": "duplicate_packages",
                "problems": ["lodash@4.17.21"],
                "manager": "yarn",
            })

        assert response.status_code == 200
        data = response.json()
        assert data["analysis"] is None
        assert any("`yarn deduplicate`" in line for line in data["advice"])

    def test_advise_with_ai(self):
        client = AsyncMock()
        client.generate.return_value = "React versions disagree.\n1. Upgrade react\n2. Reinstall"

        with patch('apps.web.main.create_llm_client', return_value=client):
            response = self.client.post("/api/advise", json={
                "kind": "peer_dependency_conflict",
                "problems": ["peer dep missing: react@^18"],
            })

        assert response.status_code == 200
        data = response.json()
        assert data["analysis"] == {
            "explanation": "React versions disagree.",
            "steps": ["Upgrade react", "Reinstall"],
        }
        assert data["advice"] == []

    def test_advise_without_ai_skips_client(self):
        with patch('apps.web.main.create_llm_client') as mock_create_client:
            response = self.client.post("/api/advise", json={
                "kind": "version_conflict",
                "problems": ["left-pad has multiple versions"],
                "use_ai": False,
            })

        assert response.status_code == 200
        mock_create_client.assert_not_called()
        assert "Align the versions to avoid potential runtime issues." in response.json()["advice"]

    def test_advise_unknown_kind(self):
        response = self.client.post("/api/advise", json={"kind": "mystery", "problems": ["x"]})

        assert response.status_code == 400
        assert response.json()["detail"] == "Unknown conflict kind: mystery"

    def test_advise_no_problems(self):
        response = self.client.post("/api/advise", json={"kind": "version_conflict", "problems": []})

        assert response.status_code == 400
        assert "No problems provided" in response.json()["detail"]
