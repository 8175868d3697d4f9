"""
Tests for the report HTTP endpoints
"""

import pytest
from fastapi.testclient import TestClient

from reporting.errors import GenerationTimeoutError
from utils.config import Config
from web.app import create_app, error_status, safe_filename


PROJECT = {
    "id": "PRJ-7",
    "name": "School Annex",
    "location": "Kiffa",
    "status": "in-progress",
    "budget": 1000,
}

MATERIALS = [
    {"name": "Blocks", "category": "construction", "unit": "piece",
     "quantity": 100, "price_per_unit": 6},
    {"name": "Wire", "category": "electrical", "unit": "meter",
     "quantity": 50, "price_per_unit": 12},
]


@pytest.fixture
def client():
    return TestClient(create_app(Config(locale="en-US", currency="USD")))


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestProjectReport:
    """POST /api/projects/report"""

    def test_returns_pdf_attachment(self, client):
        response = client.post("/api/projects/report",
                               json={"project": PROJECT, "materials": MATERIALS})
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == (
            "attachment; filename=project_report_PRJ-7.pdf"
        )
        assert "Content-Disposition" in response.headers["access-control-expose-headers"]
        assert response.content.startswith(b"%PDF")

    def test_empty_materials(self, client):
        response = client.post("/api/projects/report", json={"project": PROJECT})
        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")

    def test_missing_project_is_404(self, client):
        response = client.post("/api/projects/report", json={"materials": MATERIALS})
        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["retryable"] is False

    def test_invalid_material_is_422(self, client):
        bad = [{"name": "Blocks", "quantity": -1}]
        response = client.post("/api/projects/report",
                               json={"project": PROJECT, "materials": bad})
        assert response.status_code == 422


class TestMaterialsReport:
    """POST /api/projects/materials-report"""

    def test_returns_pdf(self, client):
        response = client.post("/api/projects/materials-report",
                               json={"project": PROJECT, "materials": MATERIALS})
        assert response.status_code == 200
        assert response.headers["content-disposition"].endswith("materials_list_PRJ-7.pdf")
        assert response.content.startswith(b"%PDF")


class TestStats:
    """POST /api/projects/stats"""

    def test_stats_and_budget(self, client):
        response = client.post("/api/projects/stats",
                               json={"project": PROJECT, "materials": MATERIALS})
        assert response.status_code == 200
        body = response.json()
        assert body["stats"]["total"] == 1200
        assert body["stats"]["count"] == 2
        assert body["budget"]["status"] == "over-budget"
        assert body["budget"]["difference"] == 200

    def test_no_budget(self, client):
        project = dict(PROJECT, budget=None)
        body = client.post("/api/projects/stats", json={"project": project}).json()
        assert body["budget"] is None
        assert body["stats"]["most_expensive"] is None


class TestErrorMapping:

    def test_timeout_is_503(self):
        assert error_status(GenerationTimeoutError(30)) == 503

    def test_safe_filename(self):
        assert safe_filename("PRJ/../7 x") == "PRJ_.._7_x"
        assert safe_filename("") == "project"
