"""
Tests for the batch tracking API endpoints.

The tracker is wired to a scripted client through a dependency override,
so these tests never call BinderByte.
"""

from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from postrack.api.dependencies import get_tracker
from postrack.api.main import app
from postrack.clients.binderbyte import LookupProtocolError
from postrack.tracker.batch import BatchTracker


@pytest.fixture
def tracker(fake_client_factory) -> BatchTracker:
    """Tracker with no inter-request delay."""
    client = fake_client_factory(outcomes={"P404": LookupProtocolError("not found")})
    return BatchTracker(client, delay_seconds=0)


@pytest.fixture
def client(tracker: BatchTracker):
    """Create a test client for the API."""
    app.dependency_overrides[get_tracker] = lambda: tracker
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _submit(client: TestClient, text: str, wait: bool = True):
    return client.post(
        "/api/v1/batch",
        params={"wait": str(wait).lower()},
        json={"text": text},
    )


class TestSystemEndpoints:
    def test_root(self, client: TestClient):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "operational"

    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "api_key_configured" in data


class TestSubmitBatch:
    """Tests for POST /api/v1/batch endpoint."""

    def test_submit_and_wait(self, client: TestClient):
        response = _submit(client, "P1, P404\nX3")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["is_tracking"] is False
        assert [r["tracking_number"] for r in data["records"]] == ["P1", "P404"]
        assert data["records"][0]["state"] == "found"
        assert data["records"][1]["state"] == "error"
        assert data["records"][1]["error"] == "not found"
        assert data["records"][1]["data"] is None
        assert data["summary"]["successful"] == 1
        assert data["summary"]["failed"] == 1

    def test_submit_without_wait(self, client: TestClient):
        response = _submit(client, "P1\nP2", wait=False)

        assert response.status_code == 202
        data = response.json()
        assert data["is_tracking"] is True
        assert data["status"] == "running"
        assert len(data["records"]) == 2

    def test_submit_blank_text(self, client: TestClient):
        response = _submit(client, "  ")

        assert response.status_code == 400

    def test_submit_no_valid_numbers(self, client: TestClient):
        response = _submit(client, "X1, Y2")

        assert response.status_code == 400
        assert "No valid tracking numbers" in response.json()["detail"]

    def test_submit_missing_credential(self, client: TestClient, tracker):
        tracker.client.has_credential = False

        response = _submit(client, "P1")

        assert response.status_code == 400
        assert "BINDERBYTE_API_KEY" in response.json()["detail"]
        assert tracker.client.calls == []
        assert client.get("/api/v1/batch").json()["records"] == []

    def test_submit_while_running(self, client: TestClient, tracker):
        tracker.client.latency = 0.2

        first = _submit(client, "P1, P2", wait=False)
        second = _submit(client, "P3", wait=False)

        assert first.status_code == 202
        assert second.status_code == 409

        client.delete("/api/v1/batch")

    def test_missing_text_field(self, client: TestClient):
        response = client.post("/api/v1/batch", json={})

        assert response.status_code == 422


class TestBatchState:
    def test_get_empty_batch(self, client: TestClient):
        response = client.get("/api/v1/batch")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "idle"
        assert data["batch_id"] is None
        assert data["records"] == []

    def test_clear_batch(self, client: TestClient):
        _submit(client, "P1")

        response = client.delete("/api/v1/batch")

        assert response.status_code == 200
        assert response.json()["records"] == []
        assert response.json()["status"] == "idle"

    def test_cancel_idle_batch(self, client: TestClient):
        response = client.post("/api/v1/batch/cancel")

        assert response.status_code == 200
        assert response.json()["cancelled"] is False

    def test_get_record(self, client: TestClient):
        record_id = _submit(client, "P1").json()["records"][0]["id"]

        response = client.get(f"/api/v1/batch/records/{record_id}")

        assert response.status_code == 200
        assert response.json()["tracking_number"] == "P1"
        assert response.json()["latest_history"]["location"] == "BANDUNG"

    def test_get_record_not_found(self, client: TestClient):
        response = client.get("/api/v1/batch/records/missing")

        assert response.status_code == 404
        assert "Record not found" in response.json()["detail"]


class TestRefreshRecord:
    """Tests for POST /api/v1/batch/records/{record_id}/refresh endpoint."""

    def test_refresh(self, client: TestClient, tracker):
        record_id = _submit(client, "P1, P2").json()["records"][1]["id"]

        response = client.post(f"/api/v1/batch/records/{record_id}/refresh")

        assert response.status_code == 200
        assert response.json()["state"] == "found"
        assert tracker.client.calls == ["P1", "P2", "P2"]
        assert client.get("/api/v1/batch").json()["is_tracking"] is False

    def test_refresh_not_found(self, client: TestClient):
        response = client.post("/api/v1/batch/records/missing/refresh")

        assert response.status_code == 404

    def test_refresh_missing_credential(self, client: TestClient, tracker):
        record_id = _submit(client, "P1").json()["records"][0]["id"]
        tracker.client.has_credential = False

        response = client.post(f"/api/v1/batch/records/{record_id}/refresh")

        assert response.status_code == 400


class TestExportAndCopy:
    def test_export_spreadsheet(self, client: TestClient):
        _submit(client, "P1, P404")

        response = client.get("/api/v1/batch/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        disposition = response.headers["content-disposition"]
        assert 'filename="tracking-pos-' in disposition
        assert disposition.endswith('.xlsx"')

        sheet = load_workbook(BytesIO(response.content)).active
        assert sheet.max_row == 3
        assert sheet["A3"].value == "P404"
        assert sheet["B3"].value == "ERROR"

    def test_export_empty_batch(self, client: TestClient):
        response = client.get("/api/v1/batch/export")

        assert response.status_code == 200
        sheet = load_workbook(BytesIO(response.content)).active
        assert sheet.max_row == 1

    def test_copy_all_tracking_numbers(self, client: TestClient):
        _submit(client, "P1\nP2, P1")

        response = client.get("/api/v1/batch/tracking-numbers")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "P1\nP2\nP1"

    def test_copy_one_tracking_number(self, client: TestClient):
        record_id = _submit(client, "P1, P2").json()["records"][1]["id"]

        response = client.get(f"/api/v1/batch/records/{record_id}/tracking-number")

        assert response.status_code == 200
        assert response.text == "P2"
