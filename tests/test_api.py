"""
Tests for the HTTP routes.
"""
import pytest
from fastapi.testclient import TestClient

from app import api
from core.exceptions import ParsingError

CSV_TEXT = "date,description,amount\n2026-01-01,STARBUCKS,-190\n2026-01-03,SALARY,45000\n"


@pytest.fixture
def client():
    return TestClient(api.app)


def test_index(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "service": "SpendScope API"}


def test_health_check(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "service": "spendscope-api"}
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_analyze_inline_json(client):
    response = client.post("/api/analyze", json={"csv": CSV_TEXT})

    assert response.status_code == 200
    body = response.json()
    assert body["meta"]["rows"] == 2
    assert body["summary"]["totalIn"] == 45000.0
    assert body["summary"]["totalOut"] == 190.0
    assert body["byCategory"] == [{"category": "Food", "totalOut": 190.0, "count": 1}]


def test_analyze_file_upload(client):
    response = client.post(
        "/api/analyze",
        files={"file": ("transactions.csv", CSV_TEXT.encode("utf-8"), "text/csv")},
    )

    assert response.status_code == 200
    assert response.json()["meta"]["interpretation"] == "signed"


def test_analyze_csv_form_field(client):
    response = client.post(
        "/api/analyze",
        data={"csv": CSV_TEXT},
        files={"attachment": ("notes.txt", b"ignored", "text/plain")},
    )

    assert response.status_code == 200
    assert response.json()["meta"]["rows"] == 2


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"json": {}},
        {"json": {"csv": ""}},
        {"json": {"csv": 42}},
        {"content": b"not json", "headers": {"content-type": "application/json"}},
    ],
)
def test_analyze_missing_csv(client, kwargs):
    response = client.post("/api/analyze", **kwargs)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing CSV. Upload a file or send { csv: string }."}


def test_analyze_rejects_non_utf8_upload(client):
    response = client.post(
        "/api/analyze",
        files={"file": ("transactions.csv", "date,description\n2026-01-01,CAFÉ\n".encode("latin-1"), "text/csv")},
    )

    assert response.status_code == 400
    assert "UTF-8" in response.json()["error"]


def test_analyze_rejects_oversized_payload(client, monkeypatch):
    monkeypatch.setattr(api.settings, "max_payload_mb", 1)
    oversized = CSV_TEXT + "2026-01-04,GRAB,-100\n" * 60000

    response = client.post("/api/analyze", json={"csv": oversized})

    assert response.status_code == 413


def test_analyze_engine_failure(client, monkeypatch):
    def broken_analysis(csv_text):
        raise ParsingError("Malformed CSV: unexpected end of data")

    monkeypatch.setattr(api.analysis_service, "analyze_csv_text", broken_analysis)

    response = client.post("/api/analyze", json={"csv": CSV_TEXT})

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to analyze CSV",
        "message": "Malformed CSV: unexpected end of data",
    }


def test_demo(client):
    response = client.get("/api/demo")

    assert response.status_code == 200
    body = response.json()
    assert body["meta"]["rows"] == 10
    assert body["summary"]["dateFrom"] == "2026-01-01"
    assert len(body["topMerchants"]) == 7
