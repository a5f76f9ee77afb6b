"""Integration tests for the dashboard API.

These tests verify:
- Chart payloads for a CSV on disk
- Error bodies for fetch, empty and unknown-chart failures
- Debug and export endpoints
"""

import pytest
from fastapi.testclient import TestClient

from api.main import app
from tests.helpers import row
from wastedash import data


@pytest.fixture
def client():
    data.clear_cache()
    return TestClient(app)


def test_meta_columns(client):
    response = client.get("/meta/columns")
    assert response.status_code == 200
    assert response.json()["values"][:3] == ["Year", "Month", "Day"]


def test_meta_source_uses_env_override(client, monkeypatch):
    monkeypatch.setenv("WASTEDASH_CSV_SOURCE", "https://example.org/waste.csv")
    body = client.get("/meta/source").json()
    assert body == {"csv_source": "https://example.org/waste.csv", "remote": True}


def test_dashboard_returns_all_charts(client, write_csv, sample_rows):
    path = write_csv(sample_rows)
    response = client.post("/dashboard", json={"csv_source": str(path)})

    assert response.status_code == 200
    body = response.json()
    assert body["error"] is None
    assert set(body["charts"]) == {
        "category_weight",
        "material_type_distribution",
        "yearly_trend",
        "top_vendors",
        "category_trends_over_years",
    }
    assert all(slot["status"] == "ready" for slot in body["slots"].values())
    trends = body["charts"]["category_trends_over_years"]
    assert trends["labels"] == ["2019", "2020", "2021"]
    assert trends["datasets"][1]["label"] == "Landfill"
    assert trends["datasets"][1]["data"] == [300.0, 0.0, 0.0]


def test_single_chart(client, write_csv, sample_rows):
    path = write_csv(sample_rows)
    response = client.post("/charts/yearly_trend", json={"csv_source": str(path)})
    assert response.status_code == 200
    assert response.json()["datasets"][0]["data"] == [400.0, 400.0, 1350.0]


def test_unknown_chart_is_404(client):
    response = client.post("/charts/pie_of_everything", json={})
    assert response.status_code == 404


def test_missing_file_is_fetch_failure(client, tmp_path):
    response = client.post("/dashboard", json={"csv_source": str(tmp_path / "nope.csv")})
    assert response.status_code == 502
    assert response.json()["type"] == "FetchFailure"


def test_no_usable_rows_is_empty_result(client, write_csv):
    path = write_csv([row("abc", "Recycle", 10), row(2020, "Recycle", "n/a")])
    response = client.post("/dashboard", json={"csv_source": str(path)})
    assert response.status_code == 422
    assert response.json() == {
        "error": "No processable data in CSV or data format incorrect.",
        "type": "EmptyResult",
    }


def test_debug_reports_rejections(client, write_csv, sample_rows):
    path = write_csv(sample_rows)
    body = client.post("/debug", json={"csv_source": str(path)}).json()
    assert body["row_counts"] == {"raw_rows": 6, "normalized_rows": 5, "rejected_rows": 1, "truncated_lines": 0}
    assert body["cleaning_checks"]["unknown_vendor_rows"] == 1
    assert body["noise_vendors"] == ["$1,234.56"]
    assert body["total_weight_lbs"] == 2150.0


def test_export_normalized_csv(client, write_csv, sample_rows):
    path = write_csv(sample_rows)
    response = client.post("/export/normalized", json={"csv_source": str(path)})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.text.splitlines()[0] == ",".join(data.NORMALIZED_COLUMNS)
