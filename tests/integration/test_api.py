"""Integration tests for the analytics and settings API"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def payload(sample_rows, sample_mapping):
    return {"rows": sample_rows, "mapping": sample_mapping, "as_of": "2025-06-15"}


@pytest.mark.integration
def test_health_check(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.integration
def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


@pytest.mark.integration
def test_kpi_snapshot(client: TestClient, payload):
    response = client.post("/v1/analytics/kpis", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data["total_invoices"] == 3
    assert data["total_amount"] == 3500
    assert data["total_collected"] == 1000
    assert data["total_outstanding"] == 2500
    assert data["collection_rate"] == 29
    # (45 * 1000 + 14 * 2000 + 92 * 500) / 3500
    assert data["dso"] == 34
    assert data["best_possible_dso"] == 17
    assert data["add"] == 17
    assert data["cei"] == 67
    assert data["days30"] == 29


@pytest.mark.integration
def test_kpi_snapshot_with_parameter_override(client: TestClient, payload):
    payload["parameters"] = {"dso_method": "traditional"}

    response = client.post("/v1/analytics/kpis", json=payload)

    assert response.status_code == 200
    # 2500 / 3500 * 30
    assert response.json()["dso"] == 21


@pytest.mark.integration
def test_kpi_snapshot_for_current_month(client: TestClient, payload):
    payload["period"] = "month"

    response = client.post("/v1/analytics/kpis", json=payload)

    assert response.status_code == 200
    assert response.json()["total_invoices"] == 1
    assert response.json()["total_amount"] == 2000


@pytest.mark.integration
def test_mapping_without_required_fields_is_rejected(client: TestClient, payload):
    del payload["mapping"]["total_amount"]

    response = client.post("/v1/analytics/kpis", json=payload)

    assert response.status_code == 422
    assert "total_amount" in response.json()["detail"]


@pytest.mark.integration
def test_unknown_period_is_rejected(client: TestClient, payload):
    payload["period"] = "decade"
    response = client.post("/v1/analytics/kpis", json=payload)
    assert response.status_code == 422


@pytest.mark.integration
def test_collector_scorecards(client: TestClient, payload):
    client.put("/v1/salaries", json={"salaries": [{"collector_name": "Alice", "salary": 20000}]})

    response = client.post("/v1/analytics/collectors", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data["bonus_policy"] == "continuous"
    assert data["weights_total"] == 100
    alice, bob = data["collectors"]
    assert alice["name"] == "Alice"
    assert alice["salary"] == 20000
    assert alice["invoice_count"] == 2
    assert alice["customers_count"] == 1
    assert alice["kpis"]["collection_rate"] == 33
    # 20000 * 20% * 0.33
    assert alice["bonus"] == 1320
    assert bob["salary"] == 10000
    assert 0 <= bob["score"] <= 100


@pytest.mark.integration
def test_collector_scorecards_with_tiered_bonus(client: TestClient, payload):
    payload["bonus_policy"] = "tiered"

    response = client.post("/v1/analytics/collectors", json=payload)

    assert response.status_code == 200
    bob = response.json()["collectors"][1]
    assert bob["name"] == "Bob"
    assert bob["score"] == 11.4
    assert bob["rating"] == "Poor"
    assert bob["bonus"] == 0


@pytest.mark.integration
def test_collector_scorecards_active_only(client: TestClient, payload):
    payload["rows"][2]["Balance"] = "0"
    payload["active_only"] = True

    response = client.post("/v1/analytics/collectors", json=payload)

    assert [c["name"] for c in response.json()["collectors"]] == ["Alice"]


@pytest.mark.integration
def test_customer_risk(client: TestClient, payload):
    response = client.post("/v1/analytics/customers", json=payload)

    assert response.status_code == 200
    acme, globex = response.json()
    assert (acme["name"], acme["risk_level"], acme["total_exposure"]) == ("Acme", "Low", 2000)
    assert (globex["name"], globex["risk_level"], globex["total_exposure"]) == ("Globex", "High", 500)
    assert globex["avg_delay"] == 62
    assert globex["collector_name"] == "Bob"
    assert acme["invoice_count"] == 2


@pytest.mark.integration
def test_monthly_trends(client: TestClient, payload):
    response = client.post("/v1/analytics/trends", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert [m["month"] for m in data] == ["2025-03", "2025-05", "2025-06"]
    assert sum(m["sales"] for m in data) == 3500


@pytest.mark.integration
def test_detect_mapping(client: TestClient):
    columns = ["Invoice Number", "Customer", "Invoice Date", "Due Date", "Total Amount", "Balance"]

    response = client.post("/v1/mapping/detect", json={"columns": columns})

    assert response.status_code == 200
    data = response.json()
    assert data["mapping"]["invoice_number"] == "Invoice Number"
    assert data["mapping"]["invoice_date"] == "Invoice Date"
    assert data["mapping"]["total_balance"] == "Balance"
    assert data["missing_required"] == []


@pytest.mark.integration
def test_detect_mapping_reports_missing_fields(client: TestClient):
    response = client.post("/v1/mapping/detect", json={"columns": ["Customer", "Balance"]})

    assert response.json()["missing_required"] == ["invoice_number", "invoice_date", "total_amount"]


@pytest.mark.integration
def test_parameters_round_trip(client: TestClient):
    response = client.get("/v1/parameters")
    assert response.status_code == 200
    assert response.json()["dso_method"] == "weighted"

    response = client.put("/v1/parameters", json={"dso_method": "countback", "max_bonus_percent": 15})
    assert response.status_code == 200

    stored = client.get("/v1/parameters").json()
    assert stored["dso_method"] == "countback"
    assert stored["max_bonus_percent"] == 15
    assert stored["cei"] == {"target": 80, "weight": 20}


@pytest.mark.integration
def test_invalid_parameter_update_is_rejected(client: TestClient):
    response = client.put("/v1/parameters", json={"cei": {"target": 80, "weight": 500}})

    assert response.status_code == 422
    assert client.get("/v1/parameters").json()["cei"]["weight"] == 20


@pytest.mark.integration
def test_stored_parameters_drive_analytics(client: TestClient, payload):
    client.put("/v1/parameters", json={"dso_method": "simple"})

    response = client.post("/v1/analytics/kpis", json=payload)

    # (45 + 14 + 92) / 3
    assert response.json()["dso"] == 50


@pytest.mark.integration
def test_bonus_rules(client: TestClient):
    response = client.get("/v1/bonus-rules")
    assert response.status_code == 200
    assert [r["min_score"] for r in response.json()["rules"]] == [35, 40, 45]

    rules = [{"name": "Flat", "min_score": 10, "percentage": 1}]
    response = client.put("/v1/bonus-rules", json={"rules": rules})
    assert response.status_code == 200

    assert client.get("/v1/bonus-rules").json()["rules"] == rules


@pytest.mark.integration
def test_salaries(client: TestClient):
    client.put("/v1/salaries", json={"salaries": [{"collector_name": "Bob", "salary": 8000}]})
    client.put("/v1/salaries", json={"salaries": [{"collector_name": "Alice", "salary": 9000}]})

    response = client.get("/v1/salaries")

    assert response.json()["salaries"] == [
        {"collector_name": "Alice", "salary": 9000},
        {"collector_name": "Bob", "salary": 8000},
    ]


@pytest.mark.integration
def test_metrics_endpoint(client: TestClient, payload):
    client.post("/v1/analytics/kpis", json=payload)

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "collections_kpi_computation_total" in response.text


@pytest.mark.integration
def test_kpi_snapshot_for_fiscal_quarter(client: TestClient, payload):
    payload["parameters"] = {"fiscal_year_start_month": 4}
    payload["fiscal_year"] = 2025
    payload["fiscal_period"] = "q1"

    response = client.post("/v1/analytics/kpis", json=payload)

    # April-June 2025: A-1 and A-2
    assert response.status_code == 200
    assert response.json()["total_invoices"] == 2
    assert response.json()["total_amount"] == 3000


@pytest.mark.integration
@pytest.mark.parametrize("fiscal_year", [0, 9999])
def test_out_of_range_fiscal_year_is_rejected(client: TestClient, payload, fiscal_year):
    payload["parameters"] = {"fiscal_year_start_month": 12}
    payload["fiscal_year"] = fiscal_year
    payload["fiscal_period"] = "q4"

    response = client.post("/v1/analytics/kpis", json=payload)

    assert response.status_code == 422


@pytest.mark.integration
def test_customer_profiles(client: TestClient, payload):
    response = client.post("/v1/analytics/customer-profiles", json=payload)

    assert response.status_code == 200
    acme, globex = response.json()
    assert acme["id"] == "QWNtZQ=="
    assert acme["total_invoiced"] == 3000
    assert acme["total_collected"] == 1000
    assert acme["total_outstanding"] == 2000
    assert globex["risk_level"] == "High"
    assert globex["overdue_amount"] == 500
    assert globex["avg_days_delinquent"] == 62


@pytest.mark.integration
def test_upload_spreadsheet(client: TestClient):
    content = (
        "Invoice Number,Customer,Invoice Date,Total Amount,Balance\n"
        "A-1,Acme,2025-05-01,\"$1,000.00\",400\n"
        "A-2,Globex,2025-06-01,250,250\n"
    ).encode("utf-8")

    response = client.post("/v1/mapping/upload", files={"file": ("ar.csv", content, "text/csv")})

    assert response.status_code == 200
    data = response.json()
    assert data["filename"] == "ar.csv"
    assert data["columns"] == ["Invoice Number", "Customer", "Invoice Date", "Total Amount", "Balance"]
    assert len(data["rows"]) == 2
    assert data["mapping"]["total_amount"] == "Total Amount"
    assert data["missing_required"] == []

    analytics = client.post(
        "/v1/analytics/kpis",
        json={"rows": data["rows"], "mapping": data["mapping"], "as_of": "2025-06-15"},
    )
    assert analytics.json()["total_amount"] == 1250


@pytest.mark.integration
def test_upload_unsupported_file_is_rejected(client: TestClient):
    response = client.post("/v1/mapping/upload", files={"file": ("ar.txt", b"hello", "text/plain")})

    assert response.status_code == 422
    assert "Unsupported" in response.json()["detail"]
