"""Integration tests for API endpoints"""

import logging
import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def job_order_payload():
    return {
        "client_name": "Acme Printing",
        "contact_method": "phone",
        "contact_detail": "0917 555 0101",
        "start_date": "2024-01-10T09:00:00+08:00",
        "items": [
            {"description": "Calling cards", "quantity": "1", "unit_amount": "2650"},
        ],
        "paid_amount": "1000",
    }


@pytest.fixture
def invoice_payload():
    return {
        "client_name": "Bayside Cafe",
        "address": "12 Rizal St",
        "tin_number": "123-456-789",
        "date": "2024-01-10T10:00:00+08:00",
        "items": [
            {"description": "Menu boards", "quantity": "2", "unit_amount": "500"},
        ],
        "discount": {"value": "10", "type": "percent"},
        "tax": {"value": "12", "type": "percent"},
    }


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "billing_record_saved_total" in response.text


def test_owner_header_required(client: TestClient):
    response = client.get("/v1/job-orders", headers={"X-User-ID": ""})
    assert response.status_code == 422


def test_create_job_order(client: TestClient, job_order_payload):
    """Test POST /v1/job-orders assigns a number and settles the balance"""
    response = client.post("/v1/job-orders", json=job_order_payload)

    assert response.status_code == 201
    data = response.json()
    assert data["number"] == "JO-20240110-0001"
    assert float(data["total_amount"]) == 2650
    assert float(data["balance"]) == 1650
    assert data["balance_display"] == "₱1,650.00"
    assert data["status"] == "Downpayment"
    assert data["overpaid"] is False
    assert "X-Request-ID" in response.headers


def test_job_order_numbers_increment(client: TestClient, job_order_payload):
    first = client.post("/v1/job-orders", json=job_order_payload).json()
    second = client.post("/v1/job-orders", json=job_order_payload).json()

    assert first["number"] == "JO-20240110-0001"
    assert second["number"] == "JO-20240110-0002"


def test_create_job_order_validation(client: TestClient, job_order_payload):
    job_order_payload["items"] = []
    assert client.post("/v1/job-orders", json=job_order_payload).status_code == 422

    job_order_payload["items"] = [{"description": "Bad", "quantity": "0", "unit_amount": "10"}]
    assert client.post("/v1/job-orders", json=job_order_payload).status_code == 422


def test_get_job_order_not_found(client: TestClient):
    response = client.get("/v1/job-orders/missing")
    assert response.status_code == 404


def test_job_orders_scoped_per_owner(client: TestClient, job_order_payload):
    created = client.post("/v1/job-orders", json=job_order_payload).json()

    response = client.get(f"/v1/job-orders/{created['id']}", headers={"X-User-ID": "owner_2"})
    assert response.status_code == 404
    assert client.get("/v1/job-orders", headers={"X-User-ID": "owner_2"}).json() == []


def test_update_job_order(client: TestClient, job_order_payload):
    created = client.post("/v1/job-orders", json=job_order_payload).json()

    job_order_payload["items"] = [
        {"id": created["items"][0]["id"], "description": "Calling cards", "quantity": "1", "unit_amount": "2650", "status": "Paid"},
    ]
    job_order_payload["paid_amount"] = "2650"
    response = client.put(f"/v1/job-orders/{created['id']}", json=job_order_payload)

    assert response.status_code == 200
    data = response.json()
    assert data["number"] == created["number"]
    assert data["status"] == "Completed"
    assert float(data["balance"]) == 0


def test_update_job_order_number_is_immutable(client: TestClient, job_order_payload):
    created = client.post("/v1/job-orders", json=job_order_payload).json()

    job_order_payload["job_order_number"] = "JO-20240110-0042"
    response = client.put(f"/v1/job-orders/{created['id']}", json=job_order_payload)

    assert response.status_code == 409
    assert client.get(f"/v1/job-orders/{created['id']}").json()["number"] == created["number"]


def test_mark_all_paid(client: TestClient, job_order_payload):
    job_order_payload["items"].append({"description": "Envelopes", "quantity": "10", "unit_amount": "15"})
    job_order_payload["discount"] = {"value": "100", "type": "amount"}
    created = client.post("/v1/job-orders", json=job_order_payload).json()

    response = client.post(f"/v1/job-orders/{created['id']}/mark-all", json={"status": "Paid"})

    assert response.status_code == 200
    data = response.json()
    assert {item["status"] for item in data["items"]} == {"Paid"}
    assert float(data["paid_amount"]) == 2700
    assert float(data["balance"]) == 0
    assert data["status"] == "Completed"


def test_cheque_badge(client: TestClient, job_order_payload):
    job_order_payload["items"] = [
        {"description": "Banner", "quantity": "1", "unit_amount": "800", "status": "Cheque"},
        {"description": "Stand", "quantity": "1", "unit_amount": "400", "status": "Paid"},
    ]
    data = client.post("/v1/job-orders", json=job_order_payload).json()

    assert data["status"] == "Downpayment"
    assert data["display_status"] == "Cheque"
    assert data["status_summary"] == "1 cheque, 1 paid"


def test_list_job_orders_filter_and_sort(client: TestClient, job_order_payload):
    client.post("/v1/job-orders", json=job_order_payload)
    job_order_payload["client_name"] = "Bayside Cafe"
    job_order_payload["start_date"] = "2024-01-08T16:00:00+08:00"
    client.post("/v1/job-orders", json=job_order_payload)

    today = client.get("/v1/job-orders", params={"bucket": "today"}).json()
    assert [r["client_name"] for r in today] == ["Acme Printing"]

    week = client.get("/v1/job-orders", params={"bucket": "week", "sort": "client_name", "direction": "ascending"}).json()
    assert [r["client_name"] for r in week] == ["Acme Printing", "Bayside Cafe"]

    found = client.get("/v1/job-orders", params={"q": "bay"}).json()
    assert [r["client_name"] for r in found] == ["Bayside Cafe"]


def test_list_job_orders_invalid_sort(client: TestClient):
    response = client.get("/v1/job-orders", params={"sort": "colour"})
    assert response.status_code == 400


def test_delete_job_order(client: TestClient, job_order_payload):
    created = client.post("/v1/job-orders", json=job_order_payload).json()

    assert client.delete(f"/v1/job-orders/{created['id']}").status_code == 204
    assert client.get(f"/v1/job-orders/{created['id']}").status_code == 404
    assert client.delete(f"/v1/job-orders/{created['id']}").status_code == 404


def test_create_invoice(client: TestClient, invoice_payload):
    """Test POST /v1/invoices applies discount then tax"""
    response = client.post("/v1/invoices", json=invoice_payload)

    assert response.status_code == 201
    data = response.json()
    assert data["number"] == "INV-20240110-0001"
    assert float(data["subtotal"]) == 1000
    assert float(data["discount_amount"]) == 100
    assert float(data["tax_amount"]) == 108
    assert float(data["total_amount"]) == 1008
    assert data["status"] == "Unpaid"


def test_invoice_marked_paid(client: TestClient, invoice_payload):
    created = client.post("/v1/invoices", json=invoice_payload).json()

    invoice_payload["status"] = "Paid"
    data = client.put(f"/v1/invoices/{created['id']}", json=invoice_payload).json()

    assert data["status"] == "Paid"
    assert float(data["paid_amount"]) == 1008
    assert float(data["balance"]) == 0


def test_invoice_number_is_immutable(client: TestClient, invoice_payload):
    created = client.post("/v1/invoices", json=invoice_payload).json()

    invoice_payload["invoice_number"] = "INV-19990101-0001"
    response = client.put(f"/v1/invoices/{created['id']}", json=invoice_payload)
    assert response.status_code == 409


def test_expenses_crud(client: TestClient):
    payload = {
        "description": "Ink refill",
        "category": "General",
        "items": [{"description": "Cyan", "amount": "300"}, {"description": "Magenta", "amount": "200"}],
    }
    created = client.post("/v1/expenses", json=payload)
    assert created.status_code == 201
    expense = created.json()
    assert float(expense["total_amount"]) == 500
    assert expense["date"].startswith("2024-01-10T14:30:00")

    payload["items"] = [{"description": "Cyan", "amount": "350"}]
    updated = client.put(f"/v1/expenses/{expense['id']}", json=payload).json()
    assert float(updated["total_amount"]) == 350
    assert updated["date"] == expense["date"]

    listed = client.get("/v1/expenses", params={"bucket": "today", "q": "cyan"}).json()
    assert [e["id"] for e in listed] == [expense["id"]]

    assert client.delete(f"/v1/expenses/{expense['id']}").status_code == 204
    assert client.get("/v1/expenses").json() == []


def test_salaries(client: TestClient):
    client.post("/v1/salaries", json={"employee_name": "Rosa", "amount": "3500", "payment_date": "2024-01-05T09:00:00+08:00"})
    client.post("/v1/salaries", json={"employee_name": "Ben", "amount": "4000"})
    client.post("/v1/salaries", json={"employee_name": "Rosa", "amount": "3500", "payment_date": "2023-12-20T09:00:00+08:00"})

    data = client.get("/v1/salaries", params={"bucket": "month"}).json()

    assert [p["employee_name"] for p in data["payments"]] == ["Ben", "Rosa"]
    assert float(data["total_paid"]) == 7500


def test_report_summary(client: TestClient, job_order_payload):
    client.post("/v1/job-orders", json=job_order_payload)
    job_order_payload["client_name"] = "Bayside Cafe"
    job_order_payload["start_date"] = "2023-12-28T10:00:00+08:00"
    client.post("/v1/job-orders", json=job_order_payload)
    client.post("/v1/expenses", json={"description": "Rent", "category": "Fixed Expense", "items": [{"description": "January", "amount": "800"}]})

    response = client.get("/v1/reports/summary", params={"bucket": "month"})

    assert response.status_code == 200
    data = response.json()
    assert len(data["records"]) == 1
    summary = data["summary"]
    assert float(summary["total_sales"]) == 2650
    assert float(summary["total_paid"]) == 1000
    assert float(summary["total_unpaid"]) == 1650
    assert float(summary["total_expenses"]) == 800
    assert float(summary["cash_on_hand"]) == 200
    assert float(summary["net_profit"]) == 200
    assert summary["total_customers"] == 1

    overall = client.get("/v1/reports/summary", params={"bucket": "overall"}).json()
    assert overall["summary"]["record_count"] == 2
    assert overall["summary"]["total_customers"] == 2


def test_empty_report(client: TestClient):
    data = client.get("/v1/reports/summary", params={"bucket": "week"}).json()

    assert data["records"] == []
    assert float(data["summary"]["total_sales"]) == 0


def test_sales_series(client: TestClient, job_order_payload):
    client.post("/v1/job-orders", json=job_order_payload)

    data = client.get("/v1/reports/sales-series", params={"bucket": "today"}).json()

    assert len(data["points"]) == 24
    nine = data["points"][9]
    assert nine["label"] == "09:00"
    assert float(nine["sales"]) == 2650
    assert float(nine["paid"]) == 1000


def test_request_id_passthrough(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "save-jo-42"})
    assert response.headers["X-Request-ID"] == "save-jo-42"


def test_overpayment_warned_once_per_save(client: TestClient, job_order_payload, caplog):
    caplog.set_level(logging.WARNING)
    job_order_payload["items"] = [{"description": "Sign", "quantity": "1", "unit_amount": "100"}]
    job_order_payload["paid_amount"] = "150"

    created = client.post("/v1/job-orders", json=job_order_payload).json()

    assert created["overpaid"] is True
    assert float(created["balance"]) == -50

    # Reads of the overpaid record do not repeat the warning
    client.get(f"/v1/job-orders/{created['id']}")
    client.get("/v1/job-orders", params={"sort": "balance"})
    client.get("/v1/reports/summary", params={"bucket": "today"})

    warnings = [r for r in caplog.records if getattr(r, "warning", None) == "inconsistent_state"]
    assert len(warnings) == 1
    assert warnings[0].number == created["number"]
    assert float(warnings[0].paid_amount) == 150


def test_invoice_terms_and_payment_details_survive_edit(client: TestClient, invoice_payload):
    invoice_payload["terms_and_conditions"] = "Payment due within 30 days."
    invoice_payload["payment_details"] = "BPI 1234-5678-90, Juana Cruz"
    created = client.post("/v1/invoices", json=invoice_payload).json()

    assert created["terms_and_conditions"] == "Payment due within 30 days."
    assert created["payment_details"] == "BPI 1234-5678-90, Juana Cruz"

    invoice_payload["notes"] = "Rush order"
    updated = client.put(f"/v1/invoices/{created['id']}", json=invoice_payload).json()
    fetched = client.get(f"/v1/invoices/{created['id']}").json()

    assert updated["payment_details"] == "BPI 1234-5678-90, Juana Cruz"
    assert fetched["terms_and_conditions"] == "Payment due within 30 days."
    assert fetched["notes"] == "Rush order"
