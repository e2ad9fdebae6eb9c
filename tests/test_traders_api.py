from decimal import Decimal

import pytest

from utils import formatting


def _create_trader(client, **fields):
    body = {"companyName": "Acme", "contactPerson": "Dana", "phone": "050-1234567"}
    body.update(fields)
    response = client.post("/api/traders/", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def _create_bill(client, trader_id, **fields):
    body = {"items": [{"description": "Widget", "quantity": 3, "unitCost": 10}]}
    body.update(fields)
    response = client.post(f"/api/traders/{trader_id}/bills", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]


# ==================== ENVELOPES & CASING ====================

def test_create_trader_returns_dual_cased_record(client):
    response = client.post("/api/traders/", json={"company_name": "Acme", "creditLimit": "2500.50"})

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Trader created successfully"
    data = body["data"]
    assert data["company_name"] == data["companyName"] == "Acme"
    assert data["trader_id"] == data["traderId"] == data["id"]
    assert data["credit_limit"] == 2500.5
    assert data["payment_terms"] == data["paymentTerms"] == 30
    assert data["current_balance"] == 0.0
    assert data["bill_count"] == data["billCount"] == 0


def test_snake_case_only_when_dual_case_is_off(client, monkeypatch):
    monkeypatch.setattr(formatting, "DUAL_CASE", False)

    data = _create_trader(client)

    assert "company_name" in data
    assert "companyName" not in data
    assert data["trader_id"] == data["id"]


def test_list_traders_paginates(client):
    for i in range(3):
        _create_trader(client, companyName=f"Trader {i}")

    response = client.get("/api/traders/", params={"page": 1, "limit": 2, "sort": "company_name", "order": "asc"})

    assert response.status_code == 200
    body = response.json()
    assert [t["company_name"] for t in body["data"]] == ["Trader 0", "Trader 1"]
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "total_pages": 2}


def test_list_traders_tolerates_unknown_sort(client):
    _create_trader(client, companyName="Old")
    _create_trader(client, companyName="New")

    response = client.get("/api/traders/", params={"sort": "dropTable; --"})

    assert response.status_code == 200
    assert [t["company_name"] for t in response.json()["data"]] == ["New", "Old"]


def test_get_trader_and_balance(client):
    trader = _create_trader(client)
    _create_bill(client, trader["id"])

    trader_response = client.get(f"/api/traders/{trader['id']}")
    balance_response = client.get(f"/api/traders/{trader['id']}/balance")

    assert trader_response.status_code == 200
    assert trader_response.json()["data"]["total_purchases"] == 30.0
    balance = balance_response.json()["data"]
    assert balance["totalPurchases"] == 30.0
    assert balance["total_payments"] == 0.0
    assert balance["company_name"] == "Acme"


def test_update_trader(client):
    trader = _create_trader(client)

    response = client.put(f"/api/traders/{trader['id']}", json={"status": "inactive", "notes": "seasonal"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "inactive"
    assert data["notes"] == "seasonal"
    assert data["company_name"] == "Acme"


def test_statistics_route_is_not_shadowed_by_trader_id(client):
    _create_trader(client)

    response = client.get("/api/traders/statistics")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_traders"] == data["totalTraders"] == 1
    assert data["active_traders"] == 1


# ==================== BILLS ====================

def test_create_bill_with_items(client):
    trader = _create_trader(client)

    bill = _create_bill(client, trader["id"], taxAmount=2)

    assert bill["subtotal"] == 30.0
    assert bill["total_amount"] == bill["totalAmount"] == 32.0
    assert bill["amount_due"] == 32.0
    assert bill["bill_id"] == bill["id"]
    assert bill["bill_number"].startswith("TRD-")
    assert bill["created_by_name"] == "Asha Rao"
    assert len(bill["items"]) == 1
    item = bill["items"][0]
    assert item["total_cost"] == item["totalCost"] == 30.0
    assert item["item_id"] == item["id"]


def test_bill_item_lifecycle_keeps_totals(client):
    trader = _create_trader(client)
    bill = _create_bill(client, trader["id"])

    added = client.post(f"/api/traders/bills/{bill['id']}/items", json={"description": "Gadget", "unitCost": 5})
    assert added.status_code == 201
    gadget_id = added.json()["data"]["id"]
    assert client.get(f"/api/traders/bills/{bill['id']}").json()["data"]["subtotal"] == 35.0

    updated = client.put(f"/api/traders/bills/items/{gadget_id}", json={"quantity": 2})
    assert updated.status_code == 200
    assert updated.json()["data"]["total_cost"] == 10.0
    assert client.get(f"/api/traders/bills/{bill['id']}").json()["data"]["total_amount"] == 40.0

    removed = client.delete(f"/api/traders/bills/items/{gadget_id}")
    assert removed.status_code == 200
    fetched = client.get(f"/api/traders/bills/{bill['id']}").json()["data"]
    assert fetched["total_amount"] == 30.0
    assert fetched["item_count"] == 1
    assert [item["description"] for item in fetched["items"]] == ["Widget"]


def test_list_bills_filters_by_payment_status(client):
    trader = _create_trader(client)
    _create_bill(client, trader["id"])

    unpaid = client.get(f"/api/traders/{trader['id']}/bills", params={"paymentStatus": "unpaid"})
    paid = client.get(f"/api/traders/{trader['id']}/bills", params={"payment_status": "paid"})

    assert unpaid.json()["pagination"]["total"] == 1
    assert unpaid.json()["data"][0]["trader_name"] == "Acme"
    assert paid.json()["data"] == []


def test_update_bill(client):
    trader = _create_trader(client)
    bill = _create_bill(client, trader["id"])

    response = client.put(f"/api/traders/bills/{bill['id']}", json={"dueDate": "2024-12-31", "taxAmount": 5})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["due_date"] == "2024-12-31"
    assert data["total_amount"] == 35.0
    assert len(data["items"]) == 1


def test_delete_bill(client):
    trader = _create_trader(client)
    bill = _create_bill(client, trader["id"])

    response = client.delete(f"/api/traders/bills/{bill['id']}")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Bill deleted successfully", "data": None}
    assert client.get(f"/api/traders/bills/{bill['id']}").status_code == 404


def test_duplicate_bill_number_is_a_bad_request(client):
    trader = _create_trader(client)
    _create_bill(client, trader["id"], billNumber="TRD-2024-00001")

    response = client.post(
        f"/api/traders/{trader['id']}/bills",
        json={"billNumber": "TRD-2024-00001", "subtotal": 10},
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Bill number already exists"}


# ==================== PAYMENTS ====================

def test_record_and_list_payments(client):
    trader = _create_trader(client)
    bill = _create_bill(client, trader["id"])

    response = client.post(
        f"/api/traders/{trader['id']}/payment",
        json={"billId": bill["id"], "amount": 12.5, "paymentMethod": "cheque", "referenceNumber": "CHQ-77"},
    )

    assert response.status_code == 200
    payment = response.json()["data"]
    assert payment["amount"] == 12.5
    assert payment["bill_number"] == bill["bill_number"]
    assert payment["payment_id"] == payment["id"]
    assert payment["createdByName"] == "Asha Rao"

    listed = client.get(f"/api/traders/{trader['id']}/payments").json()
    assert [p["id"] for p in listed["data"]] == [payment["id"]]
    assert listed["pagination"]["total"] == 1


# ==================== ERRORS ====================

@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/api/traders/999"),
        ("get", "/api/traders/999/bills"),
        ("get", "/api/traders/999/payments"),
        ("get", "/api/traders/999/balance"),
        ("get", "/api/traders/bills/999"),
        ("delete", "/api/traders/999"),
        ("delete", "/api/traders/bills/999"),
        ("delete", "/api/traders/bills/items/999"),
    ],
)
def test_missing_records_are_404(client, method, path):
    response = getattr(client, method)(path)

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert "not found" in body["message"].lower()


def test_business_rule_violations_are_400(client):
    trader = _create_trader(client)

    blank_name = client.post("/api/traders/", json={"companyName": " "})
    no_amount = client.post(f"/api/traders/{trader['id']}/bills", json={})
    bad_payment = client.post(f"/api/traders/{trader['id']}/payment", json={"amount": 0})

    assert blank_name.status_code == 400
    assert blank_name.json() == {"success": False, "message": "Company name is required"}
    assert no_amount.status_code == 400
    assert no_amount.json()["message"] == "Bill must have items with valid amounts"
    assert bad_payment.status_code == 400
    assert bad_payment.json()["message"] == "Valid payment amount is required"


def test_malformed_request_is_422(client):
    response = client.post("/api/traders/", json={"companyName": "Acme", "email": "not-an-email"})

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert body["errors"]


def test_unexpected_read_failure_is_500(client, monkeypatch):
    from services import traders as trader_service

    def boom(db, trader_id):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(trader_service, "get_balance", boom)

    response = client.get("/api/traders/1/balance")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "connection reset"}


def test_delete_trader_with_balance_is_refused(client, session_factory):
    from models.traders import Trader

    trader = _create_trader(client)
    session = session_factory()
    try:
        session.get(Trader, trader["id"]).current_balance = Decimal("12")
        session.commit()
    finally:
        session.close()

    response = client.delete(f"/api/traders/{trader['id']}")

    assert response.status_code == 400
    assert response.json()["message"] == "Cannot delete trader with outstanding balance"


def test_database_failure_on_read_hides_sql(client, monkeypatch):
    from sqlalchemy.exc import OperationalError
    from services import traders as trader_service

    def broken(db, **options):
        raise OperationalError("SELECT * FROM traders WHERE secret = ?", {"secret": "s3cr3t"}, Exception("db down"))

    monkeypatch.setattr(trader_service, "list_traders", broken)

    response = client.get("/api/traders/")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Request failed"}


def test_search_with_wildcards_over_http(client):
    _create_trader(client, companyName="Sale 50% off")
    _create_trader(client, companyName="Sale 500 units")

    response = client.get("/api/traders/", params={"search": "50%"})

    assert [t["company_name"] for t in response.json()["data"]] == ["Sale 50% off"]
