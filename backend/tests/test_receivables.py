from decimal import Decimal

import pytest


@pytest.fixture
def customer(make_customer):
    return make_customer("Globex Corporation")


def _create_invoice(client, headers, customer_id, unit_price="1000.00", tax_rate="10", **fields):
    response = client.post(
        "/api/invoices",
        json={
            "customer_id": customer_id,
            "invoice_date": "2024-04-01",
            "status": "PENDING",
            "lines": [{"item_name": "Consulting", "quantity": "1", "unit_price": unit_price, "tax_rate": tax_rate}],
            **fields
        },
        headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


def _create_receipt(client, headers, customer_id, total_amount="1100.00", **fields):
    response = client.post(
        "/api/receipts",
        json={"customer_id": customer_id, "receipt_date": "2024-04-10", "total_amount": total_amount, **fields},
        headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_create_ar_invoice(client, auth_headers, customer):
    invoice = _create_invoice(client, auth_headers, customer["party_id"])
    assert invoice["invoice_number"] == "ARI00000001"
    assert invoice["customer_name"] == "Globex Corporation"
    assert Decimal(invoice["total_amount"]) == Decimal("1100.00")
    assert invoice["due_date"] == "2024-05-01"


def test_inactive_customer_cannot_be_invoiced(client, auth_headers, make_customer):
    inactive = make_customer("Dormant Ltd", status="INACTIVE")
    response = client.post(
        "/api/invoices",
        json={"customer_id": inactive["party_id"], "invoice_date": "2024-04-01", "lines": [{"unit_price": "5"}]},
        headers=auth_headers
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Customer is inactive"


def test_bill_to_site_must_belong_to_customer(client, auth_headers, customer, make_customer):
    other = make_customer("Umbrella")
    site = client.post(
        f"/api/customer-supplier/parties/{other['party_id']}/sites",
        json={"site_name": "Umbrella HQ"},
        headers=auth_headers
    ).json()

    response = client.post(
        "/api/invoices",
        json={
            "customer_id": customer["party_id"],
            "bill_to_site_id": site["site_id"],
            "invoice_date": "2024-04-01",
            "lines": [{"unit_price": "5"}]
        },
        headers=auth_headers
    )
    assert response.status_code == 400


def test_receipt_applied_in_full(client, auth_headers, customer):
    invoice = _create_invoice(client, auth_headers, customer["party_id"])
    receipt = _create_receipt(client, auth_headers, customer["party_id"])
    assert receipt["receipt_number"] == "RCP00000001"

    response = client.post(
        f"/api/receipts/{receipt['receipt_id']}/apply",
        json={"invoice_id": invoice["invoice_id"], "applied_amount": "1100.00"},
        headers=auth_headers
    )
    assert response.status_code == 201, response.text

    updated = client.get(f"/api/invoices/{invoice['invoice_id']}", headers=auth_headers).json()
    assert updated["status"] == "PAID"
    assert Decimal(updated["amount_paid"]) == Decimal("1100.00")

    receipts = client.get(f"/api/invoices/{invoice['invoice_id']}/receipts", headers=auth_headers).json()
    assert [app["receipt_id"] for app in receipts] == [receipt["receipt_id"]]


def test_receipt_overapplication_is_rejected(client, auth_headers, customer):
    invoice = _create_invoice(client, auth_headers, customer["party_id"])
    receipt = _create_receipt(client, auth_headers, customer["party_id"], total_amount="500.00")

    response = client.post(
        f"/api/receipts/{receipt['receipt_id']}/apply",
        json={"invoice_id": invoice["invoice_id"], "applied_amount": "600.00"},
        headers=auth_headers
    )
    assert response.status_code == 400
    assert response.json()["error"] == "OverapplicationError"

    unchanged = client.get(f"/api/receipts/{receipt['receipt_id']}", headers=auth_headers).json()
    assert Decimal(unchanged["amount_applied"]) == Decimal("0")


def test_receipt_reversal(client, auth_headers, customer):
    invoice = _create_invoice(client, auth_headers, customer["party_id"])
    receipt = _create_receipt(
        client, auth_headers, customer["party_id"], total_amount="500.00",
        applications=[{"invoice_id": invoice["invoice_id"], "applied_amount": "500.00"}]
    )
    application_id = receipt["applications"][0]["application_id"]

    response = client.post(
        f"/api/receipts/{receipt['receipt_id']}/applications/{application_id}/reverse",
        headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "REVERSED"

    applications = client.get(f"/api/receipts/{receipt['receipt_id']}/applications", headers=auth_headers).json()
    assert [app["status"] for app in applications] == ["REVERSED"]
    assert Decimal(
        client.get(f"/api/invoices/{invoice['invoice_id']}", headers=auth_headers).json()["amount_paid"]
    ) == Decimal("0")


def test_reverse_under_wrong_receipt_is_not_found(client, auth_headers, customer):
    invoice = _create_invoice(client, auth_headers, customer["party_id"])
    first = _create_receipt(
        client, auth_headers, customer["party_id"], total_amount="100.00",
        applications=[{"invoice_id": invoice["invoice_id"], "applied_amount": "100.00"}]
    )
    second = _create_receipt(client, auth_headers, customer["party_id"], total_amount="100.00")

    response = client.post(
        f"/api/receipts/{second['receipt_id']}/applications/{first['applications'][0]['application_id']}/reverse",
        headers=auth_headers
    )
    assert response.status_code == 404


def test_reversed_receipt_cannot_be_applied(client, auth_headers, customer):
    invoice = _create_invoice(client, auth_headers, customer["party_id"])
    receipt = _create_receipt(client, auth_headers, customer["party_id"])
    client.patch(f"/api/receipts/{receipt['receipt_id']}/status", json={"status": "REVERSED"}, headers=auth_headers)

    response = client.post(
        f"/api/receipts/{receipt['receipt_id']}/apply",
        json={"invoice_id": invoice["invoice_id"], "applied_amount": "10.00"},
        headers=auth_headers
    )
    assert response.status_code == 400


def test_receipt_update_and_cancel(client, auth_headers, customer):
    receipt = _create_receipt(client, auth_headers, customer["party_id"])
    url = f"/api/receipts/{receipt['receipt_id']}"

    updated = client.put(url, json={"receipt_date": "2024-04-12", "payment_method": "CASH"}, headers=auth_headers)
    assert updated.status_code == 200
    assert updated.json()["receipt_date"] == "2024-04-12"
    assert updated.json()["payment_method"] == "CASH"

    assert client.delete(url, headers=auth_headers).status_code == 200
    assert client.get(url, headers=auth_headers).json()["status"] == "CANCELLED"


def test_invalid_receipt_status(client, auth_headers, customer):
    receipt = _create_receipt(client, auth_headers, customer["party_id"])
    response = client.patch(
        f"/api/receipts/{receipt['receipt_id']}/status", json={"status": "LOST"}, headers=auth_headers
    )
    assert response.status_code == 400


def test_list_receipts_by_customer(client, auth_headers, customer, make_customer):
    other = make_customer("Umbrella")
    _create_receipt(client, auth_headers, customer["party_id"])
    _create_receipt(client, auth_headers, other["party_id"])

    rows = client.get("/api/receipts", params={"customer_id": customer["party_id"]}, headers=auth_headers).json()
    assert [row["customer_name"] for row in rows] == ["Globex Corporation"]
