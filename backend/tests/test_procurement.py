from decimal import Decimal

import pytest


@pytest.fixture
def make_purchase_order(client, admin_headers):
    def factory(supplier_id, status="APPROVED", **fields):
        payload = {
            "supplier_id": supplier_id,
            "po_date": "2024-02-01",
            "status": status,
            "lines": [
                {"item_name": "Paper", "quantity": "10", "unit_price": "5.00", "tax_rate": "10"},
                {"item_name": "Toner", "quantity": "2", "unit_price": "50.00"},
            ],
            **fields
        }
        response = client.post("/api/procurement/purchase-orders", json=payload, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()
    return factory


def _receive(client, headers, order, quantities, **fields):
    lines = [
        {"line_id": line["line_id"], "quantity_received": quantity}
        for line, quantity in zip(order["lines"], quantities) if quantity is not None
    ]
    return client.post(
        "/api/procurement/receipts",
        json={"header_id": order["header_id"], "receipt_date": "2024-02-10", "lines": lines, **fields},
        headers=headers
    )


# ==================== REQUISITIONS ====================

def test_requisition_lifecycle(client, auth_headers, admin_headers, regular_user):
    created = client.post(
        "/api/procurement/requisitions",
        json={
            "urgency": "high",
            "description": "Office restock",
            "lines": [
                {"item_name": "Paper", "quantity": "20", "unit_price": "4.50"},
                {"item_name": "Pens", "quantity": "3", "unit_price": "2.00"},
            ]
        },
        headers=auth_headers
    )
    assert created.status_code == 201, created.text
    requisition = created.json()
    assert requisition["requisition_number"] == "REQ00000001"
    assert requisition["requester_id"] == regular_user.id
    assert requisition["urgency"] == "HIGH"
    assert Decimal(requisition["total_amount"]) == Decimal("96.00")
    assert [line["line_number"] for line in requisition["lines"]] == [1, 2]

    url = f"/api/procurement/requisitions/{requisition['requisition_id']}"
    updated = client.put(
        url,
        json={"status": "submitted", "lines": [{"item_name": "Paper", "quantity": "10", "unit_price": "4.50"}]},
        headers=auth_headers
    ).json()
    assert updated["status"] == "SUBMITTED"
    assert Decimal(updated["total_amount"]) == Decimal("45.00")
    assert len(updated["lines"]) == 1

    searched = client.get("/api/procurement/requisitions", params={"search": "restock"}, headers=auth_headers).json()
    assert [row["requisition_id"] for row in searched] == [requisition["requisition_id"]]

    assert client.delete(url, headers=auth_headers).status_code == 403
    assert client.delete(url, headers=admin_headers).status_code == 200
    assert client.get(url, headers=auth_headers).json()["status"] == "CANCELLED"
    assert client.put(url, json={"notes": "x"}, headers=auth_headers).status_code == 400


def test_requisition_rejects_unknown_urgency(client, auth_headers):
    response = client.post(
        "/api/procurement/requisitions",
        json={"urgency": "YESTERDAY", "lines": [{"item_name": "Paper"}]},
        headers=auth_headers
    )
    assert response.status_code == 400


def test_missing_requisition(client, auth_headers):
    assert client.get("/api/procurement/requisitions/999", headers=auth_headers).status_code == 404
    assert client.put(
        "/api/procurement/requisitions/999", json={"notes": "x"}, headers=auth_headers
    ).status_code == 404


# ==================== PURCHASE ORDERS ====================

def test_purchase_order_totals(client, auth_headers, make_supplier, make_purchase_order):
    supplier = make_supplier()
    order = make_purchase_order(supplier["supplier_id"])
    assert order["po_number"] == "PO00000001"
    assert order["supplier_name"] == "Acme Supplies"
    assert Decimal(order["subtotal"]) == Decimal("150.00")
    assert Decimal(order["tax_amount"]) == Decimal("5.00")
    assert Decimal(order["total_amount"]) == Decimal("155.00")
    assert Decimal(order["amount_received"]) == Decimal("0")

    lines = client.get(
        f"/api/procurement/purchase-orders/{order['header_id']}/lines", headers=auth_headers
    ).json()
    assert [Decimal(line["quantity_outstanding"]) for line in lines] == [Decimal("10"), Decimal("2")]


def test_purchase_order_requires_admin(client, auth_headers, make_supplier):
    supplier = make_supplier()
    response = client.post(
        "/api/procurement/purchase-orders",
        json={
            "supplier_id": supplier["supplier_id"],
            "po_date": "2024-02-01",
            "lines": [{"item_name": "Paper", "unit_price": "5.00"}]
        },
        headers=auth_headers
    )
    assert response.status_code == 403


def test_purchase_order_agreement_must_match_supplier(client, auth_headers, admin_headers, make_supplier):
    supplier = make_supplier()
    other = make_supplier("Initech")
    agreement = client.post(
        "/api/procurement/agreements",
        json={"supplier_id": other["supplier_id"], "start_date": "2024-01-01"},
        headers=auth_headers
    ).json()

    response = client.post(
        "/api/procurement/purchase-orders",
        json={
            "supplier_id": supplier["supplier_id"],
            "agreement_id": agreement["agreement_id"],
            "po_date": "2024-02-01",
            "lines": [{"item_name": "Paper", "unit_price": "5.00"}]
        },
        headers=admin_headers
    )
    assert response.status_code == 400
    assert "different supplier" in response.json()["message"]


def test_purchase_order_from_cancelled_requisition(client, auth_headers, admin_headers, make_supplier):
    supplier = make_supplier()
    requisition = client.post(
        "/api/procurement/requisitions", json={"lines": [{"item_name": "Paper"}]}, headers=auth_headers
    ).json()
    client.delete(f"/api/procurement/requisitions/{requisition['requisition_id']}", headers=admin_headers)

    response = client.post(
        "/api/procurement/purchase-orders",
        json={
            "supplier_id": supplier["supplier_id"],
            "requisition_id": requisition["requisition_id"],
            "po_date": "2024-02-01",
            "lines": [{"item_name": "Paper", "unit_price": "5.00"}]
        },
        headers=admin_headers
    )
    assert response.status_code == 400


def test_missing_purchase_order(client, auth_headers, admin_headers):
    assert client.get("/api/procurement/purchase-orders/999", headers=auth_headers).status_code == 404
    assert client.delete("/api/procurement/purchase-orders/999", headers=admin_headers).status_code == 404


# ==================== GOODS RECEIPTS ====================

def test_partial_receipt_updates_order(client, auth_headers, admin_headers, make_supplier, make_purchase_order):
    order = make_purchase_order(make_supplier()["supplier_id"])

    created = _receive(client, admin_headers, order, ["4", None])
    assert created.status_code == 201, created.text
    receipt = created.json()
    assert receipt["receipt_number"] == "GRN00000001"
    assert receipt["po_number"] == order["po_number"]
    assert Decimal(receipt["total_amount"]) == Decimal("20.00")
    assert receipt["lines"][0]["item_name"] == "Paper"
    assert Decimal(receipt["lines"][0]["quantity_ordered"]) == Decimal("10")

    refreshed = client.get(f"/api/procurement/purchase-orders/{order['header_id']}", headers=auth_headers).json()
    assert Decimal(refreshed["lines"][0]["quantity_received"]) == Decimal("4")
    assert Decimal(refreshed["lines"][0]["quantity_outstanding"]) == Decimal("6")
    assert Decimal(refreshed["amount_received"]) == Decimal("20.00")
    assert refreshed["status"] == "APPROVED"


def test_over_receipt_is_refused(client, admin_headers, auth_headers, make_supplier, make_purchase_order):
    order = make_purchase_order(make_supplier()["supplier_id"])
    assert _receive(client, admin_headers, order, ["8", None]).status_code == 201

    over = _receive(client, admin_headers, order, ["3", None])
    assert over.status_code == 400

    refreshed = client.get(f"/api/procurement/purchase-orders/{order['header_id']}", headers=auth_headers).json()
    assert Decimal(refreshed["lines"][0]["quantity_received"]) == Decimal("8")
    listed = client.get(
        "/api/procurement/receipts", params={"header_id": order["header_id"]}, headers=auth_headers
    ).json()
    assert len(listed) == 1


def test_accepted_and_rejected_must_add_up(client, admin_headers, make_supplier, make_purchase_order):
    order = make_purchase_order(make_supplier()["supplier_id"])
    response = client.post(
        "/api/procurement/receipts",
        json={
            "header_id": order["header_id"],
            "receipt_date": "2024-02-10",
            "lines": [{
                "line_id": order["lines"][0]["line_id"],
                "quantity_received": "4",
                "quantity_accepted": "4",
                "quantity_rejected": "1"
            }]
        },
        headers=admin_headers
    )
    assert response.status_code == 400


def test_rejected_quantity_is_not_valued(client, admin_headers, make_supplier, make_purchase_order):
    order = make_purchase_order(make_supplier()["supplier_id"])
    response = client.post(
        "/api/procurement/receipts",
        json={
            "header_id": order["header_id"],
            "receipt_date": "2024-02-10",
            "lines": [{
                "line_id": order["lines"][0]["line_id"],
                "quantity_received": "4",
                "quantity_rejected": "1",
                "rejection_reason": "Damaged"
            }]
        },
        headers=admin_headers
    )
    assert response.status_code == 201, response.text
    line = response.json()["lines"][0]
    assert Decimal(line["quantity_accepted"]) == Decimal("3")
    assert Decimal(line["line_amount"]) == Decimal("15.00")


def test_full_receipt_and_cancellation(client, auth_headers, admin_headers, make_supplier, make_purchase_order):
    order = make_purchase_order(make_supplier()["supplier_id"])
    order_url = f"/api/procurement/purchase-orders/{order['header_id']}"
    first = _receive(client, admin_headers, order, ["4", None]).json()
    second = _receive(client, admin_headers, order, ["6", "2"]).json()

    received = client.get(order_url, headers=auth_headers).json()
    assert received["status"] == "RECEIVED"
    assert Decimal(received["amount_received"]) == Decimal("150.00")

    cancelled = client.delete(f"/api/procurement/receipts/{second['receipt_id']}", headers=admin_headers)
    assert cancelled.status_code == 200

    reopened = client.get(order_url, headers=auth_headers).json()
    assert reopened["status"] == "RELEASED"
    assert [Decimal(line["quantity_received"]) for line in reopened["lines"]] == [Decimal("4"), Decimal("0")]
    assert Decimal(reopened["amount_received"]) == Decimal("20.00")

    blocked = client.delete(order_url, headers=admin_headers)
    assert blocked.status_code == 400
    assert blocked.json()["error"] == "DependencyExistsError"

    client.delete(f"/api/procurement/receipts/{first['receipt_id']}", headers=admin_headers)
    assert client.delete(order_url, headers=admin_headers).status_code == 200


def test_editing_confirmed_receipt_rebooks_quantities(
    client, auth_headers, admin_headers, make_supplier, make_purchase_order
):
    order = make_purchase_order(make_supplier()["supplier_id"])
    receipt = _receive(client, admin_headers, order, ["4", None]).json()

    updated = client.put(
        f"/api/procurement/receipts/{receipt['receipt_id']}",
        json={"lines": [{"line_id": order["lines"][0]["line_id"], "quantity_received": "5"}]},
        headers=admin_headers
    )
    assert updated.status_code == 200, updated.text
    assert Decimal(updated.json()["total_amount"]) == Decimal("25.00")

    refreshed = client.get(f"/api/procurement/purchase-orders/{order['header_id']}", headers=auth_headers).json()
    assert Decimal(refreshed["lines"][0]["quantity_received"]) == Decimal("5")
    assert Decimal(refreshed["amount_received"]) == Decimal("25.00")


def test_draft_receipt_does_not_move_quantities(client, auth_headers, admin_headers, make_supplier, make_purchase_order):
    order = make_purchase_order(make_supplier()["supplier_id"])
    receipt = _receive(client, admin_headers, order, ["4", None], status="DRAFT").json()
    assert receipt["status"] == "DRAFT"

    order_url = f"/api/procurement/purchase-orders/{order['header_id']}"
    assert Decimal(client.get(order_url, headers=auth_headers).json()["lines"][0]["quantity_received"]) == Decimal("0")

    client.put(f"/api/procurement/receipts/{receipt['receipt_id']}", json={"status": "confirmed"}, headers=admin_headers)
    assert Decimal(client.get(order_url, headers=auth_headers).json()["lines"][0]["quantity_received"]) == Decimal("4")


def test_draft_purchase_order_is_not_receivable(client, admin_headers, make_supplier, make_purchase_order):
    order = make_purchase_order(make_supplier()["supplier_id"], status="DRAFT")
    response = _receive(client, admin_headers, order, ["1", None])
    assert response.status_code == 400
    assert "DRAFT" in response.json()["message"]


def test_receipt_line_must_belong_to_order(client, admin_headers, make_supplier, make_purchase_order):
    supplier_id = make_supplier()["supplier_id"]
    order = make_purchase_order(supplier_id)
    other = make_purchase_order(supplier_id)
    response = client.post(
        "/api/procurement/receipts",
        json={
            "header_id": order["header_id"],
            "receipt_date": "2024-02-10",
            "lines": [{"line_id": other["lines"][0]["line_id"], "quantity_received": "1"}]
        },
        headers=admin_headers
    )
    assert response.status_code == 400
