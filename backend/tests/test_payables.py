from datetime import date
from decimal import Decimal


# ==================== SUPPLIERS ====================

def test_create_supplier_with_default_site(make_supplier):
    supplier = make_supplier("Acme Supplies")
    assert supplier["supplier_number"] == "SUP000001"
    assert supplier["status"] == "ACTIVE"
    assert len(supplier["sites"]) == 1
    assert supplier["sites"][0]["site_name"] == "Invoicing Site"
    assert supplier["sites"][0]["is_primary"] is True


def test_create_supplier_with_sites_keeps_one_primary(make_supplier):
    supplier = make_supplier(
        "Initech",
        sites=[
            {"site_name": "HQ", "is_primary": True},
            {"site_name": "Warehouse", "is_primary": True},
        ]
    )
    assert [site["is_primary"] for site in supplier["sites"]] == [True, False]


def test_supplier_name_is_unique(client, auth_headers, make_supplier):
    make_supplier("Acme Supplies")
    response = client.post("/api/ap/suppliers", json={"supplier_name": "ACME supplies"}, headers=auth_headers)
    assert response.status_code == 409


def test_list_suppliers_with_counts(client, auth_headers, make_supplier, make_ap_invoice):
    acme = make_supplier("Acme Supplies")
    make_supplier("Initech")
    make_ap_invoice(acme["supplier_id"])

    response = client.get("/api/ap/suppliers", headers=auth_headers)
    assert response.status_code == 200
    rows = {row["supplier_name"]: row for row in response.json()}
    assert rows["Acme Supplies"]["invoice_count"] == 1
    assert Decimal(rows["Acme Supplies"]["outstanding_amount"]) == Decimal("1100.00")
    assert rows["Initech"]["site_count"] == 1

    search = client.get("/api/ap/suppliers", params={"search": "init"}, headers=auth_headers)
    assert [row["supplier_name"] for row in search.json()] == ["Initech"]


def test_update_supplier(client, auth_headers, make_supplier):
    supplier = make_supplier()
    response = client.put(
        f"/api/ap/suppliers/{supplier['supplier_id']}",
        json={"email": "ap@acme.test", "hold_flag": True},
        headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["hold_flag"] is True


def test_supplier_on_hold_cannot_be_invoiced(client, auth_headers, make_supplier):
    supplier = make_supplier(hold_flag=True)
    response = client.post(
        "/api/ap/invoices",
        json={
            "supplier_id": supplier["supplier_id"],
            "invoice_date": "2024-01-15",
            "lines": [{"unit_price": "10.00"}]
        },
        headers=auth_headers
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Supplier is on hold"


def test_delete_supplier_blocked_by_open_invoices(client, auth_headers, make_supplier, make_ap_invoice):
    supplier = make_supplier()
    invoice = make_ap_invoice(supplier["supplier_id"])

    blocked = client.delete(f"/api/ap/suppliers/{supplier['supplier_id']}", headers=auth_headers)
    assert blocked.status_code == 400
    assert blocked.json()["error"] == "DependencyExistsError"

    client.delete(f"/api/ap/invoices/{invoice['invoice_id']}", headers=auth_headers)
    response = client.delete(f"/api/ap/suppliers/{supplier['supplier_id']}", headers=auth_headers)
    assert response.status_code == 200
    assert client.get(f"/api/ap/suppliers/{supplier['supplier_id']}", headers=auth_headers).json()["status"] == "INACTIVE"


def test_add_primary_site_clears_previous(client, auth_headers, make_supplier):
    supplier = make_supplier()
    response = client.post(
        f"/api/ap/suppliers/{supplier['supplier_id']}/sites",
        json={"site_name": "Remit To", "site_type": "PAYMENT", "is_primary": True},
        headers=auth_headers
    )
    assert response.status_code == 201

    sites = client.get(f"/api/ap/suppliers/{supplier['supplier_id']}/sites", headers=auth_headers).json()
    assert [(site["site_name"], site["is_primary"]) for site in sites] == [
        ("Invoicing Site", False), ("Remit To", True)
    ]


def test_missing_supplier(client, auth_headers):
    assert client.get("/api/ap/suppliers/999", headers=auth_headers).status_code == 404
    assert client.get("/api/ap/suppliers/999/sites", headers=auth_headers).status_code == 404


# ==================== INVOICES ====================

def test_invoice_totals_and_defaults(make_supplier, make_ap_invoice):
    supplier = make_supplier(payment_terms_id=45)
    invoice = make_ap_invoice(
        supplier["supplier_id"],
        lines=[
            {"item_name": "Bolts", "quantity": "4", "unit_price": "25.00", "tax_rate": "10"},
            {"item_name": "Nuts", "quantity": "2", "unit_price": "50.00", "tax_amount": "3.50"},
        ]
    )
    assert invoice["invoice_number"] == "INV00000001"
    assert Decimal(invoice["subtotal"]) == Decimal("200.00")
    assert Decimal(invoice["tax_amount"]) == Decimal("13.50")
    assert Decimal(invoice["total_amount"]) == Decimal("213.50")
    assert invoice["due_date"] == "2024-02-29"
    assert [line["line_number"] for line in invoice["lines"]] == [1, 2]


def test_invoice_number_is_unique(client, auth_headers, make_supplier, make_ap_invoice):
    supplier = make_supplier()
    make_ap_invoice(supplier["supplier_id"], invoice_number="ACME-1")
    response = client.post(
        "/api/ap/invoices",
        json={
            "supplier_id": supplier["supplier_id"],
            "invoice_number": "ACME-1",
            "invoice_date": "2024-01-15",
            "lines": [{"unit_price": "10.00"}]
        },
        headers=auth_headers
    )
    assert response.status_code == 409


def test_failed_invoice_create_leaves_nothing_behind(client, auth_headers, make_supplier):
    supplier = make_supplier()
    response = client.post(
        "/api/ap/invoices",
        json={
            "supplier_id": supplier["supplier_id"],
            "invoice_date": "2024-01-15",
            "bill_to_site_id": 999,
            "lines": [{"unit_price": "10.00"}]
        },
        headers=auth_headers
    )
    assert response.status_code == 400
    assert client.get("/api/ap/invoices", headers=auth_headers).json() == []


def test_update_invoice_replaces_lines(client, auth_headers, make_supplier, make_ap_invoice):
    supplier = make_supplier()
    invoice = make_ap_invoice(supplier["supplier_id"])

    response = client.put(
        f"/api/ap/invoices/{invoice['invoice_id']}",
        json={"notes": "Revised", "lines": [{"quantity": "3", "unit_price": "100.00"}]},
        headers=auth_headers
    )
    assert response.status_code == 200, response.text
    updated = response.json()
    assert Decimal(updated["total_amount"]) == Decimal("300.00")
    assert len(updated["lines"]) == 1
    assert updated["lines"][0]["line_number"] == 1
    assert updated["notes"] == "Revised"


def test_invoice_total_cannot_drop_below_amount_paid(client, auth_headers, make_supplier, make_ap_invoice, make_ap_payment):
    supplier = make_supplier()
    invoice = make_ap_invoice(supplier["supplier_id"])
    make_ap_payment(
        supplier["supplier_id"],
        total_amount="600.00",
        applications=[{"invoice_id": invoice["invoice_id"], "applied_amount": "600.00"}]
    )

    response = client.put(
        f"/api/ap/invoices/{invoice['invoice_id']}",
        json={"lines": [{"unit_price": "500.00"}]},
        headers=auth_headers
    )
    assert response.status_code == 400


def test_invoice_status_transitions(client, auth_headers, make_supplier, make_ap_invoice):
    supplier = make_supplier()
    invoice = make_ap_invoice(supplier["supplier_id"])
    url = f"/api/ap/invoices/{invoice['invoice_id']}/status"

    approved = client.patch(url, json={"status": "approved", "approval_status": "APPROVED"}, headers=auth_headers)
    assert approved.status_code == 200
    assert approved.json()["status"] == "APPROVED"
    assert approved.json()["approval_status"] == "APPROVED"

    assert client.patch(url, json={"status": "PAID"}, headers=auth_headers).status_code == 400
    assert client.patch(url, json={"approval_status": "MAYBE"}, headers=auth_headers).status_code == 400
    assert client.patch(url, json={}, headers=auth_headers).status_code == 400


def test_paid_invoice_cannot_be_cancelled_or_edited(client, auth_headers, make_supplier, make_ap_invoice, make_ap_payment):
    supplier = make_supplier()
    invoice = make_ap_invoice(supplier["supplier_id"], unit_price="100.00", tax_rate="0")
    make_ap_payment(
        supplier["supplier_id"],
        total_amount="100.00",
        applications=[{"invoice_id": invoice["invoice_id"], "applied_amount": "100.00"}]
    )

    assert client.delete(f"/api/ap/invoices/{invoice['invoice_id']}", headers=auth_headers).status_code == 400
    assert client.put(
        f"/api/ap/invoices/{invoice['invoice_id']}", json={"notes": "x"}, headers=auth_headers
    ).status_code == 400

    payments = client.get(f"/api/ap/invoices/{invoice['invoice_id']}/payments", headers=auth_headers).json()
    assert [Decimal(app["applied_amount"]) for app in payments] == [Decimal("100.00")]


def test_list_invoices_filters(client, auth_headers, make_supplier, make_ap_invoice):
    acme = make_supplier("Acme")
    initech = make_supplier("Initech")
    make_ap_invoice(acme["supplier_id"], invoice_date=date(2024, 1, 10).isoformat())
    make_ap_invoice(initech["supplier_id"], invoice_date=date(2024, 3, 10).isoformat(), status="DRAFT")

    by_supplier = client.get("/api/ap/invoices", params={"supplier_id": acme["supplier_id"]}, headers=auth_headers)
    assert len(by_supplier.json()) == 1
    by_status = client.get("/api/ap/invoices", params={"status": "draft"}, headers=auth_headers)
    assert [row["supplier_name"] for row in by_status.json()] == ["Initech"]
    by_date = client.get("/api/ap/invoices", params={"date_from": "2024-02-01"}, headers=auth_headers)
    assert len(by_date.json()) == 1


def test_invoice_lines_endpoint(client, auth_headers, make_supplier, make_ap_invoice):
    invoice = make_ap_invoice(make_supplier()["supplier_id"])
    response = client.get(f"/api/ap/invoices/{invoice['invoice_id']}/lines", headers=auth_headers)
    assert response.status_code == 200
    assert Decimal(response.json()[0]["total_line_amount"]) == Decimal("1100.00")
    assert client.get("/api/ap/invoices/999/lines", headers=auth_headers).status_code == 404


# ==================== PAYMENTS ====================

def test_payment_number_and_update(client, auth_headers, make_supplier, make_ap_payment):
    payment = make_ap_payment(make_supplier()["supplier_id"])
    assert payment["payment_number"] == "PAY00000001"

    response = client.put(
        f"/api/ap/payments/{payment['payment_id']}",
        json={"total_amount": "750.00", "reference_number": "CHK-1001"},
        headers=auth_headers
    )
    assert response.status_code == 200
    assert Decimal(response.json()["total_amount"]) == Decimal("750.00")
    assert response.json()["reference_number"] == "CHK-1001"


def test_payment_amount_cannot_drop_below_applied(client, auth_headers, make_supplier, make_ap_invoice, make_ap_payment):
    supplier = make_supplier()
    invoice = make_ap_invoice(supplier["supplier_id"])
    payment = make_ap_payment(
        supplier["supplier_id"],
        applications=[{"invoice_id": invoice["invoice_id"], "applied_amount": "400.00"}]
    )
    response = client.put(
        f"/api/ap/payments/{payment['payment_id']}", json={"total_amount": "300.00"}, headers=auth_headers
    )
    assert response.status_code == 400


def test_cleared_payment_is_locked(client, auth_headers, make_supplier, make_ap_payment):
    payment = make_ap_payment(make_supplier()["supplier_id"])
    client.patch(f"/api/ap/payments/{payment['payment_id']}/status", json={"status": "CLEARED"}, headers=auth_headers)
    response = client.put(f"/api/ap/payments/{payment['payment_id']}", json={"notes": "x"}, headers=auth_headers)
    assert response.status_code == 400


def test_payment_with_active_applications_cannot_be_cancelled(client, auth_headers, make_supplier, make_ap_invoice, make_ap_payment):
    supplier = make_supplier()
    invoice = make_ap_invoice(supplier["supplier_id"])
    payment = make_ap_payment(
        supplier["supplier_id"],
        applications=[{"invoice_id": invoice["invoice_id"], "applied_amount": "100.00"}]
    )
    url = f"/api/ap/payments/{payment['payment_id']}"

    assert client.delete(url, headers=auth_headers).status_code == 400
    assert client.patch(f"{url}/status", json={"status": "VOID"}, headers=auth_headers).status_code == 400

    application_id = payment["applications"][0]["application_id"]
    client.post(f"{url}/applications/{application_id}/reverse", headers=auth_headers)
    assert client.delete(url, headers=auth_headers).status_code == 200
    assert client.get(url, headers=auth_headers).json()["status"] == "CANCELLED"


def test_list_payments_counts_active_applications(client, auth_headers, make_supplier, make_ap_invoice, make_ap_payment):
    supplier = make_supplier()
    invoice = make_ap_invoice(supplier["supplier_id"])
    make_ap_payment(
        supplier["supplier_id"],
        applications=[{"invoice_id": invoice["invoice_id"], "applied_amount": "100.00"}]
    )
    make_ap_payment(supplier["supplier_id"])

    rows = client.get("/api/ap/payments", headers=auth_headers).json()
    assert sorted(row["application_count"] for row in rows) == [0, 1]
