def test_create_party_assigns_number(make_customer):
    party = make_customer("Globex Corporation", party_type="organization", tax_id="TX-42")
    assert party["party_number"] == "P000001"
    assert party["party_type"] == "ORGANIZATION"
    assert party["status"] == "ACTIVE"


def test_invalid_party_type(client, auth_headers):
    response = client.post("/api/parties", json={"party_name": "Bad", "party_type": "ROBOT"}, headers=auth_headers)
    assert response.status_code == 400


def test_get_party_with_sites_and_contacts(client, auth_headers, make_customer):
    party = make_customer()
    base = f"/api/customer-supplier/parties/{party['party_id']}"
    client.post(f"{base}/sites", json={"site_name": "HQ", "is_primary": True}, headers=auth_headers)
    client.post(
        f"{base}/contacts",
        json={"contact_point_type": "email", "contact_point_value": "ar@globex.test"},
        headers=auth_headers
    )

    detail = client.get(f"/api/parties/{party['party_id']}", headers=auth_headers).json()
    assert [site["site_name"] for site in detail["sites"]] == ["HQ"]
    assert detail["contact_points"][0]["contact_point_type"] == "EMAIL"

    listed = client.get("/api/parties", headers=auth_headers).json()
    assert listed[0]["sites_count"] == 1
    assert listed[0]["contacts_count"] == 1


def test_update_party(client, auth_headers, make_customer):
    party = make_customer()
    response = client.put(
        f"/api/parties/{party['party_id']}", json={"industry": "Manufacturing", "status": "inactive"}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["industry"] == "Manufacturing"
    assert response.json()["status"] == "INACTIVE"

    missing = client.put("/api/parties/999", json={"industry": "x"}, headers=auth_headers)
    assert missing.status_code == 404


def test_delete_party_blocked_by_sites(client, auth_headers, make_customer):
    party = make_customer()
    site = client.post(
        f"/api/customer-supplier/parties/{party['party_id']}/sites", json={"site_name": "HQ"}, headers=auth_headers
    ).json()

    blocked = client.delete(f"/api/parties/{party['party_id']}", headers=auth_headers)
    assert blocked.status_code == 400
    assert blocked.json()["error"] == "DependencyExistsError"

    client.delete(f"/api/customer-supplier/parties/{party['party_id']}/sites/{site['site_id']}", headers=auth_headers)
    assert client.delete(f"/api/parties/{party['party_id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/parties/{party['party_id']}", headers=auth_headers).status_code == 404


def test_primary_site_is_unique_per_type(client, auth_headers, make_customer):
    party = make_customer()
    base = f"/api/customer-supplier/parties/{party['party_id']}/sites"
    first = client.post(base, json={"site_name": "Billing A", "is_primary": True}, headers=auth_headers).json()
    client.post(base, json={"site_name": "Shipping", "site_type": "SHIP_TO", "is_primary": True}, headers=auth_headers)
    client.post(base, json={"site_name": "Billing B", "is_primary": True}, headers=auth_headers)

    sites = {site["site_name"]: site["is_primary"] for site in client.get(base, headers=auth_headers).json()}
    assert sites == {"Billing A": False, "Shipping": True, "Billing B": True}

    client.put(f"{base}/{first['site_id']}", json={"is_primary": True}, headers=auth_headers)
    sites = {site["site_name"]: site["is_primary"] for site in client.get(base, headers=auth_headers).json()}
    assert sites == {"Billing A": True, "Shipping": True, "Billing B": False}


def test_primary_contact_is_unique_per_type(client, auth_headers, make_customer):
    party = make_customer()
    base = f"/api/customer-supplier/parties/{party['party_id']}/contacts"
    client.post(base, json={"contact_point_type": "PHONE", "contact_point_value": "555-0100", "is_primary": True}, headers=auth_headers)
    second = client.post(
        base, json={"contact_point_type": "PHONE", "contact_point_value": "555-0199", "is_primary": True}, headers=auth_headers
    ).json()

    contacts = client.get(base, headers=auth_headers).json()
    assert [c["is_primary"] for c in contacts] == [False, True]

    updated = client.put(f"{base}/{second['contact_point_id']}", json={"contact_person_name": "Ann"}, headers=auth_headers)
    assert updated.json()["contact_person_name"] == "Ann"
    assert client.delete(f"{base}/{second['contact_point_id']}", headers=auth_headers).status_code == 200
    assert client.delete(f"{base}/{second['contact_point_id']}", headers=auth_headers).status_code == 404


def test_site_referenced_by_invoice_cannot_be_deleted(client, auth_headers, make_customer):
    party = make_customer()
    site = client.post(
        f"/api/customer-supplier/parties/{party['party_id']}/sites", json={"site_name": "HQ"}, headers=auth_headers
    ).json()
    client.post(
        "/api/invoices",
        json={
            "customer_id": party["party_id"],
            "bill_to_site_id": site["site_id"],
            "invoice_date": "2024-04-01",
            "lines": [{"unit_price": "5"}]
        },
        headers=auth_headers
    )
    response = client.delete(
        f"/api/customer-supplier/parties/{party['party_id']}/sites/{site['site_id']}", headers=auth_headers
    )
    assert response.status_code == 400


def test_search(client, auth_headers, make_customer):
    make_customer("Globex Corporation", tax_id="GLX-1")
    make_customer("Initech", party_type="PERSON")
    make_customer("Globe Trotters", status="INACTIVE")

    by_name = client.get("/api/customer-supplier/search", params={"q": "glob"}, headers=auth_headers).json()
    assert [p["party_name"] for p in by_name] == ["Globe Trotters", "Globex Corporation"]

    by_tax_id = client.get("/api/customer-supplier/search", params={"q": "GLX"}, headers=auth_headers).json()
    assert [p["party_name"] for p in by_tax_id] == ["Globex Corporation"]

    filtered = client.get(
        "/api/customer-supplier/search", params={"q": "glob", "status": "active"}, headers=auth_headers
    ).json()
    assert [p["party_name"] for p in filtered] == ["Globex Corporation"]

    by_type = client.get("/api/customer-supplier/search", params={"type": "person"}, headers=auth_headers).json()
    assert [p["party_name"] for p in by_type] == ["Initech"]

    too_many = client.get("/api/customer-supplier/search", params={"limit": 500}, headers=auth_headers)
    assert too_many.status_code == 400
