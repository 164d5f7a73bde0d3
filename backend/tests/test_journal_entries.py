from datetime import date
from decimal import Decimal

import pytest

from accounts_api.core.exceptions import (
    AlreadyPostedError, ImbalancedEntryError, PostedEntryImmutableError, VoidEntryError
)
from accounts_api.models import JournalEntry, JournalEntryLineItem, JournalStatus
from accounts_api.schemas import JournalEntryCreate, JournalEntryUpdate
from accounts_api.services.accounting_service import JournalEntryService


def _lines(accounts, debit, credit):
    return [
        {"account_id": accounts["cash"], "debit_amount": debit, "credit_amount": "0"},
        {"account_id": accounts["revenue"], "debit_amount": "0", "credit_amount": credit},
    ]


def _draft(db, accounts, debit, credit):
    """Write a draft directly, skipping the balance check done on create"""
    service = JournalEntryService(db)
    entry = service.writer.create(
        {"entry_id": "JE-MANUAL", "entry_date": date(2024, 3, 1), "status": JournalStatus.DRAFT},
        [
            {"account_id": accounts["cash"], "debit_amount": Decimal(debit), "credit_amount": Decimal("0")},
            {"account_id": accounts["revenue"], "debit_amount": Decimal("0"), "credit_amount": Decimal(credit)},
        ]
    )
    db.commit()
    return entry.id


def test_imbalanced_entry_cannot_be_posted(db, accounts):
    entry_id = _draft(db, accounts, "100.00", "99.00")
    service = JournalEntryService(db)

    with pytest.raises(ImbalancedEntryError):
        service.post(entry_id)
    db.rollback()

    assert db.get(JournalEntry, entry_id).status == JournalStatus.DRAFT


def test_imbalanced_post_over_http(client, auth_headers, db, accounts):
    entry_id = _draft(db, accounts, "100.00", "99.00")

    response = client.post(f"/api/journal-entries/{entry_id}/post", headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "ImbalancedEntryError"
    assert client.get(f"/api/journal-entries/{entry_id}", headers=auth_headers).json()["status"] == "draft"


def test_posted_entry_is_immutable(db, accounts, regular_user):
    service = JournalEntryService(db)
    entry = service.create(
        JournalEntryCreate(entry_date="2024-03-01", line_items=_lines(accounts, "250.00", "250.00")),
        regular_user.id
    )
    db.commit()

    posted = service.post(entry.id, regular_user.id)
    db.commit()
    assert posted.status == JournalStatus.POSTED
    assert posted.posted_at is not None
    assert posted.posted_by == regular_user.id

    with pytest.raises(PostedEntryImmutableError):
        service.update(entry.id, JournalEntryUpdate(description="changed"))
    with pytest.raises(AlreadyPostedError):
        service.post(entry.id)
    with pytest.raises(PostedEntryImmutableError):
        service.delete(entry.id)


def test_create_rejects_imbalanced_lines(client, auth_headers, accounts):
    response = client.post(
        "/api/journal-entries",
        json={"entry_date": "2024-03-01", "line_items": _lines(accounts, "100.00", "99.00")},
        headers=auth_headers
    )
    assert response.status_code == 400
    assert response.json()["error"] == "ImbalancedEntryError"
    assert client.get("/api/journal-entries", headers=auth_headers).json() == []


def test_create_assigns_number_and_line_numbers(client, auth_headers, accounts):
    response = client.post(
        "/api/journal-entries",
        json={"entry_date": "2024-03-01", "description": "Cash sale", "line_items": _lines(accounts, "250.00", "250.00")},
        headers=auth_headers
    )
    assert response.status_code == 201, response.text
    entry = response.json()
    assert entry["entry_id"] == "JE00000001"
    assert entry["status"] == "draft"
    assert [line["line_number"] for line in entry["line_items"]] == [1, 2]
    assert entry["line_items"][0]["account_code"] == "1000"
    assert Decimal(entry["total_debit"]) == Decimal("250.00")


def test_create_posted_posts_immediately(client, auth_headers, accounts):
    response = client.post(
        "/api/journal-entries",
        json={"entry_date": "2024-03-01", "status": "posted", "line_items": _lines(accounts, "80.00", "80.00")},
        headers=auth_headers
    )
    assert response.status_code == 201, response.text
    assert response.json()["status"] == "posted"
    assert response.json()["posted_at"] is not None


def test_duplicate_entry_id_conflicts(client, auth_headers, accounts):
    payload = {"entry_id": "JE-2024-01", "entry_date": "2024-03-01", "line_items": _lines(accounts, "10", "10")}
    assert client.post("/api/journal-entries", json=payload, headers=auth_headers).status_code == 201
    response = client.post("/api/journal-entries", json=payload, headers=auth_headers)
    assert response.status_code == 409


def test_update_draft_replaces_lines(client, auth_headers, accounts):
    entry = client.post(
        "/api/journal-entries",
        json={"entry_date": "2024-03-01", "line_items": _lines(accounts, "10.00", "10.00")},
        headers=auth_headers
    ).json()

    response = client.put(
        f"/api/journal-entries/{entry['id']}",
        json={"description": "Corrected", "line_items": _lines(accounts, "75.00", "75.00")},
        headers=auth_headers
    )
    assert response.status_code == 200, response.text
    updated = response.json()
    assert updated["description"] == "Corrected"
    assert Decimal(updated["total_credit"]) == Decimal("75.00")
    assert [line["line_number"] for line in updated["line_items"]] == [1, 2]
    assert {line["id"] for line in updated["line_items"]}.isdisjoint(
        {line["id"] for line in entry["line_items"]}
    )


def test_post_then_void_then_delete(client, auth_headers, accounts):
    entry = client.post(
        "/api/journal-entries",
        json={"entry_date": "2024-03-01", "line_items": _lines(accounts, "40.00", "40.00")},
        headers=auth_headers
    ).json()
    entry_url = f"/api/journal-entries/{entry['id']}"

    assert client.post(f"{entry_url}/post", headers=auth_headers).json()["status"] == "posted"
    assert client.put(entry_url, json={"description": "x"}, headers=auth_headers).status_code == 400
    assert client.delete(entry_url, headers=auth_headers).status_code == 400

    voided = client.post(f"{entry_url}/void", headers=auth_headers)
    assert voided.status_code == 200
    assert voided.json()["status"] == "void"
    assert voided.json()["voided_at"] is not None

    again = client.post(f"{entry_url}/void", headers=auth_headers)
    assert again.status_code == 400
    assert again.json()["error"] == "VoidEntryError"

    assert client.delete(entry_url, headers=auth_headers).status_code == 200
    assert client.get(entry_url, headers=auth_headers).status_code == 404


def test_draft_can_be_voided(db, accounts):
    service = JournalEntryService(db)
    entry = service.create(
        JournalEntryCreate(entry_date="2024-03-01", line_items=_lines(accounts, "5", "5"))
    )
    assert service.void(entry.id).status == JournalStatus.VOID
    with pytest.raises(VoidEntryError):
        service.post(entry.id)


def test_delete_draft_removes_lines(client, auth_headers, accounts, db):
    entry = client.post(
        "/api/journal-entries",
        json={"entry_date": "2024-03-01", "line_items": _lines(accounts, "5", "5")},
        headers=auth_headers
    ).json()
    assert client.delete(f"/api/journal-entries/{entry['id']}", headers=auth_headers).status_code == 200

    db.expire_all()
    assert db.query(JournalEntryLineItem).filter(JournalEntryLineItem.journal_entry_id == entry["id"]).count() == 0


def test_list_filters_by_status(client, auth_headers, accounts):
    for status in ("draft", "posted"):
        client.post(
            "/api/journal-entries",
            json={"entry_date": "2024-03-01", "status": status, "line_items": _lines(accounts, "1", "1")},
            headers=auth_headers
        )
    response = client.get("/api/journal-entries", params={"status": "posted"}, headers=auth_headers)
    assert [entry["status"] for entry in response.json()] == ["posted"]


def test_postable_accounts(client, auth_headers, accounts):
    response = client.get("/api/journal-entries/accounts/list", headers=auth_headers)
    assert response.status_code == 200
    assert [account["account_code"] for account in response.json()] == ["1000", "4000"]
