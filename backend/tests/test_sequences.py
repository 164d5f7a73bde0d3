from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from accounts_api.core.database import init_db, with_transaction
from accounts_api.core.exceptions import NotFoundError, ValidationError
from accounts_api.services.sequence_service import (
    AP_INVOICE_ID_SEQ, KNOWN_SEQUENCES, SequenceStore,
    ap_invoice_number, company_code, format_document_number, next_sequence_value,
    party_number, supplier_number
)


def test_fresh_sequence_issues_one_two_three(db):
    store = SequenceStore(db)
    assert [store.get_next(AP_INVOICE_ID_SEQ) for _ in range(3)] == [1, 2, 3]
    db.commit()
    assert store.get_current(AP_INVOICE_ID_SEQ) == 4


def test_get_current_does_not_increment(db):
    store = SequenceStore(db)
    assert store.get_current(AP_INVOICE_ID_SEQ) == 1
    assert store.get_current(AP_INVOICE_ID_SEQ) == 1
    assert store.get_next(AP_INVOICE_ID_SEQ) == 1


def test_reset_sets_next_issued_value(db):
    store = SequenceStore(db)
    store.get_next(AP_INVOICE_ID_SEQ)
    store.reset(AP_INVOICE_ID_SEQ, 100)
    assert store.get_next(AP_INVOICE_ID_SEQ) == 100
    assert store.get_next(AP_INVOICE_ID_SEQ) == 101


def test_reset_rejects_non_positive_value(db):
    with pytest.raises(ValidationError):
        SequenceStore(db).reset(AP_INVOICE_ID_SEQ, 0)


def test_unknown_sequence_is_not_found(db):
    store = SequenceStore(db)
    with pytest.raises(NotFoundError):
        store.get_next("NO_SUCH_SEQ")
    with pytest.raises(NotFoundError):
        store.get_current("NO_SUCH_SEQ")


def test_initialize_keeps_existing_counters(db):
    store = SequenceStore(db)
    store.get_next(AP_INVOICE_ID_SEQ)
    created = store.initialize(KNOWN_SEQUENCES + ["EXTRA_SEQ"])
    assert created == ["EXTRA_SEQ"]
    assert store.get_current(AP_INVOICE_ID_SEQ) == 2
    assert store.get_current("EXTRA_SEQ") == 1


def test_rolled_back_allocation_is_not_consumed(session_factory):
    def allocate_then_fail(session):
        SequenceStore(session).get_next(AP_INVOICE_ID_SEQ)
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        with_transaction(allocate_then_fail, session_factory)

    assert next_sequence_value(AP_INVOICE_ID_SEQ, session_factory) == 1


def test_document_number_formats():
    assert format_document_number("X", 7, 4) == "X0007"
    assert supplier_number(12) == "SUP000012"
    assert ap_invoice_number(3) == "INV00000003"
    assert party_number(1) == "P000001"
    assert company_code(5) == "COMP005"


def test_concurrent_allocations_are_unique_and_gap_free(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'sequences.db'}",
        connect_args={"check_same_thread": False, "timeout": 30}
    )
    init_db(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    workers, per_worker = 8, 25

    def allocate(_):
        return [next_sequence_value(AP_INVOICE_ID_SEQ, factory) for _ in range(per_worker)]

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = [value for batch in pool.map(allocate, range(workers)) for value in batch]

    assert sorted(results) == list(range(1, workers * per_worker + 1))
    engine.dispose()


# ==================== HTTP ====================

def test_list_sequences(client, auth_headers):
    response = client.get("/api/sequences", params={"prefix": "AP_"}, headers=auth_headers)
    assert response.status_code == 200
    names = [row["sequence_name"] for row in response.json()]
    assert AP_INVOICE_ID_SEQ in names
    assert all(name.startswith("AP_") for name in names)


def test_get_sequence(client, auth_headers):
    response = client.get(f"/api/sequences/{AP_INVOICE_ID_SEQ}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["current_value"] == 1

    missing = client.get("/api/sequences/NO_SUCH_SEQ", headers=auth_headers)
    assert missing.status_code == 404
    assert missing.json()["error"] == "NotFoundError"


def test_reset_requires_admin(client, auth_headers, admin_headers):
    denied = client.post(f"/api/sequences/{AP_INVOICE_ID_SEQ}/reset", json={"value": 50}, headers=auth_headers)
    assert denied.status_code == 403

    response = client.post(f"/api/sequences/{AP_INVOICE_ID_SEQ}/reset", json={"value": 50}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["current_value"] == 50

    current = client.get(f"/api/sequences/{AP_INVOICE_ID_SEQ}", headers=auth_headers)
    assert current.json()["current_value"] == 50
