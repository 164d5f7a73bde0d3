from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from accounts_api.core.database import transaction, with_transaction
from accounts_api.models import JournalEntry, JournalEntryLineItem
from accounts_api.services.document_service import (
    DocumentWriter, calculate_line_amounts, calculate_totals, is_balanced, to_money
)
from accounts_api.services.sequence_service import (
    JOURNAL_ENTRY_ID_SEQ, JOURNAL_ENTRY_LINE_ID_SEQ, SequenceStore
)


def _writer(db):
    return DocumentWriter(
        db,
        header_model=JournalEntry,
        line_model=JournalEntryLineItem,
        header_sequence=JOURNAL_ENTRY_ID_SEQ,
        line_sequence=JOURNAL_ENTRY_LINE_ID_SEQ,
        header_key="id",
        line_key="id",
        line_parent_key="journal_entry_id",
    )


def _header(entry_id="JE-T1"):
    return {"entry_id": entry_id, "entry_date": date(2024, 3, 1), "status": "DRAFT"}


def test_to_money():
    assert to_money(None) == Decimal("0.00")
    assert to_money("10.005") == Decimal("10.01")
    assert to_money(0.1 + 0.2) == Decimal("0.30")
    assert str(to_money(Decimal("7"))) == "7.00"


def test_is_balanced_within_a_cent():
    assert is_balanced(Decimal("100.00"), Decimal("100.00"))
    assert is_balanced(Decimal("100.00"), Decimal("100.01"))
    assert not is_balanced(Decimal("100.00"), Decimal("100.02"))


def test_line_and_invoice_totals():
    lines = [
        calculate_line_amounts({"quantity": 3, "unit_price": "19.99", "tax_rate": "7.5"}),
        calculate_line_amounts({"unit_price": "50", "tax_amount": "1.234"}),
    ]
    assert lines[0]["line_amount"] == Decimal("59.97")
    assert lines[0]["tax_amount"] == Decimal("4.50")
    assert lines[1]["quantity"] == Decimal("1")
    assert lines[1]["tax_amount"] == Decimal("1.23")

    assert calculate_totals(lines) == {
        "subtotal": Decimal("109.97"),
        "tax_amount": Decimal("5.73"),
        "total_amount": Decimal("115.70"),
    }


def test_writer_numbers_lines_in_order(db, accounts):
    with transaction(db):
        header = _writer(db).create(
            _header(),
            [
                {"account_id": accounts["cash"], "debit_amount": Decimal("5.00")},
                {"account_id": accounts["revenue"], "credit_amount": Decimal("5.00")},
            ]
        )

    lines = db.query(JournalEntryLineItem).order_by(JournalEntryLineItem.line_number).all()
    assert [line.line_number for line in lines] == [1, 2]
    assert [line.id for line in lines] == [1, 2]
    assert {line.journal_entry_id for line in lines} == {header.id}


def test_failing_line_drops_the_header(session_factory, accounts):
    def write(db):
        return _writer(db).create(
            _header(),
            [
                {"account_id": accounts["cash"], "debit_amount": Decimal("5.00")},
                {"account_id": None, "credit_amount": Decimal("5.00")},
            ]
        )

    with pytest.raises(IntegrityError):
        with_transaction(write, session_factory)

    db = session_factory()
    try:
        assert db.query(JournalEntry).count() == 0
        assert db.query(JournalEntryLineItem).count() == 0
        assert SequenceStore(db).get_current(JOURNAL_ENTRY_ID_SEQ) == 1
    finally:
        db.close()


def test_replace_and_delete_lines(db, accounts):
    writer = _writer(db)
    with transaction(db):
        header = writer.create(_header(), [{"account_id": accounts["cash"], "debit_amount": Decimal("1.00")}])

    with transaction(db):
        writer.replace_lines(header, [
            {"account_id": accounts["cash"], "debit_amount": Decimal("2.00")},
            {"account_id": accounts["revenue"], "credit_amount": Decimal("2.00")},
        ])
    assert [line.id for line in header.line_items] == [2, 3]

    with transaction(db):
        assert writer.delete_lines(header) == 2
    assert db.query(JournalEntryLineItem).count() == 0


def test_zero_quantity_is_kept():
    line = calculate_line_amounts({"quantity": 0, "unit_price": "50.00", "tax_rate": "10"})
    assert line["quantity"] == Decimal("0")
    assert line["line_amount"] == Decimal("0.00")
    assert line["total_line_amount"] == Decimal("0.00")
