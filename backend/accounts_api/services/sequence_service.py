"""
Sequence Service - Named counters for surrogate keys and document numbers

Every statement issued for one call runs on the caller's session, so the
increment and the read-back share one connection and one transaction. The
row stays locked by the UPDATE until that transaction ends.
"""
from typing import Dict, Iterable, List, Optional
from sqlalchemy import select, update
from sqlalchemy.orm import Session
import logging

from accounts_api.core.database import with_transaction
from accounts_api.core.exceptions import NotFoundError, ValidationError
from accounts_api.models import Sequence

logger = logging.getLogger(__name__)


# Payables
AP_SUPPLIER_ID_SEQ = "AP_SUPPLIER_ID_SEQ"
AP_SUPPLIER_SITE_ID_SEQ = "AP_SUPPLIER_SITE_ID_SEQ"
AP_INVOICE_ID_SEQ = "AP_INVOICE_ID_SEQ"
AP_INVOICE_LINE_ID_SEQ = "AP_INVOICE_LINE_ID_SEQ"
AP_PAYMENT_ID_SEQ = "AP_PAYMENT_ID_SEQ"
AP_PAYMENT_APPLICATION_ID_SEQ = "AP_PAYMENT_APPLICATION_ID_SEQ"

# Receivables
AR_INVOICE_ID_SEQ = "AR_INVOICE_ID_SEQ"
AR_INVOICE_LINE_ID_SEQ = "AR_INVOICE_LINE_ID_SEQ"
AR_RECEIPT_ID_SEQ = "AR_RECEIPT_ID_SEQ"
AR_RECEIPT_APPLICATION_ID_SEQ = "AR_RECEIPT_APPLICATION_ID_SEQ"

# Parties
PARTY_ID_SEQ = "PARTY_ID_SEQ"
HZ_PARTY_SITE_ID_SEQ = "HZ_PARTY_SITE_ID_SEQ"
HZ_CONTACT_POINT_ID_SEQ = "HZ_CONTACT_POINT_ID_SEQ"

# General ledger
JOURNAL_ENTRY_ID_SEQ = "JOURNAL_ENTRY_ID_SEQ"
JOURNAL_ENTRY_LINE_ID_SEQ = "JOURNAL_ENTRY_LINE_ID_SEQ"

# Procurement
PO_AGREEMENT_ID_SEQ = "PO_AGREEMENT_ID_SEQ"
PO_AGREEMENT_LINE_ID_SEQ = "PO_AGREEMENT_LINE_ID_SEQ"
PO_REQUISITION_ID_SEQ = "PO_REQUISITION_ID_SEQ"
PO_HEADER_ID_SEQ = "PO_HEADER_ID_SEQ"
# Shared by requisition lines and purchase order lines
PO_LINE_ID_SEQ = "PO_LINE_ID_SEQ"
PO_RECEIPT_ID_SEQ = "PO_RECEIPT_ID_SEQ"
PO_RECEIPT_LINE_ID_SEQ = "PO_RECEIPT_LINE_ID_SEQ"

COMPANY_ID_SEQ = "COMPANY_ID_SEQ"

KNOWN_SEQUENCES = [
    AP_SUPPLIER_ID_SEQ,
    AP_SUPPLIER_SITE_ID_SEQ,
    AP_INVOICE_ID_SEQ,
    AP_INVOICE_LINE_ID_SEQ,
    AP_PAYMENT_ID_SEQ,
    AP_PAYMENT_APPLICATION_ID_SEQ,
    AR_INVOICE_ID_SEQ,
    AR_INVOICE_LINE_ID_SEQ,
    AR_RECEIPT_ID_SEQ,
    AR_RECEIPT_APPLICATION_ID_SEQ,
    PARTY_ID_SEQ,
    HZ_PARTY_SITE_ID_SEQ,
    HZ_CONTACT_POINT_ID_SEQ,
    JOURNAL_ENTRY_ID_SEQ,
    JOURNAL_ENTRY_LINE_ID_SEQ,
    PO_AGREEMENT_ID_SEQ,
    PO_AGREEMENT_LINE_ID_SEQ,
    PO_REQUISITION_ID_SEQ,
    PO_HEADER_ID_SEQ,
    PO_LINE_ID_SEQ,
    PO_RECEIPT_ID_SEQ,
    PO_RECEIPT_LINE_ID_SEQ,
    COMPANY_ID_SEQ,
]


# ==================== DOCUMENT NUMBERS ====================

def format_document_number(prefix: str, value: int, width: int) -> str:
    """Zero-pad ``value`` to ``width`` digits after ``prefix``"""
    return f"{prefix}{value:0{width}d}"


def supplier_number(supplier_id: int) -> str:
    return format_document_number("SUP", supplier_id, 6)


def ap_invoice_number(invoice_id: int) -> str:
    return format_document_number("INV", invoice_id, 8)


def ap_payment_number(payment_id: int) -> str:
    return format_document_number("PAY", payment_id, 8)


def ar_invoice_number(invoice_id: int) -> str:
    return format_document_number("ARI", invoice_id, 8)


def receipt_number(receipt_id: int) -> str:
    return format_document_number("RCP", receipt_id, 8)


def party_number(party_id: int) -> str:
    return format_document_number("P", party_id, 6)


def journal_entry_number(entry_id: int) -> str:
    return format_document_number("JE", entry_id, 8)


def agreement_number(agreement_id: int) -> str:
    return format_document_number("PA", agreement_id, 8)


def requisition_number(requisition_id: int) -> str:
    return format_document_number("REQ", requisition_id, 8)


def po_number(header_id: int) -> str:
    return format_document_number("PO", header_id, 8)


def goods_receipt_number(receipt_id: int) -> str:
    return format_document_number("GRN", receipt_id, 8)


def company_code(company_id: int) -> str:
    return format_document_number("COMP", company_id, 3)


# ==================== SEQUENCE STORE ====================

class SequenceStore:
    def __init__(self, db: Session):
        self.db = db

    def get_next(self, name: str) -> int:
        """
        Issue the next value of ``name``.

        One atomic ``UPDATE ... SET current_value = current_value + increment_by``
        followed by a read on the same connection. The value handed out is the
        one stored before the increment.
        """
        result = self.db.execute(
            update(Sequence)
            .where(Sequence.sequence_name == name)
            .values(current_value=Sequence.current_value + Sequence.increment_by)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError(f"Sequence {name} not found")

        current_value, increment_by = self.db.execute(
            select(Sequence.current_value, Sequence.increment_by)
            .where(Sequence.sequence_name == name)
        ).one()
        return current_value - increment_by

    def get_current(self, name: str) -> int:
        """Read the value the next ``get_next`` call will issue"""
        value = self.db.execute(
            select(Sequence.current_value).where(Sequence.sequence_name == name)
        ).scalar()
        if value is None:
            raise NotFoundError(f"Sequence {name} not found")
        return value

    def reset(self, name: str, value: int = 1) -> int:
        if value < 1:
            raise ValidationError("Sequence value must be a positive integer")

        result = self.db.execute(
            update(Sequence)
            .where(Sequence.sequence_name == name)
            .values(current_value=value)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError(f"Sequence {name} not found")

        logger.warning(f"Sequence {name} reset to {value}")
        return value

    def initialize(self, names: Iterable[str], start_value: int = 1) -> List[str]:
        """Register every missing name; existing counters are left untouched"""
        existing = {
            row[0] for row in self.db.execute(select(Sequence.sequence_name)).all()
        }
        created = []
        for name in names:
            if name in existing or name in created:
                continue
            self.db.add(Sequence(sequence_name=name, current_value=start_value, increment_by=1))
            created.append(name)
        self.db.flush()

        if created:
            logger.info(f"Initialized sequences: {', '.join(created)}")
        return created

    def get_stats(self, prefix: Optional[str] = None) -> List[Dict]:
        query = (
            select(Sequence)
            .order_by(Sequence.sequence_name)
            .execution_options(populate_existing=True)
        )
        if prefix:
            query = query.where(Sequence.sequence_name.like(f"{prefix}%"))

        return [
            {
                "sequence_name": seq.sequence_name,
                "current_value": seq.current_value,
                "increment_by": seq.increment_by,
                "updated_at": seq.updated_at,
            }
            for seq in self.db.execute(query).scalars().all()
        ]


def next_sequence_value(name: str, session_factory=None) -> int:
    """Issue one value in its own transaction"""
    return with_transaction(lambda db: SequenceStore(db).get_next(name), session_factory)
