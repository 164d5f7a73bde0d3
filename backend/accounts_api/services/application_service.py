"""
Application Service - Applying payments and receipts against invoices

This is the only code that writes ``amount_applied`` on payments/receipts and
``amount_paid``/``status`` on invoices. Callers wrap each call in
``transaction()``. Balances only move through conditional UPDATEs whose
WHERE clause carries the bound, so two applications racing for the same
balance cannot both land, whether or not the backend honours
SELECT ... FOR UPDATE (SQLite does not).
"""
from typing import List, Optional
from sqlalchemy import update
from sqlalchemy.orm import Session
from decimal import Decimal
from datetime import date, datetime
import logging

from accounts_api.core.exceptions import InternalError, NotFoundError, OverapplicationError, ValidationError
from accounts_api.models import (
    APInvoice, APPayment, APPaymentApplication,
    ARInvoice, ARReceipt, ARReceiptApplication,
    ApplicationStatus, InvoiceStatus, PaymentStatus, ReceiptStatus
)
from accounts_api.services.document_service import to_money
from accounts_api.services.sequence_service import (
    SequenceStore, AP_PAYMENT_APPLICATION_ID_SEQ, AR_RECEIPT_APPLICATION_ID_SEQ
)

logger = logging.getLogger(__name__)

# Half a cent: SQLite keeps Numeric columns as REAL, so database-side bound
# comparisons need slack below the smallest money step
BOUND_SLACK = Decimal("0.005")


def derive_invoice_status(invoice) -> str:
    if invoice.amount_paid >= invoice.total_amount:
        return InvoiceStatus.PAID
    return InvoiceStatus.PENDING


class BalanceApplicationService:
    """Shared apply/reverse logic; subclasses name the tables involved"""

    source_model = None
    source_key = None
    source_label = None
    closed_source_statuses: List[str] = []
    invoice_model = None
    application_model = None
    application_sequence = None
    party_key = None

    def __init__(self, db: Session):
        self.db = db

    # ---------- lookups ----------

    def _lock_source(self, source_id: int):
        source = self.db.query(self.source_model).filter(
            getattr(self.source_model, self.source_key) == source_id
        ).with_for_update().populate_existing().first()
        if not source:
            raise NotFoundError(f"{self.source_label} not found")
        return source

    def _lock_invoice(self, invoice_id: int):
        invoice = self.db.query(self.invoice_model).filter(
            self.invoice_model.invoice_id == invoice_id
        ).with_for_update().populate_existing().first()
        if not invoice:
            raise NotFoundError("Invoice not found")
        return invoice

    def get_application(self, application_id: int):
        return self.db.query(self.application_model).filter(
            self.application_model.application_id == application_id
        ).first()

    def get_applications(self, source_id: int, include_reversed: bool = True):
        query = self.db.query(self.application_model).filter(
            getattr(self.application_model, self.source_key) == source_id
        )
        if not include_reversed:
            query = query.filter(self.application_model.status == ApplicationStatus.ACTIVE)
        return query.order_by(self.application_model.application_id).all()

    def get_invoice_applications(self, invoice_id: int):
        return self.db.query(self.application_model).filter(
            self.application_model.invoice_id == invoice_id
        ).order_by(self.application_model.application_id).all()

    def has_active_applications(self, source_id: int = None, invoice_id: int = None) -> bool:
        query = self.db.query(self.application_model).filter(
            self.application_model.status == ApplicationStatus.ACTIVE
        )
        if source_id is not None:
            query = query.filter(getattr(self.application_model, self.source_key) == source_id)
        if invoice_id is not None:
            query = query.filter(self.application_model.invoice_id == invoice_id)
        return query.first() is not None

    # ---------- mutations ----------

    def _check_bounds(self, source, invoice, amount: Decimal):
        """Reject ``amount`` against the balances as last read"""
        if source.status in self.closed_source_statuses:
            raise ValidationError(f"Cannot apply a {source.status.lower()} {self.source_label.lower()}")
        if invoice.status in InvoiceStatus.CLOSED:
            raise ValidationError(f"Cannot apply to a {invoice.status.lower()} invoice")
        if getattr(source, self.party_key) != getattr(invoice, self.party_key):
            raise ValidationError(f"{self.source_label} and invoice belong to different parties")

        source_remaining = source.total_amount - source.amount_applied
        if amount > source_remaining:
            raise OverapplicationError(
                f"Applied amount ({amount:.2f}) exceeds unapplied {self.source_label.lower()} "
                f"amount ({source_remaining:.2f})"
            )

        invoice_remaining = invoice.total_amount - invoice.amount_paid
        if amount > invoice_remaining:
            raise OverapplicationError(
                f"Applied amount ({amount:.2f}) exceeds invoice amount due ({invoice_remaining:.2f})"
            )

    def _shift(self, model, key_column, key, column, delta: Decimal, bound) -> bool:
        """
        ``column += delta`` on one row, only while ``bound(new value)`` holds.

        The bound is evaluated by the database inside the UPDATE, so a
        concurrent writer that committed after our read is seen here.
        Returns False when the row no longer satisfies the bound.
        """
        target = column + delta
        result = self.db.execute(
            update(model)
            .where(key_column == key, bound(target))
            .values({column: target})
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def apply(
        self,
        source_id: int,
        invoice_id: int,
        amount,
        applied_date: Optional[date] = None,
        notes: Optional[str] = None,
        user_id: Optional[int] = None
    ):
        """
        Apply ``amount`` of a payment/receipt to an invoice.

        Every bound is checked before the first write, so a rejected call
        leaves both rows untouched. The increments themselves are
        conditional UPDATEs: a call that lost a race to another
        application is rejected with ``OverapplicationError`` and the
        caller's transaction rolls back whatever it already wrote.
        """
        amount = to_money(amount)
        if amount <= 0:
            raise OverapplicationError("Applied amount must be greater than zero")

        source = self._lock_source(source_id)
        invoice = self._lock_invoice(invoice_id)
        self._check_bounds(source, invoice, amount)

        source_column = self.source_model.amount_applied
        if not self._shift(
            self.source_model, getattr(self.source_model, self.source_key), source_id,
            source_column, amount,
            lambda target: target <= self.source_model.total_amount + BOUND_SLACK
        ):
            raise OverapplicationError(
                f"Applied amount ({amount:.2f}) exceeds unapplied {self.source_label.lower()} amount"
            )

        if not self._shift(
            self.invoice_model, self.invoice_model.invoice_id, invoice_id,
            self.invoice_model.amount_paid, amount,
            lambda target: target <= self.invoice_model.total_amount + BOUND_SLACK
        ):
            raise OverapplicationError(f"Applied amount ({amount:.2f}) exceeds invoice amount due")

        self.db.refresh(source)
        self.db.refresh(invoice)
        invoice.status = derive_invoice_status(invoice)

        application_id = SequenceStore(self.db).get_next(self.application_sequence)
        application = self.application_model(
            application_id=application_id,
            invoice_id=invoice.invoice_id,
            applied_amount=amount,
            applied_date=applied_date or date.today(),
            status=ApplicationStatus.ACTIVE,
            notes=notes,
            created_by=user_id,
            **{self.source_key: source_id}
        )
        self.db.add(application)
        self.db.flush()

        logger.info(
            f"Applied {amount} from {self.source_label.lower()} {source_id} to invoice "
            f"{invoice.invoice_number} (amount_paid={invoice.amount_paid}, status={invoice.status})"
        )
        return application

    def reverse(self, application_id: int, user_id: Optional[int] = None, source_id: Optional[int] = None):
        """Undo an ACTIVE application on both sides"""
        application = self.db.query(self.application_model).filter(
            self.application_model.application_id == application_id
        ).with_for_update().populate_existing().first()

        if not application or application.status != ApplicationStatus.ACTIVE:
            raise NotFoundError("Application not found or already reversed")
        if source_id is not None and getattr(application, self.source_key) != source_id:
            raise NotFoundError("Application not found or already reversed")

        claimed = self.db.execute(
            update(self.application_model)
            .where(
                self.application_model.application_id == application_id,
                self.application_model.status == ApplicationStatus.ACTIVE
            )
            .values(
                status=ApplicationStatus.REVERSED,
                reversed_by=user_id,
                reversed_at=datetime.utcnow()
            )
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount != 1:
            raise NotFoundError("Application not found or already reversed")

        amount = application.applied_amount
        owner_id = getattr(application, self.source_key)
        if not self._shift(
            self.source_model, getattr(self.source_model, self.source_key), owner_id,
            self.source_model.amount_applied, -amount,
            lambda target: target >= -BOUND_SLACK
        ):
            raise InternalError(
                f"{self.source_label} {owner_id} has less applied than application {application_id}"
            )
        if not self._shift(
            self.invoice_model, self.invoice_model.invoice_id, application.invoice_id,
            self.invoice_model.amount_paid, -amount,
            lambda target: target >= -BOUND_SLACK
        ):
            raise InternalError(
                f"Invoice {application.invoice_id} has less paid than application {application_id}"
            )

        self.db.refresh(application)
        source = self._lock_source(owner_id)
        invoice = self._lock_invoice(application.invoice_id)
        invoice.status = derive_invoice_status(invoice)
        self.db.flush()

        logger.info(
            f"Reversed application {application_id} ({amount}) on invoice "
            f"{invoice.invoice_number} (amount_paid={invoice.amount_paid}, status={invoice.status}, "
            f"{self.source_label.lower()} applied={source.amount_applied})"
        )
        return application


class PaymentApplicationService(BalanceApplicationService):
    """Supplier payments against AP invoices"""

    source_model = APPayment
    source_key = "payment_id"
    source_label = "Payment"
    closed_source_statuses = PaymentStatus.CLOSED
    invoice_model = APInvoice
    application_model = APPaymentApplication
    application_sequence = AP_PAYMENT_APPLICATION_ID_SEQ
    party_key = "supplier_id"


class ReceiptApplicationService(BalanceApplicationService):
    """Customer receipts against AR invoices"""

    source_model = ARReceipt
    source_key = "receipt_id"
    source_label = "Receipt"
    closed_source_statuses = ReceiptStatus.CLOSED
    invoice_model = ARInvoice
    application_model = ARReceiptApplication
    application_sequence = AR_RECEIPT_APPLICATION_ID_SEQ
    party_key = "customer_id"
