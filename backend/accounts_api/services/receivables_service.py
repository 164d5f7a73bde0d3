"""
Receivables Service - AR Invoices and Receipts

Customers are parties; there is no separate customer master.
"""
from sqlalchemy.orm import Session

from accounts_api.core.exceptions import ValidationError
from accounts_api.models import (
    ARInvoice, ARInvoiceLine, ARReceipt, Party, PartySite, ReceiptStatus, RecordStatus
)
from accounts_api.services.application_service import ReceiptApplicationService
from accounts_api.services.invoice_service import BaseInvoiceService, BasePaymentService
from accounts_api.services.sequence_service import (
    AR_INVOICE_ID_SEQ, AR_INVOICE_LINE_ID_SEQ, AR_RECEIPT_ID_SEQ,
    ar_invoice_number, receipt_number
)


def get_active_customer(db: Session, customer_id: int) -> Party:
    customer = db.query(Party).filter(Party.party_id == customer_id).first()
    if not customer:
        raise ValidationError("Customer not found")
    if customer.status != RecordStatus.ACTIVE:
        raise ValidationError("Customer is inactive")
    return customer


class ARInvoiceService(BaseInvoiceService):
    model = ARInvoice
    line_model = ARInvoiceLine
    header_sequence = AR_INVOICE_ID_SEQ
    line_sequence = AR_INVOICE_LINE_ID_SEQ
    party_key = "customer_id"
    application_service_class = ReceiptApplicationService

    def format_number(self, invoice_id: int) -> str:
        return ar_invoice_number(invoice_id)

    def check_party(self, customer_id: int) -> Party:
        return get_active_customer(self.db, customer_id)

    def check_site(self, customer_id: int, site_id: int):
        site = self.db.query(PartySite).filter(
            PartySite.site_id == site_id,
            PartySite.party_id == customer_id
        ).first()
        if not site:
            raise ValidationError("Bill-to site does not belong to this customer")


class ReceiptService(BasePaymentService):
    model = ARReceipt
    key = "receipt_id"
    number_field = "receipt_number"
    date_field = "receipt_date"
    sequence = AR_RECEIPT_ID_SEQ
    party_key = "customer_id"
    statuses = ReceiptStatus.ALL
    closed_statuses = ReceiptStatus.CLOSED
    locked_statuses = [ReceiptStatus.CLEARED] + ReceiptStatus.CLOSED
    label = "Receipt"
    application_service_class = ReceiptApplicationService

    def format_number(self, receipt_id: int) -> str:
        return receipt_number(receipt_id)

    def check_party(self, customer_id: int) -> Party:
        return get_active_customer(self.db, customer_id)
