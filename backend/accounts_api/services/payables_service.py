"""
Payables Service - Suppliers, AP Invoices, AP Payments
"""
from typing import Optional, List
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, or_
from decimal import Decimal

from accounts_api.core.exceptions import (
    ConflictError, DependencyExistsError, NotFoundError, ValidationError
)
from accounts_api.models import (
    APInvoice, APInvoiceLine, APPayment, InvoiceStatus, Party, PaymentStatus,
    RecordStatus, Supplier, SupplierSite
)
from accounts_api.schemas import SupplierCreate, SupplierSiteCreate, SupplierUpdate
from accounts_api.services.application_service import PaymentApplicationService
from accounts_api.services.invoice_service import BaseInvoiceService, BasePaymentService
from accounts_api.services.sequence_service import (
    SequenceStore,
    AP_INVOICE_ID_SEQ, AP_INVOICE_LINE_ID_SEQ, AP_PAYMENT_ID_SEQ,
    AP_SUPPLIER_ID_SEQ, AP_SUPPLIER_SITE_ID_SEQ,
    ap_invoice_number, ap_payment_number, supplier_number
)

DEFAULT_SUPPLIER_SITE = {
    "site_name": "Invoicing Site",
    "site_type": "INVOICING",
    "is_primary": True,
}

# Open invoices that keep a supplier from being deactivated
BLOCKING_INVOICE_STATUSES = [InvoiceStatus.PENDING, InvoiceStatus.APPROVED]


class SupplierService:
    def __init__(self, db: Session):
        self.db = db
        self.sequences = SequenceStore(db)

    def get_by_id(self, supplier_id: int) -> Optional[Supplier]:
        return self.db.query(Supplier).options(
            joinedload(Supplier.sites)
        ).filter(Supplier.supplier_id == supplier_id).first()

    def _get_or_404(self, supplier_id: int) -> Supplier:
        supplier = self.db.query(Supplier).filter(Supplier.supplier_id == supplier_id).first()
        if not supplier:
            raise NotFoundError("Supplier not found")
        return supplier

    def get_all(self, status: str = None, search: str = None) -> List[Supplier]:
        query = self.db.query(Supplier)
        if status:
            query = query.filter(Supplier.status == status.upper())
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Supplier.supplier_name.ilike(pattern),
                Supplier.supplier_number.ilike(pattern),
                Supplier.tax_id.ilike(pattern)
            ))
        suppliers = query.order_by(Supplier.supplier_name).all()

        site_counts = dict(
            self.db.query(SupplierSite.supplier_id, func.count(SupplierSite.site_id))
            .filter(SupplierSite.status == RecordStatus.ACTIVE)
            .group_by(SupplierSite.supplier_id).all()
        )
        invoice_stats = {
            row[0]: (row[1], row[2])
            for row in self.db.query(
                APInvoice.supplier_id,
                func.count(APInvoice.invoice_id),
                func.sum(APInvoice.total_amount - APInvoice.amount_paid)
            ).filter(
                APInvoice.status.notin_(InvoiceStatus.CLOSED)
            ).group_by(APInvoice.supplier_id).all()
        }

        for supplier in suppliers:
            invoice_count, outstanding = invoice_stats.get(supplier.supplier_id, (0, None))
            supplier.site_count = site_counts.get(supplier.supplier_id, 0)
            supplier.invoice_count = invoice_count
            supplier.outstanding_amount = Decimal(str(outstanding or 0)).quantize(Decimal("0.01"))
        return suppliers

    def _check_name(self, name: str, supplier_id: int = None):
        query = self.db.query(Supplier).filter(func.lower(Supplier.supplier_name) == name.lower())
        if supplier_id is not None:
            query = query.filter(Supplier.supplier_id != supplier_id)
        if query.first():
            raise ConflictError(f"Supplier '{name}' already exists")

    def _check_party(self, party_id: Optional[int]):
        if party_id is not None and not self.db.query(Party).filter(Party.party_id == party_id).first():
            raise ValidationError("Party not found")

    def create(self, supplier_data: SupplierCreate, user_id: int = None) -> Supplier:
        self._check_name(supplier_data.supplier_name)
        self._check_party(supplier_data.party_id)

        supplier_id = self.sequences.get_next(AP_SUPPLIER_ID_SEQ)
        supplier = Supplier(
            supplier_id=supplier_id,
            supplier_number=supplier_number(supplier_id),
            status=RecordStatus.ACTIVE,
            created_by=user_id,
            **supplier_data.model_dump(exclude={"sites"})
        )
        self.db.add(supplier)
        self.db.flush()

        sites = [site.model_dump() for site in supplier_data.sites] or [dict(DEFAULT_SUPPLIER_SITE)]
        if not any(site["is_primary"] for site in sites):
            sites[0]["is_primary"] = True
        seen_primary = False
        for site in sites:
            if site["is_primary"] and seen_primary:
                site["is_primary"] = False
            seen_primary = seen_primary or site["is_primary"]
            self._insert_site(supplier_id, site)

        self.db.flush()
        self.db.expire(supplier)
        return supplier

    def update(self, supplier_id: int, supplier_data: SupplierUpdate) -> Supplier:
        supplier = self._get_or_404(supplier_id)
        update_data = supplier_data.model_dump(exclude_unset=True)

        if update_data.get("supplier_name"):
            self._check_name(update_data["supplier_name"], supplier_id)
        if "party_id" in update_data:
            self._check_party(update_data["party_id"])
        if update_data.get("status"):
            update_data["status"] = update_data["status"].upper()
            if update_data["status"] not in (RecordStatus.ACTIVE, RecordStatus.INACTIVE):
                raise ValidationError("Invalid status. Must be ACTIVE or INACTIVE")

        for key, value in update_data.items():
            if value is not None or key in ("tax_id", "email", "phone", "party_id"):
                setattr(supplier, key, value)

        self.db.flush()
        return supplier

    def delete(self, supplier_id: int) -> Supplier:
        """Deactivate; suppliers with open invoices stay active"""
        supplier = self._get_or_404(supplier_id)

        open_invoices = self.db.query(func.count(APInvoice.invoice_id)).filter(
            APInvoice.supplier_id == supplier_id,
            APInvoice.status.in_(BLOCKING_INVOICE_STATUSES)
        ).scalar()
        if open_invoices:
            raise DependencyExistsError(
                f"Cannot delete supplier with {open_invoices} pending or approved invoice(s)"
            )

        supplier.status = RecordStatus.INACTIVE
        self.db.flush()
        return supplier

    # ---------- sites ----------

    def get_sites(self, supplier_id: int) -> List[SupplierSite]:
        self._get_or_404(supplier_id)
        return self.db.query(SupplierSite).filter(
            SupplierSite.supplier_id == supplier_id
        ).order_by(SupplierSite.site_id).all()

    def _insert_site(self, supplier_id: int, site_fields: dict) -> SupplierSite:
        site = SupplierSite(
            site_id=self.sequences.get_next(AP_SUPPLIER_SITE_ID_SEQ),
            supplier_id=supplier_id,
            status=RecordStatus.ACTIVE,
            **site_fields
        )
        self.db.add(site)
        return site

    def add_site(self, supplier_id: int, site_data: SupplierSiteCreate) -> SupplierSite:
        self._get_or_404(supplier_id)
        if site_data.is_primary:
            self.db.query(SupplierSite).filter(
                SupplierSite.supplier_id == supplier_id
            ).update({SupplierSite.is_primary: False}, synchronize_session=False)

        site = self._insert_site(supplier_id, site_data.model_dump())
        self.db.flush()
        return site


class APInvoiceService(BaseInvoiceService):
    model = APInvoice
    line_model = APInvoiceLine
    header_sequence = AP_INVOICE_ID_SEQ
    line_sequence = AP_INVOICE_LINE_ID_SEQ
    party_key = "supplier_id"
    application_service_class = PaymentApplicationService

    def format_number(self, invoice_id: int) -> str:
        return ap_invoice_number(invoice_id)

    def check_party(self, supplier_id: int) -> Supplier:
        supplier = self.db.query(Supplier).filter(Supplier.supplier_id == supplier_id).first()
        if not supplier:
            raise ValidationError("Supplier not found")
        if supplier.status != RecordStatus.ACTIVE:
            raise ValidationError("Supplier is inactive")
        if supplier.hold_flag:
            raise ValidationError("Supplier is on hold")
        return supplier

    def check_site(self, supplier_id: int, site_id: int):
        site = self.db.query(SupplierSite).filter(
            SupplierSite.site_id == site_id,
            SupplierSite.supplier_id == supplier_id
        ).first()
        if not site:
            raise ValidationError("Bill-to site does not belong to this supplier")


class APPaymentService(BasePaymentService):
    model = APPayment
    key = "payment_id"
    number_field = "payment_number"
    date_field = "payment_date"
    sequence = AP_PAYMENT_ID_SEQ
    party_key = "supplier_id"
    statuses = PaymentStatus.ALL
    closed_statuses = PaymentStatus.CLOSED
    locked_statuses = [PaymentStatus.CLEARED] + PaymentStatus.CLOSED
    label = "Payment"
    application_service_class = PaymentApplicationService

    def format_number(self, payment_id: int) -> str:
        return ap_payment_number(payment_id)

    def check_party(self, supplier_id: int) -> Supplier:
        supplier = self.db.query(Supplier).filter(Supplier.supplier_id == supplier_id).first()
        if not supplier:
            raise ValidationError("Supplier not found")
        if supplier.status != RecordStatus.ACTIVE:
            raise ValidationError("Supplier is inactive")
        return supplier
