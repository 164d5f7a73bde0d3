"""
Invoice & Payment Services - logic shared by payables and receivables

Subclasses name the tables, sequences and counterparty column; everything
that touches ``amount_paid``/``amount_applied`` goes through the
application services.
"""
from typing import Optional, List, Dict, Tuple
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func
from decimal import Decimal
from datetime import date, timedelta

from accounts_api.core.exceptions import (
    ConflictError, DependencyExistsError, NotFoundError, ValidationError
)
from accounts_api.models import ApplicationStatus, ApprovalStatus, InvoiceStatus
from accounts_api.services.application_service import derive_invoice_status
from accounts_api.services.document_service import (
    DocumentWriter, calculate_line_amounts, calculate_totals, to_money
)
from accounts_api.services.sequence_service import SequenceStore

DEFAULT_PAYMENT_TERMS_DAYS = 30

# Statuses a user may set directly; PAID is reached only by applying payments
SETTABLE_INVOICE_STATUSES = [
    InvoiceStatus.DRAFT,
    InvoiceStatus.PENDING,
    InvoiceStatus.APPROVED,
    InvoiceStatus.CANCELLED,
    InvoiceStatus.VOID,
]


class BaseInvoiceService:
    model = None
    line_model = None
    header_sequence = None
    line_sequence = None
    party_key = None
    application_service_class = None

    def __init__(self, db: Session):
        self.db = db
        self.writer = DocumentWriter(
            db,
            header_model=self.model,
            line_model=self.line_model,
            header_sequence=self.header_sequence,
            line_sequence=self.line_sequence,
            header_key="invoice_id",
            line_key="line_id",
        )
        self.applications = self.application_service_class(db)

    # ---------- hooks ----------

    def format_number(self, invoice_id: int) -> str:
        raise NotImplementedError

    def check_party(self, party_id: int):
        """Return the counterparty or raise ValidationError"""
        raise NotImplementedError

    def check_site(self, party_id: int, site_id: int):
        pass

    # ---------- queries ----------

    def get_by_id(self, invoice_id: int):
        return self.db.query(self.model).options(
            joinedload(self.model.lines),
            joinedload(self.model.applications)
        ).filter(self.model.invoice_id == invoice_id).first()

    def _get_or_404(self, invoice_id: int):
        invoice = self.db.query(self.model).filter(self.model.invoice_id == invoice_id).first()
        if not invoice:
            raise NotFoundError("Invoice not found")
        return invoice

    def get_all(
        self,
        status: str = None,
        party_id: int = None,
        date_from: date = None,
        date_to: date = None,
        due_date_from: date = None,
        due_date_to: date = None
    ) -> List:
        query = self.db.query(self.model)
        if status:
            query = query.filter(self.model.status == status.upper())
        if party_id:
            query = query.filter(getattr(self.model, self.party_key) == party_id)
        if date_from:
            query = query.filter(self.model.invoice_date >= date_from)
        if date_to:
            query = query.filter(self.model.invoice_date <= date_to)
        if due_date_from:
            query = query.filter(self.model.due_date >= due_date_from)
        if due_date_to:
            query = query.filter(self.model.due_date <= due_date_to)
        return query.order_by(self.model.invoice_date.desc(), self.model.invoice_id.desc()).all()

    def get_lines(self, invoice_id: int) -> List:
        self._get_or_404(invoice_id)
        return self.db.query(self.line_model).filter(
            self.line_model.invoice_id == invoice_id
        ).order_by(self.line_model.line_number).all()

    def get_applications(self, invoice_id: int) -> List:
        self._get_or_404(invoice_id)
        return self.applications.get_invoice_applications(invoice_id)

    # ---------- helpers ----------

    def _check_number(self, invoice_number: str, invoice_id: int = None):
        query = self.db.query(self.model).filter(self.model.invoice_number == invoice_number)
        if invoice_id is not None:
            query = query.filter(self.model.invoice_id != invoice_id)
        if query.first():
            raise ConflictError(f"Invoice number '{invoice_number}' already exists")

    def _prepare_lines(self, lines) -> Tuple[List[Dict], Dict]:
        prepared = [calculate_line_amounts(line.model_dump()) for line in lines]
        totals = calculate_totals(prepared)
        if totals["total_amount"] <= 0:
            raise ValidationError("Invoice total must be greater than zero")
        return prepared, totals

    # ---------- mutations ----------

    def create(self, invoice_data, user_id: int = None):
        party_id = getattr(invoice_data, self.party_key)
        party = self.check_party(party_id)
        if invoice_data.bill_to_site_id:
            self.check_site(party_id, invoice_data.bill_to_site_id)

        status = invoice_data.status.upper()
        if status not in (InvoiceStatus.DRAFT, InvoiceStatus.PENDING, InvoiceStatus.APPROVED):
            raise ValidationError("New invoices must be DRAFT, PENDING or APPROVED")

        if invoice_data.invoice_number:
            self._check_number(invoice_data.invoice_number)

        lines, totals = self._prepare_lines(invoice_data.lines)

        payment_terms = invoice_data.payment_terms_id
        if payment_terms is None:
            payment_terms = getattr(party, "payment_terms_id", None) or DEFAULT_PAYMENT_TERMS_DAYS
        due_date = invoice_data.due_date or invoice_data.invoice_date + timedelta(days=payment_terms)
        if due_date < invoice_data.invoice_date:
            raise ValidationError("Due date cannot be before the invoice date")

        invoice_id = self.writer.allocate_header_id()
        return self.writer.create(
            {
                self.party_key: party_id,
                "invoice_number": invoice_data.invoice_number or self.format_number(invoice_id),
                "bill_to_site_id": invoice_data.bill_to_site_id,
                "invoice_date": invoice_data.invoice_date,
                "due_date": due_date,
                "payment_terms_id": payment_terms,
                "currency_code": invoice_data.currency_code,
                "exchange_rate": invoice_data.exchange_rate,
                "amount_paid": Decimal("0.00"),
                "status": status,
                "approval_status": ApprovalStatus.APPROVED if status == InvoiceStatus.APPROVED else ApprovalStatus.PENDING,
                "notes": invoice_data.notes,
                "created_by": user_id,
                **totals
            },
            lines,
            header_id=invoice_id
        )

    def update(self, invoice_id: int, invoice_data):
        invoice = self._get_or_404(invoice_id)
        if invoice.status == InvoiceStatus.PAID:
            raise ValidationError("Cannot update a paid invoice")
        if invoice.status in InvoiceStatus.CLOSED:
            raise ValidationError(f"Cannot update a {invoice.status.lower()} invoice")

        update_data = invoice_data.model_dump(exclude_unset=True, exclude={"lines"})

        if update_data.get("invoice_number"):
            self._check_number(update_data["invoice_number"], invoice_id)
        if update_data.get("bill_to_site_id"):
            self.check_site(getattr(invoice, self.party_key), update_data["bill_to_site_id"])

        for key, value in update_data.items():
            if value is not None or key in ("notes", "bill_to_site_id"):
                setattr(invoice, key, value)

        if "due_date" not in update_data and ("invoice_date" in update_data or "payment_terms_id" in update_data):
            terms = invoice.payment_terms_id if invoice.payment_terms_id is not None else DEFAULT_PAYMENT_TERMS_DAYS
            invoice.due_date = invoice.invoice_date + timedelta(days=terms)
        if invoice.due_date < invoice.invoice_date:
            raise ValidationError("Due date cannot be before the invoice date")

        if invoice_data.lines is not None:
            lines, totals = self._prepare_lines(invoice_data.lines)
            if totals["total_amount"] < invoice.amount_paid:
                raise ValidationError(
                    f"Invoice total ({totals['total_amount']:.2f}) cannot be less than "
                    f"the amount already paid ({invoice.amount_paid:.2f})"
                )
            for key, value in totals.items():
                setattr(invoice, key, value)
            if invoice.amount_paid > 0:
                invoice.status = derive_invoice_status(invoice)
            self.writer.replace_lines(invoice, lines)

        self.db.flush()
        return invoice

    def update_status(self, invoice_id: int, status: Optional[str] = None, approval_status: Optional[str] = None):
        invoice = self._get_or_404(invoice_id)
        if status is None and approval_status is None:
            raise ValidationError("status or approval_status is required")

        if status is not None:
            status = status.upper()
            if status not in SETTABLE_INVOICE_STATUSES:
                raise ValidationError(
                    f"Invalid status. Must be one of: {', '.join(SETTABLE_INVOICE_STATUSES)}"
                )
            if status in InvoiceStatus.CLOSED:
                if self.applications.has_active_applications(invoice_id=invoice_id):
                    raise DependencyExistsError(
                        f"Cannot set invoice to {status}: it has active payment applications"
                    )
            elif invoice.amount_paid >= invoice.total_amount:
                raise ValidationError("Invoice is fully paid; reverse its applications first")
            invoice.status = status

        if approval_status is not None:
            approval_status = approval_status.upper()
            if approval_status not in ApprovalStatus.ALL:
                raise ValidationError(
                    f"Invalid approval status. Must be one of: {', '.join(ApprovalStatus.ALL)}"
                )
            invoice.approval_status = approval_status

        self.db.flush()
        return invoice

    def delete(self, invoice_id: int):
        """Cancel the invoice; rows are kept"""
        invoice = self._get_or_404(invoice_id)
        if self.applications.has_active_applications(invoice_id=invoice_id):
            raise DependencyExistsError("Cannot delete invoice with active payment applications")
        invoice.status = InvoiceStatus.CANCELLED
        self.db.flush()
        return invoice


class BasePaymentService:
    """Payments (AP) and receipts (AR): money in hand waiting to be applied"""

    model = None
    key = None
    number_field = None
    date_field = None
    sequence = None
    party_key = None
    statuses: List[str] = []
    closed_statuses: List[str] = []
    locked_statuses: List[str] = []
    cancelled_status = "CANCELLED"
    label = None
    application_service_class = None

    def __init__(self, db: Session):
        self.db = db
        self.applications = self.application_service_class(db)

    def format_number(self, source_id: int) -> str:
        raise NotImplementedError

    def check_party(self, party_id: int):
        raise NotImplementedError

    @property
    def _key_column(self):
        return getattr(self.model, self.key)

    def get_by_id(self, source_id: int):
        return self.db.query(self.model).options(
            joinedload(self.model.applications)
        ).filter(self._key_column == source_id).first()

    def _get_or_404(self, source_id: int):
        source = self.db.query(self.model).filter(self._key_column == source_id).first()
        if not source:
            raise NotFoundError(f"{self.label} not found")
        return source

    def get_all(
        self,
        status: str = None,
        party_id: int = None,
        date_from: date = None,
        date_to: date = None
    ) -> List:
        application_model = self.applications.application_model
        counts = dict(
            self.db.query(
                getattr(application_model, self.key),
                func.count(application_model.application_id)
            ).filter(
                application_model.status == ApplicationStatus.ACTIVE
            ).group_by(getattr(application_model, self.key)).all()
        )

        date_column = getattr(self.model, self.date_field)
        query = self.db.query(self.model)
        if status:
            query = query.filter(self.model.status == status.upper())
        if party_id:
            query = query.filter(getattr(self.model, self.party_key) == party_id)
        if date_from:
            query = query.filter(date_column >= date_from)
        if date_to:
            query = query.filter(date_column <= date_to)

        sources = query.order_by(date_column.desc(), self._key_column.desc()).all()
        for source in sources:
            source.application_count = counts.get(getattr(source, self.key), 0)
        return sources

    def _check_number(self, number: str, source_id: int = None):
        number_column = getattr(self.model, self.number_field)
        query = self.db.query(self.model).filter(number_column == number)
        if source_id is not None:
            query = query.filter(self._key_column != source_id)
        if query.first():
            raise ConflictError(f"{self.label} number '{number}' already exists")

    def create(self, data, user_id: int = None):
        party_id = getattr(data, self.party_key)
        self.check_party(party_id)

        status = data.status.upper()
        if status not in self.statuses or status in self.closed_statuses:
            raise ValidationError(f"Invalid status for a new {self.label.lower()}: {status}")

        number = getattr(data, self.number_field)
        if number:
            self._check_number(number)

        applications = data.applications
        applied_total = sum((to_money(app.applied_amount) for app in applications), Decimal("0.00"))
        if applied_total > to_money(data.total_amount):
            raise ValidationError(
                f"Total applied ({applied_total:.2f}) exceeds {self.label.lower()} amount "
                f"({to_money(data.total_amount):.2f})"
            )

        source_id = SequenceStore(self.db).get_next(self.sequence)
        fields = data.model_dump(exclude={"applications", self.number_field, "status", "total_amount"})
        source = self.model(
            **{self.key: source_id, self.number_field: number or self.format_number(source_id)},
            **fields,
            total_amount=to_money(data.total_amount),
            amount_applied=Decimal("0.00"),
            status=status,
            created_by=user_id
        )
        self.db.add(source)
        self.db.flush()

        for app in applications:
            self.applications.apply(
                source_id,
                app.invoice_id,
                app.applied_amount,
                applied_date=app.applied_date or getattr(source, self.date_field),
                notes=app.notes,
                user_id=user_id
            )

        self.db.expire(source)
        return source

    def update(self, source_id: int, data):
        source = self._get_or_404(source_id)
        if source.status in self.locked_statuses:
            raise ValidationError(f"Cannot update a {source.status.lower()} {self.label.lower()}")

        update_data = data.model_dump(exclude_unset=True)
        update_data.pop("payment_date" if self.date_field == "receipt_date" else "receipt_date", None)

        if update_data.get("total_amount") is not None:
            new_total = to_money(update_data["total_amount"])
            if new_total < source.amount_applied:
                raise ValidationError(
                    f"{self.label} amount ({new_total:.2f}) cannot be less than "
                    f"the amount already applied ({source.amount_applied:.2f})"
                )
            update_data["total_amount"] = new_total

        for key, value in update_data.items():
            if value is not None or key in ("notes", "bank_account", "reference_number"):
                setattr(source, key, value)

        self.db.flush()
        return source

    def update_status(self, source_id: int, status: str):
        source = self._get_or_404(source_id)
        status = (status or "").upper()
        if status not in self.statuses:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(self.statuses)}")
        if status in self.closed_statuses and self.applications.has_active_applications(source_id=source_id):
            raise DependencyExistsError(
                f"Cannot set {self.label.lower()} to {status}: it has active applications"
            )
        source.status = status
        self.db.flush()
        return source

    def delete(self, source_id: int):
        """Cancel; rows are kept"""
        source = self._get_or_404(source_id)
        if self.applications.has_active_applications(source_id=source_id):
            raise DependencyExistsError(f"Cannot delete {self.label.lower()} with active applications")
        source.status = self.cancelled_status
        self.db.flush()
        return source

    def get_applications(self, source_id: int) -> List:
        self._get_or_404(source_id)
        return self.applications.get_applications(source_id)

    def apply(self, source_id: int, application_data, user_id: int = None):
        return self.applications.apply(
            source_id,
            application_data.invoice_id,
            application_data.applied_amount,
            applied_date=application_data.applied_date,
            notes=application_data.notes,
            user_id=user_id
        )

    def reverse(self, source_id: int, application_id: int, user_id: int = None):
        return self.applications.reverse(application_id, user_id=user_id, source_id=source_id)
