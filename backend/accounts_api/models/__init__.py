"""
SQLAlchemy Models for the Accounts API
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import (
    Column, Integer, BigInteger, String, Text, Boolean, DateTime, Date, Numeric,
    ForeignKey, Index, UniqueConstraint
)
from sqlalchemy.orm import relationship

from accounts_api.core.database import Base


# ==================== STATUS CONSTANTS ====================

class Role:
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"

    ALL = [ADMIN, MANAGER, USER]


class RecordStatus:
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class InvoiceStatus:
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"
    VOID = "VOID"

    ALL = [DRAFT, PENDING, APPROVED, PAID, CANCELLED, VOID]
    CLOSED = [CANCELLED, VOID]


class ApprovalStatus:
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    ALL = [PENDING, APPROVED, REJECTED]


class PaymentStatus:
    DRAFT = "DRAFT"
    APPROVED = "APPROVED"
    PROCESSED = "PROCESSED"
    CLEARED = "CLEARED"
    CANCELLED = "CANCELLED"
    VOID = "VOID"

    ALL = [DRAFT, APPROVED, PROCESSED, CLEARED, CANCELLED, VOID]
    CLOSED = [CANCELLED, VOID]


class ReceiptStatus:
    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"
    CLEARED = "CLEARED"
    REVERSED = "REVERSED"
    CANCELLED = "CANCELLED"

    ALL = [DRAFT, CONFIRMED, CLEARED, REVERSED, CANCELLED]
    CLOSED = [REVERSED, CANCELLED]


class ApplicationStatus:
    ACTIVE = "ACTIVE"
    REVERSED = "REVERSED"


class JournalStatus:
    DRAFT = "draft"
    POSTED = "posted"
    VOID = "void"


class AgreementStatus:
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"

    ALL = [DRAFT, ACTIVE, EXPIRED, CANCELLED]


class RequisitionStatus:
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    CLOSED = "CLOSED"

    ALL = [DRAFT, SUBMITTED, APPROVED, REJECTED, CANCELLED, CLOSED]


class PurchaseOrderStatus:
    DRAFT = "DRAFT"
    APPROVED = "APPROVED"
    RELEASED = "RELEASED"
    RECEIVED = "RECEIVED"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"

    ALL = [DRAFT, APPROVED, RELEASED, RECEIVED, CLOSED, CANCELLED]


class GoodsReceiptStatus:
    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"

    ALL = [DRAFT, CONFIRMED, CANCELLED]


class AccountType:
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"

    ALL = [ASSET, LIABILITY, EQUITY, REVENUE, EXPENSE]


# ==================== USERS & AUDIT ====================

class User(Base):
    """User account"""
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    company = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default=Role.USER)
    is_active = Column(Boolean, default=True)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class AuditLog(Base):
    """Audit trail for sensitive operations"""
    __tablename__ = 'audit_logs'

    id = Column(Integer, primary_key=True)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)

    user_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    email = Column(String(255), nullable=True)  # kept in case the user is deleted
    ip_address = Column(String(50), nullable=True)
    user_agent = Column(String(500), nullable=True)

    action = Column(String(50), nullable=False)
    resource_type = Column(String(100), nullable=False)
    resource_id = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)

    status = Column(String(20), default='success')  # success, failure
    error_message = Column(Text, nullable=True)

    __table_args__ = (
        Index('ix_audit_logs_action_timestamp', 'action', 'timestamp'),
    )


# ==================== SEQUENCES ====================

class Sequence(Base):
    """Named counter; ``current_value`` is the next value to be issued"""
    __tablename__ = 'ar_sequences'

    sequence_name = Column(String(100), primary_key=True)
    current_value = Column(BigInteger, nullable=False, default=1)
    increment_by = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ==================== COMPANIES ====================

class Company(Base):
    __tablename__ = 'companies'

    company_id = Column(Integer, primary_key=True, autoincrement=False)
    company_code = Column(String(20), nullable=False, unique=True)
    name = Column(String(255), nullable=False, unique=True)
    legal_name = Column(String(255), nullable=True)
    registration_number = Column(String(100), nullable=True)
    tax_id = Column(String(50), nullable=True)
    country = Column(String(100), nullable=True)
    currency_code = Column(String(3), default='USD')
    address = Column(Text, nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    status = Column(String(20), default=RecordStatus.ACTIVE)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    locations = relationship("CompanyLocation", back_populates="company")


class CompanyLocation(Base):
    __tablename__ = 'company_locations'
    __table_args__ = (
        UniqueConstraint('company_id', 'location_code', name='uq_company_location_code'),
    )

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey('companies.company_id'), nullable=False)
    location_code = Column(String(20), nullable=False)
    location_name = Column(String(255), nullable=False)
    location_type = Column(String(30), default='WAREHOUSE')
    address_line1 = Column(String(255), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    country = Column(String(100), nullable=True)
    is_primary = Column(Boolean, default=False)
    status = Column(String(20), default=RecordStatus.ACTIVE)  # ACTIVE, INACTIVE, SUSPENDED
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    company = relationship("Company", back_populates="locations")

    @property
    def company_name(self):
        return self.company.name if self.company else None


# ==================== GENERAL LEDGER ====================

class ChartOfAccount(Base):
    """Chart of accounts entry"""
    __tablename__ = 'chart_of_accounts'

    id = Column(Integer, primary_key=True)
    account_code = Column(String(20), nullable=False, unique=True)
    account_name = Column(String(255), nullable=False)
    account_type = Column(String(20), nullable=False)
    parent_id = Column(Integer, ForeignKey('chart_of_accounts.id', ondelete='SET NULL'), nullable=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    parent = relationship("ChartOfAccount", remote_side=[id])


class JournalEntry(Base):
    """Manual journal entry header"""
    __tablename__ = 'journal_entries'

    id = Column(Integer, primary_key=True, autoincrement=False)
    entry_id = Column(String(50), nullable=False, unique=True)
    entry_date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    reference = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default=JournalStatus.DRAFT)
    total_debit = Column(Numeric(15, 2), default=Decimal("0.00"))
    total_credit = Column(Numeric(15, 2), default=Decimal("0.00"))
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    posted_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    posted_at = Column(DateTime, nullable=True)
    voided_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    voided_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    line_items = relationship(
        "JournalEntryLineItem",
        back_populates="journal_entry",
        order_by="JournalEntryLineItem.line_number"
    )


class JournalEntryLineItem(Base):
    __tablename__ = 'journal_entry_line_items'

    id = Column(Integer, primary_key=True, autoincrement=False)
    journal_entry_id = Column(Integer, ForeignKey('journal_entries.id', ondelete='CASCADE'), nullable=False)
    line_number = Column(Integer, nullable=False)
    account_id = Column(Integer, ForeignKey('chart_of_accounts.id'), nullable=False)
    description = Column(Text, nullable=True)
    debit_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    credit_amount = Column(Numeric(15, 2), default=Decimal("0.00"))

    journal_entry = relationship("JournalEntry", back_populates="line_items")
    account = relationship("ChartOfAccount")

    @property
    def account_code(self):
        return self.account.account_code if self.account else None

    @property
    def account_name(self):
        return self.account.account_name if self.account else None


# ==================== PARTIES ====================

class Party(Base):
    """Customer/supplier master record"""
    __tablename__ = 'parties'

    party_id = Column(Integer, primary_key=True, autoincrement=False)
    party_number = Column(String(30), nullable=False, unique=True)
    party_name = Column(String(255), nullable=False)
    party_type = Column(String(20), nullable=False, default='ORGANIZATION')  # ORGANIZATION, PERSON
    tax_id = Column(String(50), nullable=True)
    website = Column(String(255), nullable=True)
    industry = Column(String(100), nullable=True)
    status = Column(String(20), default=RecordStatus.ACTIVE)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    sites = relationship("PartySite", back_populates="party", order_by="PartySite.site_id")
    contact_points = relationship("PartyContactPoint", back_populates="party", order_by="PartyContactPoint.contact_point_id")


class PartySite(Base):
    __tablename__ = 'party_sites'

    site_id = Column(Integer, primary_key=True, autoincrement=False)
    party_id = Column(Integer, ForeignKey('parties.party_id'), nullable=False)
    site_name = Column(String(255), nullable=False)
    site_type = Column(String(20), default='BILL_TO')  # BILL_TO, SHIP_TO, BOTH
    address_line1 = Column(String(255), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    country = Column(String(100), nullable=True)
    is_primary = Column(Boolean, default=False)
    status = Column(String(20), default=RecordStatus.ACTIVE)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    party = relationship("Party", back_populates="sites")


class PartyContactPoint(Base):
    __tablename__ = 'party_contact_points'

    contact_point_id = Column(Integer, primary_key=True, autoincrement=False)
    party_id = Column(Integer, ForeignKey('parties.party_id'), nullable=False)
    contact_point_type = Column(String(20), nullable=False)  # EMAIL, PHONE, FAX, MOBILE
    contact_point_value = Column(String(255), nullable=False)
    contact_person_name = Column(String(255), nullable=True)
    purpose = Column(String(50), nullable=True)
    is_primary = Column(Boolean, default=False)
    status = Column(String(20), default=RecordStatus.ACTIVE)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    party = relationship("Party", back_populates="contact_points")


# ==================== ACCOUNTS PAYABLE ====================

class Supplier(Base):
    __tablename__ = 'ap_suppliers'

    supplier_id = Column(Integer, primary_key=True, autoincrement=False)
    supplier_number = Column(String(30), nullable=False, unique=True)
    supplier_name = Column(String(255), nullable=False, unique=True)
    supplier_type = Column(String(30), default='VENDOR')
    party_id = Column(Integer, ForeignKey('parties.party_id', ondelete='SET NULL'), nullable=True)
    tax_id = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    payment_terms_id = Column(Integer, default=30)  # net days
    currency_code = Column(String(3), default='USD')
    credit_limit = Column(Numeric(15, 2), default=Decimal("0.00"))
    hold_flag = Column(Boolean, default=False)
    status = Column(String(20), default=RecordStatus.ACTIVE)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    sites = relationship("SupplierSite", back_populates="supplier", order_by="SupplierSite.site_id")
    invoices = relationship("APInvoice", back_populates="supplier")


class SupplierSite(Base):
    __tablename__ = 'ap_supplier_sites'

    site_id = Column(Integer, primary_key=True, autoincrement=False)
    supplier_id = Column(Integer, ForeignKey('ap_suppliers.supplier_id'), nullable=False)
    site_name = Column(String(255), nullable=False)
    site_type = Column(String(20), default='INVOICING')  # INVOICING, PURCHASING, PAYMENT, BOTH
    address_line1 = Column(String(255), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    country = Column(String(100), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    is_primary = Column(Boolean, default=False)
    status = Column(String(20), default=RecordStatus.ACTIVE)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    supplier = relationship("Supplier", back_populates="sites")


class APInvoice(Base):
    __tablename__ = 'ap_invoices'

    invoice_id = Column(Integer, primary_key=True, autoincrement=False)
    invoice_number = Column(String(50), nullable=False, unique=True)
    supplier_id = Column(Integer, ForeignKey('ap_suppliers.supplier_id'), nullable=False)
    bill_to_site_id = Column(Integer, ForeignKey('ap_supplier_sites.site_id', ondelete='SET NULL'), nullable=True)
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    payment_terms_id = Column(Integer, default=30)
    currency_code = Column(String(3), default='USD')
    exchange_rate = Column(Numeric(15, 6), default=Decimal("1"))
    subtotal = Column(Numeric(15, 2), default=Decimal("0.00"))
    tax_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    total_amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    amount_paid = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    status = Column(String(20), nullable=False, default=InvoiceStatus.DRAFT)
    approval_status = Column(String(20), default=ApprovalStatus.PENDING)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    supplier = relationship("Supplier", back_populates="invoices")
    lines = relationship("APInvoiceLine", back_populates="invoice", order_by="APInvoiceLine.line_number")
    applications = relationship("APPaymentApplication", back_populates="invoice")

    @property
    def amount_due(self) -> Decimal:
        return (self.total_amount or Decimal("0")) - (self.amount_paid or Decimal("0"))

    @property
    def supplier_name(self):
        return self.supplier.supplier_name if self.supplier else None


class APInvoiceLine(Base):
    __tablename__ = 'ap_invoice_lines'

    line_id = Column(Integer, primary_key=True, autoincrement=False)
    invoice_id = Column(Integer, ForeignKey('ap_invoices.invoice_id'), nullable=False)
    line_number = Column(Integer, nullable=False)
    item_code = Column(String(50), nullable=True)
    item_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    quantity = Column(Numeric(15, 4), default=Decimal("1"))
    unit_price = Column(Numeric(15, 2), default=Decimal("0.00"))
    line_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    tax_rate = Column(Numeric(7, 4), default=Decimal("0"))
    tax_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    total_line_amount = Column(Numeric(15, 2), default=Decimal("0.00"))

    invoice = relationship("APInvoice", back_populates="lines")


class APPayment(Base):
    __tablename__ = 'ap_payments'

    payment_id = Column(Integer, primary_key=True, autoincrement=False)
    payment_number = Column(String(50), nullable=False, unique=True)
    supplier_id = Column(Integer, ForeignKey('ap_suppliers.supplier_id'), nullable=False)
    payment_date = Column(Date, nullable=False)
    currency_code = Column(String(3), default='USD')
    exchange_rate = Column(Numeric(15, 6), default=Decimal("1"))
    total_amount = Column(Numeric(15, 2), nullable=False)
    amount_applied = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    payment_method = Column(String(30), default='CHECK')
    bank_account = Column(String(100), nullable=True)
    reference_number = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default=PaymentStatus.DRAFT)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    supplier = relationship("Supplier")
    applications = relationship("APPaymentApplication", back_populates="payment", order_by="APPaymentApplication.application_id")

    @property
    def unapplied_amount(self) -> Decimal:
        return (self.total_amount or Decimal("0")) - (self.amount_applied or Decimal("0"))

    @property
    def supplier_name(self):
        return self.supplier.supplier_name if self.supplier else None


class APPaymentApplication(Base):
    __tablename__ = 'ap_payment_applications'

    application_id = Column(Integer, primary_key=True, autoincrement=False)
    payment_id = Column(Integer, ForeignKey('ap_payments.payment_id'), nullable=False)
    invoice_id = Column(Integer, ForeignKey('ap_invoices.invoice_id'), nullable=False)
    applied_amount = Column(Numeric(15, 2), nullable=False)
    applied_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=ApplicationStatus.ACTIVE)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    reversed_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    reversed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    payment = relationship("APPayment", back_populates="applications")
    invoice = relationship("APInvoice", back_populates="applications")

    @property
    def invoice_number(self):
        return self.invoice.invoice_number if self.invoice else None


# ==================== ACCOUNTS RECEIVABLE ====================

class ARInvoice(Base):
    __tablename__ = 'ar_invoices'

    invoice_id = Column(Integer, primary_key=True, autoincrement=False)
    invoice_number = Column(String(50), nullable=False, unique=True)
    customer_id = Column(Integer, ForeignKey('parties.party_id'), nullable=False)
    bill_to_site_id = Column(Integer, ForeignKey('party_sites.site_id', ondelete='SET NULL'), nullable=True)
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    payment_terms_id = Column(Integer, default=30)
    currency_code = Column(String(3), default='USD')
    exchange_rate = Column(Numeric(15, 6), default=Decimal("1"))
    subtotal = Column(Numeric(15, 2), default=Decimal("0.00"))
    tax_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    total_amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    amount_paid = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    status = Column(String(20), nullable=False, default=InvoiceStatus.DRAFT)
    approval_status = Column(String(20), default=ApprovalStatus.PENDING)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = relationship("Party")
    lines = relationship("ARInvoiceLine", back_populates="invoice", order_by="ARInvoiceLine.line_number")
    applications = relationship("ARReceiptApplication", back_populates="invoice")

    @property
    def amount_due(self) -> Decimal:
        return (self.total_amount or Decimal("0")) - (self.amount_paid or Decimal("0"))

    @property
    def customer_name(self):
        return self.customer.party_name if self.customer else None


class ARInvoiceLine(Base):
    __tablename__ = 'ar_invoice_lines'

    line_id = Column(Integer, primary_key=True, autoincrement=False)
    invoice_id = Column(Integer, ForeignKey('ar_invoices.invoice_id'), nullable=False)
    line_number = Column(Integer, nullable=False)
    item_code = Column(String(50), nullable=True)
    item_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    quantity = Column(Numeric(15, 4), default=Decimal("1"))
    unit_price = Column(Numeric(15, 2), default=Decimal("0.00"))
    line_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    tax_rate = Column(Numeric(7, 4), default=Decimal("0"))
    tax_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    total_line_amount = Column(Numeric(15, 2), default=Decimal("0.00"))

    invoice = relationship("ARInvoice", back_populates="lines")


class ARReceipt(Base):
    __tablename__ = 'ar_receipts'

    receipt_id = Column(Integer, primary_key=True, autoincrement=False)
    receipt_number = Column(String(50), nullable=False, unique=True)
    customer_id = Column(Integer, ForeignKey('parties.party_id'), nullable=False)
    receipt_date = Column(Date, nullable=False)
    currency_code = Column(String(3), default='USD')
    exchange_rate = Column(Numeric(15, 6), default=Decimal("1"))
    total_amount = Column(Numeric(15, 2), nullable=False)
    amount_applied = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    payment_method = Column(String(30), default='BANK_TRANSFER')
    bank_account = Column(String(100), nullable=True)
    reference_number = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default=ReceiptStatus.DRAFT)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = relationship("Party")
    applications = relationship("ARReceiptApplication", back_populates="receipt", order_by="ARReceiptApplication.application_id")

    @property
    def unapplied_amount(self) -> Decimal:
        return (self.total_amount or Decimal("0")) - (self.amount_applied or Decimal("0"))

    @property
    def customer_name(self):
        return self.customer.party_name if self.customer else None


class ARReceiptApplication(Base):
    __tablename__ = 'ar_receipt_applications'

    application_id = Column(Integer, primary_key=True, autoincrement=False)
    receipt_id = Column(Integer, ForeignKey('ar_receipts.receipt_id'), nullable=False)
    invoice_id = Column(Integer, ForeignKey('ar_invoices.invoice_id'), nullable=False)
    applied_amount = Column(Numeric(15, 2), nullable=False)
    applied_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=ApplicationStatus.ACTIVE)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    reversed_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    reversed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    receipt = relationship("ARReceipt", back_populates="applications")
    invoice = relationship("ARInvoice", back_populates="applications")

    @property
    def invoice_number(self):
        return self.invoice.invoice_number if self.invoice else None


# ==================== PROCUREMENT ====================

class PurchaseAgreement(Base):
    __tablename__ = 'po_agreements'

    agreement_id = Column(Integer, primary_key=True, autoincrement=False)
    agreement_number = Column(String(50), nullable=False, unique=True)
    agreement_type = Column(String(20), default='BLANKET')  # BLANKET, CONTRACT, PLANNED
    supplier_id = Column(Integer, ForeignKey('ap_suppliers.supplier_id'), nullable=False)
    supplier_site_id = Column(Integer, ForeignKey('ap_supplier_sites.site_id', ondelete='SET NULL'), nullable=True)
    buyer_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    currency_code = Column(String(3), default='USD')
    total_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    payment_terms_id = Column(Integer, default=30)
    status = Column(String(20), nullable=False, default=AgreementStatus.DRAFT)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    supplier = relationship("Supplier")
    lines = relationship("PurchaseAgreementLine", back_populates="agreement", order_by="PurchaseAgreementLine.line_number")

    @property
    def supplier_name(self):
        return self.supplier.supplier_name if self.supplier else None


class PurchaseAgreementLine(Base):
    __tablename__ = 'po_agreement_lines'

    line_id = Column(Integer, primary_key=True, autoincrement=False)
    agreement_id = Column(Integer, ForeignKey('po_agreements.agreement_id'), nullable=False)
    line_number = Column(Integer, nullable=False)
    item_code = Column(String(50), nullable=True)
    item_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    uom = Column(String(20), default='EACH')
    quantity = Column(Numeric(15, 4), default=Decimal("1"))
    unit_price = Column(Numeric(15, 2), default=Decimal("0.00"))
    line_amount = Column(Numeric(15, 2), default=Decimal("0.00"))

    agreement = relationship("PurchaseAgreement", back_populates="lines")


class PurchaseRequisition(Base):
    __tablename__ = 'po_requisitions'

    requisition_id = Column(Integer, primary_key=True, autoincrement=False)
    requisition_number = Column(String(50), nullable=False, unique=True)
    requester_id = Column(Integer, ForeignKey('users.id'), nullable=False)
    buyer_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    department_id = Column(Integer, nullable=True)
    need_by_date = Column(Date, nullable=True)
    urgency = Column(String(20), default='MEDIUM')  # LOW, MEDIUM, HIGH, URGENT
    currency_code = Column(String(3), default='USD')
    exchange_rate = Column(Numeric(15, 6), default=Decimal("1"))
    total_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    description = Column(Text, nullable=True)
    justification = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=RequisitionStatus.DRAFT)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    requester = relationship("User", foreign_keys=[requester_id])
    buyer = relationship("User", foreign_keys=[buyer_id])
    lines = relationship(
        "PurchaseRequisitionLine", back_populates="requisition", order_by="PurchaseRequisitionLine.line_number"
    )

    @property
    def requester_name(self):
        return self.requester.full_name if self.requester else None

    @property
    def buyer_name(self):
        return self.buyer.full_name if self.buyer else None


class PurchaseRequisitionLine(Base):
    __tablename__ = 'po_requisition_lines'

    line_id = Column(Integer, primary_key=True, autoincrement=False)
    requisition_id = Column(Integer, ForeignKey('po_requisitions.requisition_id'), nullable=False)
    line_number = Column(Integer, nullable=False)
    item_code = Column(String(50), nullable=True)
    item_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)
    uom = Column(String(20), default='EACH')
    quantity = Column(Numeric(15, 4), default=Decimal("1"))
    unit_price = Column(Numeric(15, 2), default=Decimal("0.00"))
    line_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    need_by_date = Column(Date, nullable=True)
    suggested_supplier = Column(String(255), nullable=True)
    suggested_supplier_id = Column(Integer, ForeignKey('ap_suppliers.supplier_id', ondelete='SET NULL'), nullable=True)
    notes = Column(Text, nullable=True)

    requisition = relationship("PurchaseRequisition", back_populates="lines")


class PurchaseOrder(Base):
    __tablename__ = 'po_headers'

    header_id = Column(Integer, primary_key=True, autoincrement=False)
    po_number = Column(String(50), nullable=False, unique=True)
    po_type = Column(String(20), default='STANDARD')  # STANDARD, BLANKET_RELEASE, CONTRACT_RELEASE
    supplier_id = Column(Integer, ForeignKey('ap_suppliers.supplier_id'), nullable=False)
    supplier_site_id = Column(Integer, ForeignKey('ap_supplier_sites.site_id', ondelete='SET NULL'), nullable=True)
    buyer_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    requisition_id = Column(Integer, ForeignKey('po_requisitions.requisition_id'), nullable=True)
    agreement_id = Column(Integer, ForeignKey('po_agreements.agreement_id'), nullable=True)
    po_date = Column(Date, nullable=False)
    need_by_date = Column(Date, nullable=True)
    currency_code = Column(String(3), default='USD')
    exchange_rate = Column(Numeric(15, 6), default=Decimal("1"))
    subtotal = Column(Numeric(15, 2), default=Decimal("0.00"))
    tax_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    total_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    amount_received = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    payment_terms_id = Column(Integer, default=30)
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=PurchaseOrderStatus.DRAFT)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    supplier = relationship("Supplier")
    requisition = relationship("PurchaseRequisition")
    agreement = relationship("PurchaseAgreement")
    lines = relationship("PurchaseOrderLine", back_populates="order", order_by="PurchaseOrderLine.line_number")

    @property
    def supplier_name(self):
        return self.supplier.supplier_name if self.supplier else None

    @property
    def requisition_number(self):
        return self.requisition.requisition_number if self.requisition else None

    @property
    def agreement_number(self):
        return self.agreement.agreement_number if self.agreement else None


class PurchaseOrderLine(Base):
    __tablename__ = 'po_lines'

    line_id = Column(Integer, primary_key=True, autoincrement=False)
    header_id = Column(Integer, ForeignKey('po_headers.header_id'), nullable=False)
    line_number = Column(Integer, nullable=False)
    item_code = Column(String(50), nullable=True)
    item_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)
    uom = Column(String(20), default='EACH')
    quantity = Column(Numeric(15, 4), default=Decimal("1"))
    quantity_received = Column(Numeric(15, 4), nullable=False, default=Decimal("0"))
    unit_price = Column(Numeric(15, 2), default=Decimal("0.00"))
    line_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    tax_rate = Column(Numeric(7, 4), default=Decimal("0"))
    tax_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    total_line_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    need_by_date = Column(Date, nullable=True)
    promised_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    order = relationship("PurchaseOrder", back_populates="lines")

    @property
    def quantity_outstanding(self) -> Decimal:
        return (self.quantity or Decimal("0")) - (self.quantity_received or Decimal("0"))


class GoodsReceipt(Base):
    """Goods receipt note against one purchase order"""
    __tablename__ = 'po_receipts'

    receipt_id = Column(Integer, primary_key=True, autoincrement=False)
    receipt_number = Column(String(50), nullable=False, unique=True)
    header_id = Column(Integer, ForeignKey('po_headers.header_id'), nullable=False)
    receipt_date = Column(Date, nullable=False)
    receipt_type = Column(String(20), default='STANDARD')  # STANDARD, RETURN, CORRECTION
    currency_code = Column(String(3), default='USD')
    exchange_rate = Column(Numeric(15, 6), default=Decimal("1"))
    total_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=GoodsReceiptStatus.DRAFT)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    order = relationship("PurchaseOrder")
    lines = relationship("GoodsReceiptLine", back_populates="receipt", order_by="GoodsReceiptLine.line_number")

    @property
    def po_number(self):
        return self.order.po_number if self.order else None

    @property
    def supplier_name(self):
        return self.order.supplier_name if self.order else None


class GoodsReceiptLine(Base):
    __tablename__ = 'po_receipt_lines'

    receipt_line_id = Column(Integer, primary_key=True, autoincrement=False)
    receipt_id = Column(Integer, ForeignKey('po_receipts.receipt_id'), nullable=False)
    line_id = Column(Integer, ForeignKey('po_lines.line_id'), nullable=False)
    line_number = Column(Integer, nullable=False)
    item_code = Column(String(50), nullable=True)
    item_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    uom = Column(String(20), nullable=True)
    quantity_ordered = Column(Numeric(15, 4), default=Decimal("0"))
    quantity_received = Column(Numeric(15, 4), nullable=False, default=Decimal("0"))
    quantity_accepted = Column(Numeric(15, 4), default=Decimal("0"))
    quantity_rejected = Column(Numeric(15, 4), default=Decimal("0"))
    unit_price = Column(Numeric(15, 2), default=Decimal("0.00"))
    line_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    lot_number = Column(String(100), nullable=True)
    serial_number = Column(String(100), nullable=True)
    expiration_date = Column(Date, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    receipt = relationship("GoodsReceipt", back_populates="lines")


# ==================== TAX CONFIGURATION ====================

class TaxRegime(Base):
    __tablename__ = 'tax_regimes'

    id = Column(Integer, primary_key=True)
    regime_code = Column(String(30), nullable=False, unique=True)
    regime_name = Column(String(255), nullable=False)
    regime_type = Column(String(30), nullable=False)  # TRANSACTION_TAX, WITHHOLDING_TAX
    tax_authority = Column(String(255), nullable=True)
    effective_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    status = Column(String(20), default=RecordStatus.ACTIVE)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tax_types = relationship("TaxType", back_populates="regime")


class TaxType(Base):
    __tablename__ = 'tax_types'

    id = Column(Integer, primary_key=True)
    regime_id = Column(Integer, ForeignKey('tax_regimes.id'), nullable=True)
    tax_type_code = Column(String(30), nullable=False, unique=True)
    tax_type_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_withholding_tax = Column(Boolean, default=False)
    is_self_assessed = Column(Boolean, default=False)
    is_recoverable = Column(Boolean, default=False)
    status = Column(String(20), default=RecordStatus.ACTIVE)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    rates = relationship("TaxRate", back_populates="tax_type")
    regime = relationship("TaxRegime", back_populates="tax_types")

    @property
    def regime_code(self):
        return self.regime.regime_code if self.regime else None


class TaxRate(Base):
    __tablename__ = 'tax_rates'

    id = Column(Integer, primary_key=True)
    rate_code = Column(String(30), nullable=False, unique=True)
    tax_type_id = Column(Integer, ForeignKey('tax_types.id'), nullable=False)
    tax_percentage = Column(Numeric(7, 4), nullable=False)
    effective_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    is_recoverable = Column(Boolean, default=False)
    is_inclusive = Column(Boolean, default=False)
    is_self_assessable = Column(Boolean, default=False)
    status = Column(String(20), default=RecordStatus.ACTIVE)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tax_type = relationship("TaxType", back_populates="rates")

    @property
    def tax_type_name(self):
        return self.tax_type.tax_type_name if self.tax_type else None


# ==================== ASSETS & INVENTORY ====================

class Asset(Base):
    """Fixed asset register entry"""
    __tablename__ = 'assets'

    id = Column(Integer, primary_key=True)
    asset_id = Column(String(50), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)
    sub_category = Column(String(100), nullable=True)
    value = Column(Numeric(15, 2), default=Decimal("0.00"))
    purchase_date = Column(Date, nullable=True)
    location = Column(String(255), nullable=True)
    department = Column(String(100), nullable=True)
    depreciation_method = Column(String(50), nullable=True)
    useful_life = Column(Integer, nullable=True)
    salvage_value = Column(Numeric(15, 2), default=Decimal("0.00"))
    vendor = Column(String(255), nullable=True)
    serial_number = Column(String(100), nullable=True)
    warranty_expiry = Column(Date, nullable=True)
    condition = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
    insurance_value = Column(Numeric(15, 2), nullable=True)
    maintenance_schedule = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class InventoryItem(Base):
    __tablename__ = 'inventory_items'

    id = Column(Integer, primary_key=True)
    item_code = Column(String(50), nullable=False, unique=True)
    item_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)
    quantity = Column(Numeric(15, 4), default=Decimal("0"))
    unit_price = Column(Numeric(15, 2), default=Decimal("0.00"))
    location = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class BinCard(Base):
    """Stock movement card for a bin location"""
    __tablename__ = 'bin_cards'

    id = Column(Integer, primary_key=True)
    item_code = Column(String(50), nullable=False)
    item_name = Column(String(255), nullable=False)
    bin_location = Column(String(100), nullable=True)
    warehouse = Column(String(100), nullable=True)
    unit_of_measure = Column(String(20), nullable=True)
    current_stock = Column(Numeric(15, 4), default=Decimal("0"))
    minimum_level = Column(Numeric(15, 4), default=Decimal("0"))
    reorder_level = Column(Numeric(15, 4), default=Decimal("0"))
    maximum_level = Column(Numeric(15, 4), default=Decimal("0"))
    transaction_type = Column(String(20), nullable=False)  # RECEIPT, ISSUE, ADJUSTMENT, TRANSFER
    transaction_quantity = Column(Numeric(15, 4), default=Decimal("0"))
    reference_number = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index('ix_bin_cards_item_code', 'item_code'),
    )
