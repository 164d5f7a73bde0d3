"""
Pydantic Schemas for API Validation
"""
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import List, Optional
from datetime import datetime, date
from decimal import Decimal


# ==================== COMMON ====================

class MessageResponse(BaseModel):
    message: str
    success: bool = True


class StatusUpdate(BaseModel):
    status: Optional[str] = None
    approval_status: Optional[str] = None


# ==================== AUTH SCHEMAS ====================

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    token: str
    user: UserResponse


class ProfileResponse(UserResponse):
    phone: Optional[str] = None
    company: Optional[str] = None


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=255)


# ==================== SEQUENCE SCHEMAS ====================

class SequenceResponse(BaseModel):
    sequence_name: str
    current_value: int
    increment_by: int
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SequenceReset(BaseModel):
    value: int = Field(default=1, ge=1)


# ==================== COMPANY SCHEMAS ====================

class CompanyBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    legal_name: Optional[str] = None
    registration_number: Optional[str] = None
    tax_id: Optional[str] = None
    country: Optional[str] = None
    currency_code: str = Field(default="USD", max_length=3)
    address: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None


class CompanyCreate(CompanyBase):
    pass


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    legal_name: Optional[str] = None
    registration_number: Optional[str] = None
    tax_id: Optional[str] = None
    country: Optional[str] = None
    currency_code: Optional[str] = Field(None, max_length=3)
    address: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    status: Optional[str] = None


class CompanyResponse(CompanyBase):
    company_id: int
    company_code: str
    email: Optional[str] = None
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LocationBase(BaseModel):
    location_name: str = Field(..., min_length=1, max_length=255)
    location_type: str = "WAREHOUSE"
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    is_primary: bool = False
    status: str = "ACTIVE"


class LocationCreate(LocationBase):
    company_id: int
    location_code: Optional[str] = Field(None, max_length=20)


class LocationUpdate(BaseModel):
    location_code: Optional[str] = Field(None, min_length=1, max_length=20)
    location_name: Optional[str] = Field(None, min_length=1, max_length=255)
    location_type: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    is_primary: Optional[bool] = None
    status: Optional[str] = None


class LocationResponse(LocationBase):
    id: int
    company_id: int
    company_name: Optional[str] = None
    location_code: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LocationStats(BaseModel):
    total_locations: int
    active_locations: int
    primary_locations: int
    location_types: int
    countries: int


# ==================== CHART OF ACCOUNTS SCHEMAS ====================

class AccountBase(BaseModel):
    account_code: str = Field(..., min_length=1, max_length=20)
    account_name: str = Field(..., min_length=1, max_length=255)
    account_type: str
    parent_id: Optional[int] = None
    description: Optional[str] = None


class AccountCreate(AccountBase):
    pass


class AccountUpdate(BaseModel):
    account_code: Optional[str] = Field(None, min_length=1, max_length=20)
    account_name: Optional[str] = Field(None, min_length=1, max_length=255)
    account_type: Optional[str] = None
    parent_id: Optional[int] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class AccountResponse(AccountBase):
    id: int
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ==================== JOURNAL ENTRY SCHEMAS ====================

class JournalLineCreate(BaseModel):
    account_id: int
    description: Optional[str] = None
    debit_amount: Decimal = Field(default=Decimal("0.00"), ge=0)
    credit_amount: Decimal = Field(default=Decimal("0.00"), ge=0)


class JournalEntryCreate(BaseModel):
    entry_id: Optional[str] = Field(None, max_length=50)
    entry_date: date
    description: Optional[str] = None
    reference: Optional[str] = None
    status: str = "draft"
    line_items: List[JournalLineCreate] = Field(..., min_length=1)


class JournalEntryUpdate(BaseModel):
    entry_date: Optional[date] = None
    description: Optional[str] = None
    reference: Optional[str] = None
    line_items: Optional[List[JournalLineCreate]] = Field(None, min_length=1)


class JournalLineResponse(BaseModel):
    id: int
    line_number: int
    account_id: int
    account_code: Optional[str] = None
    account_name: Optional[str] = None
    description: Optional[str] = None
    debit_amount: Decimal
    credit_amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class JournalEntryResponse(BaseModel):
    id: int
    entry_id: str
    entry_date: date
    description: Optional[str] = None
    reference: Optional[str] = None
    status: str
    total_debit: Decimal
    total_credit: Decimal
    created_by: Optional[int] = None
    posted_by: Optional[int] = None
    posted_at: Optional[datetime] = None
    voided_by: Optional[int] = None
    voided_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class JournalEntryDetail(JournalEntryResponse):
    line_items: List[JournalLineResponse] = []


# ==================== PARTY SCHEMAS ====================

class PartyBase(BaseModel):
    party_name: str = Field(..., min_length=1, max_length=255)
    party_type: str = "ORGANIZATION"
    tax_id: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None


class PartyCreate(PartyBase):
    status: str = "ACTIVE"


class PartyUpdate(BaseModel):
    party_name: Optional[str] = Field(None, min_length=1, max_length=255)
    party_type: Optional[str] = None
    tax_id: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    status: Optional[str] = None


class PartyResponse(PartyBase):
    party_id: int
    party_number: str
    status: str
    created_at: datetime
    sites_count: Optional[int] = None
    contacts_count: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class PartySiteBase(BaseModel):
    site_name: str = Field(..., min_length=1, max_length=255)
    site_type: str = "BILL_TO"
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    is_primary: bool = False


class PartySiteCreate(PartySiteBase):
    pass


class PartySiteUpdate(BaseModel):
    site_name: Optional[str] = Field(None, min_length=1, max_length=255)
    site_type: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    is_primary: Optional[bool] = None
    status: Optional[str] = None


class PartySiteResponse(PartySiteBase):
    site_id: int
    party_id: int
    status: str

    model_config = ConfigDict(from_attributes=True)


class ContactPointBase(BaseModel):
    contact_point_type: str = Field(..., min_length=1, max_length=20)
    contact_point_value: str = Field(..., min_length=1, max_length=255)
    contact_person_name: Optional[str] = None
    purpose: Optional[str] = None
    is_primary: bool = False


class ContactPointCreate(ContactPointBase):
    pass


class ContactPointUpdate(BaseModel):
    contact_point_type: Optional[str] = Field(None, min_length=1, max_length=20)
    contact_point_value: Optional[str] = Field(None, min_length=1, max_length=255)
    contact_person_name: Optional[str] = None
    purpose: Optional[str] = None
    is_primary: Optional[bool] = None
    status: Optional[str] = None


class ContactPointResponse(ContactPointBase):
    contact_point_id: int
    party_id: int
    status: str

    model_config = ConfigDict(from_attributes=True)


class PartyDetail(PartyResponse):
    sites: List[PartySiteResponse] = []
    contact_points: List[ContactPointResponse] = []


# ==================== SUPPLIER SCHEMAS ====================

class SupplierSiteBase(BaseModel):
    site_name: str = Field(..., min_length=1, max_length=255)
    site_type: str = "INVOICING"
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    is_primary: bool = False


class SupplierSiteCreate(SupplierSiteBase):
    pass


class SupplierSiteResponse(SupplierSiteBase):
    site_id: int
    supplier_id: int
    status: str

    model_config = ConfigDict(from_attributes=True)


class SupplierBase(BaseModel):
    supplier_name: str = Field(..., min_length=1, max_length=255)
    supplier_type: str = "VENDOR"
    party_id: Optional[int] = None
    tax_id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    payment_terms_id: int = Field(default=30, ge=0)
    currency_code: str = Field(default="USD", max_length=3)
    credit_limit: Decimal = Field(default=Decimal("0.00"), ge=0)
    hold_flag: bool = False


class SupplierCreate(SupplierBase):
    sites: List[SupplierSiteCreate] = []


class SupplierUpdate(BaseModel):
    supplier_name: Optional[str] = Field(None, min_length=1, max_length=255)
    supplier_type: Optional[str] = None
    party_id: Optional[int] = None
    tax_id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    payment_terms_id: Optional[int] = Field(None, ge=0)
    currency_code: Optional[str] = Field(None, max_length=3)
    credit_limit: Optional[Decimal] = Field(None, ge=0)
    hold_flag: Optional[bool] = None
    status: Optional[str] = None


class SupplierResponse(SupplierBase):
    supplier_id: int
    supplier_number: str
    status: str
    created_at: datetime
    site_count: Optional[int] = None
    invoice_count: Optional[int] = None
    outstanding_amount: Optional[Decimal] = None

    model_config = ConfigDict(from_attributes=True)


class SupplierDetail(SupplierResponse):
    sites: List[SupplierSiteResponse] = []


# ==================== INVOICE SCHEMAS (AP & AR) ====================

class InvoiceLineCreate(BaseModel):
    item_code: Optional[str] = None
    item_name: Optional[str] = None
    description: Optional[str] = None
    quantity: Decimal = Field(default=Decimal("1"), gt=0)
    unit_price: Decimal = Field(..., ge=0)
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    tax_amount: Optional[Decimal] = Field(None, ge=0)


class InvoiceLineResponse(BaseModel):
    line_id: int
    invoice_id: int
    line_number: int
    item_code: Optional[str] = None
    item_name: Optional[str] = None
    description: Optional[str] = None
    quantity: Decimal
    unit_price: Decimal
    line_amount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total_line_amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class InvoiceHeaderBase(BaseModel):
    invoice_number: Optional[str] = Field(None, max_length=50)
    bill_to_site_id: Optional[int] = None
    invoice_date: date
    due_date: Optional[date] = None
    payment_terms_id: Optional[int] = Field(None, ge=0)
    currency_code: str = Field(default="USD", max_length=3)
    exchange_rate: Decimal = Field(default=Decimal("1"), gt=0)
    notes: Optional[str] = None


class APInvoiceCreate(InvoiceHeaderBase):
    supplier_id: int
    status: str = "DRAFT"
    lines: List[InvoiceLineCreate] = Field(..., min_length=1)


class ARInvoiceCreate(InvoiceHeaderBase):
    customer_id: int
    status: str = "DRAFT"
    lines: List[InvoiceLineCreate] = Field(..., min_length=1)


class InvoiceUpdate(BaseModel):
    invoice_number: Optional[str] = Field(None, max_length=50)
    bill_to_site_id: Optional[int] = None
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    payment_terms_id: Optional[int] = Field(None, ge=0)
    currency_code: Optional[str] = Field(None, max_length=3)
    exchange_rate: Optional[Decimal] = Field(None, gt=0)
    notes: Optional[str] = None
    lines: Optional[List[InvoiceLineCreate]] = Field(None, min_length=1)


class InvoiceResponseBase(BaseModel):
    invoice_id: int
    invoice_number: str
    bill_to_site_id: Optional[int] = None
    invoice_date: date
    due_date: date
    payment_terms_id: Optional[int] = None
    currency_code: str
    exchange_rate: Decimal
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    amount_paid: Decimal
    amount_due: Decimal
    status: str
    approval_status: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class APInvoiceResponse(InvoiceResponseBase):
    supplier_id: int
    supplier_name: Optional[str] = None


class ARInvoiceResponse(InvoiceResponseBase):
    customer_id: int
    customer_name: Optional[str] = None


class ApplicationResponse(BaseModel):
    application_id: int
    invoice_id: int
    invoice_number: Optional[str] = None
    applied_amount: Decimal
    applied_date: date
    status: str
    notes: Optional[str] = None
    reversed_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentApplicationResponse(ApplicationResponse):
    payment_id: int


class ReceiptApplicationResponse(ApplicationResponse):
    receipt_id: int


class APInvoiceDetail(APInvoiceResponse):
    lines: List[InvoiceLineResponse] = []
    applications: List[PaymentApplicationResponse] = []


class ARInvoiceDetail(ARInvoiceResponse):
    lines: List[InvoiceLineResponse] = []
    applications: List[ReceiptApplicationResponse] = []


# ==================== PAYMENT & RECEIPT SCHEMAS ====================

class ApplicationCreate(BaseModel):
    invoice_id: int
    applied_amount: Decimal = Field(..., gt=0)
    applied_date: Optional[date] = None
    notes: Optional[str] = None


class APPaymentCreate(BaseModel):
    payment_number: Optional[str] = Field(None, max_length=50)
    supplier_id: int
    payment_date: date
    currency_code: str = Field(default="USD", max_length=3)
    exchange_rate: Decimal = Field(default=Decimal("1"), gt=0)
    total_amount: Decimal = Field(..., gt=0)
    payment_method: str = "CHECK"
    bank_account: Optional[str] = None
    reference_number: Optional[str] = None
    status: str = "DRAFT"
    notes: Optional[str] = None
    applications: List[ApplicationCreate] = []


class ARReceiptCreate(BaseModel):
    receipt_number: Optional[str] = Field(None, max_length=50)
    customer_id: int
    receipt_date: date
    currency_code: str = Field(default="USD", max_length=3)
    exchange_rate: Decimal = Field(default=Decimal("1"), gt=0)
    total_amount: Decimal = Field(..., gt=0)
    payment_method: str = "BANK_TRANSFER"
    bank_account: Optional[str] = None
    reference_number: Optional[str] = None
    status: str = "DRAFT"
    notes: Optional[str] = None
    applications: List[ApplicationCreate] = []


class PaymentUpdate(BaseModel):
    payment_date: Optional[date] = None
    receipt_date: Optional[date] = None
    currency_code: Optional[str] = Field(None, max_length=3)
    exchange_rate: Optional[Decimal] = Field(None, gt=0)
    total_amount: Optional[Decimal] = Field(None, gt=0)
    payment_method: Optional[str] = None
    bank_account: Optional[str] = None
    reference_number: Optional[str] = None
    notes: Optional[str] = None


class APPaymentResponse(BaseModel):
    payment_id: int
    payment_number: str
    supplier_id: int
    supplier_name: Optional[str] = None
    payment_date: date
    currency_code: str
    exchange_rate: Decimal
    total_amount: Decimal
    amount_applied: Decimal
    unapplied_amount: Decimal
    payment_method: Optional[str] = None
    bank_account: Optional[str] = None
    reference_number: Optional[str] = None
    status: str
    notes: Optional[str] = None
    created_at: datetime
    application_count: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class APPaymentDetail(APPaymentResponse):
    applications: List[PaymentApplicationResponse] = []


class ARReceiptResponse(BaseModel):
    receipt_id: int
    receipt_number: str
    customer_id: int
    customer_name: Optional[str] = None
    receipt_date: date
    currency_code: str
    exchange_rate: Decimal
    total_amount: Decimal
    amount_applied: Decimal
    unapplied_amount: Decimal
    payment_method: Optional[str] = None
    bank_account: Optional[str] = None
    reference_number: Optional[str] = None
    status: str
    notes: Optional[str] = None
    created_at: datetime
    application_count: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class ARReceiptDetail(ARReceiptResponse):
    applications: List[ReceiptApplicationResponse] = []


# ==================== PROCUREMENT SCHEMAS ====================

class AgreementLineCreate(BaseModel):
    item_code: Optional[str] = None
    item_name: Optional[str] = None
    description: Optional[str] = None
    uom: str = "EACH"
    quantity: Decimal = Field(default=Decimal("1"), gt=0)
    unit_price: Decimal = Field(..., ge=0)


class AgreementLineResponse(BaseModel):
    line_id: int
    agreement_id: int
    line_number: int
    item_code: Optional[str] = None
    item_name: Optional[str] = None
    description: Optional[str] = None
    uom: Optional[str] = None
    quantity: Decimal
    unit_price: Decimal
    line_amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class AgreementCreate(BaseModel):
    agreement_number: Optional[str] = Field(None, max_length=50)
    agreement_type: str = "BLANKET"
    supplier_id: int
    supplier_site_id: Optional[int] = None
    buyer_name: Optional[str] = None
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    currency_code: str = Field(default="USD", max_length=3)
    payment_terms_id: int = Field(default=30, ge=0)
    status: str = "DRAFT"
    notes: Optional[str] = None
    lines: List[AgreementLineCreate] = []


class AgreementUpdate(BaseModel):
    agreement_type: Optional[str] = None
    supplier_site_id: Optional[int] = None
    buyer_name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    currency_code: Optional[str] = Field(None, max_length=3)
    payment_terms_id: Optional[int] = Field(None, ge=0)
    status: Optional[str] = None
    notes: Optional[str] = None
    lines: Optional[List[AgreementLineCreate]] = None


class AgreementResponse(BaseModel):
    agreement_id: int
    agreement_number: str
    agreement_type: str
    supplier_id: int
    supplier_name: Optional[str] = None
    supplier_site_id: Optional[int] = None
    buyer_name: Optional[str] = None
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    currency_code: str
    total_amount: Decimal
    payment_terms_id: Optional[int] = None
    status: str
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AgreementDetail(AgreementResponse):
    lines: List[AgreementLineResponse] = []


class RequisitionLineCreate(BaseModel):
    item_code: Optional[str] = None
    item_name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    uom: str = "EACH"
    quantity: Decimal = Field(default=Decimal("1"), gt=0)
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    need_by_date: Optional[date] = None
    suggested_supplier: Optional[str] = None
    suggested_supplier_id: Optional[int] = None
    notes: Optional[str] = None


class RequisitionLineResponse(RequisitionLineCreate):
    line_id: int
    requisition_id: int
    line_number: int
    line_amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class RequisitionCreate(BaseModel):
    requester_id: Optional[int] = None
    buyer_id: Optional[int] = None
    department_id: Optional[int] = None
    need_by_date: Optional[date] = None
    urgency: str = "MEDIUM"
    currency_code: str = Field(default="USD", max_length=3)
    exchange_rate: Decimal = Field(default=Decimal("1"), gt=0)
    description: Optional[str] = None
    justification: Optional[str] = None
    notes: Optional[str] = None
    status: str = "DRAFT"
    lines: List[RequisitionLineCreate] = Field(..., min_length=1)


class RequisitionUpdate(BaseModel):
    requester_id: Optional[int] = None
    buyer_id: Optional[int] = None
    department_id: Optional[int] = None
    need_by_date: Optional[date] = None
    urgency: Optional[str] = None
    currency_code: Optional[str] = Field(None, max_length=3)
    exchange_rate: Optional[Decimal] = Field(None, gt=0)
    description: Optional[str] = None
    justification: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None
    lines: Optional[List[RequisitionLineCreate]] = Field(None, min_length=1)


class RequisitionResponse(BaseModel):
    requisition_id: int
    requisition_number: str
    requester_id: int
    requester_name: Optional[str] = None
    buyer_id: Optional[int] = None
    buyer_name: Optional[str] = None
    department_id: Optional[int] = None
    need_by_date: Optional[date] = None
    urgency: str
    currency_code: str
    exchange_rate: Decimal
    total_amount: Decimal
    description: Optional[str] = None
    justification: Optional[str] = None
    notes: Optional[str] = None
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RequisitionDetail(RequisitionResponse):
    lines: List[RequisitionLineResponse] = []


class PurchaseOrderLineCreate(BaseModel):
    item_code: Optional[str] = None
    item_name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    uom: str = "EACH"
    quantity: Decimal = Field(default=Decimal("1"), gt=0)
    unit_price: Decimal = Field(..., ge=0)
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    tax_amount: Optional[Decimal] = Field(None, ge=0)
    need_by_date: Optional[date] = None
    promised_date: Optional[date] = None
    notes: Optional[str] = None


class PurchaseOrderLineResponse(BaseModel):
    line_id: int
    header_id: int
    line_number: int
    item_code: Optional[str] = None
    item_name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    uom: Optional[str] = None
    quantity: Decimal
    quantity_received: Decimal
    quantity_outstanding: Decimal
    unit_price: Decimal
    line_amount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total_line_amount: Decimal
    need_by_date: Optional[date] = None
    promised_date: Optional[date] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PurchaseOrderCreate(BaseModel):
    po_type: str = "STANDARD"
    supplier_id: int
    supplier_site_id: Optional[int] = None
    buyer_id: Optional[int] = None
    requisition_id: Optional[int] = None
    agreement_id: Optional[int] = None
    po_date: date
    need_by_date: Optional[date] = None
    currency_code: str = Field(default="USD", max_length=3)
    exchange_rate: Decimal = Field(default=Decimal("1"), gt=0)
    payment_terms_id: int = Field(default=30, ge=0)
    description: Optional[str] = None
    notes: Optional[str] = None
    status: str = "DRAFT"
    lines: List[PurchaseOrderLineCreate] = Field(..., min_length=1)


class PurchaseOrderUpdate(BaseModel):
    po_type: Optional[str] = None
    supplier_site_id: Optional[int] = None
    buyer_id: Optional[int] = None
    po_date: Optional[date] = None
    need_by_date: Optional[date] = None
    currency_code: Optional[str] = Field(None, max_length=3)
    exchange_rate: Optional[Decimal] = Field(None, gt=0)
    payment_terms_id: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None
    lines: Optional[List[PurchaseOrderLineCreate]] = Field(None, min_length=1)


class PurchaseOrderResponse(BaseModel):
    header_id: int
    po_number: str
    po_type: str
    supplier_id: int
    supplier_name: Optional[str] = None
    supplier_site_id: Optional[int] = None
    buyer_id: Optional[int] = None
    requisition_id: Optional[int] = None
    requisition_number: Optional[str] = None
    agreement_id: Optional[int] = None
    agreement_number: Optional[str] = None
    po_date: date
    need_by_date: Optional[date] = None
    currency_code: str
    exchange_rate: Decimal
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    amount_received: Decimal
    payment_terms_id: Optional[int] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PurchaseOrderDetail(PurchaseOrderResponse):
    lines: List[PurchaseOrderLineResponse] = []


class GoodsReceiptLineCreate(BaseModel):
    line_id: int
    quantity_received: Decimal = Field(..., gt=0)
    quantity_accepted: Optional[Decimal] = Field(None, ge=0)
    quantity_rejected: Decimal = Field(default=Decimal("0"), ge=0)
    unit_price: Optional[Decimal] = Field(None, ge=0)
    lot_number: Optional[str] = None
    serial_number: Optional[str] = None
    expiration_date: Optional[date] = None
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None


class GoodsReceiptLineResponse(BaseModel):
    receipt_line_id: int
    receipt_id: int
    line_id: int
    line_number: int
    item_code: Optional[str] = None
    item_name: Optional[str] = None
    description: Optional[str] = None
    uom: Optional[str] = None
    quantity_ordered: Decimal
    quantity_received: Decimal
    quantity_accepted: Decimal
    quantity_rejected: Decimal
    unit_price: Decimal
    line_amount: Decimal
    lot_number: Optional[str] = None
    serial_number: Optional[str] = None
    expiration_date: Optional[date] = None
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class GoodsReceiptCreate(BaseModel):
    header_id: int
    receipt_date: date
    receipt_type: str = "STANDARD"
    notes: Optional[str] = None
    status: str = "CONFIRMED"
    lines: List[GoodsReceiptLineCreate] = Field(..., min_length=1)


class GoodsReceiptUpdate(BaseModel):
    receipt_date: Optional[date] = None
    receipt_type: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None
    lines: Optional[List[GoodsReceiptLineCreate]] = Field(None, min_length=1)


class GoodsReceiptResponse(BaseModel):
    receipt_id: int
    receipt_number: str
    header_id: int
    po_number: Optional[str] = None
    supplier_name: Optional[str] = None
    receipt_date: date
    receipt_type: str
    currency_code: str
    exchange_rate: Decimal
    total_amount: Decimal
    notes: Optional[str] = None
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GoodsReceiptDetail(GoodsReceiptResponse):
    lines: List[GoodsReceiptLineResponse] = []


# ==================== TAX SCHEMAS ====================

class TaxRegimeBase(BaseModel):
    regime_code: str = Field(..., min_length=1, max_length=30)
    regime_name: str = Field(..., min_length=1, max_length=255)
    regime_type: str
    tax_authority: Optional[str] = None
    effective_date: date
    end_date: Optional[date] = None
    status: str = "ACTIVE"


class TaxRegimeCreate(TaxRegimeBase):
    pass


class TaxRegimeUpdate(BaseModel):
    regime_code: Optional[str] = Field(None, min_length=1, max_length=30)
    regime_name: Optional[str] = Field(None, min_length=1, max_length=255)
    regime_type: Optional[str] = None
    tax_authority: Optional[str] = None
    effective_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[str] = None


class TaxRegimeResponse(TaxRegimeBase):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TaxTypeBase(BaseModel):
    regime_id: Optional[int] = None
    tax_type_code: str = Field(..., min_length=1, max_length=30)
    tax_type_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    is_withholding_tax: bool = False
    is_self_assessed: bool = False
    is_recoverable: bool = False
    status: str = "ACTIVE"


class TaxTypeCreate(TaxTypeBase):
    pass


class TaxTypeUpdate(BaseModel):
    regime_id: Optional[int] = None
    tax_type_code: Optional[str] = Field(None, min_length=1, max_length=30)
    tax_type_name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_withholding_tax: Optional[bool] = None
    is_self_assessed: Optional[bool] = None
    is_recoverable: Optional[bool] = None
    status: Optional[str] = None


class TaxTypeResponse(TaxTypeBase):
    id: int
    regime_code: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TaxRateBase(BaseModel):
    rate_code: str = Field(..., min_length=1, max_length=30)
    tax_type_id: int
    tax_percentage: Decimal = Field(..., ge=0, le=100)
    effective_date: date
    end_date: Optional[date] = None
    is_recoverable: bool = False
    is_inclusive: bool = False
    is_self_assessable: bool = False
    status: str = "ACTIVE"


class TaxRateCreate(TaxRateBase):
    pass


class TaxRateUpdate(BaseModel):
    rate_code: Optional[str] = Field(None, min_length=1, max_length=30)
    tax_type_id: Optional[int] = None
    tax_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    effective_date: Optional[date] = None
    end_date: Optional[date] = None
    is_recoverable: Optional[bool] = None
    is_inclusive: Optional[bool] = None
    is_self_assessable: Optional[bool] = None
    status: Optional[str] = None


class TaxRateResponse(TaxRateBase):
    id: int
    tax_type_name: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ==================== ASSET SCHEMAS ====================

class AssetBase(BaseModel):
    asset_id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    category: Optional[str] = None
    sub_category: Optional[str] = None
    value: Decimal = Field(default=Decimal("0.00"), ge=0)
    purchase_date: Optional[date] = None
    location: Optional[str] = None
    department: Optional[str] = None
    depreciation_method: Optional[str] = None
    useful_life: Optional[int] = Field(None, ge=0)
    salvage_value: Decimal = Field(default=Decimal("0.00"), ge=0)
    vendor: Optional[str] = None
    serial_number: Optional[str] = None
    warranty_expiry: Optional[date] = None
    condition: Optional[str] = None
    description: Optional[str] = None
    insurance_value: Optional[Decimal] = Field(None, ge=0)
    maintenance_schedule: Optional[str] = None


class AssetCreate(AssetBase):
    pass


class AssetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[str] = None
    sub_category: Optional[str] = None
    value: Optional[Decimal] = Field(None, ge=0)
    purchase_date: Optional[date] = None
    location: Optional[str] = None
    department: Optional[str] = None
    depreciation_method: Optional[str] = None
    useful_life: Optional[int] = Field(None, ge=0)
    salvage_value: Optional[Decimal] = Field(None, ge=0)
    vendor: Optional[str] = None
    serial_number: Optional[str] = None
    warranty_expiry: Optional[date] = None
    condition: Optional[str] = None
    description: Optional[str] = None
    insurance_value: Optional[Decimal] = Field(None, ge=0)
    maintenance_schedule: Optional[str] = None


class AssetResponse(AssetBase):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ==================== INVENTORY SCHEMAS ====================

class InventoryItemCreate(BaseModel):
    item_code: str = Field(..., min_length=1, max_length=50)
    item_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    quantity: Decimal = Field(default=Decimal("0"), ge=0)
    unit_price: Decimal = Field(default=Decimal("0.00"), ge=0)
    location: Optional[str] = None


class InventoryItemResponse(InventoryItemCreate):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BinCardCreate(BaseModel):
    item_code: str = Field(..., min_length=1, max_length=50)
    item_name: str = Field(..., min_length=1, max_length=255)
    bin_location: Optional[str] = None
    warehouse: Optional[str] = None
    unit_of_measure: Optional[str] = None
    current_stock: Decimal = Field(default=Decimal("0"))
    minimum_level: Decimal = Field(default=Decimal("0"), ge=0)
    reorder_level: Decimal = Field(default=Decimal("0"), ge=0)
    maximum_level: Decimal = Field(default=Decimal("0"), ge=0)
    transaction_type: str = Field(..., min_length=1, max_length=20)
    transaction_quantity: Decimal = Field(default=Decimal("0"))
    reference_number: Optional[str] = None
    notes: Optional[str] = None


class BinCardResponse(BinCardCreate):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
