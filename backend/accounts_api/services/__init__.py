# Services Package
from accounts_api.services.user_service import UserService
from accounts_api.services.audit_service import AuditService, AuditAction
from accounts_api.services.sequence_service import SequenceStore, next_sequence_value
from accounts_api.services.document_service import DocumentWriter
from accounts_api.services.application_service import (
    PaymentApplicationService, ReceiptApplicationService
)
from accounts_api.services.accounting_service import AccountService, JournalEntryService
from accounts_api.services.payables_service import SupplierService, APInvoiceService, APPaymentService
from accounts_api.services.receivables_service import ARInvoiceService, ReceiptService
from accounts_api.services.party_service import PartyService
from accounts_api.services.procurement_service import AgreementService, RequisitionService
from accounts_api.services.purchase_order_service import PurchaseOrderService, GoodsReceiptService
from accounts_api.services.tax_service import TaxRegimeService, TaxTypeService, TaxRateService
from accounts_api.services.company_service import CompanyService, CompanyLocationService
from accounts_api.services.asset_service import AssetService
from accounts_api.services.inventory_service import InventoryItemService, BinCardService

__all__ = [
    'UserService',
    'AuditService',
    'AuditAction',
    'SequenceStore',
    'next_sequence_value',
    'DocumentWriter',
    'PaymentApplicationService',
    'ReceiptApplicationService',
    'AccountService',
    'JournalEntryService',
    'SupplierService',
    'APInvoiceService',
    'APPaymentService',
    'ARInvoiceService',
    'ReceiptService',
    'PartyService',
    'AgreementService',
    'RequisitionService',
    'PurchaseOrderService',
    'GoodsReceiptService',
    'TaxRegimeService',
    'TaxTypeService',
    'TaxRateService',
    'CompanyService',
    'CompanyLocationService',
    'AssetService',
    'InventoryItemService',
    'BinCardService',
]
