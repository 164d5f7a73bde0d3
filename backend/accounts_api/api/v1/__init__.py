# API v1 Package
from accounts_api.api.v1 import (
    auth, sequences, suppliers, ap_invoices, ap_payments, invoices, receipts,
    journal_entries, chart_of_accounts, parties, customer_supplier, procurement,
    tax, companies, company_locations, assets, inventory, profile
)

__all__ = [
    'auth',
    'sequences',
    'suppliers',
    'ap_invoices',
    'ap_payments',
    'invoices',
    'receipts',
    'journal_entries',
    'chart_of_accounts',
    'parties',
    'customer_supplier',
    'procurement',
    'tax',
    'companies',
    'company_locations',
    'assets',
    'inventory',
    'profile',
]
