"""
AR Invoice API Routes
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from accounts_api.core.database import get_db, transaction
from accounts_api.core.security import get_current_user
from accounts_api.schemas import (
    ARInvoiceCreate, ARInvoiceDetail, ARInvoiceResponse, InvoiceLineResponse,
    InvoiceUpdate, MessageResponse, ReceiptApplicationResponse, StatusUpdate
)
from accounts_api.services.receivables_service import ARInvoiceService

router = APIRouter(prefix="/invoices", tags=["AR Invoices"])


@router.get("", response_model=List[ARInvoiceResponse])
async def list_invoices(
    status: Optional[str] = None,
    customer_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    due_date_from: Optional[date] = None,
    due_date_to: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return ARInvoiceService(db).get_all(
        status=status,
        party_id=customer_id,
        date_from=date_from,
        date_to=date_to,
        due_date_from=due_date_from,
        due_date_to=due_date_to
    )


@router.get("/{invoice_id}", response_model=ARInvoiceDetail)
async def get_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    invoice = ARInvoiceService(db).get_by_id(invoice_id)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice


@router.post("", response_model=ARInvoiceDetail, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    invoice_data: ARInvoiceCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Create a customer invoice with its lines"""
    invoice_service = ARInvoiceService(db)
    with transaction(db):
        invoice = invoice_service.create(invoice_data, current_user.id)
    return invoice_service.get_by_id(invoice.invoice_id)


@router.put("/{invoice_id}", response_model=ARInvoiceDetail)
async def update_invoice(
    invoice_id: int,
    invoice_data: InvoiceUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    invoice_service = ARInvoiceService(db)
    with transaction(db):
        invoice_service.update(invoice_id, invoice_data)
    return invoice_service.get_by_id(invoice_id)


@router.patch("/{invoice_id}/status", response_model=ARInvoiceResponse)
async def update_invoice_status(
    invoice_id: int,
    status_data: StatusUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        invoice = ARInvoiceService(db).update_status(
            invoice_id, status_data.status, status_data.approval_status
        )
    return invoice


@router.delete("/{invoice_id}", response_model=MessageResponse)
async def delete_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        ARInvoiceService(db).delete(invoice_id)
    return {"message": "Invoice cancelled successfully"}


@router.get("/{invoice_id}/lines", response_model=List[InvoiceLineResponse])
async def get_invoice_lines(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return ARInvoiceService(db).get_lines(invoice_id)


@router.get("/{invoice_id}/receipts", response_model=List[ReceiptApplicationResponse])
async def get_invoice_receipts(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Receipt applications recorded against this invoice"""
    return ARInvoiceService(db).get_applications(invoice_id)
