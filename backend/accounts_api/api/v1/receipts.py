"""
Receipt API Routes - customer receipts applied to AR invoices
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from accounts_api.core.database import get_db, transaction
from accounts_api.core.security import get_current_user
from accounts_api.schemas import (
    ApplicationCreate, ARReceiptCreate, ARReceiptDetail, ARReceiptResponse,
    MessageResponse, PaymentUpdate, ReceiptApplicationResponse, StatusUpdate
)
from accounts_api.services.audit_service import AuditService, AuditAction
from accounts_api.services.receivables_service import ReceiptService

router = APIRouter(prefix="/receipts", tags=["AR Receipts"])


@router.get("", response_model=List[ARReceiptResponse])
async def list_receipts(
    status: Optional[str] = None,
    customer_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return ReceiptService(db).get_all(
        status=status, party_id=customer_id, date_from=date_from, date_to=date_to
    )


@router.get("/{receipt_id}", response_model=ARReceiptDetail)
async def get_receipt(
    receipt_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    receipt = ReceiptService(db).get_by_id(receipt_id)
    if not receipt:
        raise HTTPException(status_code=404, detail="Receipt not found")
    return receipt


@router.post("", response_model=ARReceiptDetail, status_code=status.HTTP_201_CREATED)
async def create_receipt(
    receipt_data: ARReceiptCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Record a receipt; inline applications are applied in the same transaction"""
    receipt_service = ReceiptService(db)
    with transaction(db):
        receipt = receipt_service.create(receipt_data, current_user.id)
    return receipt_service.get_by_id(receipt.receipt_id)


@router.put("/{receipt_id}", response_model=ARReceiptResponse)
async def update_receipt(
    receipt_id: int,
    receipt_data: PaymentUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        receipt = ReceiptService(db).update(receipt_id, receipt_data)
    return receipt


@router.patch("/{receipt_id}/status", response_model=ARReceiptResponse)
async def update_receipt_status(
    receipt_id: int,
    status_data: StatusUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        receipt = ReceiptService(db).update_status(receipt_id, status_data.status)
    return receipt


@router.delete("/{receipt_id}", response_model=MessageResponse)
async def delete_receipt(
    receipt_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        ReceiptService(db).delete(receipt_id)
    return {"message": "Receipt cancelled successfully"}


# ==================== APPLICATIONS ====================

@router.post("/{receipt_id}/apply", response_model=ReceiptApplicationResponse, status_code=status.HTTP_201_CREATED)
async def apply_receipt(
    receipt_id: int,
    application_data: ApplicationCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Apply part of a receipt to an invoice"""
    with transaction(db):
        application = ReceiptService(db).apply(receipt_id, application_data, current_user.id)
        AuditService(db).log(
            action=AuditAction.PAYMENT_APPLIED,
            resource_type="ARReceiptApplication",
            resource_id=application.application_id,
            description=f"Applied {application.applied_amount} from receipt {receipt_id} to invoice {application.invoice_id}",
            user_id=current_user.id,
            email=current_user.email
        )
    return application


@router.get("/{receipt_id}/applications", response_model=List[ReceiptApplicationResponse])
async def list_receipt_applications(
    receipt_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return ReceiptService(db).get_applications(receipt_id)


@router.post("/{receipt_id}/applications/{application_id}/reverse", response_model=ReceiptApplicationResponse)
async def reverse_receipt_application(
    receipt_id: int,
    application_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        application = ReceiptService(db).reverse(receipt_id, application_id, current_user.id)
        AuditService(db).log(
            action=AuditAction.APPLICATION_REVERSED,
            resource_type="ARReceiptApplication",
            resource_id=application_id,
            description=f"Reversed application {application_id} on receipt {receipt_id}",
            user_id=current_user.id,
            email=current_user.email
        )
    return application
