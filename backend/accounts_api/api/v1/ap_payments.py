"""
AP Payment API Routes - supplier payments and their invoice applications
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from accounts_api.core.database import get_db, transaction
from accounts_api.core.security import get_current_user
from accounts_api.schemas import (
    APPaymentCreate, APPaymentDetail, APPaymentResponse, ApplicationCreate,
    MessageResponse, PaymentApplicationResponse, PaymentUpdate, StatusUpdate
)
from accounts_api.services.audit_service import AuditService, AuditAction
from accounts_api.services.payables_service import APPaymentService

router = APIRouter(prefix="/ap/payments", tags=["AP Payments"])


@router.get("", response_model=List[APPaymentResponse])
async def list_payments(
    status: Optional[str] = None,
    supplier_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """List payments with their active application counts"""
    return APPaymentService(db).get_all(
        status=status, party_id=supplier_id, date_from=date_from, date_to=date_to
    )


@router.get("/{payment_id}", response_model=APPaymentDetail)
async def get_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    payment = APPaymentService(db).get_by_id(payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    return payment


@router.post("", response_model=APPaymentDetail, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payment_data: APPaymentCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Create a payment; inline applications are applied in the same transaction"""
    payment_service = APPaymentService(db)
    with transaction(db):
        payment = payment_service.create(payment_data, current_user.id)
    return payment_service.get_by_id(payment.payment_id)


@router.put("/{payment_id}", response_model=APPaymentResponse)
async def update_payment(
    payment_id: int,
    payment_data: PaymentUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        payment = APPaymentService(db).update(payment_id, payment_data)
    return payment


@router.patch("/{payment_id}/status", response_model=APPaymentResponse)
async def update_payment_status(
    payment_id: int,
    status_data: StatusUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        payment = APPaymentService(db).update_status(payment_id, status_data.status)
    return payment


@router.delete("/{payment_id}", response_model=MessageResponse)
async def delete_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Cancel a payment"""
    with transaction(db):
        APPaymentService(db).delete(payment_id)
    return {"message": "Payment cancelled successfully"}


# ==================== APPLICATIONS ====================

@router.get("/{payment_id}/applications", response_model=List[PaymentApplicationResponse])
async def list_payment_applications(
    payment_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return APPaymentService(db).get_applications(payment_id)


@router.post("/{payment_id}/applications", response_model=PaymentApplicationResponse, status_code=status.HTTP_201_CREATED)
async def apply_payment(
    payment_id: int,
    application_data: ApplicationCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Apply part of a payment to an invoice"""
    with transaction(db):
        application = APPaymentService(db).apply(payment_id, application_data, current_user.id)
        AuditService(db).log(
            action=AuditAction.PAYMENT_APPLIED,
            resource_type="APPaymentApplication",
            resource_id=application.application_id,
            description=f"Applied {application.applied_amount} from payment {payment_id} to invoice {application.invoice_id}",
            user_id=current_user.id,
            email=current_user.email
        )
    return application


@router.post("/{payment_id}/applications/{application_id}/reverse", response_model=PaymentApplicationResponse)
async def reverse_payment_application(
    payment_id: int,
    application_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Reverse an active application, restoring both balances"""
    with transaction(db):
        application = APPaymentService(db).reverse(payment_id, application_id, current_user.id)
        AuditService(db).log(
            action=AuditAction.APPLICATION_REVERSED,
            resource_type="APPaymentApplication",
            resource_id=application_id,
            description=f"Reversed application {application_id} on payment {payment_id}",
            user_id=current_user.id,
            email=current_user.email
        )
    return application
