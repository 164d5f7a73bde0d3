"""
Procurement API Routes - Agreements, requisitions, purchase orders and goods receipts
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from accounts_api.core.database import get_db, transaction
from accounts_api.core.security import get_current_user, require_admin
from accounts_api.schemas import (
    AgreementCreate, AgreementDetail, AgreementLineResponse, AgreementResponse,
    AgreementUpdate, GoodsReceiptCreate, GoodsReceiptDetail, GoodsReceiptResponse,
    GoodsReceiptUpdate, MessageResponse, PurchaseOrderCreate, PurchaseOrderDetail,
    PurchaseOrderLineResponse, PurchaseOrderResponse, PurchaseOrderUpdate,
    RequisitionCreate, RequisitionDetail, RequisitionResponse, RequisitionUpdate
)
from accounts_api.services.procurement_service import AgreementService, RequisitionService
from accounts_api.services.purchase_order_service import GoodsReceiptService, PurchaseOrderService

router = APIRouter(prefix="/procurement", tags=["Procurement"])


# ==================== AGREEMENTS ====================

@router.get("/agreements", response_model=List[AgreementResponse])
async def list_agreements(
    status: Optional[str] = None,
    supplier_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return AgreementService(db).get_all(status=status, supplier_id=supplier_id)


@router.get("/agreements/{agreement_id}", response_model=AgreementDetail)
async def get_agreement(
    agreement_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    agreement = AgreementService(db).get_by_id(agreement_id)
    if not agreement:
        raise HTTPException(status_code=404, detail="Purchase agreement not found")
    return agreement


@router.post("/agreements", response_model=AgreementDetail, status_code=status.HTTP_201_CREATED)
async def create_agreement(
    agreement_data: AgreementCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Create an agreement header and lines in one transaction"""
    agreement_service = AgreementService(db)
    with transaction(db):
        agreement = agreement_service.create(agreement_data, current_user.id)
    return agreement_service.get_by_id(agreement.agreement_id)


@router.put("/agreements/{agreement_id}", response_model=AgreementDetail)
async def update_agreement(
    agreement_id: int,
    agreement_data: AgreementUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    agreement_service = AgreementService(db)
    with transaction(db):
        agreement_service.update(agreement_id, agreement_data)
    return agreement_service.get_by_id(agreement_id)


@router.delete("/agreements/{agreement_id}", response_model=MessageResponse)
async def cancel_agreement(
    agreement_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    """Cancel an agreement (admin only)"""
    with transaction(db):
        AgreementService(db).cancel(agreement_id)
    return {"message": "Purchase agreement cancelled successfully"}


@router.get("/agreements/{agreement_id}/lines", response_model=List[AgreementLineResponse])
async def get_agreement_lines(
    agreement_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return AgreementService(db).get_lines(agreement_id)


# ==================== REQUISITIONS ====================

@router.get("/requisitions", response_model=List[RequisitionResponse])
async def list_requisitions(
    search: Optional[str] = None,
    status: Optional[str] = None,
    requester_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return RequisitionService(db).get_all(search=search, status=status, requester_id=requester_id)


@router.get("/requisitions/{requisition_id}", response_model=RequisitionDetail)
async def get_requisition(
    requisition_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    requisition = RequisitionService(db).get_by_id(requisition_id)
    if not requisition:
        raise HTTPException(status_code=404, detail="Purchase requisition not found")
    return requisition


@router.post("/requisitions", response_model=RequisitionDetail, status_code=status.HTTP_201_CREATED)
async def create_requisition(
    requisition_data: RequisitionCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Raise a requisition; the requester defaults to the signed-in user"""
    requisition_service = RequisitionService(db)
    with transaction(db):
        requisition = requisition_service.create(requisition_data, current_user.id)
    return requisition_service.get_by_id(requisition.requisition_id)


@router.put("/requisitions/{requisition_id}", response_model=RequisitionDetail)
async def update_requisition(
    requisition_id: int,
    requisition_data: RequisitionUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    requisition_service = RequisitionService(db)
    with transaction(db):
        requisition_service.update(requisition_id, requisition_data)
    return requisition_service.get_by_id(requisition_id)


@router.delete("/requisitions/{requisition_id}", response_model=MessageResponse)
async def cancel_requisition(
    requisition_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    with transaction(db):
        RequisitionService(db).cancel(requisition_id)
    return {"message": "Purchase requisition cancelled successfully"}


# ==================== PURCHASE ORDERS ====================

@router.get("/purchase-orders", response_model=List[PurchaseOrderResponse])
async def list_purchase_orders(
    search: Optional[str] = None,
    status: Optional[str] = None,
    supplier_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return PurchaseOrderService(db).get_all(search=search, status=status, supplier_id=supplier_id)


@router.get("/purchase-orders/{header_id}", response_model=PurchaseOrderDetail)
async def get_purchase_order(
    header_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    order = PurchaseOrderService(db).get_by_id(header_id)
    if not order:
        raise HTTPException(status_code=404, detail="Purchase order not found")
    return order


@router.post("/purchase-orders", response_model=PurchaseOrderDetail, status_code=status.HTTP_201_CREATED)
async def create_purchase_order(
    order_data: PurchaseOrderCreate,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    """Create a purchase order header and lines (admin only)"""
    order_service = PurchaseOrderService(db)
    with transaction(db):
        order = order_service.create(order_data, current_user.id)
    return order_service.get_by_id(order.header_id)


@router.put("/purchase-orders/{header_id}", response_model=PurchaseOrderDetail)
async def update_purchase_order(
    header_id: int,
    order_data: PurchaseOrderUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    order_service = PurchaseOrderService(db)
    with transaction(db):
        order_service.update(header_id, order_data)
    return order_service.get_by_id(header_id)


@router.delete("/purchase-orders/{header_id}", response_model=MessageResponse)
async def cancel_purchase_order(
    header_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    with transaction(db):
        PurchaseOrderService(db).cancel(header_id)
    return {"message": "Purchase order cancelled successfully"}


@router.get("/purchase-orders/{header_id}/lines", response_model=List[PurchaseOrderLineResponse])
async def get_purchase_order_lines(
    header_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return PurchaseOrderService(db).get_lines(header_id)


# ==================== GOODS RECEIPTS ====================

@router.get("/receipts", response_model=List[GoodsReceiptResponse])
async def list_goods_receipts(
    search: Optional[str] = None,
    status: Optional[str] = None,
    header_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return GoodsReceiptService(db).get_all(search=search, status=status, header_id=header_id)


@router.get("/receipts/{receipt_id}", response_model=GoodsReceiptDetail)
async def get_goods_receipt(
    receipt_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    receipt = GoodsReceiptService(db).get_by_id(receipt_id)
    if not receipt:
        raise HTTPException(status_code=404, detail="Goods receipt not found")
    return receipt


@router.post("/receipts", response_model=GoodsReceiptDetail, status_code=status.HTTP_201_CREATED)
async def create_goods_receipt(
    receipt_data: GoodsReceiptCreate,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    """Record a receipt against a purchase order; CONFIRMED receipts update received quantities"""
    receipt_service = GoodsReceiptService(db)
    with transaction(db):
        receipt = receipt_service.create(receipt_data, current_user.id)
    return receipt_service.get_by_id(receipt.receipt_id)


@router.put("/receipts/{receipt_id}", response_model=GoodsReceiptDetail)
async def update_goods_receipt(
    receipt_id: int,
    receipt_data: GoodsReceiptUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    receipt_service = GoodsReceiptService(db)
    with transaction(db):
        receipt_service.update(receipt_id, receipt_data)
    return receipt_service.get_by_id(receipt_id)


@router.delete("/receipts/{receipt_id}", response_model=MessageResponse)
async def cancel_goods_receipt(
    receipt_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    with transaction(db):
        GoodsReceiptService(db).cancel(receipt_id)
    return {"message": "Goods receipt cancelled successfully"}
