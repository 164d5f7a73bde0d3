"""
Supplier API Routes - Accounts Payable supplier master
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from accounts_api.core.database import get_db, transaction
from accounts_api.core.security import get_current_user
from accounts_api.schemas import (
    MessageResponse, SupplierCreate, SupplierDetail, SupplierResponse,
    SupplierSiteCreate, SupplierSiteResponse, SupplierUpdate
)
from accounts_api.services.payables_service import SupplierService

router = APIRouter(prefix="/ap/suppliers", tags=["AP Suppliers"])


@router.get("", response_model=List[SupplierResponse])
async def list_suppliers(
    status: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """List suppliers with site/invoice counts and outstanding balance"""
    return SupplierService(db).get_all(status=status, search=search)


@router.get("/{supplier_id}", response_model=SupplierDetail)
async def get_supplier(
    supplier_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    supplier = SupplierService(db).get_by_id(supplier_id)
    if not supplier:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return supplier


@router.post("", response_model=SupplierDetail, status_code=status.HTTP_201_CREATED)
async def create_supplier(
    supplier_data: SupplierCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Create a supplier and its sites"""
    supplier_service = SupplierService(db)
    with transaction(db):
        supplier = supplier_service.create(supplier_data, current_user.id)
    return supplier_service.get_by_id(supplier.supplier_id)


@router.put("/{supplier_id}", response_model=SupplierResponse)
async def update_supplier(
    supplier_id: int,
    supplier_data: SupplierUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        supplier = SupplierService(db).update(supplier_id, supplier_data)
    return supplier


@router.delete("/{supplier_id}", response_model=MessageResponse)
async def delete_supplier(
    supplier_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Deactivate a supplier"""
    with transaction(db):
        SupplierService(db).delete(supplier_id)
    return {"message": "Supplier deactivated successfully"}


# ==================== SITES ====================

@router.get("/{supplier_id}/sites", response_model=List[SupplierSiteResponse])
async def list_supplier_sites(
    supplier_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return SupplierService(db).get_sites(supplier_id)


@router.post("/{supplier_id}/sites", response_model=SupplierSiteResponse, status_code=status.HTTP_201_CREATED)
async def add_supplier_site(
    supplier_id: int,
    site_data: SupplierSiteCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        site = SupplierService(db).add_site(supplier_id, site_data)
    return site
