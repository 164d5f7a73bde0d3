"""
Asset API Routes - Fixed asset register
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from accounts_api.core.database import get_db
from accounts_api.core.security import get_current_user
from accounts_api.schemas import AssetCreate, AssetResponse, AssetUpdate, MessageResponse
from accounts_api.services.asset_service import AssetService

router = APIRouter(prefix="/assets", tags=["Assets"])


@router.get("", response_model=List[AssetResponse])
async def list_assets(
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return AssetService(db).get_all()


@router.post("", response_model=AssetResponse, status_code=status.HTTP_201_CREATED)
async def create_asset(
    asset_data: AssetCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    asset = AssetService(db).create(asset_data)
    db.commit()
    return asset


@router.get("/stats/summary")
async def get_asset_stats(
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Asset count and value, grouped by category and department"""
    return AssetService(db).get_stats()


@router.get("/category/{category}", response_model=List[AssetResponse])
async def list_assets_by_category(
    category: str,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return AssetService(db).get_by_field("category", category)


@router.get("/department/{department}", response_model=List[AssetResponse])
async def list_assets_by_department(
    department: str,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return AssetService(db).get_by_field("department", department)


@router.get("/condition/{condition}", response_model=List[AssetResponse])
async def list_assets_by_condition(
    condition: str,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return AssetService(db).get_by_field("condition", condition)


@router.get("/{asset_id}", response_model=AssetResponse)
async def get_asset(
    asset_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    asset = AssetService(db).get_by_id(asset_id)
    if not asset:
        raise HTTPException(status_code=404, detail="Asset not found")
    return asset


@router.put("/{asset_id}", response_model=AssetResponse)
async def update_asset(
    asset_id: int,
    asset_data: AssetUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    asset = AssetService(db).update(asset_id, asset_data)
    if not asset:
        raise HTTPException(status_code=404, detail="Asset not found")
    db.commit()
    return asset


@router.delete("/{asset_id}", response_model=MessageResponse)
async def delete_asset(
    asset_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    if not AssetService(db).delete(asset_id):
        raise HTTPException(status_code=404, detail="Asset not found")
    db.commit()
    return {"message": "Asset deleted successfully"}
