"""
Company Location API Routes
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from accounts_api.core.database import get_db, transaction
from accounts_api.core.security import get_current_user
from accounts_api.schemas import (
    LocationCreate, LocationResponse, LocationStats, LocationUpdate, MessageResponse
)
from accounts_api.services.company_service import CompanyLocationService

router = APIRouter(prefix="/company-locations", tags=["Company Locations"])


@router.get("/company/{company_id}", response_model=List[LocationResponse])
async def list_company_locations(
    company_id: int,
    status: Optional[str] = None,
    type: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Primary location first, then newest"""
    return CompanyLocationService(db).get_for_company(
        company_id, status=status, location_type=type, search=search
    )


@router.get("/company/{company_id}/stats", response_model=LocationStats)
async def get_location_stats(
    company_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return CompanyLocationService(db).get_stats(company_id)


@router.get("/{location_id}", response_model=LocationResponse)
async def get_location(
    location_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    location = CompanyLocationService(db).get_by_id(location_id)
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    return location


@router.post("", response_model=LocationResponse, status_code=status.HTTP_201_CREATED)
async def create_location(
    location_data: LocationCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Create a location; LOC-### is allocated when no code is given"""
    with transaction(db):
        location = CompanyLocationService(db).create(location_data, current_user.id)
    return location


@router.put("/{location_id}", response_model=LocationResponse)
async def update_location(
    location_id: int,
    location_data: LocationUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    location = CompanyLocationService(db).update(location_id, location_data)
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    db.commit()
    return location


@router.delete("/{location_id}", response_model=MessageResponse)
async def delete_location(
    location_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    location = CompanyLocationService(db).deactivate(location_id)
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    db.commit()
    return {"message": f"{location.location_name} has been deleted successfully"}
