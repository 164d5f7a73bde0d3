"""
Customer/Supplier API Routes - party search, sites and contact points
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from accounts_api.core.database import get_db, transaction
from accounts_api.core.security import get_current_user
from accounts_api.schemas import (
    ContactPointCreate, ContactPointResponse, ContactPointUpdate, MessageResponse,
    PartyResponse, PartySiteCreate, PartySiteResponse, PartySiteUpdate
)
from accounts_api.services.party_service import PartyService, SEARCH_LIMIT

router = APIRouter(prefix="/customer-supplier", tags=["Customer/Supplier"])


@router.get("/search", response_model=List[PartyResponse])
async def search_parties(
    q: Optional[str] = None,
    type: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = Query(SEARCH_LIMIT, ge=1, le=SEARCH_LIMIT),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Search parties by name, number or tax id"""
    return PartyService(db).search(q=q, party_type=type, status=status, limit=limit)


# ==================== SITES ====================

@router.get("/parties/{party_id}/sites", response_model=List[PartySiteResponse])
async def list_sites(
    party_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return PartyService(db).get_sites(party_id)


@router.post("/parties/{party_id}/sites", response_model=PartySiteResponse, status_code=status.HTTP_201_CREATED)
async def create_site(
    party_id: int,
    site_data: PartySiteCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        site = PartyService(db).create_site(party_id, site_data)
    return site


@router.put("/parties/{party_id}/sites/{site_id}", response_model=PartySiteResponse)
async def update_site(
    party_id: int,
    site_id: int,
    site_data: PartySiteUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        site = PartyService(db).update_site(party_id, site_id, site_data)
    return site


@router.delete("/parties/{party_id}/sites/{site_id}", response_model=MessageResponse)
async def delete_site(
    party_id: int,
    site_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        PartyService(db).delete_site(party_id, site_id)
    return {"message": "Site deleted successfully"}


# ==================== CONTACT POINTS ====================

@router.get("/parties/{party_id}/contacts", response_model=List[ContactPointResponse])
async def list_contacts(
    party_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return PartyService(db).get_contacts(party_id)


@router.post("/parties/{party_id}/contacts", response_model=ContactPointResponse, status_code=status.HTTP_201_CREATED)
async def create_contact(
    party_id: int,
    contact_data: ContactPointCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        contact = PartyService(db).create_contact(party_id, contact_data)
    return contact


@router.put("/parties/{party_id}/contacts/{contact_point_id}", response_model=ContactPointResponse)
async def update_contact(
    party_id: int,
    contact_point_id: int,
    contact_data: ContactPointUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        contact = PartyService(db).update_contact(party_id, contact_point_id, contact_data)
    return contact


@router.delete("/parties/{party_id}/contacts/{contact_point_id}", response_model=MessageResponse)
async def delete_contact(
    party_id: int,
    contact_point_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        PartyService(db).delete_contact(party_id, contact_point_id)
    return {"message": "Contact point deleted successfully"}
