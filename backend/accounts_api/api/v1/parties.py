"""
Party API Routes
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from accounts_api.core.database import get_db, transaction
from accounts_api.core.security import get_current_user
from accounts_api.schemas import MessageResponse, PartyCreate, PartyDetail, PartyResponse, PartyUpdate
from accounts_api.services.party_service import PartyService

router = APIRouter(prefix="/parties", tags=["Parties"])


@router.get("", response_model=List[PartyResponse])
async def list_parties(
    party_type: Optional[str] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """List parties with site and contact counts"""
    return PartyService(db).get_all(party_type=party_type, status=status)


@router.get("/{party_id}", response_model=PartyDetail)
async def get_party(
    party_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    party = PartyService(db).get_by_id(party_id)
    if not party:
        raise HTTPException(status_code=404, detail="Party not found")
    return party


@router.post("", response_model=PartyResponse, status_code=status.HTTP_201_CREATED)
async def create_party(
    party_data: PartyCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        party = PartyService(db).create(party_data, current_user.id)
    return party


@router.put("/{party_id}", response_model=PartyResponse)
async def update_party(
    party_id: int,
    party_data: PartyUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        party = PartyService(db).update(party_id, party_data)
    return party


@router.delete("/{party_id}", response_model=MessageResponse)
async def delete_party(
    party_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Delete a party with no sites, contacts, invoices or receipts"""
    with transaction(db):
        PartyService(db).delete(party_id)
    return {"message": "Party deleted successfully"}
