"""
Inventory API Routes - Inventory items and bin cards
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from accounts_api.core.database import get_db
from accounts_api.core.security import get_current_user
from accounts_api.schemas import (
    BinCardCreate, BinCardResponse, InventoryItemCreate, InventoryItemResponse
)
from accounts_api.services.inventory_service import BinCardService, InventoryItemService

items_router = APIRouter(prefix="/inventory-items", tags=["Inventory"])
bin_cards_router = APIRouter(prefix="/bin-cards", tags=["Inventory"])


# ==================== INVENTORY ITEMS ====================

@items_router.get("", response_model=List[InventoryItemResponse])
async def list_items(
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return InventoryItemService(db).get_all()


@items_router.get("/{item_id}", response_model=InventoryItemResponse)
async def get_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    item = InventoryItemService(db).get_by_id(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return item


@items_router.post("", response_model=InventoryItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    item_data: InventoryItemCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    item = InventoryItemService(db).create(item_data)
    db.commit()
    return item


# ==================== BIN CARDS ====================

@bin_cards_router.get("", response_model=List[BinCardResponse])
async def list_bin_cards(
    item_code: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return BinCardService(db).get_all(item_code)


@bin_cards_router.get("/{card_id}", response_model=BinCardResponse)
async def get_bin_card(
    card_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    card = BinCardService(db).get_by_id(card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Bin card not found")
    return card


@bin_cards_router.post("", response_model=BinCardResponse, status_code=status.HTTP_201_CREATED)
async def create_bin_card(
    card_data: BinCardCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    card = BinCardService(db).create(card_data)
    db.commit()
    return card
