"""
Inventory Service - Inventory items and bin cards
"""
from typing import Optional, List
from sqlalchemy.orm import Session

from accounts_api.core.exceptions import ConflictError, ValidationError
from accounts_api.models import BinCard, InventoryItem
from accounts_api.schemas import BinCardCreate, InventoryItemCreate

BIN_CARD_TRANSACTION_TYPES = ["RECEIPT", "ISSUE", "ADJUSTMENT", "TRANSFER"]


class InventoryItemService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, item_id: int) -> Optional[InventoryItem]:
        return self.db.query(InventoryItem).filter(InventoryItem.id == item_id).first()

    def get_all(self) -> List[InventoryItem]:
        return self.db.query(InventoryItem).order_by(InventoryItem.item_code).all()

    def create(self, item_data: InventoryItemCreate) -> InventoryItem:
        existing = self.db.query(InventoryItem).filter(
            InventoryItem.item_code == item_data.item_code
        ).first()
        if existing:
            raise ConflictError(f"Item with code '{item_data.item_code}' already exists")

        item = InventoryItem(**item_data.model_dump())
        self.db.add(item)
        self.db.flush()
        return item


class BinCardService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, card_id: int) -> Optional[BinCard]:
        return self.db.query(BinCard).filter(BinCard.id == card_id).first()

    def get_all(self, item_code: str = None) -> List[BinCard]:
        query = self.db.query(BinCard)
        if item_code:
            query = query.filter(BinCard.item_code == item_code)
        return query.order_by(BinCard.created_at.desc(), BinCard.id.desc()).all()

    def create(self, card_data: BinCardCreate) -> BinCard:
        transaction_type = card_data.transaction_type.upper()
        if transaction_type not in BIN_CARD_TRANSACTION_TYPES:
            raise ValidationError(
                f"Invalid transaction type. Must be one of: {', '.join(BIN_CARD_TRANSACTION_TYPES)}"
            )

        card = BinCard(**card_data.model_dump(exclude={"transaction_type"}), transaction_type=transaction_type)
        self.db.add(card)
        self.db.flush()
        return card
