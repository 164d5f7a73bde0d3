"""
Asset Service - Fixed asset register
"""
from typing import Optional, List, Dict
from sqlalchemy.orm import Session
from sqlalchemy import func
from decimal import Decimal

from accounts_api.core.exceptions import ConflictError
from accounts_api.models import Asset
from accounts_api.schemas import AssetCreate, AssetUpdate


class AssetService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, asset_id: int) -> Optional[Asset]:
        return self.db.query(Asset).filter(Asset.id == asset_id).first()

    def get_all(self) -> List[Asset]:
        return self.db.query(Asset).order_by(Asset.id).all()

    def get_by_field(self, field: str, value: str) -> List[Asset]:
        """Assets whose ``category``, ``department`` or ``condition`` equals ``value``"""
        column = getattr(Asset, field)
        return self.db.query(Asset).filter(column == value).order_by(Asset.id).all()

    def create(self, asset_data: AssetCreate) -> Asset:
        existing = self.db.query(Asset).filter(Asset.asset_id == asset_data.asset_id).first()
        if existing:
            raise ConflictError(f"Asset '{asset_data.asset_id}' already exists")

        asset = Asset(**asset_data.model_dump())
        self.db.add(asset)
        self.db.flush()
        return asset

    def update(self, asset_id: int, asset_data: AssetUpdate) -> Optional[Asset]:
        asset = self.get_by_id(asset_id)
        if not asset:
            return None

        update_data = asset_data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(asset, key, value)

        self.db.flush()
        return asset

    def delete(self, asset_id: int) -> bool:
        asset = self.get_by_id(asset_id)
        if not asset:
            return False
        self.db.delete(asset)
        self.db.flush()
        return True

    def get_stats(self) -> Dict:
        total_assets = self.db.query(func.count(Asset.id)).scalar() or 0
        total_value = self.db.query(func.sum(Asset.value)).scalar() or Decimal("0.00")

        by_category = self.db.query(Asset.category, func.count(Asset.id)).group_by(Asset.category).all()
        by_department = self.db.query(Asset.department, func.count(Asset.id)).group_by(Asset.department).all()

        return {
            "total_assets": total_assets,
            "total_value": Decimal(str(total_value)).quantize(Decimal("0.01")),
            "by_category": [{"category": c, "count": n} for c, n in by_category],
            "by_department": [{"department": d, "count": n} for d, n in by_department],
        }
