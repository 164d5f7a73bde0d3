"""
Tax Service - Tax regimes, types and rates
"""
from typing import Optional, List
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func

from accounts_api.core.exceptions import ConflictError, DependencyExistsError, ValidationError
from accounts_api.models import TaxRate, TaxRegime, TaxType
from accounts_api.schemas import (
    TaxRateCreate, TaxRateUpdate, TaxRegimeCreate, TaxRegimeUpdate, TaxTypeCreate, TaxTypeUpdate
)

REGIME_TYPES = ["TRANSACTION_TAX", "WITHHOLDING_TAX"]


class TaxRegimeService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, regime_id: int) -> Optional[TaxRegime]:
        return self.db.query(TaxRegime).filter(TaxRegime.id == regime_id).first()

    def get_all(self, status: str = None) -> List[TaxRegime]:
        query = self.db.query(TaxRegime)
        if status:
            query = query.filter(TaxRegime.status == status.upper())
        return query.order_by(TaxRegime.regime_code).all()

    def _check_code(self, code: str, regime_id: int = None):
        query = self.db.query(TaxRegime).filter(TaxRegime.regime_code == code)
        if regime_id is not None:
            query = query.filter(TaxRegime.id != regime_id)
        if query.first():
            raise ConflictError(f"Tax regime with code '{code}' already exists")

    def _check_type(self, regime_type: str) -> str:
        regime_type = regime_type.upper()
        if regime_type not in REGIME_TYPES:
            raise ValidationError(f"Invalid regime type. Must be one of: {', '.join(REGIME_TYPES)}")
        return regime_type

    def create(self, regime_data: TaxRegimeCreate, user_id: int = None) -> TaxRegime:
        self._check_code(regime_data.regime_code)
        if regime_data.end_date and regime_data.end_date < regime_data.effective_date:
            raise ValidationError("End date cannot be before the effective date")

        regime = TaxRegime(
            **regime_data.model_dump(exclude={"regime_type", "status"}),
            regime_type=self._check_type(regime_data.regime_type),
            status=regime_data.status.upper(),
            created_by=user_id
        )
        self.db.add(regime)
        self.db.flush()
        return regime

    def update(self, regime_id: int, regime_data: TaxRegimeUpdate) -> Optional[TaxRegime]:
        regime = self.get_by_id(regime_id)
        if not regime:
            return None

        update_data = regime_data.model_dump(exclude_unset=True)
        if update_data.get("regime_code"):
            self._check_code(update_data["regime_code"], regime_id)
        if update_data.get("regime_type"):
            update_data["regime_type"] = self._check_type(update_data["regime_type"])
        if update_data.get("status"):
            update_data["status"] = update_data["status"].upper()

        for key, value in update_data.items():
            if value is not None or key in ("tax_authority", "end_date"):
                setattr(regime, key, value)

        if regime.end_date and regime.end_date < regime.effective_date:
            raise ValidationError("End date cannot be before the effective date")

        self.db.flush()
        return regime

    def delete(self, regime_id: int) -> bool:
        regime = self.get_by_id(regime_id)
        if not regime:
            return False

        type_count = self.db.query(func.count(TaxType.id)).filter(TaxType.regime_id == regime_id).scalar()
        if type_count:
            raise DependencyExistsError(f"Cannot delete tax regime used by {type_count} tax type(s)")

        self.db.delete(regime)
        self.db.flush()
        return True


class TaxTypeService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, tax_type_id: int) -> Optional[TaxType]:
        return self.db.query(TaxType).filter(TaxType.id == tax_type_id).first()

    def get_all(self, status: str = None) -> List[TaxType]:
        query = self.db.query(TaxType)
        if status:
            query = query.filter(TaxType.status == status.upper())
        return query.order_by(TaxType.tax_type_code).all()

    def _check_code(self, code: str, tax_type_id: int = None):
        query = self.db.query(TaxType).filter(TaxType.tax_type_code == code)
        if tax_type_id is not None:
            query = query.filter(TaxType.id != tax_type_id)
        if query.first():
            raise ConflictError(f"Tax type with code '{code}' already exists")

    def _check_regime(self, regime_id: int):
        if not self.db.query(TaxRegime).filter(TaxRegime.id == regime_id).first():
            raise ValidationError("Tax regime not found")

    def create(self, tax_type_data: TaxTypeCreate, user_id: int = None) -> TaxType:
        self._check_code(tax_type_data.tax_type_code)
        if tax_type_data.regime_id is not None:
            self._check_regime(tax_type_data.regime_id)
        tax_type = TaxType(
            **tax_type_data.model_dump(exclude={"status"}),
            status=tax_type_data.status.upper(),
            created_by=user_id
        )
        self.db.add(tax_type)
        self.db.flush()
        return tax_type

    def update(self, tax_type_id: int, tax_type_data: TaxTypeUpdate) -> Optional[TaxType]:
        tax_type = self.get_by_id(tax_type_id)
        if not tax_type:
            return None

        update_data = tax_type_data.model_dump(exclude_unset=True)
        if update_data.get("tax_type_code"):
            self._check_code(update_data["tax_type_code"], tax_type_id)
        if update_data.get("regime_id") is not None:
            self._check_regime(update_data["regime_id"])
        if update_data.get("status"):
            update_data["status"] = update_data["status"].upper()

        for key, value in update_data.items():
            if value is not None or key in ("description", "regime_id"):
                setattr(tax_type, key, value)

        self.db.flush()
        return tax_type

    def delete(self, tax_type_id: int) -> bool:
        tax_type = self.get_by_id(tax_type_id)
        if not tax_type:
            return False

        rate_count = self.db.query(func.count(TaxRate.id)).filter(
            TaxRate.tax_type_id == tax_type_id
        ).scalar()
        if rate_count:
            raise DependencyExistsError(f"Cannot delete tax type with {rate_count} tax rate(s)")

        self.db.delete(tax_type)
        self.db.flush()
        return True


class TaxRateService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, rate_id: int) -> Optional[TaxRate]:
        return self.db.query(TaxRate).options(
            joinedload(TaxRate.tax_type)
        ).filter(TaxRate.id == rate_id).first()

    def get_all(self, tax_type_id: int = None, status: str = None) -> List[TaxRate]:
        query = self.db.query(TaxRate).options(joinedload(TaxRate.tax_type))
        if tax_type_id:
            query = query.filter(TaxRate.tax_type_id == tax_type_id)
        if status:
            query = query.filter(TaxRate.status == status.upper())
        return query.order_by(TaxRate.rate_code).all()

    def _check_code(self, code: str, rate_id: int = None):
        query = self.db.query(TaxRate).filter(TaxRate.rate_code == code)
        if rate_id is not None:
            query = query.filter(TaxRate.id != rate_id)
        if query.first():
            raise ConflictError(f"Tax rate with code '{code}' already exists")

    def _check_type(self, tax_type_id: int):
        if not self.db.query(TaxType).filter(TaxType.id == tax_type_id).first():
            raise ValidationError("Tax type not found")

    def create(self, rate_data: TaxRateCreate, user_id: int = None) -> TaxRate:
        self._check_code(rate_data.rate_code)
        self._check_type(rate_data.tax_type_id)
        if rate_data.end_date and rate_data.end_date < rate_data.effective_date:
            raise ValidationError("End date cannot be before the effective date")

        rate = TaxRate(
            **rate_data.model_dump(exclude={"status"}),
            status=rate_data.status.upper(),
            created_by=user_id
        )
        self.db.add(rate)
        self.db.flush()
        return rate

    def update(self, rate_id: int, rate_data: TaxRateUpdate) -> Optional[TaxRate]:
        rate = self.get_by_id(rate_id)
        if not rate:
            return None

        update_data = rate_data.model_dump(exclude_unset=True)
        if update_data.get("rate_code"):
            self._check_code(update_data["rate_code"], rate_id)
        if update_data.get("tax_type_id"):
            self._check_type(update_data["tax_type_id"])
        if update_data.get("status"):
            update_data["status"] = update_data["status"].upper()

        for key, value in update_data.items():
            if value is not None or key == "end_date":
                setattr(rate, key, value)

        if rate.end_date and rate.end_date < rate.effective_date:
            raise ValidationError("End date cannot be before the effective date")

        self.db.flush()
        return rate

    def delete(self, rate_id: int) -> bool:
        rate = self.get_by_id(rate_id)
        if not rate:
            return False
        self.db.delete(rate)
        self.db.flush()
        return True
