"""
Tax Configuration API Routes - Tax regimes, types and rates
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from accounts_api.core.database import get_db
from accounts_api.core.security import get_current_user
from accounts_api.schemas import (
    MessageResponse, TaxRateCreate, TaxRateResponse, TaxRateUpdate,
    TaxRegimeCreate, TaxRegimeResponse, TaxRegimeUpdate,
    TaxTypeCreate, TaxTypeResponse, TaxTypeUpdate
)
from accounts_api.services.tax_service import TaxRateService, TaxRegimeService, TaxTypeService

regimes_router = APIRouter(prefix="/tax-regimes", tags=["Tax Regimes"])
types_router = APIRouter(prefix="/tax-types", tags=["Tax Types"])
rates_router = APIRouter(prefix="/tax-rates", tags=["Tax Rates"])


# ==================== TAX REGIMES ====================

@regimes_router.get("", response_model=List[TaxRegimeResponse])
async def list_tax_regimes(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return TaxRegimeService(db).get_all(status)


@regimes_router.get("/{regime_id}", response_model=TaxRegimeResponse)
async def get_tax_regime(
    regime_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    regime = TaxRegimeService(db).get_by_id(regime_id)
    if not regime:
        raise HTTPException(status_code=404, detail="Tax regime not found")
    return regime


@regimes_router.post("", response_model=TaxRegimeResponse, status_code=status.HTTP_201_CREATED)
async def create_tax_regime(
    regime_data: TaxRegimeCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    regime = TaxRegimeService(db).create(regime_data, current_user.id)
    db.commit()
    return regime


@regimes_router.put("/{regime_id}", response_model=TaxRegimeResponse)
async def update_tax_regime(
    regime_id: int,
    regime_data: TaxRegimeUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    regime = TaxRegimeService(db).update(regime_id, regime_data)
    if not regime:
        raise HTTPException(status_code=404, detail="Tax regime not found")
    db.commit()
    return regime


@regimes_router.delete("/{regime_id}", response_model=MessageResponse)
async def delete_tax_regime(
    regime_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Delete a regime; refused while tax types still reference it"""
    if not TaxRegimeService(db).delete(regime_id):
        raise HTTPException(status_code=404, detail="Tax regime not found")
    db.commit()
    return {"message": "Tax regime deleted successfully"}


# ==================== TAX TYPES ====================

@types_router.get("", response_model=List[TaxTypeResponse])
async def list_tax_types(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return TaxTypeService(db).get_all(status)


@types_router.get("/{tax_type_id}", response_model=TaxTypeResponse)
async def get_tax_type(
    tax_type_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    tax_type = TaxTypeService(db).get_by_id(tax_type_id)
    if not tax_type:
        raise HTTPException(status_code=404, detail="Tax type not found")
    return tax_type


@types_router.post("", response_model=TaxTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_tax_type(
    tax_type_data: TaxTypeCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    tax_type = TaxTypeService(db).create(tax_type_data, current_user.id)
    db.commit()
    return tax_type


@types_router.put("/{tax_type_id}", response_model=TaxTypeResponse)
async def update_tax_type(
    tax_type_id: int,
    tax_type_data: TaxTypeUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    tax_type = TaxTypeService(db).update(tax_type_id, tax_type_data)
    if not tax_type:
        raise HTTPException(status_code=404, detail="Tax type not found")
    db.commit()
    return tax_type


@types_router.delete("/{tax_type_id}", response_model=MessageResponse)
async def delete_tax_type(
    tax_type_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    if not TaxTypeService(db).delete(tax_type_id):
        raise HTTPException(status_code=404, detail="Tax type not found")
    db.commit()
    return {"message": "Tax type deleted successfully"}


# ==================== TAX RATES ====================

@rates_router.get("", response_model=List[TaxRateResponse])
async def list_tax_rates(
    tax_type_id: Optional[int] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return TaxRateService(db).get_all(tax_type_id, status)


@rates_router.get("/{rate_id}", response_model=TaxRateResponse)
async def get_tax_rate(
    rate_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    rate = TaxRateService(db).get_by_id(rate_id)
    if not rate:
        raise HTTPException(status_code=404, detail="Tax rate not found")
    return rate


@rates_router.post("", response_model=TaxRateResponse, status_code=status.HTTP_201_CREATED)
async def create_tax_rate(
    rate_data: TaxRateCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    rate = TaxRateService(db).create(rate_data, current_user.id)
    db.commit()
    return rate


@rates_router.put("/{rate_id}", response_model=TaxRateResponse)
async def update_tax_rate(
    rate_id: int,
    rate_data: TaxRateUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    rate = TaxRateService(db).update(rate_id, rate_data)
    if not rate:
        raise HTTPException(status_code=404, detail="Tax rate not found")
    db.commit()
    return rate


@rates_router.delete("/{rate_id}", response_model=MessageResponse)
async def delete_tax_rate(
    rate_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    if not TaxRateService(db).delete(rate_id):
        raise HTTPException(status_code=404, detail="Tax rate not found")
    db.commit()
    return {"message": "Tax rate deleted successfully"}
