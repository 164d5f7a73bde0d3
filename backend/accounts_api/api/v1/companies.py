"""
Company API Routes
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from accounts_api.core.database import get_db, transaction
from accounts_api.core.security import get_current_user
from accounts_api.schemas import CompanyCreate, CompanyResponse, CompanyUpdate, MessageResponse
from accounts_api.services.company_service import CompanyService

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("", response_model=List[CompanyResponse])
async def list_companies(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return CompanyService(db).get_all(status)


@router.get("/stats/summary")
async def get_company_stats(
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return CompanyService(db).get_stats()


@router.get("/status/{company_status}", response_model=List[CompanyResponse])
async def list_companies_by_status(
    company_status: str,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return CompanyService(db).get_all(company_status)


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    company = CompanyService(db).get_by_id(company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return company


@router.post("", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(
    company_data: CompanyCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Create a company; the code is allocated from the company sequence"""
    with transaction(db):
        company = CompanyService(db).create(company_data, current_user.id)
    return company


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: int,
    company_data: CompanyUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    company = CompanyService(db).update(company_id, company_data)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    db.commit()
    return company


@router.delete("/{company_id}", response_model=MessageResponse)
async def delete_company(
    company_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    if not CompanyService(db).delete(company_id):
        raise HTTPException(status_code=404, detail="Company not found")
    db.commit()
    return {"message": "Company deleted successfully"}
