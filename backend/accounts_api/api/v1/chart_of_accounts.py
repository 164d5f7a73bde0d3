"""
Chart of Accounts API Routes
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from accounts_api.core.database import get_db
from accounts_api.core.security import get_current_user, require_admin
from accounts_api.schemas import AccountCreate, AccountResponse, AccountUpdate, MessageResponse
from accounts_api.services.accounting_service import AccountService

router = APIRouter(prefix="/chart-of-accounts", tags=["Chart of Accounts"])


@router.get("", response_model=List[AccountResponse])
async def list_accounts(
    include_inactive: bool = False,
    account_type: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return AccountService(db).get_all(include_inactive, account_type)


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    account = AccountService(db).get_by_id(account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    return account


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_account(
    account_data: AccountCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    account = AccountService(db).create(account_data)
    db.commit()
    return account


@router.put("/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: int,
    account_data: AccountUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    account = AccountService(db).update(account_id, account_data)
    db.commit()
    return account


@router.delete("/{account_id}", response_model=MessageResponse)
async def delete_account(
    account_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    """Delete an account, or deactivate it when journal lines reference it"""
    outcome = AccountService(db).delete(account_id)
    db.commit()
    return {"message": f"Account {outcome} successfully"}
