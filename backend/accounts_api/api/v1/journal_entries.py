"""
Journal Entry API Routes
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from accounts_api.core.database import get_db, transaction
from accounts_api.core.security import get_current_user
from accounts_api.schemas import (
    AccountResponse, JournalEntryCreate, JournalEntryDetail, JournalEntryResponse,
    JournalEntryUpdate, MessageResponse
)
from accounts_api.models import JournalStatus
from accounts_api.services.accounting_service import AccountService, JournalEntryService
from accounts_api.services.audit_service import AuditService, AuditAction

router = APIRouter(prefix="/journal-entries", tags=["Journal Entries"])


@router.get("", response_model=List[JournalEntryResponse])
async def list_journal_entries(
    status: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return JournalEntryService(db).get_all(status=status, date_from=date_from, date_to=date_to)


@router.get("/accounts/list", response_model=List[AccountResponse])
async def list_postable_accounts(
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Active accounts available for journal lines"""
    return AccountService(db).get_all()


@router.get("/{entry_id}", response_model=JournalEntryDetail)
async def get_journal_entry(
    entry_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    entry = JournalEntryService(db).get_by_id(entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Journal entry not found")
    return entry


@router.post("", response_model=JournalEntryDetail, status_code=status.HTTP_201_CREATED)
async def create_journal_entry(
    entry_data: JournalEntryCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Create a balanced entry; ``status="posted"`` posts it immediately"""
    journal_service = JournalEntryService(db)
    with transaction(db):
        entry = journal_service.create(entry_data, current_user.id)
        if entry.status == JournalStatus.POSTED:
            AuditService(db).log(
                action=AuditAction.JOURNAL_POSTED,
                resource_type="JournalEntry",
                resource_id=entry.id,
                description=f"Journal entry {entry.entry_id} posted on creation",
                user_id=current_user.id,
                email=current_user.email
            )
    return journal_service.get_by_id(entry.id)


@router.put("/{entry_id}", response_model=JournalEntryDetail)
async def update_journal_entry(
    entry_id: int,
    entry_data: JournalEntryUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Update a draft entry"""
    journal_service = JournalEntryService(db)
    with transaction(db):
        journal_service.update(entry_id, entry_data)
    return journal_service.get_by_id(entry_id)


@router.post("/{entry_id}/post", response_model=JournalEntryResponse)
async def post_journal_entry(
    entry_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        entry = JournalEntryService(db).post(entry_id, current_user.id)
        AuditService(db).log(
            action=AuditAction.JOURNAL_POSTED,
            resource_type="JournalEntry",
            resource_id=entry_id,
            description=f"Journal entry {entry.entry_id} posted",
            user_id=current_user.id,
            email=current_user.email
        )
    return entry


@router.post("/{entry_id}/void", response_model=JournalEntryResponse)
async def void_journal_entry(
    entry_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    with transaction(db):
        entry = JournalEntryService(db).void(entry_id, current_user.id)
        AuditService(db).log(
            action=AuditAction.JOURNAL_VOIDED,
            resource_type="JournalEntry",
            resource_id=entry_id,
            description=f"Journal entry {entry.entry_id} voided",
            user_id=current_user.id,
            email=current_user.email
        )
    return entry


@router.delete("/{entry_id}", response_model=MessageResponse)
async def delete_journal_entry(
    entry_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Delete a draft or void entry together with its lines"""
    with transaction(db):
        JournalEntryService(db).delete(entry_id)
    return {"message": "Journal entry deleted successfully"}
