"""
Sequence API Routes
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from accounts_api.core.database import get_db, transaction
from accounts_api.core.security import get_current_user, require_admin
from accounts_api.schemas import SequenceReset, SequenceResponse
from accounts_api.services.audit_service import AuditService, AuditAction
from accounts_api.services.sequence_service import SequenceStore

router = APIRouter(prefix="/sequences", tags=["Sequences"])


@router.get("", response_model=List[SequenceResponse])
async def list_sequences(
    prefix: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """List sequence counters, optionally filtered by name prefix"""
    return SequenceStore(db).get_stats(prefix)


@router.get("/{name}")
async def get_sequence(
    name: str,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Get the value the next allocation will return"""
    return {"sequence_name": name, "current_value": SequenceStore(db).get_current(name)}


@router.post("/{name}/reset")
async def reset_sequence(
    name: str,
    reset_data: SequenceReset,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    """Reset a sequence so ``value`` is the next one issued (admin only)"""
    with transaction(db):
        value = SequenceStore(db).reset(name, reset_data.value)
        AuditService(db).log(
            action=AuditAction.SEQUENCE_RESET,
            resource_type="Sequence",
            resource_id=name,
            description=f"Sequence {name} reset to {value}",
            user_id=current_user.id,
            email=current_user.email
        )
    return {"success": True, "message": f"Sequence {name} reset", "sequence_name": name, "current_value": value}
