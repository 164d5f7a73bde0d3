"""
Profile API Routes - The signed-in user's own details
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from accounts_api.core.database import get_db, transaction
from accounts_api.core.security import get_current_user
from accounts_api.schemas import ProfileResponse, ProfileUpdate
from accounts_api.services.user_service import UserService

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("/me", response_model=ProfileResponse)
async def get_profile(
    current_user = Depends(get_current_user)
):
    return current_user


@router.put("/me", response_model=ProfileResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """Update name, email, phone or company; the email must stay unique"""
    with transaction(db):
        user = UserService(db).update_profile(current_user, profile_data)
    return user
