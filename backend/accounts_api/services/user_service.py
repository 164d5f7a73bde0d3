"""
User Service - Business Logic for User Operations
"""
from typing import Optional
from sqlalchemy.orm import Session
from datetime import datetime
import re

from accounts_api.core.exceptions import ConflictError, ValidationError
from accounts_api.core.security import get_password_hash, verify_password
from accounts_api.models import User, Role
from accounts_api.schemas import ProfileUpdate, SignupRequest

_LETTER_RE = re.compile(r"[A-Za-z]")
_DIGIT_RE = re.compile(r"\d")


def validate_password(password: str):
    if len(password) < 6:
        raise ValidationError("Password must be at least 6 characters long")
    if len(password) > 50:
        raise ValidationError("Password must be less than 50 characters")
    if not _LETTER_RE.search(password) or not _DIGIT_RE.search(password):
        raise ValidationError("Password must contain at least one letter and one number")


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def create(self, user_data: SignupRequest, role: str = Role.USER) -> User:
        validate_password(user_data.password)
        if role not in Role.ALL:
            raise ValidationError(f"Invalid role: {role}")

        if self.get_by_email(user_data.email):
            raise ConflictError("User with this email already exists")

        user = User(
            email=user_data.email.lower(),
            password_hash=get_password_hash(user_data.password),
            first_name=user_data.first_name.strip(),
            last_name=user_data.last_name.strip(),
            role=role,
            is_active=True
        )
        self.db.add(user)
        self.db.flush()
        return user

    def authenticate(self, email: str, password: str) -> Optional[User]:
        user = self.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            return None
        return user

    def record_login(self, user: User):
        user.last_login = datetime.utcnow()
        self.db.flush()

    def update_profile(self, user: User, profile_data: ProfileUpdate) -> User:
        update_data = profile_data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationError("No fields to update")

        if update_data.get("email"):
            update_data["email"] = update_data["email"].lower()
            existing = self.get_by_email(update_data["email"])
            if existing and existing.id != user.id:
                raise ConflictError("Email already exists")

        for key, value in update_data.items():
            if value is not None or key in ("phone", "company"):
                setattr(user, key, value.strip() if isinstance(value, str) else value)

        self.db.flush()
        return user
