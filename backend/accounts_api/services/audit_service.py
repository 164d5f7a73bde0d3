"""
Audit Logging Service
Sign-ins and financial state changes, written in the caller's transaction
"""
from sqlalchemy.orm import Session
from typing import Optional
import logging

from accounts_api.models import AuditLog

logger = logging.getLogger(__name__)


class AuditAction:
    """Constants for audit actions"""
    # Authentication
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"
    USER_CREATED = "USER_CREATED"

    # Ledger and balances
    JOURNAL_POSTED = "JOURNAL_POSTED"
    JOURNAL_VOIDED = "JOURNAL_VOIDED"
    PAYMENT_APPLIED = "PAYMENT_APPLIED"
    APPLICATION_REVERSED = "APPLICATION_REVERSED"

    # Administration
    SEQUENCE_RESET = "SEQUENCE_RESET"


class AuditService:
    def __init__(self, db: Session):
        self.db = db

    def log(
        self,
        action: str,
        resource_type: str,
        resource_id=None,
        description: Optional[str] = None,
        user_id: Optional[int] = None,
        email: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        status: str = "success",
        error_message: Optional[str] = None
    ) -> AuditLog:
        """
        Add an ``audit_logs`` row for ``action`` on ``resource_type``.

        The row is flushed, not committed: it lands or rolls back together
        with the operation it describes. ``email`` is stored alongside
        ``user_id`` so failed sign-ins for unknown accounts are still traceable.
        """
        entry = AuditLog(
            action=action,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id is not None else None,
            description=description,
            user_id=user_id,
            email=email,
            ip_address=ip_address,
            user_agent=user_agent,
            status=status,
            error_message=error_message
        )
        self.db.add(entry)
        self.db.flush()

        logger.info(
            f"Audit: {action} {resource_type}(id={resource_id}) by user={email or user_id} status={status}"
        )
        return entry
