"""
Accounting Service - Chart of Accounts, Journal Entries
"""
from typing import Optional, List
from sqlalchemy.orm import Session, joinedload
from decimal import Decimal
from datetime import date, datetime
import logging

from accounts_api.core.exceptions import (
    ConflictError, NotFoundError, ValidationError, ImbalancedEntryError,
    AlreadyPostedError, PostedEntryImmutableError, VoidEntryError
)
from accounts_api.models import (
    AccountType, ChartOfAccount, JournalEntry, JournalEntryLineItem, JournalStatus
)
from accounts_api.schemas import (
    AccountCreate, AccountUpdate, JournalEntryCreate, JournalEntryUpdate, JournalLineCreate
)
from accounts_api.services.document_service import DocumentWriter, is_balanced, to_money
from accounts_api.services.sequence_service import (
    JOURNAL_ENTRY_ID_SEQ, JOURNAL_ENTRY_LINE_ID_SEQ, journal_entry_number
)

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, account_id: int) -> Optional[ChartOfAccount]:
        return self.db.query(ChartOfAccount).filter(ChartOfAccount.id == account_id).first()

    def get_by_code(self, code: str) -> Optional[ChartOfAccount]:
        return self.db.query(ChartOfAccount).filter(ChartOfAccount.account_code == code).first()

    def get_all(self, include_inactive: bool = False, account_type: str = None) -> List[ChartOfAccount]:
        query = self.db.query(ChartOfAccount)
        if not include_inactive:
            query = query.filter(ChartOfAccount.is_active == True)
        if account_type:
            query = query.filter(ChartOfAccount.account_type == account_type.upper())
        return query.order_by(ChartOfAccount.account_code).all()

    def _check_type(self, account_type: str) -> str:
        account_type = account_type.upper()
        if account_type not in AccountType.ALL:
            raise ValidationError(
                f"Invalid account type. Must be one of: {', '.join(AccountType.ALL)}"
            )
        return account_type

    def _check_parent(self, parent_id: Optional[int], account_id: Optional[int] = None):
        if parent_id is None:
            return
        if parent_id == account_id:
            raise ValidationError("An account cannot be its own parent")
        if not self.get_by_id(parent_id):
            raise ValidationError("Parent account not found")

    def create(self, account_data: AccountCreate) -> ChartOfAccount:
        account_type = self._check_type(account_data.account_type)

        if self.get_by_code(account_data.account_code):
            raise ConflictError(f"Account with code '{account_data.account_code}' already exists")
        self._check_parent(account_data.parent_id)

        account = ChartOfAccount(
            account_code=account_data.account_code,
            account_name=account_data.account_name,
            account_type=account_type,
            parent_id=account_data.parent_id,
            description=account_data.description
        )
        self.db.add(account)
        self.db.flush()
        return account

    def update(self, account_id: int, account_data: AccountUpdate) -> ChartOfAccount:
        account = self.get_by_id(account_id)
        if not account:
            raise NotFoundError("Account not found")

        update_data = account_data.model_dump(exclude_unset=True)

        if update_data.get('account_code'):
            existing = self.db.query(ChartOfAccount).filter(
                ChartOfAccount.account_code == update_data['account_code'],
                ChartOfAccount.id != account_id
            ).first()
            if existing:
                raise ConflictError(f"Account with code '{update_data['account_code']}' already exists")

        if update_data.get('account_type'):
            update_data['account_type'] = self._check_type(update_data['account_type'])
        if 'parent_id' in update_data:
            self._check_parent(update_data['parent_id'], account_id)

        for key, value in update_data.items():
            if value is not None or key == 'parent_id':
                setattr(account, key, value)

        self.db.flush()
        return account

    def delete(self, account_id: int) -> str:
        """Deactivate an account that has journal lines, otherwise remove it"""
        account = self.get_by_id(account_id)
        if not account:
            raise NotFoundError("Account not found")

        has_entries = self.db.query(JournalEntryLineItem).filter(
            JournalEntryLineItem.account_id == account_id
        ).first()

        if has_entries:
            account.is_active = False
            self.db.flush()
            return "deactivated"

        self.db.query(ChartOfAccount).filter(
            ChartOfAccount.parent_id == account_id
        ).update({ChartOfAccount.parent_id: None}, synchronize_session=False)
        self.db.delete(account)
        self.db.flush()
        return "deleted"


class JournalEntryService:
    """
    Journal entry lifecycle: draft -> posted -> void, or draft -> void.

    Posted entries only accept the transition to void.
    """

    def __init__(self, db: Session):
        self.db = db
        self.writer = DocumentWriter(
            db,
            header_model=JournalEntry,
            line_model=JournalEntryLineItem,
            header_sequence=JOURNAL_ENTRY_ID_SEQ,
            line_sequence=JOURNAL_ENTRY_LINE_ID_SEQ,
            header_key="id",
            line_key="id",
            line_parent_key="journal_entry_id",
        )

    def get_by_id(self, entry_id: int) -> Optional[JournalEntry]:
        return self.db.query(JournalEntry).options(
            joinedload(JournalEntry.line_items).joinedload(JournalEntryLineItem.account)
        ).filter(JournalEntry.id == entry_id).first()

    def _get_or_404(self, entry_id: int) -> JournalEntry:
        entry = self.db.query(JournalEntry).filter(JournalEntry.id == entry_id).first()
        if not entry:
            raise NotFoundError("Journal entry not found")
        return entry

    def get_all(
        self,
        status: str = None,
        date_from: date = None,
        date_to: date = None
    ) -> List[JournalEntry]:
        query = self.db.query(JournalEntry)
        if status:
            query = query.filter(JournalEntry.status == status.lower())
        if date_from:
            query = query.filter(JournalEntry.entry_date >= date_from)
        if date_to:
            query = query.filter(JournalEntry.entry_date <= date_to)
        return query.order_by(JournalEntry.entry_date.desc(), JournalEntry.id.desc()).all()

    def _prepare_lines(self, lines: List[JournalLineCreate]):
        """Validate lines and return (line dicts, total debit, total credit)"""
        account_ids = {line.account_id for line in lines}
        found = {
            row[0] for row in self.db.query(ChartOfAccount.id).filter(
                ChartOfAccount.id.in_(account_ids)
            ).all()
        }
        missing = account_ids - found
        if missing:
            raise ValidationError(f"Account(s) not found: {', '.join(str(i) for i in sorted(missing))}")

        prepared = []
        total_debit = Decimal("0.00")
        total_credit = Decimal("0.00")
        for line in lines:
            debit = to_money(line.debit_amount)
            credit = to_money(line.credit_amount)
            if debit > 0 and credit > 0:
                raise ValidationError("A line cannot carry both a debit and a credit amount")
            total_debit += debit
            total_credit += credit
            prepared.append({
                "account_id": line.account_id,
                "description": line.description,
                "debit_amount": debit,
                "credit_amount": credit,
            })

        if not is_balanced(total_debit, total_credit):
            raise ImbalancedEntryError(
                f"Total debits ({total_debit:.2f}) must equal total credits ({total_credit:.2f})"
            )
        return prepared, total_debit, total_credit

    def create(self, entry_data: JournalEntryCreate, user_id: int = None) -> JournalEntry:
        status = entry_data.status.lower()
        if status not in (JournalStatus.DRAFT, JournalStatus.POSTED):
            raise ValidationError("New journal entries must be draft or posted")

        if entry_data.entry_id:
            existing = self.db.query(JournalEntry).filter(
                JournalEntry.entry_id == entry_data.entry_id
            ).first()
            if existing:
                raise ConflictError(f"Journal entry '{entry_data.entry_id}' already exists")

        # Checked before anything is written
        lines, total_debit, total_credit = self._prepare_lines(entry_data.line_items)

        header_id = self.writer.allocate_header_id()
        entry = self.writer.create(
            {
                "entry_id": entry_data.entry_id or journal_entry_number(header_id),
                "entry_date": entry_data.entry_date,
                "description": entry_data.description,
                "reference": entry_data.reference,
                "status": JournalStatus.DRAFT,
                "total_debit": total_debit,
                "total_credit": total_credit,
                "created_by": user_id,
            },
            lines,
            header_id=header_id
        )

        if status == JournalStatus.POSTED:
            self.post(entry.id, user_id)
        return entry

    def update(self, entry_id: int, entry_data: JournalEntryUpdate) -> JournalEntry:
        entry = self._get_or_404(entry_id)
        if entry.status == JournalStatus.POSTED:
            raise PostedEntryImmutableError()
        if entry.status == JournalStatus.VOID:
            raise VoidEntryError("Void journal entries cannot be modified")

        update_data = entry_data.model_dump(exclude_unset=True, exclude={"line_items"})
        for key, value in update_data.items():
            if value is not None or key in ("description", "reference"):
                setattr(entry, key, value)

        if entry_data.line_items is not None:
            lines, total_debit, total_credit = self._prepare_lines(entry_data.line_items)
            entry.total_debit = total_debit
            entry.total_credit = total_credit
            self.writer.replace_lines(entry, lines)

        self.db.flush()
        return entry

    def post(self, entry_id: int, user_id: int = None) -> JournalEntry:
        entry = self._get_or_404(entry_id)
        if entry.status == JournalStatus.POSTED:
            raise AlreadyPostedError()
        if entry.status == JournalStatus.VOID:
            raise VoidEntryError("Void journal entries cannot be posted")

        line_totals = self.db.query(JournalEntryLineItem).filter(
            JournalEntryLineItem.journal_entry_id == entry_id
        ).all()
        if not line_totals:
            raise ValidationError("Journal entry has no line items")

        total_debit = sum((to_money(line.debit_amount) for line in line_totals), Decimal("0.00"))
        total_credit = sum((to_money(line.credit_amount) for line in line_totals), Decimal("0.00"))
        if not is_balanced(total_debit, total_credit):
            raise ImbalancedEntryError(
                f"Cannot post: total debits ({total_debit:.2f}) do not equal total credits ({total_credit:.2f})"
            )

        entry.total_debit = total_debit
        entry.total_credit = total_credit
        entry.status = JournalStatus.POSTED
        entry.posted_by = user_id
        entry.posted_at = datetime.utcnow()
        self.db.flush()

        logger.info(f"Journal entry {entry.entry_id} posted by user {user_id}")
        return entry

    def void(self, entry_id: int, user_id: int = None) -> JournalEntry:
        entry = self._get_or_404(entry_id)
        if entry.status == JournalStatus.VOID:
            raise VoidEntryError("Journal entry is already void")

        entry.status = JournalStatus.VOID
        entry.voided_by = user_id
        entry.voided_at = datetime.utcnow()
        self.db.flush()

        logger.info(f"Journal entry {entry.entry_id} voided by user {user_id}")
        return entry

    def delete(self, entry_id: int):
        """Remove line items then the header; posted entries must be voided instead"""
        entry = self._get_or_404(entry_id)
        if entry.status == JournalStatus.POSTED:
            raise PostedEntryImmutableError("Posted journal entries cannot be deleted; void the entry instead")

        self.writer.delete_lines(entry)
        self.db.delete(entry)
        self.db.flush()
