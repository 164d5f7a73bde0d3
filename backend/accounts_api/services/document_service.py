"""
Document Service - Header + lines writer shared by invoices, journal entries
and purchase agreements
"""
from typing import Dict, List, Optional, Type
from sqlalchemy.orm import Session
from decimal import Decimal, ROUND_HALF_UP

from accounts_api.core.database import Base
from accounts_api.services.sequence_service import SequenceStore

MONEY_PLACES = Decimal("0.01")

# Rounding slack allowed when comparing debit and credit totals
BALANCE_TOLERANCE = Decimal("0.01")


def to_money(value) -> Decimal:
    """Convert to a two-place Decimal without passing through float"""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def is_balanced(total_debit: Decimal, total_credit: Decimal) -> bool:
    return abs(to_money(total_debit) - to_money(total_credit)) <= BALANCE_TOLERANCE


def calculate_line_amounts(line: Dict) -> Dict:
    """Fill ``line_amount``, ``tax_amount`` and ``total_line_amount`` for an invoice line"""
    quantity = line.get("quantity")
    quantity = Decimal("1") if quantity is None else Decimal(str(quantity))
    unit_price = to_money(line.get("unit_price"))
    line_amount = to_money(quantity * unit_price)
    tax_rate = Decimal(str(line.get("tax_rate") or 0))

    if line.get("tax_amount") is not None:
        tax_amount = to_money(line["tax_amount"])
    else:
        tax_amount = to_money(line_amount * tax_rate / 100)

    return {
        **line,
        "quantity": quantity,
        "unit_price": unit_price,
        "tax_rate": tax_rate,
        "line_amount": line_amount,
        "tax_amount": tax_amount,
        "total_line_amount": line_amount + tax_amount,
    }


def calculate_totals(lines: List[Dict]) -> Dict:
    """Calculate invoice totals from lines already passed through ``calculate_line_amounts``"""
    subtotal = sum((line["line_amount"] for line in lines), Decimal("0.00"))
    tax_amount = sum((line["tax_amount"] for line in lines), Decimal("0.00"))
    return {
        "subtotal": subtotal,
        "tax_amount": tax_amount,
        "total_amount": subtotal + tax_amount
    }


class DocumentWriter:
    """
    Writes a document header and its lines.

    The header key comes from ``header_sequence`` and every line key from one
    ``line_sequence`` call, in line order. Nothing is committed here: callers
    wrap the call in ``transaction()`` so a failure on any line also drops
    the header.
    """

    def __init__(
        self,
        db: Session,
        header_model: Type[Base],
        line_model: Type[Base],
        header_sequence: str,
        line_sequence: str,
        header_key: str,
        line_key: str,
        line_parent_key: Optional[str] = None,
    ):
        self.db = db
        self.header_model = header_model
        self.line_model = line_model
        self.header_sequence = header_sequence
        self.line_sequence = line_sequence
        self.header_key = header_key
        self.line_key = line_key
        self.line_parent_key = line_parent_key or header_key
        self.sequences = SequenceStore(db)

    def allocate_header_id(self) -> int:
        return self.sequences.get_next(self.header_sequence)

    def create(self, header_fields: Dict, lines: List[Dict], header_id: Optional[int] = None):
        """Insert the header then each line with ``line_number = index + 1``"""
        if header_id is None:
            header_id = self.allocate_header_id()

        header = self.header_model(**{self.header_key: header_id}, **header_fields)
        self.db.add(header)
        self.db.flush()

        self._insert_lines(header_id, lines)
        self.db.expire(header)
        return header

    def replace_lines(self, header, lines: List[Dict]):
        """Drop the current lines of ``header`` and insert ``lines`` in their place"""
        header_id = getattr(header, self.header_key)
        self.delete_lines(header)
        self._insert_lines(header_id, lines)
        self.db.expire(header)
        return header

    def delete_lines(self, header) -> int:
        header_id = getattr(header, self.header_key)
        parent_column = getattr(self.line_model, self.line_parent_key)
        deleted = self.db.query(self.line_model).filter(
            parent_column == header_id
        ).delete(synchronize_session=False)
        self.db.flush()
        self.db.expire(header)
        return deleted

    def _insert_lines(self, header_id: int, lines: List[Dict]):
        for index, line_fields in enumerate(lines):
            line_id = self.sequences.get_next(self.line_sequence)
            line = self.line_model(
                **{self.line_key: line_id, self.line_parent_key: header_id},
                line_number=index + 1,
                **line_fields
            )
            self.db.add(line)
        self.db.flush()
