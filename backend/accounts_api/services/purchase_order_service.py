"""
Purchase Order Service - Purchase orders and goods receipts

Received quantities on purchase order lines only move through conditional
UPDATEs bounded by the ordered quantity, so two receipts racing for the same
outstanding quantity cannot both land.
"""
from typing import Optional, List
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, or_, update
from decimal import Decimal
import logging

from accounts_api.core.exceptions import DependencyExistsError, NotFoundError, ValidationError
from accounts_api.models import (
    AgreementStatus, GoodsReceipt, GoodsReceiptLine, GoodsReceiptStatus, PurchaseAgreement,
    PurchaseOrder, PurchaseOrderLine, PurchaseOrderStatus, PurchaseRequisition, RecordStatus,
    RequisitionStatus, Supplier, SupplierSite, User
)
from accounts_api.schemas import (
    GoodsReceiptCreate, GoodsReceiptUpdate, PurchaseOrderCreate, PurchaseOrderUpdate
)
from accounts_api.services.document_service import (
    DocumentWriter, calculate_line_amounts, calculate_totals, to_money
)
from accounts_api.services.sequence_service import (
    PO_HEADER_ID_SEQ, PO_LINE_ID_SEQ, PO_RECEIPT_ID_SEQ, PO_RECEIPT_LINE_ID_SEQ,
    goods_receipt_number, po_number
)

logger = logging.getLogger(__name__)

PO_TYPES = ["STANDARD", "BLANKET_RELEASE", "CONTRACT_RELEASE"]
RECEIPT_TYPES = ["STANDARD", "RETURN", "CORRECTION"]

# Orders goods can be received against
RECEIVABLE = [PurchaseOrderStatus.APPROVED, PurchaseOrderStatus.RELEASED, PurchaseOrderStatus.RECEIVED]

# Quantities are Numeric(15, 4); SQLite keeps them as REAL
QUANTITY_SLACK = Decimal("0.00005")


class PurchaseOrderService:
    def __init__(self, db: Session):
        self.db = db
        self.writer = DocumentWriter(
            db,
            header_model=PurchaseOrder,
            line_model=PurchaseOrderLine,
            header_sequence=PO_HEADER_ID_SEQ,
            line_sequence=PO_LINE_ID_SEQ,
            header_key="header_id",
            line_key="line_id",
        )

    def get_by_id(self, header_id: int) -> Optional[PurchaseOrder]:
        return self.db.query(PurchaseOrder).options(
            joinedload(PurchaseOrder.lines)
        ).filter(PurchaseOrder.header_id == header_id).first()

    def _get_or_404(self, header_id: int) -> PurchaseOrder:
        order = self.db.query(PurchaseOrder).filter(PurchaseOrder.header_id == header_id).first()
        if not order:
            raise NotFoundError("Purchase order not found")
        return order

    def get_all(self, search: str = None, status: str = None, supplier_id: int = None) -> List[PurchaseOrder]:
        query = self.db.query(PurchaseOrder)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                PurchaseOrder.po_number.ilike(pattern),
                PurchaseOrder.description.ilike(pattern)
            ))
        if status and status.upper() != "ALL":
            query = query.filter(PurchaseOrder.status == status.upper())
        if supplier_id:
            query = query.filter(PurchaseOrder.supplier_id == supplier_id)
        return query.order_by(PurchaseOrder.header_id.desc()).all()

    def get_lines(self, header_id: int) -> List[PurchaseOrderLine]:
        self._get_or_404(header_id)
        return self.db.query(PurchaseOrderLine).filter(
            PurchaseOrderLine.header_id == header_id
        ).order_by(PurchaseOrderLine.line_number).all()

    def _check_supplier(self, supplier_id: int, supplier_site_id: Optional[int]):
        supplier = self.db.query(Supplier).filter(Supplier.supplier_id == supplier_id).first()
        if not supplier:
            raise ValidationError("Supplier not found")
        if supplier.status != RecordStatus.ACTIVE:
            raise ValidationError("Supplier is inactive")
        if supplier_site_id is not None:
            site = self.db.query(SupplierSite).filter(
                SupplierSite.site_id == supplier_site_id,
                SupplierSite.supplier_id == supplier_id
            ).first()
            if not site:
                raise ValidationError("Supplier site does not belong to this supplier")

    def _check_sources(self, supplier_id: int, requisition_id: Optional[int], agreement_id: Optional[int]):
        if requisition_id is not None:
            requisition = self.db.query(PurchaseRequisition).filter(
                PurchaseRequisition.requisition_id == requisition_id
            ).first()
            if not requisition:
                raise ValidationError("Purchase requisition not found")
            if requisition.status in (RequisitionStatus.CANCELLED, RequisitionStatus.REJECTED):
                raise ValidationError(f"Requisition {requisition.requisition_number} is {requisition.status.lower()}")

        if agreement_id is not None:
            agreement = self.db.query(PurchaseAgreement).filter(
                PurchaseAgreement.agreement_id == agreement_id
            ).first()
            if not agreement:
                raise ValidationError("Purchase agreement not found")
            if agreement.supplier_id != supplier_id:
                raise ValidationError("Purchase agreement belongs to a different supplier")
            if agreement.status != AgreementStatus.ACTIVE:
                raise ValidationError(f"Agreement {agreement.agreement_number} is not active")

    def _normalize(self, fields: dict):
        if fields.get("po_type"):
            fields["po_type"] = fields["po_type"].upper()
            if fields["po_type"] not in PO_TYPES:
                raise ValidationError(f"Invalid PO type. Must be one of: {', '.join(PO_TYPES)}")
        if fields.get("status"):
            fields["status"] = fields["status"].upper()
            if fields["status"] not in PurchaseOrderStatus.ALL:
                raise ValidationError(f"Invalid status. Must be one of: {', '.join(PurchaseOrderStatus.ALL)}")
        if fields.get("buyer_id") is not None:
            if not self.db.query(User).filter(User.id == fields["buyer_id"]).first():
                raise ValidationError("Buyer not found")
        return fields

    def create(self, order_data: PurchaseOrderCreate, user_id: int = None) -> PurchaseOrder:
        header = self._normalize(order_data.model_dump(exclude={"lines"}))
        self._check_supplier(order_data.supplier_id, order_data.supplier_site_id)
        self._check_sources(order_data.supplier_id, order_data.requisition_id, order_data.agreement_id)

        lines = [calculate_line_amounts(line.model_dump()) for line in order_data.lines]

        header_id = self.writer.allocate_header_id()
        order = self.writer.create(
            {
                **header,
                **calculate_totals(lines),
                "po_number": po_number(header_id),
                "created_by": user_id,
            },
            lines,
            header_id=header_id
        )
        logger.info(f"Purchase order {po_number(header_id)} created for supplier {order_data.supplier_id}")
        return order

    def _receipt_count(self, header_id: int) -> int:
        return self.db.query(func.count(GoodsReceipt.receipt_id)).filter(
            GoodsReceipt.header_id == header_id,
            GoodsReceipt.status != GoodsReceiptStatus.CANCELLED
        ).scalar() or 0

    def _check_cancellable(self, order: PurchaseOrder):
        receipts = self._receipt_count(order.header_id)
        if receipts:
            raise DependencyExistsError(
                f"Cannot cancel purchase order {order.po_number} with {receipts} goods receipt(s)"
            )

    def update(self, header_id: int, order_data: PurchaseOrderUpdate) -> PurchaseOrder:
        order = self._get_or_404(header_id)
        if order.status in (PurchaseOrderStatus.CANCELLED, PurchaseOrderStatus.CLOSED):
            raise ValidationError(f"Cannot update a {order.status.lower()} purchase order")

        update_data = self._normalize(order_data.model_dump(exclude_unset=True, exclude={"lines"}))
        if update_data.get("supplier_site_id") is not None:
            self._check_supplier(order.supplier_id, update_data["supplier_site_id"])
        if update_data.get("status") == PurchaseOrderStatus.CANCELLED:
            self._check_cancellable(order)

        for key, value in update_data.items():
            if value is not None or key in ("supplier_site_id", "buyer_id", "need_by_date", "description", "notes"):
                setattr(order, key, value)

        if order_data.lines is not None:
            if self.db.query(GoodsReceiptLine).join(PurchaseOrderLine).filter(
                PurchaseOrderLine.header_id == header_id
            ).first():
                raise ValidationError("Cannot replace the lines of a purchase order that has goods receipts")

            lines = [calculate_line_amounts(line.model_dump()) for line in order_data.lines]
            for key, value in calculate_totals(lines).items():
                setattr(order, key, value)
            self.writer.replace_lines(order, lines)

        self.db.flush()
        return order

    def cancel(self, header_id: int) -> PurchaseOrder:
        order = self._get_or_404(header_id)
        self._check_cancellable(order)
        order.status = PurchaseOrderStatus.CANCELLED
        self.db.flush()
        return order


class GoodsReceiptService:
    def __init__(self, db: Session):
        self.db = db
        self.writer = DocumentWriter(
            db,
            header_model=GoodsReceipt,
            line_model=GoodsReceiptLine,
            header_sequence=PO_RECEIPT_ID_SEQ,
            line_sequence=PO_RECEIPT_LINE_ID_SEQ,
            header_key="receipt_id",
            line_key="receipt_line_id",
        )

    def get_by_id(self, receipt_id: int) -> Optional[GoodsReceipt]:
        return self.db.query(GoodsReceipt).options(
            joinedload(GoodsReceipt.lines)
        ).filter(GoodsReceipt.receipt_id == receipt_id).first()

    def _get_or_404(self, receipt_id: int) -> GoodsReceipt:
        receipt = self.db.query(GoodsReceipt).filter(GoodsReceipt.receipt_id == receipt_id).first()
        if not receipt:
            raise NotFoundError("Goods receipt not found")
        return receipt

    def get_all(self, search: str = None, status: str = None, header_id: int = None) -> List[GoodsReceipt]:
        query = self.db.query(GoodsReceipt)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(GoodsReceipt.receipt_number.ilike(pattern), GoodsReceipt.notes.ilike(pattern)))
        if status and status.upper() != "ALL":
            query = query.filter(GoodsReceipt.status == status.upper())
        if header_id:
            query = query.filter(GoodsReceipt.header_id == header_id)
        return query.order_by(GoodsReceipt.receipt_id.desc()).all()

    def _receivable_order(self, header_id: int) -> PurchaseOrder:
        order = self.db.query(PurchaseOrder).filter(PurchaseOrder.header_id == header_id).first()
        if not order:
            raise ValidationError("Purchase order not found")
        if order.status not in RECEIVABLE:
            raise ValidationError(
                f"Purchase order {order.po_number} is {order.status}; goods can only be received "
                f"against {', '.join(RECEIVABLE)} orders"
            )
        return order

    def _build_lines(self, order: PurchaseOrder, line_inputs):
        """Copy item details from the order lines and value each line at its accepted quantity"""
        order_lines = {line.line_id: line for line in order.lines}
        prepared = []
        total = Decimal("0.00")
        for item in line_inputs:
            order_line = order_lines.get(item.line_id)
            if not order_line:
                raise ValidationError(f"Line {item.line_id} does not belong to purchase order {order.po_number}")

            received = item.quantity_received
            rejected = item.quantity_rejected
            accepted = received - rejected if item.quantity_accepted is None else item.quantity_accepted
            if accepted < 0 or accepted + rejected != received:
                raise ValidationError(
                    f"Line {order_line.line_number}: accepted and rejected quantities must add up to "
                    f"the {received} received"
                )

            unit_price = to_money(order_line.unit_price if item.unit_price is None else item.unit_price)
            line_amount = to_money(accepted * unit_price)
            total += line_amount
            prepared.append({
                **item.model_dump(exclude={"quantity_accepted", "unit_price"}),
                "item_code": order_line.item_code,
                "item_name": order_line.item_name,
                "description": order_line.description,
                "uom": order_line.uom,
                "quantity_ordered": order_line.quantity,
                "quantity_accepted": accepted,
                "unit_price": unit_price,
                "line_amount": line_amount,
            })
        return prepared, total

    def _shift_received(self, line_id: int, delta: Decimal) -> bool:
        target = PurchaseOrderLine.quantity_received + delta
        result = self.db.execute(
            update(PurchaseOrderLine)
            .where(
                PurchaseOrderLine.line_id == line_id,
                target <= PurchaseOrderLine.quantity + QUANTITY_SLACK,
                target >= -QUANTITY_SLACK
            )
            .values(quantity_received=target)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def _post(self, receipt: GoodsReceipt, sign: int):
        """
        Move the order's received quantities and amount by this receipt.

        ``sign`` is 1 to book the receipt and -1 to take it back; a RETURN
        receipt moves everything the other way.
        """
        direction = -sign if receipt.receipt_type == "RETURN" else sign
        for line in receipt.lines:
            if not self._shift_received(line.line_id, line.quantity_received * direction):
                raise ValidationError(
                    f"Line {line.line_number} of {receipt.receipt_number}: {line.quantity_received} "
                    f"would take the received quantity of order line {line.line_id} below zero or past the ordered quantity"
                )

        self.db.execute(
            update(PurchaseOrder)
            .where(PurchaseOrder.header_id == receipt.header_id)
            .values(amount_received=PurchaseOrder.amount_received + receipt.total_amount * direction)
            .execution_options(synchronize_session=False)
        )

        order = self.db.query(PurchaseOrder).populate_existing().filter(
            PurchaseOrder.header_id == receipt.header_id
        ).one()
        for order_line in order.lines:
            self.db.refresh(order_line)

        fully_received = all(line.quantity_outstanding <= QUANTITY_SLACK for line in order.lines)
        if fully_received and order.status != PurchaseOrderStatus.RECEIVED:
            order.status = PurchaseOrderStatus.RECEIVED
        elif not fully_received and order.status == PurchaseOrderStatus.RECEIVED:
            order.status = PurchaseOrderStatus.RELEASED
        self.db.flush()

        logger.info(
            f"Receipt {receipt.receipt_number} {'booked' if sign > 0 else 'taken back'} "
            f"against {order.po_number}: amount_received={order.amount_received}"
        )

    def _normalize(self, fields: dict):
        if fields.get("receipt_type"):
            fields["receipt_type"] = fields["receipt_type"].upper()
            if fields["receipt_type"] not in RECEIPT_TYPES:
                raise ValidationError(f"Invalid receipt type. Must be one of: {', '.join(RECEIPT_TYPES)}")
        if fields.get("status"):
            fields["status"] = fields["status"].upper()
            if fields["status"] not in GoodsReceiptStatus.ALL:
                raise ValidationError(f"Invalid status. Must be one of: {', '.join(GoodsReceiptStatus.ALL)}")
        return fields

    def create(self, receipt_data: GoodsReceiptCreate, user_id: int = None) -> GoodsReceipt:
        header = self._normalize(receipt_data.model_dump(exclude={"lines"}))
        if header["status"] == GoodsReceiptStatus.CANCELLED:
            raise ValidationError("A goods receipt cannot be created cancelled")
        order = self._receivable_order(receipt_data.header_id)
        lines, total = self._build_lines(order, receipt_data.lines)

        receipt_id = self.writer.allocate_header_id()
        receipt = self.writer.create(
            {
                **header,
                "receipt_number": goods_receipt_number(receipt_id),
                "currency_code": order.currency_code,
                "exchange_rate": order.exchange_rate,
                "total_amount": total,
                "created_by": user_id,
            },
            lines,
            header_id=receipt_id
        )
        if receipt.status == GoodsReceiptStatus.CONFIRMED:
            self._post(receipt, 1)
        return receipt

    def update(self, receipt_id: int, receipt_data: GoodsReceiptUpdate) -> GoodsReceipt:
        """
        Edit a receipt. A confirmed receipt is taken back first and booked
        again afterwards, so changed lines, type or status all land on the order.
        """
        receipt = self._get_or_404(receipt_id)
        if receipt.status == GoodsReceiptStatus.CANCELLED:
            raise ValidationError("Cannot update a cancelled goods receipt")

        update_data = self._normalize(receipt_data.model_dump(exclude_unset=True, exclude={"lines"}))
        if receipt.status == GoodsReceiptStatus.CONFIRMED:
            self._post(receipt, -1)

        for key, value in update_data.items():
            if value is not None or key == "notes":
                setattr(receipt, key, value)

        if receipt_data.lines is not None:
            order = self._receivable_order(receipt.header_id)
            lines, total = self._build_lines(order, receipt_data.lines)
            receipt.total_amount = total
            self.writer.replace_lines(receipt, lines)

        self.db.flush()
        if receipt.status == GoodsReceiptStatus.CONFIRMED:
            self._post(receipt, 1)
        return receipt

    def cancel(self, receipt_id: int) -> GoodsReceipt:
        receipt = self._get_or_404(receipt_id)
        if receipt.status == GoodsReceiptStatus.CONFIRMED:
            self._post(receipt, -1)
        receipt.status = GoodsReceiptStatus.CANCELLED
        self.db.flush()
        return receipt
