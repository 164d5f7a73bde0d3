"""
Procurement Service - Purchase agreements and requisitions
"""
from typing import Optional, List
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_
from decimal import Decimal

from accounts_api.core.exceptions import ConflictError, NotFoundError, ValidationError
from accounts_api.models import (
    AgreementStatus, PurchaseAgreement, PurchaseAgreementLine, PurchaseRequisition,
    PurchaseRequisitionLine, RecordStatus, RequisitionStatus, Supplier, SupplierSite, User
)
from accounts_api.schemas import AgreementCreate, AgreementUpdate, RequisitionCreate, RequisitionUpdate
from accounts_api.services.document_service import DocumentWriter, to_money
from accounts_api.services.sequence_service import (
    PO_AGREEMENT_ID_SEQ, PO_AGREEMENT_LINE_ID_SEQ, PO_LINE_ID_SEQ, PO_REQUISITION_ID_SEQ,
    agreement_number, requisition_number
)

AGREEMENT_TYPES = ["BLANKET", "CONTRACT", "PLANNED"]
URGENCIES = ["LOW", "MEDIUM", "HIGH", "URGENT"]


def price_lines(lines):
    """``line_amount = quantity * unit_price`` per line, plus the document total"""
    prepared = []
    total = Decimal("0.00")
    for line in lines:
        fields = line.model_dump()
        fields["unit_price"] = to_money(fields["unit_price"])
        fields["line_amount"] = to_money(fields["quantity"] * fields["unit_price"])
        total += fields["line_amount"]
        prepared.append(fields)
    return prepared, total


class AgreementService:
    def __init__(self, db: Session):
        self.db = db
        self.writer = DocumentWriter(
            db,
            header_model=PurchaseAgreement,
            line_model=PurchaseAgreementLine,
            header_sequence=PO_AGREEMENT_ID_SEQ,
            line_sequence=PO_AGREEMENT_LINE_ID_SEQ,
            header_key="agreement_id",
            line_key="line_id",
        )

    def get_by_id(self, agreement_id: int) -> Optional[PurchaseAgreement]:
        return self.db.query(PurchaseAgreement).options(
            joinedload(PurchaseAgreement.lines)
        ).filter(PurchaseAgreement.agreement_id == agreement_id).first()

    def _get_or_404(self, agreement_id: int) -> PurchaseAgreement:
        agreement = self.db.query(PurchaseAgreement).filter(
            PurchaseAgreement.agreement_id == agreement_id
        ).first()
        if not agreement:
            raise NotFoundError("Purchase agreement not found")
        return agreement

    def get_all(self, status: str = None, supplier_id: int = None) -> List[PurchaseAgreement]:
        query = self.db.query(PurchaseAgreement)
        if status:
            query = query.filter(PurchaseAgreement.status == status.upper())
        if supplier_id:
            query = query.filter(PurchaseAgreement.supplier_id == supplier_id)
        return query.order_by(PurchaseAgreement.agreement_id.desc()).all()

    def get_lines(self, agreement_id: int) -> List[PurchaseAgreementLine]:
        self._get_or_404(agreement_id)
        return self.db.query(PurchaseAgreementLine).filter(
            PurchaseAgreementLine.agreement_id == agreement_id
        ).order_by(PurchaseAgreementLine.line_number).all()

    def _check_header(self, supplier_id: int, supplier_site_id: Optional[int], agreement_type: str, status: str):
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
        if agreement_type not in AGREEMENT_TYPES:
            raise ValidationError(f"Invalid agreement type. Must be one of: {', '.join(AGREEMENT_TYPES)}")
        if status not in AgreementStatus.ALL:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(AgreementStatus.ALL)}")

    def create(self, agreement_data: AgreementCreate, user_id: int = None) -> PurchaseAgreement:
        agreement_type = agreement_data.agreement_type.upper()
        status = agreement_data.status.upper()
        self._check_header(agreement_data.supplier_id, agreement_data.supplier_site_id, agreement_type, status)

        if agreement_data.end_date and agreement_data.end_date < agreement_data.start_date:
            raise ValidationError("End date cannot be before the start date")
        if agreement_data.agreement_number:
            existing = self.db.query(PurchaseAgreement).filter(
                PurchaseAgreement.agreement_number == agreement_data.agreement_number
            ).first()
            if existing:
                raise ConflictError(f"Agreement number '{agreement_data.agreement_number}' already exists")

        lines, total = price_lines(agreement_data.lines)

        agreement_id = self.writer.allocate_header_id()
        header = agreement_data.model_dump(exclude={"lines", "agreement_number", "agreement_type", "status"})
        return self.writer.create(
            {
                **header,
                "agreement_number": agreement_data.agreement_number or agreement_number(agreement_id),
                "agreement_type": agreement_type,
                "status": status,
                "total_amount": total,
                "created_by": user_id,
            },
            lines,
            header_id=agreement_id
        )

    def update(self, agreement_id: int, agreement_data: AgreementUpdate) -> PurchaseAgreement:
        agreement = self._get_or_404(agreement_id)
        if agreement.status == AgreementStatus.CANCELLED:
            raise ValidationError("Cannot update a cancelled agreement")

        update_data = agreement_data.model_dump(exclude_unset=True, exclude={"lines"})
        if update_data.get("agreement_type"):
            update_data["agreement_type"] = update_data["agreement_type"].upper()
            if update_data["agreement_type"] not in AGREEMENT_TYPES:
                raise ValidationError(f"Invalid agreement type. Must be one of: {', '.join(AGREEMENT_TYPES)}")
        if update_data.get("status"):
            update_data["status"] = update_data["status"].upper()
            if update_data["status"] not in AgreementStatus.ALL:
                raise ValidationError(f"Invalid status. Must be one of: {', '.join(AgreementStatus.ALL)}")
        if update_data.get("supplier_site_id"):
            site = self.db.query(SupplierSite).filter(
                SupplierSite.site_id == update_data["supplier_site_id"],
                SupplierSite.supplier_id == agreement.supplier_id
            ).first()
            if not site:
                raise ValidationError("Supplier site does not belong to this supplier")

        for key, value in update_data.items():
            if value is not None or key in ("end_date", "notes", "description", "buyer_name", "supplier_site_id"):
                setattr(agreement, key, value)

        if agreement.end_date and agreement.end_date < agreement.start_date:
            raise ValidationError("End date cannot be before the start date")

        if agreement_data.lines is not None:
            lines, total = price_lines(agreement_data.lines)
            agreement.total_amount = total
            self.writer.replace_lines(agreement, lines)

        self.db.flush()
        return agreement

    def cancel(self, agreement_id: int) -> PurchaseAgreement:
        agreement = self._get_or_404(agreement_id)
        agreement.status = AgreementStatus.CANCELLED
        self.db.flush()
        return agreement


class RequisitionService:
    def __init__(self, db: Session):
        self.db = db
        self.writer = DocumentWriter(
            db,
            header_model=PurchaseRequisition,
            line_model=PurchaseRequisitionLine,
            header_sequence=PO_REQUISITION_ID_SEQ,
            line_sequence=PO_LINE_ID_SEQ,
            header_key="requisition_id",
            line_key="line_id",
        )

    def get_by_id(self, requisition_id: int) -> Optional[PurchaseRequisition]:
        return self.db.query(PurchaseRequisition).options(
            joinedload(PurchaseRequisition.lines)
        ).filter(PurchaseRequisition.requisition_id == requisition_id).first()

    def _get_or_404(self, requisition_id: int) -> PurchaseRequisition:
        requisition = self.db.query(PurchaseRequisition).filter(
            PurchaseRequisition.requisition_id == requisition_id
        ).first()
        if not requisition:
            raise NotFoundError("Purchase requisition not found")
        return requisition

    def get_all(self, search: str = None, status: str = None, requester_id: int = None) -> List[PurchaseRequisition]:
        query = self.db.query(PurchaseRequisition)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                PurchaseRequisition.requisition_number.ilike(pattern),
                PurchaseRequisition.description.ilike(pattern)
            ))
        if status and status.upper() != "ALL":
            query = query.filter(PurchaseRequisition.status == status.upper())
        if requester_id:
            query = query.filter(PurchaseRequisition.requester_id == requester_id)
        return query.order_by(PurchaseRequisition.requisition_id.desc()).all()

    def _check_user(self, user_id: Optional[int], role: str):
        if user_id is not None and not self.db.query(User).filter(User.id == user_id).first():
            raise ValidationError(f"{role} not found")

    def _normalize(self, fields: dict):
        if fields.get("urgency"):
            fields["urgency"] = fields["urgency"].upper()
            if fields["urgency"] not in URGENCIES:
                raise ValidationError(f"Invalid urgency. Must be one of: {', '.join(URGENCIES)}")
        if fields.get("status"):
            fields["status"] = fields["status"].upper()
            if fields["status"] not in RequisitionStatus.ALL:
                raise ValidationError(f"Invalid status. Must be one of: {', '.join(RequisitionStatus.ALL)}")
        return fields

    def create(self, requisition_data: RequisitionCreate, user_id: int = None) -> PurchaseRequisition:
        header = self._normalize(requisition_data.model_dump(exclude={"lines"}))
        header["requester_id"] = header["requester_id"] or user_id
        self._check_user(header["requester_id"], "Requester")
        self._check_user(header["buyer_id"], "Buyer")

        lines, total = price_lines(requisition_data.lines)

        requisition_id = self.writer.allocate_header_id()
        return self.writer.create(
            {
                **header,
                "requisition_number": requisition_number(requisition_id),
                "total_amount": total,
                "created_by": user_id,
            },
            lines,
            header_id=requisition_id
        )

    def update(self, requisition_id: int, requisition_data: RequisitionUpdate) -> PurchaseRequisition:
        requisition = self._get_or_404(requisition_id)
        if requisition.status in (RequisitionStatus.CANCELLED, RequisitionStatus.CLOSED):
            raise ValidationError(f"Cannot update a {requisition.status.lower()} requisition")

        update_data = self._normalize(requisition_data.model_dump(exclude_unset=True, exclude={"lines"}))
        if "requester_id" in update_data:
            if update_data["requester_id"] is None:
                raise ValidationError("Requester is required")
            self._check_user(update_data["requester_id"], "Requester")
        if update_data.get("buyer_id") is not None:
            self._check_user(update_data["buyer_id"], "Buyer")

        for key, value in update_data.items():
            if value is not None or key in ("buyer_id", "department_id", "need_by_date", "description",
                                            "justification", "notes"):
                setattr(requisition, key, value)

        if requisition_data.lines is not None:
            lines, total = price_lines(requisition_data.lines)
            requisition.total_amount = total
            self.writer.replace_lines(requisition, lines)

        self.db.flush()
        return requisition

    def cancel(self, requisition_id: int) -> PurchaseRequisition:
        requisition = self._get_or_404(requisition_id)
        requisition.status = RequisitionStatus.CANCELLED
        self.db.flush()
        return requisition
