"""
Party Service - Customer/Supplier master, sites and contact points
"""
from typing import Optional, List
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, or_

from accounts_api.core.exceptions import DependencyExistsError, NotFoundError, ValidationError
from accounts_api.models import (
    ARInvoice, ARReceipt, Party, PartyContactPoint, PartySite, RecordStatus
)
from accounts_api.schemas import (
    ContactPointCreate, ContactPointUpdate, PartyCreate, PartySiteCreate,
    PartySiteUpdate, PartyUpdate
)
from accounts_api.services.sequence_service import (
    SequenceStore, HZ_CONTACT_POINT_ID_SEQ, HZ_PARTY_SITE_ID_SEQ, PARTY_ID_SEQ, party_number
)

PARTY_TYPES = ["ORGANIZATION", "PERSON"]
SEARCH_LIMIT = 50


def _check_status(status: str) -> str:
    status = status.upper()
    if status not in (RecordStatus.ACTIVE, RecordStatus.INACTIVE):
        raise ValidationError("Invalid status. Must be ACTIVE or INACTIVE")
    return status


class PartyService:
    def __init__(self, db: Session):
        self.db = db
        self.sequences = SequenceStore(db)

    def get_by_id(self, party_id: int) -> Optional[Party]:
        return self.db.query(Party).options(
            joinedload(Party.sites),
            joinedload(Party.contact_points)
        ).filter(Party.party_id == party_id).first()

    def _get_or_404(self, party_id: int) -> Party:
        party = self.db.query(Party).filter(Party.party_id == party_id).first()
        if not party:
            raise NotFoundError("Party not found")
        return party

    def _attach_counts(self, parties: List[Party]) -> List[Party]:
        ids = [party.party_id for party in parties]
        if not ids:
            return parties
        site_counts = dict(
            self.db.query(PartySite.party_id, func.count(PartySite.site_id))
            .filter(PartySite.party_id.in_(ids))
            .group_by(PartySite.party_id).all()
        )
        contact_counts = dict(
            self.db.query(PartyContactPoint.party_id, func.count(PartyContactPoint.contact_point_id))
            .filter(PartyContactPoint.party_id.in_(ids))
            .group_by(PartyContactPoint.party_id).all()
        )
        for party in parties:
            party.sites_count = site_counts.get(party.party_id, 0)
            party.contacts_count = contact_counts.get(party.party_id, 0)
        return parties

    def get_all(self, party_type: str = None, status: str = None) -> List[Party]:
        query = self.db.query(Party)
        if party_type:
            query = query.filter(Party.party_type == party_type.upper())
        if status:
            query = query.filter(Party.status == status.upper())
        return self._attach_counts(query.order_by(Party.party_name).all())

    def search(self, q: str = None, party_type: str = None, status: str = None, limit: int = SEARCH_LIMIT) -> List[Party]:
        query = self.db.query(Party)
        if q:
            pattern = f"%{q}%"
            query = query.filter(or_(
                Party.party_name.ilike(pattern),
                Party.party_number.ilike(pattern),
                Party.tax_id.ilike(pattern)
            ))
        if party_type:
            query = query.filter(Party.party_type == party_type.upper())
        if status:
            query = query.filter(Party.status == status.upper())
        parties = query.order_by(Party.party_name).limit(min(limit, SEARCH_LIMIT)).all()
        return self._attach_counts(parties)

    def create(self, party_data: PartyCreate, user_id: int = None) -> Party:
        party_type = party_data.party_type.upper()
        if party_type not in PARTY_TYPES:
            raise ValidationError(f"Invalid party type. Must be one of: {', '.join(PARTY_TYPES)}")

        party_id = self.sequences.get_next(PARTY_ID_SEQ)
        party = Party(
            party_id=party_id,
            party_number=party_number(party_id),
            party_name=party_data.party_name,
            party_type=party_type,
            tax_id=party_data.tax_id,
            website=party_data.website,
            industry=party_data.industry,
            status=_check_status(party_data.status),
            created_by=user_id
        )
        self.db.add(party)
        self.db.flush()
        return party

    def update(self, party_id: int, party_data: PartyUpdate) -> Party:
        party = self._get_or_404(party_id)
        update_data = party_data.model_dump(exclude_unset=True)

        if update_data.get("party_type"):
            update_data["party_type"] = update_data["party_type"].upper()
            if update_data["party_type"] not in PARTY_TYPES:
                raise ValidationError(f"Invalid party type. Must be one of: {', '.join(PARTY_TYPES)}")
        if update_data.get("status"):
            update_data["status"] = _check_status(update_data["status"])

        for key, value in update_data.items():
            if value is not None or key in ("tax_id", "website", "industry"):
                setattr(party, key, value)

        self.db.flush()
        return party

    def delete(self, party_id: int):
        party = self._get_or_404(party_id)

        dependents = [
            ("sites", self.db.query(func.count(PartySite.site_id)).filter(PartySite.party_id == party_id)),
            ("contact points", self.db.query(func.count(PartyContactPoint.contact_point_id)).filter(PartyContactPoint.party_id == party_id)),
            ("invoices", self.db.query(func.count(ARInvoice.invoice_id)).filter(ARInvoice.customer_id == party_id)),
            ("receipts", self.db.query(func.count(ARReceipt.receipt_id)).filter(ARReceipt.customer_id == party_id)),
        ]
        for label, query in dependents:
            count = query.scalar()
            if count:
                raise DependencyExistsError(f"Cannot delete party with {count} {label}")

        self.db.delete(party)
        self.db.flush()

    # ==================== SITES ====================

    def get_sites(self, party_id: int) -> List[PartySite]:
        self._get_or_404(party_id)
        return self.db.query(PartySite).filter(
            PartySite.party_id == party_id
        ).order_by(PartySite.site_id).all()

    def _get_site(self, party_id: int, site_id: int) -> PartySite:
        site = self.db.query(PartySite).filter(
            PartySite.site_id == site_id,
            PartySite.party_id == party_id
        ).first()
        if not site:
            raise NotFoundError("Party site not found")
        return site

    def _clear_primary_site(self, party_id: int, site_type: str, keep_site_id: int = None):
        query = self.db.query(PartySite).filter(
            PartySite.party_id == party_id,
            PartySite.site_type == site_type,
            PartySite.is_primary == True
        )
        if keep_site_id is not None:
            query = query.filter(PartySite.site_id != keep_site_id)
        query.update({PartySite.is_primary: False}, synchronize_session=False)

    def create_site(self, party_id: int, site_data: PartySiteCreate) -> PartySite:
        self._get_or_404(party_id)
        fields = site_data.model_dump()
        fields["site_type"] = fields["site_type"].upper()
        if fields["is_primary"]:
            self._clear_primary_site(party_id, fields["site_type"])

        site = PartySite(
            site_id=self.sequences.get_next(HZ_PARTY_SITE_ID_SEQ),
            party_id=party_id,
            status=RecordStatus.ACTIVE,
            **fields
        )
        self.db.add(site)
        self.db.flush()
        return site

    def update_site(self, party_id: int, site_id: int, site_data: PartySiteUpdate) -> PartySite:
        site = self._get_site(party_id, site_id)
        update_data = site_data.model_dump(exclude_unset=True)
        if update_data.get("site_type"):
            update_data["site_type"] = update_data["site_type"].upper()
        if update_data.get("status"):
            update_data["status"] = _check_status(update_data["status"])

        for key, value in update_data.items():
            if value is not None:
                setattr(site, key, value)

        if site.is_primary:
            self._clear_primary_site(party_id, site.site_type, keep_site_id=site_id)

        self.db.flush()
        return site

    def delete_site(self, party_id: int, site_id: int):
        site = self._get_site(party_id, site_id)
        in_use = self.db.query(ARInvoice).filter(ARInvoice.bill_to_site_id == site_id).first()
        if in_use:
            raise DependencyExistsError("Cannot delete a site referenced by invoices")
        self.db.delete(site)
        self.db.flush()

    # ==================== CONTACT POINTS ====================

    def get_contacts(self, party_id: int) -> List[PartyContactPoint]:
        self._get_or_404(party_id)
        return self.db.query(PartyContactPoint).filter(
            PartyContactPoint.party_id == party_id
        ).order_by(PartyContactPoint.contact_point_id).all()

    def _get_contact(self, party_id: int, contact_point_id: int) -> PartyContactPoint:
        contact = self.db.query(PartyContactPoint).filter(
            PartyContactPoint.contact_point_id == contact_point_id,
            PartyContactPoint.party_id == party_id
        ).first()
        if not contact:
            raise NotFoundError("Contact point not found")
        return contact

    def _clear_primary_contact(self, party_id: int, contact_point_type: str, keep_id: int = None):
        query = self.db.query(PartyContactPoint).filter(
            PartyContactPoint.party_id == party_id,
            PartyContactPoint.contact_point_type == contact_point_type,
            PartyContactPoint.is_primary == True
        )
        if keep_id is not None:
            query = query.filter(PartyContactPoint.contact_point_id != keep_id)
        query.update({PartyContactPoint.is_primary: False}, synchronize_session=False)

    def create_contact(self, party_id: int, contact_data: ContactPointCreate) -> PartyContactPoint:
        self._get_or_404(party_id)
        fields = contact_data.model_dump()
        fields["contact_point_type"] = fields["contact_point_type"].upper()
        if fields["is_primary"]:
            self._clear_primary_contact(party_id, fields["contact_point_type"])

        contact = PartyContactPoint(
            contact_point_id=self.sequences.get_next(HZ_CONTACT_POINT_ID_SEQ),
            party_id=party_id,
            status=RecordStatus.ACTIVE,
            **fields
        )
        self.db.add(contact)
        self.db.flush()
        return contact

    def update_contact(self, party_id: int, contact_point_id: int, contact_data: ContactPointUpdate) -> PartyContactPoint:
        contact = self._get_contact(party_id, contact_point_id)
        update_data = contact_data.model_dump(exclude_unset=True)
        if update_data.get("contact_point_type"):
            update_data["contact_point_type"] = update_data["contact_point_type"].upper()
        if update_data.get("status"):
            update_data["status"] = _check_status(update_data["status"])

        for key, value in update_data.items():
            if value is not None:
                setattr(contact, key, value)

        if contact.is_primary:
            self._clear_primary_contact(party_id, contact.contact_point_type, keep_id=contact_point_id)

        self.db.flush()
        return contact

    def delete_contact(self, party_id: int, contact_point_id: int):
        contact = self._get_contact(party_id, contact_point_id)
        self.db.delete(contact)
        self.db.flush()
