"""
Company Service - Company setup and company locations
"""
from typing import Optional, List, Dict
from sqlalchemy.orm import Session
from sqlalchemy import case, func, or_

from accounts_api.core.exceptions import ConflictError, DependencyExistsError, ValidationError
from accounts_api.models import Company, CompanyLocation, RecordStatus
from accounts_api.schemas import CompanyCreate, CompanyUpdate, LocationCreate, LocationUpdate
from accounts_api.services.sequence_service import SequenceStore, COMPANY_ID_SEQ, company_code


class CompanyService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, company_id: int) -> Optional[Company]:
        return self.db.query(Company).filter(Company.company_id == company_id).first()

    def get_all(self, status: str = None) -> List[Company]:
        query = self.db.query(Company)
        if status:
            query = query.filter(Company.status == status.upper())
        return query.order_by(Company.name).all()

    def _check_name(self, name: str, company_id: int = None):
        query = self.db.query(Company).filter(func.lower(Company.name) == name.lower())
        if company_id is not None:
            query = query.filter(Company.company_id != company_id)
        if query.first():
            raise ConflictError(f"Company '{name}' already exists")

    def create(self, company_data: CompanyCreate, user_id: int = None) -> Company:
        self._check_name(company_data.name)

        company_id = SequenceStore(self.db).get_next(COMPANY_ID_SEQ)
        company = Company(
            company_id=company_id,
            company_code=company_code(company_id),
            status=RecordStatus.ACTIVE,
            created_by=user_id,
            **company_data.model_dump()
        )
        self.db.add(company)
        self.db.flush()
        return company

    def update(self, company_id: int, company_data: CompanyUpdate) -> Optional[Company]:
        company = self.get_by_id(company_id)
        if not company:
            return None

        update_data = company_data.model_dump(exclude_unset=True)
        if update_data.get("name"):
            self._check_name(update_data["name"], company_id)
        if update_data.get("status"):
            update_data["status"] = update_data["status"].upper()
            if update_data["status"] not in (RecordStatus.ACTIVE, RecordStatus.INACTIVE):
                raise ValidationError("Invalid status. Must be ACTIVE or INACTIVE")

        for key, value in update_data.items():
            if value is not None or key in ("legal_name", "address", "email", "phone"):
                setattr(company, key, value)

        self.db.flush()
        return company

    def delete(self, company_id: int) -> bool:
        company = self.get_by_id(company_id)
        if not company:
            return False

        location_count = self.db.query(func.count(CompanyLocation.id)).filter(
            CompanyLocation.company_id == company_id
        ).scalar()
        if location_count:
            raise DependencyExistsError(f"Cannot delete company with {location_count} location(s)")

        self.db.delete(company)
        self.db.flush()
        return True

    def get_stats(self) -> Dict:
        total = self.db.query(func.count(Company.company_id)).scalar() or 0
        active = self.db.query(func.count(Company.company_id)).filter(
            Company.status == RecordStatus.ACTIVE
        ).scalar() or 0

        def grouped(column):
            return self.db.query(column, func.count(Company.company_id)).group_by(column).all()

        return {
            "total_companies": total,
            "active_companies": active,
            "by_country": [
                {"country": country, "count": count}
                for country, count in grouped(Company.country) if country is not None
            ],
            "by_currency": [{"currency_code": c, "count": n} for c, n in grouped(Company.currency_code)],
            "by_status": [{"status": s, "count": n} for s, n in grouped(Company.status)],
        }


LOCATION_TYPES = ["WAREHOUSE", "OFFICE", "RETAIL_STORE", "DISTRIBUTION_CENTER", "MANUFACTURING_PLANT", "OTHER"]
LOCATION_STATUSES = [RecordStatus.ACTIVE, RecordStatus.INACTIVE, "SUSPENDED"]


class CompanyLocationService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, location_id: int) -> Optional[CompanyLocation]:
        return self.db.query(CompanyLocation).filter(CompanyLocation.id == location_id).first()

    def get_for_company(
        self, company_id: int, status: str = None, location_type: str = None, search: str = None
    ) -> List[CompanyLocation]:
        query = self.db.query(CompanyLocation).filter(CompanyLocation.company_id == company_id)
        if status:
            query = query.filter(CompanyLocation.status == status.upper())
        if location_type:
            query = query.filter(CompanyLocation.location_type == location_type.upper())
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                CompanyLocation.location_name.ilike(pattern),
                CompanyLocation.location_code.ilike(pattern),
                CompanyLocation.city.ilike(pattern)
            ))
        return query.order_by(CompanyLocation.is_primary.desc(), CompanyLocation.id.desc()).all()

    def _next_code(self, company_id: int) -> str:
        """LOC-001, LOC-002, ... skipping codes already taken in the company"""
        taken = {
            code for (code,) in self.db.query(CompanyLocation.location_code).filter(
                CompanyLocation.company_id == company_id
            ).all()
        }
        number = len(taken) + 1
        while f"LOC-{number:03d}" in taken:
            number += 1
        return f"LOC-{number:03d}"

    def _check_code(self, company_id: int, code: str, location_id: int = None):
        query = self.db.query(CompanyLocation).filter(
            CompanyLocation.company_id == company_id,
            CompanyLocation.location_code == code
        )
        if location_id is not None:
            query = query.filter(CompanyLocation.id != location_id)
        if query.first():
            raise ConflictError(f"Location with code '{code}' already exists for this company")

    def _normalize(self, fields: Dict) -> Dict:
        if fields.get("location_type"):
            fields["location_type"] = fields["location_type"].upper()
            if fields["location_type"] not in LOCATION_TYPES:
                raise ValidationError(f"Invalid location type. Must be one of: {', '.join(LOCATION_TYPES)}")
        if fields.get("status"):
            fields["status"] = fields["status"].upper()
            if fields["status"] not in LOCATION_STATUSES:
                raise ValidationError(f"Invalid status. Must be one of: {', '.join(LOCATION_STATUSES)}")
        return fields

    def _clear_primary(self, company_id: int, keep_id: int = None):
        query = self.db.query(CompanyLocation).filter(
            CompanyLocation.company_id == company_id,
            CompanyLocation.is_primary.is_(True)
        )
        if keep_id is not None:
            query = query.filter(CompanyLocation.id != keep_id)
        query.update({CompanyLocation.is_primary: False}, synchronize_session="fetch")

    def create(self, location_data: LocationCreate, user_id: int = None) -> CompanyLocation:
        if not self.db.query(Company).filter(Company.company_id == location_data.company_id).first():
            raise ValidationError("Company not found")

        fields = self._normalize(location_data.model_dump())
        if fields["location_code"]:
            self._check_code(fields["company_id"], fields["location_code"])
        else:
            fields["location_code"] = self._next_code(fields["company_id"])

        if fields["is_primary"]:
            self._clear_primary(fields["company_id"])

        location = CompanyLocation(**fields, created_by=user_id)
        self.db.add(location)
        self.db.flush()
        return location

    def update(self, location_id: int, location_data: LocationUpdate) -> Optional[CompanyLocation]:
        location = self.get_by_id(location_id)
        if not location:
            return None

        update_data = self._normalize(location_data.model_dump(exclude_unset=True))
        if update_data.get("location_code"):
            self._check_code(location.company_id, update_data["location_code"], location_id)
        if update_data.get("is_primary"):
            self._clear_primary(location.company_id, keep_id=location_id)

        for key, value in update_data.items():
            if value is not None or key in ("address_line1", "address_line2", "city", "state", "postal_code", "country"):
                setattr(location, key, value)

        self.db.flush()
        return location

    def deactivate(self, location_id: int) -> Optional[CompanyLocation]:
        location = self.get_by_id(location_id)
        if not location:
            return None
        location.status = RecordStatus.INACTIVE
        self.db.flush()
        return location

    def get_stats(self, company_id: int) -> Dict:
        total, active, primary, types, countries = self.db.query(
            func.count(CompanyLocation.id),
            func.sum(case((CompanyLocation.status == RecordStatus.ACTIVE, 1), else_=0)),
            func.sum(case((CompanyLocation.is_primary.is_(True), 1), else_=0)),
            func.count(func.distinct(CompanyLocation.location_type)),
            func.count(func.distinct(CompanyLocation.country)),
        ).filter(CompanyLocation.company_id == company_id).one()

        return {
            "total_locations": total or 0,
            "active_locations": active or 0,
            "primary_locations": primary or 0,
            "location_types": types or 0,
            "countries": countries or 0,
        }
