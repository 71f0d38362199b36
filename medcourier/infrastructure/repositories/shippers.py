# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import exists, func, or_, select

from medcourier.domain.enums import PaymentTerms
from medcourier.domain.shippers.entities import FacilityRecord, ShipperProfile
from medcourier.infrastructure.db.models import Facility, LoadRequest, Shipper, as_utc
from medcourier.infrastructure.unit_of_work import SessionFactory, unit_of_work_scope

_PROFILE_FIELDS = frozenset({"company_name", "contact_name", "phone"})
_FACILITY_FIELDS = frozenset(
    {
        "name",
        "facility_type",
        "address_line1",
        "address_line2",
        "city",
        "state",
        "postal_code",
        "contact_name",
        "contact_phone",
        "access_notes",
    }
)


def to_shipper(row: Shipper) -> ShipperProfile:
    return ShipperProfile(
        id=row.id,
        email=row.email,
        company_name=row.company_name,
        contact_name=row.contact_name,
        phone=row.phone,
        payment_terms=PaymentTerms(row.payment_terms),
        is_active=bool(row.is_active),
        created_at=as_utc(row.created_at),
    )


def to_facility(row: Facility) -> FacilityRecord:
    return FacilityRecord(
        id=row.id,
        shipper_id=row.shipper_id,
        name=row.name,
        facility_type=row.facility_type,
        address_line1=row.address_line1,
        address_line2=row.address_line2,
        city=row.city,
        state=row.state,
        postal_code=row.postal_code,
        contact_name=row.contact_name,
        contact_phone=row.contact_phone,
        access_notes=row.access_notes,
    )


class SqlAlchemyShipperRepository:
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def get(self, shipper_id: str) -> ShipperProfile | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(Shipper, shipper_id)
            return to_shipper(row) if row else None

    def list_all(self) -> list[ShipperProfile]:
        with unit_of_work_scope(self._session_factory) as session:
            rows = session.execute(select(Shipper).order_by(Shipper.company_name)).scalars()
            return [to_shipper(row) for row in rows]

    def update_profile(self, shipper_id: str, changes: Mapping[str, Any]) -> ShipperProfile | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(Shipper, shipper_id)
            if row is None:
                return None
            for key, value in changes.items():
                if key in _PROFILE_FIELDS:
                    setattr(row, key, value)
                elif key == "payment_terms" and value is not None:
                    row.payment_terms = PaymentTerms(value).value
            session.flush()
            return to_shipper(row)

    def count(self) -> int:
        with unit_of_work_scope(self._session_factory) as session:
            return int(session.execute(select(func.count(Shipper.id))).scalar_one())


class SqlAlchemyFacilityRepository:
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def list_for_shipper(self, shipper_id: str) -> list[FacilityRecord]:
        with unit_of_work_scope(self._session_factory) as session:
            rows = session.execute(
                select(Facility).where(Facility.shipper_id == shipper_id).order_by(Facility.name)
            ).scalars()
            return [to_facility(row) for row in rows]

    def get(self, facility_id: str) -> FacilityRecord | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(Facility, facility_id)
            return to_facility(row) if row else None

    def add(self, shipper_id: str, data: Mapping[str, Any]) -> FacilityRecord:
        with unit_of_work_scope(self._session_factory) as session:
            row = Facility(
                shipper_id=shipper_id,
                **{key: value for key, value in data.items() if key in _FACILITY_FIELDS},
            )
            session.add(row)
            session.flush()
            return to_facility(row)

    def update(self, facility_id: str, changes: Mapping[str, Any]) -> FacilityRecord | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(Facility, facility_id)
            if row is None:
                return None
            for key, value in changes.items():
                if key in _FACILITY_FIELDS:
                    setattr(row, key, value)
            session.flush()
            return to_facility(row)

    def is_referenced(self, facility_id: str) -> bool:
        with unit_of_work_scope(self._session_factory) as session:
            return bool(
                session.execute(
                    select(
                        exists().where(
                            or_(
                                LoadRequest.pickup_facility_id == facility_id,
                                LoadRequest.dropoff_facility_id == facility_id,
                            )
                        )
                    )
                ).scalar()
            )

    def delete(self, facility_id: str) -> None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(Facility, facility_id)
            if row is not None:
                session.delete(row)


__all__ = ["SqlAlchemyFacilityRepository", "SqlAlchemyShipperRepository"]
