# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from medcourier.domain.enums import DriverStatus
from medcourier.infrastructure.db.models import Driver, Fleet, Vehicle
from medcourier.infrastructure.unit_of_work import SessionFactory, unit_of_work_scope


@dataclass(slots=True, frozen=True)
class VehicleExpiry:
    vehicle_id: str
    vehicle_plate: str
    registration_expiry_date: date
    driver_id: str
    driver_name: str
    driver_email: str
    fleet_owner_id: str | None
    fleet_owner_email: str | None = None


@dataclass(slots=True, frozen=True)
class LicenseExpiry:
    driver_id: str
    driver_name: str
    license_expiry: date


class SqlAlchemyComplianceRepository:
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def vehicles_expiring_by(self, cutoff: date) -> list[VehicleExpiry]:
        """Active vehicles whose registration expires on or before ``cutoff``."""

        with unit_of_work_scope(self._session_factory) as session:
            rows = session.execute(
                select(Vehicle)
                .options(selectinload(Vehicle.driver).selectinload(Driver.fleet))
                .where(
                    Vehicle.is_active.is_(True),
                    Vehicle.registration_expiry_date.is_not(None),
                    Vehicle.registration_expiry_date <= cutoff,
                )
                .order_by(Vehicle.registration_expiry_date)
            ).scalars().all()
            owners = {
                row.id: _fleet_owner(row.driver.fleet, row.driver_id) for row in rows
            }
            owner_emails = dict(
                session.execute(
                    select(Driver.id, Driver.email).where(
                        Driver.id.in_(sorted({owner for owner in owners.values() if owner}))
                    )
                ).tuples()
            )
            return [
                VehicleExpiry(
                    vehicle_id=row.id,
                    vehicle_plate=row.vehicle_plate,
                    registration_expiry_date=row.registration_expiry_date,
                    driver_id=row.driver_id,
                    driver_name=row.driver.full_name,
                    driver_email=row.driver.email,
                    fleet_owner_id=owners[row.id],
                    fleet_owner_email=owner_emails.get(owners[row.id]),
                )
                for row in rows
            ]

    def licenses_expiring_by(self, cutoff: date) -> list[LicenseExpiry]:
        with unit_of_work_scope(self._session_factory) as session:
            rows = session.execute(
                select(Driver).where(
                    Driver.status == DriverStatus.ACTIVE.value,
                    Driver.license_expiry.is_not(None),
                    Driver.license_expiry <= cutoff,
                )
            ).scalars()
            return [
                LicenseExpiry(
                    driver_id=row.id, driver_name=row.full_name, license_expiry=row.license_expiry
                )
                for row in rows
            ]


def _fleet_owner(fleet: Fleet | None, driver_id: str) -> str | None:
    if fleet is None or fleet.owner_id is None or fleet.owner_id == driver_id:
        return None
    return fleet.owner_id


__all__ = ["LicenseExpiry", "SqlAlchemyComplianceRepository", "VehicleExpiry"]
