# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import func, select

from medcourier.domain.enums import DriverStatus, FleetRole
from medcourier.domain.fleet.entities import DriverProfile, RatingStats, VehicleRecord
from medcourier.infrastructure.db.models import Driver, DriverRating, Vehicle, as_utc
from medcourier.infrastructure.unit_of_work import SessionFactory, unit_of_work_scope

from .scoping import driver_scope

_PROFILE_FIELDS = frozenset(
    {"first_name", "last_name", "phone", "license_number", "license_expiry"}
)


def to_profile(row: Driver) -> DriverProfile:
    return DriverProfile(
        id=row.id,
        email=row.email,
        first_name=row.first_name,
        last_name=row.last_name,
        phone=row.phone,
        status=DriverStatus(row.status),
        fleet_id=row.fleet_id,
        fleet_role=FleetRole(row.fleet_role),
        is_admin=bool(row.is_admin),
        license_number=row.license_number,
        license_expiry=row.license_expiry,
        created_at=as_utc(row.created_at),
    )


def to_vehicle(row: Vehicle) -> VehicleRecord:
    return VehicleRecord(
        id=row.id,
        driver_id=row.driver_id,
        vehicle_type=row.vehicle_type,
        make=row.make,
        model=row.model,
        year=row.year,
        vehicle_plate=row.vehicle_plate,
        registration_expiry_date=row.registration_expiry_date,
        is_active=bool(row.is_active),
    )


class SqlAlchemyDriverRepository:
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def get(self, driver_id: str) -> DriverProfile | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(Driver, driver_id)
            return to_profile(row) if row else None

    def update_profile(self, driver_id: str, changes: Mapping[str, Any]) -> DriverProfile | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(Driver, driver_id)
            if row is None:
                return None
            for key, value in changes.items():
                if key in _PROFILE_FIELDS:
                    setattr(row, key, value)
            session.flush()
            return to_profile(row)

    def list_by_status(self, status: DriverStatus | None = None) -> list[DriverProfile]:
        with unit_of_work_scope(self._session_factory) as session:
            query = select(Driver).order_by(Driver.created_at.desc())
            if status is not None:
                query = query.where(Driver.status == status.value)
            return [to_profile(row) for row in session.execute(query).scalars()]

    def set_status(self, driver_id: str, status: DriverStatus) -> DriverProfile | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(Driver, driver_id)
            if row is None:
                return None
            row.status = status.value
            session.flush()
            return to_profile(row)

    def list_visible(self, viewer_id: str) -> list[DriverProfile]:
        with unit_of_work_scope(self._session_factory) as session:
            scope = driver_scope(session, viewer_id)
            rows = session.execute(
                select(Driver).where(Driver.id.in_(sorted(scope))).order_by(Driver.last_name)
            ).scalars()
            return [to_profile(row) for row in rows]

    def count_by_status(self) -> dict[str, int]:
        with unit_of_work_scope(self._session_factory) as session:
            rows = session.execute(
                select(Driver.status, func.count(Driver.id)).group_by(Driver.status)
            )
            return {status: int(count) for status, count in rows}

    def list_vehicles(self, viewer_id: str, driver_id: str) -> list[VehicleRecord]:
        with unit_of_work_scope(self._session_factory) as session:
            scope = driver_scope(session, viewer_id)
            rows = session.execute(
                select(Vehicle)
                .where(Vehicle.driver_id == driver_id, Vehicle.driver_id.in_(sorted(scope)))
                .order_by(Vehicle.created_at)
            ).scalars()
            return [to_vehicle(row) for row in rows]

    def add_vehicle(self, driver_id: str, data: Mapping[str, Any]) -> VehicleRecord:
        with unit_of_work_scope(self._session_factory) as session:
            row = Vehicle(driver_id=driver_id, **data)
            session.add(row)
            session.flush()
            return to_vehicle(row)

    def rating_stats(self, driver_id: str) -> RatingStats:
        with unit_of_work_scope(self._session_factory) as session:
            ratings = list(
                session.execute(
                    select(DriverRating.rating).where(DriverRating.driver_id == driver_id)
                ).scalars()
            )
        return RatingStats.from_ratings(ratings)


__all__ = ["SqlAlchemyDriverRepository", "to_profile", "to_vehicle"]
