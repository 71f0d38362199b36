"""Rows written straight through the ORM so tests can start from any state."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from flask.testing import FlaskClient

from medcourier.domain.enums import DriverStatus, FleetRole, LoadStatus, UserType
from medcourier.infrastructure.auth.session_cookie import COOKIE_NAME
from medcourier.infrastructure.container import container
from medcourier.infrastructure.db import session_scope
from medcourier.infrastructure.db.models import (
    AdminUser,
    Driver,
    Facility,
    Fleet,
    LoadRequest,
    Shipper,
    Vehicle,
)

PASSWORD = "correct-horse-9"


@dataclass(slots=True, frozen=True)
class Seeded:
    id: str
    email: str


def _hash(password: str) -> str:
    return container.password_hasher.hash(password)


def make_driver(
    email: str = "driver@example.com",
    *,
    status: DriverStatus = DriverStatus.ACTIVE,
    fleet_id: str | None = None,
    fleet_role: FleetRole = FleetRole.INDEPENDENT,
    is_admin: bool = False,
    license_expiry: date | None = None,
) -> Seeded:
    with session_scope() as session:
        row = Driver(
            email=email,
            password_hash=_hash(PASSWORD),
            first_name="Dana",
            last_name="Reyes",
            status=status.value,
            fleet_id=fleet_id,
            fleet_role=fleet_role.value,
            is_admin=is_admin,
            license_number="D1234567",
            license_expiry=license_expiry,
        )
        session.add(row)
        session.flush()
        return Seeded(id=row.id, email=row.email)


def make_fleet(name: str = "North Route", owner_id: str | None = None) -> str:
    with session_scope() as session:
        fleet = Fleet(name=name, owner_id=owner_id)
        session.add(fleet)
        session.flush()
        return fleet.id


def set_fleet_owner(fleet_id: str, owner_id: str) -> None:
    with session_scope() as session:
        fleet = session.get(Fleet, fleet_id)
        assert fleet is not None
        fleet.owner_id = owner_id


def make_shipper(email: str = "shipper@example.com") -> Seeded:
    with session_scope() as session:
        row = Shipper(
            email=email,
            password_hash=_hash(PASSWORD),
            company_name="Valley Clinic",
            contact_name="Sam Ortiz",
        )
        session.add(row)
        session.flush()
        return Seeded(id=row.id, email=row.email)


def make_admin(email: str = "admin@example.com") -> Seeded:
    with session_scope() as session:
        row = AdminUser(email=email, password_hash=_hash(PASSWORD), name="Ops")
        session.add(row)
        session.flush()
        return Seeded(id=row.id, email=row.email)


def make_facility(shipper_id: str, name: str = "Main Lab", city: str = "Fresno") -> str:
    with session_scope() as session:
        row = Facility(
            shipper_id=shipper_id,
            name=name,
            facility_type="LAB",
            address_line1="1 Main St",
            city=city,
            state="CA",
            postal_code="93701",
        )
        session.add(row)
        session.flush()
        return row.id


def make_vehicle(driver_id: str, expiry: date | None, plate: str = "7ABC123") -> str:
    with session_scope() as session:
        row = Vehicle(
            driver_id=driver_id,
            vehicle_type="VAN",
            vehicle_plate=plate,
            registration_expiry_date=expiry,
        )
        session.add(row)
        session.flush()
        return row.id


def make_load(
    shipper_id: str,
    *,
    status: LoadStatus = LoadStatus.NEW,
    driver_id: str | None = None,
    quote: Decimal | None = None,
    code: str = "MED-0001-AB",
) -> str:
    pickup = make_facility(shipper_id, name=f"Pickup {code}", city="Fresno")
    dropoff = make_facility(shipper_id, name=f"Dropoff {code}", city="Clovis")
    with session_scope() as session:
        row = LoadRequest(
            tracking_code=code,
            shipper_id=shipper_id,
            pickup_facility_id=pickup,
            dropoff_facility_id=dropoff,
            driver_id=driver_id,
            service_type="STAT",
            commodity_description="Blood samples",
            status=status.value,
            quote_amount=quote,
        )
        session.add(row)
        session.flush()
        return row.id


def sign_in(client: FlaskClient, user_type: UserType, user: Seeded) -> None:
    _, token = container.session_codec.issue(user.id, user_type, user.email)
    client.set_cookie(COOKIE_NAME, token)
