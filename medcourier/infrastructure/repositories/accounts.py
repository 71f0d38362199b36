# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from sqlalchemy import select

from medcourier.domain.auth.entities import Account, NewAccount
from medcourier.domain.auth.repositories import AccountRepository
from medcourier.domain.enums import DriverStatus, FleetRole, UserType
from medcourier.domain.fleet.repositories import FleetMemberRepository
from medcourier.domain.fleet.visibility import FleetMember
from medcourier.infrastructure.db.models import AdminUser, Driver, Shipper
from medcourier.infrastructure.unit_of_work import SessionFactory, unit_of_work_scope

_MODELS: dict[UserType, type[Driver] | type[Shipper] | type[AdminUser]] = {
    UserType.DRIVER: Driver,
    UserType.SHIPPER: Shipper,
    UserType.ADMIN: AdminUser,
}


def _to_account(row: Driver | Shipper | AdminUser, user_type: UserType) -> Account:
    if isinstance(row, Driver):
        return Account(
            id=row.id,
            user_type=user_type,
            email=row.email,
            password_hash=row.password_hash,
            name=row.full_name,
            is_admin=bool(row.is_admin),
            driver_status=DriverStatus(row.status),
            fleet_id=row.fleet_id,
            fleet_role=FleetRole(row.fleet_role),
        )
    if isinstance(row, Shipper):
        return Account(
            id=row.id,
            user_type=user_type,
            email=row.email,
            password_hash=row.password_hash,
            name=row.company_name,
        )
    return Account(
        id=row.id,
        user_type=user_type,
        email=row.email,
        password_hash=row.password_hash,
        name=row.name,
        is_admin=True,
    )


def normalize_email(email: str) -> str:
    return email.strip().lower()


class SqlAlchemyAccountRepository(AccountRepository):
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def find_by_email(self, email: str, user_type: UserType) -> Account | None:
        model = _MODELS[user_type]
        with unit_of_work_scope(self._session_factory) as session:
            row = session.execute(
                select(model).where(model.email == normalize_email(email))
            ).scalar_one_or_none()
            return _to_account(row, user_type) if row else None

    def find_by_id(self, user_id: str, user_type: UserType) -> Account | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(_MODELS[user_type], user_id)
            return _to_account(row, user_type) if row else None

    def add(self, account: NewAccount) -> Account:
        email = normalize_email(account.email)
        row: Driver | Shipper | AdminUser
        if account.user_type is UserType.DRIVER:
            first, _, last = account.name.strip().partition(" ")
            row = Driver(
                email=email,
                password_hash=account.password_hash,
                first_name=first,
                last_name=last,
                phone=account.phone,
                status=DriverStatus.PENDING_APPROVAL.value,
                fleet_role=FleetRole.INDEPENDENT.value,
            )
        elif account.user_type is UserType.SHIPPER:
            row = Shipper(
                email=email,
                password_hash=account.password_hash,
                company_name=account.company_name or account.name,
                contact_name=account.name,
                phone=account.phone,
            )
        else:
            row = AdminUser(email=email, password_hash=account.password_hash, name=account.name)

        with unit_of_work_scope(self._session_factory) as session:
            session.add(row)
            session.flush()
            return _to_account(row, account.user_type)

    def update_password(self, user_id: str, user_type: UserType, password_hash: str) -> None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(_MODELS[user_type], user_id)
            if row is not None:
                row.password_hash = password_hash


class SqlAlchemyFleetMemberRepository(FleetMemberRepository):
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def get_member(self, driver_id: str) -> FleetMember | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(Driver, driver_id)
            if row is None:
                return None
            return FleetMember(
                driver_id=row.id, fleet_id=row.fleet_id, fleet_role=FleetRole(row.fleet_role)
            )

    def list_fleet_driver_ids(self, fleet_id: str) -> list[str]:
        with unit_of_work_scope(self._session_factory) as session:
            return list(
                session.execute(select(Driver.id).where(Driver.fleet_id == fleet_id)).scalars()
            )


__all__ = [
    "SqlAlchemyAccountRepository",
    "SqlAlchemyFleetMemberRepository",
    "normalize_email",
]
