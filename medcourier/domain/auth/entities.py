# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from medcourier.domain.enums import DriverStatus, FleetRole, UserType


@dataclass(slots=True, frozen=True)
class Account:
    """Credentials and identity of any login-capable user."""

    id: str
    user_type: UserType
    email: str
    password_hash: str
    name: str
    is_admin: bool = False
    driver_status: DriverStatus | None = None
    fleet_id: str | None = None
    fleet_role: FleetRole | None = None


@dataclass(slots=True, frozen=True)
class Principal:
    user_id: str
    user_type: UserType
    email: str
    name: str
    is_admin: bool = False
    fleet_id: str | None = None
    fleet_role: FleetRole | None = None

    @classmethod
    def from_account(cls, account: Account) -> Principal:
        return cls(
            user_id=account.id,
            user_type=account.user_type,
            email=account.email,
            name=account.name,
            is_admin=account.is_admin or account.user_type is UserType.ADMIN,
            fleet_id=account.fleet_id,
            fleet_role=account.fleet_role,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.user_id,
            "user_type": self.user_type.value,
            "email": self.email,
            "name": self.name,
            "is_admin": self.is_admin,
        }


@dataclass(slots=True, frozen=True)
class AuthSession:
    user_id: str
    user_type: UserType
    email: str
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(slots=True, frozen=True)
class NewAccount:
    user_type: UserType
    email: str
    password_hash: str
    name: str
    phone: str | None = None
    company_name: str | None = None


@dataclass(slots=True, frozen=True)
class ResetTokenValidation:
    valid: bool
    user_id: str | None = None
    user_type: UserType | None = None
