# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field

from medcourier.domain.enums import DriverStatus, FacilityType, VehicleType

from .common import Phone, Text


class DriverUpdateDTO(BaseModel):
    first_name: Text | None = None
    last_name: Text | None = None
    phone: Phone | None = None
    license_number: Text | None = None
    license_expiry: date | None = None


class VehicleCreateDTO(BaseModel):
    vehicle_type: VehicleType
    vehicle_plate: Text
    make: Text | None = None
    model: Text | None = None
    year: int | None = Field(default=None, ge=1950, le=2100)
    registration_expiry_date: date | None = None

    def to_record(self) -> dict[str, Any]:
        data = self.model_dump()
        data["vehicle_type"] = self.vehicle_type.value
        return data


class ShipperUpdateDTO(BaseModel):
    company_name: Text | None = None
    contact_name: Text | None = None
    phone: Phone | None = None


class AddressDTO(BaseModel):
    line1: Text
    line2: Text | None = None
    city: Text
    state: str = Field(min_length=2, max_length=32)
    postal_code: str = Field(pattern=r"^[0-9A-Za-z -]{3,10}$")


class FacilityCreateDTO(BaseModel):
    name: Text
    facility_type: FacilityType
    address: AddressDTO
    contact_name: Text | None = None
    contact_phone: Phone | None = None
    access_notes: Text | None = None

    def to_record(self) -> dict[str, Any]:
        data = self.model_dump(exclude={"address"}, mode="json")
        data.update(flatten_address(self.address))
        return data


class FacilityUpdateDTO(BaseModel):
    name: Text | None = None
    facility_type: FacilityType | None = None
    address: AddressDTO | None = None
    contact_name: Text | None = None
    contact_phone: Phone | None = None
    access_notes: Text | None = None

    def to_changes(self) -> dict[str, Any]:
        changes = self.model_dump(exclude_unset=True, exclude={"address"}, mode="json")
        if self.address is not None:
            changes.update(flatten_address(self.address))
        return changes


def flatten_address(address: AddressDTO) -> dict[str, Any]:
    return {
        "address_line1": address.line1,
        "address_line2": address.line2,
        "city": address.city,
        "state": address.state,
        "postal_code": address.postal_code,
    }


class DriverListQuery(BaseModel):
    status: DriverStatus | None = None


class NotificationQuery(BaseModel):
    unread_only: bool = False
    limit: int = Field(default=50, ge=1, le=200)
