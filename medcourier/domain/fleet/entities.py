# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from medcourier.domain.enums import DriverStatus, FleetRole
from medcourier.domain.values import iso


@dataclass(slots=True, frozen=True)
class DriverProfile:
    id: str
    email: str
    first_name: str
    last_name: str
    phone: str | None
    status: DriverStatus
    fleet_id: str | None
    fleet_role: FleetRole
    is_admin: bool
    license_number: str | None
    license_expiry: date | None
    created_at: datetime

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone": self.phone,
            "status": self.status.value,
            "fleet_id": self.fleet_id,
            "fleet_role": self.fleet_role.value,
            "is_admin": self.is_admin,
            "license_number": self.license_number,
            "license_expiry": iso(self.license_expiry),
            "created_at": iso(self.created_at),
        }


@dataclass(slots=True, frozen=True)
class VehicleRecord:
    id: str
    driver_id: str
    vehicle_type: str
    make: str | None
    model: str | None
    year: int | None
    vehicle_plate: str
    registration_expiry_date: date | None
    is_active: bool

    def to_dict(self, compliance: dict[str, Any] | None = None) -> dict[str, Any]:
        payload = {
            "id": self.id,
            "driver_id": self.driver_id,
            "vehicle_type": self.vehicle_type,
            "make": self.make,
            "model": self.model,
            "year": self.year,
            "vehicle_plate": self.vehicle_plate,
            "registration_expiry_date": iso(self.registration_expiry_date),
            "is_active": self.is_active,
        }
        if compliance is not None:
            payload["compliance"] = compliance
        return payload


@dataclass(slots=True, frozen=True)
class RatingStats:
    average_rating: float
    rating_count: int
    distribution: dict[int, int]

    @classmethod
    def from_ratings(cls, ratings: list[int]) -> RatingStats:
        distribution = {score: 0 for score in range(5, 0, -1)}
        for rating in ratings:
            distribution[rating] = distribution.get(rating, 0) + 1
        count = len(ratings)
        average = round(sum(ratings) / count, 2) if count else 0.0
        return cls(average_rating=average, rating_count=count, distribution=distribution)

    def to_dict(self) -> dict[str, Any]:
        return {
            "average_rating": self.average_rating,
            "rating_count": self.rating_count,
            "distribution": {str(score): n for score, n in self.distribution.items()},
        }
