# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from medcourier.application.services.fleet_visibility import FleetVisibilityService
from medcourier.domain.compliance.rules import days_until, expiry_level, severity_for
from medcourier.domain.enums import DriverStatus
from medcourier.domain.fleet.entities import DriverProfile, VehicleRecord
from medcourier.infrastructure.cache import InMemoryTTLCache
from medcourier.infrastructure.repositories.drivers import SqlAlchemyDriverRepository
from medcourier.shared.errors import NotFoundError
from medcourier.shared.logging import logger


def ratings_cache_key(driver_id: str) -> str:
    return f"driver:ratings:{driver_id}"


def vehicle_compliance(vehicle: VehicleRecord, now: datetime) -> dict[str, Any]:
    expiry = vehicle.registration_expiry_date
    if expiry is None:
        return {"registration_status": "UNKNOWN", "days_until_expiry": None, "severity": None}
    days = days_until(expiry, now)
    level = expiry_level(expiry, now)
    return {
        "registration_status": level.value if level else "VALID",
        "days_until_expiry": days,
        "severity": severity_for(days).value,
    }


class DriverAccounts:
    def __init__(
        self,
        *,
        drivers: SqlAlchemyDriverRepository,
        visibility: FleetVisibilityService,
        cache: InMemoryTTLCache,
        ratings_ttl: float = 300,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._drivers = drivers
        self._visibility = visibility
        self._cache = cache
        self._ratings_ttl = ratings_ttl
        self._clock = clock

    def get_profile(self, driver_id: str) -> DriverProfile:
        profile = self._drivers.get(driver_id)
        if profile is None:
            raise NotFoundError("Driver")
        return profile

    def update_profile(self, driver_id: str, changes: Mapping[str, Any]) -> DriverProfile:
        profile = self._drivers.update_profile(driver_id, changes)
        if profile is None:
            raise NotFoundError("Driver")
        logger.info(f"drivers: profile updated driver_id={driver_id} fields={sorted(changes)}")
        return profile

    def list_fleet(self, viewer_id: str) -> list[DriverProfile]:
        return self._drivers.list_visible(viewer_id)

    def list_vehicles(self, viewer_id: str, driver_id: str) -> list[dict[str, Any]]:
        now = self._clock()
        return [
            vehicle.to_dict(compliance=vehicle_compliance(vehicle, now))
            for vehicle in self._drivers.list_vehicles(viewer_id, driver_id)
        ]

    def fleet_member(self, viewer_id: str, member_id: str) -> dict[str, Any]:
        """Profile and vehicles of a driver the viewer may see through its fleet."""

        if not self._visibility.can_view(viewer_id, member_id):
            raise NotFoundError("Driver")
        profile = self.get_profile(member_id)
        return {
            "driver": profile.to_dict(),
            "vehicles": self.list_vehicles(viewer_id, member_id),
        }

    def add_vehicle(self, driver_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
        self.get_profile(driver_id)
        vehicle = self._drivers.add_vehicle(driver_id, data)
        logger.info(f"drivers: vehicle added driver_id={driver_id} vehicle_id={vehicle.id}")
        return vehicle.to_dict(compliance=vehicle_compliance(vehicle, self._clock()))

    def rating_stats(self, driver_id: str) -> dict[str, Any]:
        self.get_profile(driver_id)
        return self._cache.get_or_set(
            ratings_cache_key(driver_id),
            lambda: self._drivers.rating_stats(driver_id).to_dict(),
            self._ratings_ttl,
        )

    def list_drivers(self, status: DriverStatus | None = None) -> list[DriverProfile]:
        return self._drivers.list_by_status(status)

    def approve(self, driver_id: str) -> DriverProfile:
        profile = self._drivers.set_status(driver_id, DriverStatus.ACTIVE)
        if profile is None:
            raise NotFoundError("Driver")
        logger.info(f"drivers: approved driver_id={driver_id}")
        return profile


__all__ = ["DriverAccounts", "ratings_cache_key", "vehicle_compliance"]
