# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from medcourier.domain.auth.entities import Principal
from medcourier.domain.enums import UserType
from medcourier.domain.shippers.entities import FacilityRecord, ShipperProfile
from medcourier.infrastructure.repositories.shippers import (
    SqlAlchemyFacilityRepository,
    SqlAlchemyShipperRepository,
)
from medcourier.shared.errors import AuthorizationError, ConflictError, NotFoundError
from medcourier.shared.logging import logger


class ShipperAccounts:
    def __init__(self, shippers: SqlAlchemyShipperRepository) -> None:
        self._shippers = shippers

    def get_profile(self, shipper_id: str) -> ShipperProfile:
        profile = self._shippers.get(shipper_id)
        if profile is None:
            raise NotFoundError("Shipper")
        return profile

    def update_profile(self, shipper_id: str, changes: Mapping[str, Any]) -> ShipperProfile:
        profile = self._shippers.update_profile(shipper_id, changes)
        if profile is None:
            raise NotFoundError("Shipper")
        logger.info(f"shippers: profile updated shipper_id={shipper_id} fields={sorted(changes)}")
        return profile

    def list_all(self) -> list[ShipperProfile]:
        return self._shippers.list_all()


class FacilityCatalog:
    """Pickup and drop-off sites, each owned by one shipper."""

    def __init__(self, facilities: SqlAlchemyFacilityRepository) -> None:
        self._facilities = facilities

    def list_for_shipper(self, shipper_id: str) -> list[FacilityRecord]:
        return self._facilities.list_for_shipper(shipper_id)

    def add(self, shipper_id: str, data: Mapping[str, Any]) -> FacilityRecord:
        facility = self._facilities.add(shipper_id, data)
        logger.info(f"facilities: created facility_id={facility.id} shipper_id={shipper_id}")
        return facility

    def get(self, principal: Principal, facility_id: str) -> FacilityRecord:
        facility = self._facilities.get(facility_id)
        if facility is None:
            raise NotFoundError("Facility")
        if principal.user_type is UserType.SHIPPER and facility.shipper_id == principal.user_id:
            return facility
        if principal.is_admin:
            return facility
        raise AuthorizationError("You do not have access to this facility")

    def update(
        self, principal: Principal, facility_id: str, changes: Mapping[str, Any]
    ) -> FacilityRecord:
        self.get(principal, facility_id)
        facility = self._facilities.update(facility_id, changes)
        if facility is None:
            raise NotFoundError("Facility")
        return facility

    def delete(self, principal: Principal, facility_id: str) -> None:
        self.get(principal, facility_id)
        if self._facilities.is_referenced(facility_id):
            raise ConflictError("Facility is used by existing load requests and cannot be deleted")
        self._facilities.delete(facility_id)
        logger.info(f"facilities: deleted facility_id={facility_id}")


__all__ = ["FacilityCatalog", "ShipperAccounts"]
