# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from medcourier.domain.enums import LoadStatus, UserType
from medcourier.domain.loads.entities import LoadRecord, NewTrackingEvent
from medcourier.domain.loads.status import EVENT_CODES, EVENT_LABELS
from medcourier.domain.loads.tracking import generate_tracking_code
from medcourier.infrastructure.repositories.loads import SqlAlchemyLoadRepository
from medcourier.infrastructure.repositories.shippers import SqlAlchemyFacilityRepository
from medcourier.shared.errors import ConflictError, ValidationError
from medcourier.shared.logging import logger

MAX_CODE_ATTEMPTS = 5


class CreateLoadUseCase:
    def __init__(
        self,
        *,
        loads: SqlAlchemyLoadRepository,
        facilities: SqlAlchemyFacilityRepository,
        code_generator: Callable[[int], str] = generate_tracking_code,
    ) -> None:
        self._loads = loads
        self._facilities = facilities
        self._code_generator = code_generator

    def execute(self, shipper_id: str, data: Mapping[str, Any]) -> LoadRecord:
        self._check_facilities(shipper_id, data)

        tracking_code = self._allocate_tracking_code()
        load = self._loads.create(
            shipper_id=shipper_id,
            tracking_code=tracking_code,
            data=data,
            event=NewTrackingEvent(
                code=EVENT_CODES[LoadStatus.NEW],
                label=EVENT_LABELS[LoadStatus.NEW],
                actor_type=UserType.SHIPPER,
                actor_id=shipper_id,
            ),
        )
        logger.info(f"loads: created {tracking_code} id={load.id} shipper_id={shipper_id}")
        return load

    def _check_facilities(self, shipper_id: str, data: Mapping[str, Any]) -> None:
        errors: list[dict[str, str]] = []
        for field in ("pickup_facility_id", "dropoff_facility_id"):
            facility = self._facilities.get(data[field])
            if facility is None or facility.shipper_id != shipper_id:
                errors.append({"field": field, "message": "Facility not found"})
        if data["pickup_facility_id"] == data["dropoff_facility_id"]:
            errors.append(
                {
                    "field": "dropoff_facility_id",
                    "message": "Pickup and drop-off must be different facilities",
                }
            )
        ready, deadline = data.get("ready_time"), data.get("delivery_deadline")
        if ready is not None and deadline is not None and deadline <= ready:
            errors.append(
                {"field": "delivery_deadline", "message": "Deadline must be after the ready time"}
            )
        if errors:
            raise ValidationError(errors=errors)

    def _allocate_tracking_code(self) -> str:
        sequence = self._loads.next_sequence()
        for _ in range(MAX_CODE_ATTEMPTS):
            code = self._code_generator(sequence)
            if not self._loads.tracking_code_exists(code):
                return code
            sequence += 1
        raise ConflictError("Could not allocate a tracking code, please retry")


__all__ = ["CreateLoadUseCase"]
