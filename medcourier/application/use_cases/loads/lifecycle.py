# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from decimal import Decimal

from medcourier.domain.auth.entities import Principal
from medcourier.domain.enums import DriverStatus, LoadStatus, NotificationType, UserType
from medcourier.domain.loads.entities import LoadRecord
from medcourier.domain.loads.status import DRIVER_STATUSES, RATEABLE_STATUSES
from medcourier.domain.notifications.entities import NewNotification, Recipient
from medcourier.domain.values import to_money
from medcourier.infrastructure.cache import InMemoryTTLCache
from medcourier.infrastructure.repositories.drivers import SqlAlchemyDriverRepository
from medcourier.infrastructure.repositories.loads import SqlAlchemyLoadRepository
from medcourier.infrastructure.repositories.notifications import (
    SqlAlchemyNotificationRepository,
)
from medcourier.shared.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from medcourier.shared.logging import logger

from ..accounts.drivers import ratings_cache_key
from .access import is_assigned_driver, is_owning_shipper, load_for, require_admin_actor
from .transitions import apply, build_transition


def _field_error(field: str, message: str) -> ValidationError:
    return ValidationError(message, errors=[{"field": field, "message": message}])


class QuoteLoadUseCase:
    def __init__(self, loads: SqlAlchemyLoadRepository) -> None:
        self._loads = loads

    def execute(
        self, actor: Principal, load_id: str, amount: Decimal | float, notes: str | None = None
    ) -> LoadRecord:
        require_admin_actor(actor)
        quote = to_money(amount)
        if quote <= 0:
            raise _field_error("quote_amount", "Quote amount must be greater than zero")
        load = load_for(self._loads, actor, load_id)
        transition = build_transition(
            load,
            LoadStatus.QUOTED,
            actor,
            changes={"quote_amount": quote, "quote_notes": notes},
        )
        return apply(self._loads, load, transition)


class AcceptQuoteUseCase:
    def __init__(self, loads: SqlAlchemyLoadRepository) -> None:
        self._loads = loads

    def execute(self, actor: Principal, load_id: str) -> LoadRecord:
        load = load_for(self._loads, actor, load_id)
        if not is_owning_shipper(actor, load):
            raise AuthorizationError("Only the shipper who requested the load can accept it")
        return apply(self._loads, load, build_transition(load, LoadStatus.QUOTE_ACCEPTED, actor))


class AssignDriverUseCase:
    def __init__(
        self,
        *,
        loads: SqlAlchemyLoadRepository,
        drivers: SqlAlchemyDriverRepository,
        notifications: SqlAlchemyNotificationRepository,
    ) -> None:
        self._loads = loads
        self._drivers = drivers
        self._notifications = notifications

    def execute(self, actor: Principal, load_id: str, driver_id: str) -> LoadRecord:
        require_admin_actor(actor)
        load = load_for(self._loads, actor, load_id)
        driver = self._drivers.get(driver_id)
        if driver is None:
            raise _field_error("driver_id", "Driver not found")
        if driver.status is not DriverStatus.ACTIVE:
            raise _field_error("driver_id", "Driver is not active")

        transition = build_transition(
            load, LoadStatus.SCHEDULED, actor, changes={"driver_id": driver.id}
        )
        updated = apply(self._loads, load, transition)
        self._notifications.add(
            NewNotification(
                recipient=Recipient(user_type=UserType.DRIVER, user_id=driver.id),
                type=NotificationType.DRIVER_ASSIGNED.value,
                title=f"New load {load.tracking_code}",
                message=f"You have been assigned load {load.tracking_code}.",
                link=f"/driver/loads/{load.id}",
                load_request_id=load.id,
            )
        )
        return updated


class UpdateLoadStatusUseCase:
    """Drivers move their own loads through pickup and delivery, admins anything."""

    def __init__(self, loads: SqlAlchemyLoadRepository) -> None:
        self._loads = loads

    def execute(
        self,
        actor: Principal,
        load_id: str,
        status: LoadStatus,
        location_text: str | None = None,
    ) -> LoadRecord:
        load = load_for(self._loads, actor, load_id)
        if not actor.is_admin:
            if not is_assigned_driver(actor, load):
                raise AuthorizationError("Only the assigned driver can update this load")
            if status not in DRIVER_STATUSES:
                raise AuthorizationError(f"Drivers cannot set status {status.value}")
        if status is LoadStatus.SCHEDULED and load.driver_id is None:
            raise _field_error("status", "Assign a driver before scheduling the load")
        if status is LoadStatus.QUOTED and load.quote_amount is None:
            raise _field_error("status", "Provide a quote amount before quoting the load")
        transition = build_transition(load, status, actor, location_text=location_text)
        return apply(self._loads, load, transition)


class CancelLoadUseCase:
    def __init__(self, loads: SqlAlchemyLoadRepository) -> None:
        self._loads = loads

    def execute(self, actor: Principal, load_id: str, reason: str | None = None) -> LoadRecord:
        load = load_for(self._loads, actor, load_id)
        if not (actor.is_admin or is_owning_shipper(actor, load)):
            raise AuthorizationError("Only the shipper or an admin can cancel this load")
        transition = build_transition(
            load, LoadStatus.CANCELLED, actor, changes={"cancellation_reason": reason}
        )
        return apply(self._loads, load, transition)


class RateDriverUseCase:
    def __init__(self, *, loads: SqlAlchemyLoadRepository, cache: InMemoryTTLCache) -> None:
        self._loads = loads
        self._cache = cache

    def execute(
        self, actor: Principal, load_id: str, rating: int, feedback: str | None = None
    ) -> None:
        if not 1 <= rating <= 5:
            raise _field_error("rating", "Rating must be between 1 and 5")
        load = load_for(self._loads, actor, load_id)
        if not is_owning_shipper(actor, load):
            raise AuthorizationError("Only the shipper who requested the load can rate it")
        if load.status not in RATEABLE_STATUSES:
            raise _field_error("status", "Only delivered loads can be rated")
        if load.driver_id is None:
            raise NotFoundError("Driver")
        if self._loads.has_rating(load.id):
            raise ConflictError("This load has already been rated")

        self._loads.add_rating(
            load_id=load.id,
            driver_id=load.driver_id,
            shipper_id=actor.user_id,
            rating=rating,
            feedback=feedback,
        )
        self._cache.delete(ratings_cache_key(load.driver_id))
        logger.info(f"loads: rated {load.tracking_code} driver_id={load.driver_id} rating={rating}")


__all__ = [
    "AcceptQuoteUseCase",
    "AssignDriverUseCase",
    "CancelLoadUseCase",
    "QuoteLoadUseCase",
    "RateDriverUseCase",
    "UpdateLoadStatusUseCase",
]
