# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

from medcourier.domain.auth.repositories import Mailer
from medcourier.domain.compliance.rules import WARNING_DAYS, ExpiryLevel, days_until, expiry_level
from medcourier.domain.enums import NotificationType, UserType
from medcourier.domain.notifications.entities import NewNotification, Recipient
from medcourier.domain.values import iso
from medcourier.infrastructure.observability import EXPIRY_NOTIFICATIONS
from medcourier.infrastructure.repositories.compliance import (
    SqlAlchemyComplianceRepository,
    VehicleExpiry,
)
from medcourier.infrastructure.repositories.notifications import (
    SqlAlchemyNotificationRepository,
)
from medcourier.shared.logging import logger

DEDUPE_WINDOW = timedelta(hours=24)

_HEADLINES: Mapping[ExpiryLevel, str] = {
    ExpiryLevel.WARNING_30_DAYS: "Vehicle registration expires within 30 days",
    ExpiryLevel.URGENT_7_DAYS: "Vehicle registration expires within 7 days",
    ExpiryLevel.CRITICAL_1_DAY: "Vehicle registration expires tomorrow",
    ExpiryLevel.EXPIRED: "Vehicle registration has expired",
}


def subject_key(vehicle_id: str) -> str:
    return f"vehicle:{vehicle_id}"


class VehicleExpiryCheckUseCase:
    """Scheduled scan that warns drivers (and their fleet owner) about registrations.

    Each notice is stored in the inbox and e-mailed. A vehicle produces at most
    one notice per recipient per day, so the job can run as often as the
    scheduler likes.
    """

    def __init__(
        self,
        *,
        compliance: SqlAlchemyComplianceRepository,
        notifications: SqlAlchemyNotificationRepository,
        mailer: Mailer,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._compliance = compliance
        self._notifications = notifications
        self._mailer = mailer
        self._clock = clock

    def execute(self) -> dict[str, Any]:
        now = self._clock()
        cutoff = (now + timedelta(days=WARNING_DAYS)).date()
        vehicles = self._compliance.vehicles_expiring_by(cutoff)
        notified = 0
        for vehicle in vehicles:
            level = expiry_level(vehicle.registration_expiry_date, now)
            if level is None:
                continue
            recipients = [
                (
                    Recipient(user_type=UserType.DRIVER, user_id=vehicle.driver_id),
                    vehicle.driver_email,
                )
            ]
            if vehicle.fleet_owner_id:
                recipients.append(
                    (
                        Recipient(user_type=UserType.DRIVER, user_id=vehicle.fleet_owner_id),
                        vehicle.fleet_owner_email,
                    )
                )
            for recipient, email in recipients:
                if self._notify(recipient, email, vehicle, level, now):
                    notified += 1
                    EXPIRY_NOTIFICATIONS.labels(level=level.value).inc()

        logger.info(f"compliance: vehicle expiry check checked={len(vehicles)} notified={notified}")
        return {
            "success": True,
            "checked": len(vehicles),
            "notified": notified,
            "timestamp": iso(now),
        }

    def _notify(
        self,
        recipient: Recipient,
        email: str | None,
        vehicle: VehicleExpiry,
        level: ExpiryLevel,
        now: datetime,
    ) -> bool:
        key = subject_key(vehicle.vehicle_id)
        if self._notifications.exists_since(recipient, key, now - DEDUPE_WINDOW):
            return False
        days = days_until(vehicle.registration_expiry_date, now)
        owner_copy = recipient.user_id != vehicle.driver_id
        message = (
            f"Registration for {vehicle.vehicle_plate} expires on "
            f"{vehicle.registration_expiry_date.isoformat()}."
        )
        if owner_copy:
            message = f"{vehicle.driver_name}: {message}"
        self._notifications.add(
            NewNotification(
                recipient=recipient,
                type=NotificationType.VEHICLE_REGISTRATION_EXPIRING.value,
                title=_HEADLINES[level],
                message=message,
                link="/driver/vehicles",
                metadata={
                    "vehicle_id": vehicle.vehicle_id,
                    "level": level.value,
                    "days_until_expiry": days,
                },
                subject_key=key,
            )
        )
        if email:
            self._mailer.send(
                to=email,
                subject=f"MedCourier: {_HEADLINES[level]}",
                body=(
                    f"{message}\n\n"
                    "Upload the renewed registration from your vehicles page to stay "
                    "eligible for dispatch."
                ),
            )
        return True


__all__ = ["DEDUPE_WINDOW", "VehicleExpiryCheckUseCase", "subject_key"]
