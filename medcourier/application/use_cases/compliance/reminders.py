# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from medcourier.domain.compliance.rules import (
    WARNING_DAYS,
    ComplianceReminder,
    ReminderType,
    days_until,
    severity_for,
    sort_reminders,
)
from medcourier.domain.values import iso
from medcourier.infrastructure.repositories.compliance import SqlAlchemyComplianceRepository


def reminder_to_dict(reminder: ComplianceReminder) -> dict[str, Any]:
    return {
        "id": reminder.id,
        "type": reminder.type.value,
        "entity_id": reminder.entity_id,
        "entity_type": reminder.entity_type,
        "title": reminder.title,
        "description": reminder.description,
        "expiry_date": iso(reminder.expiry_date),
        "days_until_expiry": reminder.days_until_expiry,
        "severity": reminder.severity.value,
    }


def _describe(days: int, what: str) -> str:
    if days < 0:
        return f"{what} expired {-days} day(s) ago"
    if days == 0:
        return f"{what} expires today"
    return f"{what} expires in {days} day(s)"


class ComplianceRemindersUseCase:
    def __init__(
        self,
        compliance: SqlAlchemyComplianceRepository,
        *,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._compliance = compliance
        self._clock = clock

    def execute(self) -> list[ComplianceReminder]:
        now = self._clock()
        cutoff = (now + timedelta(days=WARNING_DAYS)).date()
        reminders: list[ComplianceReminder] = []

        for vehicle in self._compliance.vehicles_expiring_by(cutoff):
            days = days_until(vehicle.registration_expiry_date, now)
            reminders.append(
                ComplianceReminder(
                    id=f"vehicle-{vehicle.vehicle_id}",
                    type=ReminderType.VEHICLE_REGISTRATION,
                    entity_id=vehicle.vehicle_id,
                    entity_type="vehicle",
                    title=f"Vehicle registration: {vehicle.vehicle_plate}",
                    description=(
                        f"{_describe(days, 'Registration')} ({vehicle.driver_name})"
                    ),
                    expiry_date=vehicle.registration_expiry_date,
                    days_until_expiry=days,
                    severity=severity_for(days),
                )
            )

        for license_ in self._compliance.licenses_expiring_by(cutoff):
            days = days_until(license_.license_expiry, now)
            reminders.append(
                ComplianceReminder(
                    id=f"license-{license_.driver_id}",
                    type=ReminderType.DRIVER_LICENSE,
                    entity_id=license_.driver_id,
                    entity_type="driver",
                    title=f"Driver license: {license_.driver_name}",
                    description=_describe(days, "License"),
                    expiry_date=license_.license_expiry,
                    days_until_expiry=days,
                    severity=severity_for(days),
                )
            )

        return sort_reminders(reminders)


__all__ = ["ComplianceRemindersUseCase", "reminder_to_dict"]
