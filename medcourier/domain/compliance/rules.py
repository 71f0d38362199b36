# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from enum import StrEnum

CRITICAL_DAYS = 7
WARNING_DAYS = 30
_DAY_SECONDS = 24 * 60 * 60


class Severity(StrEnum):
    CRITICAL = "CRITICAL"
    WARNING = "WARNING"
    INFO = "INFO"


class ExpiryLevel(StrEnum):
    WARNING_30_DAYS = "WARNING_30_DAYS"
    URGENT_7_DAYS = "URGENT_7_DAYS"
    CRITICAL_1_DAY = "CRITICAL_1_DAY"
    EXPIRED = "EXPIRED"


class ReminderType(StrEnum):
    VEHICLE_REGISTRATION = "VEHICLE_REGISTRATION"
    DRIVER_LICENSE = "DRIVER_LICENSE"


_SEVERITY_ORDER = {Severity.CRITICAL: 0, Severity.WARNING: 1, Severity.INFO: 2}


@dataclass(slots=True, frozen=True)
class ComplianceReminder:
    id: str
    type: ReminderType
    entity_id: str
    entity_type: str
    title: str
    description: str
    expiry_date: date
    days_until_expiry: int
    severity: Severity


def expiry_moment(expiry: date) -> datetime:
    """Registrations and licences expire at midnight UTC of their expiry date."""

    return datetime.combine(expiry, time.min, tzinfo=UTC)


def days_until(expiry: date, now: datetime) -> int:
    remaining = (expiry_moment(expiry) - now).total_seconds()
    return math.ceil(remaining / _DAY_SECONDS)


def severity_for(days: int) -> Severity:
    if days <= CRITICAL_DAYS:
        return Severity.CRITICAL
    if days <= WARNING_DAYS:
        return Severity.WARNING
    return Severity.INFO


def expiry_level(expiry: date, now: datetime) -> ExpiryLevel | None:
    if expiry_moment(expiry) < now:
        return ExpiryLevel.EXPIRED
    days = days_until(expiry, now)
    if days <= 1:
        return ExpiryLevel.CRITICAL_1_DAY
    if days <= CRITICAL_DAYS:
        return ExpiryLevel.URGENT_7_DAYS
    if days <= WARNING_DAYS:
        return ExpiryLevel.WARNING_30_DAYS
    return None


def sort_reminders(reminders: Iterable[ComplianceReminder]) -> list[ComplianceReminder]:
    return sorted(
        reminders, key=lambda r: (_SEVERITY_ORDER[r.severity], r.days_until_expiry)
    )


__all__ = [
    "CRITICAL_DAYS",
    "ComplianceReminder",
    "ExpiryLevel",
    "ReminderType",
    "Severity",
    "WARNING_DAYS",
    "days_until",
    "expiry_level",
    "expiry_moment",
    "severity_for",
    "sort_reminders",
]
