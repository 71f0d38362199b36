from __future__ import annotations

import random
from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from medcourier.domain.compliance.rules import (
    ComplianceReminder,
    ExpiryLevel,
    ReminderType,
    Severity,
    days_until,
    expiry_level,
    severity_for,
    sort_reminders,
)
from medcourier.domain.enums import FleetRole, InvoiceStatus, LoadStatus, PaymentTerms
from medcourier.domain.exceptions import InvalidTransitionError, InvariantViolationError
from medcourier.domain.fleet.entities import RatingStats
from medcourier.domain.fleet.visibility import FleetMember, visible_driver_ids
from medcourier.domain.invoicing.rules import (
    compute_totals,
    due_date_for,
    ensure_invoice_transition,
    next_invoice_number,
)
from medcourier.domain.loads.status import (
    CANCELLABLE_STATUSES,
    can_transition,
    ensure_transition,
    is_terminal,
)
from medcourier.domain.loads.tracking import (
    generate_tracking_code,
    is_valid_tracking_code,
    normalize_tracking_code,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


def test_load_happy_path_is_allowed() -> None:
    path = [
        LoadStatus.NEW,
        LoadStatus.QUOTED,
        LoadStatus.QUOTE_ACCEPTED,
        LoadStatus.SCHEDULED,
        LoadStatus.PICKED_UP,
        LoadStatus.IN_TRANSIT,
        LoadStatus.DELIVERED,
        LoadStatus.COMPLETED,
    ]
    for current, target in zip(path, path[1:], strict=False):
        ensure_transition(current, target)
    assert is_terminal(LoadStatus.COMPLETED)


def test_load_cannot_skip_ahead_or_leave_terminal_state() -> None:
    with pytest.raises(InvalidTransitionError) as exc_info:
        ensure_transition(LoadStatus.NEW, LoadStatus.DELIVERED)
    assert exc_info.value.field == "status"
    assert not can_transition(LoadStatus.CANCELLED, LoadStatus.NEW)
    assert not can_transition(LoadStatus.PICKED_UP, LoadStatus.CANCELLED)


def test_cancellation_only_before_pickup() -> None:
    assert CANCELLABLE_STATUSES == {
        LoadStatus.NEW,
        LoadStatus.QUOTED,
        LoadStatus.QUOTE_ACCEPTED,
        LoadStatus.SCHEDULED,
    }


def test_tracking_code_format() -> None:
    code = generate_tracking_code(7, random.Random(1))
    assert is_valid_tracking_code(code)
    assert code.startswith("MED-0007-")
    assert generate_tracking_code(12345, random.Random(1)).startswith("MED-12345-")
    assert normalize_tracking_code("  med-0007-ab ") == "MED-0007-AB"
    assert not is_valid_tracking_code("MED-7-AB")


@pytest.mark.parametrize(
    ("role", "expected"),
    [
        (FleetRole.INDEPENDENT, {"me"}),
        (FleetRole.DRIVER, {"me"}),
        (FleetRole.OWNER, {"me", "a", "b"}),
        (FleetRole.ADMIN, {"me", "a", "b"}),
    ],
)
def test_fleet_visibility_by_role(role: FleetRole, expected: set[str]) -> None:
    viewer = FleetMember(driver_id="me", fleet_id="fleet-1", fleet_role=role)
    assert visible_driver_ids(viewer, ["a", "b"]) == expected


def test_owner_without_fleet_sees_only_themself() -> None:
    viewer = FleetMember(driver_id="me", fleet_id=None, fleet_role=FleetRole.OWNER)
    assert visible_driver_ids(viewer, ["a"]) == {"me"}


def test_expiry_levels() -> None:
    assert expiry_level(date(2025, 2, 28), NOW) is ExpiryLevel.EXPIRED
    assert expiry_level(date(2025, 3, 2), NOW) is ExpiryLevel.CRITICAL_1_DAY
    assert expiry_level(date(2025, 3, 6), NOW) is ExpiryLevel.URGENT_7_DAYS
    assert expiry_level(date(2025, 3, 25), NOW) is ExpiryLevel.WARNING_30_DAYS
    assert expiry_level(date(2025, 6, 1), NOW) is None


def test_days_until_rounds_partial_days_up() -> None:
    assert days_until(date(2025, 3, 2), NOW) == 1
    assert days_until(date(2025, 3, 8), NOW) == 7
    assert severity_for(7) is Severity.CRITICAL
    assert severity_for(8) is Severity.WARNING
    assert severity_for(31) is Severity.INFO


def test_reminders_sorted_by_severity_then_days() -> None:
    def reminder(key: str, severity: Severity, days: int) -> ComplianceReminder:
        return ComplianceReminder(
            id=key,
            type=ReminderType.VEHICLE_REGISTRATION,
            entity_id=key,
            entity_type="vehicle",
            title=key,
            description=key,
            expiry_date=date(2025, 3, 1),
            days_until_expiry=days,
            severity=severity,
        )

    ordered = sort_reminders(
        [
            reminder("w20", Severity.WARNING, 20),
            reminder("c5", Severity.CRITICAL, 5),
            reminder("w10", Severity.WARNING, 10),
            reminder("c-2", Severity.CRITICAL, -2),
        ]
    )
    assert [r.id for r in ordered] == ["c-2", "c5", "w10", "w20"]


def test_invoice_numbers_follow_last_issued() -> None:
    assert next_invoice_number(2025, None) == "INV-2025-001"
    assert next_invoice_number(2025, "INV-2025-009") == "INV-2025-010"
    assert next_invoice_number(2025, "INV-2025-1234") == "INV-2025-1235"


def test_invoice_totals_round_half_up() -> None:
    totals = compute_totals([Decimal("100.00"), Decimal("45.55")], Decimal("0.0825"))
    assert totals.subtotal == Decimal("145.55")
    assert totals.tax == Decimal("12.01")
    assert totals.total == Decimal("157.56")
    with pytest.raises(InvariantViolationError):
        compute_totals([Decimal("1")], Decimal("-0.1"))


def test_due_date_uses_payment_terms() -> None:
    issued = date(2025, 1, 10)
    assert due_date_for(issued, PaymentTerms.NET_7) == date(2025, 1, 17)
    assert due_date_for(issued, "NET_30") == date(2025, 2, 9)
    assert due_date_for(issued, None) == date(2025, 1, 24)
    assert due_date_for(issued, "SOMETHING_ELSE") == date(2025, 1, 24)


def test_paid_invoice_is_final() -> None:
    ensure_invoice_transition(InvoiceStatus.DRAFT, InvoiceStatus.SENT)
    with pytest.raises(InvalidTransitionError):
        ensure_invoice_transition(InvoiceStatus.PAID, InvoiceStatus.VOID)


def test_rating_stats() -> None:
    stats = RatingStats.from_ratings([5, 4, 4])
    assert stats.average_rating == 4.33
    assert stats.rating_count == 3
    assert stats.to_dict()["distribution"] == {"5": 1, "4": 2, "3": 0, "2": 0, "1": 0}
    assert RatingStats.from_ratings([]).average_rating == 0.0
