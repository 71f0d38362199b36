# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Load lifecycle.

A load moves along ``NEW → QUOTED → QUOTE_ACCEPTED → SCHEDULED → PICKED_UP →
IN_TRANSIT → DELIVERED → COMPLETED``. Quotes can be withdrawn one step back,
a load can be cancelled any time before pickup, and a picked-up load may be
marked delivered directly.
"""

from __future__ import annotations

from collections.abc import Mapping

from medcourier.domain.enums import LoadStatus
from medcourier.domain.exceptions import InvalidTransitionError

TRANSITIONS: Mapping[LoadStatus, frozenset[LoadStatus]] = {
    LoadStatus.NEW: frozenset({LoadStatus.QUOTED, LoadStatus.CANCELLED}),
    LoadStatus.QUOTED: frozenset(
        {LoadStatus.QUOTE_ACCEPTED, LoadStatus.NEW, LoadStatus.CANCELLED}
    ),
    LoadStatus.QUOTE_ACCEPTED: frozenset(
        {LoadStatus.SCHEDULED, LoadStatus.QUOTED, LoadStatus.CANCELLED}
    ),
    LoadStatus.SCHEDULED: frozenset({LoadStatus.PICKED_UP, LoadStatus.CANCELLED}),
    LoadStatus.PICKED_UP: frozenset({LoadStatus.IN_TRANSIT, LoadStatus.DELIVERED}),
    LoadStatus.IN_TRANSIT: frozenset({LoadStatus.DELIVERED}),
    LoadStatus.DELIVERED: frozenset({LoadStatus.COMPLETED}),
    LoadStatus.COMPLETED: frozenset(),
    LoadStatus.CANCELLED: frozenset(),
}

DOCUMENT_LOCKING_STATUSES = frozenset({LoadStatus.DELIVERED, LoadStatus.COMPLETED})
INVOICEABLE_STATUSES = frozenset({LoadStatus.DELIVERED, LoadStatus.COMPLETED})
RATEABLE_STATUSES = INVOICEABLE_STATUSES
CANCELLABLE_STATUSES = frozenset(
    status for status, targets in TRANSITIONS.items() if LoadStatus.CANCELLED in targets
)
# Statuses a driver moves a load into; everything else is an admin decision.
DRIVER_STATUSES = frozenset(
    {LoadStatus.PICKED_UP, LoadStatus.IN_TRANSIT, LoadStatus.DELIVERED}
)

EVENT_LABELS: Mapping[LoadStatus, str] = {
    LoadStatus.NEW: "Request received",
    LoadStatus.QUOTED: "Quote provided",
    LoadStatus.QUOTE_ACCEPTED: "Quote accepted",
    LoadStatus.SCHEDULED: "Driver assigned",
    LoadStatus.PICKED_UP: "Picked up",
    LoadStatus.IN_TRANSIT: "In transit",
    LoadStatus.DELIVERED: "Delivered",
    LoadStatus.COMPLETED: "Completed",
    LoadStatus.CANCELLED: "Cancelled",
}

EVENT_CODES: Mapping[LoadStatus, str] = {
    LoadStatus.NEW: "REQUEST_RECEIVED",
    LoadStatus.QUOTED: "PRICE_QUOTED",
    LoadStatus.QUOTE_ACCEPTED: "SHIPPER_CONFIRMED",
    LoadStatus.SCHEDULED: "DRIVER_ASSIGNED",
    LoadStatus.PICKED_UP: "PICKED_UP",
    LoadStatus.IN_TRANSIT: "IN_TRANSIT",
    LoadStatus.DELIVERED: "DELIVERED",
    LoadStatus.COMPLETED: "COMPLETED",
    LoadStatus.CANCELLED: "CANCELLED",
}


def can_transition(current: LoadStatus, requested: LoadStatus) -> bool:
    return requested in TRANSITIONS[current]


def ensure_transition(current: LoadStatus, requested: LoadStatus) -> None:
    if not can_transition(current, requested):
        raise InvalidTransitionError(current.value, requested.value)


def is_terminal(status: LoadStatus) -> bool:
    return not TRANSITIONS[status]


__all__ = [
    "CANCELLABLE_STATUSES",
    "DOCUMENT_LOCKING_STATUSES",
    "DRIVER_STATUSES",
    "EVENT_CODES",
    "EVENT_LABELS",
    "INVOICEABLE_STATUSES",
    "RATEABLE_STATUSES",
    "TRANSITIONS",
    "can_transition",
    "ensure_transition",
    "is_terminal",
]
