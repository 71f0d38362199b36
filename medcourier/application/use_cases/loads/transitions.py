# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from medcourier.domain.auth.entities import Principal
from medcourier.domain.enums import LoadStatus, NotificationType, UserType
from medcourier.domain.exceptions import StaleStateError
from medcourier.domain.loads.entities import (
    LoadRecord,
    LoadTransition,
    NewTrackingEvent,
    ShipperNotice,
)
from medcourier.domain.loads.status import (
    DOCUMENT_LOCKING_STATUSES,
    EVENT_CODES,
    EVENT_LABELS,
    ensure_transition,
)
from medcourier.infrastructure.db.models import utcnow
from medcourier.infrastructure.repositories.loads import SqlAlchemyLoadRepository
from medcourier.shared.errors import ConflictError, NotFoundError
from medcourier.shared.logging import logger

_NOTICE_TYPES: Mapping[LoadStatus, NotificationType] = {
    LoadStatus.QUOTED: NotificationType.QUOTE_READY,
    LoadStatus.SCHEDULED: NotificationType.DRIVER_ASSIGNED,
}

_TIMESTAMP_FIELDS: Mapping[LoadStatus, str] = {
    LoadStatus.QUOTE_ACCEPTED: "accepted_at",
    LoadStatus.PICKED_UP: "picked_up_at",
    LoadStatus.DELIVERED: "delivered_at",
    LoadStatus.CANCELLED: "cancelled_at",
}


def actor_type(principal: Principal) -> str:
    if principal.is_admin:
        return UserType.ADMIN.value
    return principal.user_type.value


def build_transition(
    load: LoadRecord,
    target: LoadStatus,
    actor: Principal,
    *,
    changes: Mapping[str, Any] | None = None,
    location_text: str | None = None,
    now: datetime | None = None,
) -> LoadTransition:
    ensure_transition(load.status, target)
    label = EVENT_LABELS[target]
    writes = dict(changes or {})
    timestamp_field = _TIMESTAMP_FIELDS.get(target)
    if timestamp_field:
        writes[timestamp_field] = now or utcnow()
    return LoadTransition(
        status=target,
        expected_status=load.status,
        event=NewTrackingEvent(
            code=EVENT_CODES[target],
            label=label,
            actor_type=actor_type(actor),
            actor_id=actor.user_id,
            location_text=location_text,
        ),
        notice=ShipperNotice(
            type=_NOTICE_TYPES.get(target, NotificationType.LOAD_STATUS),
            title=f"{load.tracking_code}: {label}",
            message=f"Load {load.tracking_code} is now {target.value.replace('_', ' ').lower()}.",
        ),
        changes=writes,
        lock_documents=target in DOCUMENT_LOCKING_STATUSES,
    )


def apply(
    loads: SqlAlchemyLoadRepository, load: LoadRecord, transition: LoadTransition
) -> LoadRecord:
    try:
        updated = loads.apply_transition(load.id, transition)
    except StaleStateError as exc:
        logger.warning(f"loads: {load.tracking_code} changed concurrently: {exc}")
        raise ConflictError("Load request was updated by someone else, reload and retry") from exc
    if updated is None:
        raise NotFoundError("Load request")
    logger.info(
        f"loads: {load.tracking_code} {load.status.value} -> {transition.status.value} "
        f"by {transition.event.actor_type}:{transition.event.actor_id}"
    )
    return updated


__all__ = ["actor_type", "apply", "build_transition"]
