# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, selectinload

from medcourier.domain.enums import LoadStatus
from medcourier.domain.exceptions import StaleStateError
from medcourier.domain.loads.entities import (
    DocumentRecord,
    LoadRecord,
    LoadTransition,
    NewTrackingEvent,
    TrackingEventRecord,
)
from medcourier.domain.loads.status import INVOICEABLE_STATUSES
from medcourier.infrastructure.db.models import (
    Document,
    DriverRating,
    LoadRequest,
    Notification,
    TrackingEvent,
    as_utc,
    utcnow,
)
from medcourier.infrastructure.unit_of_work import SessionFactory, unit_of_work_scope

from .scoping import driver_scope

_LOAD_FIELDS = frozenset(
    {
        "pickup_facility_id",
        "dropoff_facility_id",
        "service_type",
        "commodity_description",
        "temperature_requirement",
        "ready_time",
        "delivery_deadline",
    }
)
_TRANSITION_FIELDS = frozenset(
    {
        "driver_id",
        "quote_amount",
        "quote_notes",
        "cancellation_reason",
        "accepted_at",
        "picked_up_at",
        "delivered_at",
        "cancelled_at",
    }
)


def to_event(row: TrackingEvent) -> TrackingEventRecord:
    return TrackingEventRecord(
        code=row.code,
        label=row.label,
        actor_type=row.actor_type,
        location_text=row.location_text,
        created_at=as_utc(row.created_at),
    )


def to_load(row: LoadRequest, *, with_events: bool = False) -> LoadRecord:
    return LoadRecord(
        id=row.id,
        tracking_code=row.tracking_code,
        shipper_id=row.shipper_id,
        pickup_facility_id=row.pickup_facility_id,
        dropoff_facility_id=row.dropoff_facility_id,
        driver_id=row.driver_id,
        service_type=row.service_type,
        commodity_description=row.commodity_description,
        temperature_requirement=row.temperature_requirement,
        status=LoadStatus(row.status),
        quote_amount=row.quote_amount,
        quote_notes=row.quote_notes,
        invoice_id=row.invoice_id,
        created_at=as_utc(row.created_at),
        ready_time=as_utc(row.ready_time) if row.ready_time else None,
        delivery_deadline=as_utc(row.delivery_deadline) if row.delivery_deadline else None,
        cancellation_reason=row.cancellation_reason,
        pickup_city=row.pickup_facility.city if row.pickup_facility else None,
        dropoff_city=row.dropoff_facility.city if row.dropoff_facility else None,
        events=tuple(to_event(event) for event in row.events) if with_events else (),
    )


def to_document(row: Document) -> DocumentRecord:
    return DocumentRecord(
        id=row.id,
        load_request_id=row.load_request_id,
        document_type=row.document_type,
        title=row.title,
        file_url=row.file_url,
        mime_type=row.mime_type,
        file_size=row.file_size,
        uploaded_by_type=row.uploaded_by_type,
        uploaded_by_id=row.uploaded_by_id,
        is_locked=bool(row.is_locked),
        created_at=as_utc(row.created_at),
    )


def _add_event(session: Session, load_id: str, event: NewTrackingEvent) -> None:
    session.add(
        TrackingEvent(
            load_request_id=load_id,
            code=event.code,
            label=event.label,
            location_text=event.location_text,
            actor_type=str(event.actor_type),
            actor_id=event.actor_id,
        )
    )


def _base_query():
    return select(LoadRequest).options(
        selectinload(LoadRequest.pickup_facility), selectinload(LoadRequest.dropoff_facility)
    )


class SqlAlchemyLoadRepository:
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    # Loads

    def next_sequence(self) -> int:
        with unit_of_work_scope(self._session_factory) as session:
            return int(session.execute(select(func.count(LoadRequest.id))).scalar_one()) + 1

    def tracking_code_exists(self, code: str) -> bool:
        with unit_of_work_scope(self._session_factory) as session:
            return (
                session.execute(
                    select(LoadRequest.id).where(LoadRequest.tracking_code == code)
                ).first()
                is not None
            )

    def create(
        self,
        *,
        shipper_id: str,
        tracking_code: str,
        data: Mapping[str, Any],
        event: NewTrackingEvent,
    ) -> LoadRecord:
        with unit_of_work_scope(self._session_factory) as session:
            row = LoadRequest(
                shipper_id=shipper_id,
                tracking_code=tracking_code,
                status=LoadStatus.NEW.value,
                **{key: value for key, value in data.items() if key in _LOAD_FIELDS},
            )
            session.add(row)
            session.flush()
            _add_event(session, row.id, event)
            session.flush()
            session.refresh(row)
            return to_load(row, with_events=True)

    def get(self, load_id: str) -> LoadRecord | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.execute(
                _base_query().options(selectinload(LoadRequest.events)).where(
                    LoadRequest.id == load_id
                )
            ).scalar_one_or_none()
            return to_load(row, with_events=True) if row else None

    def get_by_tracking_code(self, code: str) -> LoadRecord | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.execute(
                _base_query().options(selectinload(LoadRequest.events)).where(
                    LoadRequest.tracking_code == code
                )
            ).scalar_one_or_none()
            return to_load(row, with_events=True) if row else None

    def get_for_driver(self, viewer_id: str, load_id: str) -> LoadRecord | None:
        with unit_of_work_scope(self._session_factory) as session:
            scope = driver_scope(session, viewer_id)
            row = session.execute(
                _base_query()
                .options(selectinload(LoadRequest.events))
                .where(LoadRequest.id == load_id, LoadRequest.driver_id.in_(sorted(scope)))
            ).scalar_one_or_none()
            return to_load(row, with_events=True) if row else None

    def list_loads(
        self, *, shipper_id: str | None = None, status: LoadStatus | None = None
    ) -> list[LoadRecord]:
        with unit_of_work_scope(self._session_factory) as session:
            query = _base_query().order_by(LoadRequest.created_at.desc())
            if shipper_id is not None:
                query = query.where(LoadRequest.shipper_id == shipper_id)
            if status is not None:
                query = query.where(LoadRequest.status == status.value)
            return [to_load(row) for row in session.execute(query).scalars()]

    def list_for_driver(
        self, viewer_id: str, *, status: LoadStatus | None = None
    ) -> list[LoadRecord]:
        with unit_of_work_scope(self._session_factory) as session:
            scope = driver_scope(session, viewer_id)
            query = (
                _base_query()
                .where(LoadRequest.driver_id.in_(sorted(scope)))
                .order_by(LoadRequest.created_at.desc())
            )
            if status is not None:
                query = query.where(LoadRequest.status == status.value)
            return [to_load(row) for row in session.execute(query).scalars()]

    def count_by_status(self) -> dict[str, int]:
        with unit_of_work_scope(self._session_factory) as session:
            rows = session.execute(
                select(LoadRequest.status, func.count(LoadRequest.id)).group_by(LoadRequest.status)
            )
            return {status: int(count) for status, count in rows}

    def apply_transition(self, load_id: str, transition: LoadTransition) -> LoadRecord | None:
        """Write the status, its tracking event and the shipper notice together.

        The status only moves if it still equals ``transition.expected_status``;
        otherwise ``StaleStateError`` is raised and nothing is written.
        """

        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(LoadRequest, load_id)
            if row is None:
                return None
            values = {
                key: value
                for key, value in transition.changes.items()
                if key in _TRANSITION_FIELDS
            }
            result = session.execute(
                update(LoadRequest)
                .where(
                    LoadRequest.id == load_id,
                    LoadRequest.status == transition.expected_status.value,
                )
                .values(status=transition.status.value, **values)
                .execution_options(synchronize_session=False)
            )
            if not result.rowcount:
                raise StaleStateError(
                    f"load {load_id} is no longer {transition.expected_status.value}"
                )
            _add_event(session, row.id, transition.event)
            session.add(
                Notification(
                    shipper_id=row.shipper_id,
                    load_request_id=row.id,
                    type=transition.notice.type.value,
                    title=transition.notice.title,
                    message=transition.notice.message,
                    metadata_json=json.dumps(
                        {"tracking_code": row.tracking_code, "status": transition.status.value}
                    ),
                )
            )
            if transition.lock_documents:
                session.execute(
                    update(Document)
                    .where(Document.load_request_id == row.id)
                    .values(is_locked=True)
                )
            session.flush()
            session.refresh(row)
            return to_load(row, with_events=True)

    def invoiceable_loads(
        self, shipper_id: str, load_ids: Sequence[str] | None = None
    ) -> list[LoadRecord]:
        with unit_of_work_scope(self._session_factory) as session:
            query = _base_query().where(
                LoadRequest.shipper_id == shipper_id,
                LoadRequest.status.in_(sorted(status.value for status in INVOICEABLE_STATUSES)),
                LoadRequest.invoice_id.is_(None),
                LoadRequest.quote_amount.is_not(None),
            )
            if load_ids is not None:
                query = query.where(LoadRequest.id.in_(list(load_ids)))
            rows = session.execute(query.order_by(LoadRequest.created_at)).scalars()
            return [to_load(row) for row in rows]

    # Ratings

    def has_rating(self, load_id: str) -> bool:
        with unit_of_work_scope(self._session_factory) as session:
            return (
                session.execute(
                    select(DriverRating.id).where(DriverRating.load_request_id == load_id)
                ).first()
                is not None
            )

    def add_rating(
        self, *, load_id: str, driver_id: str, shipper_id: str, rating: int, feedback: str | None
    ) -> None:
        with unit_of_work_scope(self._session_factory) as session:
            session.add(
                DriverRating(
                    load_request_id=load_id,
                    driver_id=driver_id,
                    shipper_id=shipper_id,
                    rating=rating,
                    feedback=feedback,
                    created_at=utcnow(),
                )
            )

    # Documents

    def list_documents(self, load_id: str) -> list[DocumentRecord]:
        with unit_of_work_scope(self._session_factory) as session:
            rows = session.execute(
                select(Document)
                .where(Document.load_request_id == load_id)
                .order_by(Document.created_at)
            ).scalars()
            return [to_document(row) for row in rows]

    def add_document(
        self, load_id: str, data: Mapping[str, Any], *, locked: bool = False
    ) -> DocumentRecord:
        with unit_of_work_scope(self._session_factory) as session:
            row = Document(load_request_id=load_id, is_locked=locked, **data)
            session.add(row)
            session.flush()
            return to_document(row)

    def get_document(self, load_id: str, document_id: str) -> DocumentRecord | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(Document, document_id)
            if row is None or row.load_request_id != load_id:
                return None
            return to_document(row)

    def delete_document(self, document_id: str) -> None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(Document, document_id)
            if row is not None:
                session.delete(row)


__all__ = ["SqlAlchemyLoadRepository", "to_document", "to_event", "to_load"]
