# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from medcourier.domain.enums import LoadStatus, NotificationType, UserType
from medcourier.domain.values import iso, money


@dataclass(slots=True, frozen=True)
class TrackingEventRecord:
    code: str
    label: str
    actor_type: str
    created_at: datetime
    location_text: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "label": self.label,
            "actor_type": self.actor_type,
            "location_text": self.location_text,
            "created_at": iso(self.created_at),
        }


@dataclass(slots=True, frozen=True)
class LoadRecord:
    id: str
    tracking_code: str
    shipper_id: str
    pickup_facility_id: str
    dropoff_facility_id: str
    driver_id: str | None
    service_type: str
    commodity_description: str
    temperature_requirement: str
    status: LoadStatus
    quote_amount: Decimal | None
    quote_notes: str | None
    invoice_id: str | None
    created_at: datetime
    ready_time: datetime | None = None
    delivery_deadline: datetime | None = None
    cancellation_reason: str | None = None
    pickup_city: str | None = None
    dropoff_city: str | None = None
    events: tuple[TrackingEventRecord, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "tracking_code": self.tracking_code,
            "shipper_id": self.shipper_id,
            "pickup_facility_id": self.pickup_facility_id,
            "dropoff_facility_id": self.dropoff_facility_id,
            "pickup_city": self.pickup_city,
            "dropoff_city": self.dropoff_city,
            "driver_id": self.driver_id,
            "service_type": self.service_type,
            "commodity_description": self.commodity_description,
            "temperature_requirement": self.temperature_requirement,
            "ready_time": iso(self.ready_time),
            "delivery_deadline": iso(self.delivery_deadline),
            "status": self.status.value,
            "quote_amount": money(self.quote_amount),
            "quote_notes": self.quote_notes,
            "cancellation_reason": self.cancellation_reason,
            "invoice_id": self.invoice_id,
            "created_at": iso(self.created_at),
            "events": [event.to_dict() for event in self.events],
        }

    def to_public_dict(self) -> dict[str, Any]:
        """What anyone holding the tracking code may see."""

        return {
            "tracking_code": self.tracking_code,
            "status": self.status.value,
            "pickup_city": self.pickup_city,
            "dropoff_city": self.dropoff_city,
            "events": [event.to_dict() for event in self.events],
        }


@dataclass(slots=True, frozen=True)
class DocumentRecord:
    id: str
    load_request_id: str
    document_type: str
    title: str
    file_url: str
    mime_type: str | None
    file_size: int | None
    uploaded_by_type: str
    uploaded_by_id: str
    is_locked: bool
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "load_request_id": self.load_request_id,
            "document_type": self.document_type,
            "title": self.title,
            "file_url": self.file_url,
            "mime_type": self.mime_type,
            "file_size": self.file_size,
            "uploaded_by_type": self.uploaded_by_type,
            "uploaded_by_id": self.uploaded_by_id,
            "is_locked": self.is_locked,
            "created_at": iso(self.created_at),
        }


@dataclass(slots=True, frozen=True)
class NewTrackingEvent:
    code: str
    label: str
    actor_type: UserType | str
    actor_id: str | None = None
    location_text: str | None = None


@dataclass(slots=True, frozen=True)
class ShipperNotice:
    type: NotificationType
    title: str
    message: str


@dataclass(slots=True, frozen=True)
class LoadTransition:
    """Everything one status change writes, applied in a single transaction."""

    status: LoadStatus
    expected_status: LoadStatus
    event: NewTrackingEvent
    notice: ShipperNotice
    changes: dict[str, Any] = field(default_factory=dict)
    lock_documents: bool = False
