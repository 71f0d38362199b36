# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import json
from datetime import datetime

from sqlalchemy import select, update

from medcourier.domain.enums import UserType
from medcourier.domain.notifications.entities import (
    NewNotification,
    NotificationRecord,
    Recipient,
)
from medcourier.infrastructure.db.models import Notification, as_utc
from medcourier.infrastructure.unit_of_work import SessionFactory, unit_of_work_scope


def to_notification(row: Notification) -> NotificationRecord:
    return NotificationRecord(
        id=row.id,
        type=row.type,
        title=row.title,
        message=row.message,
        link=row.link,
        metadata_json=row.metadata_json,
        load_request_id=row.load_request_id,
        is_read=bool(row.is_read),
        created_at=as_utc(row.created_at),
    )


def _owner_column(recipient: Recipient):
    if recipient.user_type is UserType.DRIVER:
        return Notification.driver_id
    if recipient.user_type is UserType.SHIPPER:
        return Notification.shipper_id
    raise ValueError(f"{recipient.user_type.value} accounts do not receive notifications")


class SqlAlchemyNotificationRepository:
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def add(self, notification: NewNotification) -> NotificationRecord:
        recipient = notification.recipient
        with unit_of_work_scope(self._session_factory) as session:
            row = Notification(
                driver_id=recipient.user_id if recipient.user_type is UserType.DRIVER else None,
                shipper_id=recipient.user_id if recipient.user_type is UserType.SHIPPER else None,
                load_request_id=notification.load_request_id,
                type=notification.type,
                title=notification.title,
                message=notification.message,
                link=notification.link,
                metadata_json=json.dumps(notification.metadata) if notification.metadata else None,
                subject_key=notification.subject_key,
            )
            session.add(row)
            session.flush()
            return to_notification(row)

    def list_for(
        self, recipient: Recipient, *, unread_only: bool = False, limit: int = 50
    ) -> list[NotificationRecord]:
        column = _owner_column(recipient)
        with unit_of_work_scope(self._session_factory) as session:
            query = (
                select(Notification)
                .where(column == recipient.user_id)
                .order_by(Notification.created_at.desc())
                .limit(limit)
            )
            if unread_only:
                query = query.where(Notification.is_read.is_(False))
            return [to_notification(row) for row in session.execute(query).scalars()]

    def mark_read(self, recipient: Recipient, notification_id: str) -> bool:
        column = _owner_column(recipient)
        with unit_of_work_scope(self._session_factory) as session:
            result = session.execute(
                update(Notification)
                .where(Notification.id == notification_id, column == recipient.user_id)
                .values(is_read=True)
            )
            return bool(result.rowcount)

    def mark_all_read(self, recipient: Recipient) -> int:
        column = _owner_column(recipient)
        with unit_of_work_scope(self._session_factory) as session:
            result = session.execute(
                update(Notification)
                .where(column == recipient.user_id, Notification.is_read.is_(False))
                .values(is_read=True)
            )
            return result.rowcount or 0

    def exists_since(self, recipient: Recipient, subject_key: str, since: datetime) -> bool:
        column = _owner_column(recipient)
        with unit_of_work_scope(self._session_factory) as session:
            row = session.execute(
                select(Notification.id).where(
                    column == recipient.user_id,
                    Notification.subject_key == subject_key,
                    Notification.created_at >= since,
                )
            ).first()
            return row is not None


__all__ = ["SqlAlchemyNotificationRepository", "to_notification"]
