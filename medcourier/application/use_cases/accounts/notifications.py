# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from medcourier.domain.auth.entities import Principal
from medcourier.domain.enums import UserType
from medcourier.domain.notifications.entities import NotificationRecord, Recipient
from medcourier.infrastructure.repositories.notifications import (
    SqlAlchemyNotificationRepository,
)
from medcourier.shared.errors import AuthorizationError, NotFoundError

_RECIPIENT_TYPES = frozenset({UserType.DRIVER, UserType.SHIPPER})


def recipient_for(principal: Principal) -> Recipient:
    if principal.user_type not in _RECIPIENT_TYPES:
        raise AuthorizationError("Only drivers and shippers receive notifications")
    return Recipient(user_type=principal.user_type, user_id=principal.user_id)


class NotificationInbox:
    def __init__(self, notifications: SqlAlchemyNotificationRepository) -> None:
        self._notifications = notifications

    def list(
        self, principal: Principal, *, unread_only: bool = False, limit: int = 50
    ) -> list[NotificationRecord]:
        return self._notifications.list_for(
            recipient_for(principal), unread_only=unread_only, limit=limit
        )

    def mark_read(self, principal: Principal, notification_id: str) -> None:
        if not self._notifications.mark_read(recipient_for(principal), notification_id):
            raise NotFoundError("Notification")

    def mark_all_read(self, principal: Principal) -> int:
        return self._notifications.mark_all_read(recipient_for(principal))


__all__ = ["NotificationInbox", "recipient_for"]
