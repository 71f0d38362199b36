# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from medcourier.domain.enums import UserType
from medcourier.domain.values import iso


@dataclass(slots=True, frozen=True)
class Recipient:
    user_type: UserType
    user_id: str


@dataclass(slots=True, frozen=True)
class NotificationRecord:
    id: str
    type: str
    title: str
    message: str
    link: str | None
    metadata_json: str | None
    load_request_id: str | None
    is_read: bool
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "link": self.link,
            "metadata": json.loads(self.metadata_json) if self.metadata_json else None,
            "load_request_id": self.load_request_id,
            "is_read": self.is_read,
            "created_at": iso(self.created_at),
        }


@dataclass(slots=True, frozen=True)
class NewNotification:
    recipient: Recipient
    type: str
    title: str
    message: str
    link: str | None = None
    metadata: dict[str, Any] | None = None
    load_request_id: str | None = None
    subject_key: str | None = None
