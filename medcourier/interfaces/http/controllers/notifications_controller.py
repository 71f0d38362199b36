# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify

from medcourier.application.use_cases.accounts.notifications import NotificationInbox
from medcourier.interfaces.http.authz import current_principal, require_session
from medcourier.interfaces.http.dto.accounts import NotificationQuery
from medcourier.shared.errors.validation import parse_query


class NotificationsController:
    def __init__(self, inbox: NotificationInbox) -> None:
        self._inbox = inbox

    @require_session
    def list(self) -> tuple[Response, int]:
        query = parse_query(NotificationQuery)
        notifications = self._inbox.list(
            current_principal(), unread_only=query.unread_only, limit=query.limit
        )
        return jsonify({"notifications": [item.to_dict() for item in notifications]}), 200

    @require_session
    def mark_read(self, notification_id: str) -> tuple[Response, int]:
        self._inbox.mark_read(current_principal(), notification_id)
        return jsonify({"success": True}), 200

    @require_session
    def mark_all_read(self) -> tuple[Response, int]:
        updated = self._inbox.mark_all_read(current_principal())
        return jsonify({"success": True, "updated": updated}), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")
        bp.add_url_rule("", view_func=self.list, methods=["GET"])
        bp.add_url_rule("/<notification_id>/read", view_func=self.mark_read, methods=["POST"])
        bp.add_url_rule("/mark-all-read", view_func=self.mark_all_read, methods=["POST"])
        return bp
