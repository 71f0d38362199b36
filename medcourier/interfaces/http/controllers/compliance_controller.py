# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify

from medcourier.application.use_cases.compliance.reminders import (
    ComplianceRemindersUseCase,
    reminder_to_dict,
)
from medcourier.application.use_cases.compliance.vehicle_expiry import VehicleExpiryCheckUseCase
from medcourier.interfaces.http.authz import require_admin
from medcourier.shared.middleware import rate_limit_exempt, require_cron_secret


class ComplianceController:
    def __init__(
        self,
        *,
        reminders: ComplianceRemindersUseCase,
        vehicle_expiry_check: VehicleExpiryCheckUseCase,
    ) -> None:
        self._reminders = reminders
        self._vehicle_expiry_check = vehicle_expiry_check

    @require_admin
    def list_reminders(self) -> tuple[Response, int]:
        reminders = [reminder_to_dict(reminder) for reminder in self._reminders.execute()]
        return jsonify({"reminders": reminders, "count": len(reminders)}), 200

    @rate_limit_exempt
    @require_cron_secret
    def vehicle_expiry_check(self) -> tuple[Response, int]:
        return jsonify(self._vehicle_expiry_check.execute()), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("compliance", __name__, url_prefix="/api")
        bp.add_url_rule(
            "/compliance/reminders", view_func=self.list_reminders, methods=["GET"]
        )
        bp.add_url_rule(
            "/cron/vehicle-expiry-check",
            view_func=self.vehicle_expiry_check,
            methods=["POST"],
        )
        return bp
