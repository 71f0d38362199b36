# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify

from medcourier.application.use_cases.accounts.drivers import DriverAccounts
from medcourier.application.use_cases.accounts.shippers import ShipperAccounts
from medcourier.application.use_cases.admin.dashboard_stats import GetDashboardStatsUseCase
from medcourier.application.use_cases.admin.lockouts import (
    ClearLockoutUseCase,
    ListLockedAccountsUseCase,
)
from medcourier.interfaces.http.authz import require_admin
from medcourier.interfaces.http.dto.accounts import DriverListQuery
from medcourier.interfaces.http.dto.auth import LockoutClearDTO
from medcourier.shared.errors.validation import parse_body, parse_query
from medcourier.shared.logging import logger


class AdminController:
    def __init__(
        self,
        *,
        driver_accounts: DriverAccounts,
        shipper_accounts: ShipperAccounts,
        get_dashboard_stats: GetDashboardStatsUseCase,
        clear_lockout: ClearLockoutUseCase,
        list_locked_accounts: ListLockedAccountsUseCase,
    ) -> None:
        self._drivers = driver_accounts
        self._shippers = shipper_accounts
        self._get_dashboard_stats = get_dashboard_stats
        self._clear_lockout = clear_lockout
        self._list_locked_accounts = list_locked_accounts

    @require_admin
    def drivers(self) -> tuple[Response, int]:
        query = parse_query(DriverListQuery)
        drivers = self._drivers.list_drivers(query.status)
        return jsonify({"drivers": [driver.to_dict() for driver in drivers]}), 200

    @require_admin
    def approve_driver(self, driver_id: str) -> tuple[Response, int]:
        profile = self._drivers.approve(driver_id)
        logger.info(f"admin: driver {driver_id} approved by {g.principal.user_id}")
        return jsonify({"driver": profile.to_dict()}), 200

    @require_admin
    def shippers(self) -> tuple[Response, int]:
        shippers = self._shippers.list_all()
        return jsonify({"shippers": [shipper.to_dict() for shipper in shippers]}), 200

    @require_admin
    def stats(self) -> tuple[Response, int]:
        return jsonify(self._get_dashboard_stats.execute()), 200

    @require_admin
    def lockouts(self) -> tuple[Response, int]:
        return jsonify({"lockouts": self._list_locked_accounts.execute()}), 200

    @require_admin
    def clear_lockout(self) -> tuple[Response, int]:
        dto = parse_body(LockoutClearDTO)
        removed = self._clear_lockout.execute(dto.email, dto.user_type)
        return jsonify({"success": True, "removed": removed}), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("admin", __name__, url_prefix="/api/admin")
        bp.add_url_rule("/drivers", view_func=self.drivers, methods=["GET"])
        bp.add_url_rule(
            "/drivers/<driver_id>/approve", view_func=self.approve_driver, methods=["POST"]
        )
        bp.add_url_rule("/shippers", view_func=self.shippers, methods=["GET"])
        bp.add_url_rule("/stats", view_func=self.stats, methods=["GET"])
        bp.add_url_rule("/lockouts", view_func=self.lockouts, methods=["GET"])
        bp.add_url_rule("/lockouts/clear", view_func=self.clear_lockout, methods=["POST"])
        return bp
