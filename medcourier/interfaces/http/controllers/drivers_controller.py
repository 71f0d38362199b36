# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify

from medcourier.application.use_cases.accounts.drivers import DriverAccounts
from medcourier.application.use_cases.auth.change_password import ChangePasswordUseCase
from medcourier.application.use_cases.loads.queries import ListLoadsUseCase
from medcourier.domain.enums import UserType
from medcourier.interfaces.http.authz import require_driver
from medcourier.interfaces.http.dto.accounts import DriverUpdateDTO, VehicleCreateDTO
from medcourier.interfaces.http.dto.auth import ChangePasswordDTO
from medcourier.interfaces.http.dto.loads import LoadListQuery
from medcourier.shared.errors.validation import parse_body, parse_query


class DriversController:
    def __init__(
        self,
        *,
        driver_accounts: DriverAccounts,
        change_password_use_case: ChangePasswordUseCase,
        list_loads_use_case: ListLoadsUseCase,
    ) -> None:
        self._drivers = driver_accounts
        self._change_password_use_case = change_password_use_case
        self._list_loads_use_case = list_loads_use_case

    @require_driver(match="driver_id", allow_admin=True)
    def get_driver(self, driver_id: str) -> tuple[Response, int]:
        return jsonify({"driver": self._drivers.get_profile(driver_id).to_dict()}), 200

    @require_driver(match="driver_id")
    def update_driver(self, driver_id: str) -> tuple[Response, int]:
        dto = parse_body(DriverUpdateDTO)
        profile = self._drivers.update_profile(driver_id, dto.model_dump(exclude_unset=True))
        return jsonify({"driver": profile.to_dict()}), 200

    @require_driver(match="driver_id")
    def change_password(self, driver_id: str) -> tuple[Response, int]:
        dto = parse_body(ChangePasswordDTO)
        self._change_password_use_case.execute(
            driver_id, UserType.DRIVER, dto.current_password, dto.new_password
        )
        return jsonify({"success": True}), 200

    def ratings(self, driver_id: str) -> tuple[Response, int]:
        return jsonify(self._drivers.rating_stats(driver_id)), 200

    @require_driver(match="driver_id")
    def loads(self, driver_id: str) -> tuple[Response, int]:
        query = parse_query(LoadListQuery)
        loads = self._list_loads_use_case.for_driver(driver_id, query.status)
        return jsonify({"loads": [load.to_dict() for load in loads]}), 200

    @require_driver(match="driver_id")
    def fleet(self, driver_id: str) -> tuple[Response, int]:
        drivers = self._drivers.list_fleet(driver_id)
        return jsonify({"drivers": [driver.to_dict() for driver in drivers]}), 200

    @require_driver(match="driver_id")
    def fleet_member(self, driver_id: str, member_id: str) -> tuple[Response, int]:
        return jsonify(self._drivers.fleet_member(driver_id, member_id)), 200

    @require_driver(match="driver_id")
    def list_vehicles(self, driver_id: str) -> tuple[Response, int]:
        return jsonify({"vehicles": self._drivers.list_vehicles(driver_id, driver_id)}), 200

    @require_driver(match="driver_id")
    def add_vehicle(self, driver_id: str) -> tuple[Response, int]:
        dto = parse_body(VehicleCreateDTO)
        vehicle = self._drivers.add_vehicle(driver_id, dto.to_record())
        return jsonify({"vehicle": vehicle}), 201

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("drivers", __name__, url_prefix="/api/drivers")
        bp.add_url_rule("/<driver_id>", view_func=self.get_driver, methods=["GET"])
        bp.add_url_rule("/<driver_id>", view_func=self.update_driver, methods=["PATCH"])
        bp.add_url_rule(
            "/<driver_id>/password", view_func=self.change_password, methods=["PATCH"]
        )
        bp.add_url_rule("/<driver_id>/ratings", view_func=self.ratings, methods=["GET"])
        bp.add_url_rule("/<driver_id>/loads", view_func=self.loads, methods=["GET"])
        bp.add_url_rule("/<driver_id>/fleet", view_func=self.fleet, methods=["GET"])
        bp.add_url_rule(
            "/<driver_id>/fleet/<member_id>", view_func=self.fleet_member, methods=["GET"]
        )
        bp.add_url_rule("/<driver_id>/vehicles", view_func=self.list_vehicles, methods=["GET"])
        bp.add_url_rule("/<driver_id>/vehicles", view_func=self.add_vehicle, methods=["POST"])
        return bp
