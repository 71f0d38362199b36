# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify

from medcourier.application.use_cases.accounts.shippers import FacilityCatalog, ShipperAccounts
from medcourier.application.use_cases.auth.change_password import ChangePasswordUseCase
from medcourier.application.use_cases.loads.queries import ListLoadsUseCase
from medcourier.domain.enums import UserType
from medcourier.interfaces.http.authz import current_principal, require_session, require_shipper
from medcourier.interfaces.http.dto.accounts import (
    FacilityCreateDTO,
    FacilityUpdateDTO,
    ShipperUpdateDTO,
)
from medcourier.interfaces.http.dto.auth import ChangePasswordDTO
from medcourier.interfaces.http.dto.loads import LoadListQuery
from medcourier.shared.errors.validation import parse_body, parse_query


class ShippersController:
    def __init__(
        self,
        *,
        shipper_accounts: ShipperAccounts,
        facilities: FacilityCatalog,
        change_password_use_case: ChangePasswordUseCase,
        list_loads_use_case: ListLoadsUseCase,
    ) -> None:
        self._shippers = shipper_accounts
        self._facilities = facilities
        self._change_password_use_case = change_password_use_case
        self._list_loads_use_case = list_loads_use_case

    @require_shipper(match="shipper_id", allow_admin=True)
    def get_shipper(self, shipper_id: str) -> tuple[Response, int]:
        return jsonify({"shipper": self._shippers.get_profile(shipper_id).to_dict()}), 200

    @require_shipper(match="shipper_id", allow_admin=True)
    def update_shipper(self, shipper_id: str) -> tuple[Response, int]:
        dto = parse_body(ShipperUpdateDTO)
        profile = self._shippers.update_profile(shipper_id, dto.model_dump(exclude_unset=True))
        return jsonify({"shipper": profile.to_dict()}), 200

    @require_shipper(match="shipper_id")
    def change_password(self, shipper_id: str) -> tuple[Response, int]:
        dto = parse_body(ChangePasswordDTO)
        self._change_password_use_case.execute(
            shipper_id, UserType.SHIPPER, dto.current_password, dto.new_password
        )
        return jsonify({"success": True}), 200

    @require_shipper(match="shipper_id", allow_admin=True)
    def list_facilities(self, shipper_id: str) -> tuple[Response, int]:
        facilities = self._facilities.list_for_shipper(shipper_id)
        return jsonify({"facilities": [facility.to_dict() for facility in facilities]}), 200

    @require_shipper(match="shipper_id")
    def create_facility(self, shipper_id: str) -> tuple[Response, int]:
        dto = parse_body(FacilityCreateDTO)
        facility = self._facilities.add(shipper_id, dto.to_record())
        return jsonify({"facility": facility.to_dict()}), 201

    @require_shipper(match="shipper_id", allow_admin=True)
    def loads(self, shipper_id: str) -> tuple[Response, int]:
        query = parse_query(LoadListQuery)
        loads = self._list_loads_use_case.for_shipper(shipper_id, query.status)
        return jsonify({"loads": [load.to_dict() for load in loads]}), 200

    @require_session
    def get_facility(self, facility_id: str) -> tuple[Response, int]:
        facility = self._facilities.get(current_principal(), facility_id)
        return jsonify({"facility": facility.to_dict()}), 200

    @require_session
    def update_facility(self, facility_id: str) -> tuple[Response, int]:
        dto = parse_body(FacilityUpdateDTO)
        facility = self._facilities.update(current_principal(), facility_id, dto.to_changes())
        return jsonify({"facility": facility.to_dict()}), 200

    @require_session
    def delete_facility(self, facility_id: str) -> tuple[Response, int]:
        self._facilities.delete(current_principal(), facility_id)
        return jsonify({"success": True}), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("shippers", __name__, url_prefix="/api")
        bp.add_url_rule("/shippers/<shipper_id>", view_func=self.get_shipper, methods=["GET"])
        bp.add_url_rule(
            "/shippers/<shipper_id>", view_func=self.update_shipper, methods=["PATCH"]
        )
        bp.add_url_rule(
            "/shippers/<shipper_id>/password", view_func=self.change_password, methods=["PATCH"]
        )
        bp.add_url_rule(
            "/shippers/<shipper_id>/facilities",
            view_func=self.list_facilities,
            methods=["GET"],
        )
        bp.add_url_rule(
            "/shippers/<shipper_id>/facilities",
            view_func=self.create_facility,
            methods=["POST"],
        )
        bp.add_url_rule("/shippers/<shipper_id>/loads", view_func=self.loads, methods=["GET"])
        bp.add_url_rule("/facilities/<facility_id>", view_func=self.get_facility, methods=["GET"])
        bp.add_url_rule(
            "/facilities/<facility_id>", view_func=self.update_facility, methods=["PATCH"]
        )
        bp.add_url_rule(
            "/facilities/<facility_id>", view_func=self.delete_facility, methods=["DELETE"]
        )
        return bp
