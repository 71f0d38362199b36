# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify

from medcourier.application.use_cases.geocoding.lookup import (
    GeocodeAddressUseCase,
    ReverseGeocodeUseCase,
)
from medcourier.interfaces.http.authz import require_session
from medcourier.interfaces.http.dto.geocoding import GeocodeQuery, ReverseGeocodeQuery
from medcourier.shared.errors.validation import parse_query


class GeocodingController:
    def __init__(
        self, *, geocode: GeocodeAddressUseCase, reverse_geocode: ReverseGeocodeUseCase
    ) -> None:
        self._geocode = geocode
        self._reverse_geocode = reverse_geocode

    @require_session
    def geocode(self) -> tuple[Response, int]:
        query = parse_query(GeocodeQuery)
        return jsonify({"result": self._geocode.execute(query.address)}), 200

    @require_session
    def reverse(self) -> tuple[Response, int]:
        query = parse_query(ReverseGeocodeQuery)
        return jsonify({"result": self._reverse_geocode.execute(query.lat, query.lng)}), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("geocoding", __name__, url_prefix="/api/geocoding")
        bp.add_url_rule("/geocode", view_func=self.geocode, methods=["GET"])
        bp.add_url_rule("/reverse", view_func=self.reverse, methods=["GET"])
        return bp
