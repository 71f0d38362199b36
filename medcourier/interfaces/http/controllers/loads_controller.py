# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify

from medcourier.application.use_cases.loads.create import CreateLoadUseCase
from medcourier.application.use_cases.loads.documents import LoadDocuments
from medcourier.application.use_cases.loads.lifecycle import (
    AcceptQuoteUseCase,
    AssignDriverUseCase,
    CancelLoadUseCase,
    QuoteLoadUseCase,
    RateDriverUseCase,
    UpdateLoadStatusUseCase,
)
from medcourier.application.use_cases.loads.queries import (
    GetLoadUseCase,
    ListLoadsUseCase,
    TrackLoadUseCase,
)
from medcourier.interfaces.http.authz import (
    current_principal,
    require_admin,
    require_session,
    require_shipper,
)
from medcourier.interfaces.http.dto.loads import (
    AssignDriverDTO,
    CancelDTO,
    DocumentCreateDTO,
    LoadCreateDTO,
    LoadListQuery,
    QuoteDTO,
    RatingDTO,
    StatusUpdateDTO,
)
from medcourier.shared.errors.validation import parse_body, parse_query
from medcourier.shared.middleware.rate_limit import rate_limit_exempt


class LoadsController:
    def __init__(
        self,
        *,
        create_load: CreateLoadUseCase,
        list_loads: ListLoadsUseCase,
        get_load: GetLoadUseCase,
        quote_load: QuoteLoadUseCase,
        accept_quote: AcceptQuoteUseCase,
        assign_driver: AssignDriverUseCase,
        update_status: UpdateLoadStatusUseCase,
        cancel_load: CancelLoadUseCase,
        rate_driver: RateDriverUseCase,
        documents: LoadDocuments,
        track_load: TrackLoadUseCase,
    ) -> None:
        self._create_load = create_load
        self._list_loads = list_loads
        self._get_load = get_load
        self._quote_load = quote_load
        self._accept_quote = accept_quote
        self._assign_driver = assign_driver
        self._update_status = update_status
        self._cancel_load = cancel_load
        self._rate_driver = rate_driver
        self._documents = documents
        self._track_load = track_load

    @require_shipper
    def create(self) -> tuple[Response, int]:
        dto = parse_body(LoadCreateDTO)
        load = self._create_load.execute(current_principal().user_id, dto.to_record())
        return jsonify({"load": load.to_dict()}), 201

    @require_session
    def list(self) -> tuple[Response, int]:
        query = parse_query(LoadListQuery)
        loads = self._list_loads.execute(current_principal(), query.status)
        return jsonify({"loads": [load.to_dict() for load in loads]}), 200

    @require_session
    def get(self, load_id: str) -> tuple[Response, int]:
        load = self._get_load.execute(current_principal(), load_id)
        return jsonify({"load": load.to_dict()}), 200

    @require_admin
    def quote(self, load_id: str) -> tuple[Response, int]:
        dto = parse_body(QuoteDTO)
        load = self._quote_load.execute(
            current_principal(), load_id, dto.quote_amount, dto.quote_notes
        )
        return jsonify({"load": load.to_dict()}), 200

    @require_shipper
    def accept_quote(self, load_id: str) -> tuple[Response, int]:
        load = self._accept_quote.execute(current_principal(), load_id)
        return jsonify({"load": load.to_dict()}), 200

    @require_admin
    def assign_driver(self, load_id: str) -> tuple[Response, int]:
        dto = parse_body(AssignDriverDTO)
        load = self._assign_driver.execute(current_principal(), load_id, dto.driver_id)
        return jsonify({"load": load.to_dict()}), 200

    @require_session
    def update_status(self, load_id: str) -> tuple[Response, int]:
        dto = parse_body(StatusUpdateDTO)
        load = self._update_status.execute(
            current_principal(), load_id, dto.status, dto.location_text
        )
        return jsonify({"load": load.to_dict()}), 200

    @require_session
    def cancel(self, load_id: str) -> tuple[Response, int]:
        dto = parse_body(CancelDTO)
        load = self._cancel_load.execute(current_principal(), load_id, dto.reason)
        return jsonify({"load": load.to_dict()}), 200

    @require_shipper
    def rate_driver(self, load_id: str) -> tuple[Response, int]:
        dto = parse_body(RatingDTO)
        self._rate_driver.execute(current_principal(), load_id, dto.rating, dto.feedback)
        return jsonify({"success": True}), 201

    @require_session
    def list_documents(self, load_id: str) -> tuple[Response, int]:
        documents = self._documents.list(current_principal(), load_id)
        return jsonify({"documents": [document.to_dict() for document in documents]}), 200

    @require_session
    def upload_document(self, load_id: str) -> tuple[Response, int]:
        dto = parse_body(DocumentCreateDTO)
        document = self._documents.upload(current_principal(), load_id, dto.to_record())
        return jsonify({"document": document.to_dict()}), 201

    @require_session
    def delete_document(self, load_id: str, document_id: str) -> tuple[Response, int]:
        self._documents.delete(current_principal(), load_id, document_id)
        return jsonify({"success": True}), 200

    @rate_limit_exempt
    def track(self, code: str) -> tuple[Response, int]:
        return jsonify({"shipment": self._track_load.execute(code)}), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("loads", __name__, url_prefix="/api")
        prefix = "/load-requests"
        bp.add_url_rule(f"{prefix}", view_func=self.create, methods=["POST"])
        bp.add_url_rule(f"{prefix}", view_func=self.list, methods=["GET"])
        bp.add_url_rule(f"{prefix}/<load_id>", view_func=self.get, methods=["GET"])
        bp.add_url_rule(f"{prefix}/<load_id>/quote", view_func=self.quote, methods=["POST"])
        bp.add_url_rule(
            f"{prefix}/<load_id>/accept-quote", view_func=self.accept_quote, methods=["POST"]
        )
        bp.add_url_rule(
            f"{prefix}/<load_id>/assign-driver", view_func=self.assign_driver, methods=["POST"]
        )
        bp.add_url_rule(
            f"{prefix}/<load_id>/status", view_func=self.update_status, methods=["PATCH"]
        )
        bp.add_url_rule(f"{prefix}/<load_id>/cancel", view_func=self.cancel, methods=["POST"])
        bp.add_url_rule(
            f"{prefix}/<load_id>/rate-driver", view_func=self.rate_driver, methods=["POST"]
        )
        bp.add_url_rule(
            f"{prefix}/<load_id>/documents", view_func=self.list_documents, methods=["GET"]
        )
        bp.add_url_rule(
            f"{prefix}/<load_id>/documents", view_func=self.upload_document, methods=["POST"]
        )
        bp.add_url_rule(
            f"{prefix}/<load_id>/documents/<document_id>",
            view_func=self.delete_document,
            methods=["DELETE"],
        )
        bp.add_url_rule("/tracking/<code>", view_func=self.track, methods=["GET"])
        return bp
