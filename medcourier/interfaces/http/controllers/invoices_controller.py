# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from decimal import Decimal

from flask import Blueprint, Response, jsonify

from medcourier.application.use_cases.invoices.generate import GenerateInvoiceUseCase
from medcourier.application.use_cases.invoices.manage import (
    InvoiceQueries,
    UpdateInvoiceStatusUseCase,
)
from medcourier.interfaces.http.authz import current_principal, require_admin, require_session
from medcourier.interfaces.http.dto.invoices import InvoiceGenerateDTO, InvoiceStatusDTO
from medcourier.shared.errors.validation import parse_body


class InvoicesController:
    def __init__(
        self,
        *,
        generate_invoice: GenerateInvoiceUseCase,
        invoice_queries: InvoiceQueries,
        update_invoice_status: UpdateInvoiceStatusUseCase,
    ) -> None:
        self._generate_invoice = generate_invoice
        self._invoice_queries = invoice_queries
        self._update_invoice_status = update_invoice_status

    @require_admin
    def generate(self) -> tuple[Response, int]:
        dto = parse_body(InvoiceGenerateDTO)
        invoice = self._generate_invoice.execute(
            dto.shipper_id,
            load_ids=dto.load_ids,
            tax_rate=Decimal(str(dto.tax_rate)),
            notes=dto.notes,
        )
        return jsonify({"invoice": invoice.to_dict()}), 201

    @require_session
    def list(self) -> tuple[Response, int]:
        invoices = self._invoice_queries.list(current_principal())
        return jsonify({"invoices": [invoice.to_dict() for invoice in invoices]}), 200

    @require_session
    def get(self, invoice_id: str) -> tuple[Response, int]:
        invoice = self._invoice_queries.get(current_principal(), invoice_id)
        return jsonify({"invoice": invoice.to_dict()}), 200

    @require_admin
    def update_status(self, invoice_id: str) -> tuple[Response, int]:
        dto = parse_body(InvoiceStatusDTO)
        invoice = self._update_invoice_status.execute(invoice_id, dto.status)
        return jsonify({"invoice": invoice.to_dict()}), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("invoices", __name__, url_prefix="/api/invoices")
        bp.add_url_rule("/generate", view_func=self.generate, methods=["POST"])
        bp.add_url_rule("", view_func=self.list, methods=["GET"])
        bp.add_url_rule("/<invoice_id>", view_func=self.get, methods=["GET"])
        bp.add_url_rule("/<invoice_id>/status", view_func=self.update_status, methods=["PATCH"])
        return bp
