# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from medcourier.domain.auth.entities import Principal
from medcourier.domain.enums import InvoiceStatus, UserType
from medcourier.domain.invoicing.entities import InvoiceRecord
from medcourier.domain.invoicing.rules import ensure_invoice_transition
from medcourier.infrastructure.repositories.invoices import SqlAlchemyInvoiceRepository
from medcourier.shared.errors import AuthorizationError, NotFoundError
from medcourier.shared.logging import logger


class InvoiceQueries:
    def __init__(self, invoices: SqlAlchemyInvoiceRepository) -> None:
        self._invoices = invoices

    def list(self, principal: Principal) -> list[InvoiceRecord]:
        if principal.is_admin:
            return self._invoices.list_invoices()
        if principal.user_type is UserType.SHIPPER:
            return self._invoices.list_invoices(principal.user_id)
        raise AuthorizationError()

    def get(self, principal: Principal, invoice_id: str) -> InvoiceRecord:
        invoice = self._invoices.get(invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice")
        if principal.is_admin:
            return invoice
        if principal.user_type is UserType.SHIPPER and invoice.shipper_id == principal.user_id:
            return invoice
        raise NotFoundError("Invoice")


class UpdateInvoiceStatusUseCase:
    def __init__(self, invoices: SqlAlchemyInvoiceRepository) -> None:
        self._invoices = invoices

    def execute(self, invoice_id: str, status: InvoiceStatus) -> InvoiceRecord:
        invoice = self._invoices.get(invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice")
        ensure_invoice_transition(invoice.status, status)
        updated = self._invoices.set_status(invoice_id, status)
        if updated is None:
            raise NotFoundError("Invoice")
        logger.info(
            f"invoices: {invoice.invoice_number} {invoice.status.value} -> {status.value}"
        )
        return updated


__all__ = ["InvoiceQueries", "UpdateInvoiceStatusUseCase"]
