# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import UTC, date, datetime
from decimal import Decimal

from medcourier.domain.invoicing.entities import InvoiceRecord, NewInvoice
from medcourier.domain.invoicing.rules import compute_totals, due_date_for, next_invoice_number
from medcourier.infrastructure.repositories.invoices import SqlAlchemyInvoiceRepository
from medcourier.infrastructure.repositories.loads import SqlAlchemyLoadRepository
from medcourier.infrastructure.repositories.shippers import SqlAlchemyShipperRepository
from medcourier.shared.errors import NotFoundError, ValidationError
from medcourier.shared.logging import logger


class GenerateInvoiceUseCase:
    """Bill a shipper for its delivered, quoted and not yet invoiced loads."""

    def __init__(
        self,
        *,
        invoices: SqlAlchemyInvoiceRepository,
        loads: SqlAlchemyLoadRepository,
        shippers: SqlAlchemyShipperRepository,
        today: Callable[[], date] = lambda: datetime.now(UTC).date(),
    ) -> None:
        self._invoices = invoices
        self._loads = loads
        self._shippers = shippers
        self._today = today

    def execute(
        self,
        shipper_id: str,
        *,
        load_ids: Sequence[str] | None = None,
        tax_rate: Decimal = Decimal("0"),
        notes: str | None = None,
    ) -> InvoiceRecord:
        shipper = self._shippers.get(shipper_id)
        if shipper is None:
            raise NotFoundError("Shipper")

        loads = self._loads.invoiceable_loads(shipper_id, load_ids)
        if load_ids is not None:
            missing = sorted(set(load_ids) - {load.id for load in loads})
            if missing:
                message = "Some loads cannot be invoiced"
                raise ValidationError(
                    message,
                    errors=[{"field": "load_ids", "message": f"{message}: {', '.join(missing)}"}],
                )
        if not loads:
            message = "No delivered loads are waiting to be invoiced"
            raise ValidationError(message, errors=[{"field": "load_ids", "message": message}])

        totals = compute_totals((load.quote_amount or Decimal("0") for load in loads), tax_rate)
        invoice_date = self._today()
        number = next_invoice_number(
            invoice_date.year, self._invoices.last_number_for_year(invoice_date.year)
        )
        invoice = self._invoices.create(
            NewInvoice(
                invoice_number=number,
                shipper_id=shipper_id,
                invoice_date=invoice_date,
                due_date=due_date_for(invoice_date, shipper.payment_terms),
                subtotal=totals.subtotal,
                tax=totals.tax,
                total=totals.total,
                notes=notes,
                load_ids=tuple(load.id for load in loads),
            )
        )
        logger.info(
            f"invoices: generated {number} shipper_id={shipper_id} "
            f"loads={len(loads)} total={totals.total}"
        )
        return invoice


__all__ = ["GenerateInvoiceUseCase"]
