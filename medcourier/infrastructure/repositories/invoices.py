# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.orm import selectinload

from medcourier.domain.enums import InvoiceStatus
from medcourier.domain.invoicing.entities import InvoiceRecord, NewInvoice
from medcourier.domain.invoicing.rules import invoice_prefix
from medcourier.infrastructure.db.models import Invoice, LoadRequest, as_utc, utcnow
from medcourier.infrastructure.unit_of_work import SessionFactory, unit_of_work_scope


def to_invoice(row: Invoice) -> InvoiceRecord:
    return InvoiceRecord(
        id=row.id,
        invoice_number=row.invoice_number,
        shipper_id=row.shipper_id,
        invoice_date=row.invoice_date,
        due_date=row.due_date,
        subtotal=row.subtotal,
        tax=row.tax,
        total=row.total,
        status=InvoiceStatus(row.status),
        notes=row.notes,
        created_at=as_utc(row.created_at),
        load_ids=tuple(load.id for load in row.loads),
    )


class SqlAlchemyInvoiceRepository:
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def last_number_for_year(self, year: int) -> str | None:
        with unit_of_work_scope(self._session_factory) as session:
            return session.execute(
                select(Invoice.invoice_number)
                .where(Invoice.invoice_number.startswith(invoice_prefix(year)))
                .order_by(Invoice.invoice_number.desc())
                .limit(1)
            ).scalar_one_or_none()

    def create(self, invoice: NewInvoice) -> InvoiceRecord:
        """Persist the invoice and attach its loads in one transaction."""

        with unit_of_work_scope(self._session_factory) as session:
            row = Invoice(
                invoice_number=invoice.invoice_number,
                shipper_id=invoice.shipper_id,
                invoice_date=invoice.invoice_date,
                due_date=invoice.due_date,
                subtotal=invoice.subtotal,
                tax=invoice.tax,
                total=invoice.total,
                status=InvoiceStatus.DRAFT.value,
                notes=invoice.notes,
            )
            session.add(row)
            session.flush()
            session.execute(
                update(LoadRequest)
                .where(
                    LoadRequest.id.in_(list(invoice.load_ids)),
                    LoadRequest.invoice_id.is_(None),
                )
                .values(invoice_id=row.id)
            )
            session.flush()
            session.refresh(row)
            return to_invoice(row)

    def get(self, invoice_id: str) -> InvoiceRecord | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.execute(
                select(Invoice).options(selectinload(Invoice.loads)).where(Invoice.id == invoice_id)
            ).scalar_one_or_none()
            return to_invoice(row) if row else None

    def list_invoices(self, shipper_id: str | None = None) -> list[InvoiceRecord]:
        with unit_of_work_scope(self._session_factory) as session:
            query = (
                select(Invoice)
                .options(selectinload(Invoice.loads))
                .order_by(Invoice.invoice_number.desc())
            )
            if shipper_id is not None:
                query = query.where(Invoice.shipper_id == shipper_id)
            return [to_invoice(row) for row in session.execute(query).scalars()]

    def set_status(self, invoice_id: str, status: InvoiceStatus) -> InvoiceRecord | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(Invoice, invoice_id)
            if row is None:
                return None
            row.status = status.value
            if status is InvoiceStatus.SENT:
                row.sent_at = utcnow()
            elif status is InvoiceStatus.PAID:
                row.paid_at = utcnow()
            elif status is InvoiceStatus.VOID:
                session.execute(
                    update(LoadRequest)
                    .where(LoadRequest.invoice_id == row.id)
                    .values(invoice_id=None)
                )
            session.flush()
            session.refresh(row)
            return to_invoice(row)


__all__ = ["SqlAlchemyInvoiceRepository", "to_invoice"]
